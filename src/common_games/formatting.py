"""Human-readable formatting for command replies."""

from common_games.multiplayer import EnrichedGame


def format_playtime(minutes: int) -> str:
    """
    Format minutes played as "45m", "3h", "2d" or "2d 5h".

    Hours are floored; minutes only show below one hour.
    """
    if minutes < 60:
        return f"{minutes}m"

    hours = minutes // 60
    if hours < 24:
        return f"{hours}h"

    days, remaining_hours = divmod(hours, 24)
    return f"{days}d {remaining_hours}h" if remaining_hours else f"{days}d"


def format_multiplayer_list(games: list[EnrichedGame], *, limit: int = 20) -> str:
    """Numbered list such as "1. Deep Rock Galactic **[4P Co-op]**"."""
    lines = []
    for index, game in enumerate(games[:limit], 1):
        label = game.multiplayer_info.player_label
        suffix = f" **[{label}]**" if label else ""
        lines.append(f"{index}. {game.name}{suffix}")
    return "\n".join(lines)
