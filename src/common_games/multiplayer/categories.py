"""
Store categories that signal multiplayer support.

Steam tags every game with numeric feature categories. Only the ids
below mean "more than one person can play"; the co-op ones route any
player count found in their description into `coop_players`.
"""

from dataclasses import dataclass

from common_games.contracts import Category


@dataclass(frozen=True)
class MultiplayerCategory:
    """A known multiplayer category id."""

    id: int
    label: str
    is_coop: bool = False


MULTIPLAYER_CATEGORIES: dict[int, MultiplayerCategory] = {
    c.id: c
    for c in (
        MultiplayerCategory(1, "Multi-player"),
        MultiplayerCategory(9, "Co-op", is_coop=True),
        MultiplayerCategory(24, "Shared/Split Screen Co-op", is_coop=True),
        MultiplayerCategory(27, "Cross-Platform Multiplayer"),
        MultiplayerCategory(36, "Online Co-op", is_coop=True),
        MultiplayerCategory(37, "Local Co-op", is_coop=True),
        MultiplayerCategory(38, "Online Multi-Player"),
        MultiplayerCategory(39, "Local Multi-Player"),
    )
}


@dataclass(frozen=True)
class MatchedCategory:
    """A store category of a game paired with its known meaning."""

    category: Category
    known: MultiplayerCategory

    @property
    def description(self) -> str:
        return self.category.description

    @property
    def is_coop(self) -> bool:
        return self.known.is_coop


def match_categories(
    categories: list[Category],
    table: dict[int, MultiplayerCategory] | None = None,
) -> list[MatchedCategory]:
    """Keep the categories whose id is a known multiplayer category, in store order."""
    table = MULTIPLAYER_CATEGORIES if table is None else table
    return [MatchedCategory(c, table[c.id]) for c in categories if c.id in table]
