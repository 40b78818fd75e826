"""
Static player counts for well-known games.

Last resort when neither the Store categories nor the store page
mention a player count. The built-in entries can be extended or
replaced with a JSON file of the form::

    {"892970": {"coop_players": 10}, "730": {"max_players": 10}}
"""

import json
from collections.abc import Mapping
from pathlib import Path

from pydantic import TypeAdapter

from common_games.config import KnownGamesConfig, get_settings
from common_games.contracts import PlayerCounts
from common_games.logger import get_logger

logger = get_logger(__name__, component="known_games")

DEFAULT_KNOWN_GAMES: dict[int, PlayerCounts] = {
    440: PlayerCounts(max_players=24),  # Team Fortress 2
    550: PlayerCounts(coop_players=4, max_players=8),  # Left 4 Dead 2
    570: PlayerCounts(max_players=10),  # Dota 2
    620: PlayerCounts(coop_players=2),  # Portal 2
    730: PlayerCounts(max_players=10),  # Counter-Strike 2
    105600: PlayerCounts(max_players=8),  # Terraria
    218620: PlayerCounts(coop_players=4),  # PAYDAY 2
    322330: PlayerCounts(coop_players=6),  # Don't Starve Together
    413150: PlayerCounts(coop_players=8),  # Stardew Valley
    548430: PlayerCounts(coop_players=4),  # Deep Rock Galactic
    632360: PlayerCounts(coop_players=4),  # Risk of Rain 2
    892970: PlayerCounts(coop_players=10),  # Valheim
    945360: PlayerCounts(max_players=15),  # Among Us
    1172470: PlayerCounts(coop_players=3, max_players=60),  # Apex Legends
    1966720: PlayerCounts(coop_players=4),  # Lethal Company
}

_table_adapter = TypeAdapter(dict[int, PlayerCounts])


class KnownGamesTable:
    """Read-only app id -> player counts mapping."""

    def __init__(self, entries: Mapping[int, PlayerCounts] | None = None) -> None:
        self._entries = dict(DEFAULT_KNOWN_GAMES if entries is None else entries)

    def get(self, app_id: int) -> PlayerCounts | None:
        return self._entries.get(app_id)

    def __contains__(self, app_id: object) -> bool:
        return app_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_file(cls, path: Path, *, replace_defaults: bool = False) -> "KnownGamesTable":
        """
        Load entries from a JSON file.

        Raises:
            ValueError: If the file is not a valid id -> counts mapping
        """
        with path.open(encoding="utf-8") as f:
            entries = _table_adapter.validate_python(json.load(f))

        if not replace_defaults:
            entries = {**DEFAULT_KNOWN_GAMES, **entries}

        logger.info(
            "Loaded known games table",
            path=str(path),
            entries=len(entries),
            replace_defaults=replace_defaults,
        )
        return cls(entries)

    @classmethod
    def from_settings(cls, config: KnownGamesConfig | None = None) -> "KnownGamesTable":
        """Built-in table, or the configured override file."""
        config = config or get_settings().known_games
        if config.path is None:
            return cls()
        return cls.from_file(config.path, replace_defaults=config.replace_defaults)
