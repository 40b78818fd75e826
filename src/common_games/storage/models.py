"""Rows of the ownership store."""

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class Game:
    """A Steam game known to the store."""

    app_id: int
    name: str
    icon_url: str | None = None


@dataclass(frozen=True)
class OwnedGame:
    """A game in one user's library, with minutes played."""

    game: Game
    playtime: int = 0

    def __post_init__(self) -> None:
        if self.playtime < 0:
            raise ValueError(f"playtime must be >= 0, got {self.playtime}")


@dataclass
class LinkedUser:
    """A Discord member linked to a Steam account within one guild."""

    discord_id: str
    guild_id: str
    steam_id: str
    last_updated: datetime
    is_private: bool = False

    @classmethod
    def from_row(cls, row: tuple) -> "LinkedUser":
        """Build from a (discord_id, guild_id, steam_id, last_updated_ms, is_private) row."""
        discord_id, guild_id, steam_id, last_updated_ms, is_private = row
        return cls(
            discord_id=discord_id,
            guild_id=guild_id,
            steam_id=steam_id,
            last_updated=datetime.fromtimestamp(last_updated_ms / 1000, tz=timezone.utc),
            is_private=bool(is_private),
        )
