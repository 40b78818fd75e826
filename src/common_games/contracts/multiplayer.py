"""
Multiplayer classification results.

These values are derived from Store data and cached in memory;
they are never persisted.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Resolution(str, Enum):
    """Which step of the classifier settled a game."""

    NOT_MULTIPLAYER = "not_multiplayer"  # No multiplayer category on the store
    CATEGORY_DESCRIPTION = "category_description"  # "(2-4)" in a category label
    STORE_PAGE = "store_page"  # Player count scraped from the store page
    KNOWN_GAMES = "known_games"  # Static player-count table
    COUNT_UNKNOWN = "count_unknown"  # Multiplayer, no count found anywhere
    UNCERTAIN = "uncertain"  # Classification failed, assumed multiplayer


class PlayerCounts(BaseModel):
    """Player counts produced by one extractor."""

    model_config = ConfigDict(frozen=True)

    max_players: int | None = Field(default=None, ge=1)
    coop_players: int | None = Field(default=None, ge=1)

    @property
    def is_empty(self) -> bool:
        """True when neither count is known."""
        return self.max_players is None and self.coop_players is None


class MultiplayerInfo(BaseModel):
    """Multiplayer support and best-effort player counts for one game."""

    model_config = ConfigDict(frozen=True)

    is_multiplayer: bool
    max_players: int | None = Field(default=None, ge=1)
    coop_players: int | None = Field(default=None, ge=1)
    category_labels: list[str] = Field(default_factory=list)
    resolution: Resolution

    @classmethod
    def not_multiplayer(cls) -> "MultiplayerInfo":
        """Definitive negative from category data."""
        return cls(is_multiplayer=False, resolution=Resolution.NOT_MULTIPLAYER)

    @classmethod
    def uncertain(cls) -> "MultiplayerInfo":
        """Fail-open result used when classification itself failed."""
        return cls(is_multiplayer=True, resolution=Resolution.UNCERTAIN)

    @property
    def has_player_count(self) -> bool:
        """Whether any explicit player count is known."""
        return self.max_players is not None or self.coop_players is not None

    @property
    def player_label(self) -> str:
        """Short label such as "4P Co-op" or "8P" (empty when unknown)."""
        if self.coop_players:
            return f"{self.coop_players}P Co-op"
        if self.max_players:
            return f"{self.max_players}P"
        return ""
