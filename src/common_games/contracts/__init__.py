"""
Data contracts for Steam API responses and classification results.

Pydantic models that define the expected structure of data from the
Steam Store and Web APIs, plus the derived multiplayer values.
"""

from common_games.contracts.multiplayer import (
    MultiplayerInfo,
    PlayerCounts,
    Resolution,
)
from common_games.contracts.steam_store import (
    AppId,
    Category,
    StoreAppDetails,
    StoreAppDetailsEntry,
)
from common_games.contracts.steam_web import (
    OwnedGame,
    OwnedGamesResponse,
    VanityResolution,
)

__all__ = [
    "AppId",
    "Category",
    "MultiplayerInfo",
    "OwnedGame",
    "OwnedGamesResponse",
    "PlayerCounts",
    "Resolution",
    "StoreAppDetails",
    "StoreAppDetailsEntry",
    "VanityResolution",
]
