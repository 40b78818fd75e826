"""
Ownership storage.

SQLite-backed store for linked users, games and per-guild
ownership rows.
"""

from common_games.storage.models import Game, LinkedUser, OwnedGame
from common_games.storage.store import OwnershipStore

__all__ = [
    "Game",
    "LinkedUser",
    "OwnedGame",
    "OwnershipStore",
]
