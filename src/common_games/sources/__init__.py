"""
HTTP sources for Steam data.

All sources share a common base with retry logic and
structured logging.
"""

from common_games.sources.base import (
    APIError,
    BaseSource,
    FetchResult,
    RateLimitError,
    SourceError,
    ValidationError,
)
from common_games.sources.steam_web import SteamWebSource
from common_games.sources.store import StoreCategorySource, StorePageSource

__all__ = [
    # Base classes and errors
    "APIError",
    "BaseSource",
    "FetchResult",
    "RateLimitError",
    "SourceError",
    "ValidationError",
    # Sources
    "SteamWebSource",
    "StoreCategorySource",
    "StorePageSource",
]
