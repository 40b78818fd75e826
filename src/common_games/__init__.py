"""
Steam Common Games.

Finds the Steam games a group of Discord members all own, and which
of them they can actually play together.
"""

from common_games.config import Settings, get_settings
from common_games.logger import get_logger, setup_logging

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
