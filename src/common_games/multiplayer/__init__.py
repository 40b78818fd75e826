"""
Multiplayer classification.

Category-based classifier with a player-count fallback chain, an
in-memory result cache, and a batched enrichment pipeline.
"""

from common_games.multiplayer.cache import ClassificationCache
from common_games.multiplayer.categories import (
    MULTIPLAYER_CATEGORIES,
    MatchedCategory,
    MultiplayerCategory,
    match_categories,
)
from common_games.multiplayer.classifier import MultiplayerClassifier, default_extractors
from common_games.multiplayer.enrichment import (
    EnrichedGame,
    EnrichmentPipeline,
    EnrichmentRun,
    GameRef,
)
from common_games.multiplayer.extractors import (
    CategoryDescriptionExtractor,
    ExtractionContext,
    KnownGamesExtractor,
    PlayerCountExtractor,
    StorePageExtractor,
    parse_page_counts,
)
from common_games.multiplayer.known_games import DEFAULT_KNOWN_GAMES, KnownGamesTable

__all__ = [
    "DEFAULT_KNOWN_GAMES",
    "MULTIPLAYER_CATEGORIES",
    "CategoryDescriptionExtractor",
    "ClassificationCache",
    "EnrichedGame",
    "EnrichmentPipeline",
    "EnrichmentRun",
    "ExtractionContext",
    "GameRef",
    "KnownGamesExtractor",
    "KnownGamesTable",
    "MatchedCategory",
    "MultiplayerCategory",
    "MultiplayerClassifier",
    "PlayerCountExtractor",
    "StorePageExtractor",
    "default_extractors",
    "match_categories",
    "parse_page_counts",
]
