"""
Multiplayer classifier.

Decides whether a game supports multiplayer from its Store categories,
then walks a chain of player-count extractors for a best-effort count.

Classification fails open: when Steam cannot be reached or answers
garbage, the game is reported as multiplayer.
"""

import asyncio
from collections.abc import Sequence

from common_games.config import get_settings
from common_games.contracts import AppId, MultiplayerInfo, Resolution
from common_games.logger import get_logger
from common_games.multiplayer.cache import ClassificationCache
from common_games.multiplayer.categories import (
    MULTIPLAYER_CATEGORIES,
    MultiplayerCategory,
    match_categories,
)
from common_games.multiplayer.extractors import (
    CategoryDescriptionExtractor,
    ExtractionContext,
    KnownGamesExtractor,
    PlayerCountExtractor,
    StorePageExtractor,
)
from common_games.multiplayer.known_games import KnownGamesTable
from common_games.sources import StoreCategorySource, StorePageSource


def default_extractors(
    page_source: StorePageSource | None,
    known_games: KnownGamesTable,
) -> list[PlayerCountExtractor]:
    """Category descriptions, then the store page (if given), then the static table."""
    extractors: list[PlayerCountExtractor] = [CategoryDescriptionExtractor()]
    if page_source is not None:
        extractors.append(StorePageExtractor(page_source))
    extractors.append(KnownGamesExtractor(known_games))
    return extractors


class MultiplayerClassifier:
    """
    Classifies games as multiplayer, memoizing every result.

    Safe to call concurrently for different app ids. Results are cached
    for the lifetime of the `ClassificationCache`, failures included, so
    each game costs at most one round of Steam requests.

    Example:
        >>> async with MultiplayerClassifier.from_settings() as classifier:
        ...     info = await classifier.classify(548430)
        ...     print(info.is_multiplayer, info.coop_players)
    """

    def __init__(
        self,
        category_source: StoreCategorySource,
        *,
        cache: ClassificationCache | None = None,
        extractors: Sequence[PlayerCountExtractor] | None = None,
        categories: dict[int, MultiplayerCategory] | None = None,
    ) -> None:
        self._category_source = category_source
        self._cache = cache if cache is not None else ClassificationCache()
        self._extractors = list(
            extractors
            if extractors is not None
            else default_extractors(None, KnownGamesTable())
        )
        self._categories = MULTIPLAYER_CATEGORIES if categories is None else categories
        self._owned_sources: list[StoreCategorySource | StorePageSource] = []
        self._logger = get_logger(__name__, component="classifier")

    @classmethod
    def from_settings(cls, *, cache: ClassificationCache | None = None) -> "MultiplayerClassifier":
        """Build a classifier with its own Steam sources, closed by `close()`."""
        settings = get_settings()
        category_source = StoreCategorySource()
        page_source = (
            StorePageSource() if settings.enrichment.enable_store_page_fallback else None
        )
        classifier = cls(
            category_source,
            cache=cache,
            extractors=default_extractors(page_source, KnownGamesTable.from_settings()),
        )
        classifier._owned_sources = [category_source]
        if page_source is not None:
            classifier._owned_sources.append(page_source)
        return classifier

    @property
    def cache(self) -> ClassificationCache:
        return self._cache

    async def close(self) -> None:
        """Close sources created by `from_settings`."""
        for source in self._owned_sources:
            await source.close()

    async def __aenter__(self) -> "MultiplayerClassifier":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def classify(self, app_id: AppId) -> MultiplayerInfo:
        """
        Classify one game.

        Never raises for Steam or parsing failures; those resolve to
        `MultiplayerInfo.uncertain()`. Cancellation propagates and
        leaves nothing cached.
        """
        cached = self._cache.get(app_id)
        if cached is not None:
            return cached

        try:
            info = await self._classify_uncached(app_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._logger.warning(
                "Classification failed, assuming multiplayer",
                app_id=app_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            info = MultiplayerInfo.uncertain()

        self._cache.set(app_id, info)
        return info

    async def _classify_uncached(self, app_id: AppId) -> MultiplayerInfo:
        result = await self._category_source.fetch_categories(app_id)
        if not result.success:
            self._logger.debug(
                "No category data",
                app_id=app_id,
                error=result.error_message,
            )
            return MultiplayerInfo.not_multiplayer()

        matched = match_categories(result.data or [], self._categories)
        if not matched:
            return MultiplayerInfo.not_multiplayer()

        labels = list(dict.fromkeys(m.known.label for m in matched))
        context = ExtractionContext(app_id=app_id, matched=matched)

        for extractor in self._extractors:
            counts = await extractor.extract(context)
            if counts is None:
                continue
            self._logger.debug(
                "Player count found",
                app_id=app_id,
                extractor=extractor.name,
                max_players=counts.max_players,
                coop_players=counts.coop_players,
            )
            return MultiplayerInfo(
                is_multiplayer=True,
                max_players=counts.max_players,
                coop_players=counts.coop_players,
                category_labels=labels,
                resolution=extractor.resolution,
            )

        return MultiplayerInfo(
            is_multiplayer=True,
            category_labels=labels,
            resolution=Resolution.COUNT_UNKNOWN,
        )

    async def is_multiplayer(self, app_id: AppId) -> bool:
        """Shorthand for `classify(app_id).is_multiplayer`."""
        return (await self.classify(app_id)).is_multiplayer
