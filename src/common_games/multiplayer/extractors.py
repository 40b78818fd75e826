"""
Player-count extractors.

The classifier tries these in order once a game is known to be
multiplayer; the first one that returns a count wins. Each extractor
looks at a different source: the category descriptions already in
hand, the public store page, and finally a static table.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx
from bs4 import BeautifulSoup

from common_games.contracts import PlayerCounts, Resolution
from common_games.logger import get_logger
from common_games.multiplayer.categories import MatchedCategory
from common_games.multiplayer.known_games import KnownGamesTable
from common_games.sources import SourceError, StorePageSource

# "Online Co-Op (2-4)", "Local Co-op (2)"
DESCRIPTION_PATTERN = re.compile(r"\((\d+)(?:-(\d+))?\)")

# "2-4 players", "up to 8 players", "2-4 player co-op", "4 player co-op" / "4-player coop"
PAGE_PATTERN = re.compile(
    r"(\d+)\s*(?:-|–|to)\s*(\d+)\s+players?(?:\s+co-?op)?"
    r"|up\s+to\s+(\d+)\s+players?(?:\s+co-?op)?"
    r"|(\d+)[\s-]*players?\s+co-?op",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ExtractionContext:
    """What the classifier knows about a game when extraction starts."""

    app_id: int
    matched: list[MatchedCategory]


class PlayerCountExtractor(ABC):
    """
    One step of the player-count fallback chain.

    Subclasses must implement:
    - name: Identifier used in logs
    - resolution: Recorded on results this extractor settles
    - extract(): Return counts, or None to defer to the next extractor
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def resolution(self) -> Resolution: ...

    @abstractmethod
    async def extract(self, context: ExtractionContext) -> PlayerCounts | None: ...


def _max_or_none(current: int | None, value: int) -> int:
    return value if current is None else max(current, value)


class CategoryDescriptionExtractor(PlayerCountExtractor):
    """Parses "(N)" / "(N-M)" out of matched category descriptions."""

    @property
    def name(self) -> str:
        return "category_description"

    @property
    def resolution(self) -> Resolution:
        return Resolution.CATEGORY_DESCRIPTION

    async def extract(self, context: ExtractionContext) -> PlayerCounts | None:
        max_players: int | None = None
        coop_players: int | None = None

        for matched in context.matched:
            match = DESCRIPTION_PATTERN.search(matched.description)
            if not match:
                continue
            upper = int(match.group(2) or match.group(1))
            if upper < 1:
                continue
            if matched.is_coop:
                coop_players = _max_or_none(coop_players, upper)
            else:
                max_players = _max_or_none(max_players, upper)

        counts = PlayerCounts(max_players=max_players, coop_players=coop_players)
        return None if counts.is_empty else counts


def parse_page_counts(text: str) -> PlayerCounts | None:
    """
    Player count from free text such as a store page.

    Uses the first match in the text; its largest number is the count,
    filed as co-op when the matched phrase says co-op.
    """
    match = PAGE_PATTERN.search(text)
    if not match:
        return None

    numbers = [int(g) for g in match.groups() if g is not None]
    count = max(numbers)
    if count < 1:
        return None

    phrase = match.group(0).lower()
    if "co-op" in phrase or "coop" in phrase:
        return PlayerCounts(coop_players=count)
    return PlayerCounts(max_players=count)


class StorePageExtractor(PlayerCountExtractor):
    """Scans the public store page text for a player count."""

    def __init__(self, source: StorePageSource) -> None:
        self._source = source
        self._logger = get_logger(__name__, component="extractor", extractor=self.name)

    @property
    def name(self) -> str:
        return "store_page"

    @property
    def resolution(self) -> Resolution:
        return Resolution.STORE_PAGE

    async def extract(self, context: ExtractionContext) -> PlayerCounts | None:
        try:
            result = await self._source.fetch_page(context.app_id)
        except (SourceError, httpx.HTTPError) as e:
            self._logger.warning(
                "Store page fetch failed",
                app_id=context.app_id,
                error=str(e),
            )
            return None

        if not result.success or not result.data:
            return None

        text = BeautifulSoup(result.data, "html.parser").get_text(" ", strip=True)
        return parse_page_counts(text)


class KnownGamesExtractor(PlayerCountExtractor):
    """Looks the game up in the static player-count table."""

    def __init__(self, table: KnownGamesTable) -> None:
        self._table = table

    @property
    def name(self) -> str:
        return "known_games"

    @property
    def resolution(self) -> Resolution:
        return Resolution.KNOWN_GAMES

    async def extract(self, context: ExtractionContext) -> PlayerCounts | None:
        counts = self._table.get(context.app_id)
        if counts is None or counts.is_empty:
            return None
        return counts
