"""Tests for player-count extractors."""

from typing import Any

import httpx
import pytest

from common_games.contracts import Category, PlayerCounts
from common_games.multiplayer import (
    CategoryDescriptionExtractor,
    ExtractionContext,
    KnownGamesExtractor,
    KnownGamesTable,
    StorePageExtractor,
    match_categories,
    parse_page_counts,
)
from common_games.sources import FetchResult


def context_for(*categories: tuple[int, str], app_id: int = 10) -> ExtractionContext:
    matched = match_categories([Category(id=i, description=d) for i, d in categories])
    return ExtractionContext(app_id=app_id, matched=matched)


class FakePageSource:
    """Stands in for StorePageSource."""

    def __init__(self, *, html: str | None = None, error: Exception | None = None) -> None:
        self.html = html
        self.error = error
        self.calls: list[int] = []

    async def fetch_page(self, app_id: int) -> FetchResult[str]:
        self.calls.append(app_id)
        if self.error is not None:
            raise self.error
        return FetchResult(
            success=self.html is not None,
            data=self.html,
            source="fake",
            endpoint=f"/app/{app_id}/",
        )


class TestMatchCategories:
    def test_keeps_only_multiplayer_ids(self) -> None:
        matched = match_categories(
            [
                Category(id=2, description="Single-player"),
                Category(id=38, description="Online PvP"),
                Category(id=24, description="Shared/Split Screen"),
            ]
        )

        assert [m.category.id for m in matched] == [38, 24]
        assert [m.known.label for m in matched] == [
            "Online Multi-Player",
            "Shared/Split Screen Co-op",
        ]
        assert [m.is_coop for m in matched] == [False, True]


class TestCategoryDescriptionExtractor:
    @pytest.mark.asyncio
    async def test_coop_range_routes_to_coop_players(self) -> None:
        counts = await CategoryDescriptionExtractor().extract(
            context_for((36, "Online Co-Op (2-4)"))
        )

        assert counts == PlayerCounts(coop_players=4)

    @pytest.mark.asyncio
    async def test_single_number(self) -> None:
        counts = await CategoryDescriptionExtractor().extract(
            context_for((39, "Local Multi-Player (2)"))
        )

        assert counts == PlayerCounts(max_players=2)

    @pytest.mark.asyncio
    async def test_takes_maximum_per_kind(self) -> None:
        counts = await CategoryDescriptionExtractor().extract(
            context_for(
                (37, "Local Co-op (2)"),
                (36, "Online Co-op (2-4)"),
                (1, "Multi-player (2-8)"),
                (38, "Online PvP (2-6)"),
            )
        )

        assert counts == PlayerCounts(coop_players=4, max_players=8)

    @pytest.mark.asyncio
    async def test_no_parenthetical_yields_nothing(self) -> None:
        counts = await CategoryDescriptionExtractor().extract(context_for((1, "Multi-player")))

        assert counts is None


class TestParsePageCounts:
    def test_range(self) -> None:
        assert parse_page_counts("Supports 2-6 players online") == PlayerCounts(max_players=6)

    def test_up_to(self) -> None:
        assert parse_page_counts("Play with up to 16 players") == PlayerCounts(max_players=16)

    def test_player_coop(self) -> None:
        assert parse_page_counts("A 4 player co-op shooter") == PlayerCounts(coop_players=4)

    def test_hyphenated_coop(self) -> None:
        assert parse_page_counts("Drop into 3-player COOP runs") == PlayerCounts(coop_players=3)

    def test_range_coop(self) -> None:
        assert parse_page_counts("Online 2-4 player co-op campaign") == PlayerCounts(
            coop_players=4
        )

    def test_up_to_coop(self) -> None:
        assert parse_page_counts("Team up with up to 6 players coop") == PlayerCounts(
            coop_players=6
        )

    def test_first_match_wins(self) -> None:
        text = "up to 128 players on servers, or a 4 player co-op mode"
        assert parse_page_counts(text) == PlayerCounts(max_players=128)

    def test_no_match(self) -> None:
        assert parse_page_counts("A lonely adventure.") is None


class TestStorePageExtractor:
    @pytest.mark.asyncio
    async def test_scans_page_text(self) -> None:
        source = FakePageSource(html="<p>Team up in a <b>4 player co-op</b> campaign</p>")
        extractor = StorePageExtractor(source)  # type: ignore[arg-type]

        counts = await extractor.extract(context_for((1, "Multi-player"), app_id=77))

        assert counts == PlayerCounts(coop_players=4)
        assert source.calls == [77]

    @pytest.mark.asyncio
    async def test_fetch_failure_is_swallowed(self) -> None:
        source = FakePageSource(error=httpx.ConnectError("boom"))
        extractor = StorePageExtractor(source)  # type: ignore[arg-type]

        assert await extractor.extract(context_for((1, "Multi-player"))) is None

    @pytest.mark.asyncio
    async def test_unsuccessful_fetch(self) -> None:
        extractor = StorePageExtractor(FakePageSource(html=None))  # type: ignore[arg-type]

        assert await extractor.extract(context_for((1, "Multi-player"))) is None


class TestKnownGamesExtractor:
    @pytest.mark.asyncio
    async def test_hit(self) -> None:
        table = KnownGamesTable({10: PlayerCounts(coop_players=3)})
        counts = await KnownGamesExtractor(table).extract(context_for((1, "Multi-player")))

        assert counts == PlayerCounts(coop_players=3)

    @pytest.mark.asyncio
    async def test_miss(self) -> None:
        table: Any = KnownGamesTable({})
        assert await KnownGamesExtractor(table).extract(context_for((1, "Multi-player"))) is None
