"""Tests for reply formatting helpers."""

import pytest

from common_games.contracts import MultiplayerInfo, Resolution
from common_games.formatting import format_multiplayer_list, format_playtime
from common_games.multiplayer import EnrichedGame


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [
        (0, "0m"),
        (45, "45m"),
        (60, "1h"),
        (185, "3h"),
        (24 * 60, "1d"),
        (53 * 60 + 10, "2d 5h"),
    ],
)
def test_format_playtime(minutes: int, expected: str) -> None:
    assert format_playtime(minutes) == expected


def test_format_multiplayer_list() -> None:
    games = [
        EnrichedGame(
            548430,
            "Deep Rock Galactic",
            MultiplayerInfo(
                is_multiplayer=True,
                coop_players=4,
                resolution=Resolution.CATEGORY_DESCRIPTION,
            ),
        ),
        EnrichedGame(4000, "Garry's Mod", MultiplayerInfo.uncertain()),
    ]

    assert format_multiplayer_list(games) == (
        "1. Deep Rock Galactic **[4P Co-op]**\n2. Garry's Mod"
    )


def test_format_multiplayer_list_limit() -> None:
    games = [EnrichedGame(i, f"Game {i}", MultiplayerInfo.uncertain()) for i in range(1, 30)]

    assert len(format_multiplayer_list(games, limit=20).splitlines()) == 20
