"""Tests for the static player-count table."""

import json
from pathlib import Path

import pytest

from common_games.config import KnownGamesConfig
from common_games.contracts import PlayerCounts
from common_games.multiplayer import DEFAULT_KNOWN_GAMES, KnownGamesTable


def write_table(path: Path, data: dict[str, dict[str, int]]) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestKnownGamesTable:
    def test_defaults(self) -> None:
        table = KnownGamesTable()

        assert len(table) == len(DEFAULT_KNOWN_GAMES)
        assert table.get(892970) == PlayerCounts(coop_players=10)
        assert 999999999 not in table

    def test_file_merges_with_defaults(self, tmp_path: Path) -> None:
        path = write_table(
            tmp_path / "known.json",
            {"892970": {"coop_players": 5}, "123": {"max_players": 2}},
        )

        table = KnownGamesTable.from_file(path)

        assert table.get(892970) == PlayerCounts(coop_players=5)
        assert table.get(123) == PlayerCounts(max_players=2)
        assert table.get(570) == DEFAULT_KNOWN_GAMES[570]

    def test_file_replaces_defaults(self, tmp_path: Path) -> None:
        path = write_table(tmp_path / "known.json", {"123": {"max_players": 2}})

        table = KnownGamesTable.from_file(path, replace_defaults=True)

        assert len(table) == 1
        assert 570 not in table

    def test_invalid_file(self, tmp_path: Path) -> None:
        path = write_table(tmp_path / "known.json", {"abc": {"max_players": 2}})

        with pytest.raises(ValueError):
            KnownGamesTable.from_file(path)

    def test_from_settings_without_override(self) -> None:
        assert len(KnownGamesTable.from_settings()) == len(DEFAULT_KNOWN_GAMES)

    def test_from_settings_with_override(self, tmp_path: Path) -> None:
        path = write_table(tmp_path / "known.json", {"7": {"coop_players": 2}})
        config = KnownGamesConfig(path=path, replace_defaults=True)

        table = KnownGamesTable.from_settings(config)

        assert table.get(7) == PlayerCounts(coop_players=2)
