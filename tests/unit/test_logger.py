"""Tests for logging setup."""

import logging

import pytest

from common_games.logger import redact_api_key, setup_logging


class TestRedactApiKey:
    def test_masks_query_parameter(self) -> None:
        event = {
            "event": "HTTP error",
            "url": "https://api.steampowered.com/IPlayerService/GetOwnedGames/v1/?key=ABC123&steamid=1",
        }

        result = redact_api_key(None, "error", event)

        assert result["url"].endswith("?key=***&steamid=1")

    def test_leaves_other_values_alone(self) -> None:
        event = {"event": "Classified game", "app_id": 570, "monkey": "monkey=1"}

        assert redact_api_key(None, "info", dict(event)) == event


@pytest.mark.parametrize("level", ["DEBUG", "INFO"])
def test_http_loggers_held_at_warning(level: str) -> None:
    setup_logging(level)

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger().level == logging.getLevelName(level)


def test_level_override_above_warning() -> None:
    setup_logging("error")

    assert logging.getLogger("httpcore").level == logging.ERROR
