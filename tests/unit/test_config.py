"""Tests for settings sections."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from common_games.config import (
    DatabaseConfig,
    EnrichmentConfig,
    KnownGamesConfig,
    LoggingConfig,
    RetryConfig,
    SteamAPIConfig,
    get_settings,
)


class TestSteamAPIConfig:
    def test_steam_endpoints_by_default(self) -> None:
        config = SteamAPIConfig()

        assert config.base_url == "https://api.steampowered.com"
        assert config.store_page_url == "https://store.steampowered.com/app"
        assert config.media_url == "https://media.steampowered.com"

    def test_missing_key_fails(self) -> None:
        with patch.dict(os.environ, {}, clear=True), pytest.raises(ValueError, match="api_key"):
            SteamAPIConfig()

    def test_key_hidden_from_repr(self) -> None:
        with patch.dict(os.environ, {"STEAM_API_KEY": "hunter2"}):
            config = SteamAPIConfig()

        assert "hunter2" not in repr(config)
        assert config.api_key.get_secret_value() == "hunter2"

    def test_trailing_slash_stripped(self) -> None:
        with patch.dict(os.environ, {"STEAM_STORE_PAGE_URL": "http://localhost:8080/app/"}):
            config = SteamAPIConfig()

        assert config.store_page_url == "http://localhost:8080/app"


class TestEnrichmentConfig:
    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = EnrichmentConfig()

        assert config.batch_size == 5
        assert config.batch_delay_seconds == 1.0
        assert config.enable_store_page_fallback is True

    def test_batch_size_bounds(self) -> None:
        with patch.dict(os.environ, {"ENRICHMENT_BATCH_SIZE": "0"}), pytest.raises(ValueError):
            EnrichmentConfig()

    def test_negative_delay_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"ENRICHMENT_BATCH_DELAY_SECONDS": "-1"}),
            pytest.raises(ValueError),
        ):
            EnrichmentConfig()


class TestKnownGamesConfig:
    def test_no_override_by_default(self) -> None:
        assert KnownGamesConfig().path is None

    def test_missing_file_rejected(self, tmp_path: Path) -> None:
        missing = tmp_path / "nope.json"
        with (
            patch.dict(os.environ, {"KNOWN_GAMES_PATH": str(missing)}),
            pytest.raises(ValueError, match="Known games file not found"),
        ):
            KnownGamesConfig()

    def test_existing_file_accepted(self, tmp_path: Path) -> None:
        path = tmp_path / "known.json"
        path.write_text(json.dumps({"10": {"max_players": 2}}), encoding="utf-8")
        with patch.dict(os.environ, {"KNOWN_GAMES_PATH": str(path)}):
            assert KnownGamesConfig().path == path


class TestRetryConfig:
    def test_short_backoff_by_default(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = RetryConfig()

        assert (config.max_attempts, config.base_delay_seconds, config.max_delay_seconds) == (
            3,
            0.5,
            10.0,
        )

    @pytest.mark.parametrize("attempts", ["0", "11"])
    def test_attempts_out_of_range(self, attempts: str) -> None:
        with patch.dict(os.environ, {"RETRY_MAX_ATTEMPTS": attempts}), pytest.raises(ValueError):
            RetryConfig()

    def test_ceiling_below_base_delay_rejected(self) -> None:
        env = {"RETRY_BASE_DELAY_SECONDS": "5", "RETRY_MAX_DELAY_SECONDS": "2"}
        with patch.dict(os.environ, env), pytest.raises(ValueError, match="max_delay_seconds"):
            RetryConfig()


class TestDatabaseConfig:
    def test_default_path(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert DatabaseConfig().path == "data.db"


class TestLoggingConfig:
    def test_level_case_insensitive(self) -> None:
        with patch.dict(os.environ, {"LOG_LEVEL": "debug"}):
            assert LoggingConfig().level == "DEBUG"

    def test_unknown_level_rejected(self) -> None:
        with patch.dict(os.environ, {"LOG_LEVEL": "chatty"}), pytest.raises(ValueError):
            LoggingConfig()

    def test_invalid_format(self) -> None:
        with patch.dict(os.environ, {"LOG_FORMAT": "xml"}), pytest.raises(ValueError):
            LoggingConfig()


class TestSettings:
    def test_sections_loaded_from_env(self) -> None:
        settings = get_settings()

        assert settings.steam.api_key.get_secret_value() == "test_api_key_123"
        assert settings.retry.max_attempts == 1
        assert settings.enrichment.batch_delay_seconds == 0
        assert settings.logging.format == "console"

    def test_settings_are_cached(self) -> None:
        assert get_settings() is get_settings()
