"""Shared fixtures."""

from collections.abc import AsyncIterator, Iterator
from unittest.mock import patch

import pytest
import pytest_asyncio

from common_games.config import get_settings
from common_games.storage import OwnershipStore

TEST_ENV = {
    "STEAM_API_KEY": "test_api_key_123",
    "RETRY_MAX_ATTEMPTS": "1",
    "RETRY_BASE_DELAY_SECONDS": "0.1",
    "ENRICHMENT_BATCH_DELAY_SECONDS": "0",
    "LOG_FORMAT": "console",
}


@pytest.fixture(autouse=True)
def mock_env() -> Iterator[None]:
    """Mock environment variables and reset cached settings for every test."""
    get_settings.cache_clear()
    with patch.dict("os.environ", TEST_ENV):
        yield
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def store() -> AsyncIterator[OwnershipStore]:
    """Empty in-memory ownership store."""
    async with OwnershipStore(":memory:") as s:
        yield s
