"""
Steam Store sources.

`StoreCategorySource` reads the feature categories of a game from the
Store API; `StorePageSource` downloads the public store page, which the
classifier scans for player counts when categories carry none.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from common_games.config import get_settings
from common_games.contracts import AppId, Category, StoreAppDetailsEntry
from common_games.sources.base import (
    APIError,
    BaseSource,
    FetchResult,
    ValidationError,
)

# birthtime skips the age gate on mature titles
AGE_GATE_COOKIE = "birthtime=0; lastagecheckage=1-0-1900"


class StoreCategorySource(BaseSource):
    """
    Category data for a game from /appdetails.

    Example:
        >>> async with StoreCategorySource() as source:
        ...     result = await source.fetch_categories(app_id=570)
        ...     if result.success:
        ...         print([c.description for c in result.data])
    """

    source_name = "steam_store_api"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._store_url = get_settings().steam.store_url

    def _parse_entry(self, raw_entry: Any, endpoint: str) -> StoreAppDetailsEntry:
        try:
            return StoreAppDetailsEntry.model_validate(raw_entry)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Response validation failed: {e}",
                source=self.source_name,
                endpoint=endpoint,
                original_error=e,
            ) from e

    async def fetch_categories(self, app_id: AppId) -> FetchResult[list[Category]]:
        """
        Fetch the Store categories of a game.

        Unknown apps and error statuses come back as `success=False`.
        Rate limiting, transport failures and malformed payloads raise.

        Args:
            app_id: Steam application ID

        Returns:
            FetchResult[list[Category]]: Categories (possibly empty)
        """
        url = f"{self._store_url}/appdetails"
        endpoint = f"{url}?appids={app_id}"

        try:
            response = await self._make_request(
                "GET",
                url,
                params={"appids": app_id, "filters": "categories"},
            )
        except APIError as e:
            self._logger.warning("Category request failed", app_id=app_id, status_code=e.status_code)
            return self._failed(e, endpoint)

        # {"<app_id>": {"success": bool, "data": {...}}}, or null for ids
        # the Store has never heard of
        raw_data = self._decode_json(response, endpoint)
        if raw_data is not None and not isinstance(raw_data, dict):
            raise ValidationError(
                "Expected an object keyed by app id",
                source=self.source_name,
                endpoint=endpoint,
            )
        entry = self._parse_entry((raw_data or {}).get(str(app_id)) or {"success": False}, endpoint)

        if not entry.success or entry.data is None:
            self._logger.info("Store has no data for app", app_id=app_id)
            return self._empty(
                f"Steam API returned success=false for app_id={app_id}",
                response,
                endpoint,
            )

        return self._ok(entry.data.categories, response, endpoint)


class StorePageSource(BaseSource):
    """Raw HTML of the public store page of a game."""

    source_name = "steam_store_page"
    accept = "text/html"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._page_url = get_settings().steam.store_page_url

    async def fetch_page(self, app_id: AppId) -> FetchResult[str]:
        """
        Download the store page of a game.

        Age-gated and region-locked pages still answer 200, so the text
        may not mention players at all.
        """
        url = f"{self._page_url}/{app_id}/"

        try:
            response = await self._make_request(
                "GET",
                url,
                params={"l": "english"},
                headers={"Cookie": AGE_GATE_COOKIE},
            )
        except APIError as e:
            return self._failed(e, url)

        return self._ok(response.text, response, url)
