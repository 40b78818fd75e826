"""
Steam Web API source.

Resolves vanity names to SteamID64s and downloads owned-game lists
for account linking.
"""

from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from common_games.config import get_settings
from common_games.contracts import OwnedGamesResponse, VanityResolution
from common_games.sources.base import (
    APIError,
    BaseSource,
    FetchResult,
    ValidationError,
)

M = TypeVar("M", bound=BaseModel)


class SteamWebSource(BaseSource):
    """
    Source for the keyed Steam Web API.

    Example:
        >>> async with SteamWebSource() as source:
        ...     result = await source.fetch_owned_games("76561197960287930")
        ...     if result.success:
        ...         print(result.data.game_count)
    """

    source_name = "steam_web_api"

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        settings = get_settings()
        self._base_url = settings.steam.base_url
        self._api_key = settings.steam.api_key

    def _params(self, **params: Any) -> dict[str, Any]:
        return {"key": self._api_key.get_secret_value(), **params}

    def _response_body(self, raw_data: Any, model: type[M], endpoint: str) -> M:
        """Unwrap the {"response": {...}} envelope every method uses and validate it."""
        if not isinstance(raw_data, dict) or not isinstance(raw_data.get("response"), dict):
            raise ValidationError(
                "Missing response envelope",
                source=self.source_name,
                endpoint=endpoint,
            )
        try:
            return model.model_validate(raw_data["response"])
        except PydanticValidationError as e:
            raise ValidationError(
                f"Response validation failed: {e}",
                source=self.source_name,
                endpoint=endpoint,
                original_error=e,
            ) from e

    async def resolve_vanity(self, vanity: str) -> FetchResult[str]:
        """
        Resolve a custom profile name to a SteamID64.

        Returns:
            FetchResult[str]: SteamID64 on success, `success=False` when
            Steam has no profile with that name
        """
        url = f"{self._base_url}/ISteamUser/ResolveVanityURL/v1/"

        try:
            response = await self._make_request("GET", url, params=self._params(vanityurl=vanity))
        except APIError as e:
            return self._failed(e, url)

        resolution = self._response_body(self._decode_json(response, url), VanityResolution, url)
        if not resolution.resolved:
            self._logger.info("Vanity name not found", vanity=vanity)
            return self._empty(resolution.message or "No match", response, url)

        return self._ok(resolution.steamid, response, url)

    async def fetch_owned_games(self, steam_id: str) -> FetchResult[OwnedGamesResponse]:
        """
        Fetch the library of a Steam user, free-to-play titles included.

        A private profile answers either 403 or an empty response object;
        both surface as a result without games.
        """
        url = f"{self._base_url}/IPlayerService/GetOwnedGames/v1/"

        try:
            response = await self._make_request(
                "GET",
                url,
                params=self._params(
                    steamid=steam_id,
                    include_appinfo=1,
                    include_played_free_games=1,
                ),
            )
        except APIError as e:
            self._logger.warning(
                "Owned games request failed",
                steam_id=steam_id,
                status_code=e.status_code,
            )
            return self._failed(e, url)

        owned = self._response_body(self._decode_json(response, url), OwnedGamesResponse, url)
        self._logger.info("Fetched owned games", steam_id=steam_id, game_count=len(owned.games))
        return self._ok(owned, response, url)
