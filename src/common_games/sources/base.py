"""
Shared plumbing for the Steam HTTP sources.

A source owns one lazily created `httpx.AsyncClient` and sends every
request through `BaseSource._make_request`: transport failures and 5xx
answers are retried with exponential backoff, 429 and other 4xx answers
are raised at once. Sources turn "Steam answered, but with nothing
usable" into a `FetchResult` with `success=False` and let everything
else propagate.
"""

from abc import ABC
from datetime import datetime, timezone
from typing import Any, ClassVar, Generic, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from common_games.config import RetryConfig, get_settings
from common_games.logger import get_logger

T = TypeVar("T")

USER_AGENT = "SteamCommonGames/1.0"
DEFAULT_RETRY_AFTER = 60.0


class SourceError(Exception):
    """Something went wrong talking to an external source."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        endpoint: str | None = None,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.endpoint = endpoint
        self.status_code = status_code
        self.original_error = original_error
        self.timestamp = datetime.now(timezone.utc)


class RateLimitError(SourceError):
    """Steam answered 429. Never retried; the caller decides how to back off."""

    def __init__(self, message: str, *, retry_after: float = DEFAULT_RETRY_AFTER, **kwargs: Any) -> None:
        super().__init__(message, status_code=429, **kwargs)
        self.retry_after = retry_after


class APIError(SourceError):
    """Steam answered with an error status."""

    @property
    def is_server_error(self) -> bool:
        return self.status_code is not None and self.status_code >= 500


class ValidationError(SourceError):
    """The response body was not what the endpoint promises."""


class FetchResult(BaseModel, Generic[T]):
    """
    Outcome of one source call.

    `success=False` means the source answered but had nothing usable
    (unknown app, error status). Transport failures are raised instead.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    data: T | None = None
    error_message: str | None = None
    status_code: int | None = None
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source: str
    endpoint: str


def _parse_retry_after(value: str | None) -> float:
    try:
        return float(value) if value is not None else DEFAULT_RETRY_AFTER
    except ValueError:
        # HTTP-date form; Steam does not send it in practice
        return DEFAULT_RETRY_AFTER


def is_retryable(error: BaseException) -> bool:
    """Transport errors and 5xx answers are worth another attempt."""
    if isinstance(error, httpx.TransportError):
        return True
    return isinstance(error, APIError) and error.is_server_error


class BaseSource(ABC):
    """
    Base class for HTTP sources.

    Subclasses set `source_name` (used in logs and results) and, for
    non-JSON endpoints, `accept`.
    """

    source_name: ClassVar[str]
    accept: ClassVar[str] = "application/json"

    def __init__(
        self,
        *,
        retry_config: RetryConfig | None = None,
        timeout: float | None = None,
    ) -> None:
        settings = get_settings()
        self._retry_config = retry_config or settings.retry
        self._timeout = timeout or settings.steam.timeout_seconds
        self._logger = get_logger(__name__, component="source", source=self.source_name)
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """HTTP client, created on first use."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT, "Accept": self.accept},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self) -> "BaseSource":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _retrying(self) -> AsyncRetrying:
        config = self._retry_config
        return AsyncRetrying(
            retry=retry_if_exception(is_retryable),
            stop=stop_after_attempt(config.max_attempts),
            wait=wait_exponential(
                multiplier=config.base_delay_seconds,
                max=config.max_delay_seconds,
                exp_base=config.exponential_base,
            ),
            before_sleep=self._log_retry,
            reraise=True,
        )

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        self._logger.warning(
            "Retrying request",
            attempt=retry_state.attempt_number,
            wait_seconds=retry_state.next_action.sleep if retry_state.next_action else 0,
            error=str(error) if error else None,
        )

    def _raise_for_status(self, response: httpx.Response, url: str) -> None:
        status = response.status_code
        if status == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            raise RateLimitError(
                f"Rate limit exceeded. Retry after {retry_after:g}s",
                retry_after=retry_after,
                source=self.source_name,
                endpoint=url,
            )
        if status >= 400:
            raise APIError(
                f"API error: {status}",
                source=self.source_name,
                endpoint=url,
                status_code=status,
            )

    async def _make_request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Send a request, retrying transient failures.

        Raises:
            RateLimitError: If Steam answered 429
            APIError: If an error status survived all attempts
            httpx.HTTPError: If the transport kept failing
        """
        async for attempt in self._retrying():
            with attempt:
                self._logger.debug("Request", method=method, url=url)
                response = await self.client.request(method, url, **kwargs)
                self._raise_for_status(response, url)
        return response

    def _decode_json(self, response: httpx.Response, endpoint: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ValidationError(
                "Response body is not JSON",
                source=self.source_name,
                endpoint=endpoint,
                original_error=e,
            ) from e

    def _failed(self, error: APIError, endpoint: str) -> FetchResult[Any]:
        return FetchResult(
            success=False,
            error_message=str(error),
            status_code=error.status_code,
            source=self.source_name,
            endpoint=endpoint,
        )

    def _empty(self, message: str, response: httpx.Response, endpoint: str) -> FetchResult[Any]:
        return FetchResult(
            success=False,
            error_message=message,
            status_code=response.status_code,
            source=self.source_name,
            endpoint=endpoint,
        )

    def _ok(self, data: Any, response: httpx.Response, endpoint: str) -> FetchResult[Any]:
        return FetchResult(
            success=True,
            data=data,
            status_code=response.status_code,
            source=self.source_name,
            endpoint=endpoint,
        )
