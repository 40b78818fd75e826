"""
Linking Discord members to Steam accounts and syncing their libraries.

A sync downloads the member's owned games and atomically replaces the
member's ownership rows in the guild. Steam-side failures are reported
through `SyncResult` rather than raised, so the caller can tell the
member what to fix (usually their profile privacy).
"""

import re
from dataclasses import dataclass

import httpx

from common_games.config import get_settings
from common_games.contracts import OwnedGame as SteamOwnedGame
from common_games.logger import get_logger
from common_games.sources import SourceError, SteamWebSource
from common_games.storage import Game, OwnedGame, OwnershipStore

STEAM_ID64_PATTERN = re.compile(r"^\d{17}$")
PROFILE_URL_PATTERN = re.compile(r"steamcommunity\.com/(profiles|id)/([^/?#\s]+)")


class SteamIdResolutionError(Exception):
    """Raised when input cannot be turned into a SteamID64."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Could not resolve a Steam account from {value!r}")
        self.value = value


class NotLinkedError(LookupError):
    """Raised when refreshing a member who never linked an account."""

    def __init__(self, discord_id: str, guild_id: str) -> None:
        super().__init__(f"User {discord_id} has no linked Steam account in guild {guild_id}")
        self.discord_id = discord_id
        self.guild_id = guild_id


@dataclass(frozen=True)
class SyncResult:
    """Outcome of fetching and storing a member's library."""

    success: bool
    is_private: bool
    games_count: int
    steam_id: str | None = None
    error: str | None = None


class LibrarySync:
    """
    Links accounts and refreshes owned-game data.

    Example:
        >>> async with SteamWebSource() as source:
        ...     sync = LibrarySync(store, source)
        ...     result = await sync.link("1234", "guild", "gabelogannewell")
    """

    def __init__(self, store: OwnershipStore, source: SteamWebSource) -> None:
        self._store = store
        self._source = source
        self._media_url = get_settings().steam.media_url
        self._logger = get_logger(__name__, component="library")

    def icon_url(self, game: SteamOwnedGame) -> str | None:
        if not game.img_icon_url:
            return None
        return (
            f"{self._media_url}/steamcommunity/public/images/apps/"
            f"{game.appid}/{game.img_icon_url}.jpg"
        )

    async def resolve_steam_id(self, value: str) -> str:
        """
        Turn user input into a SteamID64.

        Accepts a SteamID64, a steamcommunity.com profile URL
        (/profiles/<id> or /id/<vanity>), or a bare vanity name.

        Raises:
            SteamIdResolutionError: If nothing matches
        """
        value = value.strip()
        if STEAM_ID64_PATTERN.match(value):
            return value

        vanity = value
        url_match = PROFILE_URL_PATTERN.search(value)
        if url_match:
            kind, identifier = url_match.groups()
            if kind == "profiles":
                return identifier
            vanity = identifier

        if not vanity:
            raise SteamIdResolutionError(value)

        try:
            result = await self._source.resolve_vanity(vanity)
        except (SourceError, httpx.HTTPError) as e:
            self._logger.error("Vanity resolution failed", vanity=vanity, error=str(e))
            raise SteamIdResolutionError(value) from e

        if not result.success or not result.data:
            raise SteamIdResolutionError(value)
        return result.data

    async def link(self, discord_id: str, guild_id: str, steam_input: str) -> SyncResult:
        """
        Link a member to a Steam account and fetch their library.

        The link is stored even when the library turns out to be
        private, so a later `refresh` can pick it up.

        Raises:
            SteamIdResolutionError: If `steam_input` cannot be resolved
        """
        steam_id = await self.resolve_steam_id(steam_input)
        await self._store.link_user(discord_id, guild_id, steam_id)
        return await self._sync(discord_id, guild_id, steam_id)

    async def refresh(self, discord_id: str, guild_id: str) -> SyncResult:
        """
        Re-fetch a linked member's library.

        Raises:
            NotLinkedError: If the member has not linked an account
        """
        user = await self._store.get_user(discord_id, guild_id)
        if user is None:
            raise NotLinkedError(discord_id, guild_id)
        return await self._sync(discord_id, guild_id, user.steam_id)

    async def _sync(self, discord_id: str, guild_id: str, steam_id: str) -> SyncResult:
        try:
            result = await self._source.fetch_owned_games(steam_id)
        except (SourceError, httpx.HTTPError) as e:
            self._logger.error(
                "Error fetching Steam games",
                discord_id=discord_id,
                steam_id=steam_id,
                error=str(e),
            )
            return SyncResult(
                success=False,
                is_private=False,
                games_count=0,
                steam_id=steam_id,
                error=f"Failed to fetch games: {e}",
            )

        if not result.success:
            if result.status_code in (401, 403):
                await self._store.set_private(discord_id, guild_id, True)
                return SyncResult(
                    success=False,
                    is_private=True,
                    games_count=0,
                    steam_id=steam_id,
                    error="This Steam profile is private.",
                )
            return SyncResult(
                success=False,
                is_private=False,
                games_count=0,
                steam_id=steam_id,
                error=f"Failed to fetch games: {result.error_message}",
            )

        games = result.data.games if result.data else []
        if not games:
            # Private profiles and empty libraries look the same to the API
            await self._store.set_private(discord_id, guild_id, True)
            return SyncResult(
                success=False,
                is_private=True,
                games_count=0,
                steam_id=steam_id,
                error="Unable to fetch games. Profile may be private or have no games.",
            )

        unique = {g.appid: g for g in games}
        owned = [
            OwnedGame(
                Game(g.appid, g.name or f"App {g.appid}", self.icon_url(g)),
                g.playtime_forever,
            )
            for g in unique.values()
        ]
        count = await self._store.replace_ownership(discord_id, guild_id, owned)
        await self._store.set_private(discord_id, guild_id, False)
        await self._store.touch_user(discord_id, guild_id)

        self._logger.info(
            "Library synced",
            discord_id=discord_id,
            guild_id=guild_id,
            games=count,
        )
        return SyncResult(success=True, is_private=False, games_count=count, steam_id=steam_id)
