"""
Common-games queries as the bot's commands ask them.

Validates the requested members (enough of them, all linked, none
private) before running the intersection query, and optionally narrows
the result down to multiplayer games.
"""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field

from common_games.logger import get_logger
from common_games.multiplayer import EnrichedGame, EnrichmentPipeline
from common_games.storage import Game, OwnershipStore

MIN_IDENTITIES = 2


class IdentityError(ValueError):
    """Base class for rejected common-games requests."""


class EmptyIdentitySetError(IdentityError):
    """No members were given."""

    def __init__(self) -> None:
        super().__init__("Please specify at least 2 users to compare.")


class InsufficientIdentitiesError(IdentityError):
    """Fewer than two distinct members were given."""

    def __init__(self, count: int) -> None:
        super().__init__(
            f"Please specify at least {MIN_IDENTITIES} users to compare (got {count})."
        )
        self.count = count


class UnlinkedUsersError(IdentityError):
    """Some members have not linked a Steam account in this guild."""

    def __init__(self, discord_ids: list[str]) -> None:
        super().__init__(
            "The following users haven't linked their Steam accounts yet: "
            + ", ".join(discord_ids)
        )
        self.discord_ids = discord_ids


class PrivateProfilesError(IdentityError):
    """Some members have private Steam libraries."""

    def __init__(self, discord_ids: list[str]) -> None:
        super().__init__(
            "The following users have private Steam profiles: " + ", ".join(discord_ids)
        )
        self.discord_ids = discord_ids


@dataclass
class CommonGamesReport:
    """Common games of a group and their multiplayer subset."""

    discord_ids: list[str]
    common: list[Game] = field(default_factory=list)
    multiplayer: list[EnrichedGame] = field(default_factory=list)
    cancelled: bool = False


@dataclass(frozen=True)
class GameOwners:
    """A game and the guild members who own it."""

    game: Game
    discord_ids: list[str]


class CommonGamesService:
    """Entry point for "what can we play together" questions."""

    def __init__(self, store: OwnershipStore, pipeline: EnrichmentPipeline) -> None:
        self._store = store
        self._pipeline = pipeline
        self._logger = get_logger(__name__, component="service")

    async def validate_identities(self, guild_id: str, discord_ids: Iterable[str]) -> list[str]:
        """
        Check a group of members before querying.

        Returns:
            list[str]: Distinct discord ids, in request order

        Raises:
            EmptyIdentitySetError: No ids given
            InsufficientIdentitiesError: Fewer than two distinct ids
            UnlinkedUsersError: Some members have no linked account
            PrivateProfilesError: Some linked members are private
        """
        ids = list(dict.fromkeys(discord_ids))
        if not ids:
            raise EmptyIdentitySetError()
        if len(ids) < MIN_IDENTITIES:
            raise InsufficientIdentitiesError(len(ids))

        users = await self._store.get_users(guild_id, ids)
        missing = [i for i in ids if i not in users]
        if missing:
            raise UnlinkedUsersError(missing)

        private = [i for i in ids if users[i].is_private]
        if private:
            raise PrivateProfilesError(private)

        return ids

    async def common_games(self, guild_id: str, discord_ids: Iterable[str]) -> list[Game]:
        """Games every given member owns, sorted by name."""
        ids = await self.validate_identities(guild_id, discord_ids)
        return await self._store.common_games(guild_id, ids)

    async def common_multiplayer_games(
        self,
        guild_id: str,
        discord_ids: Iterable[str],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> CommonGamesReport:
        """Common games plus the subset that supports multiplayer."""
        ids = await self.validate_identities(guild_id, discord_ids)
        common = await self._store.common_games(guild_id, ids)
        report = CommonGamesReport(discord_ids=ids, common=common)
        if not common:
            return report

        run = await self._pipeline.run(common, cancel_event=cancel_event)
        report.multiplayer = run.games
        report.cancelled = run.cancelled

        self._logger.info(
            "Common multiplayer games",
            guild_id=guild_id,
            users=len(ids),
            common=len(common),
            multiplayer=len(run.games),
            cancelled=run.cancelled,
        )
        return report

    async def find_owners(self, guild_id: str, query: str) -> GameOwners | None:
        """Best name match for `query` and who in the guild owns it."""
        matches = await self._store.search_games(query, limit=1)
        if not matches:
            return None
        game = matches[0]
        owners = await self._store.users_with_game(guild_id, game.app_id)
        return GameOwners(game=game, discord_ids=owners)
