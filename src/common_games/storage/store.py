"""
Ownership store backed by SQLite.

Holds linked users, the shared game table and per-guild ownership rows,
and answers the set-membership queries the bot needs ("what do these
users all own", "who owns this game").
"""

import asyncio
import time
from collections.abc import AsyncIterator, Iterable, Sequence
from contextlib import asynccontextmanager
from typing import Any

import aiosqlite

from common_games.config import get_settings
from common_games.logger import get_logger
from common_games.storage.models import Game, LinkedUser, OwnedGame

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        discord_id TEXT NOT NULL,
        guild_id TEXT NOT NULL,
        steam_id TEXT NOT NULL,
        last_updated INTEGER NOT NULL,
        is_private INTEGER NOT NULL DEFAULT 0,
        PRIMARY KEY (discord_id, guild_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS games (
        app_id INTEGER PRIMARY KEY,
        name TEXT NOT NULL,
        icon_url TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_games (
        discord_id TEXT NOT NULL,
        guild_id TEXT NOT NULL,
        app_id INTEGER NOT NULL,
        playtime INTEGER NOT NULL DEFAULT 0 CHECK (playtime >= 0),
        PRIMARY KEY (discord_id, guild_id, app_id),
        FOREIGN KEY (discord_id, guild_id)
            REFERENCES users(discord_id, guild_id) ON DELETE CASCADE,
        FOREIGN KEY (app_id) REFERENCES games(app_id) ON DELETE CASCADE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_user_games_member ON user_games(guild_id, discord_id)",
    "CREATE INDEX IF NOT EXISTS idx_user_games_app ON user_games(guild_id, app_id)",
    "CREATE INDEX IF NOT EXISTS idx_games_name ON games(name)",
)

UPSERT_GAME = """
    INSERT INTO games (app_id, name, icon_url)
    VALUES (?, ?, ?)
    ON CONFLICT(app_id) DO UPDATE SET
        name = excluded.name,
        icon_url = excluded.icon_url
"""


def _now_ms() -> int:
    return int(time.time() * 1000)


def _require_guild(guild_id: str) -> None:
    if not guild_id or not guild_id.strip():
        raise ValueError("guild_id must be a non-empty string")


class OwnershipStore:
    """
    Async SQLite adapter for users, games and ownership rows.

    Example:
        >>> async with OwnershipStore(":memory:") as store:
        ...     games = await store.common_games("guild", ["alice", "bob"])
    """

    def __init__(self, path: str | None = None, *, timeout: float | None = None) -> None:
        settings = get_settings()
        self._path = path or settings.database.path
        self._timeout = timeout or settings.database.timeout_seconds
        self._conn: aiosqlite.Connection | None = None
        # Serializes transactions on the shared connection
        self._lock = asyncio.Lock()
        self._logger = get_logger(__name__, component="store")

    @property
    def _db(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("OwnershipStore is not connected; call connect() first")
        return self._conn

    async def connect(self) -> None:
        """Open the connection and create the schema if missing."""
        if self._conn is not None:
            return
        self._conn = await aiosqlite.connect(self._path, timeout=self._timeout)
        await self._conn.execute("PRAGMA foreign_keys = ON")
        await self.initialize()
        self._logger.info("Ownership store ready", path=self._path)

    async def initialize(self) -> None:
        """Create tables and indexes."""
        async with self._transaction() as db:
            for statement in SCHEMA:
                await db.execute(statement)

    async def close(self) -> None:
        """Close the connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    async def __aenter__(self) -> "OwnershipStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Hold the connection for one write; commit on success, roll back on any failure."""
        async with self._lock:
            db = self._db
            try:
                yield db
                await db.commit()
            except BaseException:
                await db.rollback()
                raise

    async def _fetchall(self, query: str, params: Sequence[Any] = ()) -> list[Any]:
        async with self._lock, self._db.execute(query, params) as cursor:
            return list(await cursor.fetchall())

    async def _fetchone(self, query: str, params: Sequence[Any] = ()) -> Any:
        async with self._lock, self._db.execute(query, params) as cursor:
            return await cursor.fetchone()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def link_user(self, discord_id: str, guild_id: str, steam_id: str) -> None:
        """
        Link (or re-link) a member to a Steam account.

        Re-linking keeps existing ownership rows until the next
        `replace_ownership` call.
        """
        _require_guild(guild_id)
        async with self._transaction() as db:
            await db.execute(
                """
                INSERT INTO users (discord_id, guild_id, steam_id, last_updated, is_private)
                VALUES (?, ?, ?, ?, 0)
                ON CONFLICT(discord_id, guild_id) DO UPDATE SET
                    steam_id = excluded.steam_id,
                    last_updated = excluded.last_updated,
                    is_private = 0
                """,
                (discord_id, guild_id, steam_id, _now_ms()),
            )
        self._logger.info("User linked", discord_id=discord_id, guild_id=guild_id)

    async def get_user(self, discord_id: str, guild_id: str) -> LinkedUser | None:
        """Look up a linked member."""
        row = await self._fetchone(
            """
            SELECT discord_id, guild_id, steam_id, last_updated, is_private
            FROM users WHERE discord_id = ? AND guild_id = ?
            """,
            (discord_id, guild_id),
        )
        return LinkedUser.from_row(row) if row else None

    async def get_users(self, guild_id: str, discord_ids: Iterable[str]) -> dict[str, LinkedUser]:
        """Look up several members of one guild, keyed by discord id."""
        _require_guild(guild_id)
        ids = list(dict.fromkeys(discord_ids))
        if not ids:
            return {}
        placeholders = ",".join("?" * len(ids))
        rows = await self._fetchall(
            f"""
            SELECT discord_id, guild_id, steam_id, last_updated, is_private
            FROM users WHERE guild_id = ? AND discord_id IN ({placeholders})
            """,
            (guild_id, *ids),
        )
        return {row[0]: LinkedUser.from_row(row) for row in rows}

    async def set_private(self, discord_id: str, guild_id: str, is_private: bool) -> None:
        """Record whether the member's Steam library is hidden."""
        async with self._transaction() as db:
            await db.execute(
                """
                UPDATE users SET is_private = ?
                WHERE discord_id = ? AND guild_id = ?
                """,
                (int(is_private), discord_id, guild_id),
            )

    async def touch_user(self, discord_id: str, guild_id: str) -> None:
        """Stamp the last successful library fetch."""
        async with self._transaction() as db:
            await db.execute(
                "UPDATE users SET last_updated = ? WHERE discord_id = ? AND guild_id = ?",
                (_now_ms(), discord_id, guild_id),
            )

    async def unlink_user(self, discord_id: str, guild_id: str) -> bool:
        """Remove a link and, through the cascade, its ownership rows."""
        async with self._transaction() as db:
            async with db.execute(
                "DELETE FROM users WHERE discord_id = ? AND guild_id = ?",
                (discord_id, guild_id),
            ) as cursor:
                removed = cursor.rowcount > 0
        return removed

    # ------------------------------------------------------------------
    # Games and ownership
    # ------------------------------------------------------------------

    async def upsert_games(self, games: Iterable[Game]) -> None:
        """Insert games or refresh their name and icon by id."""
        async with self._transaction() as db:
            await db.executemany(
                UPSERT_GAME,
                [(g.app_id, g.name, g.icon_url) for g in games],
            )

    async def get_game(self, app_id: int) -> Game | None:
        row = await self._fetchone(
            "SELECT app_id, name, icon_url FROM games WHERE app_id = ?",
            (app_id,),
        )
        return Game(*row) if row else None

    async def replace_ownership(
        self,
        discord_id: str,
        guild_id: str,
        owned: Sequence[OwnedGame],
    ) -> int:
        """
        Replace every ownership row of a member in one transaction.

        Games are upserted first. On any failure the previous rows are
        left untouched. Concurrent calls run one after another, so a
        failing replace never rolls back another member's.

        Returns:
            int: Number of rows written
        """
        _require_guild(guild_id)
        try:
            async with self._transaction() as db:
                await db.executemany(
                    UPSERT_GAME,
                    [(o.game.app_id, o.game.name, o.game.icon_url) for o in owned],
                )
                await db.execute(
                    "DELETE FROM user_games WHERE discord_id = ? AND guild_id = ?",
                    (discord_id, guild_id),
                )
                await db.executemany(
                    """
                    INSERT INTO user_games (discord_id, guild_id, app_id, playtime)
                    VALUES (?, ?, ?, ?)
                    """,
                    [(discord_id, guild_id, o.game.app_id, o.playtime) for o in owned],
                )
        except BaseException:
            self._logger.error(
                "Ownership replace rolled back",
                discord_id=discord_id,
                guild_id=guild_id,
            )
            raise

        self._logger.info(
            "Ownership replaced",
            discord_id=discord_id,
            guild_id=guild_id,
            games=len(owned),
        )
        return len(owned)

    async def common_games(self, guild_id: str, discord_ids: Iterable[str]) -> list[Game]:
        """
        Games owned by every one of `discord_ids` in the guild.

        One grouped-count query over the ownership rows of the given
        members. Names sort with SQLite's BINARY collation (case-sensitive,
        byte order), ties by app id. Duplicate ids count once; an empty
        id set yields no games.
        """
        _require_guild(guild_id)
        ids = list(dict.fromkeys(discord_ids))
        if not ids:
            return []

        placeholders = ",".join("?" * len(ids))
        rows = await self._fetchall(
            f"""
            SELECT g.app_id, g.name, g.icon_url
            FROM user_games ug
            JOIN games g ON g.app_id = ug.app_id
            WHERE ug.guild_id = ? AND ug.discord_id IN ({placeholders})
            GROUP BY g.app_id
            HAVING COUNT(DISTINCT ug.discord_id) = ?
            ORDER BY g.name COLLATE BINARY, g.app_id
            """,
            (guild_id, *ids, len(ids)),
        )
        self._logger.debug(
            "Common games computed",
            guild_id=guild_id,
            users=len(ids),
            games=len(rows),
        )
        return [Game(*row) for row in rows]

    async def user_games(self, discord_id: str, guild_id: str) -> list[OwnedGame]:
        """A member's library with playtime, ordered by name."""
        rows = await self._fetchall(
            """
            SELECT g.app_id, g.name, g.icon_url, ug.playtime
            FROM user_games ug
            JOIN games g ON g.app_id = ug.app_id
            WHERE ug.discord_id = ? AND ug.guild_id = ?
            ORDER BY g.name COLLATE BINARY, g.app_id
            """,
            (discord_id, guild_id),
        )
        return [OwnedGame(Game(app_id, name, icon), playtime) for app_id, name, icon, playtime in rows]

    async def users_with_game(self, guild_id: str, app_id: int) -> list[str]:
        """Discord ids in the guild that own the game."""
        _require_guild(guild_id)
        rows = await self._fetchall(
            """
            SELECT discord_id FROM user_games
            WHERE guild_id = ? AND app_id = ?
            ORDER BY discord_id
            """,
            (guild_id, app_id),
        )
        return [row[0] for row in rows]

    async def user_has_game(self, discord_id: str, guild_id: str, app_id: int) -> bool:
        row = await self._fetchone(
            """
            SELECT 1 FROM user_games
            WHERE discord_id = ? AND guild_id = ? AND app_id = ?
            """,
            (discord_id, guild_id, app_id),
        )
        return row is not None

    async def user_game_count(self, discord_id: str, guild_id: str) -> int:
        row = await self._fetchone(
            "SELECT COUNT(*) FROM user_games WHERE discord_id = ? AND guild_id = ?",
            (discord_id, guild_id),
        )
        return int(row[0])

    async def search_games(self, query: str, *, limit: int = 10) -> list[Game]:
        """Case-insensitive substring search over game names."""
        escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        rows = await self._fetchall(
            """
            SELECT app_id, name, icon_url FROM games
            WHERE name LIKE ? ESCAPE '\\'
            ORDER BY name
            LIMIT ?
            """,
            (f"%{escaped}%", limit),
        )
        return [Game(*row) for row in rows]
