"""In-memory classification cache."""

from common_games.contracts import MultiplayerInfo


class ClassificationCache:
    """
    App id -> MultiplayerInfo, unbounded and without expiry.

    One instance lives as long as whoever owns it (typically the bot
    process). Results are idempotent per app id, so concurrent writers
    for the same id simply overwrite each other.
    """

    def __init__(self) -> None:
        self._entries: dict[int, MultiplayerInfo] = {}

    def get(self, app_id: int) -> MultiplayerInfo | None:
        return self._entries.get(app_id)

    def set(self, app_id: int, info: MultiplayerInfo) -> None:
        self._entries[app_id] = info

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, app_id: object) -> bool:
        return app_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
