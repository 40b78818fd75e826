"""
Batch enrichment of game lists with multiplayer information.

Classifies games in small concurrent batches with a fixed pause between
batches so a long list of common games does not trip Steam's rate limit,
and keeps only the multiplayer ones, in their original order.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from common_games.config import EnrichmentConfig, get_settings
from common_games.contracts import MultiplayerInfo
from common_games.logger import get_logger
from common_games.multiplayer.classifier import MultiplayerClassifier


class GameLike(Protocol):
    """Anything with an app id and a name (`Game`, `GameRef`)."""

    @property
    def app_id(self) -> int: ...

    @property
    def name(self) -> str: ...


@dataclass(frozen=True)
class GameRef:
    """Minimal game reference accepted by the pipeline."""

    app_id: int
    name: str


@dataclass(frozen=True)
class EnrichedGame:
    """A multiplayer game with its classification."""

    app_id: int
    name: str
    multiplayer_info: MultiplayerInfo


@dataclass
class EnrichmentRun:
    """Outcome of one pipeline run."""

    games: list[EnrichedGame] = field(default_factory=list)
    classified: int = 0
    batches: int = 0
    cancelled: bool = False


class EnrichmentPipeline:
    """
    Filters a game list down to multiplayer games.

    Example:
        >>> pipeline = EnrichmentPipeline(classifier)
        >>> games = await pipeline.enrich([GameRef(548430, "Deep Rock Galactic")])
    """

    def __init__(
        self,
        classifier: MultiplayerClassifier,
        *,
        config: EnrichmentConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        config = config or get_settings().enrichment
        self._classifier = classifier
        self._batch_size = config.batch_size
        self._batch_delay = config.batch_delay_seconds
        self._sleep = sleep
        self._logger = get_logger(__name__, component="enrichment")

    async def enrich(
        self,
        games: Sequence[GameLike],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> list[EnrichedGame]:
        """
        Multiplayer subset of `games`, in input order.

        Setting `cancel_event` stops the run early; the games resolved
        up to that point are returned.
        """
        return (await self.run(games, cancel_event=cancel_event)).games

    async def run(
        self,
        games: Sequence[GameLike],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> EnrichmentRun:
        """Like `enrich`, with run statistics and the cancellation flag."""
        run = EnrichmentRun()
        if not games:
            return run

        batches = [
            games[start : start + self._batch_size]
            for start in range(0, len(games), self._batch_size)
        ]
        self._logger.info(
            "Checking games for multiplayer support",
            total_games=len(games),
            batches=len(batches),
        )

        for index, batch in enumerate(batches):
            if cancel_event is not None and cancel_event.is_set():
                run.cancelled = True
                break

            infos = await self._classify_batch(batch, cancel_event)
            run.batches += 1

            for game, info in zip(batch, infos):
                if info is None:
                    continue
                run.classified += 1
                if info.is_multiplayer:
                    run.games.append(EnrichedGame(game.app_id, game.name, info))

            if any(info is None for info in infos):
                run.cancelled = True
                break

            # No pause after the last batch
            if index < len(batches) - 1 and await self._pause(cancel_event):
                run.cancelled = True
                break

        self._logger.info(
            "Multiplayer check complete",
            total_games=len(games),
            classified=run.classified,
            multiplayer=len(run.games),
            cancelled=run.cancelled,
        )
        return run

    async def _classify_one(self, game: GameLike) -> MultiplayerInfo:
        try:
            return await self._classifier.classify(game.app_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._logger.error(
                "Classifier raised, assuming multiplayer",
                app_id=game.app_id,
                error=str(e),
            )
            return MultiplayerInfo.uncertain()

    async def _classify_batch(
        self,
        batch: Sequence[GameLike],
        cancel_event: asyncio.Event | None,
    ) -> list[MultiplayerInfo | None]:
        """
        Classify a batch concurrently.

        Entries are None for games still in flight when the run was
        cancelled.
        """
        tasks = [asyncio.ensure_future(self._classify_one(game)) for game in batch]
        if cancel_event is None:
            return list(await asyncio.gather(*tasks))

        waiter = asyncio.ensure_future(cancel_event.wait())
        pending = set(tasks)
        try:
            while pending:
                done, _ = await asyncio.wait(
                    pending | {waiter},
                    return_when=asyncio.FIRST_COMPLETED,
                )
                pending -= done
                if waiter in done:
                    break
        finally:
            waiter.cancel()
            for task in pending:
                task.cancel()
            await asyncio.gather(waiter, *pending, return_exceptions=True)

        if pending:
            self._logger.info(
                "Enrichment cancelled mid-batch",
                finished=len(tasks) - len(pending),
                abandoned=len(pending),
            )
        return [None if task in pending else task.result() for task in tasks]

    async def _pause(self, cancel_event: asyncio.Event | None) -> bool:
        """Sleep between batches. Returns True if cancelled while waiting."""
        if cancel_event is None:
            await self._sleep(self._batch_delay)
            return False

        sleeper = asyncio.ensure_future(self._sleep(self._batch_delay))
        waiter = asyncio.ensure_future(cancel_event.wait())
        done, pending = await asyncio.wait(
            {sleeper, waiter},
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        return waiter in done
