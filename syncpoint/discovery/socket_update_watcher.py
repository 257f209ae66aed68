import asyncio
import time
from typing import AsyncIterator

import msgspec

from syncpoint.errors import (
    AddressFeedClosedError,
    WatcherAlreadyResolvedError,
    WatcherAlreadyStartedError,
)
from syncpoint.logging import Logger
from syncpoint.logging.syncpoint_logging_models import WatcherDebug

from .discovery_engine import DiscoveryEngine
from .models import AddressChanged, DiscoveryEvent


class AddressObservation(msgspec.Struct, frozen=True):
    address: str
    observed_at: float


class SocketUpdateWatcher:
    """
    Reports, at most once, the first address the engine learns for
    itself.

    start() takes the engine's event feed immediately, so it must be
    called before the identity record is published or any query is
    sent: those are what trigger the address change. The watcher is
    armed once and never re-arms.
    """

    def __init__(
        self,
        engine: DiscoveryEngine,
        clock=time.monotonic,
    ) -> None:
        self._engine = engine
        self._clock = clock
        self._task: asyncio.Task | None = None
        self._result: asyncio.Future[AddressObservation] | None = None
        self._logger = Logger()

    @property
    def started(self):
        return self._task is not None

    @property
    def resolved(self):
        return self._result is not None and self._result.done()

    def start(self):
        if self._task is not None:
            raise WatcherAlreadyStartedError(
                "Socket update watcher can only be started once"
            )

        feed = self._engine.event_feed()

        self._result = asyncio.get_running_loop().create_future()
        self._task = asyncio.create_task(
            self._watch(feed)
        )

    async def result(self) -> AddressObservation:
        """
        Wait for the first address change. Raises AddressFeedClosedError
        if the feed ended without one.
        """
        if self._result is None:
            raise RuntimeError("Socket update watcher was never started")

        return await self._result

    def cancel(self):
        if self._task and not self._task.done():
            self._task.cancel()

        if self._result and not self._result.done():
            self._result.cancel()

    def close(self, reason: str):
        """
        Stop watching. An unresolved result fails with
        AddressFeedClosedError carrying `reason`.
        """
        if self._task and not self._task.done():
            self._task.cancel()

        if self._result and not self._result.done():
            self._result.set_exception(AddressFeedClosedError(reason))

    async def _watch(self, feed: AsyncIterator[DiscoveryEvent]):
        node_id = self._engine.local_identity_record().short_id

        try:
            async for event in feed:
                if isinstance(event, AddressChanged):
                    self._deliver(
                        AddressObservation(
                            address=event.address,
                            observed_at=self._clock(),
                        )
                    )

                    await self._logger.log(
                        WatcherDebug(
                            message=f"Local address changed to {event.address}",
                            node_id=node_id,
                        )
                    )

                    return

        except Exception as err:
            self._fail(
                AddressFeedClosedError(
                    f"Event feed of {node_id} failed before an address change: {err}"
                ),
                cause=err,
            )

            await self._logger.log(
                WatcherDebug(
                    message=f"Event feed failed without an address change: {err}",
                    node_id=node_id,
                )
            )

            return

        self._fail(
            AddressFeedClosedError(
                f"Event feed of {node_id} closed before an address change"
            )
        )

        await self._logger.log(
            WatcherDebug(
                message="Event feed closed without an address change",
                node_id=node_id,
            )
        )

    def _deliver(self, observation: AddressObservation):
        if self._result.done():
            raise WatcherAlreadyResolvedError(
                "Socket update watcher already delivered its result"
            )

        self._result.set_result(observation)

    def _fail(
        self,
        error: AddressFeedClosedError,
        cause: Exception | None = None,
    ):
        if self._result.done():
            raise WatcherAlreadyResolvedError(
                "Socket update watcher already delivered its result"
            )

        error.__cause__ = cause
        self._result.set_exception(error)
