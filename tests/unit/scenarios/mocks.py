"""
Scripted discovery engine for scenario and watcher tests.

The engine does no networking. An EngineScript decides when the engine
reports an address change, when its feed closes, how long queries take
and which of them fail, and records every query in a shared log so
tests can assert on the ordering across instances.
"""

import asyncio
from typing import AsyncGenerator, Dict, List, Set, Tuple

from syncpoint.discovery import (
    DiscoveryEngine,
    IdentityKey,
    IdentityRecord,
)
from syncpoint.discovery.models import (
    AddressChanged,
    DiscoveryEvent,
    LinkDirection,
    LinkState,
    RoutingEntry,
)
from syncpoint.errors import DirectedQueryError, DiscoveryEngineError


class EngineScript:

    def __init__(
        self,
        address_change_after: float | None = None,
        close_feed_after: float | None = None,
        query_delay: float = 0.0,
        fail_first_query: bool = False,
        observed_address: str = "192.0.2.10:9000",
    ) -> None:
        self.address_change_after = address_change_after
        self.close_feed_after = close_feed_after
        self.query_delay = query_delay
        self.fail_first_query = fail_first_query
        self.observed_address = observed_address

        self.log: List[Tuple[str, str, str]] = []
        self.engines: List["ScriptedDiscoveryEngine"] = []
        self.failing_targets: Set[str] = set()

    def factory(self):
        def create_engine(record, key, params):
            engine = ScriptedDiscoveryEngine(record, key, self)
            self.engines.append(engine)

            return engine

        return create_engine

    def queries(self, status: str = "query_completed"):
        return [entry for entry in self.log if entry[0] == status]


class ScriptedDiscoveryEngine(DiscoveryEngine):

    def __init__(
        self,
        record: IdentityRecord,
        key: IdentityKey,
        script: EngineScript | None = None,
    ) -> None:
        self._record = record
        self._key = key
        self._script = script or EngineScript()

        self._routes: Dict[str, IdentityRecord] = {}
        self._feed: asyncio.Queue[DiscoveryEvent | None] | None = None
        self._feed_taken = False
        self._handles: List[asyncio.TimerHandle] = []
        self._queries_sent = 0
        self.started = False
        self.stopped = False

    async def start(self) -> None:
        if self.started:
            raise DiscoveryEngineError("Engine already started")

        self.started = True
        loop = asyncio.get_running_loop()

        if self._script.address_change_after is not None:
            self._handles.append(
                loop.call_later(
                    self._script.address_change_after,
                    self.emit,
                    AddressChanged(address=self._script.observed_address),
                )
            )

        if self._script.close_feed_after is not None:
            self._handles.append(
                loop.call_later(
                    self._script.close_feed_after,
                    self.close_feed,
                )
            )

    async def stop(self) -> None:
        if self.stopped:
            return

        self.stopped = True

        for handle in self._handles:
            handle.cancel()

        self.close_feed()

    def local_identity_record(self) -> IdentityRecord:
        return self._record

    async def directed_query(
        self,
        target: IdentityRecord,
        search_key: bytes,
    ) -> List[IdentityRecord]:
        self._script.log.append(
            ("query_started", self._record.node_id, target.node_id)
        )
        self._queries_sent += 1

        await asyncio.sleep(self._script.query_delay)

        if (
            (self._script.fail_first_query and self._queries_sent == 1)
            or target.node_id in self._script.failing_targets
        ):
            self._script.log.append(
                ("query_failed", self._record.node_id, target.node_id)
            )
            raise DirectedQueryError(target.short_id, "request timed out")

        self._routes[target.node_id] = target
        self._script.log.append(
            ("query_completed", self._record.node_id, target.node_id)
        )

        return []

    def event_feed(self) -> AsyncGenerator[DiscoveryEvent, None]:
        if self._feed_taken:
            raise DiscoveryEngineError("Event feed was already taken")

        self._feed_taken = True
        self._feed = asyncio.Queue()

        if self.stopped:
            self._feed.put_nowait(None)

        return self._iter_feed(self._feed)

    def routing_table_snapshot(self) -> List[RoutingEntry]:
        return [
            RoutingEntry(
                node_id=record.node_id,
                peer_address=record.address,
                direction=LinkDirection.OUTGOING,
                state=LinkState.CONNECTED,
            )
            for record in self._routes.values()
        ]

    def emit(self, event: DiscoveryEvent):
        # Events emitted before the feed is taken are lost.
        if self._feed is not None:
            self._feed.put_nowait(event)

    def close_feed(self):
        if self._feed is not None:
            self._feed.put_nowait(None)

    async def _iter_feed(
        self,
        feed: asyncio.Queue[DiscoveryEvent | None],
    ) -> AsyncGenerator[DiscoveryEvent, None]:
        while (event := await feed.get()) is not None:
            yield event


def create_engine(script: EngineScript | None = None) -> ScriptedDiscoveryEngine:
    key = IdentityKey.generate()

    return ScriptedDiscoveryEngine(
        key.build_record(),
        key,
        script,
    )
