import asyncio
from collections import Counter
from typing import AsyncGenerator, Dict, List, Tuple

from syncpoint.discovery.discovery_engine import DiscoveryEngine
from syncpoint.discovery.identity_key import IdentityKey, verify_record
from syncpoint.discovery.models import (
    AddressChanged,
    DiscoveryEvent,
    IdentityRecord,
    LinkDirection,
    LinkState,
    PeerDiscovered,
    RoutingEntry,
    SessionEstablished,
)
from syncpoint.errors import DirectedQueryError, DiscoveryEngineError

from .simulated_network import SimulatedNetwork


MAX_NODES_PER_RESPONSE = 16


class SimulatedDiscoveryEngine(DiscoveryEngine):
    """
    Discovery engine running on a SimulatedNetwork.

    It keeps a routing table of peers it exchanged queries with, and
    updates its own record once enough peers reported the same
    observed address, emitting AddressChanged. Events emitted before
    the feed is taken are dropped.
    """

    def __init__(
        self,
        record: IdentityRecord,
        key: IdentityKey,
        network: SimulatedNetwork,
        observed_ip: str,
        observed_port: int,
    ) -> None:
        self._record = record
        self._key = key
        self._network = network
        self._observed_ip = observed_ip
        self._observed_port = observed_port

        self._routes: Dict[str, Tuple[IdentityRecord, LinkDirection, LinkState]] = {}
        self._discovered: Dict[str, IdentityRecord] = {}
        self._address_votes: Counter[str] = Counter()
        self._feed: asyncio.Queue[DiscoveryEvent | None] | None = None
        self._feed_taken = False
        self._running = False
        self._stopped = False

    @property
    def node_id(self) -> str:
        return self._record.node_id

    @property
    def observed_address(self) -> str:
        return f"{self._observed_ip}:{self._observed_port}"

    @property
    def running(self):
        return self._running

    async def start(self) -> None:
        if self._running or self._stopped:
            raise DiscoveryEngineError(
                f"Engine {self._record.short_id} cannot be started twice"
            )

        if self._record.node_id != self._key.node_id or not verify_record(self._record):
            raise DiscoveryEngineError(
                f"Identity record {self._record.short_id} is not signed by the engine key"
            )

        self._network.attach(self)
        self._running = True

    async def stop(self) -> None:
        if self._stopped:
            return

        self._network.detach(self)
        self._running = False
        self._stopped = True

        if self._feed is not None:
            self._feed.put_nowait(None)

    def local_identity_record(self) -> IdentityRecord:
        return self._record

    async def directed_query(
        self,
        target: IdentityRecord,
        search_key: bytes,
    ) -> List[IdentityRecord]:
        if not self._running:
            raise DirectedQueryError(target.short_id, "engine is not running")

        found, observed_address = await self._network.deliver_query(
            self,
            target,
            search_key,
        )

        self._add_route(target, LinkDirection.OUTGOING)

        for record in found:
            if (
                record.node_id != self.node_id
                and record.node_id not in self._routes
                and record.node_id not in self._discovered
            ):
                self._discovered[record.node_id] = record
                self._emit(PeerDiscovered(node_id=record.node_id))

        self._record_address_vote(observed_address)

        return found

    def handle_query(
        self,
        requester: IdentityRecord,
        search_key: bytes,
    ) -> List[IdentityRecord]:
        self._add_route(requester, LinkDirection.INCOMING)

        return [
            record
            for record, _, _ in self._routes.values()
            if record.node_id != requester.node_id
        ][:MAX_NODES_PER_RESPONSE]

    def event_feed(self) -> AsyncGenerator[DiscoveryEvent, None]:
        if self._feed_taken:
            raise DiscoveryEngineError(
                f"Event feed of {self._record.short_id} was already taken"
            )

        self._feed_taken = True
        self._feed = asyncio.Queue()

        if self._stopped:
            self._feed.put_nowait(None)

        return self._iter_feed(self._feed)

    def routing_table_snapshot(self) -> List[RoutingEntry]:
        return [
            RoutingEntry(
                node_id=record.node_id,
                peer_address=record.address,
                direction=direction,
                state=state,
            )
            for record, direction, state in self._routes.values()
        ]

    async def _iter_feed(
        self,
        feed: asyncio.Queue[DiscoveryEvent | None],
    ) -> AsyncGenerator[DiscoveryEvent, None]:
        while (event := await feed.get()) is not None:
            yield event

    def _add_route(
        self,
        record: IdentityRecord,
        direction: LinkDirection,
    ):
        if record.node_id == self.node_id:
            return

        existing = self._routes.get(record.node_id)
        if existing:
            direction = existing[1]

        self._routes[record.node_id] = (
            record,
            direction,
            LinkState.CONNECTED,
        )
        self._discovered.pop(record.node_id, None)

        if existing is None:
            self._emit(
                SessionEstablished(
                    node_id=record.node_id,
                    address=record.address,
                )
            )

    def _record_address_vote(self, observed_address: str):
        self._address_votes[observed_address] += 1

        if (
            self._address_votes[observed_address] >= self._network.address_vote_threshold
            and observed_address != self._record.address
        ):
            ip, port = observed_address.rsplit(":", maxsplit=1)
            self._record = self._key.update_address(
                self._record,
                ip,
                int(port),
            )

            self._emit(AddressChanged(address=observed_address))

    def _emit(self, event: DiscoveryEvent):
        if self._feed is not None and not self._stopped:
            self._feed.put_nowait(event)
