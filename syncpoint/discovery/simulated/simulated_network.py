from __future__ import annotations

import asyncio
import itertools
from typing import TYPE_CHECKING, Dict, Set

from syncpoint.discovery.identity_key import IdentityKey
from syncpoint.discovery.models import IdentityRecord
from syncpoint.errors import DirectedQueryError, DiscoveryEngineError

if TYPE_CHECKING:
    from syncpoint.scenarios.models import RunParameters

    from .simulated_engine import SimulatedDiscoveryEngine


class SimulatedNetwork:
    """
    In-process stand-in for the data network shared by simulated
    discovery engines. It routes directed queries by node id, applies a
    fixed one-way latency, and reports the address it observed for the
    sender the way a real peer would in its reply.
    """

    def __init__(
        self,
        latency: float = 0.0,
        address_vote_threshold: int = 1,
        subnet: str = "10.0.0",
    ) -> None:
        self.latency = latency
        self.address_vote_threshold = address_vote_threshold
        self._subnet = subnet
        self._hosts = itertools.count(1)
        self._engines: Dict[str, SimulatedDiscoveryEngine] = {}
        self._unreachable: Set[str] = set()

    @property
    def size(self):
        return len(self._engines)

    def allocate_ip(self) -> str:
        return f"{self._subnet}.{next(self._hosts)}"

    def engine_factory(self):
        from .simulated_engine import SimulatedDiscoveryEngine

        def create_engine(
            record: IdentityRecord,
            key: IdentityKey,
            params: RunParameters,
        ) -> SimulatedDiscoveryEngine:
            return SimulatedDiscoveryEngine(
                record,
                key,
                self,
                observed_ip=params.data_network_ip or self.allocate_ip(),
                observed_port=params.discovery_port,
            )

        return create_engine

    def make_unreachable(self, node_id: str):
        self._unreachable.add(node_id)

    def make_reachable(self, node_id: str):
        self._unreachable.discard(node_id)

    def attach(self, engine: SimulatedDiscoveryEngine):
        if engine.node_id in self._engines:
            raise DiscoveryEngineError(
                f"Node {engine.node_id[:16]} is already attached to the network"
            )

        self._engines[engine.node_id] = engine

    def detach(self, engine: SimulatedDiscoveryEngine):
        self._engines.pop(engine.node_id, None)

    async def deliver_query(
        self,
        sender: SimulatedDiscoveryEngine,
        target: IdentityRecord,
        search_key: bytes,
    ):
        if target.address is None:
            raise DirectedQueryError(
                target.short_id,
                "target record has no address",
            )

        await asyncio.sleep(self.latency)

        peer = self._engines.get(target.node_id)
        if (
            peer is None
            or target.node_id in self._unreachable
            or sender.node_id in self._unreachable
        ):
            raise DirectedQueryError(target.short_id, "request timed out")

        found = peer.handle_query(
            sender.local_identity_record(),
            search_key,
        )

        await asyncio.sleep(self.latency)

        return found, sender.observed_address
