from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, AsyncIterator, Callable, List

from .identity_key import IdentityKey
from .models import DiscoveryEvent, IdentityRecord, RoutingEntry

if TYPE_CHECKING:
    from syncpoint.scenarios.models import RunParameters


class DiscoveryEngine(ABC):
    """
    Contract of the peer-discovery engine driven by a scenario.

    The engine handle, its routing table and its event feed belong to
    the scenario driver that created it.
    """

    @abstractmethod
    async def start(self) -> None:
        """Start serving. Raises DiscoveryEngineError on failure."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop serving and close the event feed."""
        ...

    @abstractmethod
    def local_identity_record(self) -> IdentityRecord:
        ...

    @abstractmethod
    async def directed_query(
        self,
        target: IdentityRecord,
        search_key: bytes,
    ) -> List[IdentityRecord]:
        """
        Ask `target` for the nodes it knows near `search_key`.
        Raises DirectedQueryError on failure.
        """
        ...

    @abstractmethod
    def event_feed(self) -> AsyncIterator[DiscoveryEvent]:
        """
        Subscribe to engine events. The subscription is registered when
        this is called, not when iteration begins. The feed may be taken
        once, ends when the engine stops, and cannot be restarted.
        """
        ...

    @abstractmethod
    def routing_table_snapshot(self) -> List[RoutingEntry]:
        ...


EngineFactory = Callable[
    [IdentityRecord, IdentityKey, "RunParameters"],
    DiscoveryEngine,
]
