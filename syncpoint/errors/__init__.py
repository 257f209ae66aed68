from .base import SyncpointError as SyncpointError
from .coordination import (
    BarrierError as BarrierError,
    BarrierReuseError as BarrierReuseError,
    BarrierTimeoutError as BarrierTimeoutError,
    CoordinationError as CoordinationError,
    RendezvousClosedError as RendezvousClosedError,
    RendezvousError as RendezvousError,
    RendezvousTimeoutError as RendezvousTimeoutError,
)
from .discovery import (
    AddressFeedClosedError as AddressFeedClosedError,
    DirectedQueryError as DirectedQueryError,
    DiscoveryEngineError as DiscoveryEngineError,
    WatcherAlreadyResolvedError as WatcherAlreadyResolvedError,
    WatcherAlreadyStartedError as WatcherAlreadyStartedError,
)
from .scenario import (
    ScenarioStateError as ScenarioStateError,
    UnknownScenarioError as UnknownScenarioError,
)
