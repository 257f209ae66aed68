from .discovery_engine import (
    DiscoveryEngine as DiscoveryEngine,
    EngineFactory as EngineFactory,
)
from .identity_key import (
    IdentityKey as IdentityKey,
    verify_record as verify_record,
)
from .models import (
    AddressChanged as AddressChanged,
    DiscoveryEvent as DiscoveryEvent,
    IdentityRecord as IdentityRecord,
    LinkDirection as LinkDirection,
    LinkState as LinkState,
    PeerDiscovered as PeerDiscovered,
    RoutingEntry as RoutingEntry,
    SessionEstablished as SessionEstablished,
)
from .simulated import (
    SimulatedDiscoveryEngine as SimulatedDiscoveryEngine,
    SimulatedNetwork as SimulatedNetwork,
)
from .socket_update_watcher import (
    AddressObservation as AddressObservation,
    SocketUpdateWatcher as SocketUpdateWatcher,
)
