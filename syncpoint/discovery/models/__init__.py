from .discovery_event import (
    AddressChanged as AddressChanged,
    DiscoveryEvent as DiscoveryEvent,
    PeerDiscovered as PeerDiscovered,
    SessionEstablished as SessionEstablished,
)
from .identity_record import IdentityRecord as IdentityRecord
from .routing_entry import (
    LinkDirection as LinkDirection,
    LinkState as LinkState,
    RoutingEntry as RoutingEntry,
)
