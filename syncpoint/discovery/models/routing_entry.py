from enum import Enum

import msgspec


class LinkDirection(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class LinkState(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class RoutingEntry(msgspec.Struct, frozen=True):
    node_id: str
    peer_address: str | None
    direction: LinkDirection
    state: LinkState
