import msgspec


class AddressChanged(msgspec.Struct, frozen=True, tag="address_changed"):
    address: str


class PeerDiscovered(msgspec.Struct, frozen=True, tag="peer_discovered"):
    node_id: str


class SessionEstablished(msgspec.Struct, frozen=True, tag="session_established"):
    node_id: str
    address: str | None = None


DiscoveryEvent = AddressChanged | PeerDiscovered | SessionEstablished
