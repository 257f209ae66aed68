import msgspec


class IdentityRecord(msgspec.Struct, frozen=True, kw_only=True):
    """
    Signed, self-describing record binding a node's public key to the
    address peers should use to reach it. A record without an ip is
    self-addressed: peers can answer it but cannot contact it first.
    """

    node_id: str
    public_key: str
    signature: str
    record_seq: int = 1
    ip: str | None = None
    udp_port: int | None = None
    capabilities: tuple[str, ...] = ()

    @property
    def address(self) -> str | None:
        if self.ip is None or self.udp_port is None:
            return None

        return f"{self.ip}:{self.udp_port}"

    @property
    def short_id(self) -> str:
        return self.node_id[:16]

    def signable(self) -> bytes:
        return msgspec.json.encode(
            [
                self.record_seq,
                self.public_key,
                self.ip,
                self.udp_port,
                list(self.capabilities),
            ]
        )
