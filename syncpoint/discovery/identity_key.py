"""
secp256k1 node keys and identity-record signing.

Node ids are the hex SHA-256 digest of the compressed public key.
Records are signed with ECDSA-SHA256 over `IdentityRecord.signable()`.
"""

import hashlib

import msgspec
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .models import IdentityRecord


DEFAULT_CAPABILITIES = ("discv5",)


class IdentityKey:

    __slots__ = ("_private_key", "_public_key_bytes", "_node_id")

    def __init__(self, private_key: ec.EllipticCurvePrivateKey) -> None:
        self._private_key = private_key
        self._public_key_bytes = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.CompressedPoint,
        )
        self._node_id = hashlib.sha256(self._public_key_bytes).hexdigest()

    @classmethod
    def generate(cls) -> "IdentityKey":
        return cls(ec.generate_private_key(ec.SECP256K1()))

    @property
    def node_id(self) -> str:
        return self._node_id

    @property
    def public_key_hex(self) -> str:
        return self._public_key_bytes.hex()

    def sign(self, data: bytes) -> bytes:
        return self._private_key.sign(
            data,
            ec.ECDSA(hashes.SHA256()),
        )

    def build_record(
        self,
        ip: str | None = None,
        udp_port: int | None = None,
        record_seq: int = 1,
        capabilities: tuple[str, ...] = DEFAULT_CAPABILITIES,
    ) -> IdentityRecord:
        unsigned = IdentityRecord(
            node_id=self._node_id,
            public_key=self.public_key_hex,
            signature="",
            record_seq=record_seq,
            ip=ip,
            udp_port=udp_port,
            capabilities=tuple(capabilities),
        )

        return msgspec.structs.replace(
            unsigned,
            signature=self.sign(unsigned.signable()).hex(),
        )

    def update_address(
        self,
        record: IdentityRecord,
        ip: str,
        udp_port: int,
    ) -> IdentityRecord:
        return self.build_record(
            ip=ip,
            udp_port=udp_port,
            record_seq=record.record_seq + 1,
            capabilities=record.capabilities,
        )


def verify_record(record: IdentityRecord) -> bool:
    try:
        public_key_bytes = bytes.fromhex(record.public_key)
        signature = bytes.fromhex(record.signature)

    except ValueError:
        return False

    if hashlib.sha256(public_key_bytes).hexdigest() != record.node_id:
        return False

    try:
        public_key = ec.EllipticCurvePublicKey.from_encoded_point(
            ec.SECP256K1(),
            public_key_bytes,
        )
        public_key.verify(
            signature,
            record.signable(),
            ec.ECDSA(hashes.SHA256()),
        )

    except (InvalidSignature, ValueError):
        return False

    return True
