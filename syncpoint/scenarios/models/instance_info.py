from enum import Enum

import msgspec

from syncpoint.discovery.models import IdentityRecord


COORDINATOR_SEQ = 1


class InstanceRole(str, Enum):
    COORDINATOR = "coordinator"
    PARTICIPANT = "participant"

    @classmethod
    def for_seq(cls, seq: int) -> "InstanceRole":
        return cls.COORDINATOR if seq == COORDINATOR_SEQ else cls.PARTICIPANT


class InstanceInfo(msgspec.Struct, frozen=True, kw_only=True):
    # Sequence number of this instance within the run.
    seq: int
    identity_record: IdentityRecord
    role: InstanceRole

    @classmethod
    def create(cls, seq: int, identity_record: IdentityRecord) -> "InstanceInfo":
        return cls(
            seq=seq,
            identity_record=identity_record,
            role=InstanceRole.for_seq(seq),
        )

    @property
    def is_coordinator(self) -> bool:
        return self.role == InstanceRole.COORDINATOR
