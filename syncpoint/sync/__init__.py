from .named_barrier import NamedBarrier as NamedBarrier
from .rendezvous import (
    Rendezvous as Rendezvous,
    exclude_self as exclude_self,
)
from .sequence_assigner import SequenceAssigner as SequenceAssigner
from .states import (
    GROUP_SEQUENCE_STATE as GROUP_SEQUENCE_STATE,
    PUBLISH_AND_COLLECT_TOPIC as PUBLISH_AND_COLLECT_TOPIC,
    RUN_EVENTS_TOPIC as RUN_EVENTS_TOPIC,
    SEQUENCE_STATE as SEQUENCE_STATE,
    STATE_COMPLETED as STATE_COMPLETED,
    STATE_COMPLETED_ESTABLISH_CONNECTIONS as STATE_COMPLETED_ESTABLISH_CONNECTIONS,
    STATE_NETWORK_CONFIGURED as STATE_NETWORK_CONFIGURED,
)
