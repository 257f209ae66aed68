from enum import Enum


class ScenarioState(str, Enum):
    INIT = "init"
    IDENTITY_EXCHANGED = "identity_exchanged"
    CONNECTIONS_ESTABLISHED = "connections_established"
    ADDRESS_OBSERVED = "address_observed"
    COMPLETED = "completed"
