from .instance_info import (
    COORDINATOR_SEQ as COORDINATOR_SEQ,
    InstanceInfo as InstanceInfo,
    InstanceRole as InstanceRole,
)
from .run_event import (
    RunEvent as RunEvent,
    RunEventKind as RunEventKind,
)
from .run_parameters import RunParameters as RunParameters
from .run_result import (
    RunOutcome as RunOutcome,
    RunResult as RunResult,
)
from .scenario_name import ScenarioName as ScenarioName
from .scenario_state import ScenarioState as ScenarioState
