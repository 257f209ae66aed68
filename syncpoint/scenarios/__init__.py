from .enr_update import EnrUpdateScenario as EnrUpdateScenario
from .find_node import FindNodeScenario as FindNodeScenario
from .models import (
    InstanceInfo as InstanceInfo,
    InstanceRole as InstanceRole,
    RunEvent as RunEvent,
    RunOutcome as RunOutcome,
    RunParameters as RunParameters,
    RunResult as RunResult,
    ScenarioName as ScenarioName,
    ScenarioState as ScenarioState,
)
from .runner import (
    SCENARIOS as SCENARIOS,
    NetworkConfigurator as NetworkConfigurator,
    run as run,
    run_local as run_local,
)
from .scenario import Scenario as Scenario
