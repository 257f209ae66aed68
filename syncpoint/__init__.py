from .scenarios import (
    RunParameters as RunParameters,
    RunResult as RunResult,
    ScenarioName as ScenarioName,
    run as run,
    run_local as run_local,
)
