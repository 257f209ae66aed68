import asyncio
import time
from typing import Awaitable, Callable, Dict, List

import msgspec

from syncpoint.coordination import CoordinationService
from syncpoint.discovery import EngineFactory, SimulatedNetwork
from syncpoint.errors import (
    BarrierError,
    CoordinationError,
    DiscoveryEngineError,
    RendezvousError,
)
from syncpoint.logging import Logger
from syncpoint.logging.syncpoint_logging_models import (
    RunError,
    RunFatal,
    RunInfo,
)
from syncpoint.sync import (
    RUN_EVENTS_TOPIC,
    STATE_NETWORK_CONFIGURED,
    NamedBarrier,
    SequenceAssigner,
)

from .enr_update import EnrUpdateScenario
from .find_node import FindNodeScenario
from .models import (
    RunEvent,
    RunOutcome,
    RunParameters,
    RunResult,
    ScenarioName,
)
from .scenario import Scenario


NetworkConfigurator = Callable[[RunParameters], Awaitable[None]]


SCENARIOS: Dict[ScenarioName, type[Scenario]] = {
    ScenarioName.ENR_UPDATE: EnrUpdateScenario,
    ScenarioName.FIND_NODE: FindNodeScenario,
}


FATAL_ERRORS = (
    CoordinationError,
    RendezvousError,
    BarrierError,
    DiscoveryEngineError,
)


async def run(
    params: RunParameters,
    coordination: CoordinationService,
    engine_factory: EngineFactory,
    network_configurator: NetworkConfigurator | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> RunResult:
    logger = Logger()
    log_context = {
        "run_id": params.run_id,
        "scenario": params.scenario_name.value,
        "instance_count": params.total_instance_count,
    }

    await logger.log(
        RunInfo(
            message="Starting run",
            **log_context,
        )
    )

    seq: int | None = None
    scenario: Scenario | None = None

    try:
        if network_configurator is not None:
            await network_configurator(params)

        await NamedBarrier(
            coordination,
            default_timeout=params.barrier_timeout,
        ).signal_and_wait(
            STATE_NETWORK_CONFIGURED,
            params.total_instance_count,
        )

        seq = await SequenceAssigner(coordination).assign()

        scenario = SCENARIOS[params.scenario_name](
            params,
            seq,
            coordination,
            engine_factory,
            clock=clock,
        )

        result = await scenario.run()

    except FATAL_ERRORS as err:
        result = scenario.result if scenario else RunResult(
            scenario=params.scenario_name.value,
            seq=seq,
        )
        result.outcome = RunOutcome.FAILURE
        result.error = str(err)

        await logger.log(
            RunFatal(
                message=f"Run failed: {err}",
                **log_context,
            )
        )

        await _report(coordination, params, seq, "failure", str(err), logger)

        return result

    for diagnostic in result.diagnostics:
        await logger.log(
            RunError(
                message=diagnostic,
                **log_context,
            )
        )

    await _report(coordination, params, seq, "success", None, logger)

    await logger.log(
        RunInfo(
            message=f"Run completed as instance {seq}",
            **log_context,
        )
    )

    return result


async def run_local(
    params: RunParameters,
    coordination: CoordinationService,
    network: SimulatedNetwork,
    network_configurator: NetworkConfigurator | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> List[RunResult]:
    """
    Run every instance of the run concurrently in this process, each
    with its own address on the simulated network.
    """
    engine_factory = network.engine_factory()

    return list(
        await asyncio.gather(*[
            run(
                params.model_copy(
                    update={"data_network_ip": network.allocate_ip()},
                ),
                coordination,
                engine_factory,
                network_configurator=network_configurator,
                clock=clock,
            ) for _ in range(params.total_instance_count)
        ])
    )


async def _report(
    coordination: CoordinationService,
    params: RunParameters,
    seq: int | None,
    kind: str,
    message: str | None,
    logger: Logger,
):
    try:
        await coordination.publish(
            RUN_EVENTS_TOPIC,
            msgspec.json.encode(
                RunEvent(
                    run_id=params.run_id,
                    seq=seq,
                    kind=kind,
                    message=message,
                )
            ),
        )

    except CoordinationError as err:
        await logger.log(
            RunError(
                message=f"Could not report {kind}: {err}",
                run_id=params.run_id,
                scenario=params.scenario_name.value,
                instance_count=params.total_instance_count,
            )
        )
