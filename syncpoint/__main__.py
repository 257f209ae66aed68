import asyncio
import importlib
import sys

from syncpoint.coordination import (
    CoordinationClient,
    InMemoryCoordinationService,
)
from syncpoint.discovery import EngineFactory, SimulatedNetwork
from syncpoint.env import Env, load_env
from syncpoint.errors import (
    CoordinationError,
    DiscoveryEngineError,
    UnknownScenarioError,
)
from syncpoint.logging import Logger, LoggingConfig
from syncpoint.logging.syncpoint_logging_models import RunFatal
from syncpoint.scenarios import RunParameters, run, run_local


def load_engine_factory(path: str | None) -> EngineFactory:
    """
    Resolve a "package.module:callable" path to an engine factory.
    """
    if path is None or ":" not in path:
        raise DiscoveryEngineError(
            "SYNCPOINT_ENGINE_FACTORY must be set to module:callable in remote mode"
        )

    module_name, attribute = path.split(":", maxsplit=1)

    try:
        module = importlib.import_module(module_name)
        return getattr(module, attribute)

    except (ImportError, AttributeError) as err:
        raise DiscoveryEngineError(
            f"Could not load engine factory {path}: {err}"
        ) from err


def simulated_latency(params: RunParameters) -> float:
    # Latency is given in milliseconds.
    return float(params.params.get("latency", "0")) / 1000


async def run_instances(env: Env) -> int:
    logger = Logger()

    try:
        return await _run_instances(env, logger)

    finally:
        await logger.close()


async def _run_instances(env: Env, logger: Logger) -> int:
    try:
        params = RunParameters.from_env(env)

    except UnknownScenarioError as err:
        await logger.log(
            RunFatal(
                message=str(err),
                run_id=env.TEST_RUN,
                scenario=env.TEST_CASE,
                instance_count=env.TEST_INSTANCE_COUNT,
            )
        )

        return 1

    if env.SYNCPOINT_MODE == "local":
        async with InMemoryCoordinationService(params.run_id) as coordination:
            results = await run_local(
                params,
                coordination,
                SimulatedNetwork(latency=simulated_latency(params)),
            )

        return max(result.exit_code for result in results)

    try:
        engine_factory = load_engine_factory(env.SYNCPOINT_ENGINE_FACTORY)

    except DiscoveryEngineError as err:
        await logger.log(
            RunFatal(
                message=str(err),
                run_id=params.run_id,
                scenario=params.scenario_name.value,
                instance_count=params.total_instance_count,
            )
        )

        return 1

    coordination = CoordinationClient(
        env.SYNC_SERVICE_HOST,
        env.SYNC_SERVICE_PORT,
        run_id=params.run_id,
        connect_retries=env.SYNCPOINT_CONNECT_RETRIES,
        connect_retry_interval=env.get_connect_retry_interval(),
    )

    try:
        await coordination.connect()

    except CoordinationError as err:
        await logger.log(
            RunFatal(
                message=str(err),
                run_id=params.run_id,
                scenario=params.scenario_name.value,
                instance_count=params.total_instance_count,
            )
        )

        return 1

    try:
        result = await run(
            params,
            coordination,
            engine_factory,
        )

    finally:
        await coordination.close()

    return result.exit_code


def main():
    env = load_env(Env)

    logging_config = LoggingConfig()
    logging_config.update(
        log_directory=env.SYNCPOINT_LOGS_DIRECTORY,
        log_level=env.SYNCPOINT_LOG_LEVEL,
        log_output="stderr",
    )

    sys.exit(asyncio.run(run_instances(env)))


if __name__ == "__main__":
    main()
