import time
from typing import Callable, Dict, FrozenSet, List, Tuple

import msgspec

from syncpoint.coordination import CoordinationService
from syncpoint.discovery import (
    DiscoveryEngine,
    EngineFactory,
    IdentityKey,
    IdentityRecord,
)
from syncpoint.errors import DiscoveryEngineError, ScenarioStateError
from syncpoint.logging import Logger
from syncpoint.logging.syncpoint_logging_models import (
    ScenarioDebug,
    ScenarioInfo,
)
from syncpoint.sync import (
    PUBLISH_AND_COLLECT_TOPIC,
    RUN_EVENTS_TOPIC,
    NamedBarrier,
    Rendezvous,
)

from .models import (
    InstanceInfo,
    InstanceRole,
    RunEvent,
    RunParameters,
    RunResult,
    ScenarioName,
    ScenarioState,
)


class Scenario:
    """
    Base state machine shared by every scenario. Subclasses declare the
    states they pass through in TRANSITIONS and implement execute().
    """

    name: ScenarioName
    TRANSITIONS: Dict[ScenarioState, FrozenSet[ScenarioState]] = {}

    def __init__(
        self,
        params: RunParameters,
        seq: int,
        coordination: CoordinationService,
        engine_factory: EngineFactory,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.params = params
        self.seq = seq
        self.role = InstanceRole.for_seq(seq)
        self.state = ScenarioState.INIT
        self.history: List[ScenarioState] = [ScenarioState.INIT]

        self._coordination = coordination
        self._engine_factory = engine_factory
        self._clock = clock
        self._engine: DiscoveryEngine | None = None
        self._started_at: float | None = None

        self._barrier = NamedBarrier(
            coordination,
            default_timeout=params.barrier_timeout,
        )
        self._rendezvous = Rendezvous(
            coordination,
            InstanceInfo,
            default_timeout=params.barrier_timeout,
        )
        self._event_encoder = msgspec.json.Encoder()
        self._logger = Logger()

        self.result = RunResult(
            scenario=self.name.value,
            seq=seq,
        )

    @property
    def is_coordinator(self) -> bool:
        return self.role == InstanceRole.COORDINATOR

    @property
    def engine(self) -> DiscoveryEngine | None:
        return self._engine

    async def run(self) -> RunResult:
        try:
            await self.execute()

        finally:
            await self.shutdown()

        return self.result

    async def execute(self) -> None:
        raise NotImplementedError(
            f"Scenario {self.name.value} does not implement execute()"
        )

    async def shutdown(self) -> None:
        if self._engine is not None:
            await self._engine.stop()

    async def transition(self, state: ScenarioState):
        allowed = self.TRANSITIONS.get(self.state, frozenset())
        if state not in allowed:
            raise ScenarioStateError(self.state.value, state.value)

        self.state = state
        self.history.append(state)

        await self._logger.log(
            ScenarioDebug(
                message=f"Entered {state.value}",
                scenario=self.name.value,
                seq=self.seq,
                state=state.value,
            )
        )

    async def start_engine(
        self,
        key: IdentityKey,
        record: IdentityRecord,
    ) -> DiscoveryEngine:
        await self._logger.log(
            ScenarioInfo(
                message=f"Identity record: {record.node_id} at {record.address or 'self'}",
                scenario=self.name.value,
                seq=self.seq,
                state=self.state.value,
            )
        )

        try:
            self._engine = self._engine_factory(record, key, self.params)

        except Exception as err:
            raise DiscoveryEngineError(
                f"Could not construct discovery engine: {err}"
            ) from err

        try:
            await self._engine.start()

        except DiscoveryEngineError:
            raise

        except Exception as err:
            raise DiscoveryEngineError(
                f"Could not start discovery engine: {err}"
            ) from err

        self._started_at = self._clock()

        return self._engine

    async def exchange_identity(self) -> Tuple[InstanceInfo, ...]:
        info = InstanceInfo.create(
            self.seq,
            self._engine.local_identity_record(),
        )

        return await self._rendezvous.publish_and_collect(
            PUBLISH_AND_COLLECT_TOPIC,
            info,
            self.params.total_instance_count,
        )

    async def record_message(self, message: str):
        await self._logger.log(
            ScenarioInfo(
                message=message,
                scenario=self.name.value,
                seq=self.seq,
                state=self.state.value,
            )
        )

        await self._coordination.publish(
            RUN_EVENTS_TOPIC,
            self._event_encoder.encode(
                RunEvent(
                    run_id=self.params.run_id,
                    seq=self.seq,
                    kind="message",
                    message=message,
                )
            ),
        )

    def format_routing_table(self) -> str:
        return "peers: [{}]".format(
            ", ".join(
                f"({entry.peer_address}, {entry.direction.value}, {entry.state.value})"
                for entry in self._engine.routing_table_snapshot()
            )
        )
