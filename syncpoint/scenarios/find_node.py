"""
The find-node scenario bootstraps every participant off the coordinator:
each participant sends one directed query to the coordinator's record,
then every instance reports the size of its routing table.
"""

from syncpoint.discovery import IdentityKey
from syncpoint.errors import DirectedQueryError, DiscoveryEngineError
from syncpoint.logging.syncpoint_logging_models import DiscoveryError
from syncpoint.sync import (
    STATE_COMPLETED,
    STATE_COMPLETED_ESTABLISH_CONNECTIONS,
)

from .models import (
    RunOutcome,
    ScenarioName,
    ScenarioState,
)
from .scenario import Scenario


BOOTSTRAP_SEARCH_KEY = b"\x00"


class FindNodeScenario(Scenario):

    name = ScenarioName.FIND_NODE
    TRANSITIONS = {
        ScenarioState.INIT: frozenset({ScenarioState.IDENTITY_EXCHANGED}),
        ScenarioState.IDENTITY_EXCHANGED: frozenset({ScenarioState.CONNECTIONS_ESTABLISHED}),
        ScenarioState.CONNECTIONS_ESTABLISHED: frozenset({ScenarioState.COMPLETED}),
    }

    async def execute(self) -> None:
        if self.params.data_network_ip is None:
            raise DiscoveryEngineError(
                "No data network address is configured for this instance"
            )

        key = IdentityKey.generate()
        record = key.build_record(
            ip=self.params.data_network_ip,
            udp_port=self.params.discovery_port,
        )

        await self.start_engine(key, record)

        participants = await self.exchange_identity()
        await self.transition(ScenarioState.IDENTITY_EXCHANGED)

        if not self.is_coordinator:
            bootstrap = next(
                (info for info in participants if info.is_coordinator),
                None,
            )

            if bootstrap is None:
                self.result.diagnostics.append("no bootstrap node in the run")

            else:
                try:
                    await self._engine.directed_query(
                        bootstrap.identity_record,
                        BOOTSTRAP_SEARCH_KEY,
                    )

                except DirectedQueryError as err:
                    self.result.diagnostics.append(
                        f"query to bootstrap node failed: {err.reason}"
                    )

                    await self._logger.log(
                        DiscoveryError(
                            message=f"Failed to run FIND_NODE query: {err}",
                            node_id=record.short_id,
                            target=bootstrap.identity_record.short_id,
                        )
                    )

        await self._barrier.signal_and_wait(
            STATE_COMPLETED_ESTABLISH_CONNECTIONS,
            self.params.total_instance_count,
        )
        await self.transition(ScenarioState.CONNECTIONS_ESTABLISHED)

        self.result.metrics["routing_table_size"] = len(
            self._engine.routing_table_snapshot()
        )
        await self.record_message(self.format_routing_table())

        await self._barrier.signal_and_wait(
            STATE_COMPLETED,
            self.params.total_instance_count,
        )
        await self.transition(ScenarioState.COMPLETED)

        self.result.outcome = RunOutcome.SUCCESS
