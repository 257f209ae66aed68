"""
The enr-update scenario measures how long the coordinator's discovery
engine takes to learn its own externally visible address.

The coordinator starts self-addressed, watches its engine's event feed
and sends one directed query to every participant. Their replies carry
the address they observed, which eventually updates the coordinator's
identity record. Participants only exchange identities and pass the
barriers.
"""

from typing import Tuple

from syncpoint.discovery import (
    IdentityKey,
    SocketUpdateWatcher,
)
from syncpoint.errors import (
    AddressFeedClosedError,
    DirectedQueryError,
    DiscoveryEngineError,
)
from syncpoint.logging.syncpoint_logging_models import (
    DiscoveryError,
    ScenarioError,
)
from syncpoint.sync import (
    STATE_COMPLETED,
    STATE_COMPLETED_ESTABLISH_CONNECTIONS,
    exclude_self,
)

from .models import (
    InstanceInfo,
    RunOutcome,
    ScenarioName,
    ScenarioState,
)
from .scenario import Scenario


FIND_NODE_SEARCH_KEY = b"\x00"
ADDRESS_NOT_OBSERVED = "address not observed"


class EnrUpdateScenario(Scenario):

    name = ScenarioName.ENR_UPDATE
    TRANSITIONS = {
        ScenarioState.INIT: frozenset({ScenarioState.IDENTITY_EXCHANGED}),
        ScenarioState.IDENTITY_EXCHANGED: frozenset({ScenarioState.CONNECTIONS_ESTABLISHED}),
        ScenarioState.CONNECTIONS_ESTABLISHED: frozenset({ScenarioState.ADDRESS_OBSERVED}),
        ScenarioState.ADDRESS_OBSERVED: frozenset({ScenarioState.COMPLETED}),
    }

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._watcher: SocketUpdateWatcher | None = None
        self._participants: Tuple[InstanceInfo, ...] = ()

    @property
    def participants(self):
        return self._participants

    async def execute(self) -> None:
        await self._exchange_identities()
        await self._establish_connections()
        await self._observe_address()
        await self._complete()

    async def shutdown(self) -> None:
        if self._watcher is not None:
            self._watcher.cancel()

        await super().shutdown()

    async def _exchange_identities(self):
        key = IdentityKey.generate()

        if self.is_coordinator:
            record = key.build_record()

        elif self.params.data_network_ip is None:
            raise DiscoveryEngineError(
                "No data network address is configured for this instance"
            )

        else:
            record = key.build_record(
                ip=self.params.data_network_ip,
                udp_port=self.params.discovery_port,
            )

        engine = await self.start_engine(key, record)

        if self.is_coordinator:
            # Publishing our record and querying peers is what triggers the
            # address update, so the feed must be taken first.
            self._watcher = SocketUpdateWatcher(engine, clock=self._clock)
            self._watcher.start()

        self._participants = await self.exchange_identity()

        await self.transition(ScenarioState.IDENTITY_EXCHANGED)

    async def _establish_connections(self):
        if self.is_coordinator:
            answered = 0

            for peer in exclude_self(self._participants, self.seq):
                try:
                    await self._engine.directed_query(
                        peer.identity_record,
                        FIND_NODE_SEARCH_KEY,
                    )
                    answered += 1

                except DirectedQueryError as err:
                    self.result.diagnostics.append(
                        f"query to instance {peer.seq} failed: {err.reason}"
                    )

                    await self._logger.log(
                        DiscoveryError(
                            message=f"Failed to run FIND_NODE query: {err}",
                            node_id=self._engine.local_identity_record().short_id,
                            target=peer.identity_record.short_id,
                        )
                    )

            if answered == 0 and not self._watcher.resolved:
                # Only query replies can change our address.
                self._watcher.close("No peer answered a query")

        await self._barrier.signal_and_wait(
            STATE_COMPLETED_ESTABLISH_CONNECTIONS,
            self.params.total_instance_count,
        )

        await self.transition(ScenarioState.CONNECTIONS_ESTABLISHED)
        await self.record_message(self.format_routing_table())

    async def _observe_address(self):
        if self._watcher is not None:
            try:
                observation = await self._watcher.result()
                elapsed = observation.observed_at - self._started_at

                self.result.metrics["socket_updated_after_seconds"] = elapsed
                self.result.metrics["socket_address"] = observation.address

                await self.record_message(
                    f"The socket has been updated {elapsed:.3f} seconds after startup."
                )

            except AddressFeedClosedError as err:
                self.result.diagnostics.append(ADDRESS_NOT_OBSERVED)

                await self._logger.log(
                    ScenarioError(
                        message=f"Address not observed: {err}",
                        scenario=self.name.value,
                        seq=self.seq,
                        state=self.state.value,
                    )
                )

        await self.transition(ScenarioState.ADDRESS_OBSERVED)

    async def _complete(self):
        await self._barrier.signal_and_wait(
            STATE_COMPLETED,
            self.params.total_instance_count,
        )

        await self.transition(ScenarioState.COMPLETED)
        self.result.outcome = RunOutcome.SUCCESS
