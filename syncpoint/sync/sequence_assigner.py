from syncpoint.coordination import CoordinationService
from syncpoint.logging import Logger
from syncpoint.logging.syncpoint_logging_models import SequenceDebug

from .states import GROUP_SEQUENCE_STATE, SEQUENCE_STATE


class SequenceAssigner:
    """
    Obtains this instance's ordinal within the run. Values start at 1
    and concurrent callers never share one. Errors from the service
    propagate and abort the run.
    """

    def __init__(self, service: CoordinationService) -> None:
        self._service = service
        self._logger = Logger()

    async def assign(self) -> int:
        seq = await self._service.allocate_sequence(SEQUENCE_STATE)

        await self._logger.log(
            SequenceDebug(
                message=f"Assigned instance sequence {seq}",
                state=SEQUENCE_STATE,
                seq=seq,
            )
        )

        return seq

    async def assign_group(self, group_id: str) -> int:
        state = GROUP_SEQUENCE_STATE.format(group_id=group_id)
        seq = await self._service.allocate_sequence(state)

        await self._logger.log(
            SequenceDebug(
                message=f"Assigned group {group_id} sequence {seq}",
                state=state,
                seq=seq,
            )
        )

        return seq
