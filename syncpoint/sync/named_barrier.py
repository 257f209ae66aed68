import asyncio
from typing import Set

from syncpoint.coordination import CoordinationService
from syncpoint.errors import BarrierReuseError, BarrierTimeoutError
from syncpoint.logging import Logger
from syncpoint.logging.syncpoint_logging_models import BarrierDebug


class NamedBarrier:
    """
    Announce a state, then wait until `expected_count` instances have
    announced it. Distinct names count independently. Passing every
    instance through the same sequence of names orders the phases of
    a run.
    """

    def __init__(
        self,
        service: CoordinationService,
        default_timeout: float | None = None,
    ) -> None:
        self._service = service
        self._default_timeout = default_timeout
        self._signalled: Set[str] = set()
        self._logger = Logger()

    @property
    def signalled(self):
        return frozenset(self._signalled)

    async def signal_and_wait(
        self,
        name: str,
        expected_count: int,
        timeout: float | None = None,
    ) -> int:
        if name in self._signalled:
            raise BarrierReuseError(name)

        if timeout is None:
            timeout = self._default_timeout

        self._signalled.add(name)
        seq = await self._service.signal_entry(name)

        await self._logger.log(
            BarrierDebug(
                message=f"Signalled entry {seq} - waiting for {expected_count}",
                barrier=name,
                target=expected_count,
            )
        )

        try:
            await asyncio.wait_for(
                self._service.barrier(name, expected_count),
                timeout=timeout,
            )

        except asyncio.TimeoutError as err:
            raise BarrierTimeoutError(name, expected_count, timeout) from err

        await self._logger.log(
            BarrierDebug(
                message="Barrier satisfied",
                barrier=name,
                target=expected_count,
            )
        )

        return seq
