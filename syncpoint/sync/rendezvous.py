import asyncio
from typing import Generic, Iterable, List, Protocol, Tuple, TypeVar

import msgspec

from syncpoint.coordination import CoordinationService
from syncpoint.errors import (
    RendezvousClosedError,
    RendezvousError,
    RendezvousTimeoutError,
)
from syncpoint.logging import Logger
from syncpoint.logging.syncpoint_logging_models import RendezvousDebug


T = TypeVar("T", bound=msgspec.Struct)


class Sequenced(Protocol):
    seq: int


S = TypeVar("S", bound=Sequenced)


def exclude_self(records: Iterable[S], seq: int) -> Tuple[S, ...]:
    return tuple(
        record for record in records if record.seq != seq
    )


class Rendezvous(Generic[T]):
    """
    Publish one record on a topic, then collect exactly `expected_count`
    records from it (including our own). Arrival order is whatever the
    topic delivers; records are neither filtered nor deduplicated.
    """

    def __init__(
        self,
        service: CoordinationService,
        record_type: type[T],
        default_timeout: float | None = None,
    ) -> None:
        self._service = service
        self._record_type = record_type
        self._default_timeout = default_timeout
        self._encoder = msgspec.json.Encoder()
        self._decoder = msgspec.json.Decoder(record_type)
        self._logger = Logger()

    async def publish_and_collect(
        self,
        topic: str,
        record: T,
        expected_count: int,
        timeout: float | None = None,
    ) -> Tuple[T, ...]:
        if timeout is None:
            timeout = self._default_timeout

        await self._service.publish(
            topic,
            self._encoder.encode(record),
        )

        records: List[T] = []

        if expected_count < 1:
            return ()

        try:
            await asyncio.wait_for(
                self._collect(topic, records, expected_count),
                timeout=timeout,
            )

        except asyncio.TimeoutError as err:
            raise RendezvousTimeoutError(
                topic,
                expected_count,
                len(records),
                timeout,
            ) from err

        if len(records) < expected_count:
            raise RendezvousClosedError(
                topic,
                expected_count,
                len(records),
            )

        await self._logger.log(
            RendezvousDebug(
                message="Collected all records",
                topic=topic,
                expected=expected_count,
                received=len(records),
            )
        )

        return tuple(records)

    async def _collect(
        self,
        topic: str,
        records: List[T],
        expected_count: int,
    ):
        subscription = self._service.subscribe(topic)

        try:
            async for item in subscription:
                try:
                    records.append(
                        self._decoder.decode(item)
                    )

                except msgspec.DecodeError as err:
                    raise RendezvousError(
                        f"Malformed record on topic {topic}: {err}"
                    ) from err

                if len(records) >= expected_count:
                    return

        finally:
            await subscription.aclose()
