from abc import ABC, abstractmethod
from typing import AsyncIterator


class CoordinationService(ABC):
    """
    Contract of the per-run coordination service.

    Every operation is scoped to a single run. State counters, topics
    and barriers live in the service, never in an individual process.
    """

    run_id: str

    @abstractmethod
    async def signal_entry(self, state: str) -> int:
        """
        Increment the counter for `state` and return its new value.
        Concurrent callers always receive disjoint values starting at 1.
        """
        ...

    @abstractmethod
    async def barrier(self, state: str, target: int) -> None:
        """Suspend until the counter for `state` reaches `target`."""
        ...

    @abstractmethod
    async def publish(self, topic: str, payload: bytes) -> int:
        """Append `payload` to `topic` and return its position (from 1)."""
        ...

    @abstractmethod
    def subscribe(self, topic: str) -> AsyncIterator[bytes]:
        """
        Iterate `topic` from its first payload. The iterator ends when
        the service closes the topic.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    async def allocate_sequence(self, state: str = "get_instance_seq") -> int:
        return await self.signal_entry(state)

    async def signal_and_wait(self, state: str, target: int) -> int:
        seq = await self.signal_entry(state)
        await self.barrier(state, target)

        return seq

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
