import asyncio
from collections import defaultdict
from typing import AsyncGenerator, Dict, List, Tuple

from syncpoint.errors import CoordinationError

from .coordination_service import CoordinationService
from .topic import TopicProvider


class InMemoryCoordinationService(CoordinationService):
    """
    Coordination service backed by in-process state. Used directly by
    instances sharing one event loop (tests, single-host runs), and by
    the TCP coordination server as its per-run store.
    """

    def __init__(self, run_id: str = "default") -> None:
        self.run_id = run_id
        self._counters: Dict[str, int] = defaultdict(int)
        self._waiters: Dict[str, List[Tuple[int, asyncio.Future]]] = defaultdict(list)
        self._topics: Dict[str, TopicProvider] = {}
        self._closed = False

    @property
    def closed(self):
        return self._closed

    def count(self, state: str) -> int:
        return self._counters.get(state, 0)

    def waiting(self, state: str) -> int:
        return len(self._waiters.get(state, []))

    async def signal_entry(self, state: str) -> int:
        self._check_open()

        self._counters[state] += 1
        seq = self._counters[state]

        self._release(state)

        return seq

    async def barrier(self, state: str, target: int) -> None:
        self._check_open()

        if self._counters[state] >= target:
            return

        waiter = asyncio.get_running_loop().create_future()
        entry = (target, waiter)
        self._waiters[state].append(entry)

        try:
            await waiter

        finally:
            if entry in self._waiters[state]:
                self._waiters[state].remove(entry)

    async def publish(self, topic: str, payload: bytes) -> int:
        self._check_open()

        return self._get_topic(topic).publish(payload)

    async def subscribe(self, topic: str) -> AsyncGenerator[bytes, None]:
        self._check_open()

        provider = self._get_topic(topic)
        consumer = provider.subscribe()

        try:
            async for item in consumer.iter_items():
                yield item

        finally:
            provider.unsubscribe(consumer)

    async def close(self) -> None:
        if self._closed:
            return

        self._closed = True

        for provider in self._topics.values():
            provider.close()

        for state, waiters in self._waiters.items():
            for _, waiter in waiters:
                if not waiter.done():
                    waiter.set_exception(
                        CoordinationError(
                            f"Run {self.run_id} closed while waiting on {state}"
                        )
                    )

    def _get_topic(self, topic: str) -> TopicProvider:
        if (provider := self._topics.get(topic)) is None:
            provider = TopicProvider(topic)
            self._topics[topic] = provider

        return provider

    def _release(self, state: str):
        count = self._counters[state]

        for target, waiter in self._waiters[state]:
            if target <= count and not waiter.done():
                waiter.set_result(count)

    def _check_open(self):
        if self._closed:
            raise CoordinationError(
                f"Coordination service for run {self.run_id} is closed"
            )
