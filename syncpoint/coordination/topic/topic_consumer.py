import asyncio
from typing import AsyncGenerator

from .topic_status import TopicStatus


class TopicConsumer:
    """
    One subscriber's view of a topic. stop() lets the consumer drain
    what it already received before iteration ends.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[bytes | None] = asyncio.Queue()
        self.status = TopicStatus.OPEN

    @property
    def pending(self):
        return self._queue.qsize()

    async def iter_items(self) -> AsyncGenerator[bytes, None]:
        while self.status != TopicStatus.CLOSED:
            item = await self._queue.get()

            # None marks the end of the topic.
            if item is None:
                break

            yield item

        self.status = TopicStatus.CLOSED

    def put(self, item: bytes):
        if self.status == TopicStatus.OPEN:
            self._queue.put_nowait(item)

    def stop(self):
        if self.status == TopicStatus.OPEN:
            self.status = TopicStatus.DRAINING
            self._queue.put_nowait(None)
