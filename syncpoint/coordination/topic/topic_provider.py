from typing import List

from .topic_consumer import TopicConsumer
from .topic_status import TopicStatus


class TopicProvider:
    """
    An ephemeral, append-only topic. New subscribers first receive
    every payload published so far, then live payloads, until the
    topic is closed.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._history: List[bytes] = []
        self._consumers: List[TopicConsumer] = []
        self.status = TopicStatus.OPEN

    @property
    def subscriptions_count(self):
        return len(self._consumers)

    @property
    def size(self):
        return len(self._history)

    def subscribe(self) -> TopicConsumer:
        consumer = TopicConsumer()

        for item in self._history:
            consumer.put(item)

        if self.status == TopicStatus.CLOSED:
            consumer.stop()
            return consumer

        self._consumers.append(consumer)

        return consumer

    def unsubscribe(self, consumer: TopicConsumer):
        if consumer in self._consumers:
            self._consumers.remove(consumer)

    def publish(self, item: bytes) -> int:
        self._history.append(item)

        for consumer in self._consumers:
            consumer.put(item)

        return len(self._history)

    def close(self):
        self.status = TopicStatus.CLOSED

        for consumer in self._consumers:
            consumer.stop()

        self._consumers.clear()
