import asyncio

import pytest

from syncpoint.coordination.topic import TopicProvider, TopicStatus


async def drain(consumer):
    return [item async for item in consumer.iter_items()]


class TestTopicProvider:
    """Test history replay and shutdown of a single topic."""

    def test_provider_starts_ready(self):
        provider = TopicProvider("topic")

        assert provider.status == TopicStatus.OPEN
        assert provider.size == 0

    @pytest.mark.asyncio
    async def test_subscribe_after_close_replays_history_then_ends(self):
        provider = TopicProvider("topic")
        provider.publish(b"first")
        provider.close()

        consumer = provider.subscribe()

        assert await asyncio.wait_for(drain(consumer), timeout=1) == [b"first"]
        assert consumer.status == TopicStatus.CLOSED
        assert provider.subscriptions_count == 0

    @pytest.mark.asyncio
    async def test_unsubscribed_consumer_stops_receiving(self):
        provider = TopicProvider("topic")
        consumer = provider.subscribe()

        provider.publish(b"first")
        provider.unsubscribe(consumer)
        provider.publish(b"second")

        assert consumer.pending == 1
        assert provider.size == 2

    @pytest.mark.asyncio
    async def test_stopped_consumer_ignores_new_items(self):
        provider = TopicProvider("topic")
        consumer = provider.subscribe()

        consumer.stop()
        consumer.put(b"late")

        assert await asyncio.wait_for(drain(consumer), timeout=1) == []
