"""
Tests for SocketUpdateWatcher against a scripted engine.
"""

import asyncio

import pytest

from syncpoint.discovery import (
    AddressChanged,
    IdentityKey,
    PeerDiscovered,
    SocketUpdateWatcher,
)
from syncpoint.errors import (
    AddressFeedClosedError,
    WatcherAlreadyResolvedError,
    WatcherAlreadyStartedError,
)

from tests.unit.scenarios.mocks import ScriptedDiscoveryEngine, create_engine


class BrokenFeedEngine(ScriptedDiscoveryEngine):

    def event_feed(self):
        return self._broken_feed()

    async def _broken_feed(self):
        raise ConnectionResetError("event channel dropped")
        yield


class TestSocketUpdateWatcher:
    """Test first-change reporting and feed shutdown."""

    @pytest.mark.asyncio
    async def test_reports_first_address_change(self):
        engine = create_engine()
        watcher = SocketUpdateWatcher(engine)
        watcher.start()

        engine.emit(PeerDiscovered(node_id="ab" * 32))
        engine.emit(AddressChanged(address="192.0.2.10:9000"))
        engine.emit(AddressChanged(address="192.0.2.11:9000"))

        observation = await asyncio.wait_for(watcher.result(), timeout=1)

        assert observation.address == "192.0.2.10:9000"
        assert watcher.resolved

    @pytest.mark.asyncio
    async def test_later_changes_do_not_replace_result(self):
        engine = create_engine()
        watcher = SocketUpdateWatcher(engine)
        watcher.start()

        engine.emit(AddressChanged(address="192.0.2.10:9000"))
        first = await asyncio.wait_for(watcher.result(), timeout=1)

        engine.emit(AddressChanged(address="192.0.2.11:9000"))
        await asyncio.sleep(0.01)

        assert await watcher.result() == first

    @pytest.mark.asyncio
    async def test_observation_is_timestamped_on_arrival(self):
        """observed_at should be taken when the event arrives, not when read."""
        ticks = iter([10.0, 99.0])

        engine = create_engine()
        watcher = SocketUpdateWatcher(engine, clock=lambda: next(ticks))
        watcher.start()

        engine.emit(AddressChanged(address="192.0.2.10:9000"))
        await asyncio.sleep(0.01)

        observation = await watcher.result()

        assert observation.observed_at == 10.0

    @pytest.mark.asyncio
    async def test_closed_feed_fails_result(self):
        engine = create_engine()
        watcher = SocketUpdateWatcher(engine)
        watcher.start()

        engine.emit(PeerDiscovered(node_id="ab" * 32))
        await engine.stop()

        with pytest.raises(AddressFeedClosedError):
            await asyncio.wait_for(watcher.result(), timeout=1)

    @pytest.mark.asyncio
    async def test_change_before_start_is_missed(self):
        """The watcher only sees events emitted after it took the feed."""
        engine = create_engine()
        engine.emit(AddressChanged(address="192.0.2.10:9000"))

        watcher = SocketUpdateWatcher(engine)
        watcher.start()
        engine.close_feed()

        with pytest.raises(AddressFeedClosedError):
            await asyncio.wait_for(watcher.result(), timeout=1)

    @pytest.mark.asyncio
    async def test_start_twice_raises(self):
        watcher = SocketUpdateWatcher(create_engine())
        watcher.start()

        with pytest.raises(WatcherAlreadyStartedError):
            watcher.start()

        watcher.cancel()

    @pytest.mark.asyncio
    async def test_result_before_start_raises(self):
        watcher = SocketUpdateWatcher(create_engine())

        with pytest.raises(RuntimeError):
            await watcher.result()

    @pytest.mark.asyncio
    async def test_result_is_delivered_at_most_once(self):
        engine = create_engine()
        watcher = SocketUpdateWatcher(engine)
        watcher.start()

        engine.emit(AddressChanged(address="192.0.2.10:9000"))
        observation = await asyncio.wait_for(watcher.result(), timeout=1)

        with pytest.raises(WatcherAlreadyResolvedError):
            watcher._deliver(observation)

    @pytest.mark.asyncio
    async def test_cancel_stops_pending_watch(self):
        watcher = SocketUpdateWatcher(create_engine())
        watcher.start()

        watcher.cancel()

        with pytest.raises(asyncio.CancelledError):
            await watcher.result()

    @pytest.mark.asyncio
    async def test_failing_feed_fails_result(self):
        """An error raised by the feed should end the watch like a close."""
        key = IdentityKey.generate()
        engine = BrokenFeedEngine(key.build_record(), key)

        watcher = SocketUpdateWatcher(engine)
        watcher.start()

        with pytest.raises(AddressFeedClosedError) as error:
            await asyncio.wait_for(watcher.result(), timeout=1)

        assert isinstance(error.value.__cause__, ConnectionResetError)
        assert watcher.resolved

    @pytest.mark.asyncio
    async def test_close_fails_pending_result(self):
        watcher = SocketUpdateWatcher(create_engine())
        watcher.start()

        watcher.close("No peer answered a query")

        with pytest.raises(AddressFeedClosedError, match="No peer answered"):
            await asyncio.wait_for(watcher.result(), timeout=1)

    @pytest.mark.asyncio
    async def test_close_keeps_delivered_result(self):
        engine = create_engine()
        watcher = SocketUpdateWatcher(engine)
        watcher.start()

        engine.emit(AddressChanged(address="192.0.2.10:9000"))
        first = await asyncio.wait_for(watcher.result(), timeout=1)

        watcher.close("No peer answered a query")

        assert await watcher.result() == first
