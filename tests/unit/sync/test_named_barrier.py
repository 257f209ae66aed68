"""
Tests for NamedBarrier.

Liveness is tested by letting a barrier wait for a bounded time and
checking it is still pending, never by waiting for it to hang.
"""

import asyncio

import pytest

from syncpoint.coordination import InMemoryCoordinationService
from syncpoint.errors import BarrierReuseError, BarrierTimeoutError
from syncpoint.sync import NamedBarrier


class TestNamedBarrier:
    """Test barrier release and independence of names."""

    @pytest.mark.asyncio
    async def test_all_instances_pass_once_count_reached(
        self,
        coordination: InMemoryCoordinationService,
    ):
        entries = await asyncio.wait_for(
            asyncio.gather(*[
                NamedBarrier(coordination).signal_and_wait("ready", 4)
                for _ in range(4)
            ]),
            timeout=1,
        )

        assert sorted(entries) == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_fewer_than_expected_never_pass(
        self,
        coordination: InMemoryCoordinationService,
    ):
        """With N-1 of N instances signalled, nobody should pass."""
        waiters = [
            asyncio.create_task(
                NamedBarrier(coordination).signal_and_wait("ready", 3)
            )
            for _ in range(2)
        ]

        await asyncio.sleep(0.1)

        assert not any(waiter.done() for waiter in waiters)

        for waiter in waiters:
            waiter.cancel()

        await asyncio.gather(*waiters, return_exceptions=True)

    @pytest.mark.asyncio
    async def test_last_instance_releases_earlier_ones(
        self,
        coordination: InMemoryCoordinationService,
    ):
        early = [
            asyncio.create_task(
                NamedBarrier(coordination).signal_and_wait("ready", 3)
            )
            for _ in range(2)
        ]

        await asyncio.sleep(0.05)
        assert not any(waiter.done() for waiter in early)

        await asyncio.wait_for(
            NamedBarrier(coordination).signal_and_wait("ready", 3),
            timeout=1,
        )
        await asyncio.wait_for(asyncio.gather(*early), timeout=1)

    @pytest.mark.asyncio
    async def test_names_count_independently(
        self,
        coordination: InMemoryCoordinationService,
    ):
        """Entries on one name should never count toward another."""
        await coordination.signal_entry("other")
        await coordination.signal_entry("other")

        waiter = asyncio.create_task(
            NamedBarrier(coordination).signal_and_wait("ready", 2)
        )
        await asyncio.sleep(0.05)

        assert not waiter.done()

        waiter.cancel()
        await asyncio.gather(waiter, return_exceptions=True)

    @pytest.mark.asyncio
    async def test_work_before_barrier_happens_before_work_after(
        self,
        coordination: InMemoryCoordinationService,
    ):
        """Every instance's pre-barrier work should precede any post-barrier work."""
        events = []

        async def instance(index: int):
            await asyncio.sleep(0.01 * index)
            events.append(("before", index))

            await NamedBarrier(coordination).signal_and_wait("phase", 4)
            events.append(("after", index))

        await asyncio.wait_for(
            asyncio.gather(*[instance(index) for index in range(4)]),
            timeout=2,
        )

        phases = [phase for phase, _ in events]
        assert phases == ["before"] * 4 + ["after"] * 4

    @pytest.mark.asyncio
    async def test_timeout_raises_barrier_timeout(
        self,
        coordination: InMemoryCoordinationService,
    ):
        barrier = NamedBarrier(coordination)

        with pytest.raises(BarrierTimeoutError) as err:
            await barrier.signal_and_wait("ready", 2, timeout=0.05)

        assert err.value.state == "ready"
        assert err.value.target == 2

    @pytest.mark.asyncio
    async def test_default_timeout_applies(
        self,
        coordination: InMemoryCoordinationService,
    ):
        barrier = NamedBarrier(coordination, default_timeout=0.05)

        with pytest.raises(BarrierTimeoutError):
            await barrier.signal_and_wait("ready", 2)

    @pytest.mark.asyncio
    async def test_reusing_a_name_is_rejected(
        self,
        coordination: InMemoryCoordinationService,
    ):
        """Signalling the same name twice from one instance should fail."""
        barrier = NamedBarrier(coordination)

        await barrier.signal_and_wait("ready", 1)

        with pytest.raises(BarrierReuseError):
            await barrier.signal_and_wait("ready", 1)

        assert barrier.signalled == frozenset({"ready"})
        assert coordination.count("ready") == 1
