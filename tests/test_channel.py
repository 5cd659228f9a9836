"""Tests for ReplyChannel."""

import anyio
import pytest

from h1conn import ChannelClosed, ChannelFull, ReplyChannel


pytestmark = pytest.mark.anyio


class TestReplyChannel:
    """Test bounded FIFO behaviour."""

    async def test_fifo_order(self):
        channel = ReplyChannel(capacity=3)
        for item in ("a", "b", "c"):
            channel.push(item)

        assert len(channel) == 3
        assert [await channel.pop_eventually() for _ in range(3)] == ["a", "b", "c"]
        assert len(channel) == 0

    async def test_has_room(self):
        channel = ReplyChannel(capacity=2)
        assert channel.has_room()
        channel.push(1)
        assert channel.has_room()
        channel.push(2)
        assert not channel.has_room()

    async def test_push_past_capacity_raises(self):
        channel = ReplyChannel(capacity=1)
        channel.push("first")
        with pytest.raises(ChannelFull):
            channel.push("second")

    async def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            ReplyChannel(capacity=0)

    async def test_pop_waits_for_push(self):
        channel = ReplyChannel(capacity=1)
        received = []

        async def consumer():
            received.append(await channel.pop_eventually())

        async with anyio.create_task_group() as tg:
            tg.start_soon(consumer)
            await anyio.sleep(0.05)
            assert received == []
            channel.push("late")

        assert received == ["late"]

    async def test_push_eventually_waits_for_room(self):
        channel = ReplyChannel(capacity=1)
        channel.push("first")
        pushed = anyio.Event()

        async def producer():
            await channel.push_eventually("second")
            pushed.set()

        async with anyio.create_task_group() as tg:
            tg.start_soon(producer)
            await anyio.sleep(0.05)
            assert not pushed.is_set()

            assert await channel.pop_eventually() == "first"
            await pushed.wait()

        assert await channel.pop_eventually() == "second"

    async def test_not_full_returns_immediately_with_room(self):
        channel = ReplyChannel(capacity=1)
        with anyio.fail_after(1):
            await channel.not_full()

    async def test_close_wakes_blocked_producer(self):
        channel = ReplyChannel(capacity=1)
        channel.push("stuck")
        errors = []

        async def producer():
            try:
                await channel.not_full()
            except ChannelClosed as e:
                errors.append(e)

        async with anyio.create_task_group() as tg:
            tg.start_soon(producer)
            await anyio.sleep(0.05)
            channel.close()

        assert len(errors) == 1
        assert channel.closed
        with pytest.raises(ChannelClosed):
            channel.push("more")

    async def test_queued_items_survive_close(self):
        channel = ReplyChannel(capacity=2)
        channel.push("kept")
        channel.close()
        assert await channel.pop_eventually() == "kept"
