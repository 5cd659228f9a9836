"""Bounded FIFO channel carrying finished responses from reader to writer."""

from collections import deque
from typing import Generic

import anyio
from typing_extensions import TypeVar


T = TypeVar('T', default=object)


class ChannelClosed(Exception):
    """Raised when pushing to (or waiting for room in) a closed channel."""
    pass


class ChannelFull(Exception):
    """Raised by push() when the caller did not reserve room first."""
    pass


class ReplyChannel(Generic[T]):
    """
    Fixed-capacity FIFO queue with event-driven waits.

    The producer reserves room with `not_full()` before doing expensive work
    and then calls `push()`, which never waits. The consumer drains it with
    `pop_eventually()`. `close()` is called by a consumer that will never pop
    again, so the producer cannot block forever on a full channel.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._items: deque[T] = deque()
        self._closed = False
        # Created lazily: AnyIO events need a running event loop.
        self._changed: anyio.Event | None = None

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._items)

    def has_room(self) -> bool:
        return len(self._items) < self._capacity

    def _event(self) -> anyio.Event:
        if self._changed is None:
            self._changed = anyio.Event()
        return self._changed

    def _notify(self) -> None:
        # Wake every waiter; each re-checks its own condition.
        if self._changed is not None:
            self._changed.set()
            self._changed = None

    async def not_full(self) -> None:
        """Wait until the channel has room for one more item."""
        while True:
            if self._closed:
                raise ChannelClosed("reply channel closed")
            if self.has_room():
                return
            await self._event().wait()

    def push(self, item: T) -> None:
        """Enqueue without waiting. Room must have been reserved."""
        if self._closed:
            raise ChannelClosed("reply channel closed")
        if not self.has_room():
            raise ChannelFull(f"reply channel full ({self._capacity} items)")
        self._items.append(item)
        self._notify()

    async def push_eventually(self, item: T) -> None:
        await self.not_full()
        self.push(item)

    async def pop_eventually(self) -> T:
        """Dequeue the oldest item, waiting while the channel is empty."""
        while not self._items:
            await self._event().wait()
        item = self._items.popleft()
        self._notify()
        return item

    def close(self) -> None:
        self._closed = True
        self._notify()
