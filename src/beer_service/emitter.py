"""Slow, cancellable emission of a sequence."""

import asyncio
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


class SlowEmitter(Generic[T]):
    """Async iterator that yields one item per ``delay`` seconds.

    An item is only produced when the consumer asks for the next one. After
    ``cancel()`` no further item is produced and ``completed`` stays false;
    ``completed`` is set once the consumer asks past the last item.
    """

    def __init__(self, items: Sequence[T], delay: float = 1.0):
        self._items = tuple(items)
        self._delay = delay
        self._index = 0
        self.cancelled = False
        self.completed = False

    @property
    def produced(self) -> int:
        return self._index

    def cancel(self) -> None:
        self.cancelled = True

    def __aiter__(self) -> "SlowEmitter[T]":
        return self

    async def __anext__(self) -> T:
        if self.cancelled or self.completed:
            raise StopAsyncIteration

        if self._index >= len(self._items):
            self.completed = True
            raise StopAsyncIteration

        await asyncio.sleep(self._delay)

        # cancelled while waiting
        if self.cancelled:
            raise StopAsyncIteration

        item = self._items[self._index]
        self._index += 1
        return item
