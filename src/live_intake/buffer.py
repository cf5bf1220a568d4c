"""Live trade intake: pending trade buffer."""

import threading
from collections import deque
from typing import Deque, Generic, Iterable, List, TypeVar

T = TypeVar("T")


class PendingTradeBuffer(Generic[T]):
    """Unbounded FIFO shared by many producers and one draining consumer.

    ``drain`` swaps the whole queue out under the lock, so a concurrent
    ``append`` lands either in the drained batch or in the next one,
    never in both and never nowhere.
    """

    def __init__(self) -> None:
        self._items: Deque[T] = deque()
        self._lock = threading.Lock()

    def append(self, item: T) -> None:
        with self._lock:
            self._items.append(item)

    def drain(self) -> List[T]:
        """Remove and return everything pending, oldest first."""
        with self._lock:
            if not self._items:
                return []
            drained, self._items = self._items, deque()
        return list(drained)

    def requeue(self, items: Iterable[T]) -> None:
        """Put a drained batch back at the head, preserving its order."""
        items = list(items)
        with self._lock:
            self._items.extendleft(reversed(items))

    def snapshot(self) -> List[T]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
