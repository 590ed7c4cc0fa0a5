"""StateContainer — a single value cell that replays its latest value.

New subscribers are called once with the current value, synchronously,
inside subscribe(). Every publish() stores the value and pushes it to each
registered observer in registration order.

Reentrancy: an observer may publish() again from inside its callback. The
nested push runs to completion against its own snapshot of the registry
before the outer push moves on to the next observer.
"""

from __future__ import annotations

import logging
from typing import Generic, TypeVar

from statecell.errors import DisposedError
from statecell.observable import Observable, Observer, ObserverRegistry
from statecell.subscription import Subscription

T = TypeVar("T")

logger = logging.getLogger("statecell.container")


class StateContainer(Observable[T], Generic[T]):
    """Replay-latest value cell."""

    __slots__ = ("_value", "_observers", "_disposed")

    def __init__(self, value: T) -> None:
        self._value = value
        self._observers: ObserverRegistry[T] = ObserverRegistry()
        self._disposed = False

    @property
    def value(self) -> T:
        return self._value

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def subscriber_count(self) -> int:
        return len(self._observers)

    def get(self) -> T:
        return self._value

    def subscribe(self, observer: Observer[T]) -> Subscription:
        """Register observer and immediately replay the current value to it."""
        if self._disposed:
            raise DisposedError(f"{type(self).__name__} used after disposal")
        subscription = self._observers.add(observer)
        try:
            observer(self._value)
        except BaseException:
            subscription.dispose()
            raise
        return subscription

    def publish(self, value: T) -> None:
        """Store value, then push it to every registered observer.

        Ignored after dispose(): the value stays frozen at its last state.
        """
        if self._disposed:
            return
        self._value = value
        self._observers.emit(value)

    def set(self, value: T) -> None:
        """Direct mutation. Same notification contract as publish()."""
        self.publish(value)

    def dispose(self) -> None:
        """Detach all observers and refuse new subscriptions. Idempotent."""
        if self._disposed:
            return
        self._disposed = True
        logger.debug("Disposing %r with %d observers", self, len(self._observers))
        self._observers.dispose_all()

    def __enter__(self) -> StateContainer[T]:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return f"StateContainer({self._value!r})"
