"""Store — a StateContainer driven by an optional reducer.

With a reducer, state changes go through dispatch(event): the reducer
computes the next state and the container publishes it, even if it equals
the previous one. Compose distinct_until_changed() downstream to drop
repeats.

Without a reducer, dispatch() always raises NoReducerError. State is then
changed directly through the container, typically from a small wrapper that
holds the store and exposes domain methods:

    class Counter:
        def __init__(self) -> None:
            self.store = Store(0)

        def increment(self) -> None:
            cell = self.store.container
            cell.set(cell.get() + 1)
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from statecell.container import StateContainer
from statecell.errors import NoReducerError
from statecell.observable import Observable, Observer
from statecell.subscription import Subscription

S = TypeVar("S")
E = TypeVar("E")

Reducer = Callable[[S, E], S]


class Store(Observable[S], Generic[S, E]):
    """Reducer-driven state container."""

    def __init__(self, initial_state: S, reducer: Reducer[S, E] | None = None) -> None:
        self._container: StateContainer[S] = StateContainer(initial_state)
        self._reducer = reducer

    @property
    def state(self) -> S:
        return self._container.value

    @property
    def container(self) -> StateContainer[S]:
        """The underlying cell, for direct-mutation wrappers."""
        return self._container

    @property
    def has_reducer(self) -> bool:
        return self._reducer is not None

    @property
    def disposed(self) -> bool:
        return self._container.disposed

    def dispatch(self, event: E) -> E:
        """Run the reducer on event and publish the result. Returns event.

        If the reducer raises, the exception propagates and state is
        left as it was.
        """
        if self._reducer is None:
            raise NoReducerError(
                f"{type(self).__name__} has no reducer; mutate store.container directly"
            )
        next_state = self._reducer(self._container.value, event)
        self._container.publish(next_state)
        return event

    def subscribe(self, observer: Observer[S]) -> Subscription:
        return self._container.subscribe(observer)

    def dispose(self) -> None:
        self._container.dispose()

    def __enter__(self) -> Store[S, E]:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def __repr__(self) -> str:
        mode = "reducer" if self._reducer is not None else "direct"
        return f"Store({self._container.value!r}, {mode})"
