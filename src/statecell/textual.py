"""Textual integration for statecell. Opt-in — requires textual.

bind() subscribes a widget-updating effect to any Observable (a Store, a
container, or a derived stage) and takes care of three things the effect
should not have to:

- skipping pushes while the app is not running or is paused for widget
  replacement,
- marshaling pushes that arrive off the app's thread (sample() ticks run
  on timer threads) through app.call_from_thread,
- ignoring NoMatches raised by widget queries against a tree in flux.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, TypeVar

from textual.css.query import NoMatches

from statecell.observable import Observable
from statecell.subscription import Subscription

T = TypeVar("T")

logger = logging.getLogger("statecell.textual")

# Keyed by id(app) so several apps can coexist in tests.
_paused_apps: set[int] = set()


@contextmanager
def pause(app):
    """Suspend bound effects during widget replacement."""
    key = id(app)
    _paused_apps.add(key)
    try:
        yield
    finally:
        _paused_apps.discard(key)


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running and id(app) not in _paused_apps


def bind(app, source: Observable[T], effect: Callable[[T], Any]) -> Subscription:
    """Subscribe effect to source, guarded for use against app's widgets.

    The current value is replayed immediately if source replays (Store,
    StateContainer), subject to the same guards as later pushes.
    """
    _main = threading.get_ident()

    def _guarded(value: T) -> None:
        if not is_safe(app):
            logger.debug("Skipped push to %r: app not safe", effect)
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe, value)
        else:
            _safe(value)

    def _safe(value: T) -> None:
        try:
            effect(value)
        except NoMatches:
            logger.debug("Skipped push to %r: widget not mounted", effect)

    return source.subscribe(_guarded)
