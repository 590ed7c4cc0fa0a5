"""Periodic schedulers for time-based operators.

sample() needs something that calls it back every `interval` seconds. That
capability is pluggable:

- ThreadingScheduler: real wall-clock ticks on daemon threading.Timer threads.
- ManualScheduler: a virtual clock that only moves when advance() is called.
  Use it in tests instead of sleeping.

A process-wide default is used when an operator is not given a scheduler
explicitly. Replace it once at startup (or in a test fixture):

    statecell.set_default_scheduler(ManualScheduler())
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Protocol

from statecell.errors import OperatorConfigError
from statecell.subscription import Subscription

logger = logging.getLogger("statecell.scheduler")

Action = Callable[[], None]


class Scheduler(Protocol):
    def schedule_periodic(self, interval: float, action: Action) -> Subscription:
        """Call action every interval seconds until the result is disposed."""
        ...


def as_seconds(interval: float | timedelta) -> float:
    """Normalize an interval given as seconds or a timedelta."""
    if isinstance(interval, timedelta):
        return interval.total_seconds()
    return float(interval)


def _check_interval(interval: float) -> None:
    if interval <= 0:
        raise OperatorConfigError(f"periodic interval must be positive, got {interval!r}")


class ThreadingScheduler:
    """Wall-clock scheduler backed by re-arming daemon timers.

    Each tick runs on its own timer thread. The next timer is armed only
    after the action returns, so ticks never overlap; a slow action pushes
    later ticks back. A tick that has already started when the
    subscription is disposed runs to completion, but nothing fires after it.
    """

    def schedule_periodic(self, interval: float, action: Action) -> Subscription:
        _check_interval(interval)
        lock = threading.Lock()
        stopped = threading.Event()
        timer_ref: list[threading.Timer | None] = [None]

        def _arm() -> None:
            t = threading.Timer(interval, _fire)
            t.daemon = True
            timer_ref[0] = t
            t.start()

        def _fire() -> None:
            if stopped.is_set():
                return
            try:
                action()
            finally:
                with lock:
                    if not stopped.is_set():
                        _arm()

        def _cancel() -> None:
            with lock:
                stopped.set()
                if timer_ref[0] is not None:
                    timer_ref[0].cancel()
                    timer_ref[0] = None
            logger.debug("Cancelled periodic timer (%.3fs)", interval)

        with lock:
            _arm()
        logger.debug("Started periodic timer (%.3fs)", interval)
        return Subscription(_cancel)


@dataclass(slots=True)
class _PeriodicJob:
    due: float
    interval: float
    action: Action
    seq: int


class ManualScheduler:
    """Virtual-time scheduler. Nothing fires until advance() is called."""

    def __init__(self) -> None:
        self._now = 0.0
        self._jobs: list[_PeriodicJob] = []
        self._seq = itertools.count()

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return len(self._jobs)

    def schedule_periodic(self, interval: float, action: Action) -> Subscription:
        _check_interval(interval)
        job = _PeriodicJob(self._now + interval, interval, action, next(self._seq))
        self._jobs.append(job)

        def _cancel() -> None:
            try:
                self._jobs.remove(job)
            except ValueError:
                pass

        return Subscription(_cancel)

    def advance(self, seconds: float | timedelta) -> None:
        """Move the clock forward, firing every tick that falls due, in order."""
        target = self._now + as_seconds(seconds)
        # Tolerate float drift from repeated interval additions.
        limit = target + 1e-9
        while True:
            due = [job for job in self._jobs if job.due <= limit]
            if not due:
                break
            job = min(due, key=lambda j: (j.due, j.seq))
            self._now = job.due
            job.due += job.interval
            job.action()
        self._now = target


_default_scheduler: Scheduler | None = None


def set_default_scheduler(scheduler: Scheduler | None) -> None:
    """Replace the scheduler used when none is passed. None restores the default."""
    global _default_scheduler
    _default_scheduler = scheduler


def get_default_scheduler() -> Scheduler:
    global _default_scheduler
    if _default_scheduler is None:
        _default_scheduler = ThreadingScheduler()
    return _default_scheduler
