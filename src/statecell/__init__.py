"""statecell: a replay-latest state container with composable stream operators."""

from importlib.metadata import version as _version

__version__ = _version("statecell")

from statecell.errors import (
    StatecellError,
    NoReducerError,
    DisposedError,
    OperatorConfigError,
)
from statecell.subscription import Subscription
from statecell.observable import Observable, Observer
from statecell.container import StateContainer
from statecell.store import Store, Reducer
from statecell.operators import (
    Stage,
    Filter,
    Map,
    Skip,
    Take,
    DistinctUntilChanged,
    Scan,
    StartWith,
    Tap,
)
from statecell.combining import Buffer, Sample, CombineLatest, Merge
from statecell.scheduler import (
    Scheduler,
    ThreadingScheduler,
    ManualScheduler,
    set_default_scheduler,
    get_default_scheduler,
)
# textual bridge is opt-in: import statecell.textual explicitly

__all__ = [
    "StatecellError",
    "NoReducerError",
    "DisposedError",
    "OperatorConfigError",
    "Subscription",
    "Observable",
    "Observer",
    "StateContainer",
    "Store",
    "Reducer",
    "Stage",
    "Filter",
    "Map",
    "Skip",
    "Take",
    "DistinctUntilChanged",
    "Scan",
    "StartWith",
    "Tap",
    "Buffer",
    "Sample",
    "CombineLatest",
    "Merge",
    "Scheduler",
    "ThreadingScheduler",
    "ManualScheduler",
    "set_default_scheduler",
    "get_default_scheduler",
]
