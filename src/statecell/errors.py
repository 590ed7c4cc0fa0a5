"""Statecell error hierarchy.

All statecell-specific errors inherit from StatecellError for easy catching.
Each also derives from the builtin it most resembles, so callers that only
know about RuntimeError/ValueError still catch them.
"""


class StatecellError(Exception):
    """Base error for all statecell operations."""


class NoReducerError(StatecellError, RuntimeError):
    """dispatch() called on a Store built without a reducer."""


class DisposedError(StatecellError, RuntimeError):
    """A disposed container or store was asked for a new subscription."""


class OperatorConfigError(StatecellError, ValueError):
    """An operator was built with arguments it cannot work with."""
