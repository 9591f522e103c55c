"""Exception types raised while collapsing populations."""


class PopCollapseError(Exception):
    """Base class for all popcollapse errors."""


class ShapeMismatchError(PopCollapseError, ValueError):
    """Distance matrix is not square or its labels do not match the dataset groups."""


class ReassignmentTableWriteError(PopCollapseError, OSError):
    """The reassignment table could not be written.

    The clustering computed before the write is kept on ``result`` so the
    caller can still use it.
    """

    def __init__(self, path, reason, result=None):
        super().__init__(f"Could not write reassignment table to {path}: {reason}")
        self.path = str(path)
        self.reason = reason
        self.result = result


class InternalInvariantViolation(PopCollapseError, RuntimeError):
    """The cluster resolver broke one of its own guarantees (a bug, not a data problem)."""


__all__ = [
    'PopCollapseError',
    'ShapeMismatchError',
    'ReassignmentTableWriteError',
    'InternalInvariantViolation',
]
