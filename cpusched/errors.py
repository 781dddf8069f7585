from __future__ import annotations


class SchedulerError(Exception):
    """Base class for all errors raised by the simulator."""


class InvalidProcessError(SchedulerError, ValueError):
    """A process or process set does not satisfy the input contract."""


class EmptyProcessSetError(SchedulerError, ValueError):
    """An operation that needs at least one process received none."""


class UnknownAlgorithmError(SchedulerError, ValueError):
    pass


class InvalidTimelineError(SchedulerError, ValueError):
    """Segments are empty, unordered or overlapping."""
