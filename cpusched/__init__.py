"""
CPU scheduling simulator.

Runs FCFS, non-preemptive SJF, non-preemptive Priority and Round Robin over a
fixed process set, derives per-process metrics from the resulting timeline
and ranks the algorithms by average waiting time.
"""

from .algorithms import (
    ALGORITHMS,
    run_algorithm,
    schedule_fcfs,
    schedule_priority,
    schedule_rr,
    schedule_sjf,
)
from .compare import Comparison, compare_all
from .errors import (
    EmptyProcessSetError,
    InvalidProcessError,
    InvalidTimelineError,
    SchedulerError,
    UnknownAlgorithmError,
)
from .metrics import derive_result
from .models import IDLE, Idle, Process, Running, ScheduleResult, Segment, Timeline

__all__ = [
    "ALGORITHMS",
    "Comparison",
    "EmptyProcessSetError",
    "IDLE",
    "Idle",
    "InvalidProcessError",
    "InvalidTimelineError",
    "Process",
    "Running",
    "ScheduleResult",
    "SchedulerError",
    "Segment",
    "Timeline",
    "UnknownAlgorithmError",
    "compare_all",
    "derive_result",
    "run_algorithm",
    "schedule_fcfs",
    "schedule_priority",
    "schedule_rr",
    "schedule_sjf",
]
