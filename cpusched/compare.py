from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .algorithms import run_algorithm
from .errors import EmptyProcessSetError
from .models import Process, ScheduleResult, validate_process_set

logger = logging.getLogger(__name__)

COMPARE_ORDER = ("fcfs", "sjf", "priority", "rr")


@dataclass(frozen=True)
class Comparison:
    """
    Results of every algorithm on one process set, ranked by average waiting
    time (lowest first).
    """

    ranked: Tuple[ScheduleResult, ...]

    @property
    def best(self) -> ScheduleResult:
        return self.ranked[0]

    def __iter__(self):
        return iter(self.ranked)

    def __len__(self) -> int:
        return len(self.ranked)


def compare_all(processes: Sequence[Process], quantum: Optional[int]) -> Comparison:
    """
    Run FCFS, SJF, Priority and Round Robin on the same processes.

    Ranking is a stable sort on average waiting time, so ties keep the order
    FCFS, SJF, Priority, Round Robin.
    """
    if not processes:
        raise EmptyProcessSetError("No processes to compare; enter or load a workload first")
    validate_process_set(processes)

    results = [run_algorithm(name, processes, quantum=quantum) for name in COMPARE_ORDER]
    ranked = tuple(sorted(results, key=lambda r: r.avg_waiting))

    logger.info(
        "comparison ranking: %s",
        ", ".join(f"{r.algorithm}={r.avg_waiting:.2f}" for r in ranked),
    )
    return Comparison(ranked=ranked)
