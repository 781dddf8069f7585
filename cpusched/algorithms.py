from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional, Sequence, Tuple

from .errors import UnknownAlgorithmError
from .metrics import derive_result
from .models import IDLE, Process, Running, ScheduleResult, Segment, Slot, Timeline, validate_process_set

logger = logging.getLogger(__name__)

SelectionKey = Callable[[Process], Tuple[int, ...]]


def _emit(timeline: List[Segment], slot: Slot, start_time: int, end_time: int) -> None:
    if end_time > start_time:
        timeline.append(Segment(slot=slot, start_time=start_time, end_time=end_time))


def _arrival_order(p: Process) -> Tuple[int, int]:
    return (p.arrival_time, p.pid)


def schedule_fcfs(processes: Sequence[Process], quantum: Optional[int] = None) -> Timeline:
    """
    First-Come First-Serve (non-preemptive) scheduling.

    Processes run in (arrival, pid) order; the CPU idles until the next
    arrival whenever it runs out of work.
    """
    time = 0
    timeline: List[Segment] = []

    for p in sorted(processes, key=_arrival_order):
        if time < p.arrival_time:
            _emit(timeline, IDLE, time, p.arrival_time)
            time = p.arrival_time

        _emit(timeline, Running(p.pid), time, time + p.burst_time)
        time += p.burst_time

    logger.debug("fcfs: %d processes, %d segments", len(processes), len(timeline))
    return Timeline.of(timeline)


def _schedule_by_selection(processes: Sequence[Process], key: SelectionKey, name: str) -> Timeline:
    """
    Non-preemptive dispatch loop shared by SJF and Priority.

    At each decision point, among processes that have arrived and not yet run,
    pick the one with the smallest ``key``. If nothing is ready, idle until the
    earliest pending arrival.
    """
    pending: List[Process] = sorted(processes, key=_arrival_order)

    time = 0
    timeline: List[Segment] = []

    while pending:
        ready = [p for p in pending if p.arrival_time <= time]

        if not ready:
            # pending is arrival-sorted, so the head is the next arrival.
            next_arrival = pending[0].arrival_time
            _emit(timeline, IDLE, time, next_arrival)
            time = next_arrival
            continue

        p = min(ready, key=key)
        _emit(timeline, Running(p.pid), time, time + p.burst_time)
        time += p.burst_time
        pending.remove(p)

    logger.debug("%s: %d processes, %d segments", name, len(processes), len(timeline))
    return Timeline.of(timeline)


def shortest_burst_key(p: Process) -> Tuple[int, int, int]:
    return (p.burst_time, p.arrival_time, p.pid)


def highest_priority_key(p: Process) -> Tuple[int, int, int]:
    # Lower numeric priority value means higher priority.
    return (p.priority, p.arrival_time, p.pid)


def schedule_sjf(processes: Sequence[Process], quantum: Optional[int] = None) -> Timeline:
    """
    Shortest Job First (non-preemptive).

    Ties on burst time go to the earlier arrival, then the lower pid.
    """
    return _schedule_by_selection(processes, shortest_burst_key, "sjf")


def schedule_priority(processes: Sequence[Process], quantum: Optional[int] = None) -> Timeline:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority. Among ready
    processes, choose the one with the smallest priority; break ties
    by earlier arrival time, then PID.
    """
    return _schedule_by_selection(processes, highest_priority_key, "priority")


def effective_quantum(quantum: Optional[int]) -> int:
    """
    Return the quantum Round Robin will actually use.

    Non-positive values are raised to 1 so that every dispatch makes progress.
    """
    if quantum is None:
        raise ValueError("Round Robin requires a quantum (use --quantum)")
    if quantum <= 0:
        logger.warning("Round Robin quantum %d is not positive; using 1", quantum)
        return 1
    return quantum


def schedule_rr(processes: Sequence[Process], quantum: Optional[int] = None) -> Timeline:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes that arrive while a slice is running are queued ahead of the
    preempted process. Every dispatch produces its own segment, even when the
    same process runs in consecutive quanta.
    """
    q = effective_quantum(quantum)

    arrivals = sorted(processes, key=_arrival_order)
    remaining: Dict[int, int] = {p.pid: p.burst_time for p in processes}

    time = 0
    timeline: List[Segment] = []
    ready: Deque[int] = deque()
    next_idx = 0  # first process in `arrivals` not yet enqueued
    finished = 0

    def enqueue_arrivals(up_to: int) -> None:
        nonlocal next_idx
        while next_idx < len(arrivals) and arrivals[next_idx].arrival_time <= up_to:
            ready.append(arrivals[next_idx].pid)
            next_idx += 1

    if arrivals:
        _emit(timeline, IDLE, time, arrivals[0].arrival_time)
        time = max(time, arrivals[0].arrival_time)
        enqueue_arrivals(time)

    while finished < len(arrivals):
        if not ready:
            # Queue drained before everyone arrived: idle until the next arrival.
            next_arrival = arrivals[next_idx].arrival_time
            _emit(timeline, IDLE, time, next_arrival)
            time = max(time, next_arrival)
            enqueue_arrivals(time)
            continue

        pid = ready.popleft()
        run_time = min(q, remaining[pid])
        _emit(timeline, Running(pid), time, time + run_time)
        time += run_time
        remaining[pid] -= run_time

        enqueue_arrivals(time)

        if remaining[pid] > 0:
            ready.append(pid)
        else:
            finished += 1

    logger.debug("rr(q=%d): %d processes, %d segments", q, len(processes), len(timeline))
    return Timeline.of(timeline)


ALGORITHMS: Dict[str, Callable[..., Timeline]] = {
    "fcfs": schedule_fcfs,
    "sjf": schedule_sjf,
    "priority": schedule_priority,
    "rr": schedule_rr,
}

_LABELS = {
    "fcfs": "FCFS",
    "sjf": "SJF (Non-Preemptive)",
    "priority": "Priority (Non-Preemptive)",
}


def algorithm_label(name: str, quantum: Optional[int] = None) -> str:
    if name == "rr":
        return f"Round Robin (q={quantum})"
    return _LABELS[name]


def run_algorithm(name: str, processes: Sequence[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Run the named algorithm and derive its result. The quantum is only used
    by round-robin.
    """
    name = name.lower()
    if name not in ALGORITHMS:
        raise UnknownAlgorithmError(
            f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})"
        )
    validate_process_set(processes)

    if name == "rr":
        q: Optional[int] = effective_quantum(quantum)
    else:
        q = None

    timeline = ALGORITHMS[name](processes, quantum=q)
    return derive_result(processes, timeline, algorithm=algorithm_label(name, q), quantum=q)
