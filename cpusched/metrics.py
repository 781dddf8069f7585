from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from .models import Process, ProcessMetrics, ScheduleResult, SystemMetrics, Timeline

logger = logging.getLogger(__name__)


def derive_result(
    processes: Sequence[Process],
    timeline: Timeline,
    algorithm: str,
    quantum: Optional[int] = None,
) -> ScheduleResult:
    """
    Derive per-process and average metrics from a finished timeline.

    Completion time is the latest end of any segment belonging to the process,
    so preempted processes with several segments are handled the same way as
    non-preemptive ones. Turnaround and waiting are clamped at zero; a clamp
    means the timeline does not match the process set and is logged.
    """
    completion: Dict[int, int] = {}
    first_start: Dict[int, int] = {}
    for seg in timeline:
        if seg.pid is None:
            continue
        completion[seg.pid] = max(completion.get(seg.pid, 0), seg.end_time)
        if seg.pid not in first_start:
            first_start[seg.pid] = seg.start_time

    rows: List[ProcessMetrics] = []
    for p in sorted(processes, key=lambda x: x.pid):
        completion_time = completion.get(p.pid, 0)
        turnaround_time = completion_time - p.arrival_time
        waiting_time = turnaround_time - p.burst_time
        if turnaround_time < 0 or waiting_time < 0:
            logger.warning(
                "P%d: negative metrics (turnaround=%d, waiting=%d) in %s; clamping to 0",
                p.pid,
                turnaround_time,
                waiting_time,
                algorithm,
            )
            turnaround_time = max(0, turnaround_time)
            waiting_time = max(0, waiting_time)

        start_time = first_start.get(p.pid, p.arrival_time)
        rows.append(
            ProcessMetrics(
                pid=p.pid,
                arrival_time=p.arrival_time,
                burst_time=p.burst_time,
                priority=p.priority,
                start_time=start_time,
                completion_time=completion_time,
                turnaround_time=turnaround_time,
                waiting_time=waiting_time,
                response_time=max(0, start_time - p.arrival_time),
            )
        )

    summary = summarize_process_metrics(rows)
    return ScheduleResult(
        algorithm=algorithm,
        quantum=quantum,
        timeline=timeline,
        processes=tuple(rows),
        avg_waiting=summary["avg_waiting"],
        avg_turnaround=summary["avg_turnaround"],
        avg_response=summary["avg_response"],
        system=compute_system_metrics(rows, timeline),
    )


def compute_system_metrics(processes: Sequence[ProcessMetrics], timeline: Timeline) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given per-process metrics and the
    timeline they were derived from.
    """
    makespan = timeline.makespan
    if not processes or makespan <= 0:
        return SystemMetrics(
            makespan=makespan,
            cpu_busy_time=timeline.busy_time,
            idle_time=timeline.idle_time,
            throughput=0.0,
            cpu_utilization=0.0,
        )

    cpu_busy_time = timeline.busy_time

    # Starvation here means waiting more than twice the average.
    avg_wait = sum(p.waiting_time for p in processes) / len(processes)
    starvation_count = sum(1 for p in processes if p.waiting_time > 2 * avg_wait)

    return SystemMetrics(
        makespan=makespan,
        cpu_busy_time=cpu_busy_time,
        idle_time=timeline.idle_time,
        throughput=len(processes) / makespan,
        cpu_utilization=cpu_busy_time / makespan,
        starvation_count=starvation_count,
    )


def summarize_process_metrics(processes: Iterable[ProcessMetrics]) -> Dict[str, float]:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    processes = list(processes)
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }
