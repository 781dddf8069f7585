import logging

import pytest

from cpusched.algorithms import (
    run_algorithm,
    schedule_fcfs,
    schedule_priority,
    schedule_rr,
    schedule_sjf,
)
from cpusched.errors import InvalidProcessError, UnknownAlgorithmError
from cpusched.models import IDLE, Process, Running
from cpusched.workload_io import demo_workload


def _procs():
    return [
        Process(1, arrival_time=0, burst_time=5, priority=2),
        Process(2, arrival_time=1, burst_time=3, priority=1),
        Process(3, arrival_time=2, burst_time=8, priority=3),
    ]


def _spans(timeline):
    return [(s.pid, s.start_time, s.end_time) for s in timeline]


def test_fcfs_order():
    tl = schedule_fcfs(_procs())
    assert _spans(tl) == [(1, 0, 5), (2, 5, 8), (3, 8, 16)]


def test_fcfs_demo_completions():
    res = run_algorithm("fcfs", demo_workload())
    assert [p.completion_time for p in res.processes] == [7, 11, 12, 16, 22]


def test_fcfs_equal_arrivals_use_pid():
    procs = [Process(2, 0, 3), Process(1, 0, 3)]
    assert schedule_fcfs(procs).pids_in_order() == [1, 2]


def test_fcfs_idle_gaps():
    procs = [Process(1, arrival_time=3, burst_time=2), Process(2, arrival_time=9, burst_time=1)]
    tl = schedule_fcfs(procs)
    assert _spans(tl) == [(None, 0, 3), (1, 3, 5), (None, 5, 9), (2, 9, 10)]
    assert tl[0].slot == IDLE
    assert tl[1].slot == Running(1)


def test_sjf_order():
    tl = schedule_sjf(_procs())
    # P1 is alone at t=0, then P2 is shorter than P3.
    assert tl.pids_in_order() == [1, 2, 3]


def test_sjf_demo():
    tl = schedule_sjf(demo_workload())
    assert _spans(tl) == [(1, 0, 7), (3, 7, 8), (2, 8, 12), (4, 12, 16), (5, 16, 22)]


def test_sjf_tie_break_by_pid():
    procs = [Process(2, arrival_time=0, burst_time=4), Process(1, arrival_time=0, burst_time=4)]
    assert schedule_sjf(procs).pids_in_order() == [1, 2]


def test_sjf_tie_break_prefers_earlier_arrival():
    procs = [
        Process(1, arrival_time=0, burst_time=6),
        Process(2, arrival_time=3, burst_time=2),
        Process(3, arrival_time=1, burst_time=2),
    ]
    assert schedule_sjf(procs).pids_in_order() == [1, 3, 2]


def test_sjf_idles_until_next_arrival():
    procs = [Process(1, arrival_time=0, burst_time=2), Process(2, arrival_time=5, burst_time=1)]
    assert _spans(schedule_sjf(procs)) == [(1, 0, 2), (None, 2, 5), (2, 5, 6)]


def test_priority_static():
    tl = schedule_priority(_procs())
    # P1 starts alone at 0; by t=5 P2 (priority 1) beats P3.
    assert tl.pids_in_order() == [1, 2, 3]


def test_priority_demo():
    tl = schedule_priority(demo_workload())
    assert _spans(tl) == [(1, 0, 7), (2, 7, 11), (4, 11, 15), (3, 15, 16), (5, 16, 22)]


def test_priority_ties_by_arrival_then_pid():
    procs = [
        Process(3, arrival_time=0, burst_time=1, priority=1),
        Process(1, arrival_time=0, burst_time=1, priority=1),
        Process(2, arrival_time=0, burst_time=1, priority=0),
    ]
    assert schedule_priority(procs).pids_in_order() == [2, 1, 3]


def test_priority_leading_idle():
    procs = [Process(1, arrival_time=4, burst_time=2, priority=9)]
    assert _spans(schedule_priority(procs)) == [(None, 0, 4), (1, 4, 6)]


def test_rr_new_arrivals_queue_ahead_of_preempted():
    procs = [Process(1, arrival_time=0, burst_time=5), Process(2, arrival_time=1, burst_time=3)]
    tl = schedule_rr(procs, quantum=2)
    assert _spans(tl) == [(1, 0, 2), (2, 2, 4), (1, 4, 6), (2, 6, 7), (1, 7, 8)]


def test_rr_demo_quantum_2():
    res = run_algorithm("rr", demo_workload(), quantum=2)
    assert [p.completion_time for p in res.processes] == [20, 9, 7, 17, 22]
    assert res.avg_waiting == pytest.approx(7.2)
    assert res.algorithm == "Round Robin (q=2)"


def test_rr_does_not_merge_consecutive_quanta():
    tl = schedule_rr([Process(1, arrival_time=0, burst_time=5)], quantum=2)
    assert _spans(tl) == [(1, 0, 2), (1, 2, 4), (1, 4, 5)]


def test_rr_idle_between_bursts():
    procs = [Process(1, arrival_time=1, burst_time=1), Process(2, arrival_time=5, burst_time=3)]
    tl = schedule_rr(procs, quantum=2)
    assert _spans(tl) == [(None, 0, 1), (1, 1, 2), (None, 2, 5), (2, 5, 7), (2, 7, 8)]


def test_rr_nonpositive_quantum_clamps_to_one(caplog):
    procs = [Process(1, arrival_time=0, burst_time=2)]
    with caplog.at_level(logging.WARNING, logger="cpusched.algorithms"):
        res = run_algorithm("rr", procs, quantum=0)
    assert res.quantum == 1
    assert _spans(res.timeline) == [(1, 0, 1), (1, 1, 2)]
    assert "not positive" in caplog.text


def test_rr_requires_quantum():
    with pytest.raises(ValueError, match="quantum"):
        schedule_rr(_procs())


def test_algorithms_do_not_mutate_input():
    procs = _procs()
    snapshot = list(procs)
    for name in ("fcfs", "sjf", "priority", "rr"):
        run_algorithm(name, procs, quantum=2)
    assert procs == snapshot


def test_empty_process_set_gives_empty_timeline():
    assert len(schedule_fcfs([])) == 0
    assert len(schedule_sjf([])) == 0
    assert len(schedule_rr([], quantum=3)) == 0


def test_unknown_algorithm():
    with pytest.raises(UnknownAlgorithmError):
        run_algorithm("srtf", _procs())


def test_run_algorithm_is_case_insensitive():
    assert run_algorithm("SJF", _procs()).algorithm == "SJF (Non-Preemptive)"


@pytest.mark.parametrize("name", ["fcfs", "sjf", "priority", "rr"])
def test_duplicate_pids_rejected(name):
    procs = [Process(1, arrival_time=0, burst_time=3), Process(1, arrival_time=0, burst_time=2)]
    with pytest.raises(InvalidProcessError, match="Duplicate pid 1"):
        run_algorithm(name, procs, quantum=2)
