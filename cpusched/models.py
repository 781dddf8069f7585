from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from .errors import InvalidProcessError, InvalidTimelineError


@dataclass(frozen=True)
class Process:
    pid: int
    arrival_time: int
    burst_time: int
    priority: int = 0

    def __post_init__(self) -> None:
        if self.pid < 1:
            raise InvalidProcessError(f"pid must be >= 1, got {self.pid}")
        if self.arrival_time < 0:
            raise InvalidProcessError(f"P{self.pid}: arrival time must be >= 0, got {self.arrival_time}")
        if self.burst_time <= 0:
            raise InvalidProcessError(f"P{self.pid}: burst time must be > 0, got {self.burst_time}")


@dataclass(frozen=True)
class Idle:
    """
    The CPU had nothing to run.
    """

    def __str__(self) -> str:
        return "IDLE"


IDLE = Idle()


@dataclass(frozen=True)
class Running:
    pid: int

    def __str__(self) -> str:
        return f"P{self.pid}"


Slot = Union[Idle, Running]


@dataclass(frozen=True)
class Segment:
    """
    One contiguous span [start_time, end_time) of the CPU, either running a
    process or idle.
    """

    slot: Slot
    start_time: int
    end_time: int

    def __post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise InvalidTimelineError(
                f"segment {self.slot} has non-positive duration [{self.start_time}, {self.end_time})"
            )

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    @property
    def is_idle(self) -> bool:
        return isinstance(self.slot, Idle)

    @property
    def pid(self) -> Optional[int]:
        return None if isinstance(self.slot, Idle) else self.slot.pid

    @property
    def label(self) -> str:
        return str(self.slot)


@dataclass(frozen=True)
class Timeline:
    """
    Ordered, non-overlapping sequence of segments produced by one algorithm run.
    """

    segments: Tuple[Segment, ...] = ()

    def __post_init__(self) -> None:
        for prev, nxt in zip(self.segments, self.segments[1:]):
            if nxt.start_time < prev.end_time:
                raise InvalidTimelineError(
                    f"segment {nxt.label}@{nxt.start_time} overlaps or precedes "
                    f"{prev.label} ending at {prev.end_time}"
                )

    @classmethod
    def of(cls, segments: Iterable[Segment]) -> "Timeline":
        return cls(tuple(segments))

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __getitem__(self, index: int) -> Segment:
        return self.segments[index]

    @property
    def makespan(self) -> int:
        return self.segments[-1].end_time if self.segments else 0

    @property
    def busy_time(self) -> int:
        return sum(s.duration for s in self.segments if not s.is_idle)

    @property
    def idle_time(self) -> int:
        return sum(s.duration for s in self.segments if s.is_idle)

    def segments_for(self, pid: int) -> List[Segment]:
        return [s for s in self.segments if s.pid == pid]

    def pids_in_order(self) -> List[Optional[int]]:
        """Slot pids in dispatch order; idle segments appear as None."""
        return [s.pid for s in self.segments]


@dataclass(frozen=True)
class ProcessMetrics:
    pid: int
    arrival_time: int
    burst_time: int
    priority: int
    start_time: int
    completion_time: int
    turnaround_time: int
    waiting_time: int
    response_time: int


@dataclass(frozen=True)
class SystemMetrics:
    makespan: int
    cpu_busy_time: int
    idle_time: int
    throughput: float
    cpu_utilization: float
    starvation_count: int = 0


@dataclass(frozen=True)
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    timeline: Timeline
    processes: Tuple[ProcessMetrics, ...] = field(default_factory=tuple)
    avg_waiting: float = 0.0
    avg_turnaround: float = 0.0
    avg_response: float = 0.0
    system: Optional[SystemMetrics] = None

    def metrics_for(self, pid: int) -> ProcessMetrics:
        for row in self.processes:
            if row.pid == pid:
                return row
        raise KeyError(pid)


def validate_process_set(processes: Iterable[Process]) -> None:
    """
    Reject process sets with duplicate pids. Per-process field checks happen
    when each Process is constructed.
    """
    seen = set()
    for p in processes:
        if p.pid in seen:
            raise InvalidProcessError(f"Duplicate pid {p.pid}")
        seen.add(p.pid)
