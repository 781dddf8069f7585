from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import List, Mapping

from .errors import InvalidProcessError
from .models import Process, validate_process_set


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        processes = _load_json(path)
    elif suffix == ".csv":
        processes = _load_csv(path)
    else:
        raise InvalidProcessError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    validate_process_set(processes)
    return processes


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise InvalidProcessError(f"{path}: not valid JSON ({exc})") from exc

    if not isinstance(raw, list):
        raise InvalidProcessError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _process_from_mapping(mapping: Mapping) -> Process:
    try:
        pid = int(mapping["pid"])
        arrival_time = int(mapping["arrival_time"])
        burst_time = int(mapping["burst_time"])
        priority_val = mapping.get("priority")
        priority = int(priority_val) if priority_val not in (None, "") else 0
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise InvalidProcessError(f"Invalid process entry: {mapping!r}") from exc

    return Process(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )


def demo_workload() -> List[Process]:
    """
    Small mixed dataset with staggered arrivals.
    """
    return [
        Process(1, arrival_time=0, burst_time=7, priority=3),
        Process(2, arrival_time=2, burst_time=4, priority=1),
        Process(3, arrival_time=4, burst_time=1, priority=4),
        Process(4, arrival_time=5, burst_time=4, priority=2),
        Process(5, arrival_time=6, burst_time=6, priority=5),
    ]
