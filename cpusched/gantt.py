from __future__ import annotations

from typing import Dict, List, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Timeline

GANTT_WIDTH = 80


def segment_widths(timeline: Timeline, width: int = GANTT_WIDTH) -> List[int]:
    """
    Character width of each segment. Timelines longer than ``width`` time
    units are compressed proportionally; every segment keeps at least one
    character.
    """
    total = timeline.makespan
    scale = total / width if total > width else 1.0
    return [max(1, int(seg.duration / scale + 0.5)) for seg in timeline]


def _center(label: str, width: int) -> str:
    if width < len(label):
        return " " * width
    left = (width - len(label)) // 2
    return " " * left + label + " " * (width - len(label) - left)


def time_ruler(timeline: Timeline, widths: List[int]) -> str:
    """
    Segment end times, each right-aligned under its closing bar.
    """
    ruler = "0"
    for seg, w in zip(timeline, widths):
        mark = str(seg.end_time)
        ruler += " " * max(1, w + 1 - len(mark)) + mark
    return ruler


def render_gantt(timeline: Timeline, width: int = GANTT_WIDTH) -> str:
    """
    Plain-text Gantt chart, for terminals without colour support.
    """
    if not timeline:
        return "(no segments)"

    widths = segment_widths(timeline, width)

    bar = ""
    labels = ""
    for seg, w in zip(timeline, widths):
        bar += "|" + "-" * w
        labels += "|" + _center(seg.label, w)
    bar += "|"
    labels += "|"

    title = "Gantt Chart (scaled):" if timeline.makespan > width else "Gantt Chart:"
    return "\n".join([title, bar, labels, time_ruler(timeline, widths)])


def build_rich_gantt(timeline: Timeline, width: int = GANTT_WIDTH) -> Tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not timeline:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    widths = segment_widths(timeline, width)
    bars = Text()
    labels = Text()

    for seg, w in zip(timeline, widths):
        bars.append("|")
        labels.append("|")
        if seg.pid is None:
            bars.append("." * w, style="dim")
            labels.append(_center(seg.label, w), style="dim italic")
        else:
            bars.append(" " * w, style=f"on {pid_color(seg.pid)}")
            labels.append(_center(seg.label, w), style="bold")
    bars.append("|")
    labels.append("|")

    table = Table.grid(padding=(0, 0))
    table.add_row(bars)
    table.add_row(labels)

    title = "Gantt Chart (scaled)" if timeline.makespan > width else "Gantt Chart"
    panel = Panel.fit(table, title=title)
    return panel, time_ruler(timeline, widths)
