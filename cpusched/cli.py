from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.prompt import Confirm, IntPrompt
from rich.table import Table

from .algorithms import ALGORITHMS, run_algorithm
from .compare import Comparison, compare_all
from .errors import EmptyProcessSetError, SchedulerError
from .gantt import build_rich_gantt, render_gantt
from .models import Process, ScheduleResult
from .workload_io import demo_workload, load_workload

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 2
MAX_PROCESSES = 100
MAX_TIME_VALUE = 1_000_000
MIN_PRIORITY = -(2**31) // 2
MAX_PRIORITY = (2**31 - 1) // 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cpusched",
        description="CPU scheduling simulator (FCFS, SJF, Priority, Round Robin).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="count",
        default=0,
        help="Increase log output (-v for info, -vv for debug).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one scheduling algorithm on a workload.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        choices=sorted(ALGORITHMS),
        help="Algorithm to use.",
    )
    _add_workload_source(run_parser)
    run_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for round-robin (ignored by FCFS, SJF, Priority).",
    )
    run_parser.add_argument("--plain", action="store_true", help="Plain-text Gantt chart without colours.")

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run all algorithms on the same workload and rank them by average waiting time.",
    )
    _add_workload_source(compare_parser)
    compare_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum used for round-robin (default: {DEFAULT_QUANTUM}).",
    )
    compare_parser.add_argument("--plain", action="store_true", help="Plain-text output without colours.")

    menu_parser = subparsers.add_parser(
        "menu",
        help="Interactive menu to enter processes and run algorithms.",
    )
    menu_parser.add_argument(
        "--workload",
        "-w",
        default=None,
        help="Workload file to preload instead of offering the demo dataset.",
    )
    menu_parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=DEFAULT_QUANTUM,
        help=f"Default quantum offered for round-robin (default: {DEFAULT_QUANTUM}).",
    )

    return parser


def _add_workload_source(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--workload", "-w", help="Path to JSON or CSV workload file.")
    source.add_argument("--demo", action="store_true", help="Use the built-in demo dataset.")


def configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False)],
    )


def _load_processes(args: argparse.Namespace) -> List[Process]:
    if args.demo:
        return demo_workload()
    return load_workload(Path(args.workload))


def _print_processes(processes: Sequence[Process], console: Console) -> None:
    table = Table(title="Processes (lower priority value = higher priority)", box=box.SIMPLE_HEAVY)
    for h in ("PID", "Arrival", "Burst", "Priority"):
        table.add_column(h, justify="center" if h == "PID" else "right")
    for p in sorted(processes, key=lambda x: x.pid):
        table.add_row(f"P{p.pid}", str(p.arrival_time), str(p.burst_time), str(p.priority))
    console.print(table)


def _print_gantt(result: ScheduleResult, console: Console, plain: bool) -> None:
    if plain:
        console.print(render_gantt(result.timeline), markup=False, highlight=False)
        return

    panel, time_marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if time_marks:
        console.print(time_marks, highlight=False)


def _print_result(result: ScheduleResult, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]=== {result.algorithm} Result ===[/bold]")
    console.print()

    _print_gantt(result, console, plain)
    console.print()

    headers = [
        "PID",
        "Arrival",
        "Burst",
        "Priority",
        "Start",
        "Complete",
        "Turnaround",
        "Waiting",
        "Response",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            f"P{p.pid}",
            str(p.arrival_time),
            str(p.burst_time),
            str(p.priority),
            str(p.start_time),
            str(p.completion_time),
            str(p.turnaround_time),
            str(p.waiting_time),
            str(p.response_time),
        )

    console.print(proc_table)
    console.print()

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")
    sys_table.add_row("Avg waiting", f"{result.avg_waiting:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.avg_turnaround:.2f}")
    sys_table.add_row("Avg response", f"{result.avg_response:.2f}")
    if result.system:
        sys = result.system
        sys_table.add_row("Makespan", str(sys.makespan))
        sys_table.add_row("Idle time", str(sys.idle_time))
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
        sys_table.add_row("Starvation count", str(sys.starvation_count))

    console.print(sys_table)


def _print_comparison(comparison: Comparison, console: Console) -> None:
    summary_table = Table(title="Algorithm comparison (lower is better)", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")

    for result in comparison:
        summary_table.add_row(
            result.algorithm,
            f"{result.avg_waiting:.3f}",
            f"{result.avg_turnaround:.3f}",
            f"{result.avg_response:.3f}",
        )

    console.print(summary_table)
    console.print(f"Best by average waiting time: [bold green]{comparison.best.algorithm}[/bold green]")


def _ask_int(console: Console, prompt: str, lo: int, hi: int, default: Optional[int] = None) -> int:
    while True:
        if default is None:
            value = IntPrompt.ask(prompt, console=console)
        else:
            value = IntPrompt.ask(prompt, console=console, default=default)
        if lo <= value <= hi:
            return value
        console.print(f"[red]Enter a value in [{lo}, {hi}].[/red]")


def _enter_processes(console: Console) -> List[Process]:
    """
    Prompt for a fresh process set. PIDs are assigned 1..n in entry order.
    """
    n = _ask_int(console, f"Number of processes (1..{MAX_PROCESSES})", 1, MAX_PROCESSES)
    processes: List[Process] = []
    for pid in range(1, n + 1):
        console.print(f"\n[bold]--- Process P{pid} ---[/bold]")
        arrival = _ask_int(console, "Arrival time (>=0)", 0, MAX_TIME_VALUE)
        burst = _ask_int(console, "Burst time (>0)", 1, MAX_TIME_VALUE)
        priority = _ask_int(console, "Priority (smaller = higher)", MIN_PRIORITY, MAX_PRIORITY, default=0)
        processes.append(Process(pid, arrival_time=arrival, burst_time=burst, priority=priority))
    return processes


MENU_ITEMS = [
    ("Enter / replace processes", None),
    ("Show current processes", None),
    ("Run FCFS", "fcfs"),
    ("Run SJF (Non-Preemptive)", "sjf"),
    ("Run Priority (Non-Preemptive)", "priority"),
    ("Run Round Robin", "rr"),
    ("Compare all", None),
]


def _interactive_menu(default_workload: Optional[str], default_quantum: int, console: Console) -> None:
    processes: List[Process] = []

    console.print("\n[bold cyan]CPU Scheduling Simulator[/bold cyan]")
    if default_workload:
        try:
            processes = load_workload(Path(default_workload))
        except (SchedulerError, OSError) as exc:
            console.print(f"[red]Could not load {default_workload}:[/red] {escape(str(exc))}")
    elif Confirm.ask("Load the demo dataset to get started?", console=console, default=True):
        processes = demo_workload()
    if processes:
        _print_processes(processes, console)

    while True:
        console.print("\n[bold]Menu:[/bold]")
        for idx, (label, _) in enumerate(MENU_ITEMS, start=1):
            console.print(f"  [yellow]{idx}[/yellow]) {label}")
        console.print("  [yellow]0[/yellow]) Exit")

        choice = _ask_int(console, "Choose an option", 0, len(MENU_ITEMS))
        if choice == 0:
            console.print("Goodbye!")
            return

        _, alg = MENU_ITEMS[choice - 1]
        if choice == 1:
            processes = _enter_processes(console)
            console.print("[green]Process list updated.[/green]")
            continue

        if not processes:
            console.print("[yellow]No processes loaded.[/yellow]")
            continue

        try:
            if choice == 2:
                _print_processes(processes, console)
            elif alg is not None:
                quantum = None
                if alg == "rr":
                    quantum = _ask_int(console, "Time quantum (>0)", 1, MAX_TIME_VALUE, default=default_quantum)
                _print_result(run_algorithm(alg, processes, quantum=quantum), console)
            else:
                quantum = _ask_int(
                    console, "Time quantum for Round Robin (>0)", 1, MAX_TIME_VALUE, default=default_quantum
                )
                _print_comparison(compare_all(processes, quantum), console)
        except SchedulerError as exc:
            console.print(f"[red]Error:[/red] {escape(str(exc))}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "run":
            processes = _load_processes(args)
            if not processes:
                raise EmptyProcessSetError("Workload contains no processes")
            result = run_algorithm(args.algorithm, processes, quantum=args.quantum)
            _print_result(result, console, plain=args.plain)
            return 0

        if args.command == "compare":
            processes = _load_processes(args)
            comparison = compare_all(processes, args.quantum)
            if args.plain:
                for result in comparison:
                    console.print(f"\n{result.algorithm}", markup=False)
                    _print_gantt(result, console, plain=True)
            _print_comparison(comparison, console)
            return 0

        if args.command == "menu":
            _interactive_menu(args.workload, args.quantum, console)
            return 0
    except (SchedulerError, ValueError, OSError) as exc:
        logger.debug("command %s failed", args.command, exc_info=True)
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
