import builtins
from pathlib import Path

import pytest

from cpusched.cli import build_parser, main


def test_run_demo(capsys):
    assert main(["run", "-a", "sjf", "--demo"]) == 0
    out = capsys.readouterr().out
    assert "SJF (Non-Preemptive) Result" in out
    assert "Per-process metrics" in out


def test_run_plain_chart(capsys):
    assert main(["run", "-a", "fcfs", "--demo", "--plain"]) == 0
    out = capsys.readouterr().out
    assert "|-------|----|-|----|------|" in out
    assert "0       7   11 12   16     22" in out


def test_run_rr_without_quantum_fails(capsys):
    assert main(["run", "-a", "rr", "--demo"]) == 1
    assert "quantum" in capsys.readouterr().out


def test_compare_demo(capsys):
    assert main(["compare", "--demo", "-q", "2"]) == 0
    out = capsys.readouterr().out
    assert "Best by average waiting time: SJF (Non-Preemptive)" in out


def test_compare_empty_workload(tmp_path: Path, capsys):
    p = tmp_path / "empty.json"
    p.write_text("[]")
    assert main(["compare", "-w", str(p)]) == 1
    assert "No processes" in capsys.readouterr().out


def test_missing_workload_file(tmp_path: Path, capsys):
    assert main(["run", "-a", "fcfs", "-w", str(tmp_path / "nope.json")]) == 1
    assert "Error" in capsys.readouterr().out


def test_workload_and_demo_are_exclusive():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["run", "-a", "fcfs", "--demo", "-w", "x.json"])


def test_menu_runs_demo_fcfs_then_exits(monkeypatch, capsys):
    answers = iter(["y", "3", "0"])
    monkeypatch.setattr(builtins, "input", lambda *args: next(answers))
    assert main(["menu"]) == 0
    out = capsys.readouterr().out
    assert "FCFS Result" in out
    assert "Goodbye!" in out


def test_menu_without_processes(monkeypatch, capsys):
    answers = iter(["n", "7", "0"])
    monkeypatch.setattr(builtins, "input", lambda *args: next(answers))
    assert main(["menu"]) == 0
    assert "No processes loaded" in capsys.readouterr().out


def test_menu_enter_processes_and_compare(monkeypatch, capsys):
    answers = iter(
        [
            "n",
            "1",  # enter processes
            "2",
            "0", "5", "2",  # P1
            "1", "3", "1",  # P2
            "7",  # compare
            "2",  # quantum
            "0",
        ]
    )
    monkeypatch.setattr(builtins, "input", lambda *args: next(answers))
    assert main(["menu"]) == 0
    out = capsys.readouterr().out
    assert "Process list updated" in out
    assert "Best by average waiting time" in out


def test_menu_priority_accepts_half_int_range(monkeypatch, capsys):
    answers = iter(
        [
            "n",
            "1",
            "1",
            "0", "4", "-1073741825", "-1073741824",  # first priority is out of range
            "2",
            "0",
        ]
    )
    monkeypatch.setattr(builtins, "input", lambda *args: next(answers))
    assert main(["menu"]) == 0
    out = capsys.readouterr().out
    assert "Enter a value in" in out
    assert "-1073741824" in out
