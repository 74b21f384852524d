from __future__ import annotations

import subprocess

import pytest

from edidrandr.core.model import CommandOutput, Unavailable
from edidrandr.core.runner import run_command, run_passthrough


def _cp(cmd: list[str], rc: int, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess[str]:
    return subprocess.CompletedProcess(cmd, rc, stdout=stdout, stderr=stderr)


def test_missing_binary_is_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, check, capture_output, text):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(subprocess, "run", fake_run)

    result = run_command(["unxrandr"])
    assert isinstance(result, Unavailable)
    assert result.command == ("unxrandr",)
    assert "not installed" in result.reason


def test_non_zero_exit_is_still_output(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, check, capture_output, text):
        return _cp(cmd, 1, stderr="Can't open display")

    monkeypatch.setattr(subprocess, "run", fake_run)

    result = run_command(["xrandr", "--prop"])
    assert result == CommandOutput(returncode=1, stdout="", stderr="Can't open display")
    assert not result.ok


def test_passthrough_returns_exit_status(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[tuple[str, ...]] = []

    def fake_run(cmd, check):
        seen.append(cmd)
        return subprocess.CompletedProcess(cmd, 3)

    monkeypatch.setattr(subprocess, "run", fake_run)

    assert run_passthrough(["xrandr", "--output", "HDMI-1", "--auto"]) == 3
    assert seen == [("xrandr", "--output", "HDMI-1", "--auto")]


def test_passthrough_missing_binary(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, check):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(subprocess, "run", fake_run)

    assert isinstance(run_passthrough(["xrandr"]), Unavailable)
