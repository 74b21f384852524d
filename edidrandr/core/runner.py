"""External command invocation with explicit result values."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence

from edidrandr.core.model import CommandOutput, Unavailable


def run_command(cmd: Sequence[str]) -> CommandOutput | Unavailable:
    """Run ``cmd`` and capture its output.

    A missing binary or an OS-level failure yields ``Unavailable``; a non-zero
    exit is still a ``CommandOutput`` and left to the caller to interpret.
    """
    command = tuple(cmd)
    try:
        result = subprocess.run(
            command,
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError:
        return Unavailable(command=command, reason=f"'{command[0]}' is not installed")
    except OSError as exc:
        return Unavailable(command=command, reason=str(exc))
    return CommandOutput(
        returncode=result.returncode,
        stdout=result.stdout or "",
        stderr=result.stderr or "",
    )


def run_passthrough(cmd: Sequence[str]) -> int | Unavailable:
    """Run ``cmd`` with inherited stdio and return its exit status."""
    command = tuple(cmd)
    try:
        result = subprocess.run(command, check=False)
    except FileNotFoundError:
        return Unavailable(command=command, reason=f"'{command[0]}' is not installed")
    except OSError as exc:
        return Unavailable(command=command, reason=str(exc))
    return result.returncode
