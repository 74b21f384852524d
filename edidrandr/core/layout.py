"""Lookup of an output's active configuration in ``unxrandr`` output."""

from __future__ import annotations

import re

from edidrandr.core.model import CommandOutput, Unavailable

NEED_UNXRANDR = "unknown (need 'unxrandr' installed)"
UNPARSEABLE = "unknown (couldn't parse unxrandr)"

_SEGMENT_RE = re.compile(r"(?=--output\s)")


def current_config(output_name: str, layout: CommandOutput | Unavailable) -> str:
    if isinstance(layout, Unavailable):
        return NEED_UNXRANDR
    if not layout.ok:
        return f"unknown (unxrandr exited with {layout.returncode})"

    head = re.compile(rf"^\s*--output\s+{re.escape(output_name)}(?:\s+|$)")
    for line in layout.stdout.splitlines():
        for segment in _SEGMENT_RE.split(line):
            match = head.match(segment)
            if match:
                return segment[match.end():].strip()
    return UNPARSEABLE
