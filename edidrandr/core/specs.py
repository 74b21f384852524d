"""Assembly of identifier-to-configuration mappings from flags and profiles."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from edidrandr.core.errors import UsageError

SERIAL = "serial"
CONFIG = "config"
LOGGER = logging.getLogger(__name__)


def split_tokens(text: str) -> tuple[str, ...]:
    return tuple(text.split())


def collect_specs(events: Iterable[tuple[str, str]]) -> dict[str, tuple[str, ...]]:
    """Build specs from ``(SERIAL | CONFIG, value)`` flags in command-line order.

    Each config binds to the most recent serial; a serial that already has a
    config keeps it.
    """
    specs: dict[str, tuple[str, ...]] = {}
    current: str | None = None
    pending: list[str] = []

    for kind, value in events:
        if kind == SERIAL:
            current = value
            pending.append(value)
        elif kind == CONFIG:
            if current is None:
                raise UsageError(f"no serial given so far for config '{value}'")
            specs.setdefault(current, split_tokens(value))
        else:
            raise ValueError(f"unknown flag kind {kind!r}")

    for serial in pending:
        if serial not in specs:
            LOGGER.warning("Serial '%s' has no config and is ignored", serial)
    return specs


def merge_specs(
    preferred: Mapping[str, Sequence[str]],
    fallback: Mapping[str, Sequence[str]],
) -> dict[str, tuple[str, ...]]:
    """Entries of ``preferred`` come first and win over ``fallback`` ones."""
    merged = {key: tuple(tokens) for key, tokens in preferred.items()}
    for key, tokens in fallback.items():
        merged.setdefault(key, tuple(tokens))
    return merged
