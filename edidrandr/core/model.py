"""Core data models used across parser, matcher, service, and CLI."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiscoveredOutput:
    name: str
    connection: str
    edid: str | None = None
    screen: int | None = None

    @property
    def has_edid(self) -> bool:
        # Empty and absent blobs both mean no usable identity data.
        return bool(self.edid)


@dataclass(frozen=True)
class IdentifierSpec:
    identifier: str
    tokens: tuple[str, ...]


@dataclass(frozen=True)
class Assignment:
    output: DiscoveredOutput
    tokens: tuple[str, ...]
    identifier: str | None = None

    def as_tokens(self) -> tuple[str, ...]:
        return ("--output", self.output.name, *self.tokens)


@dataclass(frozen=True)
class MatchResult:
    assignments: tuple[Assignment, ...]
    unmatched: tuple[str, ...]

    def tokens(self) -> list[str]:
        flat: list[str] = []
        for assignment in self.assignments:
            flat.extend(assignment.as_tokens())
        return flat


@dataclass(frozen=True)
class OutputDiagnostics:
    output: str
    edid_strings: str
    current_config: str


@dataclass(frozen=True)
class CommandOutput:
    returncode: int
    stdout: str
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True)
class Unavailable:
    command: tuple[str, ...]
    reason: str


@dataclass(frozen=True)
class Profile:
    name: str
    specs: dict[str, tuple[str, ...]]
    default_tokens: tuple[str, ...] | None = None
    prefix: tuple[str, ...] | None = None
    all_or_abort: bool | None = None
