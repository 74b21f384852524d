"""Stable public API for building tooling on top of edidrandr.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from edidrandr.core.edid import encode_identifier, humanize_edid
from edidrandr.core.errors import (
    ApplyError,
    EdidRandrError,
    ProfileLoadError,
    ProfileValidationError,
    StatusUnavailableError,
    StrictMatchFailure,
    UsageError,
)
from edidrandr.core.model import (
    Assignment,
    CommandOutput,
    DiscoveredOutput,
    IdentifierSpec,
    MatchResult,
    OutputDiagnostics,
    Profile,
    Unavailable,
)
from edidrandr.core.profile_loader import load_profiles, require_profile
from edidrandr.core.service import ApplyRunner, RandrService, Runner
from edidrandr.core.status_parser import parse_status

__all__ = [
    "ApplyError",
    "EdidRandrError",
    "ProfileLoadError",
    "ProfileValidationError",
    "StatusUnavailableError",
    "StrictMatchFailure",
    "UsageError",
    "Assignment",
    "CommandOutput",
    "DiscoveredOutput",
    "IdentifierSpec",
    "MatchResult",
    "OutputDiagnostics",
    "Profile",
    "Unavailable",
    "encode_identifier",
    "humanize_edid",
    "parse_status",
    "Client",
]


class Client:
    """Public client for interacting with edidrandr core capabilities.

    A `Client` wraps status discovery, EDID matching, profile loading and the
    final xrandr invocation behind a stable API intended for third-party
    tools (hotplug hooks, session scripts, GUIs).
    """

    def __init__(
        self,
        *,
        runner: Runner | None = None,
        apply_runner: ApplyRunner | None = None,
    ) -> None:
        self._service = RandrService(runner=runner, apply_runner=apply_runner)

    def list_outputs(self, *, status_text: str | None = None) -> list[DiscoveredOutput]:
        return self._service.discover(status_text)

    def diagnose(self, *, status_text: str | None = None) -> list[OutputDiagnostics]:
        return self._service.diagnose(status_text)

    def match(
        self,
        specs: Mapping[str, Sequence[str]],
        *,
        default_tokens: Sequence[str] = ("--off",),
        strict: bool = False,
        status_text: str | None = None,
    ) -> MatchResult:
        return self._service.match(specs, default_tokens, strict, status_text=status_text)

    def build_command(
        self,
        specs: Mapping[str, Sequence[str]],
        *,
        default_tokens: Sequence[str] = ("--off",),
        prefix: Sequence[str] = (),
        strict: bool = False,
        status_text: str | None = None,
    ) -> list[str]:
        return self._service.build_command(
            specs,
            default_tokens,
            prefix,
            strict,
            status_text=status_text,
        )

    def list_profiles(self) -> list[Profile]:
        loaded = load_profiles()
        return sorted(loaded.profiles.values(), key=lambda p: p.name)

    def build_profile_command(self, name: str, *, status_text: str | None = None) -> list[str]:
        profile = require_profile(load_profiles(), name)
        return self._service.build_command(
            profile.specs,
            profile.default_tokens or ("--off",),
            profile.prefix or (),
            bool(profile.all_or_abort),
            status_text=status_text,
        )

    def apply(self, tokens: Sequence[str]) -> int:
        return self._service.apply(tokens)
