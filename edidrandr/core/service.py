"""Service layer used by CLI and the public API."""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable, Mapping, Sequence

from edidrandr.core.errors import ApplyError, StatusUnavailableError
from edidrandr.core.matcher import diagnose_output, match_outputs
from edidrandr.core.model import CommandOutput, DiscoveredOutput, MatchResult, OutputDiagnostics, Unavailable
from edidrandr.core.runner import run_command, run_passthrough
from edidrandr.core.status_parser import parse_status

Runner = Callable[[Sequence[str]], CommandOutput | Unavailable]
ApplyRunner = Callable[[Sequence[str]], int | Unavailable]
LOGGER = logging.getLogger(__name__)


class RandrService:
    def __init__(
        self,
        *,
        runner: Runner | None = None,
        apply_runner: ApplyRunner | None = None,
        xrandr: str = "xrandr",
        unxrandr: str = "unxrandr",
    ) -> None:
        self.runner = runner or run_command
        self.apply_runner = apply_runner or run_passthrough
        self.xrandr = xrandr
        self.unxrandr = unxrandr

    def status_text(self) -> str:
        result = self.runner([self.xrandr, "--prop"])
        if isinstance(result, Unavailable):
            raise StatusUnavailableError(f"Could not query display status: {result.reason}")
        if not result.ok:
            stderr = result.stderr.strip()
            details = f": {stderr}" if stderr else ""
            raise StatusUnavailableError(
                f"'{self.xrandr} --prop' exited with status {result.returncode}{details}"
            )
        return result.stdout

    def discover(self, status_text: str | None = None) -> list[DiscoveredOutput]:
        if status_text is None:
            status_text = self.status_text()
        return parse_status(status_text)

    def current_layout(self) -> CommandOutput | Unavailable:
        return self.runner([self.unxrandr])

    def diagnose(self, status_text: str | None = None) -> list[OutputDiagnostics]:
        outputs = self.discover(status_text)
        layout = self.current_layout()
        return [diagnose_output(output, layout) for output in outputs]

    def match(
        self,
        specs: Mapping[str, Sequence[str]],
        default_tokens: Sequence[str] = ("--off",),
        strict: bool = False,
        *,
        verbose: bool = False,
        status_text: str | None = None,
    ) -> MatchResult:
        outputs = self.discover(status_text)
        return match_outputs(
            outputs,
            specs,
            default_tokens,
            strict,
            verbose=verbose,
            layout=self.current_layout,
        )

    def build_command(
        self,
        specs: Mapping[str, Sequence[str]],
        default_tokens: Sequence[str] = ("--off",),
        prefix: Sequence[str] = (),
        strict: bool = False,
        *,
        verbose: bool = False,
        status_text: str | None = None,
    ) -> list[str]:
        result = self.match(
            specs,
            default_tokens,
            strict,
            verbose=verbose,
            status_text=status_text,
        )
        return [*prefix, *result.tokens()]

    def render_command(self, tokens: Sequence[str]) -> str:
        return shlex.join([self.xrandr, *tokens])

    def apply(self, tokens: Sequence[str]) -> int:
        LOGGER.debug("Running %s", self.render_command(tokens))
        result = self.apply_runner([self.xrandr, *tokens])
        if isinstance(result, Unavailable):
            raise ApplyError(f"Could not run {self.xrandr}: {result.reason}")
        return result
