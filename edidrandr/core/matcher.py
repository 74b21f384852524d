"""Output-to-identifier matching logic."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence

from edidrandr.core.edid import humanize_edid, identifier_in_edid
from edidrandr.core.errors import StrictMatchFailure
from edidrandr.core.layout import current_config
from edidrandr.core.model import (
    Assignment,
    CommandOutput,
    DiscoveredOutput,
    IdentifierSpec,
    MatchResult,
    OutputDiagnostics,
    Unavailable,
)

LayoutSource = Callable[[], CommandOutput | Unavailable]
LOGGER = logging.getLogger(__name__)


def as_specs(specs: Mapping[str, Sequence[str]]) -> tuple[IdentifierSpec, ...]:
    return tuple(IdentifierSpec(identifier=key, tokens=tuple(tokens)) for key, tokens in specs.items())


def first_matching_spec(
    output: DiscoveredOutput,
    specs: Sequence[IdentifierSpec],
) -> IdentifierSpec | None:
    edid = output.edid or ""
    for spec in specs:
        if identifier_in_edid(spec.identifier, edid):
            return spec
    return None


def diagnose_output(
    output: DiscoveredOutput,
    layout: CommandOutput | Unavailable,
) -> OutputDiagnostics:
    return OutputDiagnostics(
        output=output.name,
        edid_strings=humanize_edid(output.edid),
        current_config=current_config(output.name, layout),
    )


class _LazyLayout:
    def __init__(self, source: LayoutSource | None) -> None:
        self._source = source
        self._result: CommandOutput | Unavailable | None = None

    def get(self) -> CommandOutput | Unavailable:
        if self._result is None:
            if self._source is None:
                self._result = Unavailable(command=("unxrandr",), reason="no layout source")
            else:
                self._result = self._source()
        return self._result


def match_outputs(
    outputs: Sequence[DiscoveredOutput],
    specs: Mapping[str, Sequence[str]],
    default_tokens: Sequence[str] = ("--off",),
    strict: bool = False,
    *,
    verbose: bool = False,
    layout: LayoutSource | None = None,
) -> MatchResult:
    """Assign configuration tokens to each output in parse order.

    The first identifier in ``specs`` insertion order whose hex encoding occurs
    in an output's EDID wins; outputs matching nothing get ``default_tokens``.
    With ``strict`` set, any identifier left unmatched raises
    ``StrictMatchFailure``.
    """
    candidates = as_specs(specs)
    to_match = [spec.identifier for spec in candidates]
    lazy_layout = _LazyLayout(layout)
    assignments: list[Assignment] = []

    for output in outputs:
        spec = first_matching_spec(output, candidates)
        if spec is not None:
            if spec.identifier in to_match:
                to_match.remove(spec.identifier)
            if verbose:
                LOGGER.info("Matched %s @ %s to %s.", output.name, output.screen, spec.identifier)
            assignments.append(Assignment(output=output, tokens=spec.tokens, identifier=spec.identifier))
            continue

        if verbose:
            diagnostics = diagnose_output(output, lazy_layout.get())
            LOGGER.info("Couldn't match %s to any serial.", output.name)
            LOGGER.info("  EDID strings: %s", diagnostics.edid_strings)
            LOGGER.info("  current config: %s", diagnostics.current_config)
        assignments.append(Assignment(output=output, tokens=tuple(default_tokens)))

    if strict and to_match:
        raise StrictMatchFailure(tuple(to_match))

    return MatchResult(assignments=tuple(assignments), unmatched=tuple(to_match))
