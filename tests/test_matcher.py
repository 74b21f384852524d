from __future__ import annotations

import logging

import pytest

from edidrandr.core.errors import StrictMatchFailure
from edidrandr.core.matcher import diagnose_output, match_outputs
from edidrandr.core.model import CommandOutput, DiscoveredOutput, Unavailable

HDMI = DiscoveredOutput(name="HDMI-1", connection="connected", edid="00ff00ff41424331", screen=0)
DP = DiscoveredOutput(name="DP-1", connection="disconnected", edid=None, screen=0)
EMPTY = DiscoveredOutput(name="DP-2", connection="connected", edid="", screen=0)


def test_scenario_assigns_match_and_default() -> None:
    result = match_outputs([HDMI, DP], {"ABC1": ["--auto", "--primary"]}, ["--off"])

    assert result.tokens() == ["--output", "HDMI-1", "--auto", "--primary", "--output", "DP-1", "--off"]
    assert result.assignments[0].identifier == "ABC1"
    assert result.assignments[1].identifier is None
    assert result.unmatched == ()


def test_first_identifier_in_insertion_order_wins() -> None:
    forward = match_outputs([HDMI], {"ABC": ["--left"], "ABC1": ["--right"]}, ["--off"])
    backward = match_outputs([HDMI], {"ABC1": ["--right"], "ABC": ["--left"]}, ["--off"])

    assert forward.assignments[0].tokens == ("--left",)
    assert backward.assignments[0].tokens == ("--right",)


def test_unmatched_output_gets_exactly_default_tokens() -> None:
    result = match_outputs([HDMI, DP, EMPTY], {"ZZZ9": ["--auto"]}, ["--mode", "1024x768"])
    assert [a.tokens for a in result.assignments] == [("--mode", "1024x768")] * 3
    assert result.unmatched == ("ZZZ9",)


def test_strict_mode_reports_missing_identifiers() -> None:
    with pytest.raises(StrictMatchFailure) as exc:
        match_outputs([HDMI, DP], {"ABC1": ["--auto"], "ZZZ9": ["--auto"]}, ["--off"], strict=True)

    assert exc.value.unmatched == ("ZZZ9",)
    assert "Failed to match serial(s) 'ZZZ9' to an output." == str(exc.value)


def test_strict_mode_passes_when_everything_matches() -> None:
    result = match_outputs([HDMI, DP], {"ABC1": ["--auto"]}, ["--off"], strict=True)
    assert result.unmatched == ()


def test_one_identifier_may_claim_several_outputs() -> None:
    twin = DiscoveredOutput(name="HDMI-2", connection="connected", edid="41424331ffff", screen=0)
    result = match_outputs([HDMI, twin], {"ABC1": ["--auto"]}, ["--off"])
    assert [a.identifier for a in result.assignments] == ["ABC1", "ABC1"]


def test_verbose_logs_matches_and_diagnostics(caplog: pytest.LogCaptureFixture) -> None:
    calls: list[int] = []

    def layout() -> CommandOutput:
        calls.append(1)
        return CommandOutput(returncode=0, stdout="xrandr --output DP-1 --off --output DP-2 --auto\n")

    caplog.set_level(logging.INFO)
    match_outputs([HDMI, DP, EMPTY], {"ABC1": ["--auto"]}, ["--off"], verbose=True, layout=layout)

    assert "Matched HDMI-1 @ 0 to ABC1." in caplog.messages
    assert "Couldn't match DP-1 to any serial." in caplog.messages
    assert "  EDID strings: *** no edid ***" in caplog.messages
    assert "  current config: --auto" in caplog.messages
    assert len(calls) == 1


def test_quiet_matching_never_queries_layout() -> None:
    def layout() -> CommandOutput:
        raise AssertionError("layout must not be queried")

    match_outputs([HDMI, DP], {"ZZZ9": ["--auto"]}, ["--off"], layout=layout)


def test_diagnose_output_degrades_to_placeholders() -> None:
    diagnostics = diagnose_output(DP, Unavailable(command=("unxrandr",), reason="missing"))
    assert diagnostics.output == "DP-1"
    assert diagnostics.edid_strings == "*** no edid ***"
    assert diagnostics.current_config == "unknown (need 'unxrandr' installed)"


def test_empty_identifier_matches_every_output() -> None:
    result = match_outputs([HDMI, DP], {"": ["--auto"]}, ["--off"], strict=True)
    assert [a.tokens for a in result.assignments] == [("--auto",), ("--auto",)]
    assert result.unmatched == ()
