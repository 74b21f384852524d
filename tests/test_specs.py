from __future__ import annotations

import logging

import pytest

from edidrandr.core.errors import UsageError
from edidrandr.core.specs import CONFIG, SERIAL, collect_specs, merge_specs, split_tokens


def test_collect_specs_keeps_flag_order() -> None:
    specs = collect_specs(
        [
            (SERIAL, "ABC1"),
            (CONFIG, "--auto --primary"),
            (SERIAL, "XYZ9"),
            (CONFIG, "--auto  --right-of HDMI-1"),
        ]
    )
    assert list(specs) == ["ABC1", "XYZ9"]
    assert specs["XYZ9"] == ("--auto", "--right-of", "HDMI-1")


def test_config_before_any_serial_is_usage_error() -> None:
    with pytest.raises(UsageError) as exc:
        collect_specs([(CONFIG, "--auto"), (SERIAL, "ABC1")])
    assert "no serial given so far" in str(exc.value)


def test_config_binds_to_latest_serial() -> None:
    specs = collect_specs([(SERIAL, "ZZZ9"), (SERIAL, "ABC1"), (CONFIG, "--auto")])
    assert specs == {"ABC1": ("--auto",)}


def test_repeated_config_keeps_first() -> None:
    specs = collect_specs([(SERIAL, "ABC1"), (CONFIG, "--auto"), (CONFIG, "--off"), (SERIAL, "ABC1"), (CONFIG, "--left-of DP-1")])
    assert specs == {"ABC1": ("--auto",)}


def test_serial_without_config_is_dropped(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    specs = collect_specs([(SERIAL, "ABC1"), (CONFIG, "--auto"), (SERIAL, "XYZ9")])
    assert specs == {"ABC1": ("--auto",)}
    assert any("XYZ9" in message for message in caplog.messages)


def test_merge_specs_preferred_entries_win_and_come_first() -> None:
    merged = merge_specs({"XYZ9": ["--rotate", "left"]}, {"ABC1": ["--auto"], "XYZ9": ["--off"]})
    assert merged == {"XYZ9": ("--rotate", "left"), "ABC1": ("--auto",)}
    assert list(merged) == ["XYZ9", "ABC1"]


def test_split_tokens_on_whitespace() -> None:
    assert split_tokens("  --fb\t3840x1080 ") == ("--fb", "3840x1080")
    assert split_tokens("") == ()
