"""EDID identifier encoding and human-readable decoding."""

from __future__ import annotations

import logging
import re

NO_EDID = "*** no edid ***"
UNKNOWN_EDID = "*** unknown edid (exception when parsing) ***"

_PAIR_RE = re.compile(r"..", re.DOTALL)
_WORD_RE = re.compile(r"[\w-]{3,}", re.ASCII)
LOGGER = logging.getLogger(__name__)


def encode_identifier(identifier: str) -> str:
    return "".join("%02x" % ord(char) for char in identifier)


def identifier_in_edid(identifier: str, edid: str | None) -> bool:
    return encode_identifier(identifier) in (edid or "")


def humanize_edid(edid: str | None) -> str:
    """Best-effort printable strings from a hex EDID blob, for display only."""
    if not edid:
        return NO_EDID
    try:
        chars = []
        for pair in _PAIR_RE.findall(edid):
            code = int(pair, 16)
            chars.append(chr(code) if 32 <= code <= 126 else "\x00")
    except ValueError as exc:
        LOGGER.debug("Could not decode EDID blob: %s", exc)
        return UNKNOWN_EDID
    return " ".join(_WORD_RE.findall("".join(chars)))
