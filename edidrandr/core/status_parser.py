"""Parser for ``xrandr --prop`` status dumps."""

from __future__ import annotations

import enum
import logging
import re

from edidrandr.core.model import DiscoveredOutput

_SCREEN_RE = re.compile(r"^Screen\s+(\d+):")
_OUTPUT_RE = re.compile(r"^(\S+)\s+((dis)?connected|unknown connection)")
_EDID_LABEL_RE = re.compile(r"^\s*EDID:\s*$")
_EDID_DATA_RE = re.compile(r"^\s*([0-9a-f]+)\s*$")
LOGGER = logging.getLogger(__name__)


class ParserState(enum.Enum):
    NORMAL = "normal"
    COLLECTING_EDID = "collecting_edid"


class _PendingOutput:
    def __init__(self, name: str, connection: str, screen: int | None) -> None:
        self.name = name
        self.connection = connection
        self.screen = screen
        self.edid: str | None = None

    def finalize(self) -> DiscoveredOutput:
        return DiscoveredOutput(
            name=self.name,
            connection=self.connection,
            edid=self.edid,
            screen=self.screen,
        )


class StatusParser:
    """Two-state line parser turning a status dump into discovered outputs.

    The line that terminates an EDID block is handed back to the ``NORMAL``
    rules, so a header directly after the hex dump is never lost.
    """

    def __init__(self) -> None:
        self.state = ParserState.NORMAL
        self.screen: int | None = None
        self.outputs: list[DiscoveredOutput] = []
        self._pending: _PendingOutput | None = None
        self._chunks: list[str] = []

    def feed(self, line: str) -> None:
        if self.state is ParserState.COLLECTING_EDID:
            match = _EDID_DATA_RE.match(line)
            if match:
                self._chunks.append(match.group(1))
                return
            self._close_edid()
        self._feed_normal(line)

    def finish(self) -> list[DiscoveredOutput]:
        if self.state is ParserState.COLLECTING_EDID:
            self._close_edid()
        self._flush_output()
        return self.outputs

    def _feed_normal(self, line: str) -> None:
        match = _SCREEN_RE.match(line)
        if match:
            self.screen = int(match.group(1))
            return

        match = _OUTPUT_RE.match(line)
        if match:
            self._flush_output()
            self._pending = _PendingOutput(match.group(1), match.group(2), self.screen)
            return

        if _EDID_LABEL_RE.match(line):
            self.state = ParserState.COLLECTING_EDID
            self._chunks = []

    def _close_edid(self) -> None:
        self.state = ParserState.NORMAL
        edid = "".join(self._chunks)
        self._chunks = []
        if self._pending is None:
            LOGGER.debug("Discarding EDID block with no preceding output")
            return
        if self._pending.connection != "connected":
            LOGGER.debug("Ignoring EDID of %s output %s", self._pending.connection, self._pending.name)
            return
        self._pending.edid = edid

    def _flush_output(self) -> None:
        if self._pending is None:
            return
        output = self._pending.finalize()
        LOGGER.debug(
            "Discovered %s (%s) on screen %s, edid %d hex digits",
            output.name,
            output.connection,
            output.screen,
            len(output.edid or ""),
        )
        self.outputs.append(output)
        self._pending = None


def parse_status(text: str) -> list[DiscoveredOutput]:
    parser = StatusParser()
    for line in text.splitlines():
        parser.feed(line)
    return parser.finish()
