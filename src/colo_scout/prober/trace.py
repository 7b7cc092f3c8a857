"""Parsing of the plaintext trace response."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

# The trace endpoint echoes our User-Agent back; its presence proves the
# body came from the expected service rather than some other HTTP server.
USER_AGENT_MARKER = "uag=Mozilla/5.0"

COLO_PATTERN = re.compile(r"colo=([A-Z]+)")


@dataclass
class TraceInfo:
    """Fields extracted from a trace body."""

    data_center: Optional[str] = None
    has_marker: bool = False

    @property
    def matched(self) -> bool:
        return self.has_marker and self.data_center is not None


def parse_trace(body: str) -> TraceInfo:
    """Check *body* for the user-agent echo and extract the ``colo=`` code."""
    match = COLO_PATTERN.search(body)
    return TraceInfo(
        data_center=match.group(1) if match else None,
        has_marker=USER_AGENT_MARKER in body,
    )
