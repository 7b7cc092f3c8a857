"""Prober module - Per-endpoint connect, trace and upgrade checks."""

from colo_scout.prober.endpoint import EndpointProber
from colo_scout.prober.filters import accepts
from colo_scout.prober.trace import TraceInfo, parse_trace

__all__ = [
    "EndpointProber",
    "accepts",
    "TraceInfo",
    "parse_trace",
]
