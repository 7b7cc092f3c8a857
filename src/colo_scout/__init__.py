"""colo-scout - Concurrent edge endpoint latency and trace prober."""

__version__ = "1.0.0"

from colo_scout.core.config import Settings
from colo_scout.core.models import Endpoint, LocationInfo, ProbeOutcome

__all__ = [
    "Settings",
    "Endpoint",
    "LocationInfo",
    "ProbeOutcome",
]
