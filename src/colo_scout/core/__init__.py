"""Core module - Configuration, models, scheduling and progress."""

from colo_scout.core.config import Settings
from colo_scout.core.models import Endpoint, LocationInfo, ProbeOutcome
from colo_scout.core.progress import ProgressState, ProgressTracker
from colo_scout.core.scheduler import ProbeScheduler

__all__ = [
    "Settings",
    "Endpoint",
    "LocationInfo",
    "ProbeOutcome",
    "ProgressState",
    "ProgressTracker",
    "ProbeScheduler",
]
