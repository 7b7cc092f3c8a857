"""Custom exceptions for colo-scout.

Probe failures are per-endpoint and never fatal: the scheduler turns them
into an "attempted, not accepted" event. Input errors (targets, location
table) surface to the caller.
"""

from __future__ import annotations


class ColoScoutError(Exception):
    """Base exception for all colo-scout errors.

    All custom exceptions inherit from this class, allowing callers to
    catch every colo-scout error with a single except clause.
    """
    pass


class ProbeError(ColoScoutError):
    """Raised when probing a single endpoint fails.

    This includes failures in:
    - TCP/TLS connection establishment
    - Trace fetch and response matching
    - Protocol upgrade validation
    """

    def __init__(self, message: str, endpoint: object | None = None):
        super().__init__(message)
        self.endpoint = endpoint


class ConnectError(ProbeError):
    """Raised when a TCP or TLS connection cannot be established."""
    pass


class ProbeTimeoutError(ProbeError):
    """Raised when any probe stage exceeds its time bound."""
    pass


class NoMatchError(ProbeError):
    """Raised when a response arrives but lacks the expected trace markers.

    The endpoint is reachable but is not serving the expected service.
    """
    pass


class UpgradeFailedError(ProbeError):
    """Raised when the trace succeeded but upgrade validation did not."""
    pass


class TargetParseError(ColoScoutError):
    """Raised when a target IP, range or port cannot be parsed."""
    pass


class LocationTableError(ColoScoutError):
    """Raised when the location table file is unreadable or malformed."""
    pass
