"""Allow-set filtering of probe outcomes."""

from __future__ import annotations

from collections.abc import Collection
from typing import Optional

from colo_scout.core.models import ProbeOutcome


def accepts(outcome: ProbeOutcome, allowed: Optional[Collection[str]]) -> bool:
    """Return True if *outcome* passes the data-center allow-set.

    With no allow-set every outcome passes; otherwise the outcome's
    data-center code must be a member.
    """
    if allowed is None:
        return True
    return outcome.data_center in allowed
