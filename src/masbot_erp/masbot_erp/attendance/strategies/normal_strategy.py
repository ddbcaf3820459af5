from __future__ import annotations

from datetime import time

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """First punch at or before the threshold."""

    def decide(self, *, time_in: time, threshold: time) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
