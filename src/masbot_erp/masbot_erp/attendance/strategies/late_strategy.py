from __future__ import annotations

from datetime import time

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late arrival."""

    def decide(self, *, time_in: time, threshold: time) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE, note=f"after {threshold.strftime('%H:%M')}")
