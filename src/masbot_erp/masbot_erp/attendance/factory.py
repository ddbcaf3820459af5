from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_time_in(self, *, time_in: time, threshold: time) -> AttendanceStrategy:
        if time_in > threshold:
            return LateStrategy()
        return NormalStrategy()
