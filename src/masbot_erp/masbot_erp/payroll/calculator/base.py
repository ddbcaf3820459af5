from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import AbstractSet


@dataclass(frozen=True)
class PayResult:
    paid_days: int
    net_pay: Decimal
    deductions: Decimal


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(
        self,
        *,
        salary: Decimal,
        present_days: AbstractSet[date],
        leave_days: AbstractSet[date],
        month_has_attendance: bool,
    ) -> PayResult:
        raise NotImplementedError
