from __future__ import annotations

from datetime import date

from ..core.constants import FULL_LEAVE_QUOTAS, NON_PRORATED_LEAVE_KEYS
from ..core.enums import EmploymentType
from .model import LeaveBalance, LeaveQuota


def _round_half_up(numerator: int, denominator: int) -> int:
    return (2 * numerator + denominator) // (2 * denominator)


def pro_rata_balance(joining_date: date, *, today: date) -> LeaveBalance:
    """Yearly quotas scaled by the months left in the joining year.

    The joining month counts as a full month. Anyone who joined in an earlier
    year gets the full quotas.
    """
    if joining_date.year < today.year:
        return LeaveBalance(quotas={k: LeaveQuota(total=v) for k, v in FULL_LEAVE_QUOTAS.items()})

    months_remaining = 12 - (joining_date.month - 1)
    quotas = {}
    for key, full in FULL_LEAVE_QUOTAS.items():
        if key in NON_PRORATED_LEAVE_KEYS:
            quotas[key] = LeaveQuota(total=full)
        else:
            quotas[key] = LeaveQuota(total=_round_half_up(full * months_remaining, 12))
    return LeaveBalance(quotas=quotas)


def initial_balance(employment_type: EmploymentType, joining_date: date, *, today: date) -> LeaveBalance:
    if employment_type == EmploymentType.PERMANENT:
        return pro_rata_balance(joining_date, today=today)
    return LeaveBalance.empty()
