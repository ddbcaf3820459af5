from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Account:
    """Login metadata; the person behind it lives in employees."""

    id: int
    email: str
    password_hash: str
    password_change_required: bool = True
    is_active: bool = True
