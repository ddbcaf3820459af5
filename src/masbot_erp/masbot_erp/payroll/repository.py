from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import PayrollRecord


class PayrollRepository(Protocol):
    def create(self, record: PayrollRecord) -> int:
        raise NotImplementedError

    def get(self, payroll_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def list_all(self) -> Sequence[PayrollRecord]:
        """Newest run first."""
        raise NotImplementedError
