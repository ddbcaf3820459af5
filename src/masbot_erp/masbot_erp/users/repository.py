from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Account


class AccountRepository(Protocol):
    def get_by_email(self, email: str) -> Optional[Account]:
        raise NotImplementedError

    def create(self, *, email: str, password_hash: str, password_change_required: bool = True) -> int:
        raise NotImplementedError

    def update_password(self, *, email: str, password_hash: str, password_change_required: bool = False) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Account]:
        raise NotImplementedError
