from __future__ import annotations

from typing import Protocol

from .model import UserPermissions


class PermissionRepository(Protocol):
    """Stores the per-user permission matrix.

    A user with no stored rows is returned as an empty mapping.
    """

    def get_for_user(self, email: str) -> UserPermissions:
        raise NotImplementedError

    def replace_for_user(self, email: str, permissions: UserPermissions) -> None:
        raise NotImplementedError

    def list_all(self) -> dict[str, UserPermissions]:
        raise NotImplementedError
