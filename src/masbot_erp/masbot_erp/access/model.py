from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from ..core.enums import PermissionAction, Role


@dataclass(frozen=True)
class PagePermissions:
    view: bool = False
    edit: bool = False
    update: bool = False
    delete: bool = False

    def allows(self, action: PermissionAction) -> bool:
        return bool(getattr(self, action.value))

    def to_dict(self) -> dict:
        return {"view": self.view, "edit": self.edit, "update": self.update, "delete": self.delete}

    @classmethod
    def from_dict(cls, data: dict) -> "PagePermissions":
        return cls(
            view=bool(data.get("view", False)),
            edit=bool(data.get("edit", False)),
            update=bool(data.get("update", False)),
            delete=bool(data.get("delete", False)),
        )


# module_id -> page_id -> flags
ModulePermissions = Dict[str, PagePermissions]
UserPermissions = Dict[str, ModulePermissions]


@dataclass(frozen=True)
class Identity:
    """Who is acting. Built once at login and carried through every service call."""

    email: str
    role: Role
    employee_id: Optional[int] = None
    full_name: str = ""
    department: Optional[str] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN

    @property
    def is_hr(self) -> bool:
        return self.role == Role.HR

    @property
    def is_hod(self) -> bool:
        return self.role == Role.HOD

    @property
    def is_manager(self) -> bool:
        return self.role in {Role.SUPER_ADMIN, Role.HOD, Role.HR}

    @property
    def display_name(self) -> str:
        return self.full_name or self.email
