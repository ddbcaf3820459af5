from __future__ import annotations

import logging

from ..core.enums import PermissionAction
from ..core.exceptions import AuthorizationError, ValidationError
from . import catalog
from .model import Identity, PagePermissions, UserPermissions
from .repository import PermissionRepository

logger = logging.getLogger(__name__)


class AccessControl:
    """Deny-by-default permission checks over the per-user matrix.

    The super-admin identity bypasses the matrix entirely; everyone else needs
    an explicit flag for the (module, page, action) triple.
    """

    def __init__(self, permissions: PermissionRepository):
        self._permissions = permissions

    def can(self, identity: Identity, module_id: str, page_id: str, action: PermissionAction) -> bool:
        if identity.is_super_admin:
            return True
        matrix = self._permissions.get_for_user(identity.email)
        page = matrix.get(module_id, {}).get(page_id)
        if page is None:
            return False
        return page.allows(action)

    def require(self, identity: Identity, module_id: str, page_id: str, action: PermissionAction) -> None:
        if not self.can(identity, module_id, page_id, action):
            logger.warning(
                "Denied %s on %s/%s for %s", action.value, module_id, page_id, identity.email
            )
            raise AuthorizationError("You do not have permission to perform this action")

    def accessible_modules(self, identity: Identity) -> list[str]:
        if identity.is_super_admin:
            return list(catalog.MODULES)
        matrix = self._permissions.get_for_user(identity.email)
        return [
            module_id
            for module_id in catalog.MODULES
            if any(p.view for p in matrix.get(module_id, {}).values())
        ]

    def permissions_for(self, email: str) -> UserPermissions:
        return self._permissions.get_for_user(email)

    def set_user_permissions(self, email: str, matrix: dict) -> UserPermissions:
        if not email or not email.strip():
            raise ValidationError("User email is required")

        cleaned: UserPermissions = {}
        for module_id, pages in (matrix or {}).items():
            if not catalog.is_known(module_id):
                raise ValidationError(f"Unknown module: {module_id}")
            cleaned[module_id] = {}
            for page_id, flags in (pages or {}).items():
                if not catalog.is_known(module_id, page_id):
                    raise ValidationError(f"Unknown page {page_id} in module {module_id}")
                if isinstance(flags, PagePermissions):
                    flags = flags.to_dict()
                cleaned[module_id][page_id] = PagePermissions.from_dict(flags)

        self._permissions.replace_for_user(email.strip(), cleaned)
        logger.info("Updated permissions for %s (%d modules)", email, len(cleaned))
        return cleaned

    def enable_module(self, email: str, module_id: str) -> UserPermissions:
        if not catalog.is_known(module_id):
            raise ValidationError(f"Unknown module: {module_id}")
        current = self._copy(self._permissions.get_for_user(email))
        if module_id not in current:
            current[module_id] = {page_id: PagePermissions() for page_id in catalog.pages_for(module_id)}
        self._permissions.replace_for_user(email, current)
        return current

    def disable_module(self, email: str, module_id: str) -> UserPermissions:
        current = self._copy(self._permissions.get_for_user(email))
        current.pop(module_id, None)
        self._permissions.replace_for_user(email, current)
        return current

    def set_page_permission(
        self,
        email: str,
        module_id: str,
        page_id: str,
        action: PermissionAction,
        allowed: bool,
    ) -> UserPermissions:
        if not catalog.is_known(module_id, page_id):
            raise ValidationError(f"Unknown page {page_id} in module {module_id}")
        current = self._copy(self._permissions.get_for_user(email))
        pages = current.setdefault(module_id, {})
        flags = pages.get(page_id, PagePermissions()).to_dict()
        flags[action.value] = bool(allowed)
        pages[page_id] = PagePermissions.from_dict(flags)
        self._permissions.replace_for_user(email, current)
        return current

    @staticmethod
    def _copy(matrix: UserPermissions) -> UserPermissions:
        return {module_id: dict(pages) for module_id, pages in matrix.items()}
