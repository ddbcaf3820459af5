from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..access.model import Identity
from ..common.validators import require_min_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from ..employees.repository import EmployeeRepository
from .repository import AccountRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class LoginResult:
    identity: Identity
    password_change_required: bool


class AuthService:
    """Use case: log in and manage own password.

    The configured super-admin login is recognised here and nowhere else; the
    rest of the system only sees ``Role.SUPER_ADMIN`` on the identity.
    """

    def __init__(
        self,
        accounts: AccountRepository,
        employees: EmployeeRepository,
        *,
        super_admin_email: str,
        super_admin_password_hash: Optional[str],
    ):
        self._accounts = accounts
        self._employees = employees
        self._super_admin_email = (super_admin_email or "").strip().lower()
        self._super_admin_password_hash = super_admin_password_hash or ""

    @staticmethod
    def _verify(password_hash: str, password: str) -> bool:
        try:
            return check_password_hash(password_hash, password)
        except ValueError:
            # placeholder or corrupted hash values
            return False

    def authenticate(self, email: str, password: str) -> LoginResult:
        email = (email or "").strip().lower()
        if not email or not password:
            raise AuthenticationError("Invalid email or password")

        if self._super_admin_email and email == self._super_admin_email:
            if not self._verify(self._super_admin_password_hash, password):
                logger.warning("Failed super-admin login")
                raise AuthenticationError("Invalid email or password")
            logger.info("Super-admin logged in")
            return LoginResult(
                identity=Identity(email=email, role=Role.SUPER_ADMIN, full_name="Administrator"),
                password_change_required=False,
            )

        account = self._accounts.get_by_email(email)
        if not account or not account.is_active or not self._verify(account.password_hash, password):
            logger.warning("Failed login for %s", email)
            raise AuthenticationError("Invalid email or password")

        employee = self._employees.get_by_email(email)
        if employee is None:
            identity = Identity(email=email, role=Role.EMPLOYEE)
        else:
            identity = Identity(
                email=email,
                role=employee.role,
                employee_id=employee.id,
                full_name=employee.full_name,
                department=employee.department,
            )
        logger.info("User %s logged in as %s", email, identity.role.value)
        return LoginResult(identity=identity, password_change_required=account.password_change_required)

    def create_account(self, *, email: str, password: str) -> int:
        email = require_non_empty(email, "Email").lower()
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        if self._accounts.get_by_email(email):
            raise ValidationError("An account with this email already exists")
        return self._accounts.create(
            email=email,
            password_hash=generate_password_hash(password),
            password_change_required=True,
        )

    def change_password(self, *, identity: Identity, current_password: str, new_password: str, confirm_password: str) -> None:
        if identity.is_super_admin:
            raise ValidationError("The administrator password is managed in configuration")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        if new_password != confirm_password:
            raise ValidationError("Passwords do not match")

        account = self._accounts.get_by_email(identity.email)
        if not account or not self._verify(account.password_hash, current_password):
            raise AuthenticationError("Current password is incorrect")

        self._accounts.update_password(
            email=identity.email,
            password_hash=generate_password_hash(new_password),
            password_change_required=False,
        )
        logger.info("Password changed for %s", identity.email)
