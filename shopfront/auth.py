"""Employee login and bearer-token checks for the back-office endpoints."""

import secrets
from datetime import timedelta
from typing import Iterable, Optional

import bcrypt
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from .core import EmployeeOut, LoginOut
from .errors import ForbiddenError, UnauthorizedError, ValidationError
from .logging_config import get_logger
from .models import AuthToken, Employee, utcnow

log = get_logger(__name__)

BCRYPT_ROUNDS = 12


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """bcrypt hash, interchangeable with hashes written by other bcrypt implementations."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds)).decode()


def verify_password(password: str, stored: Optional[str]) -> bool:
    if not stored:
        return False
    try:
        return bcrypt.checkpw(password.encode(), stored.encode())
    except (TypeError, ValueError):
        # malformed hash, or a password bcrypt refuses (over 72 bytes)
        return False


def employee_out(employee: Employee) -> EmployeeOut:
    return EmployeeOut(
        id=employee.id,
        employee_code=employee.employee_code,
        first_name=employee.first_name,
        last_name=employee.last_name,
        email=employee.email,
        role=employee.role.name if employee.role else None,
        permissions=employee.permissions,
    )


def login(db: Session, employee_code: str, password: str, ttl_hours: int = 8) -> LoginOut:
    if not employee_code or not employee_code.strip():
        raise ValidationError("Validation failed: Employee code is required (employeeCode)")
    if not password:
        raise ValidationError("Validation failed: Password is required (password)")

    employee = db.scalar(
        select(Employee).where(
            Employee.employee_code == employee_code.strip(), Employee.is_active.is_(True)
        )
    )
    if employee is None or not verify_password(password, employee.password_hash):
        log.warning(f"Failed login for employee code {employee_code!r}")
        raise UnauthorizedError("Invalid credentials")

    now = utcnow()
    token = AuthToken(
        token=secrets.token_urlsafe(32),
        employee_id=employee.id,
        created_at=now,
        expires_at=now + timedelta(hours=ttl_hours),
    )
    employee.last_login_at = now
    db.execute(
        delete(AuthToken).where(AuthToken.employee_id == employee.id, AuthToken.expires_at <= now)
    )
    db.add(token)
    db.commit()

    log.info(f"Employee {employee.employee_code} logged in")
    return LoginOut(
        access_token=token.token,
        expires_at=token.expires_at,
        user=employee_out(employee),
    )


def _parse_bearer(authorization: Optional[str]) -> str:
    if not authorization:
        raise UnauthorizedError("No token provided")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("No token provided")
    return token.strip()


def authenticate(db: Session, authorization: Optional[str]) -> Employee:
    """Employee behind an ``Authorization: Bearer <token>`` header."""
    token_value = _parse_bearer(authorization)
    token = db.get(AuthToken, token_value)
    if token is None or token.expires_at <= utcnow():
        raise UnauthorizedError("Invalid or expired token")
    employee = token.employee
    if employee is None or not employee.is_active:
        raise UnauthorizedError("User not found or inactive")
    return employee


def has_permission(granted: Iterable[str], required: str) -> bool:
    granted = set(granted)
    if "*" in granted or required in granted:
        return True
    area, _, _ = required.partition(".")
    return f"{area}.*" in granted


def authorize(employee: Employee, *required: str) -> Employee:
    """Passes when the employee holds any of ``required``."""
    if any(has_permission(employee.permissions, r) for r in required):
        return employee
    raise ForbiddenError("Insufficient permissions")

