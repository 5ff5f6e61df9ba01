"""Security utilities for password hashing and JWT-based employee auth."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from backoffice.core.config import settings
from backoffice.core.errors import ForbiddenError, UnauthenticatedError
from backoffice.db.session import get_db
from backoffice.models.employee import Employee
from backoffice.services.employee_service import get_employee_by_id

pwd_context: CryptContext = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
bearer_scheme: HTTPBearer = HTTPBearer(auto_error=False)

MUTATING_ROLES: frozenset[str] = frozenset({"admin", "manager"})
READ_ROLES: frozenset[str] = frozenset({"admin", "manager", "support"})


def get_password_hash(password: str) -> str:
    """Hash a plaintext password."""
    if not password:
        raise ValueError("Password must not be empty.")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(employee: Employee) -> str:
    """Create a signed, short-lived JWT for an employee."""
    expire: datetime = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    to_encode: dict[str, Any] = {
        "sub": str(employee.id),
        "email": employee.email,
        "name": employee.name,
        "role": employee.role,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token payload."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        raise UnauthenticatedError("Invalid or expired token") from exc

    return payload


def get_current_employee(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Employee:
    """Resolve the authenticated employee from the Authorization header."""
    if credentials is None:
        raise UnauthenticatedError("Authentication required")

    payload: dict[str, Any] = verify_token(credentials.credentials)
    try:
        employee_id: int = int(payload.get("sub"))
    except (TypeError, ValueError) as exc:
        raise UnauthenticatedError("Invalid authentication token") from exc

    employee: Employee | None = get_employee_by_id(db=db, employee_id=employee_id)
    if employee is None:
        raise UnauthenticatedError("Employee not found")

    return employee


def ensure_role(employee: Employee, allowed_roles: frozenset[str] | set[str]) -> None:
    """Ensure the employee's role is one of the allowed roles."""
    if employee.role not in allowed_roles:
        raise ForbiddenError("Insufficient permissions")


def require_roles(*roles: str) -> Callable[..., Employee]:
    """Build a dependency that authenticates and then checks the caller's role."""

    allowed = frozenset(role.lower() for role in roles)

    def _checker(employee: Employee = Depends(get_current_employee)) -> Employee:
        ensure_role(employee, allowed)
        return employee

    return _checker
