"""Employee service operations."""

from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.core.errors import ValidationError
from backoffice.models.employee import Employee, normalize_employee_role


def get_employee_by_email(db: Session, email: str) -> Employee | None:
    return db.scalar(select(Employee).where(Employee.email == email.strip().lower()).limit(1))


def get_employee_by_id(db: Session, employee_id: int) -> Employee | None:
    return db.get(Employee, employee_id)


def create_employee(
    db: Session,
    name: str,
    email: str,
    hashed_password: str,
    role: str,
) -> Employee:
    """Persist a new employee with a canonical role and lower-cased email."""
    try:
        canonical_role = normalize_employee_role(role)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    normalized_email = email.strip().lower()
    if not normalized_email or not name.strip():
        raise ValidationError("Name and email are required")
    if get_employee_by_email(db=db, email=normalized_email) is not None:
        raise ValidationError("Email already registered")

    employee = Employee(
        name=name.strip(),
        email=normalized_email,
        password_hash=hashed_password,
        role=canonical_role,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee
