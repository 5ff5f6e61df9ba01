"""Employee management endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backoffice.core.errors import ValidationError
from backoffice.core.security import get_password_hash, require_roles
from backoffice.db.session import get_db
from backoffice.models.employee import Employee
from backoffice.schemas.employee import EmployeeCreate, EmployeeRead
from backoffice.services.employee_service import create_employee

router: APIRouter = APIRouter()


@router.post("", response_model=EmployeeRead, status_code=status.HTTP_201_CREATED)
def create(
    payload: EmployeeCreate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_roles("admin")),
) -> EmployeeRead:
    """Create a back-office account (admin only)."""
    try:
        hashed_password = get_password_hash(payload.password)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    employee = create_employee(
        db=db,
        name=payload.name,
        email=payload.email,
        hashed_password=hashed_password,
        role=payload.role,
    )
    return EmployeeRead.model_validate(employee)
