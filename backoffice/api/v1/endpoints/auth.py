"""Authentication endpoints (API JWT)."""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from backoffice.core.errors import UnauthenticatedError
from backoffice.core.security import create_access_token, get_current_employee, verify_password
from backoffice.db.session import get_db
from backoffice.models.employee import Employee
from backoffice.schemas.auth import LoginRequest, TokenResponse
from backoffice.schemas.employee import EmployeeRead
from backoffice.services.employee_service import get_employee_by_email
from backoffice.services.rate_limit import enforce_login_budget, reset_attempts

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


def _client_key(request: Request) -> str:
    return f"login:{request.client.host if request.client else 'unknown'}"


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)) -> TokenResponse:
    key = _client_key(request)
    enforce_login_budget(db, key)

    employee: Employee | None = get_employee_by_email(db=db, email=payload.email)
    if employee is None or not verify_password(payload.password, employee.password_hash):
        logger.info("[AUTH] Failed login for %s", payload.email.strip().lower())
        raise UnauthenticatedError("Invalid credentials")

    reset_attempts(db, key)
    logger.info("[AUTH] Employee %s logged in", employee.id)
    return TokenResponse(
        access_token=create_access_token(employee),
        employee=EmployeeRead.model_validate(employee),
    )


@router.get("/me", response_model=EmployeeRead)
def me(current_employee: Employee = Depends(get_current_employee)) -> EmployeeRead:
    return EmployeeRead.model_validate(current_employee)
