"""Authentication-related request and response schemas."""

from pydantic import BaseModel

from backoffice.schemas.employee import EmployeeRead


class LoginRequest(BaseModel):
    """Payload for employee login."""

    email: str
    password: str


class TokenResponse(BaseModel):
    """JWT response payload."""

    access_token: str
    token_type: str = "bearer"
    employee: EmployeeRead
