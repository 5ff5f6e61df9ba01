"""Employee ORM model."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.db.base import Base

EMPLOYEE_ROLES = ("admin", "manager", "support")


def normalize_employee_role(role: str | None) -> str:
    """Return canonical lower-case role or raise for unknown values."""
    normalized = str(role or "").strip().lower()
    if normalized not in EMPLOYEE_ROLES:
        raise ValueError(f"Unknown employee role: {role!r}")
    return normalized


class Employee(Base):
    """Internal back-office account used for authorization and audit attribution."""

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(Enum(*EMPLOYEE_ROLES, name="employee_role"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"Employee(id={self.id!r}, email={self.email!r}, role={self.role!r})"
