"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from backoffice.models import audit_dead_letter as _audit_dead_letter  # noqa: E402,F401
from backoffice.models import employee as _employee  # noqa: E402,F401
from backoffice.models import login_attempt as _login_attempt  # noqa: E402,F401
from backoffice.models import order as _order  # noqa: E402,F401
from backoffice.models import order_history as _order_history  # noqa: E402,F401
