"""Database seeding helpers."""

import logging

from sqlalchemy.orm import Session

from backoffice.core.config import settings
from backoffice.core.security import get_password_hash
from backoffice.services.employee_service import create_employee, get_employee_by_email

logger = logging.getLogger(__name__)


def ensure_admin_employee(session: Session) -> bool:
    """Ensure the configured bootstrap admin exists in development only.

    Returns whether an admin account with the configured email is present.
    """
    if settings.app_env != "dev" or not settings.admin_email or not settings.admin_password:
        return False

    if get_employee_by_email(db=session, email=settings.admin_email) is not None:
        return True

    try:
        hashed_password = get_password_hash(settings.admin_password)
    except ValueError as exc:
        logger.warning("[BOOTSTRAP] Skipping admin seed: %s", exc)
        return False

    create_employee(
        db=session,
        name=settings.admin_name,
        email=settings.admin_email,
        hashed_password=hashed_password,
        role="admin",
    )
    logger.info("[BOOTSTRAP] Created admin employee %s", settings.admin_email)
    return True
