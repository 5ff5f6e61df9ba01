"""Login rate limiting backed by the record store.

The counter lives in ``login_attempts`` so every API instance behind a load
balancer sees the same budget. A key's counter expires once it has been idle for
``LOGIN_WINDOW_MINUTES``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.core.config import settings
from backoffice.core.errors import RateLimitedError
from backoffice.models import LoginAttempt
from backoffice.utils.time import ensure_utc, utc_now

logger = logging.getLogger(__name__)


def _window() -> timedelta:
    return timedelta(minutes=settings.login_window_minutes)


def register_attempt(db: Session, key: str, now: datetime | None = None) -> int:
    """Count one login attempt for ``key`` and return the current count."""
    now = now or utc_now()
    attempt = db.get(LoginAttempt, key)
    if attempt is None:
        db.add(LoginAttempt(key=key, count=1, window_started_at=now, last_attempt_at=now))
        try:
            db.commit()
            return 1
        except IntegrityError:
            # Another instance inserted the row first; fall through to increment.
            db.rollback()
            attempt = db.get(LoginAttempt, key)
            if attempt is None:
                raise

    if now - ensure_utc(attempt.last_attempt_at) > _window():
        attempt.count = 1
        attempt.window_started_at = now
        attempt.last_attempt_at = now
        db.commit()
        return 1

    db.execute(
        update(LoginAttempt)
        .where(LoginAttempt.key == key)
        .values(count=LoginAttempt.count + 1, last_attempt_at=now)
    )
    db.commit()
    db.refresh(attempt)
    return attempt.count


def enforce_login_budget(db: Session, key: str, now: datetime | None = None) -> None:
    """Register an attempt and reject the caller once it exceeds the budget."""
    count = register_attempt(db, key, now=now)
    if count > settings.login_max_attempts:
        logger.warning("[AUTH] Login rate limit exceeded for %s (%s attempts)", key, count)
        raise RateLimitedError("Too many login attempts. Please try again later.")


def reset_attempts(db: Session, key: str) -> None:
    db.execute(delete(LoginAttempt).where(LoginAttempt.key == key))
    db.commit()


def purge_expired_attempts(db: Session, now: datetime | None = None) -> int:
    """Delete counters idle for longer than the window; return how many."""
    cutoff = (now or utc_now()) - _window()
    result = db.execute(delete(LoginAttempt).where(LoginAttempt.last_attempt_at < cutoff))
    db.commit()
    return result.rowcount or 0
