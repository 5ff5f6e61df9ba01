"""Order history writer with retry, idempotency and a dead-letter path."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from backoffice.core.config import settings
from backoffice.core.errors import ConsistencyWarning, UnavailableError
from backoffice.models import AuditDeadLetter, Order, OrderHistory
from backoffice.utils.time import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionRecord:
    """Everything needed to write one history entry, keyed by ``operation_id``."""

    operation_id: str
    order_id: str
    status: str
    employee_id: int
    employee_name: str
    employee_role: str
    notes: str | None
    occurred_at: datetime


@dataclass
class ReplayResult:
    replayed: int = 0
    failed: int = 0
    discarded: int = 0


def _find_entry(db: Session, operation_id: str) -> OrderHistory | None:
    return db.scalar(select(OrderHistory).where(OrderHistory.operation_id == operation_id).limit(1))


def _write_entry(db: Session, record: TransitionRecord) -> OrderHistory:
    existing = _find_entry(db, record.operation_id)
    if existing is not None:
        return existing

    entry = OrderHistory(
        order_id=record.order_id,
        operation_id=record.operation_id,
        status=record.status,
        employee_id=record.employee_id,
        employee_name=record.employee_name,
        employee_role=record.employee_role,
        notes=record.notes,
        created_at=record.occurred_at,
    )
    db.add(entry)
    db.flush()
    return entry


def record_transition(db: Session, record: TransitionRecord) -> OrderHistory:
    """Write the history entry for ``record`` inside a savepoint.

    Transient store errors are retried with exponential backoff. Writing the same
    operation twice returns the existing entry. Raises ConsistencyWarning when all
    attempts fail or the store rejects the row outright; the enclosing transaction
    is left usable.
    """
    attempts = max(1, settings.audit_retry_attempts)
    last_error: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            with db.begin_nested():
                return _write_entry(db, record)
        except IntegrityError as exc:
            existing = _find_entry(db, record.operation_id)
            if existing is not None:
                return existing
            # Constraint violations other than a duplicate operation are not transient.
            logger.error(
                "[AUDIT] History write rejected for order=%s operation=%s: %s",
                record.order_id,
                record.operation_id,
                exc.orig if exc.orig is not None else exc,
            )
            raise ConsistencyWarning(
                f"History entry for order {record.order_id} was rejected by the store: {exc.orig or exc}",
                order_id=record.order_id,
                operation_id=record.operation_id,
            ) from exc
        except OperationalError as exc:
            last_error = exc
            logger.warning(
                "[AUDIT] History write failed for order=%s operation=%s (attempt %s/%s): %s",
                record.order_id,
                record.operation_id,
                attempt,
                attempts,
                exc.orig if exc.orig is not None else exc,
            )
            if attempt < attempts:
                time.sleep(settings.audit_retry_backoff_seconds * (2 ** (attempt - 1)))

    raise ConsistencyWarning(
        f"History entry for order {record.order_id} could not be written: {last_error}",
        order_id=record.order_id,
        operation_id=record.operation_id,
    ) from last_error


def park_dead_letter(db: Session, record: TransitionRecord, error: str) -> AuditDeadLetter:
    """Store an unwritten history entry in the same transaction as the order change."""
    dead_letter = AuditDeadLetter(
        operation_id=record.operation_id,
        order_id=record.order_id,
        status=record.status,
        employee_id=record.employee_id,
        employee_name=record.employee_name,
        employee_role=record.employee_role,
        notes=record.notes,
        occurred_at=record.occurred_at,
        last_error=error,
    )
    db.add(dead_letter)
    return dead_letter


def list_dead_letters(db: Session, include_resolved: bool = False) -> list[AuditDeadLetter]:
    query = select(AuditDeadLetter).order_by(AuditDeadLetter.occurred_at.asc(), AuditDeadLetter.id.asc())
    if not include_resolved:
        query = query.where(AuditDeadLetter.resolved_at.is_(None))
    return list(db.scalars(query).all())


def replay_dead_letters(db: Session) -> ReplayResult:
    """Re-apply parked history entries, oldest first."""
    result = ReplayResult()
    for dead_letter in list_dead_letters(db):
        record = TransitionRecord(
            operation_id=dead_letter.operation_id,
            order_id=dead_letter.order_id,
            status=dead_letter.status,
            employee_id=dead_letter.employee_id,
            employee_name=dead_letter.employee_name,
            employee_role=dead_letter.employee_role,
            notes=dead_letter.notes,
            occurred_at=dead_letter.occurred_at,
        )
        if db.get(Order, record.order_id) is None:
            dead_letter.last_error = "Order no longer exists"
            dead_letter.resolved_at = utc_now()
            result.discarded += 1
            continue
        try:
            record_transition(db, record)
        except ConsistencyWarning as exc:
            dead_letter.last_error = exc.message
            result.failed += 1
            continue
        dead_letter.resolved_at = utc_now()
        result.replayed += 1

    try:
        db.commit()
    except OperationalError as exc:
        db.rollback()
        raise UnavailableError("Record store unavailable") from exc

    if result.replayed or result.failed:
        logger.info("[AUDIT] Dead-letter replay: replayed=%s failed=%s", result.replayed, result.failed)
    return result
