"""Order lifecycle: status transitions, tracking metadata and their audit trail.

Every accepted transition updates the order row and appends one ``OrderHistory``
entry in the same database transaction. Concurrent writers to the same order are
serialized optimistically through ``Order.version``; the loser gets a
``ConflictError`` and nothing is written for it.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

from sqlalchemy import func, or_, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from backoffice.core.config import settings
from backoffice.core.errors import (
    ConflictError,
    ConsistencyWarning,
    InvalidTransitionError,
    NotFoundError,
    UnavailableError,
    ValidationError,
)
from backoffice.core.security import MUTATING_ROLES, ensure_role
from backoffice.models import Employee, Order, OrderHistory
from backoffice.services.audit_service import TransitionRecord, park_dead_letter, record_transition
from backoffice.services.order_events import ChangeEvent, change_feed
from backoffice.services.order_status import (
    TRACKED_STATUSES,
    can_attach_tracking,
    can_transition,
    parse_status,
)
from backoffice.utils.time import ensure_utc, utc_now

logger = logging.getLogger(__name__)


@dataclass
class OrderPage:
    orders: list[Order]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


@contextmanager
def store_guard(db: Session) -> Iterator[None]:
    """Translate store connectivity failures into UnavailableError."""
    try:
        yield
    except OperationalError as exc:
        db.rollback()
        logger.error("[LIFECYCLE] Record store call failed: %s", exc.orig if exc.orig is not None else exc)
        raise UnavailableError("Record store unavailable") from exc


def order_record(order: Order) -> dict[str, Any]:
    """Column snapshot used as the payload of change events."""
    return {column.key: getattr(order, column.key) for column in Order.__table__.columns}


def _clean(value: str | None) -> str | None:
    cleaned = (value or "").strip()
    return cleaned or None


def _next_updated_at(order: Order) -> datetime:
    now = utc_now()
    if order.updated_at is not None:
        previous = ensure_utc(order.updated_at)
        if now <= previous:
            now = previous + timedelta(microseconds=1)
    return now


def get_order(db: Session, order_id: str) -> Order:
    with store_guard(db):
        order = db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order


def get_history(db: Session, order_id: str) -> list[OrderHistory]:
    """Return history entries for an order, most recent first."""
    get_order(db, order_id)
    with store_guard(db):
        return list(
            db.scalars(
                select(OrderHistory)
                .where(OrderHistory.order_id == order_id)
                .order_by(OrderHistory.created_at.desc(), OrderHistory.id.desc())
            ).all()
        )


def list_orders(
    db: Session,
    *,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> OrderPage:
    """Filter and paginate orders, newest first."""
    if page < 1:
        raise ValidationError("page must be >= 1")
    if limit < 1 or limit > settings.orders_page_limit_max:
        raise ValidationError(f"limit must be between 1 and {settings.orders_page_limit_max}")

    query = select(Order)
    if _clean(status) is not None:
        query = query.where(Order.status == parse_status(status))
    term = _clean(search)
    if term is not None:
        query = query.where(
            or_(
                Order.customer_name.icontains(term, autoescape=True),
                Order.customer_email.icontains(term, autoescape=True),
                Order.payment_id.icontains(term, autoescape=True),
            )
        )

    with store_guard(db):
        total = db.scalar(select(func.count()).select_from(query.subquery())) or 0
        orders = list(
            db.scalars(
                query.order_by(Order.created_at.desc(), Order.id.asc())
                .offset((page - 1) * limit)
                .limit(limit)
            ).all()
        )
    return OrderPage(orders=orders, page=page, limit=limit, total=total)


def _commit_transition(db: Session, order: Order, actor: Employee, new_status: str, notes: str | None) -> Order:
    order.status = new_status
    order.updated_at = _next_updated_at(order)
    order.updated_by = actor.id
    record = TransitionRecord(
        operation_id=str(uuid4()),
        order_id=order.id,
        status=new_status,
        employee_id=actor.id,
        employee_name=actor.name,
        employee_role=actor.role,
        notes=notes,
        occurred_at=order.updated_at,
    )

    try:
        with store_guard(db):
            db.flush()
    except StaleDataError as exc:
        db.rollback()
        raise ConflictError("Order was modified concurrently; reload it and retry") from exc

    try:
        record_transition(db, record)
    except ConsistencyWarning as warning:
        logger.warning(
            "[LIFECYCLE] ConsistencyWarning: %s (order=%s operation=%s); parked for replay",
            warning.message,
            warning.order_id,
            warning.operation_id,
        )
        park_dead_letter(db, record, warning.message)

    with store_guard(db):
        db.commit()
        db.refresh(order)

    logger.info(
        "[LIFECYCLE] Order %s -> %s by employee=%s (%s)",
        order.id,
        new_status,
        actor.id,
        actor.role,
    )
    change_feed.publish(ChangeEvent(table="orders", event_type="UPDATE", record=order_record(order)))
    return order


def set_status(
    db: Session,
    order_id: str,
    new_status: str,
    actor: Employee,
    notes: str | None = None,
) -> Order:
    """Move an order to ``new_status`` and record who did it."""
    ensure_role(actor, MUTATING_ROLES)
    status = parse_status(new_status)
    order = get_order(db, order_id)

    current = order.status
    if settings.order_enforce_transitions and not can_transition(current, status):
        raise InvalidTransitionError(f"Cannot change order status from {current} to {status}")
    if status in TRACKED_STATUSES and not (order.shipping_carrier and order.tracking_number):
        raise ValidationError(
            f"Order needs a shipping carrier and tracking number before it can be {status}; add tracking first"
        )

    if status in {"pending", "processing"}:
        order.shipping_carrier = None
        order.tracking_number = None
        order.tracking_url = None

    return _commit_transition(db, order, actor, status, _clean(notes))


def add_tracking(
    db: Session,
    order_id: str,
    carrier: str | None,
    tracking_number: str | None,
    actor: Employee,
    tracking_url: str | None = None,
) -> Order:
    """Attach shipping metadata and mark the order shipped."""
    ensure_role(actor, MUTATING_ROLES)
    carrier = _clean(carrier)
    tracking_number = _clean(tracking_number)
    if carrier is None or tracking_number is None:
        raise ValidationError("Carrier and tracking number are required")

    order = get_order(db, order_id)
    if settings.order_enforce_transitions and not can_attach_tracking(order.status):
        raise InvalidTransitionError(f"Cannot add tracking to an order that is {order.status}")

    order.shipping_carrier = carrier
    order.tracking_number = tracking_number
    order.tracking_url = _clean(tracking_url)
    notes = f"Shipped via {carrier}, tracking: {tracking_number}"
    return _commit_transition(db, order, actor, "shipped", notes)
