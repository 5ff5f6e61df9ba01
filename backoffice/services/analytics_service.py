"""Order analytics for the back-office dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backoffice.models import Order
from backoffice.services.order_lifecycle import store_guard
from backoffice.services.order_status import ORDER_STATUSES
from backoffice.utils.time import period_start, utc_now


@dataclass
class OrderSummary:
    period: str
    since: datetime
    orders_by_status: dict[str, int] = field(default_factory=dict)
    revenue: Decimal = Decimal("0.00")


def order_summary(db: Session, period: str = "week", now: datetime | None = None) -> OrderSummary:
    """Count orders per status and sum revenue of non-cancelled orders in the period."""
    since = period_start(period, now or utc_now())
    summary = OrderSummary(period=period, since=since)
    summary.orders_by_status = {status: 0 for status in ORDER_STATUSES}

    with store_guard(db):
        rows = db.execute(
            select(Order.status, func.count(Order.id))
            .where(Order.created_at >= since)
            .group_by(Order.status)
        ).all()
        revenue = db.scalar(
            select(func.coalesce(func.sum(Order.total_price), 0))
            .where(Order.created_at >= since, Order.status != "cancelled")
        )

    for status, count in rows:
        summary.orders_by_status[status] = count
    summary.revenue = Decimal(str(revenue or 0)).quantize(Decimal("0.01"))
    return summary
