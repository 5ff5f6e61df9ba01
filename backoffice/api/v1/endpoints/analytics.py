"""Analytics endpoints."""

from typing import Literal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backoffice.core.security import require_roles
from backoffice.db.session import get_db
from backoffice.models import Employee
from backoffice.schemas.analytics import OrderSummaryRead
from backoffice.services.analytics_service import order_summary

router: APIRouter = APIRouter()


@router.get("/orders", response_model=OrderSummaryRead)
def orders_summary(
    period: Literal["day", "week", "month", "year"] = "week",
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_roles("admin", "manager")),
) -> OrderSummaryRead:
    summary = order_summary(db, period=period)
    return OrderSummaryRead(
        period=summary.period,
        since=summary.since,
        orders_by_status=summary.orders_by_status,
        revenue=summary.revenue,
    )
