"""Analytics response schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class OrderSummaryRead(BaseModel):
    period: str
    since: datetime
    orders_by_status: dict[str, int]
    revenue: Decimal
