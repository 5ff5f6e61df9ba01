"""Order API schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CheckoutOrderCreate(BaseModel):
    """Order submitted by the storefront once payment was initiated."""

    customer_name: str = Field(min_length=1)
    customer_email: str = Field(min_length=3)
    customer_phone: str | None = None
    product_name: str = Field(min_length=1)
    product_id: str | None = None
    quantity: int = Field(default=1, ge=1)
    total_price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    shipping_address: str = Field(min_length=1)
    payment_method: str = Field(min_length=1)
    payment_id: str | None = None
    notes: str | None = None


class OrderStatusUpdate(BaseModel):
    """Status change request; the token is validated by the lifecycle manager."""

    status: str
    notes: str | None = None


class TrackingUpdate(BaseModel):
    carrier: str | None = None
    tracking_number: str | None = None
    tracking_url: str | None = None


class OrderRead(BaseModel):
    id: str
    customer_name: str
    customer_email: str
    customer_phone: str | None
    product_name: str
    product_id: str | None
    quantity: int
    total_price: Decimal
    status: str
    shipping_address: str
    payment_method: str
    payment_id: str | None
    notes: str | None
    shipping_carrier: str | None
    tracking_number: str | None
    tracking_url: str | None
    created_at: datetime
    updated_at: datetime
    updated_by: int | None
    version: int

    model_config = ConfigDict(from_attributes=True)


class OrderHistoryRead(BaseModel):
    id: int
    order_id: str
    status: str
    employee_id: int
    employee_name: str
    employee_role: str
    notes: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaginationRead(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class OrderListResponse(BaseModel):
    orders: list[OrderRead]
    pagination: PaginationRead
