"""Schema exports."""

from backoffice.schemas.analytics import OrderSummaryRead
from backoffice.schemas.audit import DeadLetterRead, ReplayResponse
from backoffice.schemas.auth import LoginRequest, TokenResponse
from backoffice.schemas.employee import EmployeeCreate, EmployeeRead
from backoffice.schemas.order import (
    CheckoutOrderCreate,
    OrderHistoryRead,
    OrderListResponse,
    OrderRead,
    OrderStatusUpdate,
    PaginationRead,
    TrackingUpdate,
)

__all__ = [
    "CheckoutOrderCreate",
    "DeadLetterRead",
    "EmployeeCreate",
    "EmployeeRead",
    "LoginRequest",
    "OrderHistoryRead",
    "OrderListResponse",
    "OrderRead",
    "OrderStatusUpdate",
    "OrderSummaryRead",
    "PaginationRead",
    "ReplayResponse",
    "TokenResponse",
    "TrackingUpdate",
]
