"""Order endpoints: checkout intake, listing and lifecycle transitions."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from backoffice.core.security import get_current_employee, require_roles
from backoffice.db.session import get_db
from backoffice.models import Employee, Order, OrderHistory
from backoffice.schemas.order import (
    CheckoutOrderCreate,
    OrderHistoryRead,
    OrderListResponse,
    OrderRead,
    OrderStatusUpdate,
    PaginationRead,
    TrackingUpdate,
)
from backoffice.services import order_lifecycle
from backoffice.services.checkout_service import create_order

router: APIRouter = APIRouter()


@router.post("/checkout", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def checkout(payload: CheckoutOrderCreate, db: Session = Depends(get_db)) -> Order:
    """Record a storefront order as pending."""
    return create_order(db, **payload.model_dump())


@router.get("", response_model=OrderListResponse)
def list_orders(
    status_filter: str | None = Query(default=None, alias="status"),
    search: str | None = None,
    page: int = 1,
    limit: int = 20,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_roles("admin", "manager", "support")),
) -> OrderListResponse:
    result = order_lifecycle.list_orders(db, status=status_filter, search=search, page=page, limit=limit)
    return OrderListResponse(
        orders=[OrderRead.model_validate(order) for order in result.orders],
        pagination=PaginationRead(page=result.page, limit=result.limit, total=result.total, pages=result.pages),
    )


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: str,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
) -> Order:
    return order_lifecycle.get_order(db, order_id)


@router.post("/{order_id}/status", response_model=OrderRead)
def update_status(
    order_id: str,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_roles("admin", "manager")),
) -> Order:
    return order_lifecycle.set_status(db, order_id, payload.status, actor=current_employee, notes=payload.notes)


@router.post("/{order_id}/tracking", response_model=OrderRead)
def add_tracking(
    order_id: str,
    payload: TrackingUpdate,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_roles("admin", "manager")),
) -> Order:
    """Attach carrier and tracking number; the order becomes shipped."""
    return order_lifecycle.add_tracking(
        db,
        order_id,
        carrier=payload.carrier,
        tracking_number=payload.tracking_number,
        tracking_url=payload.tracking_url,
        actor=current_employee,
    )


@router.get("/{order_id}/history", response_model=list[OrderHistoryRead])
def get_history(
    order_id: str,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(get_current_employee),
) -> list[OrderHistory]:
    return order_lifecycle.get_history(db, order_id)
