"""Order intake from the storefront checkout."""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from backoffice.models import Order
from backoffice.services.order_events import ChangeEvent, change_feed
from backoffice.services.order_lifecycle import order_record, store_guard

logger = logging.getLogger(__name__)


def create_order(
    db: Session,
    *,
    customer_name: str,
    customer_email: str,
    product_name: str,
    quantity: int,
    total_price: Decimal,
    shipping_address: str,
    payment_method: str,
    customer_phone: str | None = None,
    product_id: str | None = None,
    payment_id: str | None = None,
    notes: str | None = None,
) -> Order:
    """Insert a new order in ``pending`` and announce it on the change feed."""
    order = Order(
        customer_name=customer_name.strip(),
        customer_email=customer_email.strip().lower(),
        customer_phone=customer_phone,
        product_name=product_name.strip(),
        product_id=product_id,
        quantity=quantity,
        total_price=total_price,
        status="pending",
        shipping_address=shipping_address.strip(),
        payment_method=payment_method,
        payment_id=payment_id,
        notes=notes,
    )
    with store_guard(db):
        db.add(order)
        db.commit()
        db.refresh(order)

    logger.info("[CHECKOUT] Created order %s for %s", order.id, order.customer_email)
    change_feed.publish(ChangeEvent(table="orders", event_type="INSERT", record=order_record(order)))
    return order
