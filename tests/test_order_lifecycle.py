"""Order lifecycle manager tests: transitions, tracking and the audit trail."""

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import Session, sessionmaker

from backoffice.core.config import settings
from backoffice.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from backoffice.core.security import get_password_hash
from backoffice.db.base import Base
from backoffice.models import Employee, Order, OrderHistory
from backoffice.services.order_lifecycle import add_tracking, get_history, get_order, list_orders, set_status
from backoffice.utils.time import ensure_utc

PASSWORD_HASH = get_password_hash("secret123")


def _prepare_db(tmp_path: Path):
    engine = create_engine(f"sqlite:///{tmp_path / 'lifecycle.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _employee(db: Session, email: str, role: str, name: str | None = None) -> Employee:
    employee = Employee(name=name or email.split("@")[0], email=email, password_hash=PASSWORD_HASH, role=role)
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


def _order(db: Session, **overrides) -> Order:
    values = {
        "customer_name": "Jane Smith",
        "customer_email": "jane.smith@example.com",
        "product_name": "Custom Frame",
        "quantity": 1,
        "total_price": Decimal("89.99"),
        "shipping_address": "456 Oak Ave, Somewhere, USA",
        "payment_method": "card",
        "payment_id": "pi_jane",
        "status": "pending",
    }
    values.update(overrides)
    order = Order(**values)
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


def _history_count(db: Session, order_id: str) -> int:
    return db.scalar(select(func.count(OrderHistory.id)).where(OrderHistory.order_id == order_id))


def test_full_fulfillment_scenario(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        manager_a = _employee(db, "manager.a@dframes.com", "manager", name="Manager A")
        manager_b = _employee(db, "manager.b@dframes.com", "manager", name="Manager B")
        order_id = _order(db).id

        order = set_status(db, order_id, "processing", actor=manager_a)
        assert order.status == "processing"
        history = get_history(db, order_id)
        assert len(history) == 1
        assert history[0].status == "processing"
        assert history[0].employee_id == manager_a.id
        assert history[0].employee_name == "Manager A"
        assert history[0].employee_role == "manager"

        order = add_tracking(db, order_id, carrier="UPS", tracking_number="1Z999", actor=manager_a)
        assert order.status == "shipped"
        assert order.shipping_carrier == "UPS"
        assert order.tracking_number == "1Z999"
        history = get_history(db, order_id)
        assert len(history) == 2
        assert history[0].status == "shipped"
        assert "UPS" in history[0].notes
        assert "1Z999" in history[0].notes

        order = set_status(db, order_id, "delivered", actor=manager_b)
        assert order.status == "delivered"
        history = get_history(db, order_id)
        assert [entry.status for entry in history] == ["delivered", "shipped", "processing"]
        assert history[0].employee_id == manager_b.id


def test_add_tracking_with_empty_carrier_changes_nothing(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        manager = _employee(db, "manager@dframes.com", "manager")
        order = _order(db, status="processing")
        order_id = order.id
        version_before = order.version
        updated_before = order.updated_at

        with pytest.raises(ValidationError):
            add_tracking(db, order_id, carrier="", tracking_number="1Z000", actor=manager)
        with pytest.raises(ValidationError):
            add_tracking(db, order_id, carrier="UPS", tracking_number="   ", actor=manager)

    with session_local() as db:
        stored = db.get(Order, order_id)
        assert stored.status == "processing"
        assert stored.shipping_carrier is None
        assert stored.tracking_number is None
        assert stored.version == version_before
        assert stored.updated_at == updated_before
        assert _history_count(db, order_id) == 0


def test_unknown_status_token_is_rejected_without_write(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        admin = _employee(db, "admin@dframes.com", "admin")
        order_id = _order(db).id

        with pytest.raises(ValidationError):
            set_status(db, order_id, "lost-in-transit", actor=admin)

        assert db.get(Order, order_id).status == "pending"
        assert _history_count(db, order_id) == 0


def test_status_token_is_normalized(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        admin = _employee(db, "admin@dframes.com", "admin")
        order_id = _order(db).id

        order = set_status(db, order_id, "  Processing ", actor=admin, notes="  rush order ")

        assert order.status == "processing"
        assert get_history(db, order_id)[0].notes == "rush order"


def test_support_cannot_mutate(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        support = _employee(db, "support@dframes.com", "support")
        order_id = _order(db, status="processing").id

        with pytest.raises(ForbiddenError):
            set_status(db, order_id, "cancelled", actor=support)
        with pytest.raises(ForbiddenError):
            add_tracking(db, order_id, carrier="UPS", tracking_number="1Z1", actor=support)

        assert db.get(Order, order_id).status == "processing"
        assert _history_count(db, order_id) == 0


def test_unknown_order_raises_not_found(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        admin = _employee(db, "admin@dframes.com", "admin")

        with pytest.raises(NotFoundError):
            get_order(db, "does-not-exist")
        with pytest.raises(NotFoundError):
            get_history(db, "does-not-exist")
        with pytest.raises(NotFoundError):
            set_status(db, "does-not-exist", "processing", actor=admin)
        with pytest.raises(NotFoundError):
            add_tracking(db, "does-not-exist", carrier="UPS", tracking_number="1Z1", actor=admin)


def test_forward_graph_is_enforced(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        admin = _employee(db, "admin@dframes.com", "admin")
        delivered_id = _order(db, status="delivered", shipping_carrier="UPS", tracking_number="1Z1").id
        cancelled_id = _order(db, status="cancelled").id
        pending_id = _order(db).id

        with pytest.raises(InvalidTransitionError):
            set_status(db, delivered_id, "pending", actor=admin)
        with pytest.raises(InvalidTransitionError):
            set_status(db, cancelled_id, "processing", actor=admin)
        with pytest.raises(InvalidTransitionError):
            set_status(db, pending_id, "delivered", actor=admin)
        with pytest.raises(InvalidTransitionError):
            add_tracking(db, pending_id, carrier="UPS", tracking_number="1Z1", actor=admin)
        with pytest.raises(InvalidTransitionError):
            add_tracking(db, cancelled_id, carrier="UPS", tracking_number="1Z1", actor=admin)

        assert set_status(db, pending_id, "cancelled", actor=admin).status == "cancelled"
        assert _history_count(db, delivered_id) == 0
        assert _history_count(db, pending_id) == 1


def test_shipped_requires_tracking_metadata(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        manager = _employee(db, "manager@dframes.com", "manager")
        order_id = _order(db, status="processing").id

        with pytest.raises(ValidationError):
            set_status(db, order_id, "shipped", actor=manager)

        assert db.get(Order, order_id).status == "processing"


def test_tracking_can_be_corrected_on_shipped_order(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        manager = _employee(db, "manager@dframes.com", "manager")
        order_id = _order(db, status="processing").id

        add_tracking(db, order_id, carrier="UPS", tracking_number="1Z-TYPO", actor=manager)
        order = add_tracking(
            db,
            order_id,
            carrier="FedEx",
            tracking_number="7712",
            tracking_url="https://fedex.example/7712",
            actor=manager,
        )

        assert order.status == "shipped"
        assert order.shipping_carrier == "FedEx"
        assert order.tracking_url == "https://fedex.example/7712"
        assert len(get_history(db, order_id)) == 2


def test_permissive_mode_allows_any_transition(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(settings, "order_enforce_transitions", False)
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        admin = _employee(db, "admin@dframes.com", "admin")
        order_id = _order(db).id

        order = add_tracking(db, order_id, carrier="DHL", tracking_number="JD01", actor=admin)
        assert order.status == "shipped"

        order = set_status(db, order_id, "pending", actor=admin, notes="customer changed address")
        assert order.status == "pending"
        assert order.shipping_carrier is None
        assert order.tracking_number is None

        order = set_status(db, order_id, "pending", actor=admin)
        assert order.status == "pending"
        assert len(get_history(db, order_id)) == 3


def test_updated_at_strictly_increases_and_records_actor(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    future = datetime(2999, 1, 1, tzinfo=timezone.utc)
    with session_local() as db:
        manager = _employee(db, "manager@dframes.com", "manager")
        order_id = _order(db, updated_at=future).id

        first = set_status(db, order_id, "processing", actor=manager)
        first_updated = ensure_utc(first.updated_at)
        second = add_tracking(db, order_id, carrier="UPS", tracking_number="1Z1", actor=manager)

        assert first_updated > future
        assert ensure_utc(second.updated_at) > first_updated
        assert second.updated_by == manager.id


def test_history_is_append_only(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        manager = _employee(db, "manager@dframes.com", "manager")
        order_id = _order(db).id

        set_status(db, order_id, "processing", actor=manager, notes="picked")
        before = [(entry.id, entry.status, entry.notes) for entry in get_history(db, order_id)]
        add_tracking(db, order_id, carrier="UPS", tracking_number="1Z1", actor=manager)
        after = [(entry.id, entry.status, entry.notes) for entry in get_history(db, order_id)]

        assert len(after) == len(before) + 1
        assert after[1:] == before
        assert get_history(db, order_id)[0].status == db.get(Order, order_id).status


def test_concurrent_update_loses_with_conflict(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as setup:
        manager_id = _employee(setup, "manager@dframes.com", "manager").id
        order_id = _order(setup).id

    with session_local() as first, session_local() as second:
        first_actor = first.get(Employee, manager_id)
        second_actor = second.get(Employee, manager_id)
        loaded = first.get(Order, order_id)
        stale = second.get(Order, order_id)
        assert (stale.status, stale.version) == ("pending", 1)

        set_status(first, order_id, "processing", actor=first_actor)
        assert loaded.version == 2
        with pytest.raises(ConflictError):
            set_status(second, order_id, "cancelled", actor=second_actor)

    with session_local() as db:
        assert db.get(Order, order_id).status == "processing"
        assert [entry.status for entry in get_history(db, order_id)] == ["processing"]


def test_cascade_delete_removes_history(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        manager = _employee(db, "manager@dframes.com", "manager")
        order_id = _order(db).id
        set_status(db, order_id, "processing", actor=manager)

        db.delete(db.get(Order, order_id))
        db.commit()

        assert _history_count(db, order_id) == 0


def test_list_orders_filters_searches_and_paginates(tmp_path: Path) -> None:
    session_local = _prepare_db(tmp_path)
    with session_local() as db:
        _order(db, customer_name="John Doe", customer_email="john.doe@example.com", payment_id="pay_abc123")
        _order(db, customer_name="Bob Johnson", customer_email="bob@example.com", status="processing")
        for index in range(5):
            _order(db, customer_name=f"Buyer {index}", customer_email=f"buyer{index}@example.com", payment_id=None)

        by_status = list_orders(db, status="processing")
        assert [order.customer_name for order in by_status.orders] == ["Bob Johnson"]

        by_name = list_orders(db, search="john")
        assert {order.customer_name for order in by_name.orders} == {"John Doe", "Bob Johnson"}

        by_payment = list_orders(db, search="ABC123")
        assert [order.customer_name for order in by_payment.orders] == ["John Doe"]

        assert list_orders(db, search="100%").total == 0

        page = list_orders(db, page=2, limit=3)
        assert page.total == 7
        assert page.pages == 3
        assert len(page.orders) == 3

        with pytest.raises(ValidationError):
            list_orders(db, status="unknown")
        with pytest.raises(ValidationError):
            list_orders(db, page=0)
        with pytest.raises(ValidationError):
            list_orders(db, limit=settings.orders_page_limit_max + 1)
