"""Order analytics tests."""

from datetime import timedelta
from decimal import Decimal
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from backoffice import main as main_module
from backoffice.core.security import create_access_token
from backoffice.db import session as db_session
from backoffice.db.base import Base
from backoffice.main import app
from backoffice.models import Employee, Order
from backoffice.services.analytics_service import order_summary
from backoffice.utils.time import utc_now


def _prepare_db(tmp_path: Path, monkeypatch):
    engine = create_engine(f"sqlite:///{tmp_path / 'analytics.db'}", connect_args={"check_same_thread": False})
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    monkeypatch.setattr(main_module, "engine", engine)
    monkeypatch.setattr(main_module, "SessionLocal", testing_session_local)
    return testing_session_local


def _order(status: str, total: str, age_days: int = 0) -> Order:
    created = utc_now() - timedelta(days=age_days)
    return Order(
        customer_name="Analytics Customer",
        customer_email="customer@example.com",
        product_name="Premium Frame",
        quantity=1,
        total_price=Decimal(total),
        shipping_address="1 Test Way",
        payment_method="card",
        status=status,
        created_at=created,
        updated_at=created,
    )


def _seed_orders(db: Session) -> None:
    db.add_all(
        [
            _order("pending", "129.98"),
            _order("shipped", "89.99", age_days=2),
            _order("cancelled", "500.00", age_days=1),
            _order("delivered", "40.00", age_days=20),
        ]
    )
    db.commit()


def test_summary_counts_statuses_and_skips_cancelled_revenue(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    with session_local() as db:
        _seed_orders(db)

        week = order_summary(db, period="week")
        month = order_summary(db, period="month")

    assert week.orders_by_status == {
        "pending": 1,
        "processing": 0,
        "shipped": 1,
        "delivered": 0,
        "cancelled": 1,
    }
    assert week.revenue == Decimal("219.97")
    assert month.orders_by_status["delivered"] == 1
    assert month.revenue == Decimal("259.97")


def test_summary_endpoint_roles_and_period(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    with session_local() as db:
        manager = Employee(name="Manager", email="manager@dframes.com", password_hash="x", role="manager")
        support = Employee(name="Support", email="support@dframes.com", password_hash="x", role="support")
        db.add_all([manager, support])
        db.commit()
        _seed_orders(db)
        manager_token = create_access_token(manager)
        support_token = create_access_token(support)

    with TestClient(app) as client:
        day = client.get(
            "/api/v1/analytics/orders",
            params={"period": "day"},
            headers={"Authorization": f"Bearer {manager_token}"},
        )
        forbidden = client.get("/api/v1/analytics/orders", headers={"Authorization": f"Bearer {support_token}"})
        bad_period = client.get(
            "/api/v1/analytics/orders",
            params={"period": "decade"},
            headers={"Authorization": f"Bearer {manager_token}"},
        )

    assert day.status_code == 200
    body = day.json()
    assert body["period"] == "day"
    assert body["orders_by_status"]["pending"] == 1
    assert body["orders_by_status"]["shipped"] == 0
    assert Decimal(body["revenue"]) == Decimal("129.98")
    assert forbidden.status_code == 403
    assert bad_period.status_code == 400
    assert bad_period.json()["error"]["kind"] == "validation_error"
