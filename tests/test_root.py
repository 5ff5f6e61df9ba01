from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from backoffice import main as main_module
from backoffice.core.config import settings
from backoffice.core.security import verify_password
from backoffice.db import session as db_session
from backoffice.db.base import Base
from backoffice.main import app
from backoffice.services.employee_service import get_employee_by_email


def _prepare_db(tmp_path: Path, monkeypatch):
    engine = create_engine(f"sqlite:///{tmp_path / 'root.db'}", connect_args={"check_same_thread": False})
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    monkeypatch.setattr(main_module, "engine", engine)
    monkeypatch.setattr(main_module, "SessionLocal", testing_session_local)
    return testing_session_local


def test_health(tmp_path: Path, monkeypatch) -> None:
    _prepare_db(tmp_path, monkeypatch)
    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_startup_seeds_admin_in_dev(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    monkeypatch.setattr(settings, "app_env", "dev")
    monkeypatch.setattr(settings, "admin_email", "Owner@DFrames.com")
    monkeypatch.setattr(settings, "admin_password", "bootstrap-pass")

    with TestClient(app):
        pass
    with TestClient(app):
        pass

    with session_local() as db:
        admin = get_employee_by_email(db, "owner@dframes.com")
        assert admin is not None
        assert admin.role == "admin"
        assert verify_password("bootstrap-pass", admin.password_hash)


def test_startup_skips_seed_outside_dev(tmp_path: Path, monkeypatch) -> None:
    session_local = _prepare_db(tmp_path, monkeypatch)
    monkeypatch.setattr(settings, "app_env", "prod")
    monkeypatch.setattr(settings, "admin_email", "owner@dframes.com")
    monkeypatch.setattr(settings, "admin_password", "bootstrap-pass")

    with TestClient(app):
        pass

    with session_local() as db:
        assert get_employee_by_email(db, "owner@dframes.com") is None
