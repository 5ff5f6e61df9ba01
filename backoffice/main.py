"""FastAPI entrypoint for the D-Frames back-office order service."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from backoffice.api.v1.api import api_router
from backoffice.core.config import settings
from backoffice.core.errors import register_exception_handlers
from backoffice.db.base import Base
from backoffice.db.seed import ensure_admin_employee
from backoffice.db.session import SessionLocal, engine
from backoffice.services.rate_limit import purge_expired_attempts

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
register_exception_handlers(app)
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup() -> None:
    if settings.jwt_secret_key.startswith("dev-only"):
        logger.warning("JWT_SECRET_KEY not set; using development fallback secret.")
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        try:
            admin_present = ensure_admin_employee(session)
            logger.info("[BOOTSTRAP] admin employee present: %s", "yes" if admin_present else "no")
            purged = purge_expired_attempts(session)
            if purged:
                logger.info("[BOOTSTRAP] purged %s expired login counters", purged)
        except Exception:
            logger.exception("[BOOTSTRAP] Seed/bootstrap failed; continuing startup.")


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.app_env}
