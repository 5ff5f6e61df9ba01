"""Operator endpoints for the audit dead-letter queue."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backoffice.core.security import require_roles
from backoffice.db.session import get_db
from backoffice.models import AuditDeadLetter, Employee
from backoffice.schemas.audit import DeadLetterRead, ReplayResponse
from backoffice.services.audit_service import list_dead_letters, replay_dead_letters

router: APIRouter = APIRouter()


@router.get("/audit/dead-letters", response_model=list[DeadLetterRead])
def dead_letters(
    include_resolved: bool = False,
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_roles("admin")),
) -> list[AuditDeadLetter]:
    return list_dead_letters(db, include_resolved=include_resolved)


@router.post("/audit/dead-letters/replay", response_model=ReplayResponse)
def replay(
    db: Session = Depends(get_db),
    current_employee: Employee = Depends(require_roles("admin")),
) -> ReplayResponse:
    result = replay_dead_letters(db)
    return ReplayResponse(replayed=result.replayed, failed=result.failed, discarded=result.discarded)
