"""Audit dead-letter schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class DeadLetterRead(BaseModel):
    id: int
    operation_id: str
    order_id: str
    status: str
    employee_id: int
    employee_name: str
    employee_role: str
    notes: str | None
    occurred_at: datetime
    last_error: str
    resolved_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class ReplayResponse(BaseModel):
    replayed: int
    failed: int
    discarded: int
