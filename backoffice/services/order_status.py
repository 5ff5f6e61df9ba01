"""Order status enumeration and transition rules."""

from __future__ import annotations

from backoffice.core.errors import ValidationError

ORDER_STATUSES: list[str] = ["pending", "processing", "shipped", "delivered", "cancelled"]

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"processing", "cancelled"},
    "processing": {"shipped", "cancelled"},
    "shipped": {"delivered"},
    "delivered": set(),
    "cancelled": set(),
}

# Statuses at which shipping carrier and tracking number must be present.
TRACKED_STATUSES: frozenset[str] = frozenset({"shipped", "delivered"})

# Statuses from which tracking may be attached; "shipped" allows correcting it.
TRACKING_SOURCE_STATUSES: frozenset[str] = frozenset({"processing", "shipped"})


def parse_status(value: str | None) -> str:
    """Return the canonical status token or raise ValidationError."""
    normalized = str(value or "").strip().lower()
    if normalized not in ORDER_STATUSES:
        raise ValidationError(f"Invalid status: {value!r}. Expected one of {', '.join(ORDER_STATUSES)}")
    return normalized


def can_transition(current: str, new: str) -> bool:
    """Return whether order can move from current to new status."""
    return new in ALLOWED_TRANSITIONS.get(current, set())


def can_attach_tracking(current: str) -> bool:
    return current in TRACKING_SOURCE_STATUSES
