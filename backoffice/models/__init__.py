"""Application models package."""

from backoffice.models.audit_dead_letter import AuditDeadLetter
from backoffice.models.employee import EMPLOYEE_ROLES, Employee
from backoffice.models.login_attempt import LoginAttempt
from backoffice.models.order import Order
from backoffice.models.order_history import OrderHistory

__all__ = ["AuditDeadLetter", "EMPLOYEE_ROLES", "Employee", "LoginAttempt", "Order", "OrderHistory"]
