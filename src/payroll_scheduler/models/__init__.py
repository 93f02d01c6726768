"""ORM models."""

from payroll_scheduler.models.base import Base, TimestampMixin
from payroll_scheduler.models.employee import Employee
from payroll_scheduler.models.pay_history import DEDUCTION_FIELDS, PayHistory

__all__ = ["Base", "DEDUCTION_FIELDS", "Employee", "PayHistory", "TimestampMixin"]
