"""Employee model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_scheduler.calculators.types import EmployeePayProfile, PayGroup, PayType
from payroll_scheduler.models.base import Base, BigIntId, TimestampMixin

if TYPE_CHECKING:
    from payroll_scheduler.models.pay_history import PayHistory


class Employee(Base, TimestampMixin):
    """Employee record with pay configuration."""

    __tablename__ = "employee"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String, nullable=False)
    last_name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False)
    sin: Mapped[str] = mapped_column(String(9), nullable=False)

    employment_type: Mapped[str] = mapped_column(String, nullable=False, default="FULL_TIME")
    hire_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    pay_group: Mapped[str] = mapped_column(String, nullable=False, default=PayGroup.BI_WEEKLY.value)
    pay_type: Mapped[str] = mapped_column(String, nullable=False)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 4), nullable=True)
    salary: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    vacation_pay_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), nullable=False, default=Decimal("4")
    )

    payment_method: Mapped[str] = mapped_column(String, nullable=False, default="CHEQUE")
    bank_name: Mapped[str | None] = mapped_column(String, nullable=True)
    bank_account: Mapped[str | None] = mapped_column(String, nullable=True)
    transit_number: Mapped[str | None] = mapped_column(String, nullable=True)
    institution_number: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint("pay_type IN ('HOURLY', 'SALARY')", name="employee_pay_type_check"),
        CheckConstraint("pay_group IN ('BI_WEEKLY', 'MONTHLY')", name="employee_pay_group_check"),
        CheckConstraint(
            "payment_method IN ('CHEQUE', 'DIRECT_DEPOSIT')",
            name="employee_payment_method_check",
        ),
        CheckConstraint(
            "(pay_type = 'HOURLY' AND hourly_rate IS NOT NULL AND salary IS NULL) OR "
            "(pay_type = 'SALARY' AND salary IS NOT NULL AND hourly_rate IS NULL)",
            name="employee_rate_exclusive_check",
        ),
    )

    # Relationships
    pay_history: Mapped[list[PayHistory]] = relationship(back_populates="employee")

    def pay_profile(self) -> EmployeePayProfile:
        """Pay configuration used by the calculation engine."""
        return EmployeePayProfile(
            employee_id=str(self.id),
            pay_type=PayType(self.pay_type),
            pay_group=PayGroup(self.pay_group),
            hourly_rate=self.hourly_rate,
            salary=self.salary,
            vacation_pay_percent=self.vacation_pay_percent,
        )
