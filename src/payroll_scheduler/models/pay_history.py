"""Pay history model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, CheckConstraint, Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_scheduler.models.base import Base, BigIntId, TimestampMixin

if TYPE_CHECKING:
    from payroll_scheduler.models.employee import Employee

DEDUCTION_FIELDS = ("ded_cpp", "ded_ei", "ded_income_tax", "ded_eht", "ded_wsib")


class PayHistory(Base, TimestampMixin):
    """One employee's pay for one pay date.

    Deduction columns are placeholders and are written as zero, so net pay
    equals gross pay.
    """

    __tablename__ = "pay_history"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        BigIntId,
        ForeignKey("employee.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    pay_date: Mapped[date] = mapped_column(Date, nullable=False)
    period_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    period_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    hours_worked: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    gross_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)

    ded_cpp: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    ded_ei: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    ded_income_tax: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, default=Decimal("0")
    )
    ded_eht: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    ded_wsib: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))

    net_pay: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="PENDING", index=True)

    review_valid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    review_errors: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    review_warnings: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'PROCESSED', 'PAID')",
            name="pay_history_status_check",
        ),
    )

    # Relationships
    employee: Mapped[Employee] = relationship(back_populates="pay_history")

    @property
    def total_deductions(self) -> Decimal:
        return sum((getattr(self, f) or Decimal("0") for f in DEDUCTION_FIELDS), Decimal("0"))
