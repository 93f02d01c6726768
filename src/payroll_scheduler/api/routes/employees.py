"""Employee API endpoints."""

from fastapi import APIRouter, status

from payroll_scheduler.api.dependencies import DbSession, Notifier
from payroll_scheduler.api.schemas import (
    EmployeeCreate,
    EmployeeCreated,
    EmployeeSummary,
    ValidationErrorResponse,
)
from payroll_scheduler.services.employee_service import EmployeeService

router = APIRouter(prefix="/employees", tags=["employees"])


@router.post(
    "",
    response_model=EmployeeCreated,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ValidationErrorResponse}},
)
async def create_employee(
    db: DbSession,
    notifier: Notifier,
    payload: EmployeeCreate,
) -> EmployeeCreated:
    """Create an employee. The creation webhook fires after commit."""
    service = EmployeeService(db, notifier)
    employee = await service.create_employee(payload.model_dump())
    await db.commit()
    await service.notify_created(employee)
    return EmployeeCreated(id=employee.id)


@router.get("", response_model=list[EmployeeSummary])
async def list_employees(db: DbSession) -> list[EmployeeSummary]:
    """List employees, newest first. SIN and bank details are never returned."""
    employees = await EmployeeService(db).list_employees()
    return [EmployeeSummary.model_validate(e) for e in employees]
