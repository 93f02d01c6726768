"""FastAPI dependencies for dependency injection."""

import hmac
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_scheduler.config import Settings
from payroll_scheduler.errors import AuthorizationError
from payroll_scheduler.services.dispatcher import ScheduleDispatcher
from payroll_scheduler.services.employee_service import EmployeeNotifier


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency.

    Handlers commit explicitly; anything left uncommitted is rolled back
    when the session closes.
    """
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_dispatcher(request: Request) -> ScheduleDispatcher | None:
    """The app's dispatcher, or None when no workflow endpoint is configured."""
    return request.app.state.dispatcher


def get_notifier(request: Request) -> EmployeeNotifier:
    return request.app.state.notifier


async def require_update_token(
    settings: Annotated[Settings, Depends(get_app_settings)],
    x_update_token: Annotated[str | None, Header()] = None,
) -> None:
    """Check the shared update token when one is configured."""
    expected = settings.update_token
    if not expected:
        return
    if not x_update_token or not hmac.compare_digest(x_update_token, expected):
        raise AuthorizationError("Invalid or missing X-Update-Token header")


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Dispatcher = Annotated[ScheduleDispatcher | None, Depends(get_dispatcher)]
Notifier = Annotated[EmployeeNotifier, Depends(get_notifier)]
UpdateToken = Depends(require_update_token)
