"""Pytest fixtures for payroll scheduler tests."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import AsyncGenerator

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_scheduler.api.app import create_app
from payroll_scheduler.config import DispatchConfig, Settings
from payroll_scheduler.database import create_tables, get_engine, make_session_factory
from payroll_scheduler.models import Employee
from payroll_scheduler.services.dispatcher import ScheduleDispatcher

# Use in-memory SQLite for tests (with async support)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
WORKFLOW_URL = "https://workflow.test/hooks/paystubs"
UPDATE_TOKEN = "test-update-token"


class FakeWorkflow:
    """Stands in for the external workflow endpoint via httpx.MockTransport."""

    def __init__(self, status_code: int = 200, body: dict | str | None = None):
        self.status_code = status_code
        self.body = {"accepted": True} if body is None else body
        self.error: Exception | None = None
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if isinstance(self.body, str):
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def last_payload(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def workflow() -> FakeWorkflow:
    return FakeWorkflow()


@pytest.fixture
def dispatch_config() -> DispatchConfig:
    return DispatchConfig(webhook_url=WORKFLOW_URL, secret="s3cret")


@pytest.fixture
def dispatcher(dispatch_config: DispatchConfig, workflow: FakeWorkflow) -> ScheduleDispatcher:
    return ScheduleDispatcher(dispatch_config, transport=workflow.transport)


@pytest.fixture
async def engine():
    """Create test database engine."""
    engine = get_engine(TEST_DATABASE_URL)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with make_session_factory(engine)() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def hourly_employee(session: AsyncSession) -> Employee:
    employee = Employee(
        first_name="Ada",
        last_name="Hourly",
        email="ada@example.com",
        sin="123456789",
        pay_type="HOURLY",
        pay_group="BI_WEEKLY",
        hourly_rate=Decimal("20"),
        vacation_pay_percent=Decimal("4"),
    )
    session.add(employee)
    await session.flush()
    return employee


@pytest.fixture
async def salaried_employee(session: AsyncSession) -> Employee:
    employee = Employee(
        first_name="Sam",
        last_name="Salary",
        email="sam@example.com",
        sin="987654321",
        pay_type="SALARY",
        pay_group="BI_WEEKLY",
        salary=Decimal("52000"),
        vacation_pay_percent=Decimal("4"),
    )
    session.add(employee)
    await session.flush()
    return employee


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url=TEST_DATABASE_URL,
        host="127.0.0.1",
        port=8000,
        debug=False,
        log_level="WARNING",
        workflow_webhook_url=WORKFLOW_URL,
        workflow_webhook_secret="s3cret",
        update_token=UPDATE_TOKEN,
    )


@pytest.fixture
async def app(settings: Settings, workflow: FakeWorkflow):
    app = create_app(settings)
    app.state.dispatcher = ScheduleDispatcher(
        settings.dispatch_config(), transport=workflow.transport
    )
    await create_tables(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-Update-Token": UPDATE_TOKEN}
