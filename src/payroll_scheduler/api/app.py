"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from payroll_scheduler.api.routes import (
    employees_router,
    health_router,
    holidays_router,
    pay_history_router,
    pay_runs_router,
    payroll_router,
)
from payroll_scheduler.config import Settings, get_settings
from payroll_scheduler.database import create_tables, get_engine, make_session_factory
from payroll_scheduler.errors import (
    AuthorizationError,
    ConfigurationError,
    NotFoundError,
    PayrollError,
    ValidationFailedError,
)
from payroll_scheduler.logging_config import configure_logging
from payroll_scheduler.services.dispatcher import ScheduleDispatcher, UpstreamError
from payroll_scheduler.services.employee_service import EmployeeNotifier
from payroll_scheduler.services.state_machine import InvalidTransitionError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    await create_tables(app.state.engine)
    logger.info("Payroll scheduler started: %s", app.state.settings.redacted())
    yield
    # Shutdown
    await app.state.engine.dispose()


def _error_body(exc: PayrollError) -> dict:
    return {"detail": exc.message, "code": exc.code, "context": exc.context}


def register_exception_handlers(app: FastAPI) -> None:
    """Map the error taxonomy to HTTP statuses."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        issues = [
            {
                "field": ".".join(str(p) for p in err["loc"] if p != "body"),
                "message": err["msg"],
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Validation failed", "code": "VALIDATION_FAILED", "issues": issues},
        )

    @app.exception_handler(ValidationFailedError)
    async def validation_failed_handler(
        request: Request, exc: ValidationFailedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.message, "code": exc.code, "issues": exc.issues},
        )

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=_error_body(exc))

    @app.exception_handler(InvalidTransitionError)
    async def transition_handler(
        request: Request, exc: InvalidTransitionError
    ) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=_error_body(exc))

    @app.exception_handler(AuthorizationError)
    async def authorization_handler(
        request: Request, exc: AuthorizationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(UpstreamError)
    async def upstream_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={
                "ok": False,
                "stage": "schedule",
                "status": exc.status_code,
                "error": exc.body if exc.body is not None else exc.message,
            },
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": exc.message, "code": exc.code},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    The engine, session factory and dispatcher are built here rather than in
    the lifespan so a malformed dispatch configuration fails at startup.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Payroll Scheduler API",
        description="Employee pay runs, statutory holidays and paystub scheduling",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = get_engine(settings.database_url)
    app.state.session_factory = make_session_factory(app.state.engine)
    app.state.dispatcher = (
        ScheduleDispatcher(settings.dispatch_config()) if settings.dispatch_enabled else None
    )
    app.state.notifier = EmployeeNotifier(
        settings.employee_webhook_url, settings.employee_webhook_secret
    )
    if app.state.dispatcher is None:
        logger.warning("WORKFLOW_WEBHOOK_URL not set; schedule dispatch is disabled")

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(employees_router, prefix="/api/v1")
    app.include_router(pay_history_router, prefix="/api/v1")
    app.include_router(pay_runs_router, prefix="/api/v1")
    app.include_router(payroll_router, prefix="/api/v1")
    app.include_router(holidays_router, prefix="/api/v1")

    return app
