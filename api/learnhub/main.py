"""LearnHub API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnhub.auth.router import router as users_router
from learnhub.config import get_settings
from learnhub.core.context import get_request_id
from learnhub.core.database import init_async_cassandra, shutdown_async_cassandra
from learnhub.core.errors import AppError, status_for
from learnhub.core.logging import configure_structlog, get_logger
from learnhub.core.middleware import RequestContextMiddleware
from learnhub.courses.dependencies import set_course_service_getter
from learnhub.courses.repository import CourseRepository
from learnhub.courses.router import router as courses_router
from learnhub.courses.service import CourseService
from learnhub.health.router import router as health_router
from learnhub.progress.dependencies import set_progress_service_getter
from learnhub.progress.repository import ProgressRepository
from learnhub.progress.router import router as progress_router
from learnhub.progress.service import ProgressService
from learnhub.storage.dependencies import get_storage_service
from learnhub.transactions.dependencies import set_transaction_service_getter
from learnhub.transactions.payments import PaymentGateway
from learnhub.transactions.repository import TransactionRepository
from learnhub.transactions.router import router as transactions_router
from learnhub.transactions.service import TransactionService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


# Application state for dependency injection
class AppState:
    """Application state container."""

    cassandra_session: Any = None
    course_service: CourseService | None = None
    progress_service: ProgressService | None = None
    transaction_service: TransactionService | None = None


app_state = AppState()


def get_course_service() -> CourseService:
    """Get CourseService instance from app state."""
    if app_state.course_service is None:
        msg = "CourseService not initialized"
        raise RuntimeError(msg)
    return app_state.course_service


def get_progress_service() -> ProgressService:
    """Get ProgressService instance from app state."""
    if app_state.progress_service is None:
        msg = "ProgressService not initialized"
        raise RuntimeError(msg)
    return app_state.progress_service


def get_transaction_service() -> TransactionService:
    """Get TransactionService instance from app state."""
    if app_state.transaction_service is None:
        msg = "TransactionService not initialized"
        raise RuntimeError(msg)
    return app_state.transaction_service


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        session = await init_async_cassandra()
        app_state.cassandra_session = session
        app.state.cassandra_session = session
        logger.info("cassandra_initialized")

        keyspace = settings.cassandra_keyspace
        course_repository = CourseRepository(session, keyspace)

        app_state.course_service = CourseService(
            repository=course_repository,
            storage=get_storage_service(settings),
        )
        app_state.progress_service = ProgressService(
            repository=ProgressRepository(session, keyspace),
            course_repository=course_repository,
        )
        app_state.transaction_service = TransactionService(
            repository=TransactionRepository(session, keyspace),
            course_service=app_state.course_service,
            progress_service=app_state.progress_service,
            gateway=PaymentGateway(settings),
        )
        logger.info("services_initialized")
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await shutdown_async_cassandra()


def _get_request_id_safe(request: Request) -> str | None:
    """Get request_id from request state or context."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return get_request_id()


def _error_response(
    request: Request, status_code: int, message: str, error: Any = None
) -> ORJSONResponse:
    content: dict[str, Any] = {"message": message}
    if error is not None:
        content["error"] = error
    content["request_id"] = _get_request_id_safe(request)
    return ORJSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as a `{message, error, request_id}` envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> ORJSONResponse:
        status_code = status_for(exc)
        log_method = (
            logger.error
            if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
            else logger.warning
        )
        log_method(
            "app_error",
            code=exc.code,
            message=exc.message,
            error=exc.error,
            path=request.url.path,
            method=request.method,
        )
        return _error_response(request, status_code, exc.message, exc.error)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )
        message = (
            str(exc.detail)
            if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
            else "Internal server error"
        )
        response = _error_response(request, exc.status_code, message)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle body/query validation errors (safe to expose)."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            "Invalid request data",
            [
                {
                    "field": ".".join(str(loc) for loc in err.get("loc", [])),
                    "message": err.get("msg", "Invalid value"),
                }
                for err in exc.errors()
            ],
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler; details are logged, never returned."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred. Please try again later.",
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # debug=False keeps Starlette's ServerErrorMiddleware from rendering tracebacks
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="LearnHub course platform API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Request context middleware (must be added first - outermost)
    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(courses_router)
    app.include_router(users_router)
    app.include_router(progress_router)
    app.include_router(transactions_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {"message": "LearnHub API", "version": settings.app_version}

    return app


set_course_service_getter(get_course_service)
set_progress_service_getter(get_progress_service)
set_transaction_service_getter(get_transaction_service)


app = create_app()
