"""FastAPI application for the drivelog web service"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from drivelog import __version__
from drivelog.auth.user_auth import generate_password, hash_password
from drivelog.services.admin_service import AdminService
from drivelog.services.auth_service import AuthService
from drivelog.services.bootstrap import initialize, print_admin_credentials
from drivelog.services.driving_log_service import DrivingLogService
from drivelog.services.profile_service import ProfileService
from drivelog.stores.session_store import SessionStore
from drivelog.stores.user_store import UserStore
from drivelog.utils.config import Settings, load_csrf_key, load_settings
from drivelog.utils.exceptions import (
    AuthenticationError,
    LastAdminError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from drivelog.utils.logger import configure_logging, get_logger
from .api import admin_router, auth_router, driver_router, home_for
from .auth_deps import get_session_token

logger = get_logger(__name__)


def _startup(app: FastAPI) -> None:
    """Wire stores and services, bootstrap the admin, sweep stale sessions"""
    settings: Settings = app.state.settings
    if app.state.configure_logging:
        configure_logging(
            level=settings.logging.level,
            fmt=settings.logging.format,
            file_path=settings.logging.file_path,
            max_bytes=settings.logging.max_bytes,
            backup_count=settings.logging.backup_count,
        )

    user_store = UserStore(settings.data_dir)
    session_store = SessionStore(settings.data_dir)
    driving_log_service = DrivingLogService(user_store)

    app.state.csrf_key = load_csrf_key(settings.data_dir)
    app.state.user_store = user_store
    app.state.session_store = session_store
    app.state.auth_service = AuthService(user_store, session_store)
    app.state.driving_log_service = driving_log_service
    app.state.profile_service = ProfileService(user_store)
    app.state.admin_service = AdminService(user_store, session_store, driving_log_service)

    # Fatal on failure: never serve without an admin
    result = initialize(
        user_store,
        hash_password,
        generate_password,
        password_length=settings.bootstrap_password_length,
    )
    print_admin_credentials(result)

    try:
        session_store.sweep_expired()
    except StorageError as e:
        logger.warning("Failed to clean expired sessions", error=str(e))

    logger.info("drivelog startup completed", data_dir=str(settings.data_dir), environment=settings.environment)


def _error(status_code: int, exc: Exception, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), **extra})


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, exc, errors=exc.errors)

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        return _error(status.HTTP_401_UNAUTHORIZED, exc)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, exc)

    @app.exception_handler(LastAdminError)
    async def last_admin_handler(request: Request, exc: LastAdminError):
        return _error(status.HTTP_409_CONFLICT, exc)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("Storage error", path=exc.path, error=str(exc), url=str(request.url))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "An error occurred. Please try again."},
        )


def create_app(settings: Optional[Settings] = None, configure_logs: bool = True) -> FastAPI:
    """Build the app; stores and services are created on startup"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _startup(app)
        yield
        logger.info("drivelog shutting down")

    app = FastAPI(
        title="drivelog",
        description="Driver logged-hours tracking",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings or load_settings()
    app.state.configure_logging = configure_logs

    _register_exception_handlers(app)
    app.include_router(auth_router)
    app.include_router(driver_router)
    app.include_router(admin_router)

    @app.get("/")
    def root(request: Request):
        """Where a client should go next, based on its session"""
        user = request.app.state.auth_service.user_for_token(get_session_token(request))
        if user is None:
            return {"redirect": "/auth/login"}
        return {"redirect": home_for(user)}

    @app.get("/health")
    def health():
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
