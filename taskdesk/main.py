"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Build the FastAPI app (metadata, middleware, routers, exception handlers)
  - Open the DB pool and run the dev admin seed on startup
  - Expose /healthz

Collaborators:
  - api.auth_routes, api.user_routes, api.task_routes
  - crosscutting.middleware.RequestContextMiddleware
  - infrastructure.db.pool
  - container: repositories for health and seeding

Notes:
  - Routers are mounted under API_PREFIX (default /api); /healthz is not
  - Middleware order: CORS -> RequestContext -> routes
  - Run with: uvicorn taskdesk.main:app
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .api.auth_routes import router as auth_router
from .api.exception_handlers import register_exception_handlers
from .api.schemas import HealthResponse
from .api.task_routes import router as task_router
from .api.user_routes import router as user_router
from .application.dev_seed_admin import ensure_dev_admin
from .container import get_user_repository
from .crosscutting.config import get_settings
from .crosscutting.logger import logger
from .crosscutting.middleware import RequestContextMiddleware
from .identity.auth_users import hash_password
from .infrastructure.db.pool import close_pool, init_pool


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle. Initializes the pool when using Postgres."""
    settings = get_settings()

    if settings.uses_postgres():
        init_pool(
            database_url=settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    try:
        ensure_dev_admin(
            settings,
            user_repo=get_user_repository(),
            password_hasher=hash_password,
        )
        logger.info(
            "TaskDesk API starting up",
            extra={
                "app_env": settings.app_env,
                "storage_backend": settings.storage_backend,
                "api_prefix": settings.api_prefix,
                "fake_email": settings.fake_email,
            },
        )
        yield
    finally:
        if settings.uses_postgres():
            close_pool()
        logger.info("TaskDesk API shutting down")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="TaskDesk API",
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "auth", "description": "Registration, login and own profile"},
            {"name": "users", "description": "User roster (admin)"},
            {"name": "tasks", "description": "Task roster and status updates"},
        ],
    )

    # R: Added last runs first; request context wraps everything below it
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-Id"],
    )

    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(user_router, prefix=settings.api_prefix)
    app.include_router(task_router, prefix=settings.api_prefix)

    register_exception_handlers(app)

    @app.get("/healthz", response_model=HealthResponse)
    def healthz(request: Request):
        """R: Liveness plus storage connectivity."""
        db_status = "disconnected"
        try:
            if get_user_repository().ping():
                db_status = "connected"
        except Exception as exc:
            logger.warning("Health check: storage unavailable", extra={"error": str(exc)})

        return HealthResponse(ok=db_status == "connected", db=db_status)

    return app


app = create_app()
