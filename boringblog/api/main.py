import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from boringblog.adapters.clock import SystemClock
from boringblog.adapters.dev_email import DevEmailAdapter
from boringblog.adapters.sqlite.database import Database
from boringblog.adapters.sqlite.migrator import SQLiteMigrator
from boringblog.api.deps import Settings, get_settings
from boringblog.api.routes import auth, feeds, posts, uploads, users
from boringblog.app_shell.config import configure_logging, validate_ops_rules
from boringblog.app_shell.rate_limit import RateLimiter
from boringblog.domain.errors import BlogError
from boringblog.rules.loader import load_rules

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the store handle and load rules once per process."""
    settings: Settings = app.state.settings
    configure_logging(settings.log_level)

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules)
    except (FileNotFoundError, ValueError, RuntimeError):
        logger.critical("Rules load failed from %s", settings.rules_path, exc_info=True)
        raise
    logger.info("Rules loaded from %s", settings.rules_path)

    db = Database(settings.db_path)
    SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Database ready at %s", settings.db_path)

    app.state.db = db
    app.state.rules = rules
    app.state.rate_limiter = RateLimiter(rules.rate_limits, time_port=app.state.clock)

    yield


def _first_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"{where}: {first.get('msg')}" if where else str(first.get("msg"))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BlogError)
    async def blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _first_error(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR})


def create_app(
    settings: Settings | None = None,
    *,
    clock: Any = None,
    mailer: DevEmailAdapter | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="Boring Blog API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.clock = clock or SystemClock()
    app.state.mailer = mailer or DevEmailAdapter()

    register_exception_handlers(app)

    # --- Routers ---
    app.include_router(posts.router, prefix="/api/posts", tags=["Posts"])
    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(uploads.router, prefix="/api/upload", tags=["Uploads"])
    app.include_router(feeds.router, prefix="", tags=["Feeds"])

    app.mount(
        "/uploads",
        StaticFiles(directory=str(settings.uploads_dir), check_dir=False),
        name="uploads",
    )

    # CORS (Allow Frontend)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.site_url, "http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check() -> JSONResponse:
        """Health check endpoint."""
        try:
            db_ok = app.state.db.ping()
        except Exception:
            logger.exception("Health check database probe failed")
            db_ok = False

        body: dict[str, Any] = {
            "status": "ok" if db_ok else "degraded",
            "checks": {"db": "connected" if db_ok else "unreachable"},
            "timestamp": datetime.now(UTC).isoformat(),
        }
        return JSONResponse(status_code=200 if db_ok else 503, content=body)

    return app
