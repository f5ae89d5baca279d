import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from boringblog.adapters.auth.crypto import JWTAuthAdapter
from boringblog.adapters.clock import SystemClock
from boringblog.adapters.dev_email import DevEmailAdapter
from boringblog.adapters.fs.filestore import FileSystemStore
from boringblog.adapters.sqlite.database import Database
from boringblog.adapters.sqlite.repos import SQLitePostRepo, SQLiteUserRepo
from boringblog.app_shell.rate_limit import RateLimiter
from boringblog.components.richtext import HtmlRenderer
from boringblog.domain.entities import Requester
from boringblog.domain.errors import UnauthorizedError
from boringblog.domain.policy import PolicyEngine
from boringblog.rules.models import Rules


# --- Settings ---
class Settings:
    """Process configuration from ``BLOG_*`` environment variables; kwargs win."""

    def __init__(
        self,
        data_dir: str | Path | None = None,
        rules_path: str | Path | None = None,
        migrations_dir: str | Path | None = None,
        secret_key: str | None = None,
        site_url: str | None = None,
        log_level: str | None = None,
    ) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(data_dir or os.environ.get("BLOG_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "blog.db")
        self.uploads_dir = self.data_dir / "uploads"
        self.rules_path = Path(
            rules_path or os.environ.get("BLOG_RULES_PATH", self.base_dir / "rules.yaml")
        )
        self.migrations_dir = Path(
            migrations_dir
            or os.environ.get("BLOG_MIGRATIONS_DIR", self.base_dir / "migrations")
        )
        self.secret_key = secret_key or os.environ.get("BLOG_SECRET_KEY", "dev-secret-unsafe")
        self.site_url = (
            site_url or os.environ.get("BLOG_SITE_URL", "http://localhost:8000")
        ).rstrip("/")
        self.log_level = log_level or os.environ.get("BLOG_LOG_LEVEL", "INFO")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- App state (built in the lifespan) ---
def get_app_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_database(request: Request) -> Database:
    db: Database = request.app.state.db
    return db


def get_rules(request: Request) -> Rules:
    rules: Rules = request.app.state.rules
    return rules


def get_clock(request: Request) -> SystemClock:
    clock: SystemClock = request.app.state.clock
    return clock


def get_mailer(request: Request) -> DevEmailAdapter:
    mailer: DevEmailAdapter = request.app.state.mailer
    return mailer


def get_rate_limiter(request: Request) -> RateLimiter:
    limiter: RateLimiter = request.app.state.rate_limiter
    return limiter


# --- Repos ---
def get_user_repo(db: Database = Depends(get_database)) -> SQLiteUserRepo:
    return SQLiteUserRepo(db)


def get_post_repo(db: Database = Depends(get_database)) -> SQLitePostRepo:
    return SQLitePostRepo(db)


# --- Services ---
def get_policy(rules: Rules = Depends(get_rules)) -> PolicyEngine:
    return PolicyEngine(rules)


def get_renderer() -> HtmlRenderer:
    return HtmlRenderer()


def get_file_store(settings: Settings = Depends(get_app_settings)) -> FileSystemStore:
    return FileSystemStore(base_path=str(settings.uploads_dir))


def get_auth_adapter(
    settings: Settings = Depends(get_app_settings),
    rules: Rules = Depends(get_rules),
) -> JWTAuthAdapter:
    return JWTAuthAdapter(settings.secret_key, rules.auth.session_ttl_minutes)


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


async def get_requester(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    auth: JWTAuthAdapter = Depends(get_auth_adapter),
    rules: Rules = Depends(get_rules),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
) -> Requester:
    """Resolve the session; anyone without a valid one is anonymous."""
    # 1. Cookie first (HttpOnly), then Authorization: Bearer
    cookie_token = request.cookies.get(rules.auth.cookie_name)
    if cookie_token:
        token = cookie_token

    if not token:
        return Requester.anonymous()

    # 2. Decode
    payload = auth.validate_token(token)
    if not payload:
        return Requester.anonymous()

    # 3. Fetch user so role changes and deletions take effect immediately
    try:
        user = user_repo.get_by_id(UUID(payload["sub"]))
    except ValueError:
        return Requester.anonymous()
    if not user:
        return Requester.anonymous()

    return Requester.from_user(user)


def require_user(requester: Requester = Depends(get_requester)) -> Requester:
    if not requester.is_logged_in:
        raise UnauthorizedError()
    return requester
