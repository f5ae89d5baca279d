import logging

from fastapi import APIRouter, Depends, Request, Response

from boringblog.adapters.auth.crypto import JWTAuthAdapter
from boringblog.adapters.clock import SystemClock
from boringblog.adapters.dev_email import DevEmailAdapter
from boringblog.adapters.sqlite.repos import SQLiteUserRepo
from boringblog.api.deps import (
    Settings,
    get_app_settings,
    get_auth_adapter,
    get_clock,
    get_mailer,
    get_rate_limiter,
    get_requester,
    get_rules,
    get_user_repo,
)
from boringblog.api.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ResetPasswordRequest,
    SessionResponse,
    UserResponse,
)
from boringblog.app_shell.rate_limit import RateLimiter
from boringblog.components.auth import (
    ForgotPasswordInput,
    LoginInput,
    ResetPasswordInput,
    run_login,
    run_request_password_reset,
    run_reset_password,
)
from boringblog.domain.entities import Requester
from boringblog.domain.errors import RateLimitedError
from boringblog.rules.models import Rules

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth: JWTAuthAdapter = Depends(get_auth_adapter),
    limiter: RateLimiter = Depends(get_rate_limiter),
    rules: Rules = Depends(get_rules),
) -> LoginResponse:
    """Authenticate and set the HttpOnly session cookie."""
    client_ip = request.client.host if request.client else "unknown"
    if not limiter.check_login(client_ip):
        logger.warning("Login rate limit hit for %s", client_ip)
        raise RateLimitedError("Too many login attempts, please try again later")

    output = run_login(LoginInput(email=body.email, password=body.password), user_repo, auth)

    ttl_seconds = rules.auth.session_ttl_minutes * 60
    response.set_cookie(
        key=rules.auth.cookie_name,
        value=auth.create_token(output.user),
        httponly=True,
        max_age=ttl_seconds,
        expires=ttl_seconds,
        samesite="lax",
        secure=rules.auth.cookie_secure,
    )
    return LoginResponse(user=UserResponse.from_user(output.user))


@router.post("/logout")
def logout(response: Response, rules: Rules = Depends(get_rules)) -> dict[str, bool]:
    """Log out user by clearing cookie."""
    response.delete_cookie(key=rules.auth.cookie_name)
    return {"success": True}


@router.get("/me", response_model=SessionResponse)
def read_session(requester: Requester = Depends(get_requester)) -> SessionResponse:
    return SessionResponse.from_requester(requester)


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    body: ForgotPasswordRequest,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    mailer: DevEmailAdapter = Depends(get_mailer),
    clock: SystemClock = Depends(get_clock),
    settings: Settings = Depends(get_app_settings),
    rules: Rules = Depends(get_rules),
) -> MessageResponse:
    message = run_request_password_reset(
        ForgotPasswordInput(email=body.email),
        user_repo,
        mailer,
        clock,
        site_url=settings.site_url,
        ttl_minutes=rules.auth.reset_token_ttl_minutes,
    )
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    body: ResetPasswordRequest,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> MessageResponse:
    run_reset_password(
        ResetPasswordInput(token=body.token, password=body.password),
        user_repo,
        auth,
        clock,
        min_length=rules.auth.password_min_length,
    )
    return MessageResponse(message="Password has been reset")
