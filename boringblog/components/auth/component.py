import logging
import secrets
from datetime import timedelta
from html import escape

from boringblog.domain.entities import User
from boringblog.domain.errors import (
    ForbiddenError,
    UnauthorizedError,
    ValidationError,
)
from boringblog.domain.policy import PolicyEngine

from .models import (
    AuthOutput,
    CreateUserInput,
    ForgotPasswordInput,
    InviteAuthorInput,
    ListUsersInput,
    LoginInput,
    ResetPasswordInput,
    UserListOutput,
    UserOutput,
)
from .ports import EmailPort, PasswordHasherPort, TimePort, UserRepoPort

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
RESET_REQUESTED = "If that email is registered, a reset link has been sent"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def generate_reset_token() -> str:
    return secrets.token_hex(32)


def generate_temp_password() -> str:
    return secrets.token_hex(4)


def run_login(
    inp: LoginInput, user_repo: UserRepoPort, hasher: PasswordHasherPort
) -> AuthOutput:
    if not inp.email or not inp.password:
        raise ValidationError("Email and password are required")

    email = normalize_email(inp.email)
    user = user_repo.get_by_email(email)
    # Same message for unknown email and wrong password
    if not user or not hasher.verify_password(inp.password, user.password_hash):
        logger.info("Login failed for %s", email)
        raise UnauthorizedError(INVALID_CREDENTIALS)

    logger.info("Login succeeded for %s", email)
    return AuthOutput(user=user)


def run_request_password_reset(
    inp: ForgotPasswordInput,
    user_repo: UserRepoPort,
    mailer: EmailPort,
    time: TimePort,
    site_url: str,
    ttl_minutes: int = 60,
) -> str:
    """
    Issue a reset token and mail the link. The returned message is the same
    whether or not the account exists.
    """
    if not inp.email or not inp.email.strip():
        raise ValidationError("Email is required")

    user = user_repo.get_by_email(normalize_email(inp.email))
    if user:
        now = time.now_utc()
        user.reset_token = generate_reset_token()
        user.reset_token_expiry = now + timedelta(minutes=ttl_minutes)
        user.updated_at = now
        user_repo.save(user)

        link = f"{site_url.rstrip('/')}/reset-password?token={user.reset_token}"
        mailer.send_email(
            user.email,
            "Reset your password",
            (
                "<p>We received a request to reset your password.</p>"
                f'<p><a href="{escape(link)}">Set a new password</a></p>'
                f"<p>This link expires in {ttl_minutes} minutes. "
                "If you did not ask for it, ignore this email.</p>"
            ),
        )
        logger.info("Password reset requested for user %s", user.id)

    return RESET_REQUESTED


def run_reset_password(
    inp: ResetPasswordInput,
    user_repo: UserRepoPort,
    hasher: PasswordHasherPort,
    time: TimePort,
    min_length: int = 8,
) -> UserOutput:
    if not inp.token or not inp.password:
        raise ValidationError("Token and password are required")
    if len(inp.password) < min_length:
        raise ValidationError(
            f"Password must be at least {min_length} characters", field="password"
        )

    now = time.now_utc()
    user = user_repo.get_by_reset_token(inp.token)
    if not user or user.reset_token_expiry is None or user.reset_token_expiry <= now:
        raise ValidationError("Reset link is invalid or has expired")

    user.password_hash = hasher.hash_password(inp.password)
    user.reset_token = None
    user.reset_token_expiry = None
    user.updated_at = now
    user_repo.save(user)
    logger.info("Password reset completed for user %s", user.id)
    return UserOutput(user=user)


def run_create_user(
    inp: CreateUserInput,
    user_repo: UserRepoPort,
    hasher: PasswordHasherPort,
    time: TimePort,
    min_length: int = 8,
) -> UserOutput:
    email = normalize_email(inp.email or "")
    if not email or not inp.name.strip():
        raise ValidationError("Name and email are required")
    if len(inp.password) < min_length:
        raise ValidationError(
            f"Password must be at least {min_length} characters", field="password"
        )
    if user_repo.get_by_email(email):
        raise ValidationError("Email already in use", field="email")

    now = time.now_utc()
    user = User(
        email=email,
        name=inp.name.strip(),
        password_hash=hasher.hash_password(inp.password),
        role=inp.role,
        created_at=now,
        updated_at=now,
    )
    user_repo.save(user)
    logger.info("User created: %s (%s)", email, inp.role)
    return UserOutput(user=user)


def run_invite_author(
    inp: InviteAuthorInput,
    user_repo: UserRepoPort,
    hasher: PasswordHasherPort,
    mailer: EmailPort,
    policy: PolicyEngine,
    time: TimePort,
    site_url: str,
) -> UserOutput:
    """Create an AUTHOR account with a temporary password and mail it."""
    if not policy.can_manage_users(inp.actor):
        raise ForbiddenError()

    if not inp.name or not inp.name.strip() or not inp.email or not inp.email.strip():
        raise ValidationError("Name and email are required")

    email = normalize_email(inp.email)
    if user_repo.get_by_email(email):
        raise ValidationError("Email already registered", field="email")

    temp_password = generate_temp_password()
    now = time.now_utc()
    user = User(
        email=email,
        name=inp.name.strip(),
        password_hash=hasher.hash_password(temp_password),
        role="AUTHOR",
        created_at=now,
        updated_at=now,
    )
    user_repo.save(user)

    login_link = f"{site_url.rstrip('/')}/login"
    mailer.send_email(
        email,
        "You have been invited to write on the blog",
        (
            f"<p>Hello {escape(user.name)},</p>"
            "<p>You have been invited as an author. Your login details:</p>"
            f"<ul><li>Email: {escape(email)}</li>"
            f"<li>Temporary password: {temp_password}</li></ul>"
            f'<p><a href="{escape(login_link)}">Log in</a> and change your password soon.</p>'
        ),
    )
    logger.info("Author invited: %s by %s", email, inp.actor.user_id)
    return UserOutput(user=user)


def run_list_users(
    inp: ListUsersInput, user_repo: UserRepoPort, policy: PolicyEngine
) -> UserListOutput:
    if not policy.can_manage_users(inp.actor):
        raise ForbiddenError()

    users = sorted(user_repo.list_all(), key=lambda u: u.created_at, reverse=True)
    return UserListOutput(users=users)
