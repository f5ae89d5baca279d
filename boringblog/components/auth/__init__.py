"""
Auth component - credentials, password reset and author accounts.
"""

from .component import (
    INVALID_CREDENTIALS,
    RESET_REQUESTED,
    generate_reset_token,
    normalize_email,
    run_create_user,
    run_invite_author,
    run_list_users,
    run_login,
    run_request_password_reset,
    run_reset_password,
)
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

__all__ = [
    # Entry points
    "run_login",
    "run_request_password_reset",
    "run_reset_password",
    "run_create_user",
    "run_invite_author",
    "run_list_users",
    "normalize_email",
    "generate_reset_token",
    "INVALID_CREDENTIALS",
    "RESET_REQUESTED",
    # Models
    "AuthOutput",
    "CreateUserInput",
    "ForgotPasswordInput",
    "InviteAuthorInput",
    "ListUsersInput",
    "LoginInput",
    "ResetPasswordInput",
    "UserListOutput",
    "UserOutput",
    # Ports
    "EmailPort",
    "PasswordHasherPort",
    "TimePort",
    "UserRepoPort",
]
