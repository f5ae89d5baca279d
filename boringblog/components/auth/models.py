from dataclasses import dataclass, field

from boringblog.domain.entities import Requester, RoleType, User


@dataclass(frozen=True)
class LoginInput:
    email: str | None
    password: str | None


@dataclass(frozen=True)
class ForgotPasswordInput:
    email: str | None


@dataclass(frozen=True)
class ResetPasswordInput:
    token: str | None
    password: str | None


@dataclass(frozen=True)
class CreateUserInput:
    email: str
    name: str
    password: str
    role: RoleType = "AUTHOR"


@dataclass(frozen=True)
class InviteAuthorInput:
    actor: Requester
    name: str | None
    email: str | None


@dataclass(frozen=True)
class ListUsersInput:
    actor: Requester


@dataclass
class AuthOutput:
    user: User
    success: bool = True


@dataclass
class UserOutput:
    user: User
    success: bool = True


@dataclass
class UserListOutput:
    users: list[User] = field(default_factory=list)
    success: bool = True
