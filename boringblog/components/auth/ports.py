from datetime import datetime
from typing import Protocol
from uuid import UUID

from boringblog.domain.entities import User


class UserRepoPort(Protocol):
    def get_by_email(self, email: str) -> User | None: ...
    def get_by_id(self, user_id: UUID) -> User | None: ...
    def get_by_reset_token(self, token: str) -> User | None: ...
    def save(self, user: User) -> User: ...
    def list_all(self) -> list[User]: ...


class PasswordHasherPort(Protocol):
    def hash_password(self, plain: str) -> str: ...
    def verify_password(self, plain: str, hashed: str) -> bool: ...


class EmailPort(Protocol):
    """Outgoing mail collaborator."""

    def send_email(self, recipient: str, subject: str, body_html: str) -> object: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
