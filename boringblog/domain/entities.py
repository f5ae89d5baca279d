from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
RoleType = Literal["ADMIN", "AUTHOR"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- User & Auth ---

class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    name: str
    password_hash: str
    role: RoleType = "AUTHOR"
    reset_token: str | None = None
    reset_token_expiry: datetime | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Requester(BaseModel):
    """Identity of whoever is making a request; anonymous when not logged in."""

    user_id: UUID | None = None
    role: RoleType | None = None
    name: str = ""
    is_logged_in: bool = False

    @property
    def is_admin(self) -> bool:
        return self.is_logged_in and self.role == "ADMIN"

    @classmethod
    def anonymous(cls) -> "Requester":
        return cls()

    @classmethod
    def from_user(cls, user: User) -> "Requester":
        return cls(user_id=user.id, role=user.role, name=user.name, is_logged_in=True)


# --- Content ---

class Tag(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    name: str
    slug: str


class PostAuthor(BaseModel):
    id: UUID
    name: str
    role: RoleType = "AUTHOR"


class Post(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    slug: str

    # Editor document, stored and forwarded verbatim
    content: dict[str, Any]
    content_html: str = ""

    cover_image: str | None = None
    published: bool = False
    pinned: bool = False
    published_at: datetime | None = None

    author_id: UUID
    author: PostAuthor | None = None
    tags: list[Tag] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
