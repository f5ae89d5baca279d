from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from boringblog.domain.entities import Post, Requester, RoleType, User
from boringblog.domain.text import extract_excerpt, reading_time_minutes

EXCERPT_LENGTH = 160


class CamelModel(BaseModel):
    """Accepts and emits camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Posts ---
class PostCreateRequest(CamelModel):
    # Optional here so missing fields reach the component's validation message
    title: str | None = None
    content: dict[str, Any] | None = None
    tags: list[str] | None = None
    cover_image: str | None = None
    published: bool | None = None
    pinned: bool | None = None


class PostUpdateRequest(CamelModel):
    """Partial update: only fields present in the body are applied."""

    title: str | None = None
    content: dict[str, Any] | None = None
    tags: list[str] | None = None
    cover_image: str | None = None
    published: bool | None = None
    pinned: bool | None = None


class TagResponse(CamelModel):
    id: UUID
    name: str
    slug: str


class AuthorResponse(CamelModel):
    id: UUID
    name: str
    role: RoleType


class PostResponse(CamelModel):
    id: UUID
    title: str
    slug: str
    content: dict[str, Any]
    content_html: str
    cover_image: str | None = None
    published: bool
    pinned: bool
    published_at: datetime | None = None
    author_id: UUID
    author: AuthorResponse | None = None
    tags: list[TagResponse] = Field(default_factory=list)
    reading_time: int
    excerpt: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            title=post.title,
            slug=post.slug,
            content=post.content,
            content_html=post.content_html,
            cover_image=post.cover_image,
            published=post.published,
            pinned=post.pinned,
            published_at=post.published_at,
            author_id=post.author_id,
            author=(
                AuthorResponse(id=post.author.id, name=post.author.name, role=post.author.role)
                if post.author
                else None
            ),
            tags=[TagResponse(id=t.id, name=t.name, slug=t.slug) for t in post.tags],
            reading_time=reading_time_minutes(post.content_html),
            excerpt=extract_excerpt(post.content_html, EXCERPT_LENGTH),
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class PostListResponse(CamelModel):
    posts: list[PostResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class DeleteResponse(CamelModel):
    success: bool = True


# --- Auth ---
class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class ForgotPasswordRequest(CamelModel):
    email: str | None = None


class ResetPasswordRequest(CamelModel):
    token: str | None = None
    password: str | None = None


class SessionResponse(CamelModel):
    is_logged_in: bool = False
    user_id: UUID | None = None
    name: str = ""
    role: RoleType | None = None

    @classmethod
    def from_requester(cls, requester: Requester) -> "SessionResponse":
        return cls(
            is_logged_in=requester.is_logged_in,
            user_id=requester.user_id,
            name=requester.name,
            role=requester.role,
        )


class MessageResponse(CamelModel):
    success: bool = True
    message: str


# --- Users ---
class UserResponse(CamelModel):
    """Public view of a user; never carries the password hash or reset token."""

    id: UUID
    email: str
    name: str
    role: RoleType
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            created_at=user.created_at,
        )


class LoginResponse(CamelModel):
    success: bool = True
    user: UserResponse


class InviteRequest(CamelModel):
    name: str | None = None
    email: str | None = None


class UserCreatedResponse(CamelModel):
    success: bool = True
    user: UserResponse


# --- Uploads ---
class UploadResponse(CamelModel):
    url: str
