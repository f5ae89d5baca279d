"""
Posts component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from boringblog.domain.entities import Post, Requester

# Fields an update may touch; anything else in a partial update is ignored.
UPDATABLE_FIELDS = frozenset(["title", "content", "tags", "cover_image", "published", "pinned"])


# --- Input Models ---


@dataclass(frozen=True)
class CreatePostInput:
    """Input for creating a new post."""

    author: Requester
    title: str | None
    content: dict[str, Any] | None
    tags: list[str] | None = None
    cover_image: str | None = None
    published: bool | None = False
    pinned: bool | None = False


@dataclass(frozen=True)
class UpdatePostInput:
    """
    Partial update. Only keys present in ``changes`` are applied; an explicit
    ``None`` clears the field where that makes sense (cover image, tags).
    """

    actor: Requester
    slug: str
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GetPostInput:
    """Input for retrieving a single post."""

    requester: Requester
    slug: str


@dataclass(frozen=True)
class DeletePostInput:
    """Input for deleting a post."""

    actor: Requester
    slug: str


# --- Output Models ---


@dataclass(frozen=True)
class PostOutput:
    """Output containing a single post with author and tags populated."""

    post: Post


@dataclass(frozen=True)
class DeletePostOutput:
    """Output for a completed delete."""

    slug: str
    success: bool = True
