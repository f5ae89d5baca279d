"""
Posts component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from boringblog.domain.entities import Post, Tag


class PostRepoPort(Protocol):
    """Repository interface for post persistence."""

    def get_by_slug(self, slug: str) -> Post | None:
        """Get a post by slug with author and tags populated."""
        ...

    def create(self, post: Post) -> Post:
        """Insert a post, upserting its tags by name, atomically."""
        ...

    def update_fields(
        self, post_id: UUID, fields: dict[str, Any], tags: list[Tag] | None = None
    ) -> bool:
        """
        Write only the given fields (and the full tag set when ``tags`` is
        not None) atomically. ``published_at`` is only filled when unset.
        Returns False when the post no longer exists.
        """
        ...

    def delete(self, post_id: UUID) -> None:
        """Delete a post and its tag associations. Tag rows are kept."""
        ...


class RendererPort(Protocol):
    """Document-to-HTML rendering collaborator."""

    def render(self, doc: dict[str, Any]) -> str:
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
