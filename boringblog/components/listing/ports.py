"""
Listing component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from boringblog.domain.entities import Post

from .models import PostQuery


class PostQueryPort(Protocol):
    """Read side of the post store."""

    def list_posts(self, query: PostQuery) -> tuple[list[Post], int]:
        """Return the sliced posts and the total matching count for the predicate."""
        ...


class PaginationRulesPort(Protocol):
    page_size: int
    max_limit: int
