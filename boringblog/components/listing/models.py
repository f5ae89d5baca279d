"""
Listing component models: query predicate, inputs and page output.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal
from uuid import UUID

from boringblog.domain.entities import Post, Requester

PostOrder = Literal["published_desc", "pinned_first", "updated_desc"]


@dataclass(frozen=True)
class PostQuery:
    """
    Filter/sort/slice predicate over posts. Every set field is AND-ed.

    ``exclude_admin_authors`` hides posts whose author has the ADMIN role.
    ``limit=None`` means no slicing.
    """

    published: bool = True
    author_id: UUID | None = None
    author_name: str | None = None
    tag_slug: str | None = None
    pinned: bool | None = None
    exclude_admin_authors: bool = False
    order: PostOrder = "published_desc"
    limit: int | None = None
    offset: int = 0

    def narrowed(self, **changes: object) -> PostQuery:
        return replace(self, **changes)  # type: ignore[arg-type]


@dataclass(frozen=True)
class ListPostsInput:
    """Input for listing posts (public listing or drafts)."""

    requester: Requester
    page: int = 1
    limit: int | None = None
    tag: str | None = None
    author: str | None = None
    drafts: bool = False


@dataclass(frozen=True)
class PostPage:
    """One page of posts plus pagination totals."""

    posts: list[Post] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 20
    total_pages: int = 1
