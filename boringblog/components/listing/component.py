"""
Listing component - visibility rules and paginated post queries.

Every listing surface (home feed, author page, tag page, drafts, feeds)
composes the same predicates:

- public listings show published posts only; drafts are never mixed in
- non-ADMIN requesters never see posts written by ADMIN users in listings
- drafts: own drafts for authors, all (optionally by author name) for ADMINs
- tag and author filters narrow the result and never raise; unknown
  values simply match nothing

Ordering: the unfiltered public feed puts pinned posts first on page 1
only, then every page slices the unpinned posts by publish time. Filtered
views are purely chronological. Drafts are ordered by last update.
"""

from __future__ import annotations

import math

from boringblog.domain.entities import Post, Requester
from boringblog.domain.errors import UnauthorizedError

from .models import ListPostsInput, PostPage, PostQuery
from .ports import PaginationRulesPort, PostQueryPort

DEFAULT_PAGE_SIZE = 20
DEFAULT_MAX_LIMIT = 100


# --- Predicates ---


def visibility_filter(requester: Requester, *, drafts: bool = False) -> PostQuery:
    """
    Base predicate for what ``requester`` may list.

    Raises:
        UnauthorizedError: drafts requested without a session.
    """
    if drafts:
        if not requester.is_logged_in:
            raise UnauthorizedError()
        if requester.is_admin:
            return PostQuery(published=False, order="updated_desc")
        return PostQuery(published=False, author_id=requester.user_id, order="updated_desc")

    return PostQuery(published=True, exclude_admin_authors=not requester.is_admin)


def apply_filters(
    query: PostQuery,
    *,
    tag: str | None = None,
    author: str | None = None,
) -> PostQuery:
    """Narrow a base predicate with optional tag/author filters."""
    if tag:
        query = query.narrowed(tag_slug=tag)
    if author:
        query = query.narrowed(author_name=author)
    return query


def clamp_page(page: int | None) -> int:
    if page is None or page < 1:
        return 1
    return page


def clamp_limit(
    limit: int | None,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_limit: int = DEFAULT_MAX_LIMIT,
) -> int:
    if limit is None:
        return page_size
    return min(max_limit, max(1, limit))


def _total_pages(count: int, limit: int) -> int:
    return max(1, math.ceil(count / limit))


# --- Component Entry Points ---


def run_list_posts(
    inp: ListPostsInput,
    *,
    repo: PostQueryPort,
    pagination: PaginationRulesPort | None = None,
) -> PostPage:
    """
    List one page of posts for the requester.

    Args:
        inp: Requester, page, limit and optional filters.
        repo: Read port over the post store.
        pagination: Page size / max limit configuration.

    Returns:
        PostPage with the posts, total matching count and page totals.
    """
    page = clamp_page(inp.page)
    limit = clamp_limit(
        inp.limit,
        page_size=pagination.page_size if pagination else DEFAULT_PAGE_SIZE,
        max_limit=pagination.max_limit if pagination else DEFAULT_MAX_LIMIT,
    )
    offset = (page - 1) * limit

    base = visibility_filter(inp.requester, drafts=inp.drafts)

    if inp.drafts:
        # ADMIN may narrow drafts by author name; authors are already scoped
        if inp.requester.is_admin and inp.author:
            base = base.narrowed(author_name=inp.author)
        posts, total = repo.list_posts(base.narrowed(limit=limit, offset=offset))
        return PostPage(
            posts=posts,
            total=total,
            page=page,
            limit=limit,
            total_pages=_total_pages(total, limit),
        )

    query = apply_filters(base, tag=inp.tag, author=inp.author)

    if query != base:
        posts, total = repo.list_posts(query.narrowed(limit=limit, offset=offset))
        return PostPage(
            posts=posts,
            total=total,
            page=page,
            limit=limit,
            total_pages=_total_pages(total, limit),
        )

    # Unfiltered public feed: pinned block on page 1, unpinned posts paginated
    regular, regular_total = repo.list_posts(
        base.narrowed(pinned=False, limit=limit, offset=offset)
    )
    pinned, pinned_total = repo.list_posts(base.narrowed(pinned=True, limit=None))

    posts = pinned + regular if page == 1 else regular
    return PostPage(
        posts=posts,
        total=regular_total + pinned_total,
        page=page,
        limit=limit,
        total_pages=_total_pages(regular_total, limit),
    )


def run_list_public(
    requester: Requester,
    *,
    repo: PostQueryPort,
    limit: int | None = None,
) -> list[Post]:
    """Chronological public posts for feeds (no pin reordering)."""
    query = visibility_filter(requester).narrowed(limit=limit)
    posts, _ = repo.list_posts(query)
    return list(posts)
