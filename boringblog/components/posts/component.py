"""
Posts component - post lifecycle.

The single authority for creating, mutating and deleting posts and for
keeping their derived fields in step:

- slug: derived once from the title at creation; a collision is reported
  as a conflict, never retried with a new suffix
- content_html: re-rendered whenever content changes, never on its own
- published_at: set on the first publish only; unpublishing keeps it
- tags: upserted by trimmed name and connected; empty names are dropped

Updates write only the fields they were given, so concurrent updates to
different fields do not undo each other.

Drafts are only visible to their author and to ADMINs. Hidden drafts and
missing posts produce the same NotFoundError.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from boringblog.domain.entities import Post, PostAuthor, Requester, Tag
from boringblog.domain.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from boringblog.domain.policy import PolicyEngine, can_view_post
from boringblog.domain.slug import generate_slug

from .models import (
    UPDATABLE_FIELDS,
    CreatePostInput,
    DeletePostInput,
    DeletePostOutput,
    GetPostInput,
    PostOutput,
    UpdatePostInput,
)
from .ports import PostRepoPort, RendererPort, TimePort

logger = logging.getLogger(__name__)

POST_NOT_FOUND = "Post not found"
SLUG_TAKEN = "A post with this link already exists, please change the title and retry"


# --- Helpers ---


def normalize_tag_names(names: list[str] | None) -> list[str]:
    """Trim, drop empties and de-duplicate while keeping order."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in names or []:
        if not isinstance(raw, str):
            continue
        name = raw.strip()
        if name and name not in seen:
            seen.add(name)
            result.append(name)
    return result


def _candidate_tags(names: list[str] | None, make_slug: Callable[[str], str]) -> list[Tag]:
    # The store keeps the existing row for names it already has
    return [Tag(name=name, slug=make_slug(name)) for name in normalize_tag_names(names)]


def _require_text(value: Any, field: str, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message, field=field)
    return value


def _require_document(value: Any, field: str, message: str) -> dict[str, Any]:
    if not isinstance(value, dict) or not value:
        raise ValidationError(message, field=field)
    return value


def _load_for_change(repo: PostRepoPort, actor: Requester, slug: str) -> Post:
    if not actor.is_logged_in:
        raise UnauthorizedError()
    post = repo.get_by_slug(slug)
    if post is None:
        raise NotFoundError(POST_NOT_FOUND)
    return post


# --- Component Entry Points ---


def run_get(inp: GetPostInput, *, repo: PostRepoPort) -> PostOutput:
    """
    Get a post by slug, honoring draft visibility.

    Raises:
        NotFoundError: the post does not exist or the requester may not see it.
    """
    post = repo.get_by_slug(inp.slug)
    if post is None or not can_view_post(inp.requester, post):
        raise NotFoundError(POST_NOT_FOUND)
    return PostOutput(post=post)


def run_create(
    inp: CreatePostInput,
    *,
    repo: PostRepoPort,
    renderer: RendererPort,
    time: TimePort,
    make_slug: Callable[[str], str] = generate_slug,
) -> PostOutput:
    """
    Create a post owned by ``inp.author``.

    Raises:
        UnauthorizedError: the author is not logged in.
        ValidationError: title or content missing.
        ConflictError: the derived slug is already taken.
    """
    if not inp.author.is_logged_in or inp.author.user_id is None:
        raise UnauthorizedError()

    title = _require_text(inp.title, "title", "Title and content are required")
    content = _require_document(inp.content, "content", "Title and content are required")

    slug = make_slug(title)
    if repo.get_by_slug(slug) is not None:
        raise ConflictError(SLUG_TAKEN, field="slug")

    content_html = renderer.render(content)
    published = bool(inp.published)

    now = time.now_utc()
    post = Post(
        title=title,
        slug=slug,
        content=content,
        content_html=content_html,
        cover_image=inp.cover_image or None,
        published=published,
        pinned=bool(inp.pinned),
        published_at=now if published else None,
        author_id=inp.author.user_id,
        author=PostAuthor(
            id=inp.author.user_id, name=inp.author.name, role=inp.author.role or "AUTHOR"
        ),
        tags=_candidate_tags(inp.tags, make_slug),
        created_at=now,
        updated_at=now,
    )

    repo.create(post)
    logger.info("Post created: %s (author=%s, published=%s)", slug, post.author_id, published)

    saved = repo.get_by_slug(slug)
    return PostOutput(post=saved or post)


def run_update(
    inp: UpdatePostInput,
    *,
    repo: PostRepoPort,
    renderer: RendererPort,
    time: TimePort,
    policy: PolicyEngine,
    make_slug: Callable[[str], str] = generate_slug,
) -> PostOutput:
    """
    Apply a partial update to the post identified by slug.

    Raises:
        UnauthorizedError: the actor is not logged in.
        NotFoundError: no post with that slug.
        ForbiddenError: the actor is neither the author nor an ADMIN.
        ValidationError: title or content present but empty.
    """
    post = _load_for_change(repo, inp.actor, inp.slug)
    if not policy.can_edit_post(inp.actor, post):
        raise ForbiddenError("You are not allowed to edit this post")

    changes = {k: v for k, v in inp.changes.items() if k in UPDATABLE_FIELDS}
    fields: dict[str, Any] = {}

    if "title" in changes:
        fields["title"] = _require_text(changes["title"], "title", "Title cannot be empty")

    if "cover_image" in changes:
        fields["cover_image"] = changes["cover_image"] or None

    if "pinned" in changes and changes["pinned"] is not None:
        fields["pinned"] = bool(changes["pinned"])

    # content and content_html always change together
    if "content" in changes:
        content = _require_document(changes["content"], "content", "Content cannot be empty")
        fields["content"] = content
        fields["content_html"] = renderer.render(content)

    now = time.now_utc()

    if "published" in changes and changes["published"] is not None:
        fields["published"] = bool(changes["published"])
        if fields["published"]:
            # Kept by the store when the post was published before
            fields["published_at"] = now

    tags = _candidate_tags(changes["tags"], make_slug) if "tags" in changes else None

    fields["updated_at"] = now
    if not repo.update_fields(post.id, fields, tags):
        raise NotFoundError(POST_NOT_FOUND)
    logger.info(
        "Post updated: %s by %s (fields=%s)", post.slug, inp.actor.user_id, sorted(changes)
    )

    saved = repo.get_by_slug(post.slug)
    if saved is None:
        raise NotFoundError(POST_NOT_FOUND)
    return PostOutput(post=saved)


def run_delete(
    inp: DeletePostInput,
    *,
    repo: PostRepoPort,
    policy: PolicyEngine,
) -> DeletePostOutput:
    """
    Hard-delete a post. Tags stay even when no post references them.

    Raises:
        UnauthorizedError: the actor is not logged in.
        NotFoundError: no post with that slug.
        ForbiddenError: the actor is neither the author nor an ADMIN.
    """
    post = _load_for_change(repo, inp.actor, inp.slug)
    if not policy.can_delete_post(inp.actor, post):
        raise ForbiddenError("You are not allowed to delete this post")

    repo.delete(post.id)
    logger.info("Post deleted: %s by %s", post.slug, inp.actor.user_id)
    return DeletePostOutput(slug=post.slug)


def run(
    inp: GetPostInput | CreatePostInput | UpdatePostInput | DeletePostInput,
    *,
    repo: PostRepoPort,
    renderer: RendererPort | None = None,
    time: TimePort | None = None,
    policy: PolicyEngine | None = None,
) -> PostOutput | DeletePostOutput:
    """
    Main entry point for the posts component.

    Dispatches to the appropriate handler based on input type.
    """
    if isinstance(inp, GetPostInput):
        return run_get(inp, repo=repo)

    if isinstance(inp, CreatePostInput):
        if renderer is None or time is None:
            raise ValueError("renderer and time are required for create")
        return run_create(inp, repo=repo, renderer=renderer, time=time)

    if isinstance(inp, UpdatePostInput):
        if renderer is None or time is None or policy is None:
            raise ValueError("renderer, time and policy are required for update")
        return run_update(inp, repo=repo, renderer=renderer, time=time, policy=policy)

    if isinstance(inp, DeletePostInput):
        if policy is None:
            raise ValueError("policy is required for delete")
        return run_delete(inp, repo=repo, policy=policy)

    raise ValueError(f"Unknown input type: {type(inp)}")
