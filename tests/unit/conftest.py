"""In-memory stand-ins for the SQLite adapters."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import pytest

from boringblog.components.listing import PostQuery
from boringblog.domain.entities import Post, PostAuthor, Requester, Tag, User
from boringblog.domain.errors import ConflictError
from boringblog.domain.policy import PolicyEngine
from boringblog.rules.models import Rules

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class InMemoryPostStore:
    """Implements the post repo and query ports over dicts."""

    def __init__(self) -> None:
        self.posts: dict[str, Post] = {}
        self.tags: dict[str, Tag] = {}
        self.queries: list[PostQuery] = []

    def _resolve_tags(self, tags: list[Tag]) -> list[Tag]:
        for tag in tags:
            self.tags.setdefault(tag.name, tag)
        return [self.tags[tag.name] for tag in tags]

    # PostRepoPort
    def get_by_slug(self, slug: str) -> Post | None:
        post = self.posts.get(slug)
        return post.model_copy(deep=True) if post else None

    def create(self, post: Post) -> Post:
        if post.slug in self.posts:
            raise ConflictError(f"Slug already exists: {post.slug}")
        stored = post.model_copy(deep=True)
        stored.tags = self._resolve_tags(stored.tags)
        self.posts[post.slug] = stored
        return post

    def update_fields(
        self, post_id: UUID, fields: dict[str, Any], tags: list[Tag] | None = None
    ) -> bool:
        post = next((p for p in self.posts.values() if p.id == post_id), None)
        if post is None:
            return False
        for name, value in fields.items():
            if name == "published_at":
                if post.published_at is None:
                    post.published_at = value
                continue
            setattr(post, name, value)
        if tags is not None:
            post.tags = self._resolve_tags(tags)
        return True

    def delete(self, post_id: UUID) -> None:
        self.posts = {s: p for s, p in self.posts.items() if p.id != post_id}

    # PostQueryPort
    def list_posts(self, query: PostQuery) -> tuple[list[Post], int]:
        self.queries.append(query)
        items = [p for p in self.posts.values() if p.published == query.published]
        if query.author_id is not None:
            items = [p for p in items if p.author_id == query.author_id]
        if query.author_name is not None:
            items = [p for p in items if p.author and p.author.name == query.author_name]
        if query.tag_slug is not None:
            items = [p for p in items if any(t.slug == query.tag_slug for t in p.tags)]
        if query.pinned is not None:
            items = [p for p in items if p.pinned == query.pinned]
        if query.exclude_admin_authors:
            items = [p for p in items if not (p.author and p.author.role == "ADMIN")]

        if query.order == "updated_desc":
            items.sort(key=lambda p: p.updated_at, reverse=True)
        elif query.order == "pinned_first":
            items.sort(key=lambda p: (p.pinned, p.published_at or _EPOCH), reverse=True)
        else:
            items.sort(key=lambda p: (p.published_at or _EPOCH, p.created_at), reverse=True)

        total = len(items)
        if query.limit is not None:
            items = items[query.offset : query.offset + query.limit]
        elif query.offset:
            items = items[query.offset :]
        return items, total

    # Test helper
    def add(
        self,
        title: str,
        *,
        author: User,
        published: bool = True,
        pinned: bool = False,
        published_at: datetime | None = None,
        tags: list[str] | None = None,
    ) -> Post:
        slug = f"{title.lower().replace(' ', '-')}-{uuid4().hex[:6]}"
        when = published_at or datetime(2026, 1, 1, tzinfo=UTC)
        post = Post(
            title=title,
            slug=slug,
            content={"type": "doc"},
            content_html=f"<p>{title}</p>",
            published=published,
            pinned=pinned,
            published_at=when if published else None,
            author_id=author.id,
            author=PostAuthor(id=author.id, name=author.name, role=author.role),
            tags=[Tag(name=t, slug=t.lower()) for t in tags or []],
            created_at=when,
            updated_at=when,
        )
        self.posts[slug] = post
        return post


class StaticRenderer:
    """Renderer stub that records every document it renders."""

    def __init__(self) -> None:
        self.calls: list[dict] = []

    def render(self, doc: dict) -> str:
        self.calls.append(doc)
        return f"<rendered>{len(self.calls)}</rendered>"


@pytest.fixture
def store() -> InMemoryPostStore:
    return InMemoryPostStore()


@pytest.fixture
def renderer() -> StaticRenderer:
    return StaticRenderer()


@pytest.fixture
def policy(rules: Rules) -> PolicyEngine:
    return PolicyEngine(rules)


@pytest.fixture
def author() -> User:
    return User(email="author@example.com", name="Alice", password_hash="h", role="AUTHOR")


@pytest.fixture
def other_author() -> User:
    return User(email="bob@example.com", name="Bob", password_hash="h", role="AUTHOR")


@pytest.fixture
def admin() -> User:
    return User(email="admin@example.com", name="Admin", password_hash="h", role="ADMIN")


@pytest.fixture
def anonymous() -> Requester:
    return Requester.anonymous()
