from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from boringblog.adapters.sqlite.repos import SQLitePostRepo, SQLiteUserRepo, upsert_tags
from boringblog.components.listing import PostQuery
from boringblog.components.posts import UpdatePostInput, run_update
from boringblog.components.richtext import HtmlRenderer
from boringblog.domain.entities import Post, Requester, Tag, User
from boringblog.domain.errors import ConflictError
from boringblog.domain.policy import PolicyEngine

T0 = datetime(2026, 1, 1, tzinfo=UTC)


@pytest.fixture
def users(db):
    return SQLiteUserRepo(db)


@pytest.fixture
def posts(db):
    return SQLitePostRepo(db)


@pytest.fixture
def alice(users):
    return users.save(User(email="alice@example.com", name="Alice", password_hash="h", created_at=T0))


@pytest.fixture
def root(users):
    return users.save(
        User(email="root@example.com", name="Root", password_hash="h", role="ADMIN", created_at=T0)
    )


def make_post(author, slug, *, published=True, pinned=False, day=0, tags=None):
    when = T0 + timedelta(days=day)
    return Post(
        title=slug.title(),
        slug=slug,
        content={"type": "doc", "content": [{"type": "paragraph"}]},
        content_html="<p></p>",
        published=published,
        pinned=pinned,
        published_at=when if published else None,
        author_id=author.id,
        tags=tags or [],
        created_at=when,
        updated_at=when,
    )


# --- Users ---


def test_user_round_trip_and_case_insensitive_email(users, alice):
    fetched = users.get_by_email("ALICE@Example.com")
    assert fetched is not None
    assert fetched.id == alice.id
    assert users.get_by_id(alice.id).name == "Alice"
    assert users.get_by_id(uuid4()) is None


def test_user_reset_token_lookup(users, alice):
    alice.reset_token = "abc"
    alice.reset_token_expiry = T0 + timedelta(hours=1)
    users.save(alice)

    fetched = users.get_by_reset_token("abc")
    assert fetched.id == alice.id
    assert fetched.reset_token_expiry == T0 + timedelta(hours=1)


def test_list_all_users(users, alice, root):
    assert {u.email for u in users.list_all()} == {"alice@example.com", "root@example.com"}


# --- Tags ---


def tag_names(db):
    conn = db.connect()
    try:
        return sorted(r["name"] for r in conn.execute("SELECT name FROM tags").fetchall())
    finally:
        conn.close()


def test_tags_are_shared_by_name(posts, alice):
    posts.create(make_post(alice, "p-1", tags=[Tag(name="python", slug="python-aaaaaa")]))
    posts.create(make_post(alice, "p-2", tags=[Tag(name="python", slug="python-bbbbbb")]))

    one = posts.get_by_slug("p-1").tags
    two = posts.get_by_slug("p-2").tags
    assert one[0].id == two[0].id
    assert two[0].slug == "python-aaaaaa"


def test_upsert_tags_returns_the_existing_row(db):
    with db.transaction() as conn:
        conn.execute(
            "INSERT INTO tags (id, name, slug) VALUES (?, ?, ?)",
            (str(uuid4()), "raced", "winner-slug"),
        )
        [tag] = upsert_tags(conn, [Tag(name="raced", slug="loser-slug")])
    assert tag.slug == "winner-slug"
    assert tag_names(db) == ["raced"]


def test_tag_slug_collision_between_names_is_conflict(posts, alice):
    posts.create(make_post(alice, "p-1", tags=[Tag(name="one", slug="same-slug")]))
    with pytest.raises(ConflictError):
        posts.create(make_post(alice, "p-2", tags=[Tag(name="two", slug="same-slug")]))
    assert posts.get_by_slug("p-2") is None


def test_rejected_post_leaves_no_new_tags(posts, db, alice):
    posts.create(make_post(alice, "dup", tags=[Tag(name="old", slug="old-111111")]))

    with pytest.raises(ConflictError):
        posts.create(make_post(alice, "dup", tags=[Tag(name="fresh", slug="fresh-222222")]))
    assert tag_names(db) == ["old"]


# --- Posts ---


def test_post_round_trip_with_author_and_tags(posts, alice):
    tags = [Tag(name="b", slug="b-222222"), Tag(name="a", slug="a-111111")]
    posts.create(make_post(alice, "hello-abc123", tags=tags))

    fetched = posts.get_by_slug("hello-abc123")
    assert fetched.author.name == "Alice"
    assert fetched.author.role == "AUTHOR"
    assert [t.name for t in fetched.tags] == ["b", "a"]
    assert fetched.content == {"type": "doc", "content": [{"type": "paragraph"}]}
    assert fetched.published_at == T0


def test_duplicate_slug_is_conflict(posts, alice):
    posts.create(make_post(alice, "dup"))
    with pytest.raises(ConflictError):
        posts.create(make_post(alice, "dup"))


def test_update_fields_writes_only_given_columns(posts, alice):
    post = posts.create(make_post(alice, "p-1", tags=[Tag(name="a", slug="a-111111")]))

    assert posts.update_fields(post.id, {"pinned": True, "updated_at": T0 + timedelta(hours=1)})

    fetched = posts.get_by_slug("p-1")
    assert fetched.pinned is True
    assert fetched.updated_at == T0 + timedelta(hours=1)
    assert fetched.title == "P-1"
    assert fetched.content == post.content
    assert [t.name for t in fetched.tags] == ["a"]


def test_update_fields_serializes_content(posts, alice):
    post = posts.create(make_post(alice, "p-1"))
    doc = {"type": "doc", "content": [{"type": "text", "text": "你好"}]}

    posts.update_fields(post.id, {"content": doc, "content_html": "<p>你好</p>"})
    fetched = posts.get_by_slug("p-1")
    assert fetched.content == doc
    assert fetched.content_html == "<p>你好</p>"


def test_update_fields_only_fills_missing_published_at(posts, alice):
    draft = posts.create(make_post(alice, "draft", published=False))
    later = T0 + timedelta(days=3)

    posts.update_fields(draft.id, {"published": True, "published_at": later})
    assert posts.get_by_slug("draft").published_at == later

    posts.update_fields(draft.id, {"published": True, "published_at": later + timedelta(days=1)})
    assert posts.get_by_slug("draft").published_at == later


def test_update_fields_replaces_tags(posts, db, alice):
    post = posts.create(make_post(alice, "p-1", tags=[Tag(name="a", slug="a-111111")]))

    posts.update_fields(post.id, {}, [Tag(name="b", slug="b-222222")])
    assert [t.name for t in posts.get_by_slug("p-1").tags] == ["b"]

    posts.update_fields(post.id, {"title": "Kept"})
    assert [t.name for t in posts.get_by_slug("p-1").tags] == ["b"]
    assert tag_names(db) == ["a", "b"]


def test_update_fields_on_missing_post(posts):
    assert posts.update_fields(uuid4(), {"title": "x"}) is False
    assert posts.update_fields(uuid4(), {}, []) is False


def test_update_fields_rejects_unknown_columns(posts, alice):
    post = posts.create(make_post(alice, "p-1"))
    with pytest.raises(ValueError):
        posts.update_fields(post.id, {"slug": "other"})


def test_failed_update_leaves_no_partial_write(posts, alice):
    posts.create(make_post(alice, "other", tags=[Tag(name="taken", slug="taken-slug")]))
    post = posts.create(make_post(alice, "atomic"))

    with pytest.raises(ConflictError):
        posts.update_fields(post.id, {"title": "Changed"}, [Tag(name="new", slug="taken-slug")])
    fetched = posts.get_by_slug("atomic")
    assert fetched.title == "Atomic"
    assert fetched.tags == []


def test_delete_keeps_tag_rows(posts, db, alice):
    post = posts.create(make_post(alice, "gone", tags=[Tag(name="keep", slug="keep-333333")]))
    posts.delete(post.id)

    assert posts.get_by_slug("gone") is None
    assert tag_names(db) == ["keep"]


def test_interleaved_component_updates_keep_both_changes(posts, alice, clock, rules, make_doc):
    post = posts.create(make_post(alice, "shared"))
    actor = Requester.from_user(alice)
    policy = PolicyEngine(rules)

    def update(renderer, **changes):
        return run_update(
            UpdatePostInput(actor=actor, slug=post.slug, changes=changes),
            repo=posts,
            renderer=renderer,
            time=clock,
            policy=policy,
        )

    class PinningRenderer(HtmlRenderer):
        def render(self, doc):
            # A second editor pins the post while this edit is in flight
            update(HtmlRenderer(), pinned=True)
            return super().render(doc)

    update(PinningRenderer(), content=make_doc("edited"))

    final = posts.get_by_slug(post.slug)
    assert final.pinned is True
    assert final.content == make_doc("edited")
    assert "edited" in final.content_html


def test_list_posts_filters(posts, alice, root):
    py = Tag(name="python", slug="python")
    posts.create(make_post(alice, "one", day=1, tags=[py]))
    posts.create(make_post(alice, "two", day=2, pinned=True))
    posts.create(make_post(alice, "draft", published=False))
    posts.create(make_post(root, "admin", day=3))

    def slugs(query):
        items, total = posts.list_posts(query)
        return [p.slug for p in items], total

    assert slugs(PostQuery()) == (["admin", "two", "one"], 3)
    assert slugs(PostQuery(exclude_admin_authors=True)) == (["two", "one"], 2)
    assert slugs(PostQuery(tag_slug="python")) == (["one"], 1)
    assert slugs(PostQuery(tag_slug="missing")) == ([], 0)
    assert slugs(PostQuery(author_name="Alice")) == (["two", "one"], 2)
    assert slugs(PostQuery(author_id=root.id)) == (["admin"], 1)
    assert slugs(PostQuery(pinned=True)) == (["two"], 1)
    assert slugs(PostQuery(published=False)) == (["draft"], 1)
    assert slugs(PostQuery(order="pinned_first")) == (["two", "admin", "one"], 3)


def test_list_posts_slices_but_counts_everything(posts, alice):
    for i in range(5):
        posts.create(make_post(alice, f"p-{i}", day=i))

    items, total = posts.list_posts(PostQuery(limit=2, offset=2))
    assert [p.slug for p in items] == ["p-2", "p-1"]
    assert total == 5

    items, _ = posts.list_posts(PostQuery(offset=3))
    assert [p.slug for p in items] == ["p-1", "p-0"]
