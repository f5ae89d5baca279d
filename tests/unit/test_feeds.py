from datetime import UTC, datetime

from boringblog.components.feeds import (
    ChannelInfo,
    build_sitemap_entries,
    escape_xml,
    render_robots,
    run_rss,
    run_sitemap,
    to_rfc822,
)
from boringblog.domain.entities import User

SITE = "https://blog.example.com"
NOW = datetime(2026, 2, 1, 8, 0, tzinfo=UTC)


def channel():
    return ChannelInfo(title="Boring & Blog", site_url=SITE, description="d", language="zh-CN")


def test_escape_xml():
    assert escape_xml("<a href=\"x\">'&'</a>") == "&lt;a href=&quot;x&quot;&gt;&apos;&amp;&apos;&lt;/a&gt;"


def test_to_rfc822():
    assert to_rfc822(datetime(2026, 1, 5, 9, 30, tzinfo=UTC)) == "Mon, 05 Jan 2026 09:30:00 GMT"


def test_rss_lists_public_posts(store, author, admin):
    store.add("First <post>", author=author, published_at=datetime(2026, 1, 5, 9, 30, tzinfo=UTC))
    store.add("Draft", author=author, published=False)
    store.add("Admin only", author=admin)

    xml = run_rss(channel(), repo=store, now=NOW)

    assert "<title>Boring &amp; Blog</title>" in xml
    assert "<title>First &lt;post&gt;</title>" in xml
    assert "Draft" not in xml
    assert "Admin only" not in xml
    assert "<lastBuildDate>Mon, 05 Jan 2026 09:30:00 GMT</lastBuildDate>" in xml
    assert f'<atom:link href="{SITE}/feed.xml"' in xml
    assert "<author>Alice</author>" in xml


def test_rss_empty_uses_now_for_last_build(store):
    xml = run_rss(channel(), repo=store, now=NOW)
    assert "<lastBuildDate>Sun, 01 Feb 2026 08:00:00 GMT</lastBuildDate>" in xml
    assert "<item>" not in xml


def test_rss_respects_limit(store, author):
    for i in range(5):
        store.add(f"Post {i}", author=author, published_at=datetime(2026, 1, i + 1, tzinfo=UTC))
    xml = run_rss(channel(), repo=store, now=NOW, limit=2)
    assert xml.count("<item>") == 2
    assert "Post 4" in xml and "Post 3" in xml


def test_sitemap_entries(store, author, other_author, admin):
    store.add("A", author=author, tags=["python"])
    store.add("B", author=other_author, tags=["python", "web"])
    store.add("Hidden", author=admin, tags=["secret"])
    store.add("Draft", author=author, published=False, tags=["drafty"])

    posts = list(store.posts.values())
    visible = [p for p in posts if p.published and p.author.role != "ADMIN"]
    entries = build_sitemap_entries(visible, SITE)
    locs = [e.loc for e in entries]

    assert locs[0] == SITE
    assert entries[0].priority == 1.0
    assert f"{SITE}/tags/python" in locs
    assert f"{SITE}/tags/web" in locs
    assert f"{SITE}/tags/secret" not in locs
    assert f"{SITE}/author/Alice" in locs
    assert f"{SITE}/author/Bob" in locs


def test_run_sitemap_excludes_admin_and_drafts(store, author, admin):
    store.add("Visible", author=author)
    hidden = store.add("Admin", author=admin, tags=["secret"])
    draft = store.add("Draft", author=author, published=False)

    xml = run_sitemap(SITE, repo=store)
    assert hidden.slug not in xml
    assert draft.slug not in xml
    assert "/tags/secret" not in xml
    assert "<priority>0.8</priority>" in xml
    assert "<changefreq>daily</changefreq>" in xml


def test_sitemap_author_names_are_url_encoded(store):
    user = User(email="z@example.com", name="张 三", password_hash="h")
    store.add("Post", author=user)
    xml = run_sitemap(SITE, repo=store)
    assert f"{SITE}/author/%E5%BC%A0%20%E4%B8%89" in xml


def test_robots():
    assert render_robots(SITE + "/") == (
        "User-agent: *\nAllow: /\n\nSitemap: https://blog.example.com/sitemap.xml\n"
    )
