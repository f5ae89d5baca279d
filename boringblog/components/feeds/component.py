"""
Feed component - RSS, sitemap and robots.txt.

Feeds only see what the listing component exposes to an anonymous
visitor: published posts, excluding those written by ADMIN users.
"""

from __future__ import annotations

from datetime import UTC, datetime
from email.utils import format_datetime
from urllib.parse import quote

from boringblog.components.listing import PostQueryPort, run_list_public
from boringblog.domain.entities import Post, Requester
from boringblog.domain.text import extract_excerpt

from .models import ChannelInfo, FeedItem, SitemapEntry

RSS_EXCERPT_LENGTH = 300


def escape_xml(text: str) -> str:
    """Escape XML special characters."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&apos;")
    )


def to_rfc822(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return format_datetime(dt.astimezone(UTC), usegmt=True)


def post_url(site_url: str, slug: str) -> str:
    return f"{site_url.rstrip('/')}/posts/{slug}"


# --- RSS ---


def build_feed_items(posts: list[Post], site_url: str) -> list[FeedItem]:
    return [
        FeedItem(
            title=post.title,
            link=post_url(site_url, post.slug),
            description=extract_excerpt(post.content_html, RSS_EXCERPT_LENGTH),
            author=post.author.name if post.author else "",
            published_at=post.published_at,
        )
        for post in posts
    ]


def render_rss(channel: ChannelInfo, items: list[FeedItem], now: datetime) -> str:
    """Render an RSS 2.0 document with an atom self link."""
    site_url = channel.site_url.rstrip("/")
    newest = items[0].published_at if items and items[0].published_at else None
    last_build = to_rfc822(newest or now)

    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<rss version="2.0" xmlns:atom="http://www.w3.org/2005/Atom">',
        "  <channel>",
        f"    <title>{escape_xml(channel.title)}</title>",
        f"    <link>{escape_xml(site_url)}</link>",
        f"    <description>{escape_xml(channel.description)}</description>",
        f"    <language>{escape_xml(channel.language)}</language>",
        f"    <lastBuildDate>{last_build}</lastBuildDate>",
        f'    <atom:link href="{escape_xml(site_url)}/feed.xml" rel="self" '
        'type="application/rss+xml"/>',
    ]
    for item in items:
        parts.append("    <item>")
        parts.append(f"      <title>{escape_xml(item.title)}</title>")
        parts.append(f"      <link>{escape_xml(item.link)}</link>")
        parts.append(f"      <description>{escape_xml(item.description)}</description>")
        parts.append(f"      <author>{escape_xml(item.author)}</author>")
        parts.append(f'      <guid isPermaLink="true">{escape_xml(item.link)}</guid>')
        if item.published_at:
            parts.append(f"      <pubDate>{to_rfc822(item.published_at)}</pubDate>")
        parts.append("    </item>")
    parts.append("  </channel>")
    parts.append("</rss>")
    return "\n".join(parts)


def run_rss(
    channel: ChannelInfo,
    *,
    repo: PostQueryPort,
    now: datetime,
    limit: int = 20,
) -> str:
    posts = run_list_public(Requester.anonymous(), repo=repo, limit=limit)
    return render_rss(channel, build_feed_items(posts, channel.site_url), now)


# --- Sitemap ---


def build_sitemap_entries(posts: list[Post], site_url: str) -> list[SitemapEntry]:
    """
    Home page, every visible post, and the tag/author pages that have at
    least one visible post.
    """
    base = site_url.rstrip("/")
    entries = [SitemapEntry(loc=base, changefreq="daily", priority=1.0)]

    for post in sorted(posts, key=lambda p: p.updated_at, reverse=True):
        entries.append(
            SitemapEntry(
                loc=post_url(base, post.slug),
                lastmod=post.updated_at.isoformat(),
                changefreq="weekly",
                priority=0.8,
            )
        )

    tag_slugs: list[str] = []
    author_names: list[str] = []
    for post in posts:
        for tag in post.tags:
            if tag.slug not in tag_slugs:
                tag_slugs.append(tag.slug)
        if post.author and post.author.name not in author_names:
            author_names.append(post.author.name)

    for slug in sorted(tag_slugs):
        entries.append(SitemapEntry(loc=f"{base}/tags/{slug}", changefreq="weekly", priority=0.5))
    for name in sorted(author_names):
        entries.append(
            SitemapEntry(
                loc=f"{base}/author/{quote(name, safe='')}", changefreq="weekly", priority=0.5
            )
        )
    return entries


def render_sitemap(entries: list[SitemapEntry]) -> str:
    """
    Render sitemap entries to XML string.
    """
    xml_parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
    ]
    for entry in entries:
        xml_parts.append("  <url>")
        xml_parts.append(f"    <loc>{escape_xml(entry.loc)}</loc>")
        if entry.lastmod:
            xml_parts.append(f"    <lastmod>{entry.lastmod}</lastmod>")
        if entry.changefreq:
            xml_parts.append(f"    <changefreq>{entry.changefreq}</changefreq>")
        if entry.priority is not None:
            xml_parts.append(f"    <priority>{entry.priority:.1f}</priority>")
        xml_parts.append("  </url>")
    xml_parts.append("</urlset>")
    return "\n".join(xml_parts)


def run_sitemap(site_url: str, *, repo: PostQueryPort) -> str:
    posts = run_list_public(Requester.anonymous(), repo=repo)
    return render_sitemap(build_sitemap_entries(posts, site_url))


# --- robots.txt ---


def render_robots(site_url: str) -> str:
    return f"User-agent: *\nAllow: /\n\nSitemap: {site_url.rstrip('/')}/sitemap.xml\n"
