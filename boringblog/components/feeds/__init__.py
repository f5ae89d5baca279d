"""
Feed component - RSS, sitemap and robots.txt generation.
"""

from .component import (
    build_feed_items,
    build_sitemap_entries,
    escape_xml,
    render_robots,
    render_rss,
    render_sitemap,
    run_rss,
    run_sitemap,
    to_rfc822,
)
from .models import ChannelInfo, FeedItem, SitemapEntry

__all__ = [
    "run_rss",
    "run_sitemap",
    "render_rss",
    "render_sitemap",
    "render_robots",
    "build_feed_items",
    "build_sitemap_entries",
    "escape_xml",
    "to_rfc822",
    "ChannelInfo",
    "FeedItem",
    "SitemapEntry",
]
