"""
Feed component models.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ChannelInfo:
    """RSS channel metadata."""

    title: str
    site_url: str
    description: str = ""
    language: str = "en"


@dataclass(frozen=True)
class FeedItem:
    title: str
    link: str
    description: str
    author: str
    published_at: datetime | None = None


@dataclass(frozen=True)
class SitemapEntry:
    """Entry for sitemap generation."""

    loc: str
    lastmod: str | None = None
    changefreq: str | None = None
    priority: float | None = None
