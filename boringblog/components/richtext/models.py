"""
Rich text models: editor document nodes and rendering configuration.

Documents are ProseMirror/TipTap JSON trees produced by the editor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RichTextConfig:
    """Rendering configuration."""

    # Headings outside this range are clamped into it
    min_heading_level: int = 1
    max_heading_level: int = 3

    # Attributes added to every rendered link
    link_rel: str = "noopener noreferrer nofollow"
    link_target: str = "_blank"

    # Forbidden protocols in URLs
    forbid_protocols: frozenset[str] = field(
        default_factory=lambda: frozenset(["javascript:", "data:", "vbscript:"])
    )

    # Video sources must use one of these schemes
    video_schemes: frozenset[str] = field(default_factory=lambda: frozenset(["http", "https"]))

    # Hosts whose pages are assumed to be embeddable players
    video_host_hints: tuple[str, ...] = (
        "youtube.com",
        "youtu.be",
        "vimeo.com",
        "dailymotion.com",
        "twitch.tv",
        "bilibili.com",
        "x.com",
        "twitter.com",
        "facebook.com",
        "instagram.com",
        "tiktok.com",
        "loom.com",
        "wistia.com",
        "rutube.ru",
    )


DEFAULT_CONFIG = RichTextConfig()


@dataclass
class RichTextNode:
    """A node in the rich text document tree."""

    type: str
    attrs: dict[str, Any] = field(default_factory=dict)
    content: list[RichTextNode] = field(default_factory=list)
    text: str | None = None
    marks: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RichTextNode:
        """Create from dictionary. Malformed children are skipped."""
        children = data.get("content") or []
        content = [cls.from_dict(child) for child in children if isinstance(child, dict)]
        return cls(
            type=str(data.get("type", "")),
            attrs=data.get("attrs") or {},
            content=content,
            text=data.get("text"),
            marks=[m for m in data.get("marks") or [] if isinstance(m, dict)],
        )


@dataclass(frozen=True)
class VideoUrlInfo:
    """Classification of a video URL as the editor sees it."""

    url: str
    is_direct: bool
    looks_embeddable: bool
