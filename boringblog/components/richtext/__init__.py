"""
RichText component - editor document rendering.
"""

from .component import (
    HtmlRenderer,
    classify_video_url,
    is_safe_url,
    render_html,
    sanitize_url,
)
from .models import DEFAULT_CONFIG, RichTextConfig, RichTextNode, VideoUrlInfo

__all__ = [
    # Entry points
    "render_html",
    "classify_video_url",
    "is_safe_url",
    "sanitize_url",
    "HtmlRenderer",
    # Models
    "DEFAULT_CONFIG",
    "RichTextConfig",
    "RichTextNode",
    "VideoUrlInfo",
]
