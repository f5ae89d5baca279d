"""
RichText component - renders editor documents to HTML.

Node coverage mirrors the editor's extension set: paragraphs, headings,
lists, quotes, code, rules, images, tables, links and video embeds.

Key behaviors:
- All text and attribute values are escaped
- URLs with forbidden protocols are dropped
- Links carry rel/target attributes
- Unknown node types render their children, so text is never lost
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable
from typing import Any
from urllib.parse import urlparse

from .models import DEFAULT_CONFIG, RichTextConfig, RichTextNode, VideoUrlInfo

_DIRECT_VIDEO = re.compile(r"\.(mp4|webm|ogg)(\?.*)?$", re.IGNORECASE)
_EMBED_PATH_HINT = re.compile(r"(watch|video|embed|player|shorts|clip|live|reel)\b")

_IFRAME_WRAPPER_STYLE = "position:relative;padding-bottom:56.25%;height:0;overflow:hidden;"
_IFRAME_STYLE = "position:absolute;top:0;left:0;width:100%;height:100%;"
_VIDEO_STYLE = "width:100%;max-height:70vh;"


# --- URL helpers ---


def is_safe_url(url: str, config: RichTextConfig = DEFAULT_CONFIG) -> bool:
    """Check a URL against forbidden protocols."""
    normalized = re.sub(r"\s+", "", url or "").lower()
    return not any(normalized.startswith(proto) for proto in config.forbid_protocols)


def sanitize_url(url: Any, config: RichTextConfig = DEFAULT_CONFIG) -> str | None:
    if not isinstance(url, str) or not url.strip():
        return None
    url = url.strip()
    return url if is_safe_url(url, config) else None


def classify_video_url(url: str, config: RichTextConfig = DEFAULT_CONFIG) -> VideoUrlInfo:
    """
    Decide how a pasted video link should be embedded.

    Direct files (.mp4/.webm/.ogg) play in a <video> element; everything
    else goes into an iframe. ``looks_embeddable`` flags player pages from
    known hosts or with player-like paths.
    """
    parsed = urlparse(url.strip())
    path = f"{parsed.path}?{parsed.query}" if parsed.query else parsed.path
    is_direct = bool(_DIRECT_VIDEO.search(path))

    host = (parsed.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    looks_embeddable = any(hint in host for hint in config.video_host_hints) or bool(
        _EMBED_PATH_HINT.search(path.lower())
    )
    return VideoUrlInfo(url=url.strip(), is_direct=is_direct, looks_embeddable=looks_embeddable)


def _video_src(src: Any, config: RichTextConfig) -> str | None:
    if not isinstance(src, str):
        return None
    src = src.strip()
    if urlparse(src).scheme.lower() not in config.video_schemes:
        return None
    return src


# --- Rendering ---


def _attrs(pairs: list[tuple[str, Any]]) -> str:
    rendered = []
    for name, value in pairs:
        if value is None or value is False:
            continue
        if value is True:
            value = "true"
        rendered.append(f'{name}="{html.escape(str(value), quote=True)}"')
    return (" " + " ".join(rendered)) if rendered else ""


def _wrap_marks(text: str, marks: list[dict[str, Any]], config: RichTextConfig) -> str:
    # First mark is outermost
    out = text
    for mark in reversed(marks):
        kind = mark.get("type")
        attrs = mark.get("attrs") or {}
        if kind == "bold":
            out = f"<strong>{out}</strong>"
        elif kind == "italic":
            out = f"<em>{out}</em>"
        elif kind == "strike":
            out = f"<s>{out}</s>"
        elif kind == "underline":
            out = f"<u>{out}</u>"
        elif kind == "code":
            out = f"<code>{out}</code>"
        elif kind == "link":
            href = sanitize_url(attrs.get("href"), config)
            if href is None:
                continue
            out = (
                "<a"
                + _attrs(
                    [("href", href), ("target", config.link_target), ("rel", config.link_rel)]
                )
                + f">{out}</a>"
            )
    return out


def _render_children(node: RichTextNode, config: RichTextConfig) -> str:
    return "".join(_render_node(child, config) for child in node.content)


def _cell_attrs(node: RichTextNode) -> str:
    pairs: list[tuple[str, Any]] = []
    for name in ("colspan", "rowspan"):
        value = node.attrs.get(name)
        if isinstance(value, int) and value > 1:
            pairs.append((name, value))
    return _attrs(pairs)


def _render_heading(node: RichTextNode, config: RichTextConfig) -> str:
    level = node.attrs.get("level", config.min_heading_level)
    if not isinstance(level, int):
        level = config.min_heading_level
    level = max(config.min_heading_level, min(config.max_heading_level, level))
    return f"<h{level}>{_render_children(node, config)}</h{level}>"


def _render_ordered_list(node: RichTextNode, config: RichTextConfig) -> str:
    start = node.attrs.get("start")
    start_attr = _attrs([("start", start)]) if isinstance(start, int) and start != 1 else ""
    return f"<ol{start_attr}>{_render_children(node, config)}</ol>"


def _render_code_block(node: RichTextNode, config: RichTextConfig) -> str:
    language = node.attrs.get("language")
    cls = f"language-{language}" if isinstance(language, str) and language else None
    code = "".join(html.escape(child.text or "", quote=False) for child in node.content)
    return f"<pre><code{_attrs([('class', cls)])}>{code}</code></pre>"


def _render_image(node: RichTextNode, config: RichTextConfig) -> str:
    src = sanitize_url(node.attrs.get("src"), config)
    if src is None:
        return ""
    return (
        "<img"
        + _attrs([("src", src), ("alt", node.attrs.get("alt")), ("title", node.attrs.get("title"))])
        + ">"
    )


def _render_video_embed(node: RichTextNode, config: RichTextConfig) -> str:
    src = _video_src(node.attrs.get("src"), config)
    if src is None:
        return ""

    if bool(node.attrs.get("direct")):
        wrapper = _attrs(
            [
                ("data-video-embed", "true"),
                ("data-src", src),
                ("data-direct", "true"),
                ("style", "position:relative;"),
            ]
        )
        video = _attrs(
            [("src", src), ("controls", "true"), ("playsinline", "true"), ("style", _VIDEO_STYLE)]
        )
        return f"<div{wrapper}><video{video}></video></div>"

    wrapper = _attrs(
        [("data-video-embed", "true"), ("data-src", src), ("style", _IFRAME_WRAPPER_STYLE)]
    )
    iframe = _attrs(
        [
            ("src", src),
            ("style", _IFRAME_STYLE),
            ("frameborder", "0"),
            ("allow", "autoplay; encrypted-media; picture-in-picture"),
            ("allowfullscreen", "true"),
        ]
    )
    return f"<div{wrapper}><iframe{iframe}></iframe></div>"


def _simple(tag: str) -> Callable[[RichTextNode, RichTextConfig], str]:
    def render(node: RichTextNode, config: RichTextConfig) -> str:
        return f"<{tag}>{_render_children(node, config)}</{tag}>"

    return render


def _cell(tag: str) -> Callable[[RichTextNode, RichTextConfig], str]:
    def render(node: RichTextNode, config: RichTextConfig) -> str:
        return f"<{tag}{_cell_attrs(node)}>{_render_children(node, config)}</{tag}>"

    return render


_RENDERERS: dict[str, Callable[[RichTextNode, RichTextConfig], str]] = {
    "paragraph": _simple("p"),
    "heading": _render_heading,
    "blockquote": _simple("blockquote"),
    "bulletList": _simple("ul"),
    "orderedList": _render_ordered_list,
    "listItem": _simple("li"),
    "codeBlock": _render_code_block,
    "horizontalRule": lambda node, config: "<hr>",
    "hardBreak": lambda node, config: "<br>",
    "image": _render_image,
    "table": lambda node, config: f"<table><tbody>{_render_children(node, config)}</tbody></table>",
    "tableRow": _simple("tr"),
    "tableHeader": _cell("th"),
    "tableCell": _cell("td"),
    "videoEmbed": _render_video_embed,
}


def _render_node(node: RichTextNode, config: RichTextConfig) -> str:
    if node.type == "text":
        return _wrap_marks(html.escape(node.text or "", quote=False), node.marks, config)

    renderer = _RENDERERS.get(node.type)
    if renderer is None:
        # doc and unknown nodes: render children only
        return _render_children(node, config)
    return renderer(node, config)


def render_html(doc: dict[str, Any] | None, config: RichTextConfig = DEFAULT_CONFIG) -> str:
    """
    Render an editor document to HTML.

    Args:
        doc: ProseMirror/TipTap JSON document (``{"type": "doc", ...}``).
        config: Rendering configuration.

    Returns:
        HTML string; empty for an empty or missing document.
    """
    if not doc or not isinstance(doc, dict):
        return ""
    return _render_node(RichTextNode.from_dict(doc), config)


class HtmlRenderer:
    """Adapter exposing render_html through the posts RendererPort."""

    def __init__(self, config: RichTextConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    def render(self, doc: dict[str, Any]) -> str:
        return render_html(doc, self.config)
