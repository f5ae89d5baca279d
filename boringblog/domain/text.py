import math
import re

_TAG = re.compile(r"<[^>]*>")
_CJK = re.compile(r"[\u4e00-\u9fff]")

CHARS_PER_MINUTE = 400


def strip_tags(html: str) -> str:
    return _TAG.sub("", html or "").strip()


def reading_time_minutes(html: str) -> int:
    """Estimated reading time: CJK characters and other words both count as one unit."""
    text = strip_tags(html)
    cjk_chars = len(_CJK.findall(text))
    other = _CJK.sub(" ", text).split()
    units = cjk_chars + len(other)
    return max(1, math.ceil(units / CHARS_PER_MINUTE))


def extract_excerpt(html: str, max_length: int = 200) -> str:
    """Plain-text excerpt, truncated with an ellipsis."""
    text = strip_tags(html)
    if len(text) <= max_length:
        return text
    return text[:max_length].rstrip() + "…"
