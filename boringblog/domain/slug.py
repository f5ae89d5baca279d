"""
Slug generation for posts and tags.

Titles in any script are transliterated to a Latin phonetic base
(Chinese via pinyin, accented Latin via NFKD folding), reduced to
``[a-z0-9-]`` and suffixed with a short random hex token. Only the
pinyin syllables are joined with dashes; spaces and punctuation inside
Latin runs are dropped, so "Hello World" gives ``helloworld``.

Uniqueness is not guaranteed here; callers check the store and report a
conflict instead of retrying with a new suffix.
"""

from __future__ import annotations

import re
import secrets
from unicodedata import normalize

from pypinyin import Style, lazy_pinyin

SUFFIX_BYTES = 3
MAX_BASE_LENGTH = 80

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

_DISALLOWED = re.compile(r"[^a-z0-9-]")
_REPEATED_DASH = re.compile(r"-+")


def _fold_ascii(text: str) -> str:
    return normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")


def transliterate(text: str) -> list[str]:
    """Split text into Latin-alphabet syllables/words."""
    # Non-Chinese runs come back untouched as a single chunk.
    chunks = lazy_pinyin(text, style=Style.NORMAL)
    return [_fold_ascii(chunk) for chunk in chunks]


def slug_base(title: str) -> str:
    """Deterministic, URL-safe part of a slug. May be empty."""
    joined = "-".join(transliterate(title or ""))
    base = _DISALLOWED.sub("", joined.lower())
    base = _REPEATED_DASH.sub("-", base).strip("-")

    if len(base) > MAX_BASE_LENGTH:
        base = base[:MAX_BASE_LENGTH].rstrip("-")
    return base


def random_suffix() -> str:
    return secrets.token_hex(SUFFIX_BYTES)


def generate_slug(title: str, suffix: str | None = None) -> str:
    """
    Build ``<base>-<suffix>``; just ``<suffix>`` when the base collapses to
    nothing (e.g. a title made only of emoji or punctuation).

    Args:
        title: Human-readable title, any script.
        suffix: Override for the random suffix (tests).

    Returns:
        Slug matching ``^[a-z0-9-]+$``, never empty.
    """
    tail = suffix if suffix is not None else random_suffix()
    base = slug_base(title)
    if not base:
        return tail
    return f"{base}-{tail}"


def is_valid_slug(slug: str) -> bool:
    return bool(slug) and bool(SLUG_PATTERN.match(slug))
