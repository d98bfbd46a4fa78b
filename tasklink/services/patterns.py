from __future__ import annotations

import re

_WORD_START = r"(?:\b|^|(?=\W))"
_BETWEEN_WORDS = r"(.*\s+)"
_WHITESPACE_RE = re.compile(r"\s+")


def split_filter_text(filter_text: str | None) -> list[str]:
    """Return the escaped word fragments of ``filter_text``, in input order."""
    if not filter_text:
        return []
    return [re.escape(word) for word in _WHITESPACE_RE.split(filter_text.strip()) if word]


def build_pattern(filter_text: str | None) -> re.Pattern[str] | None:
    """
    Compile a regex matching names that contain words starting with the words
    of ``filter_text``.

    Matching is case-insensitive. The words need not be consecutive, but they
    must appear in the same order as in ``filter_text``. Blank input returns
    ``None``, meaning "no filter".
    """
    words = split_filter_text(filter_text)
    if not words:
        return None
    parts = _BETWEEN_WORDS.join(f"({word})" for word in words)
    return re.compile(_WORD_START + parts, re.IGNORECASE)


def name_matches(pattern: re.Pattern[str] | None, name: str | None) -> bool:
    if pattern is None:
        return bool((name or "").strip())
    # A match anywhere in the name counts, not only from its first word.
    return pattern.search(name or "") is not None
