"""
Small, focused text cleaning utilities.
"""

import re
from typing import Iterable


_ZERO_WIDTH = re.compile("[\u200b\u200c\u200d\u2060\ufeff]")
_NON_BREAKING_SPACES = re.compile("[\u00a0\u202f]")
_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_whitespace(value: str) -> str:
    """Collapse unusual whitespace into single ASCII spaces.

    Example:
        >>> normalize_whitespace("a\\u00a0b\\u200bb \\n c")
        'a bb c'
    """

    clean = _NON_BREAKING_SPACES.sub(" ", value)
    clean = _ZERO_WIDTH.sub("", clean)
    clean = _WHITESPACE_RUN.sub(" ", clean)
    return clean.strip()


def non_blank(blocks: Iterable[str | None]) -> list[str]:
    """Drop empty and whitespace-only blocks."""

    return [block for block in blocks if block and block.strip()]


def normalize_blocks(blocks: Iterable[str | None]) -> str:
    """Join text blocks into one flat, whitespace-normalized string.

    Example:
        >>> normalize_blocks(["  One.  ", "", "   ", "Two\\n\\nthree."])
        'One. Two three.'
        >>> normalize_blocks([])
        ''
    """

    kept = non_blank(blocks)
    if not kept:
        return ""
    return normalize_whitespace(" ".join(kept))
