"""
Sentence splitting and greedy line wrapping for practice text.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, List

logger = logging.getLogger(__name__)

SENTENCE_END = re.compile(r"[.!?]+(?:\s+|$)")
MAX_SENTENCES = 10_000
_WORD = re.compile(r"\S+")


def split_sentences(text: str, *, max_sentences: int = MAX_SENTENCES) -> List[str]:
    """Split normalized text into sentences that keep their terminators.

    A trailing fragment without a terminator becomes the final sentence.
    Once ``max_sentences`` have been collected, scanning stops and the
    unscanned remainder is kept as one last chunk.

    Args:
        text: Whitespace-normalized text.
        max_sentences: Scanning bound for pathological inputs.
    Returns:
        Sentences in input order.

    Example:
        >>> split_sentences("Hi there! How are you?? Fine")
        ['Hi there!', 'How are you??', 'Fine']
    """

    sentences: List[str] = []
    last = 0
    for match in SENTENCE_END.finditer(text):
        sentence = text[last : match.end()].strip()
        last = match.end()
        if sentence:
            sentences.append(sentence)
        if len(sentences) >= max_sentences:
            logger.warning(
                "Sentence limit of %d reached; keeping the rest as one chunk",
                max_sentences,
            )
            break
    tail = text[last:].strip()
    if tail:
        sentences.append(tail)
    return sentences


def _longest_fitting_prefix(
    word: str, *, width_of: Callable[[str], float], max_width: float
) -> int:
    low, high = 1, len(word)
    while low < high:
        mid = (low + high + 1) // 2
        if width_of(word[:mid]) <= max_width:
            low = mid
        else:
            high = mid - 1
    return low


def wrap_text(
    text: str, *, width_of: Callable[[str], float], max_width: float
) -> List[str]:
    """Greedily wrap words into lines no wider than ``max_width``.

    A word wider than a whole line is broken into line-wide pieces; its
    last piece may share a line with the words after it. Every piece holds
    at least one character.

    Example:
        >>> wrap_text("aa bb cc", width_of=len, max_width=5)
        ['aa bb', 'cc']
        >>> wrap_text("abcdefghijkl xy", width_of=len, max_width=5)
        ['abcde', 'fghij', 'kl xy']
    """

    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if width_of(candidate) <= max_width:
            current = candidate
            continue
        if current:
            lines.append(current)
            current = ""
        while width_of(word) > max_width:
            cut = _longest_fitting_prefix(word, width_of=width_of, max_width=max_width)
            lines.append(word[:cut])
            word = word[cut:]
        current = word
    if current:
        lines.append(current)
    return lines


def split_point(
    text: str,
    *,
    start: int,
    max_characters: int,
    fits_lines: Callable[[str], bool],
) -> tuple[int, int]:
    """Find where a forced split of ``text[start:]`` ends its head.

    Only the first ``max_characters`` characters after ``start`` are
    scanned. The head ends at the last word boundary that keeps it within
    ``max_characters`` and satisfies ``fits_lines``; when no whole word
    qualifies, it ends at the longest raw prefix that still satisfies
    ``fits_lines``, keeping at least one character.

    Args:
        text: Whitespace-normalized sentence.
        start: Offset where the unconsumed part of ``text`` begins.
        max_characters: Character capacity of a page.
        fits_lines: Predicate telling whether a candidate head wraps into
            the page's line capacity; must hold for every prefix of a
            head it accepts.
    Returns:
        ``(head_end, rest_start)`` offsets into ``text``; ``rest_start``
        equals ``len(text)`` when nothing is left.

    Example:
        >>> split_point("one two three", start=0, max_characters=8, fits_lines=lambda s: True)
        (7, 8)
        >>> split_point("one two three", start=8, max_characters=3, fits_lines=lambda s: True)
        (11, 11)
    """

    limit = start + max_characters
    ends = [
        match.end()
        for match in _WORD.finditer(text, start, min(len(text), limit + 1))
        if match.end() <= limit
    ]
    taken, upper = 0, len(ends)
    while taken < upper:
        mid = (taken + upper + 1) // 2
        if fits_lines(text[start : ends[mid - 1]]):
            taken = mid
        else:
            upper = mid - 1

    if taken:
        head_end = ends[taken - 1]
    else:
        low, high = start + 1, min(len(text), limit)
        while low < high:
            mid = (low + high + 1) // 2
            if fits_lines(text[start:mid]):
                low = mid
            else:
                high = mid - 1
        head_end = low
    rest_start = head_end
    while rest_start < len(text) and text[rest_start].isspace():
        rest_start += 1
    return head_end, rest_start


def force_split(
    sentence: str,
    *,
    max_characters: int,
    fits_lines: Callable[[str], bool],
) -> tuple[str, str | None]:
    """Split a sentence that cannot fit an empty page on its own.

    Args:
        sentence: Sentence to split.
        max_characters: Character capacity of a page.
        fits_lines: Predicate telling whether a candidate head wraps into
            the page's line capacity.
    Returns:
        ``(head, remainder)``; remainder is None when nothing is left.

    Example:
        >>> force_split("one two three", max_characters=8, fits_lines=lambda s: True)
        ('one two', 'three')
        >>> force_split("abcdefghij", max_characters=4, fits_lines=lambda s: True)
        ('abcd', 'efghij')
    """

    if len(sentence) <= max_characters and fits_lines(sentence):
        return sentence, None
    head_end, rest_start = split_point(
        sentence, start=0, max_characters=max_characters, fits_lines=fits_lines
    )
    return sentence[:head_end], sentence[rest_start:] or None
