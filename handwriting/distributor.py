"""
Sentence-preserving distribution of practice text across pages.

Packing is greedy and order-preserving: each sentence goes on the current
page when it fits, otherwise the page is closed. A sentence too large for
an empty page is split, and its remainder is processed next.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Generic, Hashable, Iterable, List, Sequence, TypeVar

from .cleaning import normalize_blocks
from .errors import DistributionFailure
from .models import (
    DistributionStats,
    FontMetrics,
    PageCapacity,
    PageContent,
    PageEstimate,
    TextDistributionResult,
    TextMeasurement,
)
from .pdf.pdf_settings import MAX_PAGES, PageSettings, SizePreset
from .text import MAX_SENTENCES, split_point, split_sentences, wrap_text

logger = logging.getLogger(__name__)

SENTENCE_CACHE_SIZE = 100
WIDTH_CACHE_SIZE = 1_000
SNAPSHOT_CHARS = 500

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(slots=True)
class BoundedCache(Generic[K, V]):
    """Small thread-safe memo table that empties itself when full.

    Example:
        >>> cache = BoundedCache(max_size=2)
        >>> cache.put("a", 1); cache.put("b", 2); cache.put("c", 3)
        >>> len(cache), cache.get("c")
        (1, 3)
    """

    max_size: int
    _entries: Dict[K, V] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def get(self, key: K) -> V | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: K, value: V) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._entries.clear()
            self._entries[key] = value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def page_capacity(
    *, settings: PageSettings, preset: SizePreset, metrics: FontMetrics
) -> PageCapacity:
    """Return the text capacity of one page for a sized font.

    Args:
        settings: Page geometry.
        preset: Size preset with the guide line count.
        metrics: Sized font metrics.
    Returns:
        PageCapacity whose ``max_lines`` is the number of example slots.
    """

    max_lines = preset.example_slots
    return PageCapacity(
        max_lines=max_lines,
        max_characters=max_lines * settings.max_chars_per_line,
        available_width=settings.text_width,
        available_height=settings.body_height,
        line_height=settings.body_height / preset.total_lines,
    )


def _snapshot_key(text: str) -> tuple[int, str, str]:
    if len(text) <= 2 * SNAPSHOT_CHARS:
        return len(text), text, ""
    return len(text), text[:SNAPSHOT_CHARS], text[-SNAPSHOT_CHARS:]


class TextDistributor:
    """Distribute text blocks over pages of fixed capacity.

    Args:
        capacity: Per-page line and character bounds.
        font_size: Render size used for width estimates.
        average_char_width_ratio: Glyph width as a fraction of the font size.
        max_sentences: Sentence-splitting bound.

    Example:
        >>> capacity = PageCapacity(max_lines=11, max_characters=550, available_width=448.0, available_height=343.0, line_height=15.6)
        >>> distributor = TextDistributor(capacity=capacity, font_size=15.0)
        >>> result = distributor.distribute(["A. B. C."], page_limit=5)
        >>> result.total_pages, result.pages[0].text_lines
        (1, ['A.', 'B.', 'C.'])
    """

    def __init__(
        self,
        *,
        capacity: PageCapacity,
        font_size: float,
        average_char_width_ratio: float = 0.6,
        max_sentences: int = MAX_SENTENCES,
    ) -> None:
        if font_size <= 0:
            raise DistributionFailure(f"font_size must be positive, got {font_size}")
        if capacity.max_lines < 1 or capacity.max_characters < 1:
            raise DistributionFailure(f"Page capacity must be positive: {capacity}")
        self.capacity = capacity
        self.font_size = font_size
        self.average_char_width_ratio = average_char_width_ratio
        self.max_sentences = max_sentences
        self._sentence_cache: BoundedCache[tuple[int, str, str], tuple[str, List[str]]] = (
            BoundedCache(max_size=SENTENCE_CACHE_SIZE)
        )
        self._width_cache: BoundedCache[tuple[int, float], float] = BoundedCache(
            max_size=WIDTH_CACHE_SIZE
        )

    @classmethod
    def for_layout(
        cls, *, settings: PageSettings, preset: SizePreset, metrics: FontMetrics
    ) -> "TextDistributor":
        """Build a distributor from page settings and sized font metrics."""

        return cls(
            capacity=page_capacity(settings=settings, preset=preset, metrics=metrics),
            font_size=metrics.calculated_font_size,
            average_char_width_ratio=settings.average_char_width_ratio,
        )

    def distribute(self, texts: Sequence[str], page_limit: int) -> TextDistributionResult:
        """Pack text blocks into at most ``page_limit`` pages.

        Args:
            texts: Text blocks; blank blocks are ignored.
            page_limit: Maximum number of pages to fill.
        Returns:
            TextDistributionResult; empty input yields zero pages.
        Raises:
            DistributionFailure: ``page_limit`` is not a positive integer.
        """

        if isinstance(page_limit, bool) or not isinstance(page_limit, int) or page_limit < 1:
            raise DistributionFailure(f"page_limit must be a positive integer, got {page_limit!r}")

        started = time.perf_counter()
        text = normalize_blocks(texts)
        sentences = self.split_sentences(text)
        pages, consumed = self._pack(sentences, page_limit)
        truncated = consumed < len(sentences)
        if truncated:
            logger.info(
                "Page limit %d reached with %d sentence(s) left over",
                page_limit,
                len(sentences) - consumed,
            )
        logger.debug(
            "Distributed %d characters into %d page(s) in %.1f ms",
            len(text),
            len(pages),
            (time.perf_counter() - started) * 1000,
        )
        return TextDistributionResult(
            pages=pages,
            total_pages=len(pages),
            truncated_content=truncated,
            stats=distribution_stats(pages),
        )

    def estimate_page_count(self, texts: Sequence[str]) -> int:
        """Return a layout-free page estimate (at least one page).

        Example:
            >>> capacity = PageCapacity(max_lines=2, max_characters=10, available_width=100.0, available_height=50.0, line_height=25.0)
            >>> TextDistributor(capacity=capacity, font_size=10.0).estimate_page_count(["x" * 25])
            3
        """

        characters = len(normalize_blocks(texts))
        return max(1, math.ceil(characters / self.capacity.max_characters))

    def estimate(self, texts: Sequence[str], page_limit: int = MAX_PAGES) -> PageEstimate:
        """Return a page-count preview with a rough confidence rating."""

        characters = len(normalize_blocks(texts))
        pages = self.estimate_page_count(texts)
        if characters < 1_000:
            confidence = "high"
        elif characters > 10_000:
            confidence = "low"
        else:
            confidence = "medium"
        return PageEstimate(
            estimated_pages=pages,
            exceeds_limit=pages > page_limit,
            total_characters=characters,
            average_chars_per_page=round(characters / pages),
            confidence=confidence,
        )

    def measure_text(self, text: str) -> TextMeasurement:
        """Measure a snippet with the monospace width approximation."""

        lines = text.split("\n")
        return TextMeasurement(
            width=self.estimate_width(text),
            height=len(lines) * self.capacity.line_height,
            line_count=len(lines),
            character_count=len(text),
            word_count=len(text.split()),
        )

    def split_sentences(self, text: str) -> List[str]:
        """Return the sentences of normalized ``text``, memoized."""

        if not text:
            return []
        key = _snapshot_key(text)
        cached = self._sentence_cache.get(key)
        if cached is not None and cached[0] == text:
            return list(cached[1])
        sentences = split_sentences(text, max_sentences=self.max_sentences)
        self._sentence_cache.put(key, (text, sentences))
        return list(sentences)

    def estimate_width(self, text: str) -> float:
        """Return the estimated rendered width of ``text`` in points."""

        key = (len(text), self.font_size)
        cached = self._width_cache.get(key)
        if cached is not None:
            return cached
        width = len(text) * self.font_size * self.average_char_width_ratio
        self._width_cache.put(key, width)
        return width

    def wrap(self, text: str) -> List[str]:
        """Wrap text into lines that fit the page's text width."""

        return wrap_text(
            text,
            width_of=self.estimate_width,
            max_width=self.capacity.available_width,
        )

    def clear_caches(self) -> None:
        """Empty the sentence and width caches."""

        self._sentence_cache.clear()
        self._width_cache.clear()
        logger.debug("Distributor caches cleared")

    def cache_stats(self) -> Dict[str, int]:
        return {
            "sentence_split": len(self._sentence_cache),
            "width": len(self._width_cache),
        }

    def _fits_lines(self, candidate: str) -> bool:
        return len(self.wrap(candidate)) <= self.capacity.max_lines

    def _pack(
        self, sentences: List[str], page_limit: int
    ) -> tuple[List[PageContent], int]:
        """Greedily fill pages; return them and how many sentences were used.

        A split sentence is tracked by offset, so only a page's worth of it
        is ever wrapped or copied at a time.
        """

        pages: List[PageContent] = []
        current = PageContent(page_number=1)
        index = 0
        offset = 0
        while index < len(sentences) and len(pages) < page_limit:
            sentence = sentences[index]
            remaining = len(sentence) - offset
            if current.character_count + remaining <= self.capacity.max_characters:
                text = sentence[offset:] if offset else sentence
                lines = self.wrap(text)
                if current.line_count + len(lines) <= self.capacity.max_lines:
                    current.append_lines(lines, len(text))
                    index += 1
                    offset = 0
                    continue
            if not current.is_empty:
                pages.append(current)
                current = PageContent(page_number=len(pages) + 1)
                continue

            head_end, next_offset = split_point(
                sentence,
                start=offset,
                max_characters=self.capacity.max_characters,
                fits_lines=self._fits_lines,
            )
            head = sentence[offset:head_end]
            if offset == 0:
                logger.warning(
                    "Split oversized sentence on page %d (%d -> %d chars)",
                    current.page_number,
                    len(sentence),
                    len(head),
                )
            else:
                logger.debug("Continued split sentence at offset %d", offset)
            current.append_lines(self.wrap(head), len(head))
            if next_offset >= len(sentence):
                index += 1
                offset = 0
            else:
                offset = next_offset
            pages.append(current)
            current = PageContent(page_number=len(pages) + 1)

        if not current.is_empty:
            pages.append(current)
        return pages, index


def distribution_stats(pages: Iterable[PageContent]) -> DistributionStats:
    """Summarize character and line totals over pages.

    Example:
        >>> distribution_stats([]).average_chars_per_page
        0
    """

    page_list = list(pages)
    total_characters = sum(page.character_count for page in page_list)
    total_lines = sum(page.line_count for page in page_list)
    count = len(page_list)
    return DistributionStats(
        total_characters=total_characters,
        average_chars_per_page=round(total_characters / count) if count else 0,
        lines_per_page=round(total_lines / count) if count else 0,
    )
