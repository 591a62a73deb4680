"""
Typed containers shared by the metric, distribution, and rendering stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal

Confidence = Literal["high", "medium", "low"]


@dataclass(slots=True, frozen=True)
class FontMetrics:
    """Metric facts read from a font plus the sizes derived from them.

    Attributes:
        units_per_em: Design units per em square (``head.unitsPerEm``).
        x_height: Lowercase height in design units.
        calculated_font_size: Point size that makes the x-height fill the
            guide band; ``0.0`` until sized.
        line_spacing: Gap between adjacent guide lines in points; ``0.0``
            until sized.
        x_height_is_fallback: True when the font had no usable x-height.
        family_name: Family name from the ``name`` table, if any.
    """

    units_per_em: float
    x_height: float
    calculated_font_size: float = 0.0
    line_spacing: float = 0.0
    x_height_is_fallback: bool = False
    family_name: str | None = None

    @property
    def is_sized(self) -> bool:
        """Return True once a guide-zone size has been applied."""

        return self.calculated_font_size > 0 and self.line_spacing > 0


@dataclass(slots=True)
class PageCapacity:
    """Upper bound on how much text one page holds.

    ``max_lines`` counts example-text slots, not guide lines.

    Example:
        >>> PageCapacity(max_lines=11, max_characters=550, available_width=448.0, available_height=343.0, line_height=15.6).max_characters
        550
    """

    max_lines: int
    max_characters: int
    available_width: float
    available_height: float
    line_height: float


@dataclass(slots=True)
class PageContent:
    """Wrapped text lines assigned to one page."""

    page_number: int
    text_lines: List[str] = field(default_factory=list)
    line_count: int = 0
    character_count: int = 0

    def append_lines(self, lines: List[str], characters: int) -> None:
        """Append wrapped lines and account for the characters they carry."""

        self.text_lines.extend(lines)
        self.line_count += len(lines)
        self.character_count += characters

    @property
    def is_empty(self) -> bool:
        return not self.text_lines


@dataclass(slots=True)
class DistributionStats:
    """Aggregate numbers reported alongside a distribution."""

    total_characters: int
    average_chars_per_page: int
    lines_per_page: int


@dataclass(slots=True)
class TextDistributionResult:
    """Pages produced by a distribution run.

    Attributes:
        pages: Filled pages in reading order.
        total_pages: ``len(pages)``.
        truncated_content: True when the page limit cut off remaining text.
        stats: Aggregate character and line counts.
    """

    pages: List[PageContent]
    total_pages: int
    truncated_content: bool
    stats: DistributionStats

    def all_lines(self) -> List[str]:
        """Return every wrapped line across all pages in order."""

        return [line for page in self.pages for line in page.text_lines]


@dataclass(slots=True)
class PageEstimate:
    """Layout-free page-count preview."""

    estimated_pages: int
    exceeds_limit: bool
    total_characters: int
    average_chars_per_page: int
    confidence: Confidence


@dataclass(slots=True)
class TextMeasurement:
    """Rough size of a text snippet under the monospace approximation."""

    width: float
    height: float
    line_count: int
    character_count: int
    word_count: int
