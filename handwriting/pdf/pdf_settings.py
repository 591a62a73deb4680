"""Page geometry, size presets, styles, and font registration."""

from __future__ import annotations

import hashlib
import io
import logging
import math
import threading
from dataclasses import dataclass, field
from typing import Dict, Literal

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFError, TTFont

from ..errors import FontParseError

logger = logging.getLogger(__name__)

PageNumberFormat = Literal["simple", "detailed"]
PageNumberPosition = Literal["bottom-center", "bottom-right", "top-center"]

MIN_PAGES = 1
MAX_PAGES = 50
DEFAULT_PAGE_LIMIT = 1


@dataclass(slots=True, frozen=True)
class SizePreset:
    """Guide geometry for one handwriting size.

    Example:
        >>> round(SIZE_PRESETS["medium"].guide_zone_height, 2)
        15.59
        >>> SIZE_PRESETS["medium"].example_slots
        11
    """

    key: str
    label: str
    guide_zone_mm: float
    total_lines: int

    @property
    def guide_zone_height(self) -> float:
        """Return the ascender-to-descender height in points."""

        return self.guide_zone_mm * mm

    @property
    def example_slots(self) -> int:
        """Return how many slots per page carry example text."""

        return math.ceil(self.total_lines / 2)


SIZE_PRESETS: Dict[str, SizePreset] = {
    "small": SizePreset("small", "Small", 4.5, 26),
    "medium": SizePreset("medium", "Medium", 5.5, 22),
    "large": SizePreset("large", "Large", 6.5, 18),
}
DEFAULT_SIZE = "medium"


def size_preset(key: str) -> SizePreset:
    """Return the preset for ``key``.

    Raises:
        ValueError: Unknown size key.
    """

    try:
        return SIZE_PRESETS[key]
    except KeyError:
        available = ", ".join(SIZE_PRESETS)
        raise ValueError(f"Invalid size: {key}. Available sizes: {available}") from None


@dataclass(slots=True)
class PageSettings:
    """Geometry constants used during layout.

    Example:
        >>> settings = PageSettings()
        >>> settings.text_width > 0
        True
    """

    page_width: float = A4[0]
    page_height: float = A4[1]
    margin_left: float = 25 * mm
    margin_right: float = 25 * mm
    margin_top: float = 20 * mm
    margin_bottom: float = 20 * mm
    text_inset: float = 5.0
    max_chars_per_line: int = 50
    average_char_width_ratio: float = 0.6

    @property
    def body_width(self) -> float:
        """Return the width between the left and right margins."""

        return self.page_width - self.margin_left - self.margin_right

    @property
    def body_height(self) -> float:
        """Return the height between the top and bottom margins."""

        return self.page_height - self.margin_top - self.margin_bottom

    @property
    def text_width(self) -> float:
        """Return the width available to an example line of text."""

        return self.body_width - self.text_inset

    @property
    def guide_left(self) -> float:
        return self.margin_left

    @property
    def guide_right(self) -> float:
        return self.page_width - self.margin_right


@dataclass(slots=True, frozen=True)
class GuideStroke:
    """Colour, width, and optional dash pattern for one guide rule."""

    color: colors.Color
    width: float = 0.5
    dash: tuple[float, ...] | None = None


@dataclass(slots=True)
class GuidelineStyle:
    """Strokes and text colours for the 4-zone guide."""

    ascender: GuideStroke = field(
        default_factory=lambda: GuideStroke(colors.Color(0.2, 0.2, 0.2))
    )
    x_height: GuideStroke = field(
        default_factory=lambda: GuideStroke(colors.Color(0.0, 0.6, 0.0))
    )
    x_height_mid: GuideStroke = field(
        default_factory=lambda: GuideStroke(colors.Color(0.7, 0.85, 0.7), dash=(2, 3))
    )
    descender: GuideStroke = field(
        default_factory=lambda: GuideStroke(colors.Color(0.8, 0.2, 0.2))
    )
    text_color: colors.Color = field(default_factory=lambda: colors.Color(0.1, 0.1, 0.1))
    fallback_color: colors.Color = field(default_factory=lambda: colors.Color(0.7, 0.7, 0.7))


@dataclass(slots=True)
class PageNumberSettings:
    """Where and how page numbers are printed.

    Example:
        >>> PageNumberSettings(enabled=True, format="detailed").label(2, 5)
        'Page 2 of 5'
        >>> PageNumberSettings(enabled=True).should_number(1)
        False
    """

    enabled: bool = False
    format: PageNumberFormat = "simple"
    position: PageNumberPosition = "bottom-center"
    margin: float = 30.0
    font_size: float = 10.0
    font_name: str = "Helvetica"
    width_ratio: float = 0.6
    first_page_numbered: bool = False
    color: colors.Color = field(default_factory=lambda: colors.Color(0.4, 0.4, 0.4))

    def label(self, page_number: int, total_pages: int) -> str:
        if self.format == "detailed":
            return f"Page {page_number} of {total_pages}"
        return str(page_number)

    def should_number(self, page_number: int) -> bool:
        if not self.enabled:
            return False
        return page_number != 1 or self.first_page_numbered

    def anchor(
        self, *, label: str, page_width: float, page_height: float, margin_right: float
    ) -> tuple[float, float]:
        """Return the (x, y) start point for a page-number label.

        Unknown positions fall back to bottom-center.
        """

        text_width = len(label) * self.font_size * self.width_ratio
        if self.position == "bottom-right":
            return page_width - text_width - margin_right, self.margin
        if self.position == "top-center":
            return (page_width - text_width) / 2, page_height - self.margin - self.font_size
        return (page_width - text_width) / 2, self.margin


def clamp_page_limit(value: int) -> int:
    """Clamp a requested page limit into the supported range.

    Example:
        >>> clamp_page_limit(0), clamp_page_limit(7), clamp_page_limit(99)
        (1, 7, 50)
    """

    if value < MIN_PAGES:
        logger.warning("Page limit %s below minimum; using %s", value, MIN_PAGES)
        return MIN_PAGES
    if value > MAX_PAGES:
        logger.warning("Page limit %s above maximum; using %s", value, MAX_PAGES)
        return MAX_PAGES
    return value


_REGISTER_LOCK = threading.Lock()


def register_font(font_bytes: bytes, *, family_name: str | None = None) -> str:
    """Register a TrueType font with ReportLab and return its name.

    The registered name is derived from the font bytes, so the same font is
    only registered once per process.

    Raises:
        FontParseError: ReportLab cannot embed the font.
    """

    digest = hashlib.sha1(font_bytes).hexdigest()[:12]
    stem = "".join(ch for ch in (family_name or "Sheet") if ch.isalnum()) or "Sheet"
    name = f"{stem}-{digest}"
    with _REGISTER_LOCK:
        if name in pdfmetrics.getRegisteredFontNames():
            return name
        try:
            pdfmetrics.registerFont(TTFont(name, io.BytesIO(font_bytes)))
        except (TTFError, ValueError, KeyError) as exc:
            raise FontParseError(f"Font cannot be embedded: {exc}") from exc
    logger.debug("Registered font %s", name)
    return name
