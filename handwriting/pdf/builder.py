"""PDF generation for handwriting practice sheets."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Sequence

from ..distributor import TextDistributor
from ..fonts import BytesLike, FontMetricsResolver, read_font_bytes
from ..models import FontMetrics, PageContent, PageEstimate, TextDistributionResult
from .assembler import PageAssembler
from .pdf_settings import (
    DEFAULT_PAGE_LIMIT,
    DEFAULT_SIZE,
    GuidelineStyle,
    PageNumberSettings,
    PageSettings,
    SizePreset,
    clamp_page_limit,
    register_font,
    size_preset,
)
from .pdf_types import RenderedPage
from .surface import ReportLabSurface

logger = logging.getLogger(__name__)

__all__ = [
    "PRACTICE_TEXTS",
    "SheetResult",
    "build_sheet",
    "estimate_sheet",
    "sheet_filename",
]

PRACTICE_TEXTS: tuple[str, ...] = (
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
    "abcdefghijklmnopqrstuvwxyz",
    " ".join(
        [
            "The quick brown fox jumps over the lazy dog.",
            "Go placidly amid the noise and haste, and remember what peace there may be in silence.",
            "As far as possible, without surrender, be on good terms with all persons.",
            "Speak your truth quietly and clearly; and listen to others, even to the dull and the ignorant; they too have their story.",
            "Pack my box with five dozen liquor jugs.",
            "Sphinx of black quartz, judge my vow.",
            "You are a child of the universe, no less than the trees and the stars; you have a right to be here.",
            "And whether or not it is clear to you, no doubt the universe is unfolding as it should.",
        ]
    ),
)


@dataclass(slots=True)
class _FontSetup:
    """Font artifacts needed for PDF generation.

    Args:
        font_bytes: Raw font data.
        metrics: Metrics sized for the selected preset.
        preset: Selected size preset.
        font_id: Short identifier used in filenames.
        codepoints: Characters the font has glyphs for, or None when unknown.
    """

    font_bytes: bytes
    metrics: FontMetrics
    preset: SizePreset
    font_id: str
    codepoints: frozenset[int] | None = None


@dataclass(slots=True)
class SheetResult:
    """Finished document plus what went into it."""

    pdf_bytes: bytes
    filename: str
    page_count: int
    truncated_content: bool
    metrics: FontMetrics
    distribution: TextDistributionResult
    rendered_pages: List[RenderedPage] = field(default_factory=list)
    generation_time_ms: float = 0.0

    @property
    def fallback_count(self) -> int:
        return sum(len(page.fallbacks) for page in self.rendered_pages)


def build_sheet(
    *,
    font_path: Path | str | None = None,
    font_bytes: BytesLike | None = None,
    size: str = DEFAULT_SIZE,
    texts: Sequence[str] | None = None,
    page_limit: int = DEFAULT_PAGE_LIMIT,
    page_numbers: PageNumberSettings | None = None,
    settings: PageSettings | None = None,
    style: GuidelineStyle | None = None,
    show_progress: bool = False,
) -> SheetResult:
    """Render a handwriting practice sheet into PDF bytes.

    Args:
        font_path: Font file to read; ignored when ``font_bytes`` is given.
        font_bytes: Font data already in memory.
        size: Size preset key (``small``, ``medium``, ``large``).
        texts: Text blocks to practise; defaults to ``PRACTICE_TEXTS``.
        page_limit: Maximum page count, clamped to the supported range.
        page_numbers: Optional page-number settings.
        settings: Optional ``PageSettings`` override.
        style: Optional guide style override.
        show_progress: Show a progress bar while rendering.
    Returns:
        SheetResult with the document bytes and generation details.
    Raises:
        FontParseError: The font cannot be read, parsed, or embedded.
        InvalidMetrics: The font's metrics are unusable.
        DistributionFailure: The text could not be paginated.

    Example:
        >>> result = build_sheet(font_path="fonts/RobotoMono.ttf", page_limit=3)  # doctest: +SKIP
        >>> result.pdf_bytes[:4]  # doctest: +SKIP
        b'%PDF'
    """

    started = time.perf_counter()
    resolved = settings or PageSettings()
    limit = clamp_page_limit(page_limit)
    font_setup = _prepare_fonts(font_path=font_path, font_bytes=font_bytes, size=size)
    texts_to_use = list(texts) if texts is not None else list(PRACTICE_TEXTS)
    distribution = _prepare_pages(
        texts=texts_to_use, font_setup=font_setup, settings=resolved, page_limit=limit
    )
    pdf_bytes, rendered = _render_pdf(
        distribution=distribution,
        font_setup=font_setup,
        settings=resolved,
        page_limit=limit,
        page_numbers=page_numbers,
        style=style,
        show_progress=show_progress,
    )
    elapsed = (time.perf_counter() - started) * 1000
    result = SheetResult(
        pdf_bytes=pdf_bytes,
        filename=sheet_filename(
            font_id=font_setup.font_id, size=font_setup.preset.key, pages=len(rendered)
        ),
        page_count=len(rendered),
        truncated_content=distribution.truncated_content,
        metrics=font_setup.metrics,
        distribution=distribution,
        rendered_pages=rendered,
        generation_time_ms=elapsed,
    )
    _log_generation(result=result, limit=limit)
    return result


def estimate_sheet(
    *,
    font_path: Path | str | None = None,
    font_bytes: BytesLike | None = None,
    size: str = DEFAULT_SIZE,
    texts: Sequence[str] | None = None,
    page_limit: int = DEFAULT_PAGE_LIMIT,
    settings: PageSettings | None = None,
) -> PageEstimate:
    """Return a quick page-count preview without laying out text."""

    font_setup = _prepare_fonts(font_path=font_path, font_bytes=font_bytes, size=size)
    distributor = TextDistributor.for_layout(
        settings=settings or PageSettings(),
        preset=font_setup.preset,
        metrics=font_setup.metrics,
    )
    texts_to_use = list(texts) if texts is not None else list(PRACTICE_TEXTS)
    return distributor.estimate(texts_to_use, page_limit=clamp_page_limit(page_limit))


def sheet_filename(
    *, font_id: str, size: str, pages: int, now: datetime | None = None
) -> str:
    """Return a download filename for a generated sheet.

    Example:
        >>> sheet_filename(font_id="roboto", size="medium", pages=3, now=datetime(2024, 5, 1, 9, 30, 0))
        'handwriting_roboto_medium_3pages_2024-05-01T09-30-00.pdf'
        >>> sheet_filename(font_id="roboto", size="small", pages=1, now=datetime(2024, 5, 1))
        'handwriting_roboto_small_2024-05-01T00-00-00.pdf'
    """

    stamp = (now or datetime.now()).strftime("%Y-%m-%dT%H-%M-%S")
    page_info = f"_{pages}pages" if pages > 1 else ""
    return f"handwriting_{font_id}_{size}{page_info}_{stamp}.pdf"


def _prepare_fonts(
    *, font_path: Path | str | None, font_bytes: BytesLike | None, size: str
) -> _FontSetup:
    """Read the font and size its metrics for the requested preset.

    Args:
        font_path: Font file location.
        font_bytes: In-memory font data.
        size: Size preset key.
    Returns:
        _FontSetup with sized metrics.
    """

    preset = size_preset(size)
    font_id: str | None = None
    if font_bytes is None:
        if font_path is None:
            raise ValueError("Either font_path or font_bytes is required")
        font_bytes = read_font_bytes(font_path)
        font_id = Path(font_path).stem
    resolver = FontMetricsResolver(font_bytes)
    metrics = resolver.calculate_size(preset.guide_zone_height)
    if font_id is None:
        font_id = metrics.family_name or "font"
    return _FontSetup(
        font_bytes=resolver.payload,
        metrics=metrics,
        preset=preset,
        font_id=_slug(font_id),
        codepoints=resolver.codepoints,
    )


def _prepare_pages(
    *,
    texts: Sequence[str],
    font_setup: _FontSetup,
    settings: PageSettings,
    page_limit: int,
) -> TextDistributionResult:
    """Distribute the practice text over pages."""

    distributor = TextDistributor.for_layout(
        settings=settings, preset=font_setup.preset, metrics=font_setup.metrics
    )
    logger.debug("Distributing %d text block(s)", len(texts))
    return distributor.distribute(texts, page_limit)


def _render_pdf(
    *,
    distribution: TextDistributionResult,
    font_setup: _FontSetup,
    settings: PageSettings,
    page_limit: int,
    page_numbers: PageNumberSettings | None,
    style: GuidelineStyle | None,
    show_progress: bool,
) -> tuple[bytes, List[RenderedPage]]:
    """Embed the font and draw every page to an in-memory PDF.

    An empty distribution still yields one page of blank guides.
    """

    font_name = register_font(
        font_setup.font_bytes, family_name=font_setup.metrics.family_name
    )
    coverage = (
        {font_name: font_setup.codepoints} if font_setup.codepoints is not None else None
    )
    surface = ReportLabSurface(
        settings=settings, title="Handwriting practice sheet", coverage=coverage
    )
    assembler = PageAssembler(
        surface=surface,
        settings=settings,
        preset=font_setup.preset,
        page_numbers=page_numbers,
        style=style,
        show_progress=show_progress,
    )
    pages = distribution.pages or [PageContent(page_number=1)]
    rendered = assembler.assemble(
        pages,
        font_name=font_name,
        metrics=font_setup.metrics,
        page_limit=page_limit,
    )
    return surface.finish(), rendered


def _slug(value: str) -> str:
    cleaned = "".join(ch.lower() if ch.isalnum() else "-" for ch in value).strip("-")
    return "-".join(part for part in cleaned.split("-") if part) or "font"


def _log_generation(*, result: SheetResult, limit: int) -> None:
    metrics = result.metrics
    stats = result.distribution.stats
    logger.info(
        "Generated %s: %d page(s) of %d allowed, %.1f KB in %.0f ms",
        result.filename,
        result.page_count,
        limit,
        len(result.pdf_bytes) / 1024,
        result.generation_time_ms,
    )
    logger.debug(
        "Font size %.2fpt, line spacing %.2fpt (upem=%s, xHeight=%s)",
        metrics.calculated_font_size,
        metrics.line_spacing,
        metrics.units_per_em,
        metrics.x_height,
    )
    logger.debug(
        "Characters %d, avg/page %d, lines/page %d, truncated=%s, fallbacks=%d",
        stats.total_characters,
        stats.average_chars_per_page,
        stats.lines_per_page,
        result.truncated_content,
        result.fallback_count,
    )
