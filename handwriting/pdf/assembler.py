"""Page assembly: guides, example text, and page numbers per page."""

from __future__ import annotations

import logging
from typing import List, Protocol, Sequence

from tqdm import tqdm

from ..errors import DistributionFailure
from ..models import FontMetrics, PageContent
from .geometry import (
    compute_guidelines,
    compute_line_slots,
    example_line_index,
    is_example_slot,
    slot_height,
)
from .pdf_constants import DEBUG_RENDERING, FALLBACK_TEXT
from .pdf_settings import GuidelineStyle, PageNumberSettings, PageSettings, SizePreset
from .pdf_types import GuidelineSet, RenderedPage, RenderFallback
from .surface import DrawingSurface

logger = logging.getLogger(__name__)


class _ProgressTracker(Protocol):
    """Protocol for page rendering progress updates."""

    def update(self, n: int | float = 1) -> object:
        """Advance the progress tracker by ``n``."""


class PageAssembler:
    """Draw distributed pages onto a drawing surface.

    Args:
        surface: Drawing surface receiving strokes and text.
        settings: Page geometry.
        preset: Size preset providing the guide line count.
        page_numbers: Page-number placement; disabled by default.
        style: Guide strokes and text colours.
        show_progress: Whether to display a tqdm progress bar.
    """

    def __init__(
        self,
        *,
        surface: DrawingSurface,
        settings: PageSettings,
        preset: SizePreset,
        page_numbers: PageNumberSettings | None = None,
        style: GuidelineStyle | None = None,
        show_progress: bool = False,
    ) -> None:
        self.surface = surface
        self.settings = settings
        self.preset = preset
        self.page_numbers = page_numbers or PageNumberSettings()
        self.style = style or GuidelineStyle()
        self.show_progress = show_progress

    def assemble(
        self,
        pages: Sequence[PageContent],
        *,
        font_name: str,
        metrics: FontMetrics,
        page_limit: int,
    ) -> List[RenderedPage]:
        """Render up to ``page_limit`` pages.

        Pages past the limit are dropped without error.

        Args:
            pages: Distributed page contents.
            font_name: Registered font used for example text.
            metrics: Sized font metrics.
            page_limit: Maximum number of pages to render.
        Returns:
            One RenderedPage per page handed to the surface.
        Raises:
            DistributionFailure: ``page_limit`` is below one.
        """

        if page_limit < 1:
            raise DistributionFailure(f"page_limit must be >= 1, got {page_limit}")
        if not metrics.is_sized:
            raise ValueError("metrics must be sized before assembly")
        selected = list(pages[:page_limit])
        if len(pages) > page_limit:
            logger.debug("Dropping %d page(s) beyond limit %d", len(pages) - page_limit, page_limit)

        total = len(selected)
        progress = (
            tqdm(total=total, desc="Rendering pages", unit="page")
            if self.show_progress and total
            else None
        )
        rendered: List[RenderedPage] = []
        try:
            for position, content in enumerate(selected, start=1):
                rendered.append(
                    self._render_page(
                        content=content,
                        position=position,
                        total=total,
                        font_name=font_name,
                        metrics=metrics,
                        progress=progress,
                    )
                )
        finally:
            if progress is not None:
                progress.close()
        return rendered

    def _render_page(
        self,
        *,
        content: PageContent,
        position: int,
        total: int,
        font_name: str,
        metrics: FontMetrics,
        progress: _ProgressTracker | None,
    ) -> RenderedPage:
        """Draw one page and report what was drawn."""

        page = RenderedPage(page_number=position)
        self.surface.begin_page()
        settings = self.settings
        total_lines = self.preset.total_lines
        height = slot_height(
            total_lines, settings.page_height, settings.margin_top, settings.margin_bottom
        )
        slots = compute_line_slots(
            total_lines, settings.page_height, settings.margin_top, settings.margin_bottom
        )
        for index, slot_top in enumerate(slots):
            guides = compute_guidelines(
                slot_top,
                height,
                metrics.line_spacing,
                left=settings.guide_left,
                right=settings.guide_right,
            )
            self._draw_guides(guides)
            page.guide_lines_drawn += 1
            if not is_example_slot(index):
                continue
            line_index = example_line_index(index)
            if line_index >= len(content.text_lines):
                continue
            self._draw_example(
                page=page,
                slot_index=index,
                text=content.text_lines[line_index],
                baseline=guides.baseline,
                font_name=font_name,
                font_size=metrics.calculated_font_size,
            )

        if self.page_numbers.should_number(position):
            page.page_label = self._draw_page_number(position, total)
        self.surface.end_page()
        if progress is not None:
            progress.update(1)
        if DEBUG_RENDERING:
            logger.debug(
                "Page %d: %d guides, %d text lines, %d fallbacks",
                position,
                page.guide_lines_drawn,
                len(page.text_lines_drawn),
                len(page.fallbacks),
            )
        return page

    def _draw_guides(self, guides: GuidelineSet) -> None:
        """Stroke the five rules and the x-height band edges."""

        style = self.style
        left, right = guides.left, guides.right
        draw = self.surface.stroke_line
        draw(left, guides.ascender, right, guides.ascender, stroke=style.ascender)
        draw(left, guides.x_height_top, right, guides.x_height_top, stroke=style.x_height)
        draw(left, guides.x_height_mid, right, guides.x_height_mid, stroke=style.x_height_mid)
        draw(left, guides.baseline, right, guides.baseline, stroke=style.x_height)
        draw(left, guides.descender, right, guides.descender, stroke=style.descender)
        draw(left, guides.x_height_top, left, guides.baseline, stroke=style.x_height)
        draw(right, guides.x_height_top, right, guides.baseline, stroke=style.x_height)

    def _draw_example(
        self,
        *,
        page: RenderedPage,
        slot_index: int,
        text: str,
        baseline: float,
        font_name: str,
        font_size: float,
    ) -> None:
        """Draw one example line, substituting a placeholder on failure."""

        x = self.settings.margin_left + self.settings.text_inset
        try:
            self.surface.draw_text(
                text,
                x,
                baseline,
                font_name=font_name,
                font_size=font_size,
                color=self.style.text_color,
            )
        except Exception as exc:
            fallback = RenderFallback(
                page_number=page.page_number,
                slot_index=slot_index,
                text=text,
                reason=f"{type(exc).__name__}: {exc}",
            )
            logger.warning(
                "Text rendering failed (page %d, line %d): %s",
                page.page_number,
                slot_index,
                fallback.reason,
            )
            try:
                self.surface.draw_text(
                    FALLBACK_TEXT,
                    x,
                    baseline,
                    font_name=font_name,
                    font_size=font_size,
                    color=self.style.fallback_color,
                )
            except Exception as fallback_exc:
                fallback.placeholder_drawn = False
                logger.error(
                    "Placeholder rendering also failed (page %d, line %d): %s",
                    page.page_number,
                    slot_index,
                    fallback_exc,
                )
            page.fallbacks.append(fallback)
            return
        page.text_lines_drawn.append(text)

    def _draw_page_number(self, position: int, total: int) -> str | None:
        numbers = self.page_numbers
        label = numbers.label(position, total)
        x, y = numbers.anchor(
            label=label,
            page_width=self.settings.page_width,
            page_height=self.settings.page_height,
            margin_right=self.settings.margin_right,
        )
        try:
            self.surface.draw_text(
                label,
                x,
                y,
                font_name=numbers.font_name,
                font_size=numbers.font_size,
                color=numbers.color,
            )
        except Exception as exc:
            logger.warning("Page number rendering failed (page %d): %s", position, exc)
            return None
        return label
