"""Drawing surfaces the page assembler writes to."""

from __future__ import annotations

import io
from typing import Mapping, Protocol

from reportlab.lib import colors
from reportlab.pdfgen import canvas

from ..errors import MissingGlyphs
from .pdf_settings import GuideStroke, PageSettings


class DrawingSurface(Protocol):
    """Minimal drawing capability needed to render practice pages."""

    def begin_page(self) -> None:
        """Start a new blank page."""

    def stroke_line(
        self, x1: float, y1: float, x2: float, y2: float, *, stroke: GuideStroke
    ) -> None:
        """Draw a straight rule."""

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        *,
        font_name: str,
        font_size: float,
        color: colors.Color,
    ) -> None:
        """Draw a single line of text with its baseline at ``y``."""

    def end_page(self) -> None:
        """Finish the current page."""

    def finish(self) -> bytes:
        """Close the document and return its bytes."""


class ReportLabSurface:
    """DrawingSurface backed by a ReportLab canvas writing to memory.

    Args:
        settings: Page settings supplying the page size.
        title: Optional document title.
        coverage: Codepoints each registered font can draw, keyed by font
            name. Fonts without an entry are not checked.
    """

    def __init__(
        self,
        *,
        settings: PageSettings,
        title: str | None = None,
        coverage: Mapping[str, frozenset[int]] | None = None,
    ) -> None:
        self._buffer = io.BytesIO()
        self._canvas = canvas.Canvas(
            self._buffer,
            pagesize=(settings.page_width, settings.page_height),
        )
        if title:
            self._canvas.setTitle(title)
        self._page_open = False
        self._coverage = dict(coverage or {})

    def begin_page(self) -> None:
        self._page_open = True

    def stroke_line(
        self, x1: float, y1: float, x2: float, y2: float, *, stroke: GuideStroke
    ) -> None:
        c = self._canvas
        c.saveState()
        c.setStrokeColor(stroke.color)
        c.setLineWidth(stroke.width)
        if stroke.dash:
            c.setDash(list(stroke.dash), 0)
        c.line(x1, y1, x2, y2)
        c.restoreState()

    def draw_text(
        self,
        text: str,
        x: float,
        y: float,
        *,
        font_name: str,
        font_size: float,
        color: colors.Color,
    ) -> None:
        self._check_glyphs(text, font_name)
        c = self._canvas
        c.saveState()
        try:
            c.setFillColor(color)
            c.setFont(font_name, font_size)
            c.drawString(x, y, text)
        finally:
            c.restoreState()

    def _check_glyphs(self, text: str, font_name: str) -> None:
        covered = self._coverage.get(font_name)
        if covered is None:
            return
        missing = {ch for ch in text if not ch.isspace() and ord(ch) not in covered}
        if missing:
            raise MissingGlyphs(font_name, "".join(sorted(missing)))

    def end_page(self) -> None:
        if self._page_open:
            self._canvas.showPage()
            self._page_open = False

    def finish(self) -> bytes:
        self.end_page()
        self._canvas.save()
        return self._buffer.getvalue()
