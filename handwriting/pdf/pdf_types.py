"""Data structures for guide geometry and rendered pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(slots=True, frozen=True)
class GuidelineSet:
    """Five guide rules for one writing line, top to bottom.

    Args:
        ascender: Top rule for capitals and ascenders.
        x_height_top: Top of the lowercase band.
        x_height_mid: Dashed helper rule through the lowercase band.
        baseline: Rule the example text sits on.
        descender: Bottom rule for descenders.
        left: Left x bound of the rules.
        right: Right x bound of the rules.
    """

    ascender: float
    x_height_top: float
    x_height_mid: float
    baseline: float
    descender: float
    left: float
    right: float

    def rules(self) -> tuple[float, float, float, float, float]:
        """Return the five y values from top to bottom."""

        return (
            self.ascender,
            self.x_height_top,
            self.x_height_mid,
            self.baseline,
            self.descender,
        )


@dataclass(slots=True)
class RenderFallback:
    """A text line that could not be drawn and was replaced.

    Logged and collected per page; never raised.
    """

    page_number: int
    slot_index: int
    text: str
    reason: str
    placeholder_drawn: bool = True


@dataclass(slots=True)
class RenderedPage:
    """Summary of one page handed to the drawing surface."""

    page_number: int
    guide_lines_drawn: int = 0
    text_lines_drawn: List[str] = field(default_factory=list)
    page_label: str | None = None
    fallbacks: List[RenderFallback] = field(default_factory=list)
