"""
Guide-line geometry: slot placement and the five 4-zone rules per slot.

Everything here is pure; drawing happens in the assembler.
"""

from __future__ import annotations

from typing import List

from .pdf_constants import GROUP_CENTER_OFFSET
from .pdf_types import GuidelineSet


def slot_height(
    total_lines: int, page_height: float, top_margin: float, bottom_margin: float
) -> float:
    """Return the height of one writing slot.

    Example:
        >>> slot_height(4, 100.0, 10.0, 10.0)
        20.0
    """

    if total_lines < 1:
        raise ValueError(f"total_lines must be >= 1, got {total_lines}")
    return (page_height - top_margin - bottom_margin) / total_lines


def compute_line_slots(
    total_lines: int, page_height: float, top_margin: float, bottom_margin: float
) -> List[float]:
    """Return the top y of each slot, top to bottom.

    Example:
        >>> compute_line_slots(4, 100.0, 10.0, 10.0)
        [90.0, 70.0, 50.0, 30.0]
    """

    height = slot_height(total_lines, page_height, top_margin, bottom_margin)
    top = page_height - top_margin
    return [top - index * height for index in range(total_lines)]


def compute_guidelines(
    slot_top_y: float,
    slot_height: float,
    line_spacing: float,
    *,
    left: float = 0.0,
    right: float = 0.0,
) -> GuidelineSet:
    """Place the five guide rules inside a slot.

    The group center sits 30% of the slot below its top, leaving room
    beneath for descenders.

    Args:
        slot_top_y: Top of the slot in page coordinates.
        slot_height: Slot height in points.
        line_spacing: Gap between adjacent rules.
        left: Left x bound.
        right: Right x bound.
    Returns:
        GuidelineSet with four equal gaps of ``line_spacing``.

    Example:
        >>> compute_guidelines(100.0, 20.0, 4.0).rules()
        (102.0, 98.0, 94.0, 90.0, 86.0)
    """

    center = slot_top_y - slot_height * GROUP_CENTER_OFFSET
    return GuidelineSet(
        ascender=center + 2 * line_spacing,
        x_height_top=center + line_spacing,
        x_height_mid=center,
        baseline=center - line_spacing,
        descender=center - 2 * line_spacing,
        left=left,
        right=right,
    )


def is_example_slot(index: int) -> bool:
    """Return True when slot ``index`` carries example text.

    Example:
        >>> [is_example_slot(i) for i in range(4)]
        [True, False, True, False]
    """

    return index % 2 == 0


def example_line_index(slot_index: int) -> int:
    """Return which text line an example slot shows."""

    return slot_index // 2
