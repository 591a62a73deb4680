from __future__ import annotations

import pytest

from handwriting.pdf.geometry import (
    compute_guidelines,
    compute_line_slots,
    example_line_index,
    is_example_slot,
    slot_height,
)
from handwriting.pdf.pdf_settings import SIZE_PRESETS, PageSettings


def test_guidelines_have_four_equal_gaps_of_line_spacing() -> None:
    guides = compute_guidelines(700.0, 34.0, 3.9)
    rules = guides.rules()

    gaps = [upper - lower for upper, lower in zip(rules, rules[1:])]

    assert gaps == pytest.approx([3.9] * 4)
    assert guides.ascender - guides.descender == pytest.approx(4 * 3.9)
    assert guides.x_height_mid == pytest.approx(700.0 - 34.0 * 0.3)


def test_guidelines_are_deterministic() -> None:
    first = compute_guidelines(512.5, 30.0, 4.2, left=70.0, right=520.0)
    second = compute_guidelines(512.5, 30.0, 4.2, left=70.0, right=520.0)

    assert first == second


@pytest.mark.parametrize("key", sorted(SIZE_PRESETS))
def test_slots_fill_the_body_top_to_bottom(key: str) -> None:
    settings = PageSettings()
    total = SIZE_PRESETS[key].total_lines

    slots = compute_line_slots(
        total, settings.page_height, settings.margin_top, settings.margin_bottom
    )
    height = slot_height(
        total, settings.page_height, settings.margin_top, settings.margin_bottom
    )

    assert len(slots) == total
    assert slots[0] == pytest.approx(settings.page_height - settings.margin_top)
    assert slots[-1] - height == pytest.approx(settings.margin_bottom)
    assert all(upper > lower for upper, lower in zip(slots, slots[1:]))


def test_guide_group_stays_inside_its_slot_for_every_preset() -> None:
    settings = PageSettings()
    for preset in SIZE_PRESETS.values():
        height = slot_height(
            preset.total_lines,
            settings.page_height,
            settings.margin_top,
            settings.margin_bottom,
        )
        guides = compute_guidelines(500.0, height, preset.guide_zone_height / 4)
        assert guides.ascender <= 500.0
        assert guides.descender >= 500.0 - height


def test_slot_height_rejects_zero_lines() -> None:
    with pytest.raises(ValueError):
        slot_height(0, 800.0, 50.0, 50.0)


def test_example_slots_alternate() -> None:
    assert [i for i in range(7) if is_example_slot(i)] == [0, 2, 4, 6]
    assert [example_line_index(i) for i in (0, 2, 4, 6)] == [0, 1, 2, 3]
