from __future__ import annotations

import logging

import pytest

from handwriting.errors import DistributionFailure
from handwriting.fonts import calculate_size
from handwriting.models import FontMetrics, PageContent
from handwriting.pdf.assembler import PageAssembler
from handwriting.pdf.pdf_constants import FALLBACK_TEXT
from handwriting.pdf.pdf_settings import (
    SIZE_PRESETS,
    GuidelineStyle,
    PageNumberSettings,
    PageSettings,
)

PRESET = SIZE_PRESETS["medium"]
STROKES_PER_SLOT = 7


@pytest.fixture
def metrics() -> FontMetrics:
    return calculate_size(FontMetrics(units_per_em=1000, x_height=520), PRESET.guide_zone_height)


def _page(number: int, *lines: str) -> PageContent:
    page = PageContent(page_number=number)
    page.append_lines(list(lines), sum(len(line) for line in lines))
    return page


def _assembler(surface, **kwargs) -> PageAssembler:
    return PageAssembler(surface=surface, settings=PageSettings(), preset=PRESET, **kwargs)


def test_every_slot_gets_guides_and_even_slots_get_text(recording_surface, metrics) -> None:
    rendered = _assembler(recording_surface).assemble(
        [_page(1, "one", "two", "three")], font_name="Helvetica", metrics=metrics, page_limit=1
    )

    page = recording_surface.pages[0]
    assert len(page["strokes"]) == PRESET.total_lines * STROKES_PER_SLOT
    assert [entry["text"] for entry in page["texts"]] == ["one", "two", "three"]
    assert rendered[0].guide_lines_drawn == PRESET.total_lines
    assert rendered[0].text_lines_drawn == ["one", "two", "three"]
    assert rendered[0].fallbacks == []


def test_text_sits_on_baseline_of_alternate_slots(recording_surface, metrics) -> None:
    settings = PageSettings()
    _assembler(recording_surface).assemble(
        [_page(1, "a", "b")], font_name="Helvetica", metrics=metrics, page_limit=1
    )

    texts = recording_surface.pages[0]["texts"]
    baseline_strokes = [
        stroke for stroke in recording_surface.pages[0]["strokes"] if stroke[1] == stroke[3]
    ]
    baselines = {round(stroke[1], 6) for stroke in baseline_strokes}
    assert all(round(entry["y"], 6) in baselines for entry in texts)
    assert texts[0]["y"] > texts[1]["y"]
    assert all(entry["x"] == settings.margin_left + settings.text_inset for entry in texts)
    assert all(entry["font_size"] == metrics.calculated_font_size for entry in texts)


def test_mid_rule_is_dashed(recording_surface, metrics) -> None:
    style = GuidelineStyle()
    _assembler(recording_surface, style=style).assemble(
        [_page(1)], font_name="Helvetica", metrics=metrics, page_limit=1
    )

    strokes = [stroke[4] for stroke in recording_surface.pages[0]["strokes"]]
    assert strokes.count(style.x_height_mid) == PRESET.total_lines
    assert style.x_height_mid.dash == (2, 3)


def test_failed_line_is_replaced_by_placeholder(surface_factory, metrics, caplog) -> None:
    surface = surface_factory(fail_on=("bad",))

    with caplog.at_level(logging.WARNING, logger="handwriting.pdf.assembler"):
        rendered = _assembler(surface).assemble(
            [_page(1, "good", "bad", "fine")],
            font_name="Helvetica",
            metrics=metrics,
            page_limit=1,
        )

    drawn = [entry["text"] for entry in surface.pages[0]["texts"]]
    assert drawn == ["good", FALLBACK_TEXT, "fine"]
    page = rendered[0]
    assert page.text_lines_drawn == ["good", "fine"]
    assert len(page.fallbacks) == 1
    assert page.fallbacks[0].text == "bad"
    assert page.fallbacks[0].slot_index == 2
    assert page.fallbacks[0].placeholder_drawn is True
    assert "Text rendering failed" in caplog.text


def test_page_still_renders_when_placeholder_also_fails(surface_factory, metrics) -> None:
    surface = surface_factory(fail_on=("bad", FALLBACK_TEXT))

    rendered = _assembler(surface).assemble(
        [_page(1, "bad", "ok")], font_name="Helvetica", metrics=metrics, page_limit=1
    )

    assert [entry["text"] for entry in surface.pages[0]["texts"]] == ["ok"]
    assert rendered[0].fallbacks[0].placeholder_drawn is False
    assert len(surface.pages[0]["strokes"]) == PRESET.total_lines * STROKES_PER_SLOT


def test_pages_past_the_limit_are_dropped(recording_surface, metrics) -> None:
    pages = [_page(number, f"line {number}") for number in range(1, 6)]

    rendered = _assembler(recording_surface).assemble(
        pages, font_name="Helvetica", metrics=metrics, page_limit=3
    )

    assert len(rendered) == 3
    assert len(recording_surface.pages) == 3
    assert recording_surface.pages[2]["texts"][0]["text"] == "line 3"


def test_page_limit_below_one_is_rejected(recording_surface, metrics) -> None:
    with pytest.raises(DistributionFailure):
        _assembler(recording_surface).assemble(
            [_page(1, "x")], font_name="Helvetica", metrics=metrics, page_limit=0
        )


def test_unsized_metrics_are_rejected(recording_surface) -> None:
    with pytest.raises(ValueError):
        _assembler(recording_surface).assemble(
            [_page(1, "x")],
            font_name="Helvetica",
            metrics=FontMetrics(units_per_em=1000, x_height=520),
            page_limit=1,
        )


def test_detailed_page_numbers_skip_first_page_by_default(recording_surface, metrics) -> None:
    numbers = PageNumberSettings(enabled=True, format="detailed")
    pages = [_page(number) for number in range(1, 4)]

    rendered = _assembler(recording_surface, page_numbers=numbers).assemble(
        pages, font_name="Helvetica", metrics=metrics, page_limit=3
    )

    assert [page.page_label for page in rendered] == [None, "Page 2 of 3", "Page 3 of 3"]
    assert recording_surface.pages[0]["texts"] == []
    label = recording_surface.pages[1]["texts"][0]
    assert label["font_name"] == "Helvetica"
    assert label["y"] == numbers.margin


def test_total_in_label_counts_rendered_pages(recording_surface, metrics) -> None:
    numbers = PageNumberSettings(enabled=True, format="detailed", first_page_numbered=True)
    pages = [_page(number) for number in range(1, 6)]

    rendered = _assembler(recording_surface, page_numbers=numbers).assemble(
        pages, font_name="Helvetica", metrics=metrics, page_limit=2
    )

    assert [page.page_label for page in rendered] == ["Page 1 of 2", "Page 2 of 2"]


@pytest.mark.parametrize(
    ("position", "expected"),
    [
        ("bottom-center", lambda s, w: ((s.page_width - w) / 2, 30.0)),
        ("bottom-right", lambda s, w: (s.page_width - w - s.margin_right, 30.0)),
        ("top-center", lambda s, w: ((s.page_width - w) / 2, s.page_height - 30.0 - 10.0)),
    ],
)
def test_page_number_positions(recording_surface, metrics, position, expected) -> None:
    settings = PageSettings()
    numbers = PageNumberSettings(enabled=True, position=position, first_page_numbered=True)

    _assembler(recording_surface, page_numbers=numbers).assemble(
        [_page(1)], font_name="Helvetica", metrics=metrics, page_limit=1
    )

    label = recording_surface.pages[0]["texts"][0]
    assert label["text"] == "1"
    x, y = expected(settings, len("1") * 10.0 * 0.6)
    assert label["x"] == pytest.approx(x)
    assert label["y"] == pytest.approx(y)


def test_disabled_page_numbers_draw_nothing(recording_surface, metrics) -> None:
    rendered = _assembler(recording_surface).assemble(
        [_page(1), _page(2)], font_name="Helvetica", metrics=metrics, page_limit=2
    )

    assert all(page.page_label is None for page in rendered)
    assert all(page["texts"] == [] for page in recording_surface.pages)
