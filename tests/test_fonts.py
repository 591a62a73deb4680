from __future__ import annotations

import pytest

from handwriting.errors import FontParseError, InvalidMetrics
from handwriting.fonts import (
    FontMetricsResolver,
    calculate_size,
    load_font,
    parse_font,
    read_font_bytes,
    resolve_metrics,
)
from handwriting.models import FontMetrics
from handwriting.pdf.pdf_settings import SIZE_PRESETS


def test_resolve_metrics_reads_units_per_em_and_x_height(font_bytes: bytes) -> None:
    metrics = resolve_metrics(font_bytes)

    assert metrics.units_per_em == 1000
    assert metrics.x_height == 520
    assert metrics.x_height_is_fallback is False
    assert metrics.family_name == "Test Sans"
    assert metrics.is_sized is False


def test_missing_os2_table_falls_back_to_half_em(font_without_os2: bytes) -> None:
    metrics = resolve_metrics(font_without_os2)

    assert metrics.x_height == 500
    assert metrics.x_height_is_fallback is True


def test_zero_x_height_falls_back_to_half_em(font_factory) -> None:
    metrics = resolve_metrics(font_factory(units_per_em=2048, x_height=0))

    assert metrics.x_height == 1024
    assert metrics.x_height_is_fallback is True


def test_x_height_taller_than_em_is_rejected(font_factory) -> None:
    with pytest.raises(InvalidMetrics):
        resolve_metrics(font_factory(units_per_em=1000, x_height=1200))


def test_parse_recovers_font_behind_leading_padding(font_bytes: bytes) -> None:
    metrics = resolve_metrics(b"garbage!" + font_bytes)

    assert metrics.units_per_em == 1000


def test_parse_accepts_memoryview_and_bytearray(font_bytes: bytes) -> None:
    assert resolve_metrics(memoryview(font_bytes)).x_height == 520
    assert resolve_metrics(bytearray(font_bytes)).x_height == 520


def test_unparseable_bytes_report_every_attempt() -> None:
    with pytest.raises(FontParseError) as excinfo:
        parse_font(b"this is not a font at all")

    assert len(excinfo.value.attempts) == 3
    assert "direct" in str(excinfo.value)


def test_read_font_bytes_rejects_missing_and_empty_files(tmp_path) -> None:
    with pytest.raises(FontParseError):
        read_font_bytes(tmp_path / "missing.ttf")

    empty = tmp_path / "empty.ttf"
    empty.write_bytes(b"")
    with pytest.raises(FontParseError):
        read_font_bytes(empty)


def test_calculate_size_worked_example() -> None:
    sized = calculate_size(FontMetrics(units_per_em=1000, x_height=520), 15.6)

    assert sized.line_spacing == pytest.approx(3.9)
    assert sized.line_spacing * 2 == pytest.approx(7.8)
    assert sized.calculated_font_size == pytest.approx(15.0)
    assert sized.is_sized


def test_calculate_size_returns_new_instance() -> None:
    metrics = FontMetrics(units_per_em=1000, x_height=520)

    sized = calculate_size(metrics, 15.6)

    assert metrics.calculated_font_size == 0.0
    assert sized is not metrics
    assert sized.units_per_em == metrics.units_per_em


@pytest.mark.parametrize("key", sorted(SIZE_PRESETS))
def test_every_preset_gives_positive_sizes(font_bytes: bytes, key: str) -> None:
    sized = calculate_size(resolve_metrics(font_bytes), SIZE_PRESETS[key].guide_zone_height)

    assert sized.calculated_font_size > 0
    assert sized.line_spacing > 0
    assert sized.line_spacing * 4 == pytest.approx(SIZE_PRESETS[key].guide_zone_height)


def test_calculate_size_rejects_non_positive_zone() -> None:
    with pytest.raises(ValueError):
        calculate_size(FontMetrics(units_per_em=1000, x_height=520), 0)


def test_resolver_parses_once(font_file) -> None:
    resolver = FontMetricsResolver.from_path(font_file)

    first = resolver.resolve()
    assert resolver.resolve() is first
    assert resolver.calculate_size(15.6).calculated_font_size == pytest.approx(15.0)


def test_load_font_strips_leading_padding(font_bytes: bytes) -> None:
    parsed = load_font(b"garbage!" + font_bytes)

    assert parsed.payload == font_bytes
    assert parsed.metrics.x_height == 520


def test_load_font_reports_cmap_coverage(font_bytes: bytes) -> None:
    codepoints = load_font(font_bytes).codepoints

    assert codepoints is not None
    assert ord("A") in codepoints
    assert ord("\u00e9") not in codepoints


def test_resolver_exposes_embeddable_payload(font_bytes: bytes) -> None:
    resolver = FontMetricsResolver(b"garbage!" + font_bytes)

    assert resolver.payload == font_bytes
    assert resolver.load() is resolver.load()
    assert ord("z") in resolver.codepoints
    assert resolver.resolve().units_per_em == 1000
