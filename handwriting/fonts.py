"""
Font metric extraction and guide-zone sizing.

The render size is solved from the font's own metrics: a desired physical
x-height maps to a point size through ``units_per_em / x_height``.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, List, Tuple

from fontTools.ttLib import TTFont, TTLibError

from .errors import FontParseError, InvalidMetrics
from .models import FontMetrics

logger = logging.getLogger(__name__)

X_HEIGHT_FALLBACK_RATIO = 0.5
GUIDE_GAPS = 4
X_HEIGHT_GAPS = 2
SFNT_SIGNATURES = (b"\x00\x01\x00\x00", b"OTTO", b"true", b"ttcf")

BytesLike = bytes | bytearray | memoryview


def read_font_bytes(path: Path | str) -> bytes:
    """Read a font file from disk.

    Args:
        path: Font file location.
    Returns:
        Raw font bytes.
    Raises:
        FontParseError: The file is missing, unreadable, or empty.
    """

    font_path = Path(path)
    try:
        data = font_path.read_bytes()
    except OSError as exc:
        raise FontParseError(f"Failed to read font file: {font_path}") from exc
    if not data:
        raise FontParseError(f"Font file is empty: {font_path}")
    logger.debug("Read %d bytes from %s", len(data), font_path)
    return data


def _direct_view(data: BytesLike) -> BytesLike:
    return data


def _signature_slice(data: BytesLike) -> BytesLike:
    raw = bytes(data)
    offsets = [raw.find(sig) for sig in SFNT_SIGNATURES]
    found = [offset for offset in offsets if offset >= 0]
    if not found:
        raise ValueError("no sfnt signature in buffer")
    start = min(found)
    if start == 0:
        raise ValueError("buffer already starts at the sfnt header")
    return raw[start:]


def _contiguous_copy(data: BytesLike) -> BytesLike:
    return memoryview(data).tobytes()


PARSE_STRATEGIES: Tuple[Tuple[str, Callable[[BytesLike], BytesLike]], ...] = (
    ("direct", _direct_view),
    ("offset", _signature_slice),
    ("copy", _contiguous_copy),
)


def _open_font(buffer: BytesLike) -> TTFont:
    """Parse a font eagerly so malformed tables fail here, not later."""

    font = TTFont(io.BytesIO(buffer), lazy=False, fontNumber=0)
    font["head"]
    return font


def _parse_framed(data: BytesLike) -> Tuple[TTFont, BytesLike]:
    attempts: List[str] = []
    for label, frame in PARSE_STRATEGIES:
        try:
            buffer = frame(data)
            font = _open_font(buffer)
        except TTLibError as exc:
            attempts.append(f"{label}: {exc}")
            continue
        except Exception as exc:
            attempts.append(f"{label}: {type(exc).__name__}: {exc}")
            continue
        logger.debug("Font parsed with strategy %r", label)
        return font, buffer
    for attempt in attempts:
        logger.debug("Font parse attempt failed: %s", attempt)
    raise FontParseError("Failed to parse font data", attempts)


def parse_font(data: BytesLike) -> TTFont:
    """Parse font bytes, retrying alternate framings of the buffer.

    Args:
        data: Font bytes as handed over by the host.
    Returns:
        Parsed fontTools font.
    Raises:
        FontParseError: No framing could be parsed.
    """

    return _parse_framed(data)[0]


def _family_name(font: TTFont) -> str | None:
    if "name" not in font:
        return None
    record = font["name"].getDebugName(1)
    return str(record) if record else None


def extract_metrics(font: TTFont) -> FontMetrics:
    """Read units-per-em and x-height from a parsed font.

    The x-height comes from ``OS/2.sxHeight`` when present and positive;
    otherwise half the em is used.

    Raises:
        InvalidMetrics: Units-per-em is not positive, or the x-height is
            taller than the em.
    """

    units_per_em = float(getattr(font["head"], "unitsPerEm", 0) or 0)
    if units_per_em <= 0:
        raise InvalidMetrics(f"Invalid unitsPerEm: {units_per_em}")

    x_height = 0.0
    if "OS/2" in font:
        x_height = float(getattr(font["OS/2"], "sxHeight", 0) or 0)
    fallback = x_height <= 0
    if fallback:
        x_height = units_per_em * X_HEIGHT_FALLBACK_RATIO
        logger.info(
            "Font has no usable x-height; using %.1f (%.0f%% of em)",
            x_height,
            X_HEIGHT_FALLBACK_RATIO * 100,
        )
    if x_height > units_per_em:
        raise InvalidMetrics(
            f"xHeight {x_height} exceeds unitsPerEm {units_per_em}"
        )

    return FontMetrics(
        units_per_em=units_per_em,
        x_height=x_height,
        x_height_is_fallback=fallback,
        family_name=_family_name(font),
    )


@dataclass(slots=True, frozen=True)
class ParsedFont:
    """A parsed font ready to embed.

    Args:
        payload: Contiguous font bytes in the framing that parsed.
        metrics: Unsized metrics.
        codepoints: Characters the font maps to glyphs, or None when the
            font carries no usable cmap.
    """

    payload: bytes
    metrics: FontMetrics
    codepoints: frozenset[int] | None = None


def _codepoints(font: TTFont) -> frozenset[int] | None:
    if "cmap" not in font:
        return None
    cmap = font.getBestCmap()
    return frozenset(cmap) if cmap else None


def load_font(data: BytesLike) -> ParsedFont:
    """Parse font bytes into an embeddable payload with metrics and coverage.

    The payload is the framing that parsed, so padding a host put in
    front of the font is gone and the bytes can be embedded as-is.

    Args:
        data: Font bytes as handed over by the host.
    Returns:
        ParsedFont with unsized metrics and the font's cmap coverage.
    """

    font, buffer = _parse_framed(data)
    try:
        metrics = extract_metrics(font)
        codepoints = _codepoints(font)
    finally:
        font.close()
    logger.debug(
        "Font metrics: upem=%s xHeight=%s fallback=%s glyphs=%s",
        metrics.units_per_em,
        metrics.x_height,
        metrics.x_height_is_fallback,
        len(codepoints) if codepoints is not None else "unknown",
    )
    return ParsedFont(payload=bytes(buffer), metrics=metrics, codepoints=codepoints)


def resolve_metrics(data: BytesLike) -> FontMetrics:
    """Parse font bytes and return their unsized metrics."""

    return load_font(data).metrics


def calculate_size(metrics: FontMetrics, guide_zone_height: float) -> FontMetrics:
    """Size a font so its x-height spans two of the four guide gaps.

    Args:
        metrics: Unsized (or previously sized) metrics.
        guide_zone_height: Height in points from the ascender rule to the
            descender rule.
    Returns:
        New metrics with ``line_spacing`` and ``calculated_font_size`` set.

    Example:
        >>> sized = calculate_size(FontMetrics(units_per_em=1000, x_height=520), 15.6)
        >>> round(sized.line_spacing, 2), round(sized.calculated_font_size, 2)
        (3.9, 15.0)
    """

    assert metrics.x_height > 0, "x_height must be positive before sizing"
    if guide_zone_height <= 0:
        raise ValueError(f"guide_zone_height must be positive, got {guide_zone_height}")
    line_spacing = guide_zone_height / GUIDE_GAPS
    x_height_pt = line_spacing * X_HEIGHT_GAPS
    font_size = x_height_pt / metrics.x_height * metrics.units_per_em
    return replace(metrics, calculated_font_size=font_size, line_spacing=line_spacing)


class FontMetricsResolver:
    """Parse one font once and size it for any number of guide zones.

    Args:
        data: Raw font bytes.

    Example:
        >>> resolver = FontMetricsResolver.from_path("fonts/RobotoMono.ttf")  # doctest: +SKIP
        >>> resolver.calculate_size(15.6).calculated_font_size  # doctest: +SKIP
        14.77
    """

    def __init__(self, data: BytesLike) -> None:
        self.data = data
        self._parsed: ParsedFont | None = None

    @classmethod
    def from_path(cls, path: Path | str) -> "FontMetricsResolver":
        return cls(read_font_bytes(path))

    def load(self) -> ParsedFont:
        """Return the parsed font, parsing on first use."""

        if self._parsed is None:
            self._parsed = load_font(self.data)
        return self._parsed

    @property
    def payload(self) -> bytes:
        return self.load().payload

    @property
    def codepoints(self) -> frozenset[int] | None:
        return self.load().codepoints

    def resolve(self) -> FontMetrics:
        """Return the font's unsized metrics."""

        return self.load().metrics

    def calculate_size(self, guide_zone_height: float) -> FontMetrics:
        return calculate_size(self.resolve(), guide_zone_height)
