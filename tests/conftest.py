from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Callable, Dict, List, Tuple

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen


# Ensure the project root is importable when pytest runs from its entrypoint.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from handwriting.pdf.pdf_settings import GuideStroke  # noqa: E402


def _box_glyph(width: int, height: int):
    pen = TTGlyphPen(None)
    pen.moveTo((50, 0))
    pen.lineTo((50, height))
    pen.lineTo((width - 50, height))
    pen.lineTo((width - 50, 0))
    pen.closePath()
    return pen.glyph()


def make_font(
    *,
    units_per_em: int = 1000,
    x_height: int | None = 520,
    family: str = "Test Sans",
) -> bytes:
    """Build a small TrueType font covering printable ASCII.

    ``x_height=None`` leaves out the OS/2 table entirely.
    """

    codepoints = list(range(33, 127))
    glyph_order = [".notdef", "space"] + [f"uni{cp:04X}" for cp in codepoints]
    cmap = {32: "space"}
    cmap.update({cp: f"uni{cp:04X}" for cp in codepoints})
    advance = units_per_em // 2

    fb = FontBuilder(units_per_em, isTTF=True)
    fb.setupGlyphOrder(glyph_order)
    fb.setupCharacterMap(cmap)
    glyphs = {name: _box_glyph(advance, int(units_per_em * 0.7)) for name in glyph_order}
    glyphs["space"] = TTGlyphPen(None).glyph()
    fb.setupGlyf(glyphs)
    metrics = {name: (advance, 50) for name in glyph_order}
    metrics["space"] = (advance, 0)
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=int(units_per_em * 0.8), descent=-int(units_per_em * 0.2))
    ps_name = family.replace(" ", "") + "-Regular"
    fb.setupNameTable(
        {
            "familyName": family,
            "styleName": "Regular",
            "uniqueFontIdentifier": f"FontBuilder:{ps_name}",
            "fullName": f"{family} Regular",
            "psName": ps_name,
            "version": "Version 1.000",
        }
    )
    if x_height is not None:
        fb.setupOS2(
            sTypoAscender=int(units_per_em * 0.8),
            sTypoDescender=-int(units_per_em * 0.2),
            usWinAscent=int(units_per_em * 0.8),
            usWinDescent=int(units_per_em * 0.2),
            sxHeight=x_height,
            sCapHeight=int(units_per_em * 0.7),
            fsType=0,
        )
    fb.setupPost()
    buffer = io.BytesIO()
    fb.save(buffer)
    return buffer.getvalue()


@pytest.fixture(scope="session")
def font_bytes() -> bytes:
    return make_font()


@pytest.fixture(scope="session")
def font_without_os2() -> bytes:
    return make_font(x_height=None, family="No Metrics")


@pytest.fixture(scope="session")
def font_zero_x_height() -> bytes:
    return make_font(x_height=0, family="Zero X")


@pytest.fixture(scope="session")
def font_factory() -> Callable[..., bytes]:
    return make_font


@pytest.fixture
def font_file(tmp_path: Path, font_bytes: bytes) -> Path:
    path = tmp_path / "TestSans.ttf"
    path.write_bytes(font_bytes)
    return path


class RecordingSurface:
    """Drawing surface that records calls instead of drawing.

    Args:
        fail_on: Text values whose drawing raises RuntimeError.
    """

    def __init__(self, fail_on: Tuple[str, ...] = ()) -> None:
        self.fail_on = set(fail_on)
        self.pages: List[Dict[str, list]] = []
        self.finished = False

    def begin_page(self) -> None:
        self.pages.append({"strokes": [], "texts": []})

    def stroke_line(self, x1, y1, x2, y2, *, stroke: GuideStroke) -> None:
        self.pages[-1]["strokes"].append((x1, y1, x2, y2, stroke))

    def draw_text(self, text, x, y, *, font_name, font_size, color) -> None:
        if text in self.fail_on:
            raise RuntimeError(f"cannot draw {text!r}")
        self.pages[-1]["texts"].append(
            {"text": text, "x": x, "y": y, "font_name": font_name, "font_size": font_size}
        )

    def end_page(self) -> None:
        pass

    def finish(self) -> bytes:
        self.finished = True
        return b""


@pytest.fixture
def recording_surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture
def surface_factory() -> Callable[..., RecordingSurface]:
    return RecordingSurface
