"""
Command-line front end: build a practice sheet PDF from a font file.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Sequence

from .errors import HandwritingError, user_message
from .ingest import load_text_files
from .pdf.builder import build_sheet, estimate_sheet
from .pdf.pdf_constants import DEBUG_RENDERING
from .pdf.pdf_settings import (
    DEFAULT_PAGE_LIMIT,
    DEFAULT_SIZE,
    MAX_PAGES,
    MIN_PAGES,
    SIZE_PRESETS,
    PageNumberSettings,
)

logger = logging.getLogger(__name__)

_PAGE_NUMBER_STYLES = ("none", "simple", "detailed")
_PAGE_NUMBER_POSITIONS = ("bottom-center", "bottom-right", "top-center")


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``handwriting-sheet``."""

    parser = argparse.ArgumentParser(
        prog="handwriting-sheet",
        description="Generate a handwriting practice sheet PDF from a font file.",
    )
    parser.add_argument(
        "--font",
        required=True,
        type=Path,
        help="TrueType/OpenType font whose x-height sizes the guides.",
    )
    parser.add_argument(
        "--size",
        choices=sorted(SIZE_PRESETS),
        default=DEFAULT_SIZE,
        help="Guide size preset.",
    )
    parser.add_argument(
        "--text",
        action="append",
        default=[],
        metavar="TEXT",
        help="Practice text block (repeatable).",
    )
    parser.add_argument(
        "--text-file",
        action="append",
        default=[],
        type=Path,
        metavar="FILE",
        help="Read practice text from a .txt or .html file (repeatable).",
    )
    parser.add_argument(
        "--pages",
        type=int,
        default=DEFAULT_PAGE_LIMIT,
        help=f"Maximum number of pages ({MIN_PAGES}-{MAX_PAGES}).",
    )
    parser.add_argument(
        "--page-numbers",
        choices=_PAGE_NUMBER_STYLES,
        default="none",
        help="Page number style: 'simple' prints N, 'detailed' prints 'Page N of M'.",
    )
    parser.add_argument(
        "--page-number-position",
        choices=_PAGE_NUMBER_POSITIONS,
        default="bottom-center",
        help="Where page numbers are printed.",
    )
    parser.add_argument(
        "--number-first-page",
        action="store_true",
        help="Also number the first page.",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file or directory (defaults to a generated name in the current directory).",
    )
    parser.add_argument(
        "--estimate-only",
        action="store_true",
        help="Print a page-count estimate without rendering.",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar while rendering pages.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def _collect_texts(args: argparse.Namespace) -> List[str] | None:
    texts = list(args.text) + load_text_files(args.text_file)
    if not args.text and not args.text_file:
        return None
    return texts


def _page_number_settings(args: argparse.Namespace) -> PageNumberSettings | None:
    if args.page_numbers == "none":
        return None
    return PageNumberSettings(
        enabled=True,
        format=args.page_numbers,
        position=args.page_number_position,
        first_page_numbered=args.number_first_page,
    )


def _output_path(output: Path | None, filename: str) -> Path:
    if output is None:
        return Path(filename)
    if output.is_dir():
        return output / filename
    return output


def run(args: argparse.Namespace) -> int:
    """Execute a parsed command line and return the exit status."""

    texts = _collect_texts(args)
    if args.estimate_only:
        estimate = estimate_sheet(
            font_path=args.font, size=args.size, texts=texts, page_limit=args.pages
        )
        print(
            f"Estimated pages: {estimate.estimated_pages} "
            f"({estimate.total_characters} characters, "
            f"~{estimate.average_chars_per_page}/page, confidence {estimate.confidence})"
        )
        if estimate.exceeds_limit:
            print(f"Exceeds the page limit of {args.pages}; text will be truncated.")
        return 0

    result = build_sheet(
        font_path=args.font,
        size=args.size,
        texts=texts,
        page_limit=args.pages,
        page_numbers=_page_number_settings(args),
        show_progress=args.progress,
    )
    destination = _output_path(args.output, result.filename)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(result.pdf_bytes)
    print(f"Wrote {destination} ({result.page_count} page(s))")
    if result.truncated_content:
        print("Some text did not fit within the page limit and was left out.")
    if result.fallback_count:
        print(f"{result.fallback_count} line(s) used a placeholder; see the log for details.")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for ``handwriting-sheet``.

    Example:
        >>> main(["--font", "fonts/Roboto.ttf", "--pages", "3"])  # doctest: +SKIP
        0
    """

    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose or DEBUG_RENDERING else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return run(args)
    except (HandwritingError, ValueError, OSError) as exc:
        logger.debug("Generation failed", exc_info=True)
        print(user_message(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
