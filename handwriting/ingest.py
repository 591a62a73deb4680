"""
Helpers that turn text and HTML files into practice text blocks.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, List

from bs4 import BeautifulSoup

from .cleaning import non_blank, normalize_whitespace

logger = logging.getLogger(__name__)

_BLANK_LINE = re.compile(r"\n\s*\n")
_BLOCK_TAGS = ["p", "li", "h1", "h2", "h3", "h4", "h5", "h6", "blockquote"]
_HTML_SUFFIXES = {".html", ".htm", ".xhtml"}


def blocks_from_text(raw: str) -> List[str]:
    """Split plain text into paragraphs.

    Example:
        >>> blocks_from_text("One line\\nwraps here.\\n\\n  Second.  \\n")
        ['One line wraps here.', 'Second.']
    """

    return non_blank(normalize_whitespace(chunk) for chunk in _BLANK_LINE.split(raw))


def blocks_from_html(html: str) -> List[str]:
    """Return the text of block-level elements in an HTML document.

    Falls back to the document's full text when it has no block elements.

    Example:
        >>> blocks_from_html("<p>Hello <b>there</b>.</p><script>x()</script><li>Bye.</li>")
        ['Hello there.', 'Bye.']
    """

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    blocks: List[str] = []
    for element in soup.find_all(_BLOCK_TAGS):
        # nested blocks (li > p) are picked up by the inner element
        if element.find(_BLOCK_TAGS):
            continue
        blocks.append(normalize_whitespace(element.get_text()))
    if not non_blank(blocks):
        return non_blank([normalize_whitespace(soup.get_text(" "))])
    return non_blank(blocks)


def load_text_file(path: Path) -> List[str]:
    """Read one ``.txt`` or ``.html`` file into text blocks.

    Args:
        path: File to read; HTML is detected from the suffix.
    Returns:
        List of non-empty text blocks.
    """

    raw = path.read_text(encoding="utf-8")
    if path.suffix.lower() in _HTML_SUFFIXES:
        blocks = blocks_from_html(raw)
    else:
        blocks = blocks_from_text(raw)
    logger.debug("Loaded %d block(s) from %s", len(blocks), path)
    return blocks


def load_text_files(paths: Iterable[Path]) -> List[str]:
    """Concatenate the blocks of several files in order."""

    blocks: List[str] = []
    for path in paths:
        blocks.extend(load_text_file(path))
    return blocks
