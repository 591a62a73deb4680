"""Shared constants for sheet layout and rendering."""

from __future__ import annotations

import os

GROUP_CENTER_OFFSET = 0.3
FALLBACK_TEXT = "Handwriting practice line"
DEBUG_RENDERING = os.getenv("HANDWRITING_DEBUG", "0") not in {
    "",
    "0",
    "false",
    "False",
}
