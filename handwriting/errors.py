"""
Error taxonomy for sheet generation and the messages shown to users.
"""

from __future__ import annotations

from typing import Sequence


class HandwritingError(Exception):
    """Base class for failures that stop a sheet from being generated."""

    user_message = "The practice sheet could not be generated."


class FontParseError(HandwritingError):
    """Font bytes could not be interpreted by any parsing strategy.

    Args:
        message: Summary of the failure.
        attempts: Per-strategy failure reasons, in the order tried.
    """

    user_message = "The font file is invalid or unsupported."

    def __init__(self, message: str, attempts: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.attempts = list(attempts)

    def __str__(self) -> str:
        base = super().__str__()
        if not self.attempts:
            return base
        return f"{base} ({'; '.join(self.attempts)})"


class InvalidMetrics(HandwritingError):
    """The font parsed but its metrics cannot drive the layout."""

    user_message = "The font file is invalid: its metrics are unusable."


class DistributionFailure(HandwritingError):
    """A caller broke an invariant of text distribution (e.g. page limit)."""

    user_message = "The text could not be paginated."


class MissingGlyphs(HandwritingError):
    """Text holds characters the embedded font has no glyph for.

    Args:
        font_name: Registered font name.
        missing: The uncovered characters, in codepoint order.
    """

    user_message = "The font cannot display some of the text."

    def __init__(self, font_name: str, missing: str) -> None:
        super().__init__(f"Font {font_name} has no glyph for {missing!r}")
        self.font_name = font_name
        self.missing = missing


def user_message(error: BaseException) -> str:
    """Return a human-readable message for a generation failure.

    Example:
        >>> user_message(DistributionFailure("page_limit must be >= 1"))
        'The text could not be paginated.'
        >>> user_message(RuntimeError("boom"))
        'The practice sheet could not be generated.'
    """

    if isinstance(error, HandwritingError):
        return error.user_message
    return HandwritingError.user_message
