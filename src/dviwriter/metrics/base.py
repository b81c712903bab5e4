"""Font-metrics provider protocol.

The writer needs four things from a font: its checksum, its size and design
size in points (the writer scales them by ``2**16``), and an *expansion* of a
text string into glyph runs and kerns.  An expansion alternates byte strings
and integers, starting and ending with a byte string::

    [b"A", -54613, b"V", -54613, b"A"]

Kerns are movements in DVI units at the font's size.  An empty text expands to
an empty list.
"""

from __future__ import annotations

from typing import Protocol, Sequence, Union, runtime_checkable

from dviwriter.utils.errors import MetricsError

Expansion = list[Union[bytes, int]]


@runtime_checkable
class FontMetrics(Protocol):
    """Protocol for font-metrics providers."""

    name: str
    font_size: float
    design_size: float

    def checksum(self) -> int:
        """Return the 32-bit checksum the font's consumer copy also reports."""

        ...

    def expand(self, text: str | bytes) -> Sequence[bytes | int]:
        """Return glyph runs interleaved with kerns for ``text``."""

        ...


def text_to_codes(text: str | bytes) -> bytes:
    """Return the character codes of ``text``.

    ``bytes`` are returned unchanged.  Each character of a ``str`` must have a
    code point below 256.

    Raises
    ------
    MetricsError
        If a character has no single-byte code.
    """

    if isinstance(text, (bytes, bytearray)):
        return bytes(text)
    try:
        return text.encode("latin-1")
    except UnicodeEncodeError as exc:
        bad = text[exc.start]
        raise MetricsError(
            f"character {bad!r} (U+{ord(bad):04X}) has no single-byte code"
        ) from None


class PlainMetrics:
    """Provider for fonts without ligature or kerning information.

    Useful when only the font definition matters or when the checksum and
    sizes are known from elsewhere.  ``expand`` returns the whole text as a
    single glyph run.
    """

    def __init__(
        self,
        name: str,
        *,
        checksum: int = 0,
        font_size: float = 10.0,
        design_size: float | None = None,
    ) -> None:
        self.name = name
        self._checksum = checksum
        self.font_size = font_size
        self.design_size = font_size if design_size is None else design_size

    def checksum(self) -> int:
        return self._checksum

    def expand(self, text: str | bytes) -> Expansion:
        codes = text_to_codes(text)
        return [codes] if codes else []

    def __repr__(self) -> str:
        return f"PlainMetrics({self.name!r}, font_size={self.font_size})"


__all__ = ["Expansion", "FontMetrics", "PlainMetrics", "text_to_codes"]
