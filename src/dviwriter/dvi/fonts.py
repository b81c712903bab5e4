"""Font table: descriptors, id assignment and font record encoding.

Ids are assigned sequentially from 0 in registration order and never reused.
A definition record is written inline when a font is registered and again,
byte for byte, in the postamble.
"""

from __future__ import annotations

from dataclasses import dataclass

from dviwriter.metrics.base import FontMetrics
from dviwriter.utils.errors import FieldRangeError, UnknownFontError
from dviwriter.utils.units import to_scaled

from . import opcodes as op
from .emitter import Blob, RecordField, u1, u4, uint


@dataclass(slots=True, frozen=True)
class FontDescriptor:
    """A registered font.

    ``scaled_size`` and ``design_size`` are in scaled points (points times
    65536).
    """

    name: str
    checksum: int
    scaled_size: int
    design_size: int
    metrics: FontMetrics | None = None

    def __post_init__(self) -> None:
        if not self.name.isascii():
            raise FieldRangeError(f"font name {self.name!r} must be ASCII")

    @classmethod
    def from_metrics(cls, metrics: FontMetrics) -> "FontDescriptor":
        """Build a descriptor from a font-metrics provider."""

        return cls(
            name=metrics.name,
            checksum=metrics.checksum(),
            scaled_size=to_scaled(metrics.font_size),
            design_size=to_scaled(metrics.design_size),
            metrics=metrics,
        )

    @property
    def name_bytes(self) -> bytes:
        return self.name.encode("ascii")


def id_width(font_id: int) -> int:
    """Return the smallest unsigned field width (1-4 bytes) holding ``font_id``."""

    if font_id < 0:
        raise FieldRangeError(f"font id must be non-negative, got {font_id}")
    for width in (1, 2, 3, 4):
        if font_id < 1 << (8 * width):
            return width
    raise FieldRangeError(f"font id {font_id} exceeds 4 bytes")


def select_fields(font_id: int) -> list[RecordField]:
    """Return the fields of the font-select record for ``font_id``.

    Ids 0..63 use the one-byte ``fnt_num`` opcodes (171 + id); larger ids use
    ``fnt1``..``fnt4`` followed by the id.
    """

    if 0 <= font_id <= op.FNT_NUM_MAX_ID:
        return [u1(op.FNT_NUM_0 + font_id)]
    width = id_width(font_id)
    return [u1(op.FNT1 + width - 1), uint(width, font_id)]


def definition_fields(font_id: int, font: FontDescriptor) -> list[RecordField]:
    """Return the fields of the ``fnt_def`` record for ``font``.

    Layout: opcode, id, checksum[4], scaled size[4], design size[4],
    directory length[1] (always 0), name length[1], name bytes.
    """

    name = font.name_bytes
    if len(name) > 255:
        raise FieldRangeError(f"font name longer than 255 bytes: {font.name!r}")
    width = id_width(font_id)
    return [
        u1(op.FNT_DEF1 + width - 1),
        uint(width, font_id),
        u4(font.checksum),
        u4(font.scaled_size),
        u4(font.design_size),
        u1(0),
        u1(len(name)),
        Blob(name),
    ]


class FontTable:
    """Ordered registry of fonts indexed by id."""

    def __init__(self) -> None:
        self._fonts: list[FontDescriptor] = []

    def __len__(self) -> int:
        return len(self._fonts)

    def __iter__(self):
        return iter(enumerate(self._fonts))

    def next_id(self) -> int:
        return len(self._fonts)

    def add(self, font: FontDescriptor) -> int:
        """Store ``font`` under the next id and return that id."""

        font_id = len(self._fonts)
        self._fonts.append(font)
        return font_id

    def get(self, font_id: int) -> FontDescriptor:
        """Return the descriptor for ``font_id``.

        Raises
        ------
        UnknownFontError
            If no font was registered under ``font_id``.
        """

        if not 0 <= font_id < len(self._fonts):
            raise UnknownFontError(
                f"font id {font_id} is not defined ({len(self._fonts)} fonts registered)"
            )
        return self._fonts[font_id]


__all__ = [
    "FontDescriptor",
    "FontTable",
    "id_width",
    "select_fields",
    "definition_fields",
]
