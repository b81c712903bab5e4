"""
TeX Font Metric (TFM) reader.

Parses a ``.tfm`` file into a :class:`TFMMetrics` provider: header (checksum
and design size), per-character info, the width/height/depth/italic tables,
the ligature/kerning program, the kern table and the font parameters.

File layout (all big-endian, in 32-bit words):

    lf lh bc ec nw nh nd ni nl nk ne np   twelve 16-bit lengths
    header[lh]      checksum, design size, ...
    char_info[ec-bc+1]
    width[nw] height[nh] depth[nd] italic[ni]
    lig_kern[nl] kern[nk] exten[ne] param[np]

Dimensions are fix_words relative to the design size; :meth:`TFMMetrics.expand`
returns kerns scaled to the size the font was loaded at.  Boundary-character
ligatures are not applied.
"""

from __future__ import annotations

import struct
from pathlib import Path
from typing import NamedTuple

from dviwriter.utils.errors import TFMFormatError
from dviwriter.utils.logging import get_logger
from dviwriter.utils.units import fix_word_to_float, from_scaled, scale_fix_word, to_scaled

from .base import Expansion, text_to_codes

logger = get_logger(__name__)

# char_info tag: character has a lig/kern program
TAG_LIG = 1

STOP_FLAG = 128
KERN_FLAG = 128
LIGATURE_OPS = frozenset({0, 1, 2, 3, 5, 6, 7, 11})

PARAM_SLANT = 1
PARAM_SPACE = 2
PARAM_SPACE_STRETCH = 3
PARAM_SPACE_SHRINK = 4
PARAM_X_HEIGHT = 5
PARAM_QUAD = 6
PARAM_EXTRA_SPACE = 7


class CharInfo(NamedTuple):
    width_index: int
    height_index: int
    depth_index: int
    italic_index: int
    tag: int
    remainder: int


class LigKern(NamedTuple):
    skip: int
    next_char: int
    op: int
    remainder: int


class Ligature(NamedTuple):
    op: int
    char: int


class TFMMetrics:
    """Metrics of one TFM font loaded at a given size."""

    __slots__ = (
        "name", "font_size", "design_size", "bc", "ec", "char_info",
        "widths", "heights", "depths", "italics", "lig_kern", "kerns",
        "params", "scaled_size", "_checksum",
    )

    def __init__(self, name, checksum, design_size, bc, ec, char_info,
                 widths, heights, depths, italics, lig_kern, kerns, params,
                 size=None):
        self.name = name
        self._checksum = checksum
        self.design_size = design_size
        self.font_size = design_size if size is None else size
        self.scaled_size = to_scaled(self.font_size)
        self.bc = bc
        self.ec = ec
        self.char_info = char_info   # code - bc -> CharInfo
        self.widths = widths         # raw fix_words
        self.heights = heights
        self.depths = depths
        self.italics = italics
        self.lig_kern = lig_kern     # list of LigKern
        self.kerns = kerns
        self.params = params         # params[0] is param 1 (slant)

    def __repr__(self):
        return f"TFMMetrics({self.name!r}, font_size={self.font_size})"

    # -- provider interface ------------------------------------------------

    def checksum(self) -> int:
        return self._checksum

    def expand(self, text: str | bytes) -> Expansion:
        """Run the lig/kern program over ``text``.

        Returns glyph runs alternating with kerns (in DVI units at
        ``font_size``), starting and ending with a run.
        """
        codes = list(text_to_codes(text))
        if not codes:
            return []
        out: Expansion = []
        run = bytearray()
        # every ligature step either shortens the text or moves on; a
        # well-formed program cannot exceed this bound
        budget = 256 * (len(codes) + 1)
        i = 0
        while i < len(codes):
            left = codes[i]
            if i + 1 < len(codes):
                step = self.lig_kern_step(left, codes[i + 1])
                if isinstance(step, int):
                    run.append(left)
                    out.append(bytes(run))
                    out.append(step)
                    run = bytearray()
                    i += 1
                    continue
                if step is not None:
                    budget -= 1
                    if budget < 0:
                        raise TFMFormatError(
                            f"{self.name}: ligature program does not terminate")
                    i = self._apply_ligature(codes, i, step, run)
                    continue
            run.append(left)
            i += 1
        out.append(bytes(run))
        return out

    def _apply_ligature(self, codes, i, lig, run):
        """Replace the pair at ``i`` and move the cursor per the op."""
        skip = lig.op >> 2
        keep_left = (lig.op >> 1) & 1
        keep_right = lig.op & 1
        left, right = codes[i], codes[i + 1]
        replacement = []
        if keep_left:
            replacement.append(left)
        replacement.append(lig.char)
        if keep_right:
            replacement.append(right)
        codes[i:i + 2] = replacement
        for _ in range(skip):
            run.append(codes[i])
            i += 1
        return i

    # -- lookups -----------------------------------------------------------

    def has_char(self, code: int) -> bool:
        info = self._info(code)
        return info is not None and info.width_index != 0

    def _info(self, code):
        if self.bc <= code <= self.ec:
            return self.char_info[code - self.bc]
        return None

    def lig_kern_step(self, left: int, right: int):
        """Return the instruction for the pair ``(left, right)``.

        The result is a kern amount (``int``, DVI units), a :class:`Ligature`,
        or ``None`` when the pair has no entry.
        """
        info = self._info(left)
        if info is None or info.tag != TAG_LIG:
            return None
        i = info.remainder
        instr = self._instruction(i)
        if instr.skip > STOP_FLAG:
            i = 256 * instr.op + instr.remainder
            instr = self._instruction(i)
        while True:
            if instr.skip <= STOP_FLAG and instr.next_char == right:
                if instr.op >= KERN_FLAG:
                    k = 256 * (instr.op - KERN_FLAG) + instr.remainder
                    if k >= len(self.kerns):
                        raise TFMFormatError(f"{self.name}: kern index {k} out of range")
                    return scale_fix_word(self.kerns[k], self.scaled_size)
                if instr.op not in LIGATURE_OPS:
                    raise TFMFormatError(f"{self.name}: invalid ligature op {instr.op}")
                return Ligature(instr.op, instr.remainder)
            if instr.skip >= STOP_FLAG:
                return None
            i += instr.skip + 1
            instr = self._instruction(i)

    def _instruction(self, i):
        if not 0 <= i < len(self.lig_kern):
            raise TFMFormatError(f"{self.name}: lig/kern index {i} out of range")
        return self.lig_kern[i]

    # -- dimensions --------------------------------------------------------

    def char_width(self, code: int) -> int:
        """Width of ``code`` in DVI units; 0 for missing characters."""
        info = self._info(code)
        if info is None:
            return 0
        return scale_fix_word(self.widths[info.width_index], self.scaled_size)

    def char_height(self, code: int) -> int:
        info = self._info(code)
        if info is None:
            return 0
        return scale_fix_word(self.heights[info.height_index], self.scaled_size)

    def char_depth(self, code: int) -> int:
        info = self._info(code)
        if info is None:
            return 0
        return scale_fix_word(self.depths[info.depth_index], self.scaled_size)

    def param(self, number: int) -> int:
        """Parameter ``number`` (1-based) in DVI units; 0 when absent.

        Parameter 1 (slant) is a pure number and is returned unscaled as a
        raw fix_word.
        """
        if not 1 <= number <= len(self.params):
            return 0
        raw = self.params[number - 1]
        if number == PARAM_SLANT:
            return raw
        return scale_fix_word(raw, self.scaled_size)

    def slant(self) -> float:
        return fix_word_to_float(self.param(PARAM_SLANT))

    def space(self) -> int:
        return self.param(PARAM_SPACE)

    def space_stretch(self) -> int:
        return self.param(PARAM_SPACE_STRETCH)

    def space_shrink(self) -> int:
        return self.param(PARAM_SPACE_SHRINK)

    def x_height(self) -> int:
        return self.param(PARAM_X_HEIGHT)

    def quad(self) -> int:
        return self.param(PARAM_QUAD)

    em_width = quad

    def extra_space(self) -> int:
        return self.param(PARAM_EXTRA_SPACE)

    def at_size(self, size: float) -> "TFMMetrics":
        """Return the same metrics loaded at ``size`` points."""
        return TFMMetrics(
            self.name, self._checksum, self.design_size, self.bc, self.ec,
            self.char_info, self.widths, self.heights, self.depths,
            self.italics, self.lig_kern, self.kerns, self.params, size=size)

    def describe(self) -> dict:
        """Summary used by ``dviwriter fonts``."""
        return {
            "name": self.name,
            "checksum": self._checksum,
            "design_size": self.design_size,
            "font_size": self.font_size,
            "chars": sum(1 for c in range(self.bc, self.ec + 1) if self.has_char(c)),
            "space": from_scaled(self.space()),
            "x_height": from_scaled(self.x_height()),
            "quad": from_scaled(self.quad()),
        }


def _words(data, offset, count, fmt=">i"):
    return [struct.unpack_from(fmt, data, offset + 4 * k)[0] for k in range(count)]


def parse_tfm(data: bytes, *, name: str, size: float | None = None) -> TFMMetrics:
    """Parse TFM ``data``; ``size`` in points defaults to the design size."""
    if len(data) < 24:
        raise TFMFormatError(f"{name}: file too short ({len(data)} bytes)")
    lf, lh, bc, ec, nw, nh, nd, ni, nl, nk, ne, np_ = struct.unpack_from(">12H", data, 0)

    if not (bc - 1 <= ec <= 255) or bc > 256:
        raise TFMFormatError(f"{name}: bad character range {bc}..{ec}")
    nc = ec - bc + 1
    if lh < 2:
        raise TFMFormatError(f"{name}: header must hold at least 2 words")
    if lf != 6 + lh + nc + nw + nh + nd + ni + nl + nk + ne + np_:
        raise TFMFormatError(f"{name}: inconsistent table lengths")
    if len(data) < 4 * lf:
        raise TFMFormatError(f"{name}: truncated ({len(data)} of {4 * lf} bytes)")
    if nw == 0 or nh == 0 or nd == 0 or ni == 0:
        raise TFMFormatError(f"{name}: width/height/depth/italic tables must be non-empty")

    offset = 24
    checksum = struct.unpack_from(">I", data, offset)[0]
    design_raw = struct.unpack_from(">i", data, offset + 4)[0]
    if design_raw < 1 << 20:
        raise TFMFormatError(f"{name}: design size below 1pt")
    design_size = fix_word_to_float(design_raw)
    offset += 4 * lh

    char_info = []
    for k in range(nc):
        b0, b1, b2, b3 = struct.unpack_from(">4B", data, offset + 4 * k)
        info = CharInfo(b0, b1 >> 4, b1 & 0x0F, b2 >> 2, b2 & 0x03, b3)
        if info.width_index >= nw or info.height_index >= nh \
                or info.depth_index >= nd or info.italic_index >= ni:
            raise TFMFormatError(f"{name}: char {bc + k} indexes past a dimension table")
        char_info.append(info)
    offset += 4 * nc

    widths = _words(data, offset, nw)
    offset += 4 * nw
    heights = _words(data, offset, nh)
    offset += 4 * nh
    depths = _words(data, offset, nd)
    offset += 4 * nd
    italics = _words(data, offset, ni)
    offset += 4 * ni

    lig_kern = [LigKern(*struct.unpack_from(">4B", data, offset + 4 * k)) for k in range(nl)]
    offset += 4 * nl
    kerns = _words(data, offset, nk)
    offset += 4 * nk
    offset += 4 * ne
    params = _words(data, offset, np_)

    logger.debug("parsed %s: checksum=%08X design=%gpt chars=%d..%d lig/kern=%d",
                 name, checksum, design_size, bc, ec, nl)
    return TFMMetrics(name, checksum, design_size, bc, ec, char_info, widths,
                      heights, depths, italics, lig_kern, kerns, params, size=size)


def load_tfm(path, *, size: float | None = None, name: str | None = None) -> TFMMetrics:
    """Read and parse the TFM file at ``path``.

    ``name`` defaults to the file's stem, which is what DVI consumers use to
    locate the font.
    """
    path = Path(path)
    data = path.read_bytes()
    return parse_tfm(data, name=name or path.stem, size=size)


__all__ = [
    "CharInfo",
    "LigKern",
    "Ligature",
    "TFMMetrics",
    "parse_tfm",
    "load_tfm",
]
