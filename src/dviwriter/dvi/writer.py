"""DVI document writer.

:class:`DviWriter` owns one byte sink and the state needed to keep the
stream's cross-record invariants: the running byte offset, the backward chain
of page offsets, font id assignment and the push/pop depth.  Callers emit
records in document order::

    with DviWriter.open("out.dvi") as dvi:
        dvi.preamble()
        font = dvi.font_def(load_metrics("cmr10.tfm", size=12))
        dvi.begin_page()
        dvi.push()
        dvi.font(font)
        dvi.word("difficulty")
        dvi.pop()
        dvi.end_page()
        dvi.postamble()

Every well-formed call sequence produces the reference byte stream.  Misuse
(records before the preamble, ``word`` without a selected font, unbalanced
pages or stack, anything after the postamble) raises a
:class:`~dviwriter.utils.errors.UsageError` subclass before any byte of the
offending record is written.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Sequence

from dviwriter.io.sinks import ByteSink, open_sink
from dviwriter.metrics.base import FontMetrics
from dviwriter.utils.datefmt import default_comment
from dviwriter.utils.errors import (
    FieldRangeError,
    MetricsError,
    NoFontSelectedError,
    PageStateError,
    StackBalanceError,
    StackUnderflowError,
    UsageError,
    WriterFinalizedError,
)
from dviwriter.utils.logging import get_logger

from . import opcodes as op
from .emitter import Blob, Emitter, encode_fields, s4, u1, u2, u4
from .fonts import FontDescriptor, FontTable, definition_fields, select_fields
from .typeset import escape_run, iter_expansion

if TYPE_CHECKING:
    from dviwriter.config import ConfigModel

logger = get_logger(__name__)

DEFAULT_COMMENT_PREFIX = "dviwriter output"


@dataclass(slots=True)
class WriterState:
    """Mutable bookkeeping of one document."""

    page_number: int = 0
    previous_page_offset: int = op.NO_PAGE
    stack_depth: int = 0
    max_stack_depth: int = 0
    current_font_id: int | None = None
    in_page: bool = False
    preamble_written: bool = False
    finalized: bool = False
    postamble_offset: int | None = None


class DviWriter:
    """Write a DVI stream record by record.

    Parameters
    ----------
    sink:
        Destination for the bytes.
    num, den, mag:
        Unit numerator, denominator and magnification written to the preamble
        and postamble.
    comment_prefix:
        Prefix of the default preamble comment (followed by a GMT timestamp).
    max_height_depth, max_width:
        Values recorded in the postamble for the tallest and widest page.
        The writer does not measure pages.
    pad_to_word:
        Pad the trailer so the file length is a multiple of four.
    """

    def __init__(
        self,
        sink: ByteSink,
        *,
        num: int = op.NUM,
        den: int = op.DEN,
        mag: int = op.MAG,
        comment_prefix: str = DEFAULT_COMMENT_PREFIX,
        comment: str | None = None,
        max_height_depth: int = op.PLACEHOLDER_EXTENT,
        max_width: int = op.PLACEHOLDER_EXTENT,
        pad_to_word: bool = True,
    ) -> None:
        self.sink = sink
        self.emitter = Emitter(sink)
        self.state = WriterState()
        self.fonts = FontTable()
        self.num = num
        self.den = den
        self.mag = mag
        self.comment_prefix = comment_prefix
        self.comment = comment
        self.max_height_depth = max_height_depth
        self.max_width = max_width
        self.pad_to_word = pad_to_word

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def open(cls, path: str | os.PathLike[str], **kwargs: object) -> "DviWriter":
        """Open ``path`` for writing.

        Raises
        ------
        SinkOpenError
            If the file cannot be opened; no writer is created.
        """

        return cls(open_sink(path), **kwargs)  # type: ignore[arg-type]

    @classmethod
    def from_config(cls, sink: ByteSink, cfg: "ConfigModel") -> "DviWriter":
        """Create a writer using the units, comment and postamble settings of ``cfg``."""

        return cls(
            sink,
            num=cfg.units.num,
            den=cfg.units.den,
            mag=cfg.units.mag,
            comment_prefix=cfg.preamble.comment_prefix,
            comment=cfg.preamble.comment,
            max_height_depth=cfg.postamble.max_height_depth,
            max_width=cfg.postamble.max_width,
            pad_to_word=cfg.postamble.pad_to_word,
        )

    def close(self) -> None:
        self.sink.close()

    def __enter__(self) -> "DviWriter":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def total_length(self) -> int:
        """Number of bytes appended so far."""

        return self.emitter.total_length

    @property
    def page_number(self) -> int:
        return self.state.page_number

    @property
    def stack_depth(self) -> int:
        return self.state.stack_depth

    @property
    def max_stack_depth(self) -> int:
        return self.state.max_stack_depth

    def _check_open(self) -> None:
        if self.state.finalized:
            raise WriterFinalizedError("the postamble has been written; no further records allowed")
        if not self.state.preamble_written:
            raise UsageError("the preamble must be the first record")

    # ------------------------------------------------------------------
    # Preamble
    # ------------------------------------------------------------------

    def preamble(self, comment: str | bytes | None = None) -> None:
        """Write the preamble; it must be the first record.

        ``comment`` defaults to the configured comment or to
        ``"<comment_prefix> D/M/YYYY H:M:S GMT"``.  Comments longer than 255
        bytes are truncated.
        """

        if self.state.finalized:
            raise WriterFinalizedError("the postamble has been written; no further records allowed")
        if self.state.preamble_written or self.total_length:
            raise UsageError("the preamble has already been written")
        if comment is None:
            comment = self.comment or default_comment(self.comment_prefix)
        data = comment.encode("utf-8") if isinstance(comment, str) else bytes(comment)
        if len(data) > op.MAX_COMMENT:
            logger.warning("preamble comment truncated from %d to %d bytes", len(data), op.MAX_COMMENT)
            data = data[: op.MAX_COMMENT]
        self.emitter.write(
            u1(op.PRE),
            u1(op.DVI_ID),
            u4(self.num),
            u4(self.den),
            u4(self.mag),
            u1(len(data)),
            Blob(data),
        )
        self.state.preamble_written = True

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def begin_page(self, counts: Sequence[int] | None = None) -> int:
        """Start a page and return its number (1-based).

        The record holds ten count values followed by the offset of the
        previous page's ``bop`` (``-1`` for the first page).  ``counts``
        supplies ``count0``..``count9``; by default ``count0`` is the page
        number and the rest are zero.
        """

        self._check_open()
        if self.state.in_page:
            raise PageStateError("begin_page called while a page is open")
        number = self.state.page_number + 1
        if counts is None:
            values = [number] + [0] * (op.COUNT_REGISTERS - 1)
        else:
            if len(counts) > op.COUNT_REGISTERS:
                raise FieldRangeError(f"at most {op.COUNT_REGISTERS} count values, got {len(counts)}")
            values = list(counts) + [0] * (op.COUNT_REGISTERS - len(counts))
        fields = [u1(op.BOP), *(s4(v) for v in values), s4(self.state.previous_page_offset)]
        encode_fields(fields)
        offset = self.total_length
        self.state.page_number = number
        self.state.previous_page_offset = offset
        self.state.in_page = True
        logger.debug("page %d starts at offset %d", number, offset)
        self.emitter.write(*fields)
        return number

    def end_page(self) -> None:
        """Close the current page."""

        self._check_open()
        if not self.state.in_page:
            raise PageStateError("end_page called without an open page")
        if self.state.stack_depth:
            raise StackBalanceError(
                f"page {self.state.page_number} closed with {self.state.stack_depth} unmatched push(es)"
            )
        self.emitter.write(u1(op.EOP))
        self.state.in_page = False

    # ------------------------------------------------------------------
    # Fonts
    # ------------------------------------------------------------------

    def font_def(self, font: FontMetrics | FontDescriptor) -> int:
        """Register ``font``, write its definition and return its id.

        ``font`` is a font-metrics provider or a ready-made
        :class:`~dviwriter.dvi.fonts.FontDescriptor`.
        """

        self._check_open()
        descriptor = font if isinstance(font, FontDescriptor) else FontDescriptor.from_metrics(font)
        font_id = self.fonts.next_id()
        fields = definition_fields(font_id, descriptor)
        self.emitter.write(*fields)
        self.fonts.add(descriptor)
        logger.debug(
            "font %d: %s at %d/%d", font_id, descriptor.name, descriptor.scaled_size, descriptor.design_size
        )
        return font_id

    def font(self, font_id: int) -> None:
        """Select the font registered under ``font_id``."""

        self._check_open()
        self.fonts.get(font_id)
        self.emitter.write(*select_fields(font_id))
        self.state.current_font_id = font_id

    @property
    def current_font(self) -> FontDescriptor:
        """Descriptor of the selected font.

        Raises
        ------
        NoFontSelectedError
            If :meth:`font` has not been called yet.
        """

        if self.state.current_font_id is None:
            raise NoFontSelectedError("no font selected; call font() first")
        return self.fonts.get(self.state.current_font_id)

    # ------------------------------------------------------------------
    # Stack
    # ------------------------------------------------------------------

    def push(self) -> None:
        self._check_open()
        self.emitter.write(u1(op.PUSH))
        self.state.stack_depth += 1
        self.state.max_stack_depth = max(self.state.max_stack_depth, self.state.stack_depth)

    def pop(self) -> None:
        self._check_open()
        if self.state.stack_depth <= 0:
            raise StackUnderflowError("pop without matching push")
        self.emitter.write(u1(op.POP))
        self.state.stack_depth -= 1

    # ------------------------------------------------------------------
    # Movement, rules and specials
    # ------------------------------------------------------------------

    def hskip(self, amount: int) -> int:
        """Move right by ``amount`` (negative moves left); returns ``amount``."""

        self._check_open()
        self.emitter.write(u1(op.RIGHT4), s4(amount))
        return amount

    def vskip(self, amount: int) -> int:
        """Move down by ``amount`` (negative moves up); returns ``amount``."""

        self._check_open()
        self.emitter.write(u1(op.DOWN4), s4(amount))
        return amount

    def black_box(self, width: int = 0, height: int = 0, depth: int = 0) -> None:
        """Draw a solid rule without moving the vertical position.

        Writes ``down depth``, ``set_rule (height + depth) width`` and
        ``down -depth``; ``set_rule`` advances horizontally by ``width``.
        """

        self._check_open()
        # all three records must encode before the first is written
        encode_fields([s4(depth), s4(-depth), s4(height + depth), s4(width)])
        self.vskip(depth)
        self.emitter.write(u1(op.SET_RULE), s4(height + depth), s4(width))
        self.vskip(-depth)

    def special(self, text: str | bytes) -> None:
        """Write ``text`` verbatim as an ``xxx4`` extension command."""

        self._check_open()
        data = text.encode("utf-8") if isinstance(text, str) else bytes(text)
        self.emitter.write(u1(op.XXX4), u4(len(data)), Blob(data))

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def word(self, text: str | bytes) -> None:
        """Typeset ``text`` in the current font.

        The font's metrics expand ``text`` into glyph runs and kerns; runs are
        written as characters and kerns as horizontal skips.  Empty text
        writes nothing.
        """

        self._check_open()
        font = self.current_font
        if not text:
            return
        if font.metrics is None:
            raise MetricsError(f"font {font.name!r} has no metrics to set text with")
        records = list(iter_expansion(font.metrics.expand(text)))
        for run, kern in records:
            if run:
                self.emitter.write(Blob(escape_run(run)))
            if kern is not None:
                self.hskip(kern)

    # ------------------------------------------------------------------
    # Postamble
    # ------------------------------------------------------------------

    def postamble(
        self,
        *,
        max_height_depth: int | None = None,
        max_width: int | None = None,
    ) -> int:
        """Write the postamble, repeated font definitions and trailer.

        Returns the offset of the postamble.  The writer is finalized
        afterwards.
        """

        self._check_open()
        if self.state.in_page:
            raise PageStateError(f"page {self.state.page_number} is still open")
        height = self.max_height_depth if max_height_depth is None else max_height_depth
        width = self.max_width if max_width is None else max_width
        start = self.emitter.write(
            u1(op.POST),
            s4(self.state.previous_page_offset),
            u4(self.num),
            u4(self.den),
            u4(self.mag),
            s4(height),
            s4(width),
            u2(self.state.max_stack_depth),
            u2(self.state.page_number),
        )
        self.state.postamble_offset = start
        for font_id, descriptor in self.fonts:
            self.emitter.write(*definition_fields(font_id, descriptor))
        trailer = op.TRAILER_MIN
        if self.pad_to_word:
            # post_post is 6 bytes before the trailer
            trailer += -(self.total_length + 6 + trailer) % 4
        self.emitter.write(u1(op.POST_POST), s4(start), u1(op.DVI_ID), Blob(bytes([op.TRAILER]) * trailer))
        self.state.finalized = True
        logger.debug(
            "postamble at %d: %d pages, %d fonts, %d bytes total",
            start,
            self.state.page_number,
            len(self.fonts),
            self.total_length,
        )
        return start


__all__ = ["DviWriter", "WriterState", "DEFAULT_COMMENT_PREFIX"]
