"""Low-level byte emitter.

A record is described as a sequence of typed fields: :class:`Field` for 1, 2,
3 or 4 byte big-endian integers (two's complement when signed) and
:class:`Blob` for raw bytes.  :meth:`Emitter.write` serializes one record into
a contiguous buffer, appends it to the sink and advances ``total_length``.

Field values are range checked before anything reaches the sink, so a
:class:`~dviwriter.utils.errors.FieldRangeError` never leaves a partial record
behind.  Sink failures are fatal: the attempted length is counted, the emitter
is marked failed and later writes are refused.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from dviwriter.io.sinks import ByteSink
from dviwriter.utils.errors import FieldRangeError, SinkWriteError
from dviwriter.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class Field:
    """Fixed-width integer field."""

    width: int
    signed: bool
    value: int

    def __post_init__(self) -> None:
        if self.width not in (1, 2, 3, 4):
            raise FieldRangeError(f"unsupported field width {self.width}")
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise FieldRangeError(f"field value must be an integer, got {self.value!r}")

    def encode(self) -> bytes:
        """Return the big-endian encoding of ``value``."""

        try:
            return self.value.to_bytes(self.width, "big", signed=self.signed)
        except OverflowError:
            kind = "signed" if self.signed else "unsigned"
            raise FieldRangeError(
                f"{self.value} does not fit a {self.width}-byte {kind} field"
            ) from None


@dataclass(slots=True, frozen=True)
class Blob:
    """Raw bytes copied verbatim."""

    data: bytes

    def encode(self) -> bytes:
        return bytes(self.data)


RecordField = Union[Field, Blob]


def u1(value: int) -> Field:
    return Field(1, False, value)


def u2(value: int) -> Field:
    return Field(2, False, value)


def s4(value: int) -> Field:
    return Field(4, True, value)


def u4(value: int) -> Field:
    return Field(4, False, value)


def uint(width: int, value: int) -> Field:
    return Field(width, False, value)


def encode_fields(fields: Iterable[RecordField]) -> bytes:
    """Serialize ``fields`` into one buffer."""

    return b"".join(f.encode() for f in fields)


class Emitter:
    """Append encoded records to a :class:`~dviwriter.io.sinks.ByteSink`."""

    def __init__(self, sink: ByteSink) -> None:
        self.sink = sink
        self.total_length = 0
        self.failed = False

    def write(self, *fields: RecordField) -> int:
        """Encode ``fields`` as one record and append it.

        Returns the offset at which the record starts.

        Raises
        ------
        FieldRangeError
            If a value does not fit its field; nothing is written.
        SinkWriteError
            If the sink rejected the bytes now or in an earlier call.
        """

        if self.failed:
            raise SinkWriteError("output sink failed earlier; document is unusable")
        buf = encode_fields(fields)
        start = self.total_length
        self.total_length += len(buf)
        try:
            self.sink.append(buf)
        except OSError as exc:
            self.failed = True
            logger.error("write of %d bytes at offset %d failed: %s", len(buf), start, exc)
            if isinstance(exc, SinkWriteError):
                raise
            raise SinkWriteError(str(exc)) from exc
        return start


__all__ = [
    "Field",
    "Blob",
    "RecordField",
    "u1",
    "u2",
    "u4",
    "s4",
    "uint",
    "encode_fields",
    "Emitter",
]
