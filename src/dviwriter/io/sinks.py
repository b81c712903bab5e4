"""Byte sinks for DVI output.

A sink only has to append bytes and report failure.  :class:`FileSink` writes
to a file opened once at construction; :class:`BufferSink` keeps everything in
memory.  Both raise :class:`~dviwriter.utils.errors.SinkWriteError` when an
append cannot be completed.
"""

from __future__ import annotations

import io
import os
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable

from dviwriter.utils.errors import SinkOpenError, SinkWriteError

PathLikeStr = os.PathLike[str]


@runtime_checkable
class ByteSink(Protocol):
    """Protocol for append-only byte destinations."""

    def append(self, data: bytes) -> None:
        """Append ``data`` or raise :class:`SinkWriteError`."""

        ...

    def close(self) -> None:
        """Release the underlying resource."""

        ...


class FileSink:
    """Append bytes to a file opened for binary writing.

    Parent directories are created with ``exist_ok=True``.

    Raises
    ------
    SinkOpenError
        If the file cannot be opened.
    """

    def __init__(self, path: str | PathLikeStr) -> None:
        self.path = Path(path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh: BinaryIO = open(self.path, "wb")
        except OSError as exc:
            raise SinkOpenError(f"cannot open '{self.path}' for writing: {exc}") from exc

    def append(self, data: bytes) -> None:
        if self._fh.closed:
            raise SinkWriteError(f"'{self.path}' is closed")
        try:
            written = self._fh.write(data)
        except OSError as exc:
            raise SinkWriteError(f"write to '{self.path}' failed: {exc}") from exc
        if written is not None and written != len(data):
            raise SinkWriteError(
                f"short write to '{self.path}': {written} of {len(data)} bytes"
            )

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()


class BufferSink:
    """In-memory sink; :meth:`getvalue` returns everything appended so far."""

    def __init__(self) -> None:
        self._buf = io.BytesIO()
        self.closed = False

    def append(self, data: bytes) -> None:
        if self.closed:
            raise SinkWriteError("buffer sink is closed")
        self._buf.write(data)

    def getvalue(self) -> bytes:
        return self._buf.getvalue()

    def close(self) -> None:
        self.closed = True


def open_sink(path: str | PathLikeStr) -> FileSink:
    """Open ``path`` as a :class:`FileSink`."""

    return FileSink(path)


__all__ = ["PathLikeStr", "ByteSink", "FileSink", "BufferSink", "open_sink"]
