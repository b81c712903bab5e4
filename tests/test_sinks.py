"""Tests for the file and in-memory byte sinks."""

from __future__ import annotations

from pathlib import Path

import pytest

from dviwriter import BufferSink, DviWriter, FileSink
from dviwriter.io.sinks import ByteSink
from dviwriter.utils.errors import SinkOpenError, SinkWriteError


def test_file_sink_creates_parent_dirs(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "dir" / "out.dvi"
    sink = FileSink(path)
    sink.append(b"\xf7\x02")
    sink.close()
    assert path.read_bytes() == b"\xf7\x02"


def test_open_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(SinkOpenError):
        FileSink(blocker / "out.dvi")
    with pytest.raises(OSError):
        DviWriter.open(blocker / "out.dvi")


def test_append_after_close(tmp_path: Path) -> None:
    sink = FileSink(tmp_path / "out.dvi")
    sink.close()
    with pytest.raises(SinkWriteError):
        sink.append(b"x")


def test_buffer_sink() -> None:
    sink = BufferSink()
    assert isinstance(sink, ByteSink)
    sink.append(b"ab")
    sink.append(b"c")
    assert sink.getvalue() == b"abc"
    sink.close()
    with pytest.raises(SinkWriteError):
        sink.append(b"d")


def test_writer_context_closes_sink() -> None:
    sink = BufferSink()
    with DviWriter(sink) as dvi:
        dvi.preamble(comment="")
    assert sink.closed
