"""Tests for glyph-run escaping and word encoding."""

from __future__ import annotations

from pathlib import Path

import pytest

from dviwriter import BufferSink, DviWriter, PlainMetrics, load_metrics
from dviwriter.dvi.typeset import escape_run, iter_expansion
from dviwriter.utils.errors import MetricsError, NoFontSelectedError

from dvi_decode import decode
from tfm_fixture import KERN


class ScriptedMetrics(PlainMetrics):
    """Returns a fixed expansion regardless of the text."""

    def __init__(self, expansion: list[bytes | int]) -> None:
        super().__init__("scripted")
        self.expansion = expansion

    def expand(self, text: str | bytes) -> list[bytes | int]:
        return list(self.expansion)


def test_escape_run() -> None:
    assert escape_run(b"\xc0") == b"\x80\xc0"
    assert escape_run(b"abc") == b"abc"
    assert escape_run(b"a\x80b\xffc\x7f") == b"a\x80\x80b\x80\xffc\x7f"
    assert escape_run(b"") == b""


def test_iter_expansion_pairs() -> None:
    assert list(iter_expansion([b"A", -3, b"V"])) == [(b"A", -3), (b"V", None)]
    assert list(iter_expansion([b"x"])) == [(b"x", None)]


@pytest.mark.parametrize(
    "expansion",
    [[], [b"A", 1], [1, b"A", 2], [b"A", b"B", b"C"], [b"A", True, b"B"], ["A"]],
)
def test_iter_expansion_rejects_malformed(expansion: list[object]) -> None:
    with pytest.raises(MetricsError):
        list(iter_expansion(expansion))  # type: ignore[arg-type]


def test_word_writes_raw_glyphs(writer: DviWriter, sink: BufferSink, plain_font: PlainMetrics) -> None:
    writer.font(writer.font_def(plain_font))
    start = writer.total_length
    writer.word("Hello")
    assert sink.getvalue()[start:] == b"Hello"


def test_word_escapes_high_codes(writer: DviWriter, sink: BufferSink, plain_font: PlainMetrics) -> None:
    writer.font(writer.font_def(plain_font))
    start = writer.total_length
    writer.word("Àaé")
    assert sink.getvalue()[start:] == b"\x80\xc0a\x80\xe9"


def test_word_interleaves_kerns(writer: DviWriter, sink: BufferSink) -> None:
    writer.font(writer.font_def(ScriptedMetrics([b"A", -100, b"V\xc0", 7, b"A"])))
    start = writer.total_length
    writer.word("ignored")
    assert sink.getvalue()[start:] == (
        b"A" + b"\x92" + (-100).to_bytes(4, "big", signed=True)
        + b"V\x80\xc0" + b"\x92" + (7).to_bytes(4, "big") + b"A"
    )


def test_empty_word_writes_nothing(writer: DviWriter, plain_font: PlainMetrics) -> None:
    writer.font(writer.font_def(plain_font))
    length = writer.total_length
    writer.word("")
    writer.word(b"")
    assert writer.total_length == length


def test_word_before_font_selection(writer: DviWriter, plain_font: PlainMetrics) -> None:
    writer.font_def(plain_font)
    length = writer.total_length
    with pytest.raises(NoFontSelectedError):
        writer.word("x")
    assert writer.total_length == length


def test_word_uses_most_recent_font(writer: DviWriter, sink: BufferSink, plain_font: PlainMetrics) -> None:
    first = writer.font_def(plain_font)
    second = writer.font_def(ScriptedMetrics([b"z"]))
    writer.font(second)
    writer.font(first)
    start = writer.total_length
    writer.word("ab")
    assert sink.getvalue()[start:] == b"ab"


def test_word_rejects_wide_characters(writer: DviWriter, plain_font: PlainMetrics) -> None:
    writer.font(writer.font_def(plain_font))
    with pytest.raises(MetricsError):
        writer.word("—")


def test_word_with_tfm_kerning(writer: DviWriter, sink: BufferSink, tfm_path: Path) -> None:
    writer.font(writer.font_def(load_metrics(tfm_path)))
    start = writer.total_length
    writer.word("AVA")
    kern = (KERN * 10 * 65536) // (1 << 20)
    records = decode(sink.getvalue()[start:])
    assert [(rec.name, rec.args) for rec in records] == [
        ("char", (65,)),
        ("right", (kern,)),
        ("char", (86,)),
        ("right", (kern,)),
        ("char", (65,)),
    ]


def test_word_with_tfm_ligature(writer: DviWriter, sink: BufferSink, tfm_path: Path) -> None:
    writer.font(writer.font_def(load_metrics(tfm_path)))
    start = writer.total_length
    writer.word("office")
    assert sink.getvalue()[start:] == b"o\x0ece"
