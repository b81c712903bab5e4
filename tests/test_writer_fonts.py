"""Tests for font registration, definition records and font selection."""

from __future__ import annotations

import pytest

from dviwriter import BufferSink, DviWriter, PlainMetrics
from dviwriter.dvi.fonts import FontDescriptor, id_width, select_fields
from dviwriter.dvi.emitter import encode_fields
from dviwriter.utils.errors import FieldRangeError, UnknownFontError

from dvi_decode import decode


def test_font_def_bytes(writer: DviWriter, sink: BufferSink, plain_font: PlainMetrics) -> None:
    assert writer.font_def(plain_font) == 0
    record = sink.getvalue()[19:]
    assert record == (
        b"\xf3\x00"
        + (0x4BF16079).to_bytes(4, "big")
        + (10 * 65536).to_bytes(4, "big")
        + (10 * 65536).to_bytes(4, "big")
        + b"\x00\x05cmr10"
    )


def test_sizes_are_scaled(writer: DviWriter, sink: BufferSink) -> None:
    writer.font_def(PlainMetrics("cmbx12", checksum=1, font_size=14.4, design_size=12.0))
    (_, font_def) = decode(sink.getvalue())
    assert font_def.args == (0, 1, round(14.4 * 65536), 12 * 65536, "cmbx12")


def test_ids_follow_registration_order(writer: DviWriter, sink: BufferSink) -> None:
    ids = [writer.font_def(PlainMetrics(f"f{i}", checksum=i)) for i in range(5)]
    assert ids == [0, 1, 2, 3, 4]
    defs = [rec for rec in decode(sink.getvalue()) if rec.name == "fnt_def"]
    assert [(rec.args[0], rec.args[4]) for rec in defs] == [(i, f"f{i}") for i in range(5)]


def test_postamble_repeats_definitions_verbatim(writer: DviWriter, sink: BufferSink) -> None:
    inline = []
    for i in range(3):
        start = writer.total_length
        writer.font_def(PlainMetrics(f"font{i}", checksum=0xDEADBEEF - i, font_size=9 + i))
        inline.append(sink.getvalue()[start : writer.total_length])
    writer.begin_page()
    writer.end_page()
    writer.postamble()

    data = sink.getvalue()
    post = next(rec for rec in decode(data) if rec.name == "post")
    repeated = data[post.offset + 29 :]
    for record in inline:
        assert repeated.startswith(record)
        repeated = repeated[len(record) :]
    assert repeated[0] == 249


def test_font_select_opcode(writer: DviWriter, sink: BufferSink, plain_font: PlainMetrics) -> None:
    writer.font_def(plain_font)
    start = writer.total_length
    writer.font(0)
    assert sink.getvalue()[start:] == bytes([171])
    assert writer.current_font.name == "cmr10"


def test_select_encodings() -> None:
    assert encode_fields(select_fields(0)) == b"\xab"
    assert encode_fields(select_fields(63)) == b"\xea"
    assert encode_fields(select_fields(64)) == b"\xeb\x40"
    assert encode_fields(select_fields(300)) == b"\xec\x01\x2c"


def test_id_width() -> None:
    assert [id_width(v) for v in (0, 255, 256, 65536, 1 << 24)] == [1, 1, 2, 3, 4]
    with pytest.raises(FieldRangeError):
        id_width(-1)


def test_extended_select_above_63(writer: DviWriter, sink: BufferSink) -> None:
    for i in range(65):
        writer.font_def(PlainMetrics(f"f{i}"))
    start = writer.total_length
    writer.font(64)
    assert sink.getvalue()[start:] == b"\xeb\x40"
    assert decode(sink.getvalue())[-1].args == (64,)


def test_unknown_font_rejected(writer: DviWriter, plain_font: PlainMetrics) -> None:
    writer.font_def(plain_font)
    length = writer.total_length
    with pytest.raises(UnknownFontError):
        writer.font(1)
    with pytest.raises(UnknownFontError):
        writer.font(-1)
    assert writer.total_length == length


def test_descriptor_registration(writer: DviWriter, sink: BufferSink) -> None:
    descriptor = FontDescriptor("manual", checksum=7, scaled_size=655360, design_size=655360)
    assert writer.font_def(descriptor) == 0
    assert decode(sink.getvalue())[-1].args == (0, 7, 655360, 655360, "manual")


def test_failed_definition_does_not_consume_id(writer: DviWriter) -> None:
    with pytest.raises(FieldRangeError):
        writer.font_def(PlainMetrics("bad", checksum=-1))
    assert writer.font_def(PlainMetrics("good")) == 0


def test_non_ascii_name_rejected(writer: DviWriter, sink: BufferSink) -> None:
    before = sink.getvalue()
    with pytest.raises(FieldRangeError):
        writer.font_def(PlainMetrics("cmré10"))
    with pytest.raises(FieldRangeError):
        FontDescriptor("fé", checksum=0, scaled_size=655360, design_size=655360)
    assert sink.getvalue() == before
    assert writer.font_def(PlainMetrics("cmr10")) == 0
