from __future__ import annotations

from pathlib import Path

import pytest

from dviwriter import BufferSink, DviWriter, PlainMetrics
from tfm_fixture import build_tfm


@pytest.fixture
def sink() -> BufferSink:
    return BufferSink()


@pytest.fixture
def writer(sink: BufferSink) -> DviWriter:
    """Writer with a fixed four-byte comment already past its preamble."""

    dvi = DviWriter(sink)
    dvi.preamble(comment="test")
    return dvi


@pytest.fixture
def plain_font() -> PlainMetrics:
    return PlainMetrics("cmr10", checksum=0x4BF16079, font_size=10.0)


@pytest.fixture
def tfm_path(tmp_path: Path) -> Path:
    path = tmp_path / "testfont.tfm"
    path.write_bytes(build_tfm())
    return path
