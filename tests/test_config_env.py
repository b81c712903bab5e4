from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from dviwriter import BufferSink, DviWriter
from dviwriter.config import deep_merge_dicts, load_config


def test_env_comment(monkeypatch: Any) -> None:
    monkeypatch.setenv("DVIWRITER_COMMENT", "from env")
    cfg = load_config()
    assert cfg.preamble.comment == "from env"


def test_custom_env_override(monkeypatch: Any, tmp_path: Path) -> None:
    cfg_file = tmp_path / "cfg.yml"
    cfg_file.write_text('preamble:\n  comment_env: "CUSTOM_ENV"\nunits:\n  mag: 2000\n')
    monkeypatch.setenv("CUSTOM_ENV", "custom")
    cfg = load_config(cfg_file)
    assert cfg.preamble.comment_env == "CUSTOM_ENV"
    assert cfg.preamble.comment == "custom"
    assert cfg.units.mag == 2000
    assert cfg.units.num == 25400000


def test_unknown_keys_rejected(tmp_path: Path) -> None:
    cfg_file = tmp_path / "bad.yml"
    cfg_file.write_text("units:\n  scale: 3\n")
    with pytest.raises(ValidationError):
        load_config(cfg_file, env={})


def test_non_positive_units_rejected(tmp_path: Path) -> None:
    cfg_file = tmp_path / "bad.yml"
    cfg_file.write_text("units:\n  den: 0\n")
    with pytest.raises(ValidationError):
        load_config(cfg_file, env={})


def test_deep_merge_dicts() -> None:
    a = {"x": {"y": 1, "z": 2}, "k": 1}
    b = {"x": {"z": 3}, "n": 4}
    assert deep_merge_dicts(a, b) == {"x": {"y": 1, "z": 3}, "k": 1, "n": 4}
    assert a == {"x": {"y": 1, "z": 2}, "k": 1}


def test_writer_from_config(tmp_path: Path) -> None:
    cfg_file = tmp_path / "cfg.yml"
    cfg_file.write_text("units:\n  mag: 1200\npostamble:\n  max_width: 42\n  pad_to_word: false\n")
    cfg = load_config(cfg_file, env={"DVIWRITER_COMMENT": "cfg"})
    sink = BufferSink()
    dvi = DviWriter.from_config(sink, cfg)
    dvi.preamble()
    dvi.postamble()
    data = sink.getvalue()
    assert data[10:14] == (1200).to_bytes(4, "big")
    assert data[14:18] == b"\x03cfg"
    assert dvi.max_width == 42
    assert data.endswith(b"\xdf" * 4)
    assert not data.endswith(b"\xdf" * 5)
