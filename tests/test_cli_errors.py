from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from dviwriter.cli import app


def test_missing_script(tmp_path: Path) -> None:
    out = tmp_path / "out.dvi"
    missing = tmp_path / "missing.yml"
    runner = CliRunner()
    result = runner.invoke(app, ["build", str(missing), "--out", str(out)])
    assert result.exit_code == 3
    assert str(missing) in result.stderr
    assert not out.exists()


def test_unwritable_output(tmp_path: Path) -> None:
    script = tmp_path / "doc.yml"
    script.write_text("pages: []\n", encoding="utf-8")
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(app, ["build", str(script), "--out", str(blocker / "out.dvi")])
    assert result.exit_code == 3


def test_bad_config(tmp_path: Path) -> None:
    script = tmp_path / "doc.yml"
    script.write_text("pages: []\n", encoding="utf-8")
    bad_cfg = tmp_path / "bad.yml"
    bad_cfg.write_text("unknown: true\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(
        app, ["build", str(script), "--out", str(tmp_path / "out.dvi"), "--config", str(bad_cfg)]
    )
    assert result.exit_code == 4


def test_malformed_script_removes_output(tmp_path: Path) -> None:
    script = tmp_path / "doc.yml"
    script.write_text("pages:\n  - - pop\n", encoding="utf-8")
    out = tmp_path / "out.dvi"
    runner = CliRunner()
    result = runner.invoke(app, ["build", str(script), "--out", str(out)])
    assert result.exit_code == 5
    assert "pop without matching push" in result.stderr
    assert not out.exists()


def test_missing_tfm(tmp_path: Path) -> None:
    script = tmp_path / "doc.yml"
    script.write_text("fonts:\n  - name: nofont\n    tfm: nofont.tfm\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(app, ["build", str(script), "--out", str(tmp_path / "out.dvi")])
    assert result.exit_code == 3


def test_fonts_bad_file(tmp_path: Path) -> None:
    bad = tmp_path / "bad.tfm"
    bad.write_bytes(b"\x00" * 8)
    runner = CliRunner()
    result = runner.invoke(app, ["fonts", str(bad)])
    assert result.exit_code == 5
    result = runner.invoke(app, ["fonts", str(tmp_path / "font.pl")])
    assert result.exit_code == 3


def test_non_ascii_font_name(tmp_path: Path) -> None:
    script = tmp_path / "doc.yml"
    script.write_text('fonts:\n  - name: "fé"\n', encoding="utf-8")
    out = tmp_path / "out.dvi"
    runner = CliRunner()
    result = runner.invoke(app, ["build", str(script), "--out", str(out)])
    assert result.exit_code == 5
    assert "ASCII" in result.stderr
    assert not out.exists()
