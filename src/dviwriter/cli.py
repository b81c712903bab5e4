"""Typer-based command line interface.

``dviwriter build`` replays a YAML document script (see :mod:`dviwriter.script`)
into a DVI file.  ``dviwriter fonts`` prints what the writer would record for
one or more TFM files.

Exit codes
----------
0 success
3 I/O error (missing input, unwritable output, sink failure)
4 configuration error
5 document error (malformed script, usage or font metrics error)
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer
import yaml
from pydantic import ValidationError

from .config import ConfigModel, load_config
from .dvi.writer import DviWriter
from .io import FileSink, load_metrics
from .script import ScriptResult, load_script, run_script
from .utils.errors import (
    FieldRangeError,
    MetricsError,
    ScriptError,
    SinkError,
    UnsupportedFormatError,
    UsageError,
)
from .utils.logging import configure_logging

if not sys.stdout.isatty():  # pragma: no cover - CLI test context
    os.environ.setdefault("NO_COLOR", "1")
    os.environ.setdefault("RICH_DISABLE_NO_COLOR", "1")

app = typer.Typer(
    name="dviwriter",
    help="Write DVI files. Use 'dviwriter build' to turn a document script into a .dvi file.",
)

EXIT_IO = 3
EXIT_CONFIG = 4
EXIT_DOCUMENT = 5

_DOCUMENT_ERRORS = (ScriptError, UsageError, MetricsError, FieldRangeError)
_IO_ERRORS = (SinkError, UnsupportedFormatError, OSError)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _safe_exit(code: int, msg: str | None = None) -> NoReturn:
    """Exit the CLI with ``code`` emitting ``msg`` to stderr if provided."""

    if msg:
        typer.echo(msg, err=True)
    raise typer.Exit(code)


def _load_cfg(config_path: Path | None) -> ConfigModel:
    try:
        return load_config(config_path)
    except (ValidationError, yaml.YAMLError, OSError) as exc:
        _safe_exit(EXIT_CONFIG, str(exc).splitlines()[0])


def _build(script_path: Path, out_path: Path, cfg: ConfigModel, comment: str | None) -> ScriptResult:
    """Replay the script into ``out_path``; a partial output file is removed on failure."""

    data = load_script(script_path)
    sink = FileSink(out_path)
    try:
        with DviWriter.from_config(sink, cfg) as writer:
            return run_script(data, writer, base_dir=script_path.parent, comment=comment)
    except Exception:
        out_path.unlink(missing_ok=True)
        raise


@app.callback()
def main() -> None:
    """Entry point for the dviwriter command group."""
    pass


@app.command()
def build(
    script_path: Path = typer.Argument(..., help="YAML document script"),  # noqa: B008
    out_path: Path = typer.Option(..., "--out", "-o", help="Output .dvi file"),  # noqa: B008
    config_path: Optional[Path] = typer.Option(  # noqa: B008
        None, "--config", help="YAML config to override defaults"
    ),
    comment: Optional[str] = typer.Option(  # noqa: B008
        None, "--comment", help="Preamble comment (default: generator name and time)"
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False, "--verbose", "-v", help="Log progress to stderr"
    ),
) -> None:
    """Replay ``script_path`` into the DVI file ``out_path``."""

    configure_logging(verbose)
    cfg = _load_cfg(config_path)

    try:
        result = _build(script_path, out_path, cfg, comment)
    except _DOCUMENT_ERRORS as exc:
        _safe_exit(EXIT_DOCUMENT, str(exc))
    except _IO_ERRORS as exc:
        _safe_exit(EXIT_IO, str(exc))

    if verbose:
        typer.echo(
            f"Wrote {result.pages} page(s), {result.fonts} font(s), "
            f"{result.total_length} bytes to {out_path}",
            err=True,
        )


@app.command()
def fonts(
    tfm_paths: list[Path] = typer.Argument(..., help="TFM files"),  # noqa: B008
    size: Optional[float] = typer.Option(  # noqa: B008
        None, "--size", help="Load at this size in points (default: design size)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Emit one JSON object per font"),  # noqa: B008
) -> None:
    """Print checksum, sizes and spacing parameters of TFM files."""

    for path in tfm_paths:
        try:
            metrics = load_metrics(path, size=size)
        except MetricsError as exc:
            _safe_exit(EXIT_DOCUMENT, str(exc))
        except (UnsupportedFormatError, OSError) as exc:
            _safe_exit(EXIT_IO, str(exc))
        info = metrics.describe()  # type: ignore[attr-defined]
        if as_json:
            typer.echo(json.dumps(info, sort_keys=True))
        else:
            typer.echo(
                f"{info['name']}: checksum={info['checksum']:08X} "
                f"design={info['design_size']:g}pt size={info['font_size']:g}pt "
                f"chars={info['chars']} space={info['space']:g}pt "
                f"x_height={info['x_height']:g}pt quad={info['quad']:g}pt"
            )
