"""Document scripts.

A script is a YAML mapping describing fonts and pages; :func:`run_script`
replays it against a :class:`~dviwriter.dvi.writer.DviWriter`, producing a
complete document (preamble, pages, postamble)::

    fonts:
      - name: cmr10
        tfm: fonts/cmr10.tfm      # relative to the script
        size: 12
      - name: cmtt10              # no metrics file: text is set unkerned
        checksum: 0x5D8E2F1A
        size: 10
    pages:
      - - push
        - font: cmr10
        - word: difficulty
        - hskip: 218453
        - rule: {width: 655360, height: 26214}
        - special: "color push gray 0"
        - pop
      - counts: [7]
        commands:
          - word: AVA

Commands are the strings ``push`` and ``pop`` or single-key mappings
``font``, ``word``, ``hskip``, ``vskip``, ``rule`` and ``special``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from dviwriter.dvi.writer import DviWriter
from dviwriter.io import load_metrics
from dviwriter.metrics.base import FontMetrics, PlainMetrics
from dviwriter.utils.errors import ScriptError
from dviwriter.utils.logging import get_logger

logger = get_logger(__name__)

_BARE_COMMANDS = {"push", "pop"}
_MAPPED_COMMANDS = {"font", "word", "hskip", "vskip", "rule", "special"}


@dataclass(frozen=True, slots=True)
class ScriptResult:
    """Summary of a replayed script."""

    pages: int
    fonts: int
    total_length: int
    postamble_offset: int


def load_script(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read a YAML script from ``path``.

    Raises
    ------
    ScriptError
        If the file is not valid YAML or its top level is not a mapping.
    """

    with Path(path).open("r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ScriptError(f"invalid YAML in {path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ScriptError(f"script {path} must be a mapping at the top level")
    return data


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ScriptError(f"{what} must be an integer, got {value!r}")
    return value


def _number(value: Any, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ScriptError(f"{what} must be a number, got {value!r}")
    return float(value)


def _text(value: Any, what: str) -> str:
    if value is None or isinstance(value, (bool, Mapping, list)):
        raise ScriptError(f"{what} must be text, got {value!r}")
    return str(value)


def _list(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ScriptError(f"{what} must be a list")
    return list(value)


def _font_metrics(spec: Any, index: int, base_dir: Path) -> FontMetrics:
    if not isinstance(spec, Mapping):
        raise ScriptError(f"fonts[{index}] must be a mapping")
    unknown = set(spec) - {"name", "tfm", "size", "checksum", "design_size"}
    if unknown:
        raise ScriptError(f"fonts[{index}]: unknown keys {sorted(unknown)}")
    name = spec.get("name")
    if not isinstance(name, str) or not name:
        raise ScriptError(f"fonts[{index}] needs a name")
    size = spec.get("size")
    size_pt = None if size is None else _number(size, f"fonts[{index}].size")
    if "tfm" in spec:
        tfm_path = base_dir / str(spec["tfm"])
        return load_metrics(tfm_path, size=size_pt, name=name)
    design = spec.get("design_size")
    return PlainMetrics(
        name,
        checksum=_int(spec.get("checksum", 0), f"fonts[{index}].checksum"),
        font_size=10.0 if size_pt is None else size_pt,
        design_size=None if design is None else _number(design, f"fonts[{index}].design_size"),
    )


# ---------------------------------------------------------------------------
# Replay
# ---------------------------------------------------------------------------


def _run_command(writer: DviWriter, command: Any, fonts: Mapping[str, int], where: str) -> None:
    if isinstance(command, str):
        if command not in _BARE_COMMANDS:
            raise ScriptError(f"{where}: unknown command {command!r}")
        getattr(writer, command)()
        return
    if not isinstance(command, Mapping) or len(command) != 1:
        raise ScriptError(f"{where}: a command is 'push', 'pop' or a single-key mapping")
    ((name, arg),) = command.items()
    if name not in _MAPPED_COMMANDS:
        raise ScriptError(f"{where}: unknown command {name!r}")

    if name == "font":
        if not isinstance(arg, str) or arg not in fonts:
            raise ScriptError(f"{where}: font {arg!r} is not defined")
        writer.font(fonts[arg])
    elif name == "word":
        writer.word(_text(arg, f"{where}.word"))
    elif name == "hskip":
        writer.hskip(_int(arg, f"{where}.hskip"))
    elif name == "vskip":
        writer.vskip(_int(arg, f"{where}.vskip"))
    elif name == "rule":
        if not isinstance(arg, Mapping) or set(arg) - {"width", "height", "depth"}:
            raise ScriptError(f"{where}: rule takes a mapping of width, height and depth")
        writer.black_box(
            _int(arg.get("width", 0), f"{where}.rule.width"),
            _int(arg.get("height", 0), f"{where}.rule.height"),
            _int(arg.get("depth", 0), f"{where}.rule.depth"),
        )
    else:
        writer.special(_text(arg, f"{where}.special"))


def run_script(
    data: Mapping[str, Any],
    writer: DviWriter,
    *,
    base_dir: str | os.PathLike[str] | None = None,
    comment: str | None = None,
) -> ScriptResult:
    """Replay ``data`` against ``writer`` and finish the document.

    Parameters
    ----------
    data:
        Parsed script with optional ``fonts`` and ``pages`` lists.
    writer:
        A fresh writer; the preamble is written here.
    base_dir:
        Directory that relative ``tfm`` paths are resolved against.
    comment:
        Preamble comment; the writer's default when ``None``.

    Raises
    ------
    ScriptError
        If the script is malformed.  Errors from the writer (usage errors,
        metrics errors, sink failures) propagate unchanged.
    """

    unknown = set(data) - {"fonts", "pages"}
    if unknown:
        raise ScriptError(f"unknown top-level keys {sorted(unknown)}")
    root = Path(base_dir) if base_dir is not None else Path.cwd()

    font_specs = _list(data.get("fonts"), "fonts")
    metrics = [_font_metrics(spec, i, root) for i, spec in enumerate(font_specs)]
    names = [font.name for font in metrics]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ScriptError(f"fonts defined twice: {duplicates}")

    writer.preamble(comment)
    font_ids: dict[str, int] = {}
    for font in metrics:
        font_ids[font.name] = writer.font_def(font)

    for number, page in enumerate(_list(data.get("pages"), "pages"), start=1):
        where = f"pages[{number - 1}]"
        counts = None
        if isinstance(page, Mapping):
            if set(page) - {"counts", "commands"}:
                raise ScriptError(f"{where}: a page mapping holds 'counts' and 'commands'")
            counts = [_int(c, f"{where}.counts") for c in _list(page.get("counts"), f"{where}.counts")]
            commands = _list(page.get("commands"), f"{where}.commands")
        else:
            commands = _list(page, where)
        writer.begin_page(counts or None)
        for index, command in enumerate(commands):
            _run_command(writer, command, font_ids, f"{where}[{index}]")
        writer.end_page()

    offset = writer.postamble()
    logger.info("script produced %d pages, %d bytes", writer.page_number, writer.total_length)
    return ScriptResult(
        pages=writer.page_number,
        fonts=len(font_ids),
        total_length=writer.total_length,
        postamble_offset=offset,
    )


__all__ = ["ScriptResult", "load_script", "run_script"]
