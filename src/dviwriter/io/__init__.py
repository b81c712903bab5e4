"""Byte sinks and the extension based registry of font-metrics loaders.

Only the ``.tfm`` loader is registered by default.  The registry dispatches on
the lower-cased file extension; :class:`UnsupportedFormatError` is raised for
any extension without a registered loader.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable

from ..metrics.base import FontMetrics
from ..metrics.tfm import load_tfm
from ..utils.errors import UnsupportedFormatError
from .sinks import BufferSink, ByteSink, FileSink, open_sink

MetricsLoader = Callable[..., FontMetrics]

_LOADERS: dict[str, MetricsLoader] = {}


def register_metrics_loader(ext: str, func: MetricsLoader) -> None:
    """Register a font-metrics loader for files ending with ``ext``.

    Parameters
    ----------
    ext:
        File extension including the dot (e.g. ``".tfm"``).  Matching is
        case-insensitive.
    func:
        Callable taking a path (and keyword options) and returning a
        :class:`~dviwriter.metrics.base.FontMetrics` provider.
    """

    _LOADERS[ext.lower()] = func


def get_extension(path: str | os.PathLike[str]) -> str:
    """Return the lower-cased file extension of ``path`` (including the dot).

    Returns an empty string when the path has no extension.
    """

    suffix = Path(path).suffix
    return suffix.lower() if suffix else ""


def load_metrics(path: str | os.PathLike[str], **kwargs: Any) -> FontMetrics:
    """Load font metrics from ``path`` using the loader for its extension.

    Parameters
    ----------
    path:
        Path to the metrics file.
    **kwargs:
        Forwarded to the loader (``size=`` for TFM files).

    Raises
    ------
    UnsupportedFormatError
        If no loader is registered for the file extension.
    """

    ext = get_extension(path)
    loader = _LOADERS.get(ext)
    if loader is None:
        raise UnsupportedFormatError(f"Unsupported font metrics extension: '{ext}'") from None
    return loader(path, **kwargs)


register_metrics_loader(".tfm", load_tfm)

__all__ = [
    "MetricsLoader",
    "ByteSink",
    "FileSink",
    "BufferSink",
    "open_sink",
    "register_metrics_loader",
    "get_extension",
    "load_metrics",
]
