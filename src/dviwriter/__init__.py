"""Write TeX device-independent (DVI) files.

:class:`DviWriter` emits the records of a DVI stream (preamble, pages, font
definitions, movement, rules, specials, glyph runs with kerning and the
postamble) while keeping the offsets, font ids and stack depth consistent.
Font metrics come from providers such as :class:`PlainMetrics` or TFM files
loaded with :func:`load_metrics`.
"""

from .dvi.writer import DviWriter, WriterState
from .io import BufferSink, FileSink, load_metrics
from .metrics import FontMetrics, PlainMetrics, TFMMetrics
from .utils.errors import DviError, SinkError, UsageError

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "DviWriter",
    "WriterState",
    "BufferSink",
    "FileSink",
    "load_metrics",
    "FontMetrics",
    "PlainMetrics",
    "TFMMetrics",
    "DviError",
    "SinkError",
    "UsageError",
]
