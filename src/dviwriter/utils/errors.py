"""Typed exceptions for DVI emission, font metrics and I/O formats."""


class DviError(Exception):
    """Base class for every error raised by :mod:`dviwriter`."""


# ---------------------------------------------------------------------------
# Byte sink failures
# ---------------------------------------------------------------------------


class SinkError(DviError, OSError):
    """Base class for byte sink failures."""


class SinkOpenError(SinkError):
    """Raised when the output sink cannot be opened for writing."""


class SinkWriteError(SinkError):
    """Raised when the sink rejects an append; the document is unusable."""


# ---------------------------------------------------------------------------
# Usage precondition violations
# ---------------------------------------------------------------------------


class UsageError(DviError, RuntimeError):
    """Base class for calls made out of order or with invalid arguments."""


class PageStateError(UsageError):
    """Raised for unbalanced ``begin_page``/``end_page`` calls."""


class StackUnderflowError(UsageError):
    """Raised when ``pop`` is called with an empty stack."""


class StackBalanceError(UsageError):
    """Raised when a page is closed with pushes still outstanding."""


class NoFontSelectedError(UsageError):
    """Raised when ``word`` is called before any font selection."""


class UnknownFontError(UsageError):
    """Raised when selecting a font id that was never defined."""


class WriterFinalizedError(UsageError):
    """Raised when emitting after the postamble has been written."""


# ---------------------------------------------------------------------------
# Encoding and metrics
# ---------------------------------------------------------------------------


class FieldRangeError(DviError, ValueError):
    """Raised when a value does not fit its fixed-width field."""


class MetricsError(DviError, ValueError):
    """Raised when a font-metrics provider returns unusable data."""


class TFMFormatError(MetricsError):
    """Raised when a TFM file is truncated or internally inconsistent."""


class IOFormatError(ValueError):
    """Base class for I/O format related errors."""


class UnsupportedFormatError(IOFormatError):
    """Raised when no loader is registered for a file format."""


class ScriptError(ValueError):
    """Raised when a document script is malformed."""
