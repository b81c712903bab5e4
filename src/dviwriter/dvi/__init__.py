"""DVI record encoding: opcodes, the byte emitter, fonts, glyph runs and the writer."""

from .writer import DviWriter, WriterState

__all__ = ["DviWriter", "WriterState"]
