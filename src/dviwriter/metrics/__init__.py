"""Font-metrics providers consumed by the DVI writer."""

from .base import FontMetrics, PlainMetrics, text_to_codes
from .tfm import TFMMetrics, load_tfm, parse_tfm

__all__ = [
    "FontMetrics",
    "PlainMetrics",
    "text_to_codes",
    "TFMMetrics",
    "load_tfm",
    "parse_tfm",
]
