"""Glyph-run encoding.

Character codes below 128 are ``set_char`` opcodes in their own right, so a
glyph run is written as raw bytes.  Codes 128..255 would collide with other
opcodes and are written as ``set1`` (128) followed by the code.
"""

from __future__ import annotations

import re
from typing import Iterator, Sequence, Union

from dviwriter.utils.errors import MetricsError

from . import opcodes as op

_HIGH_BYTE = re.compile(rb"([\x80-\xff])")
_SET1 = bytes([op.SET1])


def escape_run(run: bytes) -> bytes:
    """Prefix every byte >= 128 in ``run`` with ``set1``."""

    return _HIGH_BYTE.sub(lambda m: _SET1 + m.group(1), run)


def iter_expansion(
    expansion: Sequence[Union[bytes, int]],
) -> Iterator[tuple[bytes, int | None]]:
    """Yield ``(run, kern)`` pairs from an expansion.

    ``kern`` is the movement following ``run``; it is ``None`` for the last
    run.

    Raises
    ------
    MetricsError
        If ``expansion`` does not alternate runs and kerns, starting and ending
        with a run.
    """

    if len(expansion) % 2 != 1:
        raise MetricsError(f"expansion must have an odd number of items, got {len(expansion)}")
    for index, item in enumerate(expansion):
        if index % 2 == 0:
            if not isinstance(item, (bytes, bytearray)):
                raise MetricsError(f"expansion item {index} must be a glyph run, got {item!r}")
        elif isinstance(item, bool) or not isinstance(item, int):
            raise MetricsError(f"expansion item {index} must be a kern amount, got {item!r}")
    last = len(expansion) - 1
    for index in range(0, len(expansion), 2):
        kern = expansion[index + 1] if index < last else None
        yield bytes(expansion[index]), kern  # type: ignore[misc]


__all__ = ["escape_run", "iter_expansion"]
