"""Opcode bytes and fixed values of the DVI format (version 2)."""

from __future__ import annotations

from typing import Final

SET_CHAR_MAX: Final = 127
SET1: Final = 128
SET_RULE: Final = 137
BOP: Final = 139
EOP: Final = 140
PUSH: Final = 141
POP: Final = 142
RIGHT4: Final = 146
DOWN4: Final = 160
FNT_NUM_0: Final = 171
FNT_NUM_MAX_ID: Final = 63
FNT1: Final = 235
XXX4: Final = 242
FNT_DEF1: Final = 243
PRE: Final = 247
POST: Final = 248
POST_POST: Final = 249

DVI_ID: Final = 2
TRAILER: Final = 223
TRAILER_MIN: Final = 4

# Units: 1 DVI unit = 1 sp = 2**-16 pt, with 7227 pt = 254 cm.
NUM: Final = 25400000
DEN: Final = 473628672
MAG: Final = 1000

NO_PAGE: Final = -1
COUNT_REGISTERS: Final = 10
MAX_COMMENT: Final = 255
PLACEHOLDER_EXTENT: Final = 1000000

__all__ = [
    "SET_CHAR_MAX",
    "SET1",
    "SET_RULE",
    "BOP",
    "EOP",
    "PUSH",
    "POP",
    "RIGHT4",
    "DOWN4",
    "FNT_NUM_0",
    "FNT_NUM_MAX_ID",
    "FNT1",
    "XXX4",
    "FNT_DEF1",
    "PRE",
    "POST",
    "POST_POST",
    "DVI_ID",
    "TRAILER",
    "TRAILER_MIN",
    "NUM",
    "DEN",
    "MAG",
    "NO_PAGE",
    "COUNT_REGISTERS",
    "MAX_COMMENT",
    "PLACEHOLDER_EXTENT",
]
