"""Decoding of two-measure cells packed by the source pivots, e.g. ``"1,234 / 56.70"``."""
from __future__ import annotations

import math
import re
from typing import NamedTuple

_SEPARATOR = re.compile(r'\s*/\s*')
_NUMBER = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')


class EncodedPair(NamedTuple):
    primary: float
    secondary: float


def parse_decimal(text: str) -> float | None:
    cleaned = str(text or '').replace(',', '').strip()
    if not _NUMBER.match(cleaned):
        return None
    value = float(cleaned)
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_encoded_cell(cell: object) -> EncodedPair | None:
    """
    Decode ``"<a> / <b>"`` into ``EncodedPair(a, b)``.
    Anything that is not a string with two numeric parts decodes to None; callers treat
    that as "no data for this cell", never as an error.
    """
    if cell is None or not isinstance(cell, str):
        return None
    parts = _SEPARATOR.split(cell.strip())
    if len(parts) < 2:
        return None
    primary = parse_decimal(parts[0])
    secondary = parse_decimal(parts[1])
    if primary is None or secondary is None:
        return None
    return EncodedPair(primary, secondary)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
