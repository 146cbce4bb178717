"""Typed cell values for tabular measurement files."""

import re
from dataclasses import dataclass
from decimal import Decimal

_INTEGER_RE = re.compile(r"[+-]?\d+")
_FLOAT_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)")

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


@dataclass(frozen=True)
class IntegerCell:
    """Whole-number cell."""

    type: str = "integer"
    value: int = 0


@dataclass(frozen=True)
class FloatCell:
    """Floating-point cell."""

    type: str = "float"
    value: float = 0.0


@dataclass(frozen=True)
class TextCell:
    """Cell kept as raw text."""

    type: str = "text"
    value: str = ""


@dataclass(frozen=True)
class AbsentCell:
    """Empty cell, stored as NULL."""

    type: str = "absent"
    value: None = None


CellValue = IntegerCell | FloatCell | TextCell | AbsentCell


def is_int32(raw: str) -> bool:
    return _INTEGER_RE.fullmatch(raw) is not None and _INT32_MIN <= int(raw) <= _INT32_MAX


def is_float(raw: str) -> bool:
    return _FLOAT_RE.fullmatch(raw) is not None


def classify_cell(raw: str, integer_column: bool = False) -> CellValue:
    """Classify a trimmed cell.

    Integer columns take ``IntegerCell`` when the text is a 32-bit integer;
    anything numeric falls back to ``FloatCell``; the rest stays text.
    """
    if raw == "":
        return AbsentCell()
    if integer_column and is_int32(raw):
        return IntegerCell(value=int(raw))
    if is_float(raw):
        return FloatCell(value=float(raw))
    return TextCell(value=raw)


def parse_decimal(raw: str) -> Decimal | None:
    """Parse a plain decimal number, or None when the text is not one."""
    text = raw.strip()
    if _DECIMAL_RE.fullmatch(text) is None:
        return None
    return Decimal(text)
