from __future__ import annotations

import math
from typing import Iterable, Sequence

from .errors import FatalInputError

Record = Sequence[tuple[int, str]]

MAX_MAGNITUDE = 1.0e6
_SNAP_EPSILON = 1.0e-8


def group_value(record: Record | None, code: int) -> str | None:
    if not record:
        return None
    for group_code, value in record:
        if group_code == code:
            return value
    return None


def group_values(record: Record | None, code: int) -> list[str]:
    if not record:
        return []
    return [value for group_code, value in record if group_code == code]


def trimmed(record: Record | None, code: int) -> str | None:
    value = group_value(record, code)
    return value.strip() if value else value


def record_type(record: Record | None) -> str | None:
    return trimmed(record, 0)


def parse_number(value: str | None, code: int = 0) -> float:
    if value is None:
        return math.nan
    try:
        number_value = float(value)
    except ValueError:
        return math.nan
    if math.isnan(number_value):
        return math.nan
    if abs(number_value) > MAX_MAGNITUDE:
        raise FatalInputError(code, number_value)
    rounded = float(round(number_value))
    if abs(rounded - number_value) < _SNAP_EPSILON:
        return rounded
    return number_value


def number(record: Record | None, code: int, default: float | None = None) -> float:
    value = parse_number(group_value(record, code), code)
    if math.isnan(value):
        return math.nan if default is None else default
    return value


def numbers(record: Record | None, *codes: int) -> list[float]:
    return [number(record, code) for code in codes]


def negates(record: Record | None, *codes: int) -> list[float]:
    return [-number(record, code) for code in codes]


def number_values(record: Record | None, code: int) -> list[float]:
    return [parse_number(value, code) for value in group_values(record, code)]


def _shift(value: float, precision: int) -> float:
    digits, _, exponent = repr(float(value)).partition("e")
    shifted = int(exponent) + precision if exponent else precision
    return float(f"{digits}e{shifted}")


def round_decimal(value: float, precision: int) -> float:
    # shifts through the decimal exponent so 1.005 rounds to 1.01 at two places
    if not math.isfinite(value):
        return value
    precision = int(precision)
    return _shift(math.floor(_shift(value, precision) + 0.5), -precision)


def format_number(value: float) -> str:
    if isinstance(value, bool):
        value = int(value)
    if isinstance(value, int):
        return str(value)
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)


def format_numbers(values: Iterable[float], separator: str = " ") -> str:
    return separator.join(format_number(value) for value in values)
