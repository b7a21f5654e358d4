from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .record import Record, group_value, parse_number

if TYPE_CHECKING:
    from .document import Document

# variable name: (entity / DIMSTYLE group code, header group code, default)
DIMSTYLE_VARIABLES: dict[str, tuple[int, int, float]] = {
    "DIMSCALE": (40, 40, 1.0),
    "DIMTP": (47, 40, math.nan),
    "DIMTM": (48, 40, math.nan),
    "DIMTOL": (71, 70, 0.0),
    "DIMTXT": (140, 40, 1.0),
    "DIMLFAC": (144, 40, 1.0),
    "DIMCLRT": (178, 70, math.nan),
    "DIMDEC": (271, 70, 4.0),
}

_XDATA_APPLICATION = 1000
_XDATA_CONTROL = 1002
_XDATA_INTEGER = 1070


@dataclass(frozen=True)
class DimensionStyle:
    scale: float = 1.0
    tolerance_plus: float = math.nan
    tolerance_minus: float = math.nan
    tolerance_enabled: bool = False
    text_height: float = 1.0
    length_factor: float = 1.0
    text_color: float = math.nan
    decimal_precision: int = 4


def collect_overrides(dimension: Record) -> dict[int, str] | None:
    # 1000 DSTYLE, 1002 {, then 1070 group code / value pairs up to 1002 }
    tags = list(dimension)
    for i, (code, value) in enumerate(tags[:-1]):
        if code != _XDATA_APPLICATION or value.strip() != "DSTYLE":
            continue
        next_code, next_value = tags[i + 1]
        if next_code != _XDATA_CONTROL or next_value.strip() != "{":
            continue
        out: dict[int, str] = {}
        j = i + 2
        while j < len(tags):
            code, value = tags[j]
            if code == _XDATA_CONTROL:
                break
            if code == _XDATA_INTEGER and j + 1 < len(tags):
                key = parse_number(value, code)
                if not math.isnan(key):
                    out[int(key)] = tags[j + 1][1]
                j += 1
            j += 1
        return out
    return None


def _find_dimstyle(document: Document, name: str | None) -> Record | None:
    if name is None:
        return None
    for style in document.table("DIMSTYLE"):
        if group_value(style, 2) == name:
            return style
    return None


def resolve_variable(
    document: Document,
    variable: str,
    overrides: dict[int, str] | None,
    style: Record | None,
) -> float:
    code, header_code, default = DIMSTYLE_VARIABLES[variable]
    value = None
    if overrides is not None:
        value = overrides.get(code)
    if value is None:
        value = group_value(style, code)
    if value is None:
        value = group_value(document.header_var("$" + variable), header_code)
    if value is None:
        return default
    return parse_number(value, code)


def resolve_dimension_style(document: Document, dimension: Record) -> DimensionStyle:
    style = _find_dimstyle(document, group_value(dimension, 3))
    overrides = collect_overrides(dimension)
    values = {
        variable: resolve_variable(document, variable, overrides, style)
        for variable in DIMSTYLE_VARIABLES
    }
    precision = values["DIMDEC"]
    return DimensionStyle(
        scale=values["DIMSCALE"],
        tolerance_plus=values["DIMTP"],
        tolerance_minus=values["DIMTM"],
        tolerance_enabled=bool(values["DIMTOL"]) and not math.isnan(values["DIMTOL"]),
        text_height=values["DIMTXT"],
        length_factor=values["DIMLFAC"],
        text_color=values["DIMCLRT"],
        decimal_precision=int(precision) if math.isfinite(precision) else 4,
    )
