from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Sequence

from .colors import BY_BLOCK, BY_LAYER, INHERIT, NEUTRAL_GRAY, true_color_hex
from .record import Record, group_value, group_values, parse_number, record_type, trimmed
from .scene import Style

_MIRROR_TOLERANCE = 1 / 64


def _parse_int(value: str | None) -> int | None:
    # true colors are packed 24-bit integers, beyond the numeric sanity bound
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class Layer:
    name: str
    color: str
    linetype: str | None = None


@dataclass(frozen=True)
class Linetype:
    name: str
    pattern: tuple[float, ...] = ()


def normalize_dash_pattern(raw: Sequence[float]) -> tuple[float, ...]:
    # gaps are stored negative; odd patterns repeat once, a leading zero dash rotates away
    pattern = [abs(value) for value in raw]
    if not pattern:
        return ()
    if len(pattern) % 2 == 1:
        return tuple(pattern + pattern)
    if pattern[0] == 0:
        return tuple(pattern[1:] + [0.0])
    return tuple(pattern)


def build_layer_map(
    layers: Iterable[Record],
    resolve_color_index: Callable[[int], str],
) -> Mapping[str, Layer]:
    out: dict[str, Layer] = {}
    for layer in layers:
        if record_type(layer) != "LAYER":
            continue
        name = group_value(layer, 2)
        if name is None:
            continue
        color_index = parse_number(group_value(layer, 62), 62)
        if math.isnan(color_index):
            color = NEUTRAL_GRAY
        else:
            # a negative index marks a layer that is switched off
            color = resolve_color_index(int(abs(color_index)))
        out[name] = Layer(name=name, color=color, linetype=group_value(layer, 6))
    return MappingProxyType(out)


def build_linetype_map(linetypes: Iterable[Record]) -> Mapping[str, Linetype]:
    out: dict[str, Linetype] = {}
    for linetype in linetypes:
        if record_type(linetype) != "LTYPE":
            continue
        name = group_value(linetype, 2)
        if name is None:
            continue
        pattern = normalize_dash_pattern([parse_number(value, 49) for value in group_values(linetype, 49)])
        if pattern:
            out[name] = Linetype(name=name, pattern=pattern)
    return MappingProxyType(out)


@dataclass(frozen=True)
class StyleResolver:
    layers: Mapping[str, Layer]
    linetypes: Mapping[str, Linetype]
    resolve_color_index: Callable[[int], str]

    def explicit_color(self, entity: Record) -> str | None:
        true_color = _parse_int(trimmed(entity, 420))
        if true_color is not None:
            return true_color_hex(true_color)
        color_index = parse_number(trimmed(entity, 62), 62)
        if color_index == BY_BLOCK:
            return INHERIT
        if not math.isnan(color_index) and color_index != BY_LAYER:
            return self.resolve_color_index(int(color_index))
        layer = self.layers.get(trimmed(entity, 8) or "")
        if layer is not None:
            return layer.color
        return None

    def color(self, entity: Record) -> str:
        return self.explicit_color(entity) or INHERIT

    def dash(self, entity: Record) -> tuple[float, ...]:
        name = group_value(entity, 6)
        if name is None:
            layer = self.layers.get(group_value(entity, 8) or "")
            name = layer.linetype if layer is not None else None
        linetype = self.linetypes.get(name or "")
        return linetype.pattern if linetype is not None else ()

    def mirror(self, entity: Record) -> bool:
        extrusion_z = parse_number(trimmed(entity, 230), 230)
        return bool(extrusion_z) and abs(extrusion_z + 1) < _MIRROR_TOLERANCE

    def line_style(self, entity: Record) -> Style:
        return Style(stroke=self.color(entity), dasharray=self.dash(entity), mirror=self.mirror(entity))
