from __future__ import annotations

from ezdxf.colors import DXF_DEFAULT_COLORS

INHERIT = "currentColor"
NEUTRAL_GRAY = "#888"
BY_BLOCK = 0
BY_LAYER = 256


def resolve_color_index(index: int) -> str:
    if index == BY_BLOCK:
        return INHERIT
    if 0 < index < len(DXF_DEFAULT_COLORS):
        return f"#{DXF_DEFAULT_COLORS[index]:06x}"
    return NEUTRAL_GRAY


def true_color_hex(value: int) -> str:
    return f"#{value & 0xFFFFFF:06x}"
