from __future__ import annotations

import math
from html import escape
from typing import Iterable

from .config import RenderOptions
from .document import Document
from .record import format_number, format_numbers
from .render import render
from .scene import (
    Circle,
    Ellipse,
    Group,
    Line,
    Path,
    Polyline,
    Primitive,
    Rotate,
    Scale,
    Scene,
    Span,
    Style,
    Text,
    TextNode,
    Transform,
    Translate,
)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
_MIRROR_STYLE = "transform:rotateY(180deg)"

Attribute = tuple[str, object]


def _attribute_value(value: object) -> str | None:
    if value is None or value is False or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if math.isnan(value):
            return None
        return format_number(value)
    return escape(str(value), quote=True)


def _attributes(attributes: Iterable[Attribute]) -> str:
    out = []
    for key, value in attributes:
        text = _attribute_value(value)
        if text is not None:
            out.append(f' {key}="{text}"')
    return "".join(out)


def element(tag: str, attributes: Iterable[Attribute], children: str | None = None) -> str:
    head = f"<{tag}{_attributes(attributes)}"
    if children:
        return f"{head}>{children}</{tag}>"
    return head + "/>"


def transform_string(transform: Iterable[Transform]) -> str:
    parts = []
    for item in transform:
        if isinstance(item, Translate):
            parts.append(f"translate({format_number(item.x)},{format_number(item.y)})")
        elif isinstance(item, Scale):
            parts.append(f"scale({format_number(item.x)},{format_number(item.y)})")
        elif isinstance(item, Rotate):
            if item.cx is None or item.cy is None:
                parts.append(f"rotate({format_number(item.angle)})")
            else:
                parts.append(f"rotate({format_numbers((item.angle, item.cx, item.cy))})")
    return " ".join(parts)


def _style_attributes(style: Style) -> list[Attribute]:
    return [
        ("color", style.color),
        ("stroke", style.stroke),
        ("fill", style.fill),
        ("fill-opacity", style.fill_opacity),
        ("stroke-dasharray", format_numbers(style.dasharray) if style.dasharray else None),
        ("style", _MIRROR_STYLE if style.mirror else None),
    ]


def _shape(tag: str, handle: str | None, style: Style, attributes: list[Attribute]) -> str:
    extra: list[Attribute] = [("fill", "none")] if not style.fill else []
    extra.append(("vector-effect", "non-scaling-stroke"))
    return element(tag, [("data-5", handle), *_style_attributes(style), *attributes, *extra])


def text_nodes_to_svg(nodes: Iterable[TextNode]) -> str:
    out = []
    for node in nodes:
        if isinstance(node, str):
            out.append(escape(node, quote=False))
            continue
        out.append(_span_to_svg(node))
    return "".join(out)


def _span_to_svg(span: Span) -> str:
    return element(
        "tspan",
        [
            ("dx", span.dx),
            ("dy", span.dy),
            ("font-family", span.font_family),
            ("font-weight", span.font_weight),
            ("font-style", span.font_style),
            ("font-size", span.font_size),
            ("text-decoration", span.text_decoration),
        ],
        text_nodes_to_svg(span.children),
    )


def primitive_to_svg(primitive: Primitive) -> str:
    if isinstance(primitive, Line):
        return _shape(
            "line",
            primitive.handle,
            primitive.style,
            [("x1", primitive.x1), ("y1", primitive.y1), ("x2", primitive.x2), ("y2", primitive.y2)],
        )
    if isinstance(primitive, Polyline):
        points = " ".join(f"{format_number(x)},{format_number(y)}" for x, y in primitive.points)
        return _shape("polygon" if primitive.closed else "polyline", primitive.handle, primitive.style, [("points", points)])
    if isinstance(primitive, Circle):
        return _shape(
            "circle",
            primitive.handle,
            primitive.style,
            [("cx", primitive.cx), ("cy", primitive.cy), ("r", primitive.r)],
        )
    if isinstance(primitive, Ellipse):
        rotation = None
        if primitive.rotation:
            rotation = transform_string([Rotate(primitive.rotation, primitive.cx, primitive.cy)])
        return _shape(
            "ellipse",
            primitive.handle,
            primitive.style,
            [
                ("cx", primitive.cx),
                ("cy", primitive.cy),
                ("rx", primitive.rx),
                ("ry", primitive.ry),
                ("transform", rotation),
            ],
        )
    if isinstance(primitive, Path):
        if primitive.style.stroke is None:
            # filled areas (hatch, solid) carry no outline
            return element("path", [("data-5", primitive.handle), *_style_attributes(primitive.style), ("d", primitive.d)])
        return _shape("path", primitive.handle, primitive.style, [("d", primitive.d)])
    if isinstance(primitive, Text):
        rotation = None
        if primitive.rotation:
            rotation = transform_string([Rotate(primitive.rotation, primitive.x, primitive.y)])
        return element(
            "text",
            [
                ("data-5", primitive.handle),
                ("x", primitive.x),
                ("y", primitive.y),
                *_style_attributes(primitive.style),
                ("font-size", primitive.font_size),
                ("dominant-baseline", primitive.dominant_baseline),
                ("text-anchor", primitive.text_anchor),
                ("transform", rotation),
                ("text-decoration", primitive.text_decoration),
                ("stroke", "none"),
                ("style", "white-space:pre"),
            ],
            text_nodes_to_svg(primitive.children),
        )
    if isinstance(primitive, Group):
        return element(
            "g",
            [
                ("data-5", primitive.handle),
                *_style_attributes(primitive.style),
                ("font-size", primitive.font_size),
                ("dominant-baseline", primitive.dominant_baseline),
                ("transform", transform_string(primitive.transform)),
            ],
            "".join(primitive_to_svg(child) for child in primitive.children),
        )
    raise TypeError(f"unsupported primitive: {type(primitive).__name__}")


def scene_to_svg(scene: Scene) -> str:
    bbox = scene.bbox
    return element(
        "svg",
        [
            ("xmlns", SVG_NAMESPACE),
            ("viewBox", format_numbers((bbox.x, bbox.y, bbox.width, bbox.height))),
            ("width", bbox.width),
            ("height", bbox.height),
        ],
        "".join(primitive_to_svg(primitive) for primitive in scene.primitives),
    )


def svg_string(document: Document, options: RenderOptions | None = None) -> str:
    return scene_to_svg(render(document, options))
