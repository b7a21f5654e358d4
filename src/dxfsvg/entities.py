from __future__ import annotations

import math
from typing import Sequence

from .colors import NEUTRAL_GRAY
from .context import RenderContext, handle_of
from .record import (
    Record,
    format_number,
    group_value,
    negates,
    number,
    number_values,
    numbers,
    trimmed,
)
from .scene import Circle, Ellipse, Group, Line, Path, Polyline, Rendered, Style, Text, Translate
from .text import (
    layout_mtext,
    layout_text_runs,
    mtext_angle,
    mtext_attachment,
    mtext_contents,
    text_alignment,
)

_SMALL_NUMBER = 1 / 64
_HATCH_FILL_OPACITY = 0.3
_TABLE_BLOCK_CELL = "2"


def _nearly_equal(a: float, b: float) -> bool:
    return abs(a - b) < _SMALL_NUMBER


def _point(x: float, y: float) -> str:
    return f"{format_number(x)} {format_number(y)}"


def _optional_color(ctx: RenderContext, index: float) -> str | None:
    if math.isnan(index):
        return None
    return ctx.resolve_color_index(index)


def render_point(ctx: RenderContext, entity: Record) -> Rendered | None:
    return None


def render_line(ctx: RenderContext, entity: Record) -> Rendered | None:
    xs = numbers(entity, 10, 11)
    ys = negates(entity, 20, 21)
    line = Line(
        x1=xs[0],
        y1=ys[0],
        x2=xs[1],
        y2=ys[1],
        style=ctx.styles.line_style(entity),
        handle=handle_of(entity),
    )
    return line, xs, ys


def _polyline(ctx: RenderContext, entity: Record, xs: list[float], ys: list[float]) -> Rendered:
    flags = int(number(entity, 70, 0))
    polyline = Polyline(
        points=tuple(zip(xs, ys)),
        closed=bool(flags & 1),
        style=ctx.styles.line_style(entity),
        handle=handle_of(entity),
    )
    return polyline, xs, ys


def render_polyline(ctx: RenderContext, entity: Record, vertices: Sequence[Record]) -> Rendered | None:
    xs = [number(vertex, 10) for vertex in vertices]
    ys = [-number(vertex, 20) for vertex in vertices]
    return _polyline(ctx, entity, xs, ys)


def render_lwpolyline(ctx: RenderContext, entity: Record) -> Rendered | None:
    xs = number_values(entity, 10)
    ys = [-y for y in number_values(entity, 20)]
    return _polyline(ctx, entity, xs, ys)


def render_circle(ctx: RenderContext, entity: Record) -> Rendered | None:
    cx, cy, r = numbers(entity, 10, 20, 40)
    circle = Circle(cx=cx, cy=-cy, r=r, style=ctx.styles.line_style(entity), handle=handle_of(entity))
    return circle, [cx - r, cx + r], [-cy - r, -cy + r]


def render_arc(ctx: RenderContext, entity: Record) -> Rendered | None:
    cx, cy, r = numbers(entity, 10, 20, 40)
    deg1 = number(entity, 50, 0)
    deg2 = number(entity, 51, 0)
    x1 = cx + r * math.cos(math.radians(deg1))
    y1 = cy + r * math.sin(math.radians(deg1))
    x2 = cx + r * math.cos(math.radians(deg2))
    y2 = cy + r * math.sin(math.radians(deg2))
    large = 0 if (deg2 - deg1 + 360) % 360 <= 180 else 1
    r_text = format_number(r)
    path = Path(
        d=f"M{_point(x1, -y1)}A{r_text} {r_text} 0 {large} 0 {_point(x2, -y2)}",
        style=ctx.styles.line_style(entity),
        handle=handle_of(entity),
    )
    return path, [x1, x2], [-y1, -y2]


def render_ellipse(ctx: RenderContext, entity: Record) -> Rendered | None:
    start = number(entity, 41, 0)
    end = number(entity, 42, 2 * math.pi)
    if not (_nearly_equal(start, 0) and _nearly_equal(end, 2 * math.pi)):
        ctx.warn("Elliptical arc cannot be rendered yet.", entity)
        return None

    cx, cy, major_x, major_y = numbers(entity, 10, 20, 11, 21)
    major_r = math.hypot(major_x, major_y)
    minor_r = number(entity, 40) * major_r
    rotation = -math.degrees(math.atan2(major_y, major_x))
    ellipse = Ellipse(
        cx=cx,
        cy=-cy,
        rx=major_r,
        ry=minor_r,
        rotation=rotation or None,
        style=ctx.styles.line_style(entity),
        handle=handle_of(entity),
    )
    return ellipse, [cx - major_r, cx + major_r], [-cy - minor_r, -cy + minor_r]


def render_leader(ctx: RenderContext, entity: Record) -> Rendered | None:
    xs = number_values(entity, 10)
    ys = [-y for y in number_values(entity, 20)]
    polyline = Polyline(
        points=tuple(zip(xs, ys)),
        style=Style(stroke=ctx.styles.color(entity), dasharray=ctx.styles.dash(entity)),
        handle=handle_of(entity),
    )
    return polyline, xs, ys


def _hatch_boundary(entity: Record) -> list[tuple[int, str]]:
    # boundary path data lies between the path count (92) and the source object count (97)
    tags = list(entity)
    codes = [code for code, _ in tags]
    if 92 not in codes:
        return []
    start = codes.index(92)
    end = codes.index(97, start) if 97 in codes[start:] else len(tags)
    return tags[start:end]


def render_hatch(ctx: RenderContext, entity: Record) -> Rendered | None:
    boundary = _hatch_boundary(entity)
    x1s = number_values(boundary, 10)
    y1s = [-y for y in number_values(boundary, 20)]
    x2s = number_values(boundary, 11)
    y2s = [-y for y in number_values(boundary, 21)]

    d: list[str] = []
    for i, (x1, y1) in enumerate(zip(x1s, y1s)):
        if i >= len(x2s):
            d.append(f"{'M' if i == 0 else 'L'}{_point(x1, y1)}")
        elif i > 0 and x1 == x2s[i - 1] and y1 == y2s[i - 1]:
            d.append(f"L{_point(x2s[i], y2s[i])}")
        else:
            d.append(f"M{_point(x1, y1)}L{_point(x2s[i], y2s[i])}")

    path = Path(
        d="".join(d),
        style=Style(fill=ctx.styles.color(entity), fill_opacity=_HATCH_FILL_OPACITY),
        handle=handle_of(entity),
    )
    return path, [*x1s, *x2s], [*y1s, *y2s]


def render_solid(ctx: RenderContext, entity: Record) -> Rendered | None:
    x1, x2, x3, x4 = numbers(entity, 10, 11, 12, 13)
    y1, y2, y3, y4 = negates(entity, 20, 21, 22, 23)
    d = f"M{_point(x1, y1)}L{_point(x2, y2)}L{_point(x3, y3)}"
    has_fourth = math.isfinite(x4) and math.isfinite(y4)
    if has_fourth and (x3 != x4 or y3 != y4):
        d += f"L{_point(x4, y4)}"
    path = Path(d=d + "Z", style=Style(fill=ctx.styles.color(entity)), handle=handle_of(entity))
    return path, [x1, x2, x3, x4], [y1, y2, y3, y4]


def render_text(ctx: RenderContext, entity: Record) -> Rendered | None:
    x, h = numbers(entity, 10, 40)
    y = -number(entity, 20)
    angle = -number(entity, 50, 0)
    runs = ctx.options.parse_text(group_value(entity, 1) or "")
    children, decoration = layout_text_runs(runs)
    baseline, anchor = text_alignment(entity)
    text = Text(
        x=x,
        y=y,
        children=children,
        font_size=h,
        dominant_baseline=baseline,
        text_anchor=anchor,
        rotation=angle or None,
        text_decoration=decoration,
        style=Style(fill=ctx.styles.color(entity)),
        handle=handle_of(entity),
    )
    length = sum(len(run.text) for run in runs)
    return text, [x, x + h * length], [y, y + h]


def render_mtext(ctx: RenderContext, entity: Record) -> Rendered | None:
    x, h = numbers(entity, 10, 40)
    y = -number(entity, 20)
    angle = mtext_angle(entity)
    baseline, anchor = mtext_attachment(trimmed(entity, 71))
    contents = mtext_contents(entity)
    text = Text(
        x=x,
        y=y,
        children=layout_mtext(ctx.options.parse_mtext(contents), ctx.options.resolve_font),
        font_size=h,
        dominant_baseline=baseline,
        text_anchor=anchor,
        rotation=-angle if angle else None,
        style=Style(fill=ctx.styles.color(entity)),
        handle=handle_of(entity),
    )
    return text, [x, x + h * len(contents)], [y, y + h]


def _cumulative(sizes: list[float]) -> list[float]:
    out = [0.0]
    for size in sizes:
        out.append(out[-1] + size)
    return out


def _table_cells(entity: Record) -> list[Record]:
    tags = list(entity)
    starts = [i for i, (code, _) in enumerate(tags) if code == 171]
    return [tags[start:end] for start, end in zip(starts, starts[1:] + [len(tags)])]


def render_table(ctx: RenderContext, entity: Record) -> Rendered | None:
    ys = _cumulative(number_values(entity, 141))
    xs = _cumulative(number_values(entity, 142))
    line_style = Style(stroke=ctx.styles.color(entity))
    text_color = _optional_color(ctx, number(entity, 64)) or NEUTRAL_GRAY

    children: list = [Line(x1=0, y1=y, x2=xs[-1], y2=y, style=line_style) for y in ys]
    columns = len(xs) - 1
    xi = 0
    yi = 0
    for cell in _table_cells(entity) if columns > 0 else []:
        if yi + 1 >= len(ys):
            break
        x = xs[xi]
        y = ys[yi]
        if not number(cell, 173, 0):
            children.append(Line(x1=x, y1=y, x2=x, y2=ys[yi + 1], style=line_style))

        if trimmed(cell, 171) == _TABLE_BLOCK_CELL:
            ctx.warn('Table cell type "block" cannot be rendered yet.', entity)
        else:
            children.append(
                Text(
                    x=x,
                    y=y,
                    children=layout_mtext(
                        ctx.options.parse_mtext(group_value(cell, 1) or ""),
                        ctx.options.resolve_font,
                    ),
                    style=Style(fill=_optional_color(ctx, number(cell, 64)) or text_color),
                )
            )

        xi += 1
        if xi == columns:
            xi = 0
            yi += 1

    children.append(Line(x1=xs[-1], y1=0, x2=xs[-1], y2=ys[-1], style=line_style))

    x = number(entity, 10)
    y = -number(entity, 20)
    group = Group(
        children=tuple(children),
        transform=(Translate(x, y),),
        font_size=number(entity, 140),
        dominant_baseline="text-before-edge",
        handle=handle_of(entity),
    )
    return group, [cx + x for cx in xs], [cy + y for cy in ys]
