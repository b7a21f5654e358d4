from __future__ import annotations

import math
from dataclasses import dataclass

from .colors import INHERIT
from .context import RenderContext, handle_of
from .dimstyle import DimensionStyle, resolve_dimension_style
from .record import Record, format_number, group_value, negates, number, numbers, round_decimal
from .scene import Group, Path, Rendered, Style, Text
from .text import layout_mtext

DIMENSION_TYPE_MASK = 7
ORDINATE_X_FLAG = 64
MEASUREMENT_PLACEHOLDER = "<>"


@dataclass(frozen=True)
class DimensionGeometry:
    measurement: float
    leader: str
    xs: list[float]
    ys: list[float]
    dominant_baseline: str = "text-after-edge"
    text_anchor: str = "middle"
    angle: float = 0.0


def _path(*points: tuple[float, float]) -> str:
    return "".join(
        f"{'M' if i == 0 else 'L'}{format_number(x)} {format_number(y)}" for i, (x, y) in enumerate(points)
    )


def _round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def tolerance_string(value: float) -> str:
    if value > 0:
        return "+" + format_number(value)
    if value < 0:
        return format_number(value)
    return "0"


def format_measurement(measurement: float, dimension: Record, style: DimensionStyle) -> str:
    saved = number(dimension, 42, -1)
    value = saved if saved != -1 else measurement * style.length_factor
    text = format_number(round_decimal(value, style.decimal_precision))

    if style.tolerance_enabled:
        plus = 0.0 if math.isnan(style.tolerance_plus) else style.tolerance_plus
        minus = 0.0 if math.isnan(style.tolerance_minus) else style.tolerance_minus
        if plus or minus:
            if plus == minus:
                text = f"{text}  ±{format_number(plus)}"
            else:
                text = f"{text}  {{\\S{tolerance_string(plus)}^{tolerance_string(-minus)};}}"

    template = group_value(dimension, 1)
    if template and MEASUREMENT_PLACEHOLDER in template:
        return template.replace(MEASUREMENT_PLACEHOLDER, text, 1)
    return text


def measure(ctx: RenderContext, dimension: Record, tx: float, ty: float) -> DimensionGeometry | None:
    dimension_type = int(number(dimension, 70, 0))
    subtype = dimension_type & DIMENSION_TYPE_MASK

    if subtype in (0, 1):
        # rotated, horizontal, vertical or aligned
        x0, x1, x2 = numbers(dimension, 10, 13, 14)
        y0, y1, y2 = negates(dimension, 20, 23, 24)
        angle = _round_half_up(-number(dimension, 50, 0)) or 0.0
        if angle % 180 == 0:
            return DimensionGeometry(
                measurement=abs(x1 - x2),
                leader=_path((x1, y1), (x1, y0), (x2, y0), (x2, y2)),
                xs=[x1, x2],
                ys=[y1, y2],
            )
        return DimensionGeometry(
            measurement=abs(y1 - y2),
            leader=_path((x1, y1), (x0, y1), (x0, y2), (x2, y2)),
            xs=[x1, x2],
            ys=[y1, y2],
            angle=angle,
        )

    if subtype in (2, 5):
        ctx.warn("Angular dimension cannot be rendered yet.", dimension)
        return None

    if subtype in (3, 4):
        # diameter or radius
        x0, x1 = numbers(dimension, 10, 15)
        y0, y1 = negates(dimension, 20, 25)
        return DimensionGeometry(
            measurement=math.hypot(x0 - x1, y0 - y1),
            leader=_path((x1, y1), (tx, ty)),
            xs=[x0, x1],
            ys=[y0, y1],
        )

    if subtype == 6:
        x1, x2 = numbers(dimension, 13, 14)
        y1, y2 = negates(dimension, 23, 24)
        if dimension_type & ORDINATE_X_FLAG:
            x0 = number(dimension, 10)
            return DimensionGeometry(
                measurement=abs(x0 - x1),
                leader=_path((x1, y1), (x1, y2), (x2, y2), (tx, ty)),
                xs=[x1, x2],
                ys=[y1, y2],
                dominant_baseline="central",
                angle=-90.0,
            )
        y0 = -number(dimension, 20)
        return DimensionGeometry(
            measurement=abs(y0 - y1),
            leader=_path((x1, y1), (x2, y1), (x2, y2), (tx, ty)),
            xs=[x1, x2],
            ys=[y1, y2],
            dominant_baseline="central",
        )

    ctx.warn("Unknown dimension type.", dimension)
    return None


def _text_color(ctx: RenderContext, dimension: Record, style: DimensionStyle) -> str:
    if math.isnan(style.text_color):
        return ctx.styles.color(dimension)
    if style.text_color == 0:
        return INHERIT
    return ctx.resolve_color_index(style.text_color)


def render_dimension(ctx: RenderContext, dimension: Record) -> Rendered | None:
    style = resolve_dimension_style(ctx.document, dimension)
    tx = number(dimension, 11)
    ty = -number(dimension, 21)
    geometry = measure(ctx, dimension, tx, ty)
    if geometry is None:
        return None

    markup = format_measurement(geometry.measurement, dimension, style)
    text = Text(
        x=tx,
        y=ty,
        children=layout_mtext(ctx.options.parse_mtext(markup), ctx.options.resolve_font),
        font_size=style.text_height * style.scale,
        dominant_baseline=geometry.dominant_baseline,
        text_anchor=geometry.text_anchor,
        rotation=geometry.angle or None,
        style=Style(fill=_text_color(ctx, dimension, style)),
    )
    group = Group(
        children=(Path(d=geometry.leader, style=Style(stroke=INHERIT)), text),
        style=Style(
            color=ctx.styles.color(dimension),
            dasharray=ctx.styles.dash(dimension),
            mirror=ctx.styles.mirror(dimension),
        ),
        handle=handle_of(dimension),
    )
    return group, [tx, *geometry.xs], [ty, *geometry.ys]
