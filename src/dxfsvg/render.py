from __future__ import annotations

from typing import Sequence

from .config import RenderOptions
from .context import RenderContext, handle_of
from .dimension import render_dimension
from .document import Document
from .entities import (
    render_arc,
    render_circle,
    render_ellipse,
    render_hatch,
    render_leader,
    render_line,
    render_lwpolyline,
    render_mtext,
    render_point,
    render_polyline,
    render_solid,
    render_table,
    render_text,
)
from .errors import FatalInputError
from .record import Record, group_value, number, record_type
from .scene import Extents, Group, Primitive, Rendered, Rotate, Scale, Scene, Style, Transform, Translate


def render(document: Document, options: RenderOptions | None = None) -> Scene:
    ctx = RenderContext.create(document, options)
    primitives, extents = render_entities(ctx, document.entities)
    return Scene(primitives=primitives, bbox=extents.to_bbox())


def render_entities(ctx: RenderContext, entities: Sequence[Record] | None) -> tuple[tuple[Primitive, ...], Extents]:
    primitives: list[Primitive] = []
    extents = Extents()
    if not entities:
        return (), extents

    i = 0
    n = len(entities)
    while i < n:
        entity = entities[i]
        dxftype = record_type(entity)
        i += 1
        if not dxftype:
            continue

        vertices: list[Record] = []
        while i < n and record_type(entities[i]) == "VERTEX":
            vertices.append(entities[i])
            i += 1
        if vertices and i < n and record_type(entities[i]) == "SEQEND":
            i += 1

        try:
            rendered = _render_entity(ctx, dxftype, entity, vertices)
        except FatalInputError:
            raise
        except Exception as exc:
            ctx.warn(f"Error occurred: {exc}", entity)
            continue

        if rendered is None:
            continue
        primitive, xs, ys = rendered
        primitives.append(primitive)
        extents.add(xs, ys)

    return tuple(primitives), extents


def _render_entity(ctx: RenderContext, dxftype: str, entity: Record, vertices: Sequence[Record]) -> Rendered | None:
    if dxftype == "POINT":
        return render_point(ctx, entity)
    if dxftype == "LINE":
        return render_line(ctx, entity)
    if dxftype == "POLYLINE":
        return render_polyline(ctx, entity, vertices)
    if dxftype == "LWPOLYLINE":
        return render_lwpolyline(ctx, entity)
    if dxftype == "CIRCLE":
        return render_circle(ctx, entity)
    if dxftype == "ARC":
        return render_arc(ctx, entity)
    if dxftype == "ELLIPSE":
        return render_ellipse(ctx, entity)
    if dxftype == "LEADER":
        return render_leader(ctx, entity)
    if dxftype == "HATCH":
        return render_hatch(ctx, entity)
    if dxftype == "SOLID":
        return render_solid(ctx, entity)
    if dxftype == "TEXT":
        return render_text(ctx, entity)
    if dxftype == "MTEXT":
        return render_mtext(ctx, entity)
    if dxftype == "DIMENSION":
        return render_dimension(ctx, entity)
    if dxftype == "ACAD_TABLE":
        return render_table(ctx, entity)
    if dxftype == "INSERT":
        return render_insert(ctx, entity)

    ctx.warn(f"Unknown entity type: {dxftype}", entity)
    return None


def block_entities(block: Sequence[Record]) -> Sequence[Record]:
    start = 1 if block and record_type(block[0]) == "BLOCK" else 0
    end = len(block) - 1 if len(block) > start and record_type(block[-1]) == "ENDBLK" else len(block)
    return block[start:end]


def insert_transform(x: float, y: float, xscale: float, yscale: float, rotate: float) -> tuple[Transform, ...]:
    transform: list[Transform] = []
    if x or y:
        transform.append(Translate(x, y))
    if xscale != 1 or yscale != 1:
        transform.append(Scale(xscale, yscale))
    if rotate:
        transform.append(Rotate(rotate))
    return tuple(transform)


def render_insert(ctx: RenderContext, entity: Record) -> Rendered | None:
    name = group_value(entity, 2)
    block = ctx.document.blocks.get(name) if name is not None else None
    if block is None:
        ctx.warn(f"Block not found: {name}", entity)
        return None
    if name in ctx.block_path:
        ctx.warn(f"Recursive block reference: {name}", entity)
        return None

    x = number(entity, 10, 0)
    y = -number(entity, 20, 0)
    rotate = -number(entity, 50, 0)
    xscale = number(entity, 41, 1) or 1
    yscale = number(entity, 42, 1) or 1

    primitives, extents = render_entities(ctx.enter_block(name), block_entities(block))
    group = Group(
        children=primitives,
        transform=insert_transform(x, y, xscale, yscale, rotate),
        style=Style(color=ctx.styles.explicit_color(entity)),
        handle=handle_of(entity),
    )
    if extents.is_empty:
        return group, [], []
    # rotation is not applied to the reported extents
    return (
        group,
        [x + extents.min_x * xscale, x + extents.max_x * xscale],
        [y + extents.min_y * yscale, y + extents.max_y * yscale],
    )
