from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Union

Point2D = tuple[float, float]


@dataclass(frozen=True)
class Style:
    stroke: str | None = None
    fill: str | None = None
    fill_opacity: float | None = None
    dasharray: tuple[float, ...] = ()
    mirror: bool = False
    color: str | None = None


NO_STYLE = Style()


@dataclass(frozen=True)
class Translate:
    x: float
    y: float


@dataclass(frozen=True)
class Scale:
    x: float
    y: float


@dataclass(frozen=True)
class Rotate:
    angle: float
    cx: float | None = None
    cy: float | None = None


Transform = Union[Translate, Scale, Rotate]


@dataclass(frozen=True)
class Span:
    children: tuple["TextNode", ...] = ()
    dx: str | None = None
    dy: str | None = None
    font_family: str | None = None
    font_weight: int | None = None
    font_style: str | None = None
    font_size: str | None = None
    text_decoration: str | None = None


TextNode = Union[str, Span]


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    style: Style = NO_STYLE
    handle: str | None = None


@dataclass(frozen=True)
class Polyline:
    points: tuple[Point2D, ...]
    closed: bool = False
    style: Style = NO_STYLE
    handle: str | None = None


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    style: Style = NO_STYLE
    handle: str | None = None


@dataclass(frozen=True)
class Ellipse:
    cx: float
    cy: float
    rx: float
    ry: float
    rotation: float | None = None
    style: Style = NO_STYLE
    handle: str | None = None


@dataclass(frozen=True)
class Path:
    d: str
    style: Style = NO_STYLE
    handle: str | None = None


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    children: tuple[TextNode, ...] = ()
    font_size: float | None = None
    dominant_baseline: str | None = None
    text_anchor: str | None = None
    rotation: float | None = None
    text_decoration: str | None = None
    style: Style = NO_STYLE
    handle: str | None = None


@dataclass(frozen=True)
class Group:
    children: tuple["Primitive", ...] = ()
    transform: tuple[Transform, ...] = ()
    font_size: float | None = None
    dominant_baseline: str | None = None
    style: Style = NO_STYLE
    handle: str | None = None


Primitive = Union[Line, Polyline, Circle, Ellipse, Path, Text, Group]


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float


EMPTY_BOUNDING_BOX = BoundingBox(0.0, 0.0, 0.0, 0.0)


@dataclass
class Extents:
    min_x: float = math.inf
    min_y: float = math.inf
    max_x: float = -math.inf
    max_y: float = -math.inf

    @property
    def is_empty(self) -> bool:
        return self.min_x > self.max_x or self.min_y > self.max_y

    def add(self, xs: Iterable[float], ys: Iterable[float]) -> None:
        for x in xs:
            if math.isfinite(x):
                self.min_x = min(self.min_x, x)
                self.max_x = max(self.max_x, x)
        for y in ys:
            if math.isfinite(y):
                self.min_y = min(self.min_y, y)
                self.max_y = max(self.max_y, y)

    def to_bbox(self) -> BoundingBox:
        if self.is_empty:
            return EMPTY_BOUNDING_BOX
        return BoundingBox(
            self.min_x,
            self.min_y,
            self.max_x - self.min_x,
            self.max_y - self.min_y,
        )


@dataclass(frozen=True)
class Scene:
    primitives: tuple[Primitive, ...] = ()
    bbox: BoundingBox = EMPTY_BOUNDING_BOX


# an interpreter's output: the primitive and the coordinates it covers
Rendered = tuple[Primitive, list[float], list[float]]
