from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from .config import DEFAULT_OPTIONS, RenderOptions
from .document import SUBRECORD_TYPES, Document, read
from .record import record_type
from .render import render
from .scene import BoundingBox
from .svg import scene_to_svg


@dataclass(frozen=True)
class ConvertResult:
    source_path: str | None
    output_path: str
    total_entities: int
    rendered_entities: int
    diagnostic_count: int
    diagnostics_by_type: dict[str, int]
    bbox: BoundingBox


@dataclass
class DiagnosticCollector:
    forward: Any = None
    messages: list[tuple[str, Any]] = field(default_factory=list)

    def __call__(self, message: str, context: Any = None) -> None:
        self.messages.append((message, context))
        if self.forward is not None:
            self.forward(message, context)

    def by_type(self) -> dict[str, int]:
        counter: Counter[str] = Counter()
        for _message, context in self.messages:
            dxftype = record_type(context) if isinstance(context, (list, tuple)) else None
            counter[dxftype or "UNKNOWN"] += 1
        return dict(sorted(counter.items()))


def count_entities(document: Document) -> int:
    return sum(
        1
        for entity in document.entities
        if record_type(entity) and record_type(entity) not in SUBRECORD_TYPES
    )


def to_svg(
    source: str | Document,
    output_path: str,
    *,
    options: RenderOptions | None = None,
    strict: bool = False,
) -> ConvertResult:
    document = source if isinstance(source, Document) else read(str(source))
    base = options or DEFAULT_OPTIONS
    collector = DiagnosticCollector(forward=base.diagnostic_sink)
    scene = render(document, replace(base, diagnostic_sink=collector))

    by_type = collector.by_type()
    if strict and collector.messages:
        summary = ", ".join(f"{dxftype}:{count}" for dxftype, count in by_type.items())
        raise ValueError(f"{len(collector.messages)} diagnostics reported ({summary})")

    out_path = Path(output_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(scene_to_svg(scene), encoding="utf-8")

    return ConvertResult(
        source_path=document.path,
        output_path=str(out_path),
        total_entities=count_entities(document),
        rendered_entities=len(scene.primitives),
        diagnostic_count=len(collector.messages),
        diagnostics_by_type=by_type,
        bbox=scene.bbox,
    )
