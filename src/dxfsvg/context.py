from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from .config import DEFAULT_OPTIONS, RenderOptions
from .document import Document
from .record import Record, trimmed
from .style import StyleResolver, build_layer_map, build_linetype_map


@dataclass(frozen=True)
class RenderContext:
    document: Document
    options: RenderOptions
    styles: StyleResolver
    block_path: tuple[str, ...] = ()

    @classmethod
    def create(cls, document: Document, options: RenderOptions | None = None) -> "RenderContext":
        options = options or DEFAULT_OPTIONS
        styles = StyleResolver(
            layers=build_layer_map(document.table("LAYER"), options.resolve_color_index),
            linetypes=build_linetype_map(document.table("LTYPE")),
            resolve_color_index=options.resolve_color_index,
        )
        return cls(document=document, options=options, styles=styles)

    def enter_block(self, name: str) -> "RenderContext":
        return replace(self, block_path=self.block_path + (name,))

    def warn(self, message: str, context: Any = None) -> None:
        self.options.warn(message, context)

    def resolve_color_index(self, index: float) -> str:
        return self.options.resolve_color_index(int(index))


def handle_of(entity: Record) -> str | None:
    return trimmed(entity, 5)
