from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from .colors import resolve_color_index as _default_resolve_color_index
from .text import FontRequest, MTextToken, TextRun, parse_mtext_content, parse_text_content

logger = logging.getLogger("dxfsvg")

DiagnosticSink = Callable[..., None]


def log_diagnostic(message: str, context: Any = None) -> None:
    if context is None:
        logger.debug("%s", message)
    else:
        logger.debug("%s %r", message, context)


@dataclass(frozen=True)
class RenderOptions:
    diagnostic_sink: DiagnosticSink = log_diagnostic
    resolve_color_index: Callable[[int], str] = _default_resolve_color_index
    resolve_font: Callable[[FontRequest], FontRequest | None] | None = None
    parse_text: Callable[[str], list[TextRun]] = parse_text_content
    parse_mtext: Callable[[str], list[MTextToken]] = parse_mtext_content

    def warn(self, message: str, context: Any = None) -> None:
        self.diagnostic_sink(message, context)


DEFAULT_OPTIONS = RenderOptions()
