from typing import Sequence

from .config import RenderOptions
from .convert import ConvertResult, to_svg
from .document import Document, read, read_stream
from .errors import DocumentReadError, DxfSvgError, FatalInputError
from .render import render
from .scene import BoundingBox, Scene
from .svg import scene_to_svg, svg_string
from .text import FontRequest

__all__ = [
    "read",
    "read_stream",
    "Document",
    "render",
    "Scene",
    "BoundingBox",
    "RenderOptions",
    "FontRequest",
    "scene_to_svg",
    "svg_string",
    "to_svg",
    "ConvertResult",
    "DxfSvgError",
    "FatalInputError",
    "DocumentReadError",
]


def main(argv: Sequence[str] | None = None) -> int:
    from dxfsvg.cli import main as cli_main

    return cli_main(argv)
