from __future__ import annotations

import argparse
import sys
from collections import Counter
from dataclasses import replace
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Sequence

from .config import DEFAULT_OPTIONS
from .convert import DiagnosticCollector, count_entities, to_svg
from .document import SUBRECORD_TYPES, SUPPORTED_ENTITY_TYPES, read
from .record import format_numbers, record_type
from .render import render


def _package_version() -> str:
    try:
        return version("dxfsvg")
    except PackageNotFoundError:
        return "0.0.0"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dxfsvg", description="Inspect DXF files and convert them to SVG.")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_package_version()}",
    )
    subparsers = parser.add_subparsers(dest="command")

    inspect_parser = subparsers.add_parser("inspect", help="Show basic DXF information.")
    inspect_parser.add_argument("path", help="Path to DXF file.")
    inspect_parser.add_argument(
        "--verbose",
        action="store_true",
        help="List every rendering diagnostic.",
    )

    convert_parser = subparsers.add_parser("convert", help="Convert DXF to SVG.")
    convert_parser.add_argument("input_path", help="Path to DXF file.")
    convert_parser.add_argument("output_path", help="Path to output SVG file.")
    convert_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if any entity reports a diagnostic.",
    )
    return parser


def _run_inspect(path: str, *, verbose: bool = False) -> int:
    file_path = Path(path)
    if not file_path.exists():
        print(f"error: file not found: {file_path}", file=sys.stderr)
        return 2

    try:
        doc = read(str(file_path))
        collector = DiagnosticCollector()
        scene = render(doc, replace(DEFAULT_OPTIONS, diagnostic_sink=collector))
    except Exception as exc:
        print(f"error: failed to read DXF: {exc}", file=sys.stderr)
        return 2

    counts: Counter[str] = Counter(
        dxftype
        for dxftype in (record_type(entity) for entity in doc.entities)
        if dxftype and dxftype not in SUBRECORD_TYPES
    )

    print(f"file: {file_path}")
    print(f"total_entities: {count_entities(doc)}")
    for dxftype in SUPPORTED_ENTITY_TYPES:
        count = counts.get(dxftype, 0)
        if count > 0:
            print(f"{dxftype}: {count}")
    for dxftype, count in sorted(counts.items()):
        if dxftype in SUPPORTED_ENTITY_TYPES:
            continue
        print(f"unsupported[{dxftype}]: {count}")

    print(f"layers: {len(doc.table('LAYER'))}")
    print(f"linetypes: {len(doc.table('LTYPE'))}")
    print(f"blocks: {len(doc.blocks)}")
    bbox = scene.bbox
    print(f"bbox: {format_numbers((bbox.x, bbox.y, bbox.width, bbox.height))}")
    print(f"diagnostics: {len(collector.messages)}")
    if verbose:
        for message, _context in collector.messages:
            print(f"diagnostic: {message}")
    return 0


def _run_convert(input_path: str, output_path: str, *, strict: bool = False) -> int:
    dxf_path = Path(input_path)
    if not dxf_path.exists():
        print(f"error: file not found: {dxf_path}", file=sys.stderr)
        return 2

    try:
        result = to_svg(str(dxf_path), output_path, strict=strict)
    except Exception as exc:
        print(f"error: failed to convert DXF to SVG: {exc}", file=sys.stderr)
        return 2

    print(f"input: {result.source_path}")
    print(f"output: {result.output_path}")
    print(f"total_entities: {result.total_entities}")
    print(f"rendered_entities: {result.rendered_entities}")
    print(f"diagnostics: {result.diagnostic_count}")
    for dxftype, count in result.diagnostics_by_type.items():
        print(f"diagnostics[{dxftype}]: {count}")
    bbox = result.bbox
    print(f"bbox: {format_numbers((bbox.x, bbox.y, bbox.width, bbox.height))}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command == "inspect":
        return _run_inspect(args.path, verbose=bool(args.verbose))
    if args.command == "convert":
        return _run_convert(args.input_path, args.output_path, strict=bool(args.strict))

    parser.print_help()
    return 0
