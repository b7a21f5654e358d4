from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Sequence, TextIO

from ezdxf.lldxf.const import DXFStructureError
from ezdxf.lldxf.tagger import ascii_tags_loader

from .errors import DocumentReadError
from .record import Record, group_value, record_type

SUPPORTED_ENTITY_TYPES = (
    "POINT",
    "LINE",
    "POLYLINE",
    "LWPOLYLINE",
    "CIRCLE",
    "ARC",
    "ELLIPSE",
    "LEADER",
    "HATCH",
    "SOLID",
    "TEXT",
    "MTEXT",
    "DIMENSION",
    "ACAD_TABLE",
    "INSERT",
)

# polyline vertices and their end marker belong to the preceding POLYLINE
SUBRECORD_TYPES = ("VERTEX", "SEQEND")


@dataclass(frozen=True)
class Document:
    header: Mapping[str, Record] = field(default_factory=dict)
    tables: Mapping[str, Sequence[Record]] = field(default_factory=dict)
    blocks: Mapping[str, Sequence[Record]] = field(default_factory=dict)
    entities: Sequence[Record] = ()
    path: str | None = None

    def table(self, name: str) -> Sequence[Record]:
        return self.tables.get(name, ())

    def header_var(self, name: str) -> Record | None:
        return self.header.get(name)

    def render(self, *args, **kwargs):
        from .render import render

        return render(self, *args, **kwargs)

    def export_svg(self, output_path: str, **kwargs):
        from .convert import to_svg

        return to_svg(self, output_path, **kwargs)


def read(path: str) -> Document:
    file_path = Path(path)
    with file_path.open("r", encoding="utf-8", errors="replace") as stream:
        return read_stream(stream, path=str(file_path))


def read_stream(stream: TextIO, *, path: str | None = None) -> Document:
    try:
        tags = [(int(tag.code), str(tag.value)) for tag in ascii_tags_loader(stream)]
    except DXFStructureError as exc:
        raise DocumentReadError(str(exc)) from exc
    return from_tags(tags, path=path)


def from_tags(tags: Iterable[tuple[int, str]], *, path: str | None = None) -> Document:
    header: dict[str, list[tuple[int, str]]] = {}
    tables: dict[str, list[Record]] = {}
    blocks: dict[str, list[Record]] = {}
    entities: list[Record] = []

    for section_name, records in _iter_sections(_split_records(tags)):
        if section_name == "HEADER":
            for record in records:
                _collect_header(header, record)
        elif section_name == "TABLES":
            _collect_tables(tables, records)
        elif section_name == "BLOCKS":
            _collect_blocks(blocks, records)
        elif section_name == "ENTITIES":
            entities.extend(records)

    return Document(
        header={name: tuple(values) for name, values in header.items()},
        tables={name: tuple(values) for name, values in tables.items()},
        blocks={name: tuple(values) for name, values in blocks.items()},
        entities=tuple(entities),
        path=path,
    )


def _split_records(tags: Iterable[tuple[int, str]]) -> list[Record]:
    records: list[Record] = []
    current: list[tuple[int, str]] | None = None
    for code, value in tags:
        if code == 0:
            if current is not None:
                records.append(tuple(current))
            if value.strip() == "EOF":
                current = None
                break
            current = [(code, value.strip())]
            continue
        if current is None:
            raise DocumentReadError(f"group code {code} outside of any record")
        current.append((code, value))
    if current is not None:
        records.append(tuple(current))
    return records


def _iter_sections(records: list[Record]) -> Iterable[tuple[str, list[Record]]]:
    section_name: str | None = None
    section: list[Record] = []
    for record in records:
        dxftype = record_type(record)
        if dxftype == "SECTION":
            section_name = (group_value(record, 2) or "").strip()
            section = []
            # the HEADER section keeps its variables inside the SECTION record
            if section_name == "HEADER":
                section.append(record)
            continue
        if dxftype == "ENDSEC":
            if section_name is not None:
                yield section_name, section
            section_name = None
            section = []
            continue
        if section_name is not None:
            section.append(record)
    if section_name is not None:
        raise DocumentReadError(f"section {section_name} is not terminated by ENDSEC")


def _collect_header(header: dict[str, list[tuple[int, str]]], record: Record) -> None:
    current: list[tuple[int, str]] | None = None
    for code, value in record:
        if code == 9:
            current = header.setdefault(value.strip(), [])
            continue
        if current is not None:
            current.append((code, value))


def _collect_tables(tables: dict[str, list[Record]], records: list[Record]) -> None:
    table: list[Record] | None = None
    for record in records:
        dxftype = record_type(record)
        if dxftype == "TABLE":
            table = tables.setdefault((group_value(record, 2) or "").strip(), [])
            continue
        if dxftype == "ENDTAB":
            table = None
            continue
        if table is not None:
            table.append(record)


def _collect_blocks(blocks: dict[str, list[Record]], records: list[Record]) -> None:
    block: list[Record] | None = None
    for record in records:
        dxftype = record_type(record)
        if dxftype == "BLOCK":
            block = blocks.setdefault((group_value(record, 2) or "").strip(), [])
            block.clear()
        if block is not None:
            block.append(record)
        if dxftype == "ENDBLK":
            block = None
