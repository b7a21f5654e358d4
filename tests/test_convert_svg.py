from __future__ import annotations

from pathlib import Path

import pytest

import dxfsvg
from dxfsvg.scene import BoundingBox
from tests._dxf_helpers import collecting_options, dxf_text, make_document, rec


def _line(handle: str = "A"):
    return rec("LINE", (5, handle), (10, "0"), (20, "0"), (11, "10"), (21, "0"))


def test_to_svg_writes_file_and_reports(tmp_path: Path) -> None:
    source = tmp_path / "in.dxf"
    source.write_text(
        dxf_text(
            [
                rec("POLYLINE", (70, "0")),
                rec("VERTEX", (10, "0"), (20, "0")),
                rec("VERTEX", (10, "5"), (20, "5")),
                rec("SEQEND"),
                _line(),
                rec("SPLINE", (5, "S")),
            ]
        ),
        encoding="utf-8",
    )
    output = tmp_path / "out" / "drawing.svg"

    result = dxfsvg.to_svg(str(source), str(output))

    assert output.exists()
    assert output.read_text(encoding="utf-8").startswith('<svg xmlns="http://www.w3.org/2000/svg"')
    assert result.source_path == str(source)
    assert result.output_path == str(output)
    assert result.total_entities == 3
    assert result.rendered_entities == 2
    assert result.diagnostic_count == 1
    assert result.diagnostics_by_type == {"SPLINE": 1}
    assert result.bbox == BoundingBox(0, -5, 10, 5)


def test_to_svg_forwards_diagnostics_to_caller_sink(tmp_path: Path) -> None:
    options, sink = collecting_options()
    document = make_document([rec("SPLINE"), _line()])

    result = dxfsvg.to_svg(document, str(tmp_path / "out.svg"), options=options)

    assert result.source_path is None
    assert sink.texts == ["Unknown entity type: SPLINE"]


def test_to_svg_strict_rejects_diagnostics(tmp_path: Path) -> None:
    output = tmp_path / "out.svg"
    document = make_document([rec("SPLINE"), _line()])

    with pytest.raises(ValueError, match=r"1 diagnostics reported \(SPLINE:1\)"):
        dxfsvg.to_svg(document, str(output), strict=True)
    assert not output.exists()


def test_to_svg_strict_accepts_clean_document(tmp_path: Path) -> None:
    result = dxfsvg.to_svg(make_document([_line()]), str(tmp_path / "out.svg"), strict=True)
    assert result.diagnostic_count == 0
    assert result.diagnostics_by_type == {}


def test_document_export_svg(tmp_path: Path) -> None:
    output = tmp_path / "out.svg"
    result = make_document([_line()]).export_svg(str(output))
    assert result.rendered_entities == 1
    assert 'data-5="A"' in output.read_text(encoding="utf-8")
