from __future__ import annotations

import pytest

from dxfsvg.colors import INHERIT, NEUTRAL_GRAY, resolve_color_index
from dxfsvg.style import StyleResolver, build_layer_map, build_linetype_map, normalize_dash_pattern
from tests._dxf_helpers import label_color, rec


def _resolver() -> StyleResolver:
    layers = build_layer_map(
        [
            rec("LAYER", (2, "Walls"), (62, "1"), (6, "DASHED")),
            rec("LAYER", (2, "Hidden"), (62, "-3")),
            rec("LAYER", (2, "NoColor")),
            rec("STYLE", (2, "Walls"), (62, "5")),
        ],
        label_color,
    )
    linetypes = build_linetype_map(
        [
            rec("LTYPE", (2, "DASHED"), (49, "0.5"), (49, "-0.25")),
            rec("LTYPE", (2, "CONTINUOUS")),
        ]
    )
    return StyleResolver(layers=layers, linetypes=linetypes, resolve_color_index=label_color)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ([], ()),
        ([0.5, -0.25], (0.5, 0.25)),
        ([0.0, -0.25], (0.25, 0.0)),
        ([0.0, -0.25, 0.5, -0.1], (0.25, 0.5, 0.1, 0.0)),
        ([0.5], (0.5, 0.5)),
        ([0.5, -0.25, 0.0], (0.5, 0.25, 0.0, 0.5, 0.25, 0.0)),
    ],
)
def test_normalize_dash_pattern(raw: list[float], expected: tuple[float, ...]) -> None:
    assert normalize_dash_pattern(raw) == expected


def test_normalized_dash_patterns_are_empty_or_even() -> None:
    samples = [[], [1.0], [0.0], [1.0, -1.0], [0.0, -1.0], [1.0, -1.0, 0.0], [0.0, 0.0, 1.0, -2.0]]
    for raw in samples:
        assert len(normalize_dash_pattern(raw)) % 2 == 0


def test_layer_map_resolves_colors_once() -> None:
    resolver = _resolver()
    assert resolver.layers["Walls"].color == "c1"
    assert resolver.layers["Walls"].linetype == "DASHED"
    assert resolver.layers["Hidden"].color == "c3"
    assert resolver.layers["NoColor"].color == NEUTRAL_GRAY
    assert set(resolver.layers) == {"Walls", "Hidden", "NoColor"}


def test_layer_map_is_read_only() -> None:
    resolver = _resolver()
    with pytest.raises(TypeError):
        resolver.layers["New"] = resolver.layers["Walls"]  # type: ignore[index]


def test_linetype_map_keeps_only_dashed_patterns() -> None:
    resolver = _resolver()
    assert resolver.linetypes["DASHED"].pattern == (0.5, 0.25)
    assert "CONTINUOUS" not in resolver.linetypes


def test_explicit_color_index_wins() -> None:
    resolver = _resolver()
    assert resolver.color(rec("LINE", (8, "Walls"), (62, "4"))) == "c4"


def test_by_layer_and_missing_color_use_layer_color() -> None:
    resolver = _resolver()
    assert resolver.color(rec("LINE", (8, "Walls"), (62, "256"))) == "c1"
    assert resolver.color(rec("LINE", (8, "Walls"))) == "c1"


def test_by_block_color_inherits_from_context() -> None:
    resolver = _resolver()
    assert resolver.color(rec("LINE", (8, "Walls"), (62, "0"))) == INHERIT


def test_unresolved_color_defaults_to_inherit() -> None:
    resolver = _resolver()
    entity = rec("LINE", (8, "Unknown"))
    assert resolver.explicit_color(entity) is None
    assert resolver.color(entity) == INHERIT


def test_true_color_takes_precedence_over_color_index() -> None:
    resolver = _resolver()
    entity = rec("LINE", (8, "Walls"), (62, "4"), (420, str(0x123456)))
    assert resolver.color(entity) == "#123456"


def test_entity_linetype_overrides_layer_linetype() -> None:
    resolver = _resolver()
    assert resolver.dash(rec("LINE", (8, "Walls"))) == (0.5, 0.25)
    assert resolver.dash(rec("LINE", (8, "Walls"), (6, "CONTINUOUS"))) == ()
    assert resolver.dash(rec("LINE", (8, "Hidden"), (6, "DASHED"))) == (0.5, 0.25)
    assert resolver.dash(rec("LINE")) == ()


@pytest.mark.parametrize(
    "extrusion_z, mirrored",
    [("-1", True), ("-0.99", True), ("1", False), ("-0.9", False), (None, False)],
)
def test_mirror_detects_back_facing_extrusion(extrusion_z: str | None, mirrored: bool) -> None:
    resolver = _resolver()
    groups = [(230, extrusion_z)] if extrusion_z is not None else []
    assert resolver.mirror(rec("CIRCLE", *groups)) is mirrored


def test_line_style_combines_color_dash_and_mirror() -> None:
    resolver = _resolver()
    style = resolver.line_style(rec("ARC", (8, "Walls"), (230, "-1")))
    assert style.stroke == "c1"
    assert style.dasharray == (0.5, 0.25)
    assert style.mirror is True


def test_default_color_index_mapping() -> None:
    assert resolve_color_index(1) == "#ff0000"
    assert resolve_color_index(0) == INHERIT
    assert resolve_color_index(256) == NEUTRAL_GRAY
    assert resolve_color_index(-1) == NEUTRAL_GRAY
