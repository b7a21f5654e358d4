from __future__ import annotations

import pytest

from dxfsvg.scene import Span
from dxfsvg.text import (
    FontRequest,
    MTextFont,
    MTextHeight,
    MTextOblique,
    MTextStack,
    TextRun,
    layout_mtext,
    layout_text_runs,
    mtext_angle,
    mtext_attachment,
    mtext_contents,
    parse_mtext_content,
    parse_text_content,
    text_alignment,
    text_decorations,
)
from tests._dxf_helpers import rec


def test_text_toggles_split_runs() -> None:
    assert parse_text_content("%%uAB%%u C") == [TextRun("AB", underline=True), TextRun(" C")]
    assert parse_text_content("%%k%%oX") == [TextRun("X", strike=True, overline=True)]


@pytest.mark.parametrize(
    "raw, expected",
    [("90%%d", "90°"), ("%%p0.1", "±0.1"), ("%%c12", "⌀12"), ("100%%%", "100%"), ("%%065", "A"), ("a%%", "a%%")],
)
def test_text_special_characters(raw: str, expected: str) -> None:
    assert parse_text_content(raw) == [TextRun(expected)]


def test_empty_text_yields_one_empty_run() -> None:
    assert parse_text_content("") == [TextRun("")]
    assert parse_text_content("%%u%%u") == [TextRun("")]


def test_text_decorations_combine_in_fixed_order() -> None:
    assert text_decorations(TextRun("x", strike=True, overline=True, underline=True)) == "line-through overline underline"
    assert text_decorations(TextRun("x")) is None


def test_single_run_decorates_the_element() -> None:
    assert layout_text_runs([TextRun("AB", underline=True)]) == (("AB",), "underline")


def test_several_runs_become_spans() -> None:
    children, decoration = layout_text_runs([TextRun("AB", underline=True), TextRun(" C")])
    assert decoration is None
    assert children == (Span(children=("AB",), text_decoration="underline"), Span(children=(" C",)))


def test_mtext_paragraphs_and_spaces() -> None:
    assert parse_mtext_content("a\\Pb\\Xc") == ["a\nb\nc"]
    assert parse_mtext_content("a\\~b") == ["a\u00a0b"]


def test_mtext_escapes_and_unicode() -> None:
    assert parse_mtext_content("\\\\x\\{y\\}") == ["\\x{y}"]
    assert parse_mtext_content("\\U+00B0C") == ["°C"]


def test_mtext_drops_formatting_without_counterpart() -> None:
    assert parse_mtext_content("\\Lunder\\l \\H2.5;big\\C1;red") == ["under bigred"]


def test_mtext_font_switch_inside_group() -> None:
    tokens = parse_mtext_content("{\\fArial|b1|i0|c0;Bold} tail")
    assert tokens == [[MTextFont("Arial", bold=True, italic=False), "Bold"], " tail"]


def test_mtext_stack_and_oblique_tokens() -> None:
    assert parse_mtext_content("1\\S1/2;") == ["1", MTextStack("1", "/", "2")]
    assert parse_mtext_content("\\Q15;slanted") == [MTextOblique(15.0), "slanted"]


def test_mtext_unbalanced_close_brace_is_ignored() -> None:
    assert parse_mtext_content("a}b") == ["a", "b"]


def test_layout_font_span_wraps_following_siblings() -> None:
    nodes = layout_mtext(parse_mtext_content("{\\fArial|b1;Bold} tail"))
    assert nodes == (Span(children=("Bold",), font_family="Arial", font_weight=700), " tail")


def test_layout_nested_font_frames_fold_right_to_left() -> None:
    nodes = layout_mtext([MTextFont("A"), "a", MTextFont("B", italic=True), "b"])
    inner = Span(children=("b",), font_family="B", font_weight=400, font_style="italic")
    assert nodes == (Span(children=("a", inner), font_family="A", font_weight=400),)


def test_layout_stacked_fraction() -> None:
    (stacked,) = layout_mtext([MTextStack("10", "/", "3")])
    numerator, denominator = stacked.children
    assert numerator == Span(children=("10",), dy="-.5em")
    assert denominator == Span(children=("3",), dy="1em", dx="-1em")


def test_layout_oblique() -> None:
    assert layout_mtext([MTextOblique(15.0), "x"]) == (Span(children=("x",), font_style="oblique 15deg"),)


def test_font_hook_replaces_request() -> None:
    seen: list[FontRequest] = []

    def resolve_font(request: FontRequest) -> FontRequest:
        seen.append(request)
        return FontRequest("Noto Sans", request.weight, request.style, 0.8)

    (span,) = layout_mtext([MTextFont("romans", bold=True), "x"], resolve_font)
    assert seen == [FontRequest("romans", weight=700)]
    assert span.font_family == "Noto Sans"
    assert span.font_weight == 700
    assert span.font_size == "0.8em"


def test_font_hook_returning_none_keeps_request() -> None:
    (span,) = layout_mtext([MTextFont("romans"), "x"], lambda request: None)
    assert span.font_family == "romans"
    assert span.font_size is None


@pytest.mark.parametrize(
    "value, expected",
    [
        ("1", ("text-before-edge", None)),
        ("2", ("text-before-edge", "middle")),
        ("5", ("central", "middle")),
        ("6", ("central", "end")),
        ("9", ("text-after-edge", "end")),
        ("10", (None, None)),
        (None, (None, None)),
    ],
)
def test_mtext_attachment(value: str | None, expected: tuple[str | None, str | None]) -> None:
    assert mtext_attachment(value) == expected


def test_mtext_angle_prefers_explicit_rotation() -> None:
    assert mtext_angle(rec("MTEXT", (50, "30"), (11, "0"), (21, "1"))) == 30


def test_mtext_angle_from_x_direction() -> None:
    assert mtext_angle(rec("MTEXT", (11, "0"), (21, "1"))) == 90


def test_mtext_angle_from_y_direction() -> None:
    assert mtext_angle(rec("MTEXT", (12, "1"), (22, "0"))) == -90


def test_mtext_angle_defaults_to_zero() -> None:
    assert mtext_angle(rec("MTEXT")) == 0


def test_mtext_contents_joins_chunks_before_final_text() -> None:
    assert mtext_contents(rec("MTEXT", (3, "ab"), (3, "cd"), (1, "ef"))) == "abcdef"


def test_text_alignment() -> None:
    assert text_alignment(rec("TEXT", (72, "1"), (73, "3"))) == ("text-before-edge", "middle")
    assert text_alignment(rec("TEXT", (72, "2"), (73, "1"))) == ("text-after-edge", "end")
    assert text_alignment(rec("TEXT", (72, "4"))) == (None, "middle")
    assert text_alignment(rec("TEXT", (72, "0"), (73, "0"))) == (None, None)


def test_relative_height_after_font_switch_scales_the_font() -> None:
    tokens = parse_mtext_content("{\\fArial;\\H0.5x;small}")
    assert tokens == [[MTextFont("Arial", scale=0.5), "small"]]
    assert layout_mtext(tokens) == (Span(children=("small",), font_family="Arial", font_weight=400, font_size="0.5em"),)


def test_relative_height_after_text_opens_sized_span() -> None:
    tokens = parse_mtext_content("a\\H2x;b")
    assert tokens == ["a", MTextHeight(2.0), "b"]
    assert layout_mtext(tokens) == ("a", Span(children=("b",), font_size="2em"))


def test_relative_height_reaches_font_hook() -> None:
    seen: list[FontRequest] = []

    def resolve_font(request: FontRequest) -> None:
        seen.append(request)

    layout_mtext(parse_mtext_content("\\fromans|b1;\\H1.5x;x"), resolve_font)
    assert seen == [FontRequest("romans", weight=700, scale=1.5)]
