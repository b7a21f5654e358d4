from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Callable, Sequence, Union

from .record import Record, format_number, group_value, group_values, number, parse_number, round_decimal, trimmed
from .scene import Span, TextNode


@dataclass(frozen=True)
class TextRun:
    text: str
    strike: bool = False
    overline: bool = False
    underline: bool = False


@dataclass(frozen=True)
class MTextStack:
    numerator: str
    separator: str
    denominator: str


@dataclass(frozen=True)
class MTextFont:
    family: str
    bold: bool = False
    italic: bool = False
    scale: float | None = None


@dataclass(frozen=True)
class MTextOblique:
    degrees: float


@dataclass(frozen=True)
class MTextHeight:
    scale: float


MTextToken = Union[str, list, MTextStack, MTextFont, MTextOblique, MTextHeight]


@dataclass(frozen=True)
class FontRequest:
    family: str
    weight: int = 400
    style: str | None = None
    scale: float | None = None


FontResolver = Callable[[FontRequest], Union[FontRequest, None]]

# TEXT group code 73 (vertical) and 72 (horizontal) justification
TEXT_DOMINANT_BASELINE = {1: "text-after-edge", 2: "central", 3: "text-before-edge"}
TEXT_ANCHOR = {1: "middle", 2: "end", 4: "middle"}

_TEXT_SPECIAL_CHARACTERS = {"d": "°", "p": "±", "c": "⌀", "%": "%"}
_MTEXT_ARGUMENT_CODES = set("ACcFfHhQqSTtWwp")


def parse_text_content(text: str) -> list[TextRun]:
    runs: list[TextRun] = []
    buffer: list[str] = []
    strike = overline = underline = False

    def flush() -> None:
        if buffer:
            runs.append(TextRun("".join(buffer), strike, overline, underline))
            buffer.clear()

    i = 0
    n = len(text)
    while i < n:
        if text.startswith("%%", i) and i + 2 < n:
            code = text[i + 2].lower()
            if code in "kou":
                flush()
                if code == "k":
                    strike = not strike
                elif code == "o":
                    overline = not overline
                else:
                    underline = not underline
                i += 3
                continue
            if code in _TEXT_SPECIAL_CHARACTERS:
                buffer.append(_TEXT_SPECIAL_CHARACTERS[code])
                i += 3
                continue
            digits = text[i + 2 : i + 5]
            if len(digits) == 3 and digits.isdigit():
                buffer.append(chr(int(digits)))
                i += 5
                continue
        buffer.append(text[i])
        i += 1
    flush()

    if not runs:
        runs.append(TextRun(""))
    return runs


def parse_mtext_content(text: str) -> list[MTextToken]:
    root: list[MTextToken] = []
    stack: list[list[MTextToken]] = [root]
    buffer: list[str] = []

    def flush() -> None:
        if buffer:
            stack[-1].append("".join(buffer))
            buffer.clear()

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]

        if ch == "{":
            flush()
            group: list[MTextToken] = []
            stack[-1].append(group)
            stack.append(group)
            i += 1
            continue
        if ch == "}":
            flush()
            if len(stack) > 1:
                stack.pop()
            i += 1
            continue
        if ch != "\\":
            buffer.append(ch)
            i += 1
            continue
        if i + 1 >= n:
            buffer.append("\\")
            break

        code = text[i + 1]
        if code in "\\{}":
            buffer.append(code)
            i += 2
            continue
        if code in {"P", "X"}:
            buffer.append("\n")
            i += 2
            continue
        if code == "~":
            buffer.append("\u00a0")
            i += 2
            continue
        if code in {"L", "l", "O", "o", "K", "k"}:
            i += 2
            continue
        if code in {"U", "u"} and i + 6 < n and text[i + 2] == "+":
            hex_digits = text[i + 3 : i + 7]
            if all(c in "0123456789abcdefABCDEF" for c in hex_digits):
                buffer.append(chr(int(hex_digits, 16)))
                i += 7
                continue
        if code in _MTEXT_ARGUMENT_CODES:
            end = text.find(";", i + 2)
            if end < 0:
                end = n
            argument = text[i + 2 : end]
            i = end + 1
            if code == "S":
                flush()
                stack[-1].append(_parse_stack(argument))
            elif code in {"f", "F"}:
                flush()
                stack[-1].append(_parse_font(argument))
            elif code == "Q":
                degrees = parse_number(argument)
                if not math.isnan(degrees):
                    flush()
                    stack[-1].append(MTextOblique(degrees))
            elif code == "H" and argument.endswith("x"):
                # absolute heights are dropped, relative ones scale the font
                scale = parse_number(argument[:-1])
                if not math.isnan(scale):
                    flush()
                    _append_height(stack[-1], scale)
            continue

        buffer.append(code)
        i += 2
    flush()

    return root


def _parse_stack(argument: str) -> MTextStack:
    for i, ch in enumerate(argument):
        if ch in "^/#":
            return MTextStack(argument[:i], ch, argument[i + 1 :])
    return MTextStack(argument, "", "")


def _append_height(tokens: list[MTextToken], scale: float) -> None:
    if tokens and isinstance(tokens[-1], MTextFont):
        tokens[-1] = replace(tokens[-1], scale=scale)
        return
    tokens.append(MTextHeight(scale))


def _parse_font(argument: str) -> MTextFont:
    family, *options = argument.split("|")
    return MTextFont(
        family=family,
        bold="b1" in options,
        italic="i1" in options,
    )


def text_decorations(run: TextRun) -> str | None:
    decorations = []
    if run.strike:
        decorations.append("line-through")
    if run.overline:
        decorations.append("overline")
    if run.underline:
        decorations.append("underline")
    return " ".join(decorations) or None


def layout_text_runs(runs: Sequence[TextRun]) -> tuple[tuple[TextNode, ...], str | None]:
    if len(runs) == 1:
        return (runs[0].text,), text_decorations(runs[0])
    return (
        tuple(Span(children=(run.text,), text_decoration=text_decorations(run)) for run in runs),
        None,
    )


def _stack_span(stack: MTextStack) -> Span:
    return Span(
        children=(
            Span(children=(stack.numerator,), dy="-.5em"),
            Span(
                children=(stack.denominator,),
                dy="1em",
                dx=format_number(len(stack.numerator) / -2) + "em",
            ),
        )
    )


def _font_attributes(font: MTextFont, resolve_font: FontResolver | None) -> dict[str, object]:
    request = FontRequest(
        family=font.family,
        weight=700 if font.bold else 400,
        style="italic" if font.italic else None,
        scale=font.scale,
    )
    resolved = resolve_font(request) if resolve_font is not None else None
    if resolved is None:
        resolved = request
    return {
        "font_family": resolved.family,
        "font_weight": resolved.weight,
        "font_style": resolved.style,
        "font_size": format_number(resolved.scale) + "em" if resolved.scale and resolved.scale != 1 else None,
    }


def layout_mtext(tokens: Sequence[MTextToken], resolve_font: FontResolver | None = None) -> tuple[TextNode, ...]:
    # a font, oblique or height switch wraps every following sibling in its span
    frames: list[tuple[dict[str, object], list[TextNode]]] = [({}, [])]
    for token in tokens:
        out = frames[-1][1]
        if isinstance(token, str):
            out.append(token)
        elif isinstance(token, list):
            out.extend(layout_mtext(token, resolve_font))
        elif isinstance(token, MTextStack):
            out.append(_stack_span(token))
        elif isinstance(token, MTextFont):
            frames.append((_font_attributes(token, resolve_font), []))
        elif isinstance(token, MTextOblique):
            frames.append(({"font_style": f"oblique {format_number(token.degrees)}deg"}, []))
        elif isinstance(token, MTextHeight):
            frames.append(({"font_size": format_number(token.scale) + "em"}, []))

    while len(frames) > 1:
        attributes, children = frames.pop()
        frames[-1][1].append(Span(children=tuple(children), **attributes))
    return tuple(frames[0][1])


def mtext_attachment(value: str | None) -> tuple[str | None, str | None]:
    attachment = parse_number(value, 71)
    if math.isnan(attachment) or not 1 <= attachment <= 9:
        return None, None
    point = int(attachment)
    if point <= 3:
        baseline = "text-before-edge"
    elif point <= 6:
        baseline = "central"
    else:
        baseline = "text-after-edge"
    anchor = {1: None, 2: "middle", 0: "end"}[point % 3]
    return baseline, anchor


def _direction_angle(y: float, x: float) -> float:
    y = 0.0 if math.isnan(y) else y
    x = 0.0 if math.isnan(x) else x
    return round_decimal(math.degrees(math.atan2(y, x)), 5) or 0.0


def mtext_angle(record: Record) -> float:
    angle = number(record, 50)
    if not math.isnan(angle):
        return round_decimal(angle, 5) or 0.0
    if group_value(record, 11) is not None or group_value(record, 21) is not None:
        return _direction_angle(number(record, 21), number(record, 11))
    if group_value(record, 12) is not None or group_value(record, 22) is not None:
        return round_decimal(_direction_angle(number(record, 22), number(record, 12)) - 90, 5) or 0.0
    return 0.0


def mtext_contents(record: Record) -> str:
    return "".join(group_values(record, 3)) + (group_value(record, 1) or "")


def text_alignment(record: Record) -> tuple[str | None, str | None]:
    vertical = parse_number(trimmed(record, 73), 73)
    horizontal = parse_number(trimmed(record, 72), 72)
    baseline = TEXT_DOMINANT_BASELINE.get(int(vertical)) if not math.isnan(vertical) else None
    anchor = TEXT_ANCHOR.get(int(horizontal)) if not math.isnan(horizontal) else None
    return baseline, anchor
