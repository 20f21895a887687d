"""Parse and render Minecraft "§" formatting codes.

A control sequence is the marker followed by one code character. Color codes
set the active color and keep style flags; style codes switch a flag on;
``§r`` clears everything. Unknown code characters are consumed without effect.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Literal

MARKER = "§"
ALT_MARKER = "&"

COLOR_CODES: dict[str, str] = {
    "0": "black",
    "1": "dark_blue",
    "2": "dark_green",
    "3": "dark_aqua",
    "4": "dark_red",
    "5": "dark_purple",
    "6": "gold",
    "7": "gray",
    "8": "dark_gray",
    "9": "blue",
    "a": "green",
    "b": "aqua",
    "c": "red",
    "d": "light_purple",
    "e": "yellow",
    "f": "white",
}
STYLE_CODES: dict[str, str] = {
    "k": "obfuscated",
    "l": "bold",
    "m": "strikethrough",
    "n": "underline",
    "o": "italic",
    "r": "reset",
}
COLOR_HEX: dict[str, str] = {
    "black": "#000000",
    "dark_blue": "#0000AA",
    "dark_green": "#00AA00",
    "dark_aqua": "#00AAAA",
    "dark_red": "#AA0000",
    "dark_purple": "#AA00AA",
    "gold": "#FFAA00",
    "gray": "#AAAAAA",
    "dark_gray": "#555555",
    "blue": "#5555FF",
    "green": "#55FF55",
    "aqua": "#55FFFF",
    "red": "#FF5555",
    "light_purple": "#FF55FF",
    "yellow": "#FFFF55",
    "white": "#FFFFFF",
}
DEFAULT_COLOR_HEX = COLOR_HEX["white"]

_CODE_BY_COLOR = {name: code for code, name in COLOR_CODES.items()}
_CODE_BY_STYLE = {name: code for code, name in STYLE_CODES.items()}
_FLAGS = ("obfuscated", "bold", "strikethrough", "underline", "italic")
_STRIP_RE = re.compile(f"{MARKER}[0-9a-fk-or]", re.IGNORECASE)
_ALT_RE = re.compile(f"{ALT_MARKER}([0-9a-fk-or])", re.IGNORECASE)

CodeKind = Literal["color", "style"]


@dataclass(frozen=True, slots=True)
class TextStyle:
    """Style frame carried across segments until a reset."""

    color: str | None = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    obfuscated: bool = False

    @property
    def is_plain(self) -> bool:
        return self == _PLAIN

    def apply(self, code: str) -> TextStyle:
        """Return the frame that results from applying one code character."""
        code = code.lower()
        color = COLOR_CODES.get(code)
        if color is not None:
            return replace(self, color=color)
        style = STYLE_CODES.get(code)
        if style is None:
            return self
        if style == "reset":
            return _PLAIN
        return replace(self, **{style: True})

    def covers(self, other: TextStyle) -> bool:
        """True when ``other`` can be reached from this frame without a reset."""
        if other.color is None and self.color is not None:
            return False
        return all(getattr(other, flag) or not getattr(self, flag) for flag in _FLAGS)


_PLAIN = TextStyle()


@dataclass(frozen=True, slots=True)
class Segment:
    text: str
    style: TextStyle = _PLAIN


@dataclass(frozen=True, slots=True)
class FormatCode:
    position: int
    code: str
    kind: CodeKind


def parse(text: str) -> list[Segment]:
    """Split ``text`` into styled segments, consuming every marker pair."""
    segments: list[Segment] = []
    style = _PLAIN
    buf: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == MARKER and i + 1 < n:
            if buf:
                segments.append(Segment("".join(buf), style))
                buf = []
            style = style.apply(text[i + 1])
            i += 2
            continue
        buf.append(ch)
        i += 1
    if buf:
        segments.append(Segment("".join(buf), style))
    return segments


def strip(text: str) -> str:
    """Remove every marker + recognized code pair.

    Removal repeats until none are left, so pairs formed by joining the
    remaining text are removed too.
    """
    prev = None
    out = text
    while prev != out:
        prev = out
        out = _STRIP_RE.sub("", out)
    return out


def merge_segments(segments: Iterable[Segment]) -> list[Segment]:
    """Join adjacent segments that carry the same style."""
    out: list[Segment] = []
    for seg in segments:
        if not seg.text:
            continue
        if out and out[-1].style == seg.style:
            out[-1] = Segment(out[-1].text + seg.text, seg.style)
        else:
            out.append(seg)
    return out


def serialize(segments: Iterable[Segment]) -> str:
    """Emit marker sequences for ``segments``.

    The output is not byte-identical to the parsed source; redundant codes
    collapse but ``parse(serialize(s)) == merge_segments(s)``.
    """
    parts: list[str] = []
    active = _PLAIN
    for seg in segments:
        if not seg.text:
            continue
        target = seg.style
        if not active.covers(target):
            parts.append(MARKER + _CODE_BY_STYLE["reset"])
            active = _PLAIN
        if target.color is not None and target.color != active.color:
            parts.append(MARKER + _CODE_BY_COLOR[target.color])
        for flag in _FLAGS:
            if getattr(target, flag) and not getattr(active, flag):
                parts.append(MARKER + _CODE_BY_STYLE[flag])
        parts.append(seg.text)
        active = target
    return "".join(parts)


def to_section_codes(text: str) -> str:
    """Rewrite ``&x`` shorthand codes to ``§x``."""
    return _ALT_RE.sub(lambda m: MARKER + m.group(1), text)


def color_hex(name: str | None) -> str:
    """Return the hex value of a named color, white when unknown."""
    if not name:
        return DEFAULT_COLOR_HEX
    return COLOR_HEX.get(name, DEFAULT_COLOR_HEX)


def format_codes(text: str) -> list[FormatCode]:
    """Return the recognized codes in ``text`` with their offsets."""
    codes: list[FormatCode] = []
    i = 0
    while i < len(text) - 1:
        if text[i] != MARKER:
            i += 1
            continue
        char = text[i + 1].lower()
        if char in COLOR_CODES:
            codes.append(FormatCode(i, MARKER + char, "color"))
        elif char in STYLE_CODES:
            codes.append(FormatCode(i, MARKER + char, "style"))
        i += 2
    return codes


def insert_code(text: str, position: int, code: str) -> str:
    """Return ``text`` with ``code`` spliced in at a clamped ``position``."""
    position = max(0, min(position, len(text)))
    return text[:position] + code + text[position:]


def insert_style(text: str, position: int, style: str) -> str:
    code = _CODE_BY_STYLE.get(style)
    if code is None:
        return text
    return insert_code(text, position, MARKER + code)


def insert_color(text: str, position: int, color: str) -> str:
    code = _CODE_BY_COLOR.get(color)
    if code is None:
        return text
    return insert_code(text, position, MARKER + code)
