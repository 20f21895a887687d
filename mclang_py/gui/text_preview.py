"""Render formatting-code text as Qt rich-text HTML."""

from __future__ import annotations

import html

from mclang_py.core.formatting import Segment, color_hex, parse

OBFUSCATED_CLASS = "obfuscated"


def _css(segment: Segment) -> str:
    style = segment.style
    rules: list[str] = []
    if style.color is not None:
        rules.append(f"color: {color_hex(style.color)}")
    if style.bold:
        rules.append("font-weight: bold")
    if style.italic:
        rules.append("font-style: italic")
    decorations = [
        name
        for name, on in (
            ("underline", style.underline),
            ("line-through", style.strikethrough),
        )
        if on
    ]
    if decorations:
        rules.append(f"text-decoration: {' '.join(decorations)}")
    return "; ".join(rules)


def segment_to_html(segment: Segment) -> str:
    """Return one segment as an escaped, styled span."""
    body = html.escape(segment.text).replace("\n", "<br/>")
    css = _css(segment)
    attrs = f' style="{css}"' if css else ""
    if segment.style.obfuscated:
        # animation belongs to the view; only the flag is exposed here
        attrs += f' class="{OBFUSCATED_CLASS}"'
    if not attrs:
        return body
    return f"<span{attrs}>{body}</span>"


def segments_to_html(segments: list[Segment]) -> str:
    return "".join(segment_to_html(seg) for seg in segments)


def to_html(text: str) -> str:
    """Return Qt rich-text HTML for text with formatting codes."""
    return segments_to_html(parse(text))
