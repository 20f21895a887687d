from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from mclang_py.core.formatting import (
    COLOR_CODES,
    STYLE_CODES,
    Segment,
    TextStyle,
    merge_segments,
    parse,
    serialize,
    strip,
)

_CODES = sorted(COLOR_CODES) + sorted(STYLE_CODES)
_literal = st.characters(
    min_codepoint=32, max_codepoint=0x24F, exclude_characters="§"
)
_code = st.sampled_from(_CODES).map(lambda c: "§" + c)
_formatted = st.builds(
    lambda parts, tail: "".join(parts) + tail,
    st.lists(st.one_of(_literal, _code), max_size=40),
    st.sampled_from(["", "§"]),
)
_style = st.builds(
    TextStyle,
    color=st.one_of(st.none(), st.sampled_from(sorted(COLOR_CODES.values()))),
    bold=st.booleans(),
    italic=st.booleans(),
    underline=st.booleans(),
    strikethrough=st.booleans(),
    obfuscated=st.booleans(),
)
_segments = st.lists(
    st.builds(Segment, text=st.text(alphabet=_literal, max_size=6), style=_style),
    max_size=8,
)


@given(text=_formatted)
@settings(max_examples=150, deadline=None)
def test_property_segment_text_equals_stripped_text(text: str) -> None:
    """Concatenated segment text always equals the stripped source."""
    assert "".join(seg.text for seg in parse(text)) == strip(text)


@given(text=st.text(max_size=60))
@settings(max_examples=150, deadline=None)
def test_property_strip_is_idempotent(text: str) -> None:
    """Stripping twice changes nothing after the first pass."""
    once = strip(text)
    assert strip(once) == once


@given(segments=_segments)
@settings(max_examples=150, deadline=None)
def test_property_serialize_round_trips_merged_segments(
    segments: list[Segment],
) -> None:
    """Parsing serialized segments yields the merged input."""
    assert parse(serialize(segments)) == merge_segments(segments)
