"""Test module for workspace-wide search helpers."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from mclang_py.core.model import LangFile, Workspace
from mclang_py.core.search import find_by_key, find_similar, search


def _ws(**files: dict[str, str]) -> Workspace:
    built = [
        LangFile(
            id=lang,
            path=f"kubejs/assets/mymod/lang/{lang}.json",
            namespace="mymod",
            language=lang,
            content=content,
        )
        for lang, content in files.items()
    ]
    return Workspace(id="w", name="w", files=built)


def test_search_is_case_insensitive_substring() -> None:
    """Verify a substring matches while non-substring words do not."""
    ws = _ws(en_us={"greet": "Hello World"})
    assert search(ws, "go") == []
    hits = search(ws, "WOR")
    assert [(h.file_id, h.key, h.context) for h in hits] == [
        ("en_us", "greet", "Hello World")
    ]
    assert hits[0].file_name == "kubejs/assets/mymod/lang/en_us.json"


def test_search_empty_query_returns_nothing() -> None:
    """Verify the empty query never matches."""
    assert search(_ws(en_us={"a": "b"}), "") == []


def test_search_context_window_adds_ellipses() -> None:
    """Verify context keeps thirty characters around the hit."""
    value = "x" * 50 + "needle" + "y" * 50
    ws = _ws(en_us={"k": value})
    (hit,) = search(ws, "needle")
    assert hit.context == "..." + value[20:86] + "..."
    assert hit.value == value


def test_search_key_only_match_uses_value_prefix() -> None:
    """Verify a key hit shows the start of the value as context."""
    long_value = "v" * 100
    ws = _ws(en_us={"menu.title": "Main", "menu.title2": long_value})
    hits = search(ws, "title")
    assert [h.context for h in hits] == ["Main", "v" * 60 + "..."]


def test_search_scans_files_in_workspace_order() -> None:
    """Verify results follow file order, then key order."""
    ws = _ws(en_us={"a": "cat", "b": "cat"}, fr_fr={"a": "chat"})
    assert [(h.file_id, h.key) for h in search(ws, "cat")] == [
        ("en_us", "a"),
        ("en_us", "b"),
    ]
    assert [h.file_id for h in search(ws, "at")] == ["en_us", "en_us", "fr_fr"]


def test_find_similar_ranks_by_distinct_word_hits() -> None:
    """Verify values matching more words rank first and ties keep scan order."""
    ws = _ws(
        en_us={"one": "red apple", "two": "red apple pie", "three": "blue pie"},
    )
    hits = find_similar(ws, "red red apple pie")
    assert [h.key for h in hits] == ["two", "one", "three"]
    assert find_similar(ws, "   ") == []


def test_find_by_key_matches_key_substring() -> None:
    """Verify key lookup ignores case and values."""
    ws = _ws(en_us={"item.Sword": "x", "block.stone": "sword"})
    assert [h.key for h in find_by_key(ws, "sword")] == ["item.Sword"]


_word = st.sampled_from(["alpha", "beta", "gamma", "delta"])


@given(
    values=st.lists(
        st.lists(_word, max_size=4).map(" ".join), min_size=1, max_size=12
    ),
    query=st.lists(_word, min_size=1, max_size=4).map(" ".join),
)
@settings(max_examples=60, deadline=None)
def test_property_find_similar_is_stable_descending(
    values: list[str], query: str
) -> None:
    """Scores never increase down the list and ties keep scan order."""
    ws = _ws(en_us={f"k{idx:02d}": v for idx, v in enumerate(values)})
    words = set(query.split())
    hits = find_similar(ws, query)
    scores = [sum(1 for w in words if w in h.value) for h in hits]
    assert all(s > 0 for s in scores)
    assert scores == sorted(scores, reverse=True)
    for left, right in zip(hits, hits[1:]):
        if sum(1 for w in words if w in left.value) == sum(
            1 for w in words if w in right.value
        ):
            assert left.key < right.key
