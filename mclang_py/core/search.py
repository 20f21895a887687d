from __future__ import annotations

from collections.abc import Iterable, Iterator

from .model import LangFile, SearchResult, Workspace

CONTEXT_CHARS = 30
ELLIPSIS = "..."


def _iter_rows(files: Iterable[LangFile]) -> Iterator[tuple[LangFile, str, str]]:
    for file in files:
        for key, value in file.content.items():
            yield file, key, value or ""


def _build_context(value: str, start: int, length: int) -> str:
    if start < 0:
        left, right = 0, min(len(value), CONTEXT_CHARS * 2)
    else:
        left = max(0, start - CONTEXT_CHARS)
        right = min(len(value), start + length + CONTEXT_CHARS)
    snippet = value[left:right]
    if left > 0:
        snippet = f"{ELLIPSIS}{snippet}"
    if right < len(value):
        snippet = f"{snippet}{ELLIPSIS}"
    return snippet


def _result(file: LangFile, key: str, value: str, context: str) -> SearchResult:
    return SearchResult(
        file_id=file.id,
        file_name=file.path,
        key=key,
        value=value,
        context=context,
    )


def iter_matches(workspace: Workspace, query: str) -> Iterator[SearchResult]:
    """Yield a result for each key or value containing ``query``, in file order."""
    if not query:
        return
    needle = query.lower()
    for file, key, value in _iter_rows(workspace.files):
        lowered = value.lower()
        hit = lowered.find(needle)
        if hit < 0 and needle not in key.lower():
            continue
        yield _result(file, key, value, _build_context(value, hit, len(needle)))


def search(workspace: Workspace, query: str) -> list[SearchResult]:
    """Case-insensitive substring search over keys and values of every file."""
    return list(iter_matches(workspace, query))


def find_similar(workspace: Workspace, text: str) -> list[SearchResult]:
    """Rank values by how many distinct words of ``text`` they contain."""
    words = list(dict.fromkeys(text.lower().split()))
    if not words:
        return []
    scored: list[tuple[int, SearchResult]] = []
    for file, key, value in _iter_rows(workspace.files):
        lowered = value.lower()
        count = sum(1 for word in words if word in lowered)
        if count:
            scored.append((count, _result(file, key, value, value)))
    scored.sort(key=lambda item: item[0], reverse=True)
    return [result for _count, result in scored]


def find_by_key(workspace: Workspace, pattern: str) -> list[SearchResult]:
    """Return every entry whose key contains ``pattern``, ignoring case."""
    needle = pattern.lower()
    return [
        _result(file, key, value, value)
        for file, key, value in _iter_rows(workspace.files)
        if needle in key.lower()
    ]
