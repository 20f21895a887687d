"""Project workspace files into editable translation entries."""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from .model import LangFile, TranslationEntry, Workspace


class SortColumn(enum.Enum):
    KEY = "key"
    REFERENCE = "reference"
    TRANSLATION = "translation"
    STATUS = "status"


@dataclass(frozen=True, slots=True)
class TranslationProgress:
    translated: int = 0
    missing: int = 0
    total: int = 0

    @property
    def percent(self) -> int:
        if self.total <= 0:
            return 0
        return int(round(self.translated * 100 / self.total))


def _collate(text: str) -> tuple[str, str]:
    """Return a case-insensitive sort key that breaks ties by original case."""
    return (text.casefold(), text)


def project_entries(
    workspace: Workspace | None, current_file: LangFile | None
) -> list[TranslationEntry]:
    """Return entries for ``current_file`` against the workspace reference.

    Keys from either side are included; the absent side reads as ``""``.
    Default order is pinned first, then key order.
    """
    if workspace is None or current_file is None:
        return []
    reference = workspace.reference_file.content if workspace.reference_file else {}
    current = current_file.content
    pinned = set(workspace.pinned_keys)
    annotated = {a.key for a in workspace.annotations if a.file_id == current_file.id}

    keys: dict[str, None] = dict.fromkeys(reference)
    keys.update(dict.fromkeys(current))
    entries = []
    for key in keys:
        ref_value = reference.get(key, "") or ""
        value = current.get(key, "") or ""
        entries.append(
            TranslationEntry(
                key=key,
                reference=ref_value,
                translation=value,
                has_annotation=key in annotated,
                is_missing=not value and bool(ref_value),
                is_pinned=key in pinned,
            )
        )
    entries.sort(key=lambda e: _collate(e.key))
    return _pinned_first(entries)


def _pinned_first(entries: Sequence[TranslationEntry]) -> list[TranslationEntry]:
    return [e for e in entries if e.is_pinned] + [e for e in entries if not e.is_pinned]


def _sort_key(column: SortColumn) -> Callable[[TranslationEntry], object]:
    if column is SortColumn.KEY:
        return lambda e: _collate(e.key)
    if column is SortColumn.REFERENCE:
        return lambda e: _collate(e.reference)
    if column is SortColumn.TRANSLATION:
        return lambda e: _collate(e.translation)
    return lambda e: not e.is_missing  # missing first


def sort_entries(
    entries: Iterable[TranslationEntry],
    column: SortColumn | None,
    *,
    descending: bool = False,
) -> list[TranslationEntry]:
    """Sort by a column inside each pin partition; pinned rows stay on top."""
    rows = list(entries)
    if column is None:
        return _pinned_first(rows)
    key = _sort_key(column)
    pinned = sorted((e for e in rows if e.is_pinned), key=key, reverse=descending)
    rest = sorted((e for e in rows if not e.is_pinned), key=key, reverse=descending)
    return pinned + rest


def filter_entries(
    entries: Iterable[TranslationEntry], text: str
) -> list[TranslationEntry]:
    """Return rows whose key, reference or translation contains ``text``."""
    rows = list(entries)
    needle = text.lower()
    if not needle:
        return rows
    return [
        e
        for e in rows
        if needle in e.key.lower()
        or needle in e.reference.lower()
        or needle in e.translation.lower()
    ]


def progress(
    reference_file: LangFile | None, current_file: LangFile | None
) -> TranslationProgress:
    """Count translated and missing keys of ``current_file`` against the reference."""
    if reference_file is None or current_file is None:
        return TranslationProgress()
    content = current_file.content
    translated = sum(1 for value in content.values() if value and value.strip())
    missing = sum(1 for key in reference_file.content if not content.get(key))
    return TranslationProgress(
        translated=translated,
        missing=missing,
        total=len(reference_file.content),
    )
