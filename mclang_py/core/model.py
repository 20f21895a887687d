"""Workspace data model shared by the store, projector and IO layers."""

from __future__ import annotations

import copy
import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

REFERENCE_LANGUAGE = "en_us"
HISTORY_LIMIT = 50


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_now() -> str:
    return utc_now().isoformat()


class EditorMode(enum.Enum):
    GUI = "gui"
    RAW = "raw"


@dataclass(slots=True)
class LangFile:
    """One key/value language file inside a workspace."""

    id: str
    path: str  # e.g. "kubejs/assets/<namespace>/lang/en_us.json"
    namespace: str
    language: str
    content: dict[str, str] = field(default_factory=dict)
    is_reference: bool = False

    @property
    def file_name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass(slots=True)
class Annotation:
    id: str
    file_id: str
    key: str
    text: str
    color: str | None = None
    created_at: str = ""
    modified_at: str = ""


@dataclass(slots=True)
class Workspace:
    """Top-level editable unit: language files, annotations and pin state.

    ``reference_file`` always points at a member of ``files`` (identity, not a
    copy); call :meth:`resolve_reference` after replacing ``files``.
    """

    id: str
    name: str
    files: list[LangFile] = field(default_factory=list)
    reference_file: LangFile | None = None
    current_language: str = REFERENCE_LANGUAGE
    annotations: list[Annotation] = field(default_factory=list)
    pinned_keys: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    modified_at: datetime = field(default_factory=utc_now)

    def file_by_id(self, file_id: str) -> LangFile | None:
        return next((f for f in self.files if f.id == file_id), None)

    def files_for_language(self, language: str) -> list[LangFile]:
        return [f for f in self.files if f.language == language]

    def languages(self) -> list[str]:
        seen: dict[str, None] = {}
        for f in self.files:
            seen.setdefault(f.language, None)
        return list(seen)

    def resolve_reference(self) -> None:
        if self.reference_file is None:
            return
        self.reference_file = self.file_by_id(self.reference_file.id)

    def touch(self, now: datetime | None = None) -> None:
        self.modified_at = now or utc_now()

    def snapshot(self) -> Workspace:
        """Return a deep copy; the copied reference stays an element of files."""
        return copy.deepcopy(self)


@dataclass(frozen=True, slots=True)
class TranslationEntry:
    key: str
    reference: str
    translation: str
    has_annotation: bool = False
    is_missing: bool = False
    is_pinned: bool = False


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    workspace: Workspace
    timestamp: float


@dataclass(frozen=True, slots=True)
class SearchResult:
    file_id: str
    file_name: str
    key: str
    value: str
    context: str
