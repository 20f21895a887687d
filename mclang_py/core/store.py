"""Workspace store: the single mutable state container behind the editor.

All mutations go through :class:`WorkspaceStore`. Operations other than
:meth:`WorkspaceStore.create_workspace` and :meth:`WorkspaceStore.load_workspace`
are no-ops while no workspace is loaded, and unknown file or annotation ids
are ignored rather than raised.

History coverage is intentionally uneven:

* content edits (:meth:`update_translation`, :meth:`update_file_content`) never
  checkpoint on their own; callers invoke :meth:`save_translation_to_history`
  once per edit session so a burst of keystrokes is one undo step;
* :meth:`update_workspace` checkpoints the pre-update state automatically;
* pin, annotation and file-list operations do not checkpoint.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Mapping
from datetime import datetime

from . import entries as _entries
from .search import search as _search_workspace
from .app_config import AppConfig
from .app_config import load as _load_app_config
from .entries import TranslationProgress
from .file_tree import FileTreeNode, build_file_tree
from .history import History
from .model import (
    Annotation,
    EditorMode,
    LangFile,
    SearchResult,
    TranslationEntry,
    Workspace,
    new_id,
    utc_now,
)
from .themes import DEFAULT_THEME, Theme
from .workspace_io import parse_lang_content

_LOG = logging.getLogger(__name__)

Listener = Callable[[str], None]

_WORKSPACE_FIELDS = frozenset(f.name for f in dataclasses.fields(Workspace))
_STRUCTURAL_FIELDS = frozenset({"files", "reference_file"})
_ANNOTATION_FIELDS = frozenset({"file_id", "key", "text", "color"})


def _localized_path(path: str, source: str, target: str) -> str:
    head, sep, tail = path.rpartition("/")
    if source in tail:
        return f"{head}{sep}{tail.replace(source, target, 1)}"
    return path.replace(source, target, 1)


class WorkspaceStore:
    def __init__(
        self,
        workspace: Workspace | None = None,
        *,
        history: History | None = None,
        config: AppConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.config = config or _load_app_config()
        self.history = history or History(self.config.history_limit)
        self._clock = clock
        self._new_id = id_factory
        self._listeners: list[Listener] = []

        self.workspace: Workspace | None = None
        self.current_file: LangFile | None = None
        self.editor_mode = EditorMode.GUI
        self.theme: Theme = DEFAULT_THEME
        self.search_query = ""
        self.search_results: list[SearchResult] = []
        self.file_tree: list[FileTreeNode] = []
        if workspace is not None:
            self.load_workspace(workspace)

    @property
    def reference_language(self) -> str:
        return self.config.reference_language

    # ---- observers -----------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(operation)`` after every state change."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, operation: str) -> None:
        for listener in list(self._listeners):
            listener(operation)

    def _touch(self) -> None:
        if self.workspace is not None:
            self.workspace.touch(self._clock())

    def _iso_now(self) -> str:
        return self._clock().isoformat()

    def _rebuild_tree(self) -> None:
        self.file_tree = build_file_tree(self.workspace.files) if self.workspace else []

    def _resolve_current_file(self) -> None:
        if self.workspace is None or self.current_file is None:
            self.current_file = None
            return
        self.current_file = self.workspace.file_by_id(self.current_file.id)

    # ---- workspace -----------------------------------------------------
    def create_workspace(self, name: str) -> Workspace:
        """Start and return an empty workspace named ``name``."""
        now = self._clock()
        self.workspace = Workspace(
            id=self._new_id(),
            name=name,
            current_language=self.reference_language,
            created_at=now,
            modified_at=now,
        )
        self.file_tree = []
        self.current_file = None
        self._emit("create_workspace")
        return self.workspace

    def load_workspace(self, workspace: Workspace) -> None:
        """Install ``workspace`` wholesale; loading is not an undoable edit."""
        workspace.resolve_reference()
        self.workspace = workspace
        self.current_file = None
        self._rebuild_tree()
        self._emit("load_workspace")

    def update_workspace(self, **updates: object) -> None:
        """Checkpoint, then set workspace fields; unknown names raise ``TypeError``."""
        unknown = set(updates) - _WORKSPACE_FIELDS
        if unknown:
            raise TypeError(f"unknown workspace field(s): {', '.join(sorted(unknown))}")
        if self.workspace is None:
            return
        self.history.push(self.workspace)
        for name, value in updates.items():
            setattr(self.workspace, name, value)
        self._touch()
        if _STRUCTURAL_FIELDS & set(updates):
            self.workspace.resolve_reference()
            self._resolve_current_file()
            self._rebuild_tree()
        self._emit("update_workspace")

    def set_current_language(self, language: str) -> None:
        """Select ``language``, creating blank files from the reference if needed."""
        ws = self.workspace
        if ws is None:
            return
        ws.current_language = language
        self._touch()
        existing = ws.files_for_language(language)
        if existing:
            self.current_file = existing[0]
            self._emit("set_current_language")
            return
        created: list[LangFile] = []
        for source in ws.files_for_language(self.reference_language):
            created.append(
                LangFile(
                    id=self._new_id(),
                    path=_localized_path(source.path, self.reference_language, language),
                    namespace=source.namespace,
                    language=language,
                    content=dict.fromkeys(source.content, ""),
                )
            )
        ws.files.extend(created)
        self._rebuild_tree()
        if created:
            self.current_file = created[0]
            _LOG.debug("created %d file(s) for %s", len(created), language)
        self._emit("set_current_language")

    def toggle_pin_key(self, key: str) -> None:
        if self.workspace is None:
            return
        pinned = self.workspace.pinned_keys
        if key in pinned:
            pinned.remove(key)
        else:
            pinned.append(key)
        self._touch()
        self._emit("toggle_pin_key")

    # ---- files ---------------------------------------------------------
    def set_current_file(self, file: LangFile | None) -> None:
        ws = self.workspace
        if ws is None:
            return
        if file is None:
            self.current_file = None
            self._emit("set_current_file")
            return
        member = ws.file_by_id(file.id)
        if member is None:
            return
        self.current_file = member
        references = ws.files_for_language(self.reference_language)
        sibling = next((f for f in references if f.namespace == member.namespace), None)
        if sibling is not None:
            ws.reference_file = sibling
        elif references:
            ws.reference_file = references[0]
        self._emit("set_current_file")

    def update_file_content(self, file_id: str, content: Mapping[str, str]) -> None:
        if self.workspace is None:
            return
        file = self.workspace.file_by_id(file_id)
        if file is None:
            return
        file.content = dict(content)
        self._touch()
        self._emit("update_file_content")

    def add_file(self, file: LangFile) -> None:
        if self.workspace is None:
            return
        self.workspace.files.append(file)
        self._touch()
        self._rebuild_tree()
        self._emit("add_file")

    def remove_file(self, file_id: str) -> None:
        ws = self.workspace
        if ws is None or ws.file_by_id(file_id) is None:
            return
        ws.files = [f for f in ws.files if f.id != file_id]
        ws.resolve_reference()
        self._touch()
        self._rebuild_tree()
        if self.current_file is not None and self.current_file.id == file_id:
            self.current_file = None
        self._emit("remove_file")

    def set_reference_file(self, file_id: str) -> None:
        ws = self.workspace
        if ws is None:
            return
        file = ws.file_by_id(file_id)
        if file is None:
            return
        for other in ws.files:
            other.is_reference = False
        file.is_reference = True
        ws.reference_file = file
        self._emit("set_reference_file")

    def refresh_file_tree(self) -> None:
        if self.workspace is None:
            return
        self._rebuild_tree()
        self._emit("refresh_file_tree")

    # ---- editor --------------------------------------------------------
    def set_editor_mode(self, mode: EditorMode | str) -> None:
        self.editor_mode = EditorMode(mode)
        self._emit("set_editor_mode")

    def set_theme(self, theme: Theme) -> None:
        self.theme = theme
        self._emit("set_theme")

    def update_translation(self, key: str, value: str) -> None:
        """Set ``key`` in the current file without a checkpoint."""
        if self.workspace is None or self.current_file is None:
            return
        self.current_file.content[key] = value
        self._touch()
        self._emit("update_translation")

    def apply_raw_content(self, text: str) -> None:
        """Replace the current file's content from raw JSON editor text.

        Raises ``WorkspaceFormatError`` and leaves the file untouched when the
        text is not a JSON object of strings.
        """
        if self.workspace is None or self.current_file is None:
            return
        content = parse_lang_content(text, source=self.current_file.path)
        self.update_file_content(self.current_file.id, content)

    # ---- history -------------------------------------------------------
    def save_translation_to_history(self) -> None:
        """Checkpoint the workspace before a content edit."""
        if self.workspace is None:
            return
        self.history.push(self.workspace)
        _LOG.debug("checkpoint saved (%d in past)", self.history.past_count)
        self._emit("save_translation_to_history")

    def _install(self, workspace: Workspace, operation: str) -> None:
        self.workspace = workspace
        self._rebuild_tree()
        self._resolve_current_file()
        self._emit(operation)

    def undo(self) -> None:
        """Restore the previous checkpoint, if any."""
        if self.workspace is None:
            return
        previous = self.history.undo(self.workspace)
        if previous is not None:
            self._install(previous, "undo")

    def redo(self) -> None:
        if self.workspace is None:
            return
        following = self.history.redo(self.workspace)
        if following is not None:
            self._install(following, "redo")

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    # ---- annotations ---------------------------------------------------
    def add_annotation(
        self, file_id: str, key: str, text: str, color: str | None = None
    ) -> Annotation | None:
        if self.workspace is None:
            return None
        stamp = self._iso_now()
        annotation = Annotation(
            id=self._new_id(),
            file_id=file_id,
            key=key,
            text=text,
            color=color,
            created_at=stamp,
            modified_at=stamp,
        )
        self.workspace.annotations.append(annotation)
        self._touch()
        self._emit("add_annotation")
        return annotation

    def update_annotation(self, annotation_id: str, **updates: object) -> None:
        unknown = set(updates) - _ANNOTATION_FIELDS
        if unknown:
            raise TypeError(f"unknown annotation field(s): {', '.join(sorted(unknown))}")
        if self.workspace is None:
            return
        annotation = next(
            (a for a in self.workspace.annotations if a.id == annotation_id), None
        )
        if annotation is None:
            return
        for name, value in updates.items():
            setattr(annotation, name, value)
        annotation.modified_at = self._iso_now()
        self._touch()
        self._emit("update_annotation")

    def delete_annotation(self, annotation_id: str) -> None:
        if self.workspace is None:
            return
        self.workspace.annotations = [
            a for a in self.workspace.annotations if a.id != annotation_id
        ]
        self._touch()
        self._emit("delete_annotation")

    def annotations_for_key(self, file_id: str, key: str) -> list[Annotation]:
        if self.workspace is None:
            return []
        return [
            a
            for a in self.workspace.annotations
            if a.file_id == file_id and a.key == key
        ]

    # ---- search --------------------------------------------------------
    def set_search_query(self, query: str) -> None:
        self.search_query = query
        self._emit("set_search_query")

    def perform_search(self, query: str) -> list[SearchResult]:
        """Store ``query`` and return its matches across every file."""
        self.search_query = query
        if self.workspace is not None and query.strip():
            self.search_results = _search_workspace(self.workspace, query)
        else:
            self.search_results = []
        self._emit("perform_search")
        return self.search_results

    def clear_search(self) -> None:
        self.search_query = ""
        self.search_results = []
        self._emit("clear_search")

    # ---- derived views -------------------------------------------------
    def translation_entries(self) -> list[TranslationEntry]:
        return _entries.project_entries(self.workspace, self.current_file)

    def progress(self) -> TranslationProgress:
        if self.workspace is None:
            return TranslationProgress()
        return _entries.progress(self.workspace.reference_file, self.current_file)
