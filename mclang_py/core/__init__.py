"""Backend-core public surface – re-export runtime API."""

from __future__ import annotations

from .entries import SortColumn, TranslationProgress, project_entries, sort_entries
from .file_tree import FileTreeNode, build_file_tree
from .formatting import Segment, TextStyle, parse, strip
from .history import History
from .model import (
    REFERENCE_LANGUAGE,
    Annotation,
    EditorMode,
    LangFile,
    SearchResult,
    TranslationEntry,
    Workspace,
)
from .search import find_by_key, find_similar, search
from .store import WorkspaceStore

__all__ = [
    "REFERENCE_LANGUAGE",
    "Annotation",
    "EditorMode",
    "FileTreeNode",
    "History",
    "LangFile",
    "SearchResult",
    "Segment",
    "SortColumn",
    "TextStyle",
    "TranslationEntry",
    "TranslationProgress",
    "Workspace",
    "WorkspaceStore",
    "build_file_tree",
    "find_by_key",
    "find_similar",
    "parse",
    "project_entries",
    "search",
    "sort_entries",
    "strip",
]
