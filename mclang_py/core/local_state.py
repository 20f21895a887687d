"""Durable local state: last workspace, selected theme and custom themes."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .app_config import AppConfig
from .app_config import load as _load_app_config
from .atomic_io import write_text_atomic
from .model import Workspace
from .themes import Theme, ThemeFormatError, theme_from_document, theme_to_document
from .workspace_io import WorkspaceFormatError, from_document, to_document

_LOG = logging.getLogger(__name__)

WORKSPACE_KEY = "workspace"
THEME_ID_KEY = "currentThemeId"
CUSTOM_THEMES_KEY = "customThemes"


def default_state_path(root: Path | None = None, config: AppConfig | None = None) -> Path:
    """Return the state file location under the configured config directory."""
    cfg = config or _load_app_config(root)
    base = Path(root).resolve() if root is not None else Path.home()
    return base / cfg.config_dir / cfg.state_filename


class LocalState:
    """Key/value JSON document persisted with atomic replace.

    A missing or corrupt file reads as empty state.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _read(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            _LOG.warning("ignoring corrupt state file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        write_text_atomic(self.path, json.dumps(data, indent=2, ensure_ascii=False))

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    # ---- workspace -----------------------------------------------------
    def load_workspace(self, *, reference_language: str | None = None) -> Workspace | None:
        """Return the saved workspace, or None when absent or unreadable."""
        doc = self.get(WORKSPACE_KEY)
        if doc is None:
            return None
        try:
            if reference_language is None:
                return from_document(doc)
            return from_document(doc, reference_language=reference_language)
        except WorkspaceFormatError as exc:
            _LOG.warning("saved workspace is unreadable: %s", exc)
            return None

    def save_workspace(self, workspace: Workspace) -> None:
        self.set(WORKSPACE_KEY, to_document(workspace))

    def save_workspace_document(self, document: str) -> None:
        """Store an already serialized workspace document."""
        self.set(WORKSPACE_KEY, json.loads(document))

    # ---- themes --------------------------------------------------------
    @property
    def theme_id(self) -> str | None:
        value = self.get(THEME_ID_KEY)
        return str(value) if value else None

    def set_theme_id(self, theme_id: str) -> None:
        self.set(THEME_ID_KEY, theme_id)

    def custom_themes(self) -> list[Theme]:
        themes: list[Theme] = []
        for doc in self.get(CUSTOM_THEMES_KEY) or []:
            try:
                themes.append(theme_from_document(doc))
            except ThemeFormatError as exc:
                _LOG.warning("dropping invalid custom theme: %s", exc)
        return themes

    def save_custom_theme(self, theme: Theme) -> None:
        """Insert or replace ``theme`` (matched by id) in the custom list."""
        themes = self.custom_themes()
        idx = next((i for i, t in enumerate(themes) if t.id == theme.id), None)
        if idx is None:
            themes.append(theme)
        else:
            themes[idx] = theme
        self.set(CUSTOM_THEMES_KEY, [theme_to_document(t) for t in themes])
