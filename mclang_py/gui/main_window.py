from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path

from PySide6.QtCore import QModelIndex, Qt, QTimer
from PySide6.QtGui import QAction, QColor, QKeySequence
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QInputDialog,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSplitter,
    QStackedWidget,
    QTableView,
    QToolBar,
    QTreeView,
    QVBoxLayout,
    QWidget,
)

from mclang_py.core import workspace_io
from mclang_py.core.autosave import AutosaveService, LocalStateSink
from mclang_py.core.formatting import (
    COLOR_CODES,
    STYLE_CODES,
    insert_color,
    insert_style,
    to_section_codes,
)
from mclang_py.core.local_state import LocalState, default_state_path
from mclang_py.core.model import EditorMode
from mclang_py.core.remote_import import RemoteRepoImporter
from mclang_py.core.store import WorkspaceStore
from mclang_py.core.themes import (
    Theme,
    ThemeFormatError,
    all_themes,
    create_custom_theme,
    export_theme,
    import_theme,
    theme_by_id,
)
from mclang_py.core.workspace_io import WorkspaceIOError

from .app import get_app
from .entry_model import TRANSLATION_COL, TranslationTableModel
from .text_preview import to_html
from .theme import apply_theme
from .tree_model import FILE_ID_ROLE, FileTreeModel

_LOG = logging.getLogger(__name__)
_NEW_LANGUAGE = "+ New language…"


class MainWindow(QMainWindow):
    """Main window: left file tree, right entry table or raw editor."""

    def __init__(
        self,
        store: WorkspaceStore | None = None,
        *,
        state: LocalState | None = None,
        source: Path | None = None,
    ) -> None:
        super().__init__()
        self.store = store or WorkspaceStore()
        self.state = state or LocalState(default_state_path(config=self.store.config))
        self.autosave = AutosaveService(self.store, LocalStateSink(self.state))
        self.setWindowTitle("Minecraft Translation Editor")

        splitter = QSplitter(self)
        self.setCentralWidget(splitter)

        # ── left pane: file tree + search results ─────────────────────────
        left = QWidget()
        left_layout = QVBoxLayout(left)
        self.tree = QTreeView()
        self.tree_model = FileTreeModel()
        self.tree.setModel(self.tree_model)
        self.tree.activated.connect(self._file_chosen)
        self.tree.clicked.connect(self._file_chosen)
        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Search all files…")
        self.search_edit.returnPressed.connect(self._run_search)
        self.results = QListWidget()
        self.results.itemActivated.connect(self._result_chosen)
        left_layout.addWidget(self.tree, 3)
        left_layout.addWidget(self.search_edit)
        left_layout.addWidget(self.results, 1)
        splitter.addWidget(left)

        # ── right pane: GUI table / raw JSON editor ───────────────────────
        right = QWidget()
        right_layout = QVBoxLayout(right)
        self.filter_edit = QLineEdit()
        self.filter_edit.setPlaceholderText("Filter keys and values…")
        self.table = QTableView()
        self.table_model = TranslationTableModel(self.store)
        self.table.setModel(self.table_model)
        self.table.setSortingEnabled(True)
        self.table.horizontalHeader().setSortIndicator(-1, Qt.AscendingOrder)
        self.filter_edit.textChanged.connect(self.table_model.set_filter)
        self.table.selectionModel().currentChanged.connect(self._entry_selected)
        self.preview = QLabel()
        self.preview.setTextFormat(Qt.RichText)
        self.preview.setWordWrap(True)
        gui_page = QWidget()
        gui_layout = QVBoxLayout(gui_page)
        gui_layout.addWidget(self.filter_edit)
        gui_layout.addWidget(self.table, 1)
        gui_layout.addWidget(self.preview)
        self.notes = QListWidget()
        self.notes.setMaximumHeight(90)
        self.notes.itemActivated.connect(lambda _item: self._edit_annotation())
        gui_layout.addWidget(self.notes)

        raw_page = QWidget()
        raw_layout = QVBoxLayout(raw_page)
        self.raw_edit = QPlainTextEdit()
        apply_raw = QPushButton("Apply JSON")
        apply_raw.clicked.connect(self._apply_raw)
        raw_layout.addWidget(self.raw_edit, 1)
        raw_layout.addWidget(apply_raw)

        self.pages = QStackedWidget()
        self.pages.addWidget(gui_page)
        self.pages.addWidget(raw_page)
        right_layout.addWidget(self.pages)
        splitter.addWidget(right)
        splitter.setSizes([260, 740])

        self.progress_label = QLabel()
        self.statusBar().addPermanentWidget(self.progress_label)

        self._build_actions()

        # ── persistence ───────────────────────────────────────────────────
        self._autosave_timer = QTimer(self)
        self._autosave_timer.setInterval(self.store.config.autosave_interval_ms)
        self._autosave_timer.timeout.connect(self.autosave.flush)
        self._autosave_timer.start()

        self.store.subscribe(self._on_store_changed)
        self._restore(source)

    # ----------------------------------------------------------------- setup
    def _build_actions(self) -> None:
        toolbar = QToolBar("Main", self)
        self.addToolBar(toolbar)

        act_open = QAction("&Open…", self)
        act_open.setShortcut(QKeySequence.StandardKey.Open)
        act_open.triggered.connect(self._open_dialog)
        toolbar.addAction(act_open)

        act_remote = QAction("Import from &GitHub…", self)
        act_remote.triggered.connect(self._import_remote)
        toolbar.addAction(act_remote)

        act_export = QAction("Export &ZIP…", self)
        act_export.triggered.connect(lambda: self._export(resource_pack=False))
        toolbar.addAction(act_export)

        act_pack = QAction("Export &resource pack…", self)
        act_pack.triggered.connect(lambda: self._export(resource_pack=True))
        toolbar.addAction(act_pack)

        self.act_undo = QAction("&Undo", self)
        self.act_undo.setShortcut(QKeySequence.StandardKey.Undo)
        self.act_undo.triggered.connect(self.store.undo)
        toolbar.addAction(self.act_undo)

        self.act_redo = QAction("&Redo", self)
        self.act_redo.setShortcuts(
            [QKeySequence.StandardKey.Redo, QKeySequence("Ctrl+Y")]
        )
        self.act_redo.triggered.connect(self.store.redo)
        toolbar.addAction(self.act_redo)

        act_mode = QAction("Toggle &raw editor", self)
        act_mode.setShortcut(QKeySequence("Ctrl+E"))
        act_mode.triggered.connect(self._toggle_mode)
        toolbar.addAction(act_mode)

        act_pin = QAction("&Pin key", self)
        act_pin.setShortcut(QKeySequence("Ctrl+P"))
        act_pin.triggered.connect(self._toggle_pin)
        toolbar.addAction(act_pin)

        act_note = QAction("&Annotate…", self)
        act_note.triggered.connect(self._annotate)
        toolbar.addAction(act_note)

        self.format_box = QComboBox()
        self.format_box.addItem("Format…", None)
        for name in COLOR_CODES.values():
            self.format_box.addItem(name.replace("_", " "), f"color:{name}")
        for name in STYLE_CODES.values():
            self.format_box.addItem(name, f"style:{name}")
        self.format_box.activated.connect(self._format_chosen)
        toolbar.addWidget(self.format_box)

        file_menu = self.menuBar().addMenu("&File")
        self.act_export_file = file_menu.addAction("Export current &file…")
        self.act_export_file.triggered.connect(self._export_file)
        self.act_export_workspace = file_menu.addAction("Export &workspace…")
        self.act_export_workspace.triggered.connect(self._export_workspace)

        edit_menu = self.menuBar().addMenu("&Edit")
        self.act_edit_note = edit_menu.addAction("&Edit note…")
        self.act_edit_note.triggered.connect(self._edit_annotation)
        self.act_delete_note = edit_menu.addAction("&Delete note")
        self.act_delete_note.triggered.connect(self._delete_annotation)
        self.act_convert = edit_menu.addAction("Convert &&-codes to §-codes")
        self.act_convert.triggered.connect(self._convert_ampersand_codes)

        theme_menu = self.menuBar().addMenu("&Theme")
        self.act_new_theme = theme_menu.addAction("&New theme…")
        self.act_new_theme.triggered.connect(self._new_theme)
        self.act_import_theme = theme_menu.addAction("&Import theme…")
        self.act_import_theme.triggered.connect(self._import_theme)
        self.act_export_theme = theme_menu.addAction("&Export theme…")
        self.act_export_theme.triggered.connect(self._export_theme)

        self.language_box = QComboBox()
        self.language_box.activated.connect(self._language_chosen)
        toolbar.addWidget(self.language_box)

        self.theme_box = QComboBox()
        self.theme_box.activated.connect(self._theme_chosen)
        toolbar.addWidget(self.theme_box)

    def _restore(self, source: Path | None) -> None:
        theme = theme_by_id(self.state.theme_id or "", self.state.custom_themes())
        if theme is not None:
            self.store.set_theme(theme)
        apply_theme(get_app(), self.store.theme)
        self._fill_theme_box()
        if source is not None:
            self.open_path(source)
            return
        saved = self.state.load_workspace(
            reference_language=self.store.reference_language
        )
        if saved is not None:
            self.store.load_workspace(saved)
        else:
            self._sync_views()

    # ----------------------------------------------------------------- views
    def _on_store_changed(self, operation: str) -> None:
        if operation == "set_theme":
            apply_theme(get_app(), self.store.theme)
            self.state.set_theme_id(self.store.theme.id)
        self._sync_views()

    def _sync_views(self) -> None:
        ws = self.store.workspace
        self.tree_model.set_tree(self.store.file_tree)
        self.tree.expandAll()
        self.act_undo.setEnabled(self.store.can_undo())
        self.act_redo.setEnabled(self.store.can_redo())
        self.pages.setCurrentIndex(0 if self.store.editor_mode is EditorMode.GUI else 1)
        current = self.store.current_file
        if self.store.editor_mode is EditorMode.RAW and current is not None:
            self.raw_edit.setPlainText(workspace_io.dump_lang_content(current.content))
        self.language_box.clear()
        if ws is not None:
            languages = [
                lang for lang in ws.languages() if lang != self.store.reference_language
            ]
            self.language_box.addItems([*languages, _NEW_LANGUAGE])
            if ws.current_language in languages:
                self.language_box.setCurrentIndex(languages.index(ws.current_language))
            self.setWindowTitle(f"Minecraft Translation Editor – {ws.name}")
        stats = self.store.progress()
        self.progress_label.setText(
            f"{stats.percent}% · {stats.translated} translated · "
            f"{stats.missing} missing · {stats.total} total"
        )
        self._refresh_notes()

    # ----------------------------------------------------------------- slots
    def open_path(self, path: Path) -> None:
        """Import a file, archive or workspace document and load it."""
        try:
            report = workspace_io.import_path(
                path, reference_language=self.store.reference_language
            )
        except WorkspaceIOError as exc:
            _LOG.warning("cannot open %s: %s", path, exc)
            QMessageBox.warning(self, "Import failed", f"{path}\n\n{exc}")
            return
        _LOG.info("opened %s (%d files)", path, len(report.imported_files))
        self.store.load_workspace(report.workspace)
        if report.warnings:
            QMessageBox.information(
                self, "Some files were skipped", "\n".join(report.warnings)
            )

    def _import_remote(self) -> None:
        url, ok = QInputDialog.getText(
            self, "Import from GitHub", "Repository URL or owner/repo:"
        )
        if not ok or not url.strip():
            return
        try:
            report = RemoteRepoImporter(config=self.store.config).import_repo(url)
        except (ValueError, WorkspaceIOError) as exc:
            QMessageBox.warning(self, "Import failed", str(exc))
            return
        self.store.load_workspace(report.workspace)
        if report.warnings:
            QMessageBox.information(
                self, "Some files were skipped", "\n".join(report.warnings)
            )

    def _theme_chosen(self, row: int) -> None:
        theme = theme_by_id(self.theme_box.itemData(row), self.state.custom_themes())
        if theme is not None:
            self.store.set_theme(theme)

    def _open_dialog(self) -> None:
        name, _ = QFileDialog.getOpenFileName(
            self, "Open", "", "Workspaces and language files (*.json *.zip)"
        )
        if name:
            self.open_path(Path(name))

    def _export(self, *, resource_pack: bool) -> None:
        ws = self.store.workspace
        if ws is None:
            return
        cfg = self.store.config
        default_name = workspace_io.archive_filename(
            cfg.pack_name if resource_pack else ws.name
        )
        name, _ = QFileDialog.getSaveFileName(self, "Export", default_name, "*.zip")
        if not name:
            return
        try:
            if resource_pack:
                data = workspace_io.export_resource_pack(
                    ws, description=cfg.pack_description, pack_format=cfg.pack_format
                )
            else:
                data = workspace_io.export_archive(ws)
            Path(name).write_bytes(data)
        except (WorkspaceIOError, OSError) as exc:
            QMessageBox.critical(self, "Export failed", str(exc))

    def _file_chosen(self, index: QModelIndex) -> None:
        ws = self.store.workspace
        file_id = index.data(FILE_ID_ROLE)
        if ws is None or not file_id:
            return
        file = ws.file_by_id(file_id)
        if file is not None:
            self.store.set_current_file(file)

    def _run_search(self) -> None:
        self.results.clear()
        for result in self.store.perform_search(self.search_edit.text()):
            item = QListWidgetItem(f"{result.key}: {result.context}")
            item.setToolTip(result.file_name)
            item.setData(Qt.UserRole, result.file_id)
            self.results.addItem(item)

    def _result_chosen(self, item: QListWidgetItem) -> None:
        ws = self.store.workspace
        file = ws.file_by_id(item.data(Qt.UserRole)) if ws else None
        if file is not None:
            self.store.set_current_file(file)

    def _entry_selected(self, current: QModelIndex, _previous: QModelIndex) -> None:
        if not current.isValid():
            self.preview.clear()
            return
        entry = self.table_model.entry(current.row())
        self.preview.setText(to_html(entry.translation or entry.reference))
        self._refresh_notes()

    def _selected_key(self) -> str | None:
        index = self.table.currentIndex()
        if not index.isValid():
            return None
        return self.table_model.entry(index.row()).key

    def _toggle_pin(self) -> None:
        key = self._selected_key()
        if key is not None:
            self.store.toggle_pin_key(key)

    def _annotate(self) -> None:
        key = self._selected_key()
        current = self.store.current_file
        if key is None or current is None:
            return
        text, ok = QInputDialog.getText(self, "Annotation", f"Note for {key}:")
        if ok and text.strip():
            self.store.add_annotation(current.id, key, text.strip())

    def _refresh_notes(self) -> None:
        """Mirror the annotations of the selected row into the notes list."""
        self.notes.clear()
        key = self._selected_key()
        current = self.store.current_file
        if key is None or current is None:
            return
        for note in self.store.annotations_for_key(current.id, key):
            item = QListWidgetItem(note.text)
            item.setData(Qt.UserRole, note.id)
            if note.color:
                item.setForeground(QColor(note.color))
            self.notes.addItem(item)

    def _selected_note_id(self) -> str | None:
        item = self.notes.currentItem()
        return item.data(Qt.UserRole) if item is not None else None

    def _edit_annotation(self) -> None:
        note_id = self._selected_note_id()
        if note_id is None:
            return
        text, ok = QInputDialog.getText(
            self, "Annotation", "Note:", text=self.notes.currentItem().text()
        )
        if ok and text.strip():
            self.store.update_annotation(note_id, text=text.strip())

    def _delete_annotation(self) -> None:
        note_id = self._selected_note_id()
        if note_id is not None:
            self.store.delete_annotation(note_id)

    # ---- formatting -------------------------------------------------------
    def insert_format(self, kind: str, name: str) -> None:
        """Insert a color or style code at the raw cursor or after the cell text."""
        helper = insert_color if kind == "color" else insert_style
        if self.store.editor_mode is EditorMode.RAW:
            self.raw_edit.insertPlainText(helper("", 0, name))
            return
        index = self.table.currentIndex()
        if not index.isValid():
            return
        text = self.table_model.entry(index.row()).translation
        self.edit_translation(index.row(), helper(text, len(text), name))

    def _format_chosen(self, row: int) -> None:
        choice = self.format_box.itemData(row)
        self.format_box.setCurrentIndex(0)
        if choice:
            self.insert_format(*choice.split(":", 1))

    def _convert_ampersand_codes(self) -> None:
        if self.store.editor_mode is EditorMode.RAW:
            self.raw_edit.setPlainText(to_section_codes(self.raw_edit.toPlainText()))
            return
        current = self.store.current_file
        if current is None:
            return
        converted = {k: to_section_codes(v) for k, v in current.content.items()}
        if converted != current.content:
            self.store.save_translation_to_history()
            self.store.update_file_content(current.id, converted)

    # ---- themes -----------------------------------------------------------
    def _fill_theme_box(self) -> None:
        self.theme_box.clear()
        for option in all_themes(self.state.custom_themes()):
            self.theme_box.addItem(option.name, option.id)
        current = self.theme_box.findData(self.store.theme.id)
        self.theme_box.setCurrentIndex(max(0, current))

    def _install_custom_theme(self, theme: Theme) -> None:
        self.state.save_custom_theme(theme)
        self.store.set_theme(theme)
        self._fill_theme_box()

    def _new_theme(self) -> None:
        name, ok = QInputDialog.getText(self, "New theme", "Theme name:")
        if ok and name.strip():
            self._install_custom_theme(
                create_custom_theme(name.strip(), base=self.store.theme)
            )

    def _import_theme(self) -> None:
        name, _ = QFileDialog.getOpenFileName(self, "Import theme", "", "*.json")
        if not name:
            return
        try:
            theme = import_theme(Path(name).read_text(encoding="utf-8"))
        except (ThemeFormatError, OSError) as exc:
            QMessageBox.warning(self, "Invalid theme", str(exc))
            return
        self._install_custom_theme(replace(theme, is_custom=True))

    def _export_theme(self) -> None:
        theme = self.store.theme
        name, _ = QFileDialog.getSaveFileName(
            self, "Export theme", f"{theme.id}.json", "*.json"
        )
        if not name:
            return
        try:
            Path(name).write_text(export_theme(theme), encoding="utf-8")
        except OSError as exc:
            QMessageBox.critical(self, "Export failed", str(exc))

    # ---- single file / workspace export -----------------------------------
    def _export_file(self) -> None:
        ws = self.store.workspace
        current = self.store.current_file
        if ws is None or current is None:
            return
        try:
            filename, data = workspace_io.export_single_file(ws, current.id)
        except WorkspaceIOError as exc:
            QMessageBox.critical(self, "Export failed", str(exc))
            return
        name, _ = QFileDialog.getSaveFileName(self, "Export file", filename, "*.json")
        if not name:
            return
        try:
            Path(name).write_bytes(data)
        except OSError as exc:
            QMessageBox.critical(self, "Export failed", str(exc))

    def _export_workspace(self) -> None:
        ws = self.store.workspace
        if ws is None:
            return
        name, _ = QFileDialog.getSaveFileName(
            self, "Export workspace", f"{ws.name}.json", "*.json"
        )
        if not name:
            return
        try:
            Path(name).write_text(workspace_io.dumps_workspace(ws), encoding="utf-8")
        except OSError as exc:
            QMessageBox.critical(self, "Export failed", str(exc))

    def _toggle_mode(self) -> None:
        if self.store.editor_mode is EditorMode.GUI:
            self.store.set_editor_mode(EditorMode.RAW)
        else:
            self.store.set_editor_mode(EditorMode.GUI)

    def _apply_raw(self) -> None:
        text = self.raw_edit.toPlainText()
        try:
            workspace_io.parse_lang_content(text)
        except WorkspaceIOError as exc:
            QMessageBox.warning(self, "Invalid JSON", str(exc))
            return
        self.store.save_translation_to_history()
        self.store.apply_raw_content(text)

    def _language_chosen(self, row: int) -> None:
        language = self.language_box.itemText(row)
        if language == _NEW_LANGUAGE:
            language, ok = QInputDialog.getText(self, "New language", "Language code:")
            if not ok or not language.strip():
                self._sync_views()
                return
        self.store.set_current_language(language.strip().lower())

    def edit_translation(self, row: int, value: str) -> bool:
        """Edit one translation cell the way the table delegate does."""
        index = self.table_model.index(row, TRANSLATION_COL)
        return self.table_model.setData(index, value)

    def closeEvent(self, event) -> None:  # noqa: N802
        self._autosave_timer.stop()
        self.autosave.flush()
        super().closeEvent(event)
