from __future__ import annotations

from dataclasses import replace

from PySide6.QtCore import (
    QAbstractTableModel,
    QModelIndex,
    QPersistentModelIndex,
    Qt,
)
from PySide6.QtGui import QColor

from mclang_py.core.entries import SortColumn, filter_entries, sort_entries
from mclang_py.core.formatting import strip
from mclang_py.core.model import TranslationEntry
from mclang_py.core.store import WorkspaceStore

PIN_COL, KEY_COL, REFERENCE_COL, TRANSLATION_COL, STATUS_COL = range(5)
_HEADERS = ("", "Key", "Reference", "Translation", "Status")
_SORT_COLUMNS = {
    KEY_COL: SortColumn.KEY,
    REFERENCE_COL: SortColumn.REFERENCE,
    TRANSLATION_COL: SortColumn.TRANSLATION,
    STATUS_COL: SortColumn.STATUS,
}
_MISSING_COLOR = QColor("#f38ba8")
_DONE_COLOR = QColor("#a6e3a1")
# store operations that cannot change the projected rows
_IGNORED_OPS = frozenset(
    {
        "update_translation",
        "save_translation_to_history",
        "set_search_query",
        "perform_search",
        "clear_search",
        "set_theme",
        "set_editor_mode",
    }
)


class TranslationTableModel(QAbstractTableModel):
    """Qt model over the store's projected entries.

    Column sorting never moves unpinned rows above pinned ones.
    """

    def __init__(self, store: WorkspaceStore):
        super().__init__()
        self._store = store
        self._rows: list[TranslationEntry] = []
        self._sort: SortColumn | None = None
        self._descending = False
        self._filter = ""
        self._unsubscribe = store.subscribe(self._on_store_changed)
        self.refresh()

    def detach(self) -> None:
        """Stop following store changes."""
        self._unsubscribe()

    # ---------------------------------------------------------------- helpers
    def _on_store_changed(self, operation: str) -> None:
        if operation not in _IGNORED_OPS:
            self.refresh()

    def refresh(self) -> None:
        """Rebuild rows from the store under the current filter and sort."""
        self.beginResetModel()
        rows = filter_entries(self._store.translation_entries(), self._filter)
        self._rows = sort_entries(rows, self._sort, descending=self._descending)
        self.endResetModel()

    def set_filter(self, text: str) -> None:
        self._filter = text
        self.refresh()

    def entry(self, row: int) -> TranslationEntry:
        """Return the entry shown on ``row``."""
        return self._rows[row]

    def keys(self) -> list[str]:
        return [e.key for e in self._rows]

    # Qt mandatory overrides ----------------------------------------------------
    def rowCount(  # noqa: N802
        self,
        parent: QModelIndex | QPersistentModelIndex | None = None,
    ) -> int:
        if parent and parent.isValid():
            return 0
        return len(self._rows)

    def columnCount(  # noqa: N802
        self,
        parent: QModelIndex | QPersistentModelIndex | None = None,
    ) -> int:
        if parent and parent.isValid():
            return 0
        return len(_HEADERS)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):  # noqa: N802
        if not index.isValid():
            return None
        e = self._rows[index.row()]
        col = index.column()

        if role == Qt.CheckStateRole and col == PIN_COL:
            return Qt.Checked if e.is_pinned else Qt.Unchecked

        if role == Qt.DisplayRole:
            match col:
                case 1:
                    return e.key
                case 2:
                    return strip(e.reference)
                case 3:
                    return strip(e.translation)
                case 4:
                    if e.is_missing:
                        return "Missing"
                    return "Annotated" if e.has_annotation else "Done"

        if role == Qt.EditRole and col == TRANSLATION_COL:
            return e.translation

        if role == Qt.ToolTipRole and col == REFERENCE_COL:
            return e.reference

        if role == Qt.ForegroundRole and col == STATUS_COL:
            return _MISSING_COLOR if e.is_missing else _DONE_COLOR

        return None

    def headerData(
        self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole
    ):  # noqa: N802
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return _HEADERS[section]
        return super().headerData(section, orientation, role)

    def flags(self, index: QModelIndex):  # noqa: N802
        base = super().flags(index)
        if index.column() == PIN_COL:
            return base | Qt.ItemIsUserCheckable
        if index.column() == TRANSLATION_COL:
            return base | Qt.ItemIsEditable
        return base

    def setData(self, index: QModelIndex, value, role=Qt.EditRole):  # noqa: N802
        if not index.isValid():
            return False
        e = self._rows[index.row()]

        # ---- pin toggle ---------------------------------------------------
        if index.column() == PIN_COL and role == Qt.CheckStateRole:
            self._store.toggle_pin_key(e.key)
            return True

        # ---- translation edit ---------------------------------------------
        if index.column() == TRANSLATION_COL and role == Qt.EditRole:
            text = str(value)
            if text == e.translation:
                return False
            # one table edit is one undo step
            self._store.save_translation_to_history()
            self._store.update_translation(e.key, text)
            self._rows[index.row()] = replace(
                e, translation=text, is_missing=not text and bool(e.reference)
            )
            left = self.index(index.row(), PIN_COL)
            right = self.index(index.row(), STATUS_COL)
            self.dataChanged.emit(left, right, [Qt.DisplayRole, Qt.EditRole])
            return True

        return False

    def sort(self, column: int, order: Qt.SortOrder = Qt.AscendingOrder) -> None:
        """Sort rows by ``column``; pinned rows stay on top."""
        self._sort = _SORT_COLUMNS.get(column)
        self._descending = order == Qt.DescendingOrder
        self.refresh()
