from __future__ import annotations

from collections.abc import Iterable

from PySide6.QtCore import Qt
from PySide6.QtGui import QStandardItem, QStandardItemModel

from mclang_py.core.file_tree import FileTreeNode

FILE_ID_ROLE = Qt.UserRole + 1
PATH_ROLE = Qt.UserRole + 2


class FileTreeModel(QStandardItemModel):
    """Read-only mirror of the store's file tree; rebuilt on every change."""

    def __init__(self) -> None:
        super().__init__()
        self.setHorizontalHeaderLabels(["Files"])

    def set_tree(self, nodes: Iterable[FileTreeNode]) -> None:
        """Replace all rows with ``nodes``."""
        self.removeRows(0, self.rowCount())
        root = self.invisibleRootItem()
        for node in nodes:
            root.appendRow(self._item(node))

    def _item(self, node: FileTreeNode) -> QStandardItem:
        item = QStandardItem(node.name)
        item.setEditable(False)
        item.setData(node.path, PATH_ROLE)
        if node.file_id is not None:
            item.setData(node.file_id, FILE_ID_ROLE)
        for child in node.children or ():
            item.appendRow(self._item(child))
        return item
