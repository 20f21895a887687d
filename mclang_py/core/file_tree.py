"""Build the sidebar tree from flat, slash-delimited file paths."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Literal

import xxhash

from .model import LangFile

NodeType = Literal["file", "folder"]


@dataclass(frozen=True, slots=True)
class FileTreeNode:
    id: str
    name: str
    path: str
    type: NodeType
    children: tuple[FileTreeNode, ...] | None = None
    file_id: str | None = None

    @property
    def is_folder(self) -> bool:
        return self.type == "folder"


@dataclass(slots=True)
class _Draft:
    name: str
    path: str
    type: NodeType
    file_id: str | None = None
    children: dict[str, _Draft] = field(default_factory=dict)


def node_id(path: str) -> str:
    """Stable node id: rebuilt trees keep ids for unchanged paths."""
    return xxhash.xxh64(path.encode("utf-8")).hexdigest()


def build_file_tree(files: Iterable[LangFile]) -> list[FileTreeNode]:
    """Return the folder/file tree of ``files``, folders first."""
    roots: dict[str, _Draft] = {}
    for file in files:
        parts = [part for part in file.path.split("/") if part]
        level = roots
        current = ""
        for idx, part in enumerate(parts):
            current = f"{current}/{part}" if current else part
            kind: NodeType = "file" if idx == len(parts) - 1 else "folder"
            # a file and a folder may share a path; keep them apart
            slot = f"{kind}:{part}"
            draft = level.get(slot)
            if draft is None:
                draft = _Draft(
                    name=part,
                    path=current,
                    type=kind,
                    file_id=file.id if kind == "file" else None,
                )
                level[slot] = draft
            level = draft.children
    return _freeze(roots.values())


def _order(draft: _Draft) -> tuple[int, str]:
    return (0 if draft.type == "folder" else 1, draft.name)


def _freeze(drafts: Iterable[_Draft]) -> list[FileTreeNode]:
    out: list[FileTreeNode] = []
    for draft in sorted(drafts, key=_order):
        children = None
        if draft.type == "folder":
            children = tuple(_freeze(draft.children.values()))
        out.append(
            FileTreeNode(
                id=node_id(f"{draft.type}:{draft.path}"),
                name=draft.name,
                path=draft.path,
                type=draft.type,
                children=children,
                file_id=draft.file_id,
            )
        )
    return out


def iter_nodes(tree: Iterable[FileTreeNode]) -> Iterator[FileTreeNode]:
    """Yield every node depth-first."""
    for node in tree:
        yield node
        if node.children:
            yield from iter_nodes(node.children)


def iter_file_nodes(tree: Iterable[FileTreeNode]) -> Iterator[FileTreeNode]:
    return (node for node in iter_nodes(tree) if node.type == "file")


def find_node_by_path(tree: Iterable[FileTreeNode], path: str) -> FileTreeNode | None:
    return next((node for node in iter_nodes(tree) if node.path == path), None)


def find_node_by_file_id(
    tree: Iterable[FileTreeNode], file_id: str
) -> FileTreeNode | None:
    return next((node for node in iter_nodes(tree) if node.file_id == file_id), None)
