"""Test module for sidebar tree building from flat file paths."""

from __future__ import annotations

from mclang_py.core.file_tree import (
    build_file_tree,
    find_node_by_file_id,
    find_node_by_path,
    iter_file_nodes,
    node_id,
)
from mclang_py.core.model import LangFile


def _file(file_id: str, path: str) -> LangFile:
    return LangFile(id=file_id, path=path, namespace="ns", language="en_us")


def test_build_file_tree_nests_folders_and_sorts() -> None:
    """Verify shared prefixes merge and folders precede files by name."""
    tree = build_file_tree(
        [
            _file("3", "kubejs/assets/b/lang/en_us.json"),
            _file("2", "kubejs/assets/a/lang/fr_fr.json"),
            _file("1", "kubejs/assets/a/lang/en_us.json"),
            _file("4", "kubejs/readme.json"),
        ]
    )
    (root,) = tree
    assert (root.name, root.type, root.path) == ("kubejs", "folder", "kubejs")
    assert [c.name for c in root.children] == ["assets", "readme.json"]
    assets = root.children[0]
    assert [c.name for c in assets.children] == ["a", "b"]
    lang = assets.children[0].children[0]
    assert lang.path == "kubejs/assets/a/lang"
    assert [(c.name, c.file_id) for c in lang.children] == [
        ("en_us.json", "1"),
        ("fr_fr.json", "2"),
    ]
    assert lang.children[0].children is None


def test_build_file_tree_folder_precedes_sibling_file() -> None:
    """Verify a nested folder is listed before a file at the same level."""
    files = [_file("1", "a/en_us.json"), _file("2", "a/b/en_us.json")]
    tree = build_file_tree(files)
    (root,) = tree
    assert [(c.name, c.type) for c in root.children] == [
        ("b", "folder"),
        ("en_us.json", "file"),
    ]
    assert [c.file_id for c in root.children[0].children] == ["2"]


def test_build_file_tree_ids_are_stable_across_rebuilds() -> None:
    """Verify rebuilding the same paths yields the same node ids."""
    files = [_file("1", "a/lang/en_us.json")]
    first = [n.id for n in iter_file_nodes(build_file_tree(files))]
    files.append(_file("2", "b/lang/en_us.json"))
    second = build_file_tree(files)
    assert find_node_by_file_id(second, "1").id == first[0]
    assert first[0] == node_id("file:a/lang/en_us.json")


def test_build_file_tree_keeps_file_and_folder_with_same_path() -> None:
    """Verify a file and a folder sharing a path are separate nodes."""
    tree = build_file_tree([_file("1", "x/y"), _file("2", "x/y/z.json")])
    (root,) = tree
    assert [(c.name, c.type) for c in root.children] == [
        ("y", "folder"),
        ("y", "file"),
    ]
    folder, leaf = root.children
    assert folder.id != leaf.id
    assert leaf.file_id == "1"
    assert folder.children[0].file_id == "2"


def test_build_file_tree_empty_and_lookup_helpers() -> None:
    """Verify empty input and path lookups."""
    assert build_file_tree([]) == []
    tree = build_file_tree([_file("1", "/a//b.json")])
    assert find_node_by_path(tree, "a/b.json").file_id == "1"
    assert find_node_by_path(tree, "missing") is None
    assert find_node_by_file_id(tree, "nope") is None
