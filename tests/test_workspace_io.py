"""Test module for workspace documents, imports and archive exports."""

from __future__ import annotations

import io
import json
import zipfile
from pathlib import Path

import pytest

from mclang_py.core import workspace_io
from mclang_py.core.workspace_io import (
    WorkspaceFormatError,
    WorkspaceNotFoundError,
    export_archive,
    export_resource_pack,
    export_single_file,
    from_document,
    import_archive,
    import_path,
    import_single_file,
    language_from_filename,
    loads_workspace,
    namespace_from_path,
    to_document,
)


def _zip_bytes(members: dict[str, str]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        for name, text in members.items():
            archive.writestr(name, text)
    return buf.getvalue()


def _members(data: bytes) -> dict[str, str]:
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        return {name: archive.read(name).decode("utf-8") for name in archive.namelist()}


def test_naming_helpers() -> None:
    """Verify language and namespace detection from paths."""
    assert language_from_filename("EN_US.json") == "en_us"
    assert language_from_filename("strings.json") == "unknown"
    assert namespace_from_path("kubejs/assets/create/lang/en_us.json") == "create"
    assert namespace_from_path("mymod/lang/en_us.json") == "mymod"
    assert namespace_from_path("en_us.json") == "unknown"


def test_document_round_trip_preserves_reference_identity(sample_workspace) -> None:
    """Verify a saved document reloads with the reference as a member."""
    sample_workspace.pinned_keys = ["a"]
    doc = json.loads(json.dumps(to_document(sample_workspace)))
    assert doc["referenceFile"]["id"] == "en"
    assert doc["annotations"][0]["fileId"] == "fr"
    loaded = from_document(doc)
    assert loaded.reference_file is loaded.file_by_id("en")
    assert loaded.pinned_keys == ["a"]
    assert loaded.created_at == sample_workspace.created_at
    assert [f.content for f in loaded.files] == [
        f.content for f in sample_workspace.files
    ]


def test_from_document_tolerates_missing_fields() -> None:
    """Verify absent optional fields fall back to defaults."""
    ws = from_document(
        {
            "files": [
                {"path": "kubejs/assets/x/lang/en_us.json", "content": {"k": "v"}},
            ],
            "createdAt": "2024-05-01T10:00:00Z",
        }
    )
    assert ws.name == workspace_io.DEFAULT_WORKSPACE_NAME
    assert ws.reference_file is ws.files[0]
    assert ws.files[0].namespace == "x"
    assert ws.created_at.year == 2024


def test_loads_workspace_rejects_bad_documents() -> None:
    """Verify malformed JSON and missing file lists raise format errors."""
    with pytest.raises(WorkspaceFormatError):
        loads_workspace("{nope")
    with pytest.raises(WorkspaceFormatError, match="files"):
        loads_workspace('{"name": "x"}')
    with pytest.raises(WorkspaceFormatError):
        loads_workspace('{"files": [{"path": "a/lang/en_us.json", "content": [1]}]}')


def test_import_single_file_wraps_content() -> None:
    """Verify a bare language object becomes a one-file workspace."""
    ws = import_single_file('{"a": "Hi"}', "fr_fr.json")
    (file,) = ws.files
    assert file.path == "kubejs/assets/kubejs/lang/fr_fr.json"
    assert file.language == "fr_fr"
    assert ws.reference_file is None
    assert ws.current_language == "fr_fr"
    with pytest.raises(WorkspaceFormatError):
        import_single_file('{"a": {"nested": "x"}}', "fr_fr.json")


def test_import_archive_collects_lang_files_and_reports_skips() -> None:
    """Verify archive import keeps valid lang entries and reports bad ones."""
    data = _zip_bytes(
        {
            "kubejs/assets/m/lang/en_us.json": '{"a": "A"}',
            "kubejs/assets/m/lang/de_de.json": '{"a": "Ä"}',
            "kubejs/assets/m/lang/broken.json": "{",
            "kubejs/assets/m/textures/x.json": "{}",
        }
    )
    report = import_archive(data, "pack.zip")
    ws = report.workspace
    assert ws.name == "pack"
    assert report.imported_files == (
        "kubejs/assets/m/lang/en_us.json",
        "kubejs/assets/m/lang/de_de.json",
    )
    assert len(report.warnings) == 1 and "broken.json" in report.warnings[0]
    assert ws.reference_file.language == "en_us"
    assert ws.reference_file.is_reference is True
    assert ws.current_language == "de_de"


def test_import_archive_errors() -> None:
    """Verify non-archives and archives without lang files raise."""
    with pytest.raises(WorkspaceFormatError):
        import_archive(b"not a zip")
    with pytest.raises(WorkspaceNotFoundError):
        import_archive(_zip_bytes({"readme.txt": "hi"}))


def test_exports_write_files_at_their_paths(sample_workspace) -> None:
    """Verify archive, resource-pack and single-file exports."""
    members = _members(export_archive(sample_workspace, ["fr"]))
    assert list(members) == ["kubejs/assets/mymod/lang/fr_fr.json"]
    assert json.loads(members["kubejs/assets/mymod/lang/fr_fr.json"]) == {
        "a": "Bonjour",
        "b": "",
    }

    pack = _members(
        export_resource_pack(sample_workspace, description="Test", pack_format=15)
    )
    assert json.loads(pack["pack.mcmeta"]) == {
        "pack": {"pack_format": 15, "description": "Test"}
    }
    assert "assets/mymod/lang/en_us.json" in pack

    name, payload = export_single_file(sample_workspace, "en")
    assert name == "en_us.json"
    assert json.loads(payload)["c"] == "§aGreen"

    with pytest.raises(WorkspaceNotFoundError):
        export_single_file(sample_workspace, "missing")
    with pytest.raises(WorkspaceNotFoundError):
        export_archive(sample_workspace, ["missing"])


def test_import_path_dispatches_on_content(tmp_path: Path, sample_workspace) -> None:
    """Verify import_path opens documents, bare files and archives."""
    doc = tmp_path / "saved.json"
    doc.write_text(workspace_io.dumps_workspace(sample_workspace), encoding="utf-8")
    assert import_path(doc).workspace.id == "ws"

    bare = tmp_path / "en_us.json"
    bare.write_text('{"k": "v"}', encoding="utf-8")
    report = import_path(bare)
    assert report.workspace.reference_file.language == "en_us"

    archive = tmp_path / "bundle.zip"
    archive.write_bytes(export_archive(sample_workspace))
    assert len(import_path(archive).workspace.files) == 2

    with pytest.raises(WorkspaceNotFoundError):
        import_path(tmp_path / "missing.json")
