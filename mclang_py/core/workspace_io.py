"""Workspace documents, language-file imports and archive exports."""

from __future__ import annotations

import io
import json
import logging
import re
import zipfile
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from .model import (
    REFERENCE_LANGUAGE,
    Annotation,
    LangFile,
    Workspace,
    new_id,
    utc_now,
)

_LOG = logging.getLogger(__name__)

DEFAULT_WORKSPACE_NAME = "Imported Workspace"
UNKNOWN = "unknown"
PACK_META = "pack.mcmeta"
_LANGUAGE_RE = re.compile(r"([a-z]{2}_[a-z]{2})\.json$", re.IGNORECASE)


class WorkspaceIOError(RuntimeError):
    """Base class for import/export failures."""


class WorkspaceFormatError(WorkspaceIOError):
    """Input is not valid JSON or does not have the expected shape."""


class WorkspaceNotFoundError(WorkspaceIOError):
    """Nothing usable was found for the requested import or export."""


@dataclass(frozen=True, slots=True)
class ImportReport:
    workspace: Workspace
    imported_files: tuple[str, ...]
    warnings: tuple[str, ...] = ()


# ---- naming helpers ---------------------------------------------------


def language_from_filename(filename: str) -> str:
    """Return the lowercased language code in ``filename``, or ``unknown``."""
    match = _LANGUAGE_RE.search(filename)
    return match.group(1).lower() if match else UNKNOWN


def namespace_from_path(path: str) -> str:
    """Return the segment after ``assets``, else the one before ``lang``."""
    parts = path.split("/")
    lang_idx = parts.index("lang") if "lang" in parts else len(parts) - 1
    if "assets" in parts:
        assets_idx = parts.index("assets")
        if assets_idx + 1 < lang_idx:
            return parts[assets_idx + 1]
    if lang_idx > 0 and parts[lang_idx - 1]:
        return parts[lang_idx - 1]
    return UNKNOWN


def is_lang_path(path: str) -> bool:
    return "/lang/" in path and path.endswith(".json")


# ---- language file content --------------------------------------------


def _as_lang_content(data: object, *, source: str) -> dict[str, str]:
    if not isinstance(data, dict):
        raise WorkspaceFormatError(f"{source}: expected a JSON object of strings")
    bad = [key for key, value in data.items() if not isinstance(value, str)]
    if bad:
        raise WorkspaceFormatError(f"{source}: non-string value for key {bad[0]!r}")
    return dict(data)


def parse_lang_content(text: str, *, source: str = "input") -> dict[str, str]:
    """Parse lang JSON text into a string-to-string mapping."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise WorkspaceFormatError(f"{source}: invalid JSON ({exc})") from exc
    return _as_lang_content(data, source=source)


def dump_lang_content(content: Mapping[str, str]) -> str:
    """Render lang content as indented JSON, keeping non-ASCII text."""
    return json.dumps(dict(content), indent=2, ensure_ascii=False)


def _pick_reference(files: list[LangFile], reference_language: str) -> LangFile | None:
    reference = next((f for f in files if f.language == reference_language), None)
    if reference is not None:
        reference.is_reference = True
    return reference


def workspace_from_files(
    name: str, files: list[LangFile], reference_language: str
) -> Workspace:
    reference = _pick_reference(files, reference_language)
    current = next(
        (f.language for f in files if f.language != reference_language),
        reference_language,
    )
    return Workspace(
        id=new_id(),
        name=name,
        files=files,
        reference_file=reference,
        current_language=current,
    )


def lang_file_from_entry(path: str, content: dict[str, str]) -> LangFile:
    """Build a fresh ``LangFile`` whose namespace and language come from ``path``."""
    return LangFile(
        id=new_id(),
        path=path,
        namespace=namespace_from_path(path),
        language=language_from_filename(path.rsplit("/", 1)[-1]),
        content=content,
    )


# ---- workspace document -----------------------------------------------


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, str) and value:
        raw = value[:-1] + "+00:00" if value.endswith("Z") else value
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            pass
    return utc_now()


def _file_document(file: LangFile) -> dict[str, Any]:
    return {
        "id": file.id,
        "path": file.path,
        "namespace": file.namespace,
        "language": file.language,
        "content": dict(file.content),
        "isReference": file.is_reference,
    }


def to_document(workspace: Workspace) -> dict[str, Any]:
    """Return the JSON-ready workspace document."""
    ref = workspace.reference_file
    return {
        "id": workspace.id,
        "name": workspace.name,
        "currentLanguage": workspace.current_language,
        "annotations": [
            {
                "id": a.id,
                "fileId": a.file_id,
                "key": a.key,
                "text": a.text,
                **({"color": a.color} if a.color is not None else {}),
                "createdAt": a.created_at,
                "modifiedAt": a.modified_at,
            }
            for a in workspace.annotations
        ],
        "pinnedKeys": list(workspace.pinned_keys),
        "files": [_file_document(f) for f in workspace.files],
        "referenceFile": _file_document(ref) if ref is not None else None,
        "createdAt": workspace.created_at.isoformat(),
        "modifiedAt": workspace.modified_at.isoformat(),
    }


def _file_from_document(data: object, idx: int) -> LangFile:
    if not isinstance(data, dict) or not isinstance(data.get("path"), str):
        raise WorkspaceFormatError(f"files[{idx}]: missing path")
    path = data["path"]
    content = _as_lang_content(data.get("content", {}), source=path)
    return LangFile(
        id=str(data.get("id") or new_id()),
        path=path,
        namespace=str(data.get("namespace") or namespace_from_path(path)),
        language=str(
            data.get("language") or language_from_filename(path.rsplit("/", 1)[-1])
        ),
        content=content,
        is_reference=bool(data.get("isReference", False)),
    )


def _annotation_from_document(data: object) -> Annotation | None:
    if not isinstance(data, dict):
        return None
    file_id, key = data.get("fileId"), data.get("key")
    if not isinstance(file_id, str) or not isinstance(key, str):
        return None
    color = data.get("color")
    return Annotation(
        id=str(data.get("id") or new_id()),
        file_id=file_id,
        key=key,
        text=str(data.get("text", "")),
        color=str(color) if color is not None else None,
        created_at=str(data.get("createdAt", "")),
        modified_at=str(data.get("modifiedAt", "")),
    )


def from_document(
    data: object, *, reference_language: str = REFERENCE_LANGUAGE
) -> Workspace:
    """Build a workspace from a persisted document, tolerating missing fields."""
    if not isinstance(data, dict) or not isinstance(data.get("files"), list):
        raise WorkspaceFormatError("Invalid workspace format: 'files' list is required")
    files = [_file_from_document(item, idx) for idx, item in enumerate(data["files"])]
    by_id = {f.id: f for f in files}
    reference: LangFile | None = None
    raw_ref = data.get("referenceFile")
    if isinstance(raw_ref, dict):
        reference = by_id.get(str(raw_ref.get("id")))
    if reference is None:
        reference = next((f for f in files if f.language == reference_language), None)
    annotations = [
        a
        for a in (_annotation_from_document(x) for x in data.get("annotations") or [])
        if a is not None
    ]
    pinned = [str(k) for k in data.get("pinnedKeys") or []]
    return Workspace(
        id=str(data.get("id") or new_id()),
        name=str(data.get("name") or DEFAULT_WORKSPACE_NAME),
        files=files,
        reference_file=reference,
        current_language=str(data.get("currentLanguage") or reference_language),
        annotations=annotations,
        pinned_keys=list(dict.fromkeys(pinned)),
        created_at=_parse_timestamp(data.get("createdAt")),
        modified_at=_parse_timestamp(data.get("modifiedAt")),
    )


def dumps_workspace(workspace: Workspace) -> str:
    """Serialize ``workspace`` as an indented workspace document."""
    return json.dumps(to_document(workspace), indent=2, ensure_ascii=False)


def loads_workspace(
    text: str, *, reference_language: str = REFERENCE_LANGUAGE
) -> Workspace:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise WorkspaceFormatError(f"Failed to parse workspace file: {exc}") from exc
    return from_document(data, reference_language=reference_language)


# ---- imports -----------------------------------------------------------


def import_single_file(
    text: str,
    filename: str = "imported.json",
    *,
    reference_language: str = REFERENCE_LANGUAGE,
) -> Workspace:
    """Wrap one bare ``key -> string`` JSON object in a fresh workspace."""
    content = parse_lang_content(text, source=filename)
    file = LangFile(
        id=new_id(),
        path=f"kubejs/assets/kubejs/lang/{filename}",
        namespace="kubejs",
        language=language_from_filename(filename),
        content=content,
    )
    return workspace_from_files(DEFAULT_WORKSPACE_NAME, [file], reference_language)


def import_archive(
    data: bytes,
    name: str = "archive.zip",
    *,
    reference_language: str = REFERENCE_LANGUAGE,
) -> ImportReport:
    """Collect every ``*/lang/*.json`` entry of a ZIP archive.

    Malformed entries are skipped and reported in ``warnings``.
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as exc:
        raise WorkspaceFormatError(f"{name}: not a ZIP archive") from exc
    files: list[LangFile] = []
    warnings: list[str] = []
    with archive:
        for info in archive.infolist():
            if info.is_dir() or not is_lang_path(info.filename):
                continue
            try:
                text = archive.read(info).decode("utf-8-sig")
                content = parse_lang_content(text, source=info.filename)
            except (WorkspaceFormatError, UnicodeDecodeError) as exc:
                _LOG.warning("skipping %s: %s", info.filename, exc)
                warnings.append(f"{info.filename}: {exc}")
                continue
            files.append(lang_file_from_entry(info.filename, content))
    if not files:
        raise WorkspaceNotFoundError(f"No valid language files found in {name}")
    workspace = workspace_from_files(
        name.removesuffix(".zip"), files, reference_language
    )
    return ImportReport(
        workspace=workspace,
        imported_files=tuple(f.path for f in files),
        warnings=tuple(warnings),
    )


# ---- exports -----------------------------------------------------------


def export_single_file(workspace: Workspace, file_id: str) -> tuple[str, bytes]:
    """Return the file name and UTF-8 JSON bytes of one workspace file."""
    file = workspace.file_by_id(file_id)
    if file is None:
        raise WorkspaceNotFoundError(f"File not found: {file_id}")
    return file.file_name or "export.json", dump_lang_content(file.content).encode("utf-8")


def archive_filename(name: str) -> str:
    return f"{name}.zip"


def _select_files(workspace: Workspace, file_ids: Iterable[str] | None) -> list[LangFile]:
    if file_ids is None:
        return list(workspace.files)
    wanted = set(file_ids)
    selected = [f for f in workspace.files if f.id in wanted]
    if not selected:
        raise WorkspaceNotFoundError("None of the requested files exist in the workspace")
    return selected


def _zip(members: Iterable[tuple[str, str]]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for path, text in members:
            archive.writestr(path, text)
    return buf.getvalue()


def export_archive(workspace: Workspace, file_ids: Iterable[str] | None = None) -> bytes:
    """ZIP every selected file at its original path."""
    files = _select_files(workspace, file_ids)
    return _zip((f.path, dump_lang_content(f.content)) for f in files)


def resource_pack_path(path: str) -> str:
    """Map a KubeJS asset path to its resource-pack location."""
    return path.removeprefix("kubejs/")


def export_resource_pack(
    workspace: Workspace,
    *,
    description: str,
    pack_format: int,
    file_ids: Iterable[str] | None = None,
) -> bytes:
    files = _select_files(workspace, file_ids)
    meta = {"pack": {"pack_format": int(pack_format), "description": description}}
    members = [(PACK_META, json.dumps(meta, indent=2, ensure_ascii=False))]
    members.extend(
        (resource_pack_path(f.path), dump_lang_content(f.content)) for f in files
    )
    return _zip(members)


def import_path(
    path: Path, *, reference_language: str = REFERENCE_LANGUAGE
) -> ImportReport:
    """Open a workspace document, a bare language file or a ZIP archive."""
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise WorkspaceNotFoundError(f"Cannot read {path}: {exc}") from exc
    if path.suffix.lower() == ".zip":
        return import_archive(data, path.name, reference_language=reference_language)
    try:
        text = data.decode("utf-8-sig")
        payload = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise WorkspaceFormatError(f"{path.name}: invalid JSON ({exc})") from exc
    if isinstance(payload, dict) and isinstance(payload.get("files"), list):
        workspace = from_document(payload, reference_language=reference_language)
    else:
        workspace = import_single_file(
            text, path.name, reference_language=reference_language
        )
    return ImportReport(
        workspace=workspace, imported_files=tuple(f.path for f in workspace.files)
    )
