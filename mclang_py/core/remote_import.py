"""Import language files from a public GitHub repository."""

from __future__ import annotations

import json
import logging
import re
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .app_config import AppConfig
from .app_config import load as _load_app_config
from .model import LangFile
from .workspace_io import (
    ImportReport,
    WorkspaceFormatError,
    WorkspaceIOError,
    WorkspaceNotFoundError,
    is_lang_path,
    lang_file_from_entry,
    parse_lang_content,
    workspace_from_files,
)

_LOG = logging.getLogger(__name__)

_GITHUB_URL_RE = re.compile(r"github\.com[/:]([^/\s]+)/([^/\s?#]+)")
_SHORTHAND_RE = re.compile(r"^([\w.-]+)/([\w.-]+)$")
_LANG_ROOTS = ("kubejs/assets/", "src/main/resources/assets/")
_USER_AGENT = "mclang-py"

Fetch = Callable[[str], bytes]


class RemoteImportError(WorkspaceIOError):
    """Represent HTTP/network failures while talking to the repository host."""

    def __init__(self, message: str, *, url: str = "", code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.code = code


@dataclass(frozen=True, slots=True)
class RepoRef:
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repo_url(value: str) -> RepoRef:
    """Accept ``https://github.com/owner/repo[...]`` or ``owner/repo``."""
    raw = value.strip()
    match = _GITHUB_URL_RE.search(raw) or _SHORTHAND_RE.match(raw)
    if not match:
        raise ValueError(f"Invalid GitHub repository reference: {value!r}")
    owner, repo = match.group(1), match.group(2)
    return RepoRef(owner=owner, repo=repo.removesuffix(".git"))


def is_remote_lang_path(path: str) -> bool:
    """Return True for lang JSON files under an asset or KubeJS lang root."""
    return any(root in path for root in _LANG_ROOTS) and is_lang_path(path)


def urlopen_fetch(timeout_s: float) -> Fetch:
    """Build a fetcher over ``urllib.request`` with a fixed timeout."""

    def _fetch(url: str) -> bytes:
        request = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
        try:
            with urllib.request.urlopen(request, timeout=timeout_s) as response:
                return response.read()
        except urllib.error.HTTPError as exc:
            raise RemoteImportError(
                f"HTTP {exc.code} for {url}", url=url, code=exc.code
            ) from exc
        except (urllib.error.URLError, TimeoutError, OSError) as exc:
            raise RemoteImportError(f"Request failed for {url}: {exc}", url=url) from exc

    return _fetch


class RemoteRepoImporter:
    def __init__(
        self,
        fetch: Fetch | None = None,
        *,
        config: AppConfig | None = None,
    ) -> None:
        self._config = config or _load_app_config()
        self._fetch = fetch or urlopen_fetch(self._config.request_timeout_s)

    def _get_json(self, url: str, what: str) -> Any:
        try:
            payload = self._fetch(url)
        except RemoteImportError as exc:
            raise RemoteImportError(
                f"Failed to fetch {what}: {exc}", url=exc.url or url, code=exc.code
            ) from exc
        try:
            return json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise RemoteImportError(f"Malformed {what} response", url=url) from exc

    def _api(self, ref: RepoRef, suffix: str = "") -> str:
        owner = urllib.parse.quote(ref.owner, safe="")
        repo = urllib.parse.quote(ref.repo, safe="")
        return f"{self._config.github_api_url}/repos/{owner}/{repo}{suffix}"

    def default_branch(self, ref: RepoRef) -> str:
        info = self._get_json(self._api(ref), "repository information")
        branch = info.get("default_branch") if isinstance(info, dict) else None
        return str(branch or "main")

    def list_lang_paths(self, ref: RepoRef, branch: str) -> list[str]:
        quoted = urllib.parse.quote(branch, safe="")
        data = self._get_json(
            self._api(ref, f"/git/trees/{quoted}?recursive=1"), "repository tree"
        )
        tree = data.get("tree") if isinstance(data, dict) else None
        if not isinstance(tree, list):
            raise RemoteImportError("Repository tree response has no 'tree' list")
        return [
            item["path"]
            for item in tree
            if isinstance(item, dict)
            and item.get("type") == "blob"
            and isinstance(item.get("path"), str)
            and is_remote_lang_path(item["path"])
        ]

    def raw_url(self, ref: RepoRef, branch: str, path: str) -> str:
        return "/".join(
            (
                self._config.github_raw_url,
                ref.owner,
                ref.repo,
                urllib.parse.quote(branch),
                urllib.parse.quote(path),
            )
        )

    def import_repo(self, url: str, branch: str | None = None) -> ImportReport:
        """Fetch every language file of the repository into a new workspace.

        Per-file failures are skipped and reported; no usable file at all is
        an error.
        """
        ref = parse_repo_url(url)
        branch = branch or self.default_branch(ref)
        files: list[LangFile] = []
        warnings: list[str] = []
        for path in self.list_lang_paths(ref, branch):
            try:
                raw = self._fetch(self.raw_url(ref, branch, path))
                content = parse_lang_content(raw.decode("utf-8-sig"), source=path)
            except (RemoteImportError, WorkspaceFormatError, UnicodeDecodeError) as exc:
                _LOG.warning("skipping %s: %s", path, exc)
                warnings.append(f"{path}: {exc}")
                continue
            files.append(lang_file_from_entry(path, content))
        if not files:
            raise WorkspaceNotFoundError(
                "No language files found in repository (checked "
                "kubejs/assets/*/lang and src/main/resources/assets/*/lang)"
            )
        workspace = workspace_from_files(
            ref.full_name, files, self._config.reference_language
        )
        return ImportReport(
            workspace=workspace,
            imported_files=tuple(f.path for f in files),
            warnings=tuple(warnings),
        )
