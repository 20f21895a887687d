"""Application configuration loading from repository-local ``config/app.toml``."""

from __future__ import annotations

import importlib
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from types import ModuleType
from typing import Any

from .model import HISTORY_LIMIT, REFERENCE_LANGUAGE

tomllib: ModuleType | None
try:  # Python 3.11+
    tomllib = importlib.import_module("tomllib")
except ModuleNotFoundError:  # pragma: no cover
    tomllib = None


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Store effective runtime paths, limits and remote endpoints."""

    config_dir: str = ".mclang/config"
    state_filename: str = "state.json"
    reference_language: str = REFERENCE_LANGUAGE
    history_limit: int = HISTORY_LIMIT
    autosave_interval_ms: int = 30_000
    pack_format: int = 15
    pack_name: str = "Translation Pack"
    pack_description: str = "Generated by mclang-py"
    github_api_url: str = "https://api.github.com"
    github_raw_url: str = "https://raw.githubusercontent.com"
    request_timeout_s: float = 15.0


def _candidate_roots(root: Path | None) -> list[Path]:
    roots = [Path.cwd()]
    if root is not None:
        roots.append(root)
    seen: set[Path] = set()
    out: list[Path] = []
    for entry in roots:
        entry = entry.resolve()
        if entry in seen:
            continue
        seen.add(entry)
        out.append(entry)
    return out


def _load_toml(path: Path) -> dict[str, Any]:
    if tomllib is None or not path.exists():
        return {}
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}
    except (OSError, ValueError):
        return {}


def _clamp_int(value: Any, *, default: int, low: int, high: int) -> int:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return max(low, min(parsed, high))


def _positive_float(value: Any, *, default: float) -> float:
    try:
        parsed = float(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _language_code(value: Any, *, default: str) -> str:
    raw = str(value or "").strip().lower()
    return raw or default


def _base_url(value: Any, *, default: str) -> str:
    raw = str(value or "").strip().rstrip("/")
    return raw if raw.startswith(("http://", "https://")) else default


@lru_cache(maxsize=8)
def load(root: Path | None = None) -> AppConfig:
    """Load and merge app configuration from `config/app.toml` candidates."""
    cfg = AppConfig()
    for base in _candidate_roots(root):
        data = _load_toml(base / "config" / "app.toml")
        paths = data.get("paths", {})
        editor = data.get("editor", {})
        export = data.get("export", {})
        remote = data.get("remote", {})
        if isinstance(paths, dict):
            cfg = replace(
                cfg,
                config_dir=str(paths.get("config_dir", cfg.config_dir)),
                state_filename=str(paths.get("state_filename", cfg.state_filename)),
            )
        if isinstance(editor, dict):
            cfg = replace(
                cfg,
                reference_language=_language_code(
                    editor.get("reference_language"), default=cfg.reference_language
                ),
                history_limit=_clamp_int(
                    editor.get("history_limit"),
                    default=cfg.history_limit,
                    low=1,
                    high=500,
                ),
                autosave_interval_ms=_clamp_int(
                    editor.get("autosave_interval_ms"),
                    default=cfg.autosave_interval_ms,
                    low=1_000,
                    high=3_600_000,
                ),
            )
        if isinstance(export, dict):
            cfg = replace(
                cfg,
                pack_format=_clamp_int(
                    export.get("pack_format"),
                    default=cfg.pack_format,
                    low=1,
                    high=999,
                ),
                pack_name=str(export.get("pack_name", cfg.pack_name)),
                pack_description=str(
                    export.get("pack_description", cfg.pack_description)
                ),
            )
        if isinstance(remote, dict):
            cfg = replace(
                cfg,
                github_api_url=_base_url(
                    remote.get("api_url"), default=cfg.github_api_url
                ),
                github_raw_url=_base_url(
                    remote.get("raw_url"), default=cfg.github_raw_url
                ),
                request_timeout_s=_positive_float(
                    remote.get("timeout_s"), default=cfg.request_timeout_s
                ),
            )
    return cfg
