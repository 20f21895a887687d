"""Test module for app config loading and clamping."""

from __future__ import annotations

from pathlib import Path

from mclang_py.core import app_config


def _write_config(tmp_path: Path, text: str) -> None:
    cfg = tmp_path / "config"
    cfg.mkdir(parents=True, exist_ok=True)
    (cfg / "app.toml").write_text(text, encoding="utf-8")


def test_load_defaults(tmp_path: Path) -> None:
    """Verify defaults apply when no app.toml exists."""
    cfg = app_config.load(tmp_path)
    assert cfg.reference_language == "en_us"
    assert cfg.history_limit == 50
    assert cfg.pack_format == 15
    assert cfg.github_api_url == "https://api.github.com"


def test_load_reads_overrides_from_toml(tmp_path: Path) -> None:
    """Verify every section is read from app.toml."""
    _write_config(
        tmp_path,
        """
[paths]
config_dir = "state"
state_filename = "editor.json"

[editor]
reference_language = " EN_GB "
history_limit = 20
autosave_interval_ms = 5000

[export]
pack_format = 34
pack_name = "My Pack"
pack_description = "Hello"

[remote]
api_url = "https://git.example.test/api/"
timeout_s = 3.5
""".strip()
        + "\n",
    )
    cfg = app_config.load(tmp_path)
    assert (cfg.config_dir, cfg.state_filename) == ("state", "editor.json")
    assert cfg.reference_language == "en_gb"
    assert cfg.history_limit == 20
    assert cfg.autosave_interval_ms == 5000
    assert (cfg.pack_format, cfg.pack_name, cfg.pack_description) == (
        34,
        "My Pack",
        "Hello",
    )
    assert cfg.github_api_url == "https://git.example.test/api"
    assert cfg.request_timeout_s == 3.5


def test_load_clamps_and_ignores_invalid_values(tmp_path: Path) -> None:
    """Verify out-of-range numbers clamp and bad values keep defaults."""
    _write_config(
        tmp_path,
        """
[editor]
history_limit = 0
autosave_interval_ms = "soon"

[export]
pack_format = 5000

[remote]
raw_url = "ftp://nope"
timeout_s = -1
""".strip()
        + "\n",
    )
    cfg = app_config.load(tmp_path)
    assert cfg.history_limit == 1
    assert cfg.autosave_interval_ms == 30_000
    assert cfg.pack_format == 999
    assert cfg.github_raw_url == "https://raw.githubusercontent.com"
    assert cfg.request_timeout_s == 15.0


def test_load_ignores_broken_toml(tmp_path: Path) -> None:
    """Verify unreadable app.toml falls back to defaults."""
    _write_config(tmp_path, "[editor\nhistory_limit = ")
    assert app_config.load(tmp_path) == app_config.AppConfig()
