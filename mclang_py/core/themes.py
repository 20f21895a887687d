"""Editor color themes: built-ins, custom theme documents and lookup."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from .model import new_id

_MINECRAFT_SLOTS: dict[str, str] = {
    "minecraftBlack": "#000000",
    "minecraftDarkBlue": "#0000AA",
    "minecraftDarkGreen": "#00AA00",
    "minecraftDarkAqua": "#00AAAA",
    "minecraftDarkRed": "#AA0000",
    "minecraftDarkPurple": "#AA00AA",
    "minecraftGold": "#FFAA00",
    "minecraftGray": "#AAAAAA",
    "minecraftDarkGray": "#555555",
    "minecraftBlue": "#5555FF",
    "minecraftGreen": "#55FF55",
    "minecraftAqua": "#55FFFF",
    "minecraftRed": "#FF5555",
    "minecraftLightPurple": "#FF55FF",
    "minecraftYellow": "#FFFF55",
    "minecraftWhite": "#FFFFFF",
}
UI_SLOTS = (
    "primary",
    "secondary",
    "background",
    "surface",
    "text",
    "textSecondary",
    "border",
    "accent",
    "success",
    "warning",
    "error",
)
COLOR_SLOTS = UI_SLOTS + tuple(_MINECRAFT_SLOTS)


class ThemeFormatError(ValueError):
    """Raised when a theme document lacks id, name or colors."""


@dataclass(frozen=True, slots=True)
class ThemeFont:
    family: str
    mono_family: str


@dataclass(frozen=True, slots=True)
class Theme:
    id: str
    name: str
    colors: Mapping[str, str] = field(default_factory=dict)
    font: ThemeFont | None = None
    is_custom: bool = False

    def color(self, slot: str, default: str = "") -> str:
        return self.colors.get(slot, default)


def _ui(*values: str) -> dict[str, str]:
    colors = dict(zip(UI_SLOTS, values, strict=True))
    colors.update(_MINECRAFT_SLOTS)
    return colors


DEFAULT_THEME = Theme(
    id="default",
    name="Default Dark",
    colors=_ui(
        "#5865F2", "#4752C4", "#1e1e2e", "#2a2a3e", "#cdd6f4", "#a6adc8",
        "#45475a", "#89b4fa", "#a6e3a1", "#f9e2af", "#f38ba8",
    ),
)
LIGHT_THEME = Theme(
    id="light",
    name="Light Mode",
    colors=_ui(
        "#5865F2", "#4752C4", "#ffffff", "#f5f5f5", "#1e1e2e", "#585b70",
        "#ccd0da", "#1e66f5", "#40a02b", "#df8e1d", "#d20f39",
    ),
)
MINECRAFT_THEME = Theme(
    id="minecraft",
    name="Minecraft",
    colors=_ui(
        "#8B8B8B", "#5A5A5A", "#313131", "#3F3F3F", "#FFFFFF", "#AAAAAA",
        "#000000", "#8B8B8B", "#55FF55", "#FFFF55", "#FF5555",
    ),
)
DRACULA_THEME = Theme(
    id="dracula",
    name="Dracula",
    colors=_ui(
        "#bd93f9", "#6272a4", "#282a36", "#44475a", "#f8f8f2", "#6272a4",
        "#6272a4", "#8be9fd", "#50fa7b", "#f1fa8c", "#ff5555",
    ),
)
BUILT_IN_THEMES: tuple[Theme, ...] = (
    DEFAULT_THEME,
    LIGHT_THEME,
    MINECRAFT_THEME,
    DRACULA_THEME,
)


def all_themes(custom: Iterable[Theme] = ()) -> list[Theme]:
    """Return built-in themes followed by ``custom``."""
    return [*BUILT_IN_THEMES, *custom]


def theme_by_id(theme_id: str, custom: Iterable[Theme] = ()) -> Theme | None:
    """Return the theme with ``theme_id`` among built-ins and ``custom``."""
    return next((t for t in all_themes(custom) if t.id == theme_id), None)


def create_custom_theme(name: str, base: Theme | None = None) -> Theme:
    """Return an editable copy of ``base`` under a fresh id."""
    source = base or DEFAULT_THEME
    return replace(
        source, id=new_id(), name=name, colors=dict(source.colors), is_custom=True
    )


def theme_to_document(theme: Theme) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "id": theme.id,
        "name": theme.name,
        "colors": dict(theme.colors),
    }
    if theme.font is not None:
        doc["font"] = {
            "family": theme.font.family,
            "monoFamily": theme.font.mono_family,
        }
    if theme.is_custom:
        doc["isCustom"] = True
    return doc


def theme_from_document(data: object) -> Theme:
    if not isinstance(data, dict):
        raise ThemeFormatError("Theme document must be a JSON object.")
    theme_id = data.get("id")
    name = data.get("name")
    colors = data.get("colors")
    if not theme_id or not name or not isinstance(colors, dict) or not colors:
        raise ThemeFormatError("Invalid theme format: id, name and colors are required.")
    font = None
    raw_font = data.get("font")
    if isinstance(raw_font, dict):
        font = ThemeFont(
            family=str(raw_font.get("family", "")),
            mono_family=str(raw_font.get("monoFamily", "")),
        )
    return Theme(
        id=str(theme_id),
        name=str(name),
        colors={str(k): str(v) for k, v in colors.items()},
        font=font,
        is_custom=bool(data.get("isCustom", False)),
    )


def export_theme(theme: Theme) -> str:
    """Return ``theme`` as an indented JSON document."""
    return json.dumps(theme_to_document(theme), indent=2)


def import_theme(text: str) -> Theme:
    """Parse a theme JSON document, raising ``ThemeFormatError`` when malformed."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ThemeFormatError(f"Theme is not valid JSON: {exc}") from exc
    return theme_from_document(data)
