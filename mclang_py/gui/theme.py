"""Apply editor themes to the Qt application palette."""

from __future__ import annotations

from PySide6.QtGui import QColor, QFont, QPalette
from PySide6.QtWidgets import QApplication, QStyleFactory

from mclang_py.core.themes import Theme

_TOOLTIP_QSS = (
    "QToolTip {{"
    "color: {text};"
    "background-color: {surface};"
    "border: 1px solid {border};"
    "}}"
)


def _style_key(name: str) -> str | None:
    for key in QStyleFactory.keys():
        if key.lower() == name.lower():
            return key
    return None


def _color(theme: Theme, slot: str, fallback: str) -> QColor:
    return QColor(theme.color(slot, fallback))


def build_palette(theme: Theme) -> QPalette:
    """Map theme color slots onto a QPalette."""
    background = _color(theme, "background", "#1e1e2e")
    surface = _color(theme, "surface", "#2a2a3e")
    text = _color(theme, "text", "#cdd6f4")
    muted = _color(theme, "textSecondary", "#a6adc8")
    palette = QPalette()
    palette.setColor(QPalette.Window, background)
    palette.setColor(QPalette.WindowText, text)
    palette.setColor(QPalette.Base, surface)
    palette.setColor(QPalette.AlternateBase, background)
    palette.setColor(QPalette.ToolTipBase, surface)
    palette.setColor(QPalette.ToolTipText, text)
    palette.setColor(QPalette.Text, text)
    palette.setColor(QPalette.PlaceholderText, muted)
    palette.setColor(QPalette.Button, surface)
    palette.setColor(QPalette.ButtonText, text)
    palette.setColor(QPalette.BrightText, _color(theme, "error", "#f38ba8"))
    palette.setColor(QPalette.Link, _color(theme, "accent", "#89b4fa"))
    palette.setColor(QPalette.Highlight, _color(theme, "primary", "#5865F2"))
    palette.setColor(QPalette.HighlightedText, QColor("#ffffff"))
    palette.setColor(QPalette.Disabled, QPalette.Text, muted)
    palette.setColor(QPalette.Disabled, QPalette.ButtonText, muted)
    palette.setColor(QPalette.Disabled, QPalette.WindowText, muted)
    return palette


def apply_theme(app: QApplication, theme: Theme) -> None:
    """Switch ``app`` to Fusion with the palette and tooltip style of ``theme``."""
    fusion = _style_key("Fusion")
    if fusion:
        app.setStyle(fusion)
    app.setPalette(build_palette(theme))
    app.setStyleSheet(
        _TOOLTIP_QSS.format(
            text=theme.color("text", "#cdd6f4"),
            surface=theme.color("surface", "#2a2a3e"),
            border=theme.color("border", "#45475a"),
        )
    )
    if theme.font is not None and theme.font.family:
        app.setFont(QFont(theme.font.family))
