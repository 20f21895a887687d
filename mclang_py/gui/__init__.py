from __future__ import annotations

from pathlib import Path

from .app import get_app
from .main_window import MainWindow


def launch(source: Path | None = None) -> None:
    """Show the main window, optionally opening ``source``, and run the event loop."""
    app = get_app()
    win = MainWindow(source=source)
    win.show()
    app.exec()
