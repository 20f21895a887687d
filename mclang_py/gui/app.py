from __future__ import annotations

import sys
from typing import cast

from PySide6.QtWidgets import QApplication

_APP: QApplication | None = None
APP_NAME = "mclang-py"


def get_app() -> QApplication:
    """Return the process-wide QApplication, creating it on first use."""
    global _APP
    if _APP is None:
        _APP = cast(QApplication, QApplication.instance()) or QApplication(sys.argv)
        _APP.setApplicationName(APP_NAME)
        _APP.setApplicationDisplayName("Minecraft Translation Editor")
    return _APP
