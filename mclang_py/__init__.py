"""mclang-py – all public symbols are re-exported from .core."""

from importlib import metadata

from .core import (  # noqa: F401 – re-exports
    LangFile,
    TranslationEntry,
    Workspace,
    WorkspaceStore,
    parse,
    strip,
)

try:
    __version__ = metadata.version("mclang-py")
except metadata.PackageNotFoundError:  # editable install before first build
    __version__ = "0.0.0"
