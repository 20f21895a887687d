"""CLI / GUI entry-point for mclang-py."""
from __future__ import annotations

import argparse
import logging
from importlib import metadata
from pathlib import Path


def _version() -> str:
    try:
        return metadata.version("mclang-py")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="mclang-py",
        description="Open the language-file editor, optionally loading a workspace.",
    )
    parser.add_argument(
        "source",
        nargs="?",
        type=Path,
        help="workspace document, language file (.json) or archive (.zip) to open",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="log debug messages",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_version()}",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(name)s: %(message)s",
    )
    from mclang_py.gui import launch

    launch(args.source)


if __name__ == "__main__":
    main()
