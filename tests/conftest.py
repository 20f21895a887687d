import os
from collections.abc import Callable
from datetime import datetime, timezone

import pytest

from mclang_py.core import app_config
from mclang_py.core.model import Annotation, LangFile, Workspace
from mclang_py.core.store import WorkspaceStore

# Ensure Qt runs headless in CI/CLI environments without a display server.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def make_file(
    file_id: str,
    language: str,
    content: dict[str, str],
    *,
    namespace: str = "mymod",
    is_reference: bool = False,
) -> LangFile:
    return LangFile(
        id=file_id,
        path=f"kubejs/assets/{namespace}/lang/{language}.json",
        namespace=namespace,
        language=language,
        content=dict(content),
        is_reference=is_reference,
    )


@pytest.fixture(autouse=True)
def _fresh_app_config():
    app_config.load.cache_clear()
    yield
    app_config.load.cache_clear()


@pytest.fixture()
def id_factory() -> Callable[[], str]:
    counter = iter(range(1, 10_000))
    return lambda: f"id-{next(counter)}"


@pytest.fixture()
def sample_workspace() -> Workspace:
    en = make_file(
        "en",
        "en_us",
        {"a": "Hello", "b": "World", "c": "§aGreen"},
        is_reference=True,
    )
    fr = make_file("fr", "fr_fr", {"a": "Bonjour", "b": ""})
    return Workspace(
        id="ws",
        name="Sample",
        files=[en, fr],
        reference_file=en,
        current_language="fr_fr",
        annotations=[
            Annotation(id="n1", file_id="fr", key="b", text="check tone"),
        ],
        created_at=FIXED_NOW,
        modified_at=FIXED_NOW,
    )


@pytest.fixture()
def store(sample_workspace: Workspace, id_factory) -> WorkspaceStore:
    return WorkspaceStore(
        sample_workspace,
        config=app_config.AppConfig(),
        clock=lambda: FIXED_NOW,
        id_factory=id_factory,
    )


@pytest.fixture()
def lang_file() -> Callable[..., LangFile]:
    return make_file
