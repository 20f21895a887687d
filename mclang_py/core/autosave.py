"""Advisory persistence of the store's workspace through a sink."""

from __future__ import annotations

import logging
from typing import Protocol

import xxhash

from .local_state import LocalState
from .store import WorkspaceStore
from .workspace_io import dumps_workspace

_LOG = logging.getLogger(__name__)


class PersistenceSink(Protocol):
    def write(self, document: str) -> None: ...


class LocalStateSink:
    """Write workspace documents into the durable local state."""

    def __init__(self, state: LocalState) -> None:
        self._state = state

    def write(self, document: str) -> None:
        self._state.save_workspace_document(document)


def fingerprint(document: str) -> int:
    """Return the xxh64 digest of a serialized workspace document."""
    return int(xxhash.xxh64(document.encode("utf-8")).intdigest())


class AutosaveService:
    """Serialize the current workspace and hand it to a sink.

    The caller owns the schedule (a GUI timer, store notifications). Writes
    whose fingerprint matches the last successful write are skipped; sink
    failures are logged and retried on the next flush.
    """

    def __init__(self, store: WorkspaceStore, sink: PersistenceSink) -> None:
        self._store = store
        self._sink = sink
        self._last: int | None = None

    @property
    def last_fingerprint(self) -> int | None:
        return self._last

    def flush(self) -> bool:
        """Return True when a document was written."""
        workspace = self._store.workspace
        if workspace is None:
            return False
        document = dumps_workspace(workspace)
        digest = fingerprint(document)
        if digest == self._last:
            return False
        try:
            self._sink.write(document)
        except (OSError, ValueError) as exc:
            _LOG.warning("autosave failed: %s", exc)
            return False
        self._last = digest
        return True
