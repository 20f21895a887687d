"""Bounded undo/redo log of full workspace snapshots."""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable

from .model import HISTORY_LIMIT, HistoryEntry, Workspace

_LOG = logging.getLogger(__name__)


class History:
    """Checkpoint log with a past stack capped at ``limit`` entries.

    Every entry holds a deep copy, so later in-place edits never leak into a
    checkpoint. Pushing a new checkpoint clears the future stack.
    """

    def __init__(
        self,
        limit: int = HISTORY_LIMIT,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if limit < 1:
            raise ValueError("history limit must be positive")
        self.limit = limit
        self._clock = clock
        self._past: deque[HistoryEntry] = deque(maxlen=limit)
        self._future: list[HistoryEntry] = []

    def _entry(self, workspace: Workspace) -> HistoryEntry:
        return HistoryEntry(workspace=workspace.snapshot(), timestamp=self._clock())

    @property
    def past_count(self) -> int:
        return len(self._past)

    @property
    def future_count(self) -> int:
        return len(self._future)

    def can_undo(self) -> bool:
        return bool(self._past)

    def can_redo(self) -> bool:
        return bool(self._future)

    def push(self, workspace: Workspace) -> None:
        """Record ``workspace`` as an undo checkpoint and drop the redo branch."""
        if len(self._past) == self.limit:
            _LOG.debug("history full, dropping oldest checkpoint")
        self._past.append(self._entry(workspace))
        self._future.clear()

    def undo(self, current: Workspace) -> Workspace | None:
        """Return the previous snapshot, parking ``current`` on the future stack."""
        if not self._past:
            return None
        previous = self._past.pop()
        self._future.append(self._entry(current))
        return previous.workspace

    def redo(self, current: Workspace) -> Workspace | None:
        if not self._future:
            return None
        following = self._future.pop()
        self._past.append(self._entry(current))
        return following.workspace

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
