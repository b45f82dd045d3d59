"""
Bounded undo/redo stack of overlay snapshots.
"""

import logging
from typing import List, Optional, Union

from .models import PixelBuffer

logger = logging.getLogger(__name__)


class _EmptySnapshot:
    """Sentinel for "nothing painted yet"."""

    def __repr__(self) -> str:
        return "EMPTY_SNAPSHOT"


EMPTY_SNAPSHOT = _EmptySnapshot()

Snapshot = Union[PixelBuffer, _EmptySnapshot]


def _same(a: Snapshot, b: Snapshot) -> bool:
    if a is b:
        return True
    if isinstance(a, PixelBuffer) and isinstance(b, PixelBuffer):
        return a == b
    return False


class OverlayHistory:
    """
    Linear undo/redo history with a fixed capacity.

    Committing after an undo discards the undone entries. Committing a
    snapshot identical to the tail is ignored. Past capacity the oldest
    entries are evicted and the index shifts down with them.

    Example:
        >>> history = OverlayHistory(limit=30)
        >>> history.commit(overlay_a)
        >>> history.commit(overlay_b)
        >>> history.undo() == overlay_a
        True
    """

    def __init__(self, limit: int = 30, initial: Optional[PixelBuffer] = None):
        """
        Initialize history.

        Args:
            limit: Maximum number of retained snapshots
            initial: Starting overlay (None = EMPTY_SNAPSHOT)
        """
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        self.limit = limit
        self._entries: List[Snapshot] = []
        self._index = 0
        self.clear(initial)

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Snapshot:
        return self._entries[self._index]

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self, initial: Optional[PixelBuffer] = None) -> None:
        """Drop every entry and restart from `initial`."""
        self._entries = [initial.copy() if initial is not None else EMPTY_SNAPSHOT]
        self._index = 0

    def commit(self, snapshot: Optional[PixelBuffer]) -> bool:
        """
        Record a new state.

        Args:
            snapshot: Overlay after a committed action (None = empty overlay)

        Returns:
            True if an entry was appended, False for a duplicate of the tail
        """
        if self._index < len(self._entries) - 1:
            del self._entries[self._index + 1:]

        entry: Snapshot = EMPTY_SNAPSHOT if snapshot is None else snapshot
        if _same(self._entries[-1], entry):
            return False

        if isinstance(entry, PixelBuffer):
            entry = entry.copy()
        self._entries.append(entry)
        self._index = len(self._entries) - 1

        if len(self._entries) > self.limit:
            overflow = len(self._entries) - self.limit
            del self._entries[:overflow]
            self._index = max(0, self._index - overflow)
            logger.debug(f"History evicted {overflow} oldest snapshot(s)")

        return True

    def undo(self) -> Optional[Snapshot]:
        """Step back; returns the snapshot now current, or None at the start."""
        if not self.can_undo:
            return None
        self._index -= 1
        return self._entries[self._index]

    def redo(self) -> Optional[Snapshot]:
        """Step forward; returns the snapshot now current, or None at the tail."""
        if not self.can_redo:
            return None
        self._index += 1
        return self._entries[self._index]


def snapshot_to_overlay(snapshot: Optional[Snapshot]) -> Optional[PixelBuffer]:
    """Translate a history snapshot into the overlay the caller installs."""
    if isinstance(snapshot, PixelBuffer):
        return snapshot
    return None
