"""Tests for bounded undo/redo history."""

import pytest

from colorpage.history import OverlayHistory, EMPTY_SNAPSHOT, snapshot_to_overlay
from colorpage.models import PixelBuffer


def _overlay(value: int) -> PixelBuffer:
    buffer = PixelBuffer.allocate(4, 4)
    buffer.rgba[0, 0] = (value, 0, 0, 255)
    return buffer


class TestOverlayHistory:
    """Tests for OverlayHistory."""

    def test_starts_empty(self):
        """Test a new history holds only the empty snapshot."""
        history = OverlayHistory()

        assert len(history) == 1
        assert history.current is EMPTY_SNAPSHOT
        assert not history.can_undo
        assert not history.can_redo

    def test_undo_returns_previous(self):
        """Test commit A, commit B, undo yields A."""
        a, b = _overlay(1), _overlay(2)
        history = OverlayHistory()
        history.commit(a)
        history.commit(b)

        assert history.undo() == a
        assert history.redo() == b

    def test_undo_to_empty(self):
        """Test undoing the first commit returns the empty snapshot."""
        history = OverlayHistory()
        history.commit(_overlay(1))

        assert history.undo() is EMPTY_SNAPSHOT
        assert history.undo() is None

    def test_commit_truncates_redo(self):
        """Test committing after undo discards the undone future."""
        a, b, c = _overlay(1), _overlay(2), _overlay(3)
        history = OverlayHistory()
        history.commit(a)
        history.commit(b)
        history.undo()
        history.commit(c)

        assert history.redo() is None
        assert history.current == c
        assert len(history) == 3
        assert history.undo() == a

    def test_duplicate_commit_skipped(self):
        """Test committing a copy of the tail is ignored."""
        a = _overlay(1)
        history = OverlayHistory()

        assert history.commit(a)
        assert not history.commit(a.copy())
        assert len(history) == 2

    def test_empty_commit_after_empty_skipped(self):
        """Test clearing an already empty history adds nothing."""
        history = OverlayHistory()
        assert not history.commit(None)
        assert len(history) == 1

    def test_limit_evicts_oldest(self):
        """Test the oldest snapshots are dropped past the limit."""
        history = OverlayHistory(limit=3)
        for value in range(1, 6):
            history.commit(_overlay(value))

        assert len(history) == 3
        assert history.index == 2
        assert history.current == _overlay(5)
        assert history.undo() == _overlay(4)
        assert history.undo() == _overlay(3)
        assert history.undo() is None

    def test_snapshots_are_copies(self):
        """Test later mutation of a committed buffer does not alter history."""
        a = _overlay(1)
        history = OverlayHistory()
        history.commit(a)
        a.rgba[0, 0] = (9, 9, 9, 9)

        assert history.current == _overlay(1)

    def test_initial_overlay(self):
        """Test a resumed overlay becomes the base entry."""
        history = OverlayHistory(initial=_overlay(7))
        assert history.current == _overlay(7)

    def test_invalid_limit(self):
        """Test limit must be positive."""
        with pytest.raises(ValueError):
            OverlayHistory(limit=0)

    def test_clear(self):
        """Test clear resets to a single entry."""
        history = OverlayHistory()
        history.commit(_overlay(1))
        history.clear()

        assert len(history) == 1
        assert history.current is EMPTY_SNAPSHOT


class TestSnapshotToOverlay:
    """Tests for snapshot translation."""

    def test_empty_snapshot_is_none(self):
        """Test the empty snapshot becomes a missing overlay."""
        assert snapshot_to_overlay(EMPTY_SNAPSHOT) is None
        assert snapshot_to_overlay(None) is None

    def test_buffer_passthrough(self):
        """Test buffer snapshots are installed directly."""
        buffer = _overlay(1)
        assert snapshot_to_overlay(buffer) is buffer
