"""Tests for debounced change notification."""

import threading

import pytest

from email_document_core.history import EmitScheduler
from email_document_core.model import create_default_document


def with_preview(text):
    document = create_default_document()
    document.head_attributes.preview_text = text
    return document


class TestEmitScheduler:
    """Test debouncing behaviour."""

    def test_burst_coalesces_to_latest(self):
        """Test several schedules inside the window deliver only the last state."""
        received = []
        scheduler = EmitScheduler(received.append, delay_ms=10_000)

        for text in ("a", "b", "c"):
            scheduler.schedule(with_preview(text))

        assert scheduler.pending
        assert scheduler.flush() is True
        assert [doc.head_attributes.preview_text for doc in received] == ["c"]
        assert not scheduler.pending

    def test_flush_without_pending(self):
        """Test flushing with nothing queued delivers nothing."""
        received = []
        scheduler = EmitScheduler(received.append)

        assert scheduler.flush() is False
        assert received == []

    def test_timer_delivers(self):
        """Test the pending state is delivered once the window passes."""
        delivered = threading.Event()
        received = []

        def callback(document):
            received.append(document)
            delivered.set()

        scheduler = EmitScheduler(callback, delay_ms=10)
        scheduler.schedule(with_preview("late"))

        assert delivered.wait(timeout=5)
        assert received[0].head_attributes.preview_text == "late"
        assert scheduler.flush() is False

    def test_cancel_drops_pending(self):
        """Test a cancelled emission is never delivered."""
        received = []
        scheduler = EmitScheduler(received.append, delay_ms=10_000)
        scheduler.schedule(with_preview("x"))

        scheduler.cancel()

        assert not scheduler.pending
        assert scheduler.flush() is False
        assert received == []

    def test_snapshot_taken_at_schedule(self):
        """Test later edits to the scheduled document are not delivered."""
        received = []
        scheduler = EmitScheduler(received.append, delay_ms=10_000)
        document = with_preview("before")

        scheduler.schedule(document)
        document.head_attributes.preview_text = "after"
        scheduler.flush()

        assert received[0].head_attributes.preview_text == "before"

    def test_callback_error_propagates_on_flush(self):
        """Test a failing listener surfaces its error to the flushing caller."""
        def callback(document):
            raise RuntimeError("listener broke")

        scheduler = EmitScheduler(callback, delay_ms=10_000)
        scheduler.schedule(with_preview("x"))

        with pytest.raises(RuntimeError, match="listener broke"):
            scheduler.flush()
        assert not scheduler.pending

    def test_negative_delay_rejected(self):
        """Test the window cannot be negative."""
        with pytest.raises(ValueError):
            EmitScheduler(lambda document: None, delay_ms=-1)
