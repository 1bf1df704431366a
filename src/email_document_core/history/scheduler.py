"""Debounced change notification.

A burst of edits produces one emission carrying the latest state. The timer
fires on a background thread, so pending state is guarded by a lock and the
callback only ever receives a snapshot.
"""

import threading
from typing import Callable, Optional

from email_document_core.model.types import Document
from email_document_core.shared import get_logger

EmitCallback = Callable[[Document], None]


class EmitScheduler:
    """Debounces document emissions by ``delay_ms`` milliseconds.

    Examples:
        >>> received = []
        >>> scheduler = EmitScheduler(received.append, delay_ms=300)
        >>> scheduler.schedule(create_default_document())
        >>> scheduler.flush()  # delivers immediately
    """

    def __init__(
        self,
        callback: EmitCallback,
        delay_ms: float = 300.0,
        correlation_id: Optional[str] = None,
    ) -> None:
        if delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        self.callback = callback
        self.delay_ms = delay_ms
        self.logger = get_logger(__name__, correlation_id, "emit_scheduler")

        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[Document] = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def schedule(self, doc: Document) -> None:
        """Queue ``doc`` for emission, superseding anything pending."""
        snapshot = doc.snapshot()
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = snapshot
            self._timer = threading.Timer(self.delay_ms / 1000.0, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def flush(self) -> bool:
        """Deliver the pending snapshot now; False if nothing was pending."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            snapshot, self._pending = self._pending, None

        if snapshot is None:
            return False
        self._deliver(snapshot)
        return True

    def cancel(self) -> None:
        """Drop any pending emission."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._pending = None

    def _fire(self) -> None:
        with self._lock:
            # A superseded timer may already be running when it is cancelled
            if self._timer is not threading.current_thread():
                return
            self._timer = None
            snapshot, self._pending = self._pending, None

        if snapshot is not None:
            self._deliver(snapshot)

    def _deliver(self, snapshot: Document) -> None:
        try:
            self.callback(snapshot)
        except Exception:
            self.logger.exception("Emit callback failed")
            raise
