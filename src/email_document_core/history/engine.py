"""Linear undo/redo history over deep document snapshots."""

from typing import List, Optional

from email_document_core.model.types import Document
from email_document_core.shared import get_logger


class HistoryEngine:
    """Bounded list of snapshots with a cursor.

    ``entries[position]`` is always the snapshot of the current document.
    Committing after an undo discards the redo tail. Past ``max_entries`` the
    oldest snapshot is evicted and positions shift down so they stay
    contiguous from zero.

    Snapshots are stored and returned as deep copies; nothing handed out by
    the engine aliases its internal state.
    """

    def __init__(
        self,
        initial: Document,
        max_entries: int = 100,
        correlation_id: Optional[str] = None,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self.logger = get_logger(__name__, correlation_id, "history_engine")
        self._entries: List[Document] = [initial.snapshot()]
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[Document]:
        """Copies of every stored snapshot, oldest first."""
        return [entry.snapshot() for entry in self._entries]

    @property
    def current(self) -> Document:
        return self._entries[self._position].snapshot()

    def can_undo(self) -> bool:
        return self._position > 0

    def can_redo(self) -> bool:
        return self._position < len(self._entries) - 1

    def commit(self, doc: Document) -> None:
        """Record ``doc`` as the newest state."""
        del self._entries[self._position + 1:]
        self._entries.append(doc.snapshot())

        evicted = len(self._entries) - self.max_entries
        if evicted > 0:
            del self._entries[:evicted]

        self._position = len(self._entries) - 1
        self.logger.debug(
            "History committed",
            extra={"position": self._position, "size": len(self._entries)},
        )

    def undo(self) -> Optional[Document]:
        """Step back; None when already at the oldest entry."""
        if not self.can_undo():
            return None
        self._position -= 1
        return self._entries[self._position].snapshot()

    def redo(self) -> Optional[Document]:
        """Step forward; None when already at the newest entry."""
        if not self.can_redo():
            return None
        self._position += 1
        return self._entries[self._position].snapshot()

    def reset(self, doc: Document) -> None:
        """Drop all history and start again from ``doc``."""
        self._entries = [doc.snapshot()]
        self._position = 0
        self.logger.debug("History reset")
