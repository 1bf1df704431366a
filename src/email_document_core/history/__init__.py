"""Undo/redo history and debounced change notification."""

from .engine import HistoryEngine
from .scheduler import EmitCallback, EmitScheduler

__all__ = [
    "HistoryEngine",
    "EmitCallback",
    "EmitScheduler",
]
