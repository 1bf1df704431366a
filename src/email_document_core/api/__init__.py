"""Editor session API."""

from .editor import EditorSession, EmitPayload, Listener, open_session

__all__ = [
    "EditorSession",
    "EmitPayload",
    "Listener",
    "open_session",
]
