"""Email Document Core.

Structured email documents that round-trip through MJML markup, with a
legality-checked mutation engine, snapshot undo/redo, and recovery of
documents from malformed language-model replies.

Progressive API Disclosure:
- Level 1: Simple functions - document_to_markup(), markup_to_document(), parse_ai_response()
- Level 2: Editor session - EditorSession with history and change notification
- Level 3: Engines - tree mutation functions, HistoryEngine, MarkupReader/MarkupWriter
"""

__version__ = "0.1.0"
__author__ = "Email Document Core Team"

# Progressive API disclosure - Level 1: Simple functions
from .recovery import AiParseError, parse_ai_response, try_parse_ai_response
from .serializer import (
    document_from_design_json,
    document_to_markup,
    export_for_esp,
    markup_to_document,
    to_design_json,
)

# Progressive API disclosure - Level 2: Editor session
from .api import EditorSession, EmitPayload, open_session

# Configuration classes for advanced usage
from .shared.config import EditorConfig

# Core model objects for all API levels
from .model import Document, Node, NodeType, create_default_document

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple functions
    "document_to_markup",
    "markup_to_document",
    "to_design_json",
    "document_from_design_json",
    "export_for_esp",
    "parse_ai_response",
    "try_parse_ai_response",
    "AiParseError",

    # Level 2: Editor session
    "EditorSession",
    "EmitPayload",
    "open_session",

    # Model objects
    "Document",
    "Node",
    "NodeType",
    "create_default_document",

    # Configuration classes for advanced usage
    "EditorConfig",
]
