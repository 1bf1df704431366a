"""Persisted design JSON: the exchange envelope around a document.

The envelope is ``{"_editor": EDITOR_DISCRIMINATOR, "_version": 1,
"document": {...}}``. Detection relies on the discriminator alone so that
unrelated legacy payloads are never mistaken for editor data.
"""

import json
from typing import Any, Dict

from email_document_core.model.types import Document
from email_document_core.recovery.validation import validate_document_data
from email_document_core.shared import RecoveryError

EDITOR_DISCRIMINATOR = "mesagoo-email-editor"
DESIGN_JSON_VERSION = 1


def is_editor_json(data: Any) -> bool:
    """Check whether ``data`` is an editor envelope, by discriminator only."""
    return isinstance(data, dict) and data.get("_editor") == EDITOR_DISCRIMINATOR


def to_design_json(doc: Document) -> Dict[str, Any]:
    """Wrap a document in the persisted envelope."""
    return {
        "_editor": EDITOR_DISCRIMINATOR,
        "_version": DESIGN_JSON_VERSION,
        "document": doc.to_dict(),
    }


def document_from_design_json(data: Any) -> Document:
    """Load the document from an envelope, keeping its node identifiers.

    Raises:
        RecoveryError: If ``data`` is not an envelope or its document is invalid
    """
    if not is_editor_json(data):
        raise RecoveryError("Not an editor design JSON payload")

    document = data.get("document")
    if not isinstance(document, dict):
        raise RecoveryError("Design JSON has no document object")

    return validate_document_data(document)


def design_json_dumps(doc: Document, indent: int = 2) -> str:
    return json.dumps(to_design_json(doc), indent=indent, ensure_ascii=False)


def design_json_loads(text: str) -> Document:
    """Parse an envelope from JSON text.

    Raises:
        RecoveryError: If the text is not JSON or not a valid envelope
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RecoveryError(f"Design JSON is not valid JSON: {e}", text) from e
    return document_from_design_json(data)
