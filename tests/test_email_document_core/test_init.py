"""Tests for the package-level API."""

import json

import email_document_core
from email_document_core import (
    EditorSession,
    create_default_document,
    document_to_markup,
    markup_to_document,
    parse_ai_response,
    to_design_json,
)


class TestPackageApi:
    """Test package metadata and top-level exports."""

    def test_metadata(self):
        """Test version and author are exposed."""
        assert email_document_core.__version__ == "0.1.0"
        assert email_document_core.__author__

    def test_all_exports_resolve(self):
        """Test every name in __all__ is importable from the package."""
        for name in email_document_core.__all__:
            assert hasattr(email_document_core, name), name

    def test_level_one_functions(self):
        """Test the simple functions work together."""
        document = create_default_document()

        parsed = markup_to_document(document_to_markup(document))
        recovered = parse_ai_response(json.dumps(to_design_json(parsed)["document"]))

        assert recovered.body.type == parsed.body.type

    def test_session_available(self):
        """Test the editor session is exported."""
        session = EditorSession()
        try:
            assert session.document.body.children
        finally:
            session.close()
