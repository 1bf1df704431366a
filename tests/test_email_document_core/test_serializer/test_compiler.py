"""Tests for the compiler boundary."""

import pytest

from email_document_core.model import create_default_document
from email_document_core.serializer import CompilationResult, compile_document, compile_markup


class TestCompileMarkup:
    """Test normalisation of compiler results."""

    def test_tuple_result(self):
        """Test an (html, errors) tuple is accepted."""
        result = compile_markup("<mjml></mjml>", lambda markup: ("<html></html>", []))

        assert result.success
        assert result.html == "<html></html>"
        assert result.markup == "<mjml></mjml>"

    def test_mapping_result(self):
        """Test a mapping with html and errors keys is accepted."""
        result = compile_markup("<mjml></mjml>", lambda markup: {
            "html": "<html></html>",
            "errors": [{"line": 3, "message": "bad attribute"}],
        })

        assert not result.success
        assert result.errors[0]["line"] == 3

    def test_result_object_passthrough(self):
        """Test a CompilationResult is returned with markup filled in."""
        produced = CompilationResult(html="<html></html>")

        result = compile_markup("<mjml></mjml>", lambda markup: produced)

        assert result is produced
        assert result.markup == "<mjml></mjml>"

    def test_compiler_exception_reported(self):
        """Test a raising compiler becomes an error result."""
        def broken(markup):
            raise RuntimeError("renderer crashed")

        result = compile_markup("<mjml></mjml>", broken)

        assert result.html == ""
        assert result.errors == ["Compilation failed: renderer crashed"]

    @pytest.mark.parametrize("raw", ["<html></html>", None, ("a", "b", "c")])
    def test_unsupported_result_reported(self, raw):
        """Test unrecognised compiler output is reported as an error."""
        result = compile_markup("<mjml></mjml>", lambda markup: raw)

        assert not result.success


class TestCompileDocument:
    """Test document compilation."""

    def test_compiler_receives_markup(self):
        """Test the serialized document is handed to the compiler."""
        received = []
        document = create_default_document()

        def compiler(markup):
            received.append(markup)
            return "<html>ok</html>", []

        result = compile_document(document, compiler)

        assert result.html == "<html>ok</html>"
        assert received[0].startswith("<mjml>")
        assert document.body.id in received[0]
