"""Boundary to the external MJML-to-HTML compiler.

The compiler is an opaque collaborator: any callable taking a markup string
and returning ``(html, errors)``, a mapping with ``html``/``errors`` keys, or a
``CompilationResult``.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional

from email_document_core.model.conditions import NodeFilter
from email_document_core.model.types import Document
from email_document_core.serializer.writer import document_to_markup
from email_document_core.shared import SerializerConfig, get_logger

Compiler = Callable[[str], Any]

logger = get_logger(__name__, component="compiler_boundary")


@dataclass
class CompilationResult:
    """HTML produced by the compiler together with its reported errors."""

    html: str = ""
    errors: List[Any] = field(default_factory=list)
    markup: str = ""

    @property
    def success(self) -> bool:
        return not self.errors


def _normalize(raw: Any, markup: str) -> CompilationResult:
    if isinstance(raw, CompilationResult):
        raw.markup = raw.markup or markup
        return raw
    if isinstance(raw, Mapping):
        return CompilationResult(
            html=str(raw.get("html", "")), errors=list(raw.get("errors") or []), markup=markup
        )
    if isinstance(raw, tuple) and len(raw) == 2:
        html, errors = raw
        return CompilationResult(html=str(html), errors=list(errors or []), markup=markup)
    raise TypeError(f"Unsupported compiler result type: {type(raw).__name__}")


def compile_markup(markup: str, compiler: Compiler) -> CompilationResult:
    """Run the compiler, turning any failure into a reported error."""
    try:
        return _normalize(compiler(markup), markup)
    except Exception as e:
        logger.exception("Compiler failed", extra={"markup_length": len(markup)})
        return CompilationResult(html="", errors=[f"Compilation failed: {e}"], markup=markup)


def compile_document(
    doc: Document,
    compiler: Compiler,
    include: Optional[NodeFilter] = None,
    config: Optional[SerializerConfig] = None,
) -> CompilationResult:
    """Serialize a document and hand the markup to the compiler."""
    return compile_markup(document_to_markup(doc, include, config), compiler)
