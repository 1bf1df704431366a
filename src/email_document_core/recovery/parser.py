"""Response recovery parser.

Turns the raw text of a language-model reply into a validated document. The
reply may wrap the JSON in prose or code fences, quote unrelated objects
before it, or be truncated mid-stream; see ``extraction`` and ``repair`` for
the individual strategies. The recovered document always carries fresh node
identifiers.
"""

import re
import time
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from email_document_core.model.types import Document
from email_document_core.recovery.extraction import CandidateExtractor, ExtractionStrategy
from email_document_core.recovery.validation import regenerate_ids, validate_document_data
from email_document_core.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    DiagnosticsMixin,
    RecoveryConfig,
    RecoveryError,
    get_logger,
)

RETRY_INSTRUCTION = (
    "Your previous response could not be parsed. Please re-send ONLY the raw JSON "
    "EmailDocument, starting with { and ending with }. No text, no code fences, "
    "no markdown — just the JSON object."
)

EXTRACTION_FAILED = "Could not extract JSON from AI response"

_FENCED_OBJECT = re.compile(r"```(?:json)?\s*\n?\s*\{")


class AiParseError(RecoveryError):
    """Raised when a model reply cannot be recovered into a document."""


@dataclass
class ParseFailure:
    """Why a reply could not be recovered, plus the reply itself."""

    reason: str
    raw_input: str

    def __str__(self) -> str:
        return self.reason


@dataclass
class RecoveryResult(DiagnosticsMixin):
    """Outcome of one recovery attempt; exactly one of document/failure is set."""

    document: Optional[Document] = None
    failure: Optional[ParseFailure] = None
    strategy: Optional[ExtractionStrategy] = None
    repaired: bool = False
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    processing_time_ms: float = 0.0
    correlation_id: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.document is not None

    def raise_for_failure(self) -> Document:
        """Return the document or raise ``AiParseError``."""
        if self.document is None:
            failure = self.failure or ParseFailure(EXTRACTION_FAILED, "")
            raise AiParseError(failure.reason, failure.raw_input)
        return self.document


class ResponseRecoveryParser:
    """Recovers documents from model replies without raising.

    Attributes:
        config: Recovery settings (candidate length, comment stripping, limits)
        correlation_id: Optional id tying log lines to one editor session
    """

    def __init__(
        self,
        config: Optional[RecoveryConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or RecoveryConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "response_recovery")
        self._extractor = CandidateExtractor(self.config, correlation_id)

    def parse(self, raw: Any) -> RecoveryResult:
        start_time = time.time()
        result = RecoveryResult(correlation_id=self.correlation_id)

        if not isinstance(raw, str):
            return self._fail(result, "AI response must be a string", "", start_time)

        candidate = self._extractor.extract(raw)
        if candidate is None:
            return self._fail(result, EXTRACTION_FAILED, raw, start_time)

        result.strategy = candidate.strategy
        result.repaired = candidate.repaired
        result.add_diagnostic(
            DiagnosticSeverity.INFO,
            f"Candidate found by {candidate.strategy.value}",
            "response_recovery",
            details={"offset": candidate.offset},
        )
        if candidate.repaired:
            result.add_diagnostic(
                DiagnosticSeverity.WARNING,
                "Candidate JSON was repaired before parsing",
                "response_recovery",
            )

        try:
            document = validate_document_data(candidate.data, self.config.max_node_depth)
        except RecoveryError as e:
            return self._fail(result, e.reason, raw, start_time)

        regenerate_ids(document.body)
        result.document = document
        result.processing_time_ms = (time.time() - start_time) * 1000

        self.logger.info(
            "AI response recovered",
            extra={
                "strategy": candidate.strategy.value,
                "repaired": candidate.repaired,
                "input_length": len(raw),
            },
        )
        return result

    def _fail(
        self, result: RecoveryResult, reason: str, raw: str, start_time: float
    ) -> RecoveryResult:
        result.failure = ParseFailure(reason=reason, raw_input=raw)
        result.add_diagnostic(DiagnosticSeverity.ERROR, reason, "response_recovery")
        result.processing_time_ms = (time.time() - start_time) * 1000
        self.logger.warning(
            "AI response could not be recovered",
            extra={"reason": reason, "input_length": len(raw)},
        )
        return result


def try_parse_ai_response(
    raw: Any,
    config: Optional[RecoveryConfig] = None,
    correlation_id: Optional[str] = None,
) -> RecoveryResult:
    """Recover a document from a model reply without raising."""
    return ResponseRecoveryParser(config, correlation_id).parse(raw)


def parse_ai_response(raw: Any, config: Optional[RecoveryConfig] = None) -> Document:
    """Recover a document from a model reply.

    Args:
        raw: Full text of the reply
        config: Optional recovery settings

    Returns:
        Validated document with freshly generated node ids

    Raises:
        AiParseError: If no strategy yields a valid document

    Examples:
        >>> doc = parse_ai_response('Here you go: {"version": 1, "headAttributes": {}, '
        ...                         '"body": {"id": "x", "type": "mj-body", "children": []}}')
        >>> doc.body.type.value
        'mj-body'
    """
    return try_parse_ai_response(raw, config).raise_for_failure()


def parse_with_retry(
    raw: str,
    ask_again: Callable[[str], str],
    config: Optional[RecoveryConfig] = None,
) -> Document:
    """Parse a reply, asking the model once more if it cannot be recovered.

    ``ask_again`` receives ``RETRY_INSTRUCTION`` and returns the new reply.
    A failure on the second reply propagates as ``AiParseError``.
    """
    result = try_parse_ai_response(raw, config)
    if result.success:
        return result.document
    return parse_ai_response(ask_again(RETRY_INSTRUCTION), config)


def looks_like_json_response(raw: str) -> bool:
    """Cheap check whether a reply is a template rather than conversation."""
    trimmed = raw.strip()
    if trimmed.startswith("{"):
        return True
    if _FENCED_OBJECT.search(trimmed):
        return True
    if '"version"' in trimmed and '"body"' in trimmed and '"mj-body"' in trimmed:
        return True
    return '"headAttributes"' in trimmed and '"mj-body"' in trimmed
