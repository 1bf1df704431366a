"""Recovery of documents from untrusted JSON text.

Key Components:
    parse_ai_response / try_parse_ai_response: Model reply -> Document
    repair_json: String-aware repair of comments, trailing commas, truncation
    validate_document_data: The single JSON -> Document validation boundary
    parse_with_retry: One-shot retry policy using RETRY_INSTRUCTION
"""

from .extraction import CandidateExtractor, ExtractionStrategy, looks_like_document
from .parser import (
    RETRY_INSTRUCTION,
    AiParseError,
    ParseFailure,
    RecoveryResult,
    ResponseRecoveryParser,
    looks_like_json_response,
    parse_ai_response,
    parse_with_retry,
    try_parse_ai_response,
)
from .repair import repair_json
from .validation import DocumentValidationError, regenerate_ids, validate_document_data

__all__ = [
    "CandidateExtractor",
    "ExtractionStrategy",
    "looks_like_document",
    "RETRY_INSTRUCTION",
    "AiParseError",
    "ParseFailure",
    "RecoveryResult",
    "ResponseRecoveryParser",
    "looks_like_json_response",
    "parse_ai_response",
    "parse_with_retry",
    "try_parse_ai_response",
    "repair_json",
    "DocumentValidationError",
    "regenerate_ids",
    "validate_document_data",
]
