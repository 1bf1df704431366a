"""Candidate extraction strategies for the response recovery parser.

Strategies run in order and the first candidate that looks like a document
wins: the whole response, then each fenced code block, then every balanced
``{...}`` span found by bracket counting. Decoy objects (a colour palette
quoted in prose, say) are skipped and scanning continues.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, Optional

from email_document_core.model.types import NodeType
from email_document_core.recovery.repair import repair_json
from email_document_core.shared import RecoveryConfig, get_logger

FENCED_BLOCK = re.compile(r"```[\w+-]*[ \t]*\n?([\s\S]*?)\n?\s*```")


class ExtractionStrategy(Enum):
    """Strategy that produced a candidate."""

    DIRECT = "direct"
    FENCED_BLOCK = "fenced_block"
    BRACKET_SCAN = "bracket_scan"


@dataclass
class ExtractedCandidate:
    """Parsed JSON object plus how it was found."""

    data: Dict[str, Any]
    strategy: ExtractionStrategy
    repaired: bool = False
    offset: int = 0


def looks_like_document(obj: Any) -> bool:
    """Cheap shape check run before full validation."""
    if not isinstance(obj, dict):
        return False
    body = obj.get("body")
    if isinstance(body, dict) and body.get("type") == NodeType.BODY.value:
        return True
    return "version" in obj and "headAttributes" in obj


def iter_fenced_blocks(text: str) -> Iterator[str]:
    """Inner text of every fenced code block, language-tagged or bare."""
    for match in FENCED_BLOCK.finditer(text):
        yield match.group(1)


class CandidateExtractor:
    """Runs the extraction strategies over one response."""

    def __init__(
        self,
        config: Optional[RecoveryConfig] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self.config = config or RecoveryConfig()
        self.logger = get_logger(__name__, correlation_id, "candidate_extractor")

    def try_parse(self, text: str) -> Optional[Dict[str, Any]]:
        """Parse text as a JSON object, retrying once after repair."""
        parsed, _ = self._parse_with_flag(text)
        return parsed

    def _parse_with_flag(self, text: str):
        trimmed = text.strip()
        if not trimmed:
            return None, False

        try:
            parsed = json.loads(trimmed)
            if isinstance(parsed, dict):
                return parsed, False
        except (ValueError, RecursionError):
            pass

        try:
            parsed = json.loads(repair_json(trimmed, self.config.strip_line_comments))
            if isinstance(parsed, dict):
                return parsed, True
        except (ValueError, RecursionError):
            pass

        return None, False

    def extract(self, raw: str) -> Optional[ExtractedCandidate]:
        """Find the first document-shaped JSON object in ``raw``."""
        text = raw.strip()

        parsed, repaired = self._parse_with_flag(text)
        if looks_like_document(parsed):
            self.logger.debug("Direct parse succeeded", extra={"repaired": repaired})
            return ExtractedCandidate(parsed, ExtractionStrategy.DIRECT, repaired)

        for block in iter_fenced_blocks(text):
            parsed, repaired = self._parse_with_flag(block)
            if looks_like_document(parsed):
                self.logger.debug("Fenced block matched", extra={"repaired": repaired})
                return ExtractedCandidate(parsed, ExtractionStrategy.FENCED_BLOCK, repaired)

        return self._bracket_scan(text)

    def _bracket_scan(self, text: str) -> Optional[ExtractedCandidate]:
        attempts = 0
        start = text.find("{")

        while start != -1:
            attempts += 1
            if (
                self.config.max_bracket_candidates is not None
                and attempts > self.config.max_bracket_candidates
            ):
                self.logger.debug("Bracket scan candidate limit reached")
                break

            candidate = self._balanced_from(text, start)
            if candidate is not None:
                return candidate
            start = text.find("{", start + 1)

        return None

    def _balanced_from(self, text: str, start: int) -> Optional[ExtractedCandidate]:
        """Bracket-count from ``start``; repair the tail if it never balances."""
        depth = 0
        in_string = False
        escape = False
        min_length = self.config.min_candidate_length
        # Deepest node plus the objects that wrap it
        max_braces = self.config.max_node_depth + 8

        for i in range(start, len(text)):
            ch = text[i]
            if escape:
                escape = False
                continue
            if ch == "\\" and in_string:
                escape = True
                continue
            if ch == '"':
                in_string = not in_string
                continue
            if in_string:
                continue

            if ch == "{":
                depth += 1
                if depth > max_braces:
                    return None
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    span = text[start:i + 1]
                    if len(span) < min_length:
                        return None
                    parsed, repaired = self._parse_with_flag(span)
                    if looks_like_document(parsed):
                        return ExtractedCandidate(
                            parsed, ExtractionStrategy.BRACKET_SCAN, repaired, start
                        )
                    return None

        tail = text[start:]
        if depth > 0 and len(tail) >= min_length:
            parsed, _ = self._parse_with_flag(tail)
            if looks_like_document(parsed):
                self.logger.debug("Truncated candidate repaired", extra={"offset": start})
                return ExtractedCandidate(parsed, ExtractionStrategy.BRACKET_SCAN, True, start)

        return None
