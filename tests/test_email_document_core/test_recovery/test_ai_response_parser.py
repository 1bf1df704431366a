"""Tests for recovering documents from language-model replies."""

import json
import re
from typing import Any, Dict

import pytest

from email_document_core.recovery import (
    RETRY_INSTRUCTION,
    AiParseError,
    ExtractionStrategy,
    RecoveryResult,
    looks_like_json_response,
    parse_ai_response,
    parse_with_retry,
    try_parse_ai_response,
)
from email_document_core.recovery.parser import EXTRACTION_FAILED
from email_document_core.model import NodeType
from email_document_core.shared import DiagnosticSeverity, RecoveryConfig, RecoveryError
from email_document_core.tree import collect_ids


def make_valid_doc(**overrides: Any) -> Dict[str, Any]:
    doc: Dict[str, Any] = {
        "version": 1,
        "headAttributes": {"defaultStyles": {}, "fonts": [], "previewText": ""},
        "body": {
            "id": "old-body",
            "type": "mj-body",
            "attributes": {"background-color": "#f4f4f4"},
            "children": [
                {
                    "id": "old-section",
                    "type": "mj-section",
                    "attributes": {},
                    "children": [
                        {
                            "id": "old-col",
                            "type": "mj-column",
                            "attributes": {},
                            "children": [
                                {
                                    "id": "old-text",
                                    "type": "mj-text",
                                    "attributes": {},
                                    "children": [],
                                    "htmlContent": "<p>Hello</p>",
                                }
                            ],
                        }
                    ],
                }
            ],
        },
    }
    doc.update(overrides)
    return doc


def make_valid_json(**overrides: Any) -> str:
    return json.dumps(make_valid_doc(**overrides))


def shape(node):
    return (
        node.type,
        node.attributes,
        node.html_content,
        [shape(child) for child in node.children],
    )


OLD_IDS = {"old-body", "old-section", "old-col", "old-text"}


class TestParseAiResponse:
    """Test the strategy pipeline end to end."""

    def test_clean_json_parses_directly(self):
        """Test a bare JSON reply is parsed by the direct strategy."""
        result = try_parse_ai_response(make_valid_json())

        assert result.success
        assert result.strategy == ExtractionStrategy.DIRECT
        assert result.repaired is False
        assert result.document.version == 1
        assert result.document.body.type == NodeType.BODY

    def test_json_inside_code_fence(self):
        """Test JSON wrapped in a json code fence is extracted."""
        raw = f"Here is the template:\n```json\n{make_valid_json()}\n```\nEnjoy!"

        result = try_parse_ai_response(raw)

        assert result.success
        assert result.strategy == ExtractionStrategy.FENCED_BLOCK

    def test_json_inside_bare_code_fence(self):
        """Test JSON wrapped in a fence without language tag is extracted."""
        raw = f"```\n{make_valid_json()}\n```"

        result = try_parse_ai_response(raw)

        assert result.success
        assert result.strategy == ExtractionStrategy.FENCED_BLOCK

    def test_json_surrounded_by_prose(self):
        """Test a document embedded in conversational text is found by bracket scan."""
        raw = (
            "I've created a beautiful newsletter template for you. Here it is:\n\n"
            f"{make_valid_json()}\n\nFeel free to ask if you'd like any changes!"
        )

        document = parse_ai_response(raw)

        assert document.body.type == NodeType.BODY
        section = document.body.children[0]
        assert section.children[0].children[0].html_content == "<p>Hello</p>"

    def test_decoy_object_before_document_is_skipped(self):
        """Test a non-document object quoted earlier does not stop the scan."""
        decoy = '{"primary": "#01A8AB", "secondary": "#1a1a2e", "accent": "#ff6b6b"}'
        raw = f"Your palette is {decoy} and the template follows: {make_valid_json()}"

        result = try_parse_ai_response(raw)

        assert result.success
        assert result.strategy == ExtractionStrategy.BRACKET_SCAN
        assert result.document.body.children[0].type == NodeType.SECTION

    def test_short_decoy_is_skipped(self):
        """Test small objects under the candidate length are ignored."""
        raw = 'Colors: {"colors": ["#fff"]} then ' + make_valid_json()

        document = parse_ai_response(raw)

        assert document.body.type == NodeType.BODY

    def test_truncated_reply_is_repaired(self):
        """Test a reply cut off before its closing brackets is recovered."""
        raw = make_valid_json()[:-3]

        result = try_parse_ai_response(raw)

        assert result.success
        assert result.repaired is True
        text = result.document.body.children[0].children[0].children[0]
        assert text.html_content == "<p>Hello</p>"

    def test_truncated_reply_after_prose_is_repaired(self):
        """Test the bracket scan repairs a tail that never balances."""
        raw = "Sure! Here it is: " + make_valid_json()[:-3]

        result = try_parse_ai_response(raw)

        assert result.success
        assert result.strategy == ExtractionStrategy.BRACKET_SCAN
        assert result.repaired is True

    def test_truncated_inside_string_is_repaired(self):
        """Test truncation in the middle of a string value is closed."""
        full = make_valid_json()
        raw = full[:full.index("Hello") + 3]

        document = parse_ai_response(raw)

        text = document.body.children[0].children[0].children[0]
        assert text.html_content == "<p>Hel"

    def test_line_comments_and_trailing_commas(self):
        """Test comments and trailing commas typical of model output are tolerated."""
        raw = """{
          // generated template
          "version": 1,
          "headAttributes": {"defaultStyles": {}, "fonts": [], "previewText": "Hi",},
          "body": {"id": "b", "type": "mj-body", "attributes": {}, "children": [],},
        }"""

        document = parse_ai_response(raw)

        assert document.head_attributes.preview_text == "Hi"
        assert document.body.children == []

    def test_fenced_reply_with_prose_on_both_sides(self):
        """Test a fenced document between greeting and sign-off is recovered."""
        raw = f"Sure, here you go: ```json\n{make_valid_json()}\n``` Enjoy!"

        result = try_parse_ai_response(raw)

        assert result.strategy == ExtractionStrategy.FENCED_BLOCK
        assert result.document.version == 1
        ids = collect_ids(result.document.body)
        assert len(set(ids)) == len(ids)

    def test_trailing_comma_before_every_closer(self):
        """Test trailing commas everywhere yield the same content as clean JSON."""
        pretty = json.dumps(make_valid_doc(), indent=2)
        with_commas = re.sub(r"(\S)(?=\n\s*[\]}])", r"\1,", pretty)
        assert with_commas.count(",\n") > pretty.count(",\n")

        repaired = parse_ai_response(with_commas)
        clean = parse_ai_response(pretty)

        assert shape(repaired.body) == shape(clean.body)
        assert repaired.head_attributes == clean.head_attributes

    def test_all_ids_are_regenerated(self):
        """Test no identifier from the reply survives recovery."""
        document = parse_ai_response(make_valid_json())

        ids = collect_ids(document.body)
        assert len(ids) == 4
        assert len(set(ids)) == 4
        assert OLD_IDS.isdisjoint(ids)

    def test_unsupported_version_fails(self):
        """Test a document-shaped reply with version 2 is rejected."""
        with pytest.raises(AiParseError, match="Invalid document version"):
            parse_ai_response(make_valid_json(version=2))

    def test_null_version_fails(self):
        """Test an explicit null version is not treated as absent."""
        with pytest.raises(AiParseError, match="Invalid document version"):
            parse_ai_response(make_valid_json(version=None))

    def test_missing_version_defaults_to_one(self):
        """Test an absent version is treated as the current version."""
        data = make_valid_doc()
        del data["version"]

        document = parse_ai_response(json.dumps(data))

        assert document.version == 1

    def test_invalid_node_type_fails(self):
        """Test an unknown node type anywhere in the tree is rejected."""
        data = make_valid_doc()
        data["body"]["children"][0]["type"] = "mj-carousel"

        with pytest.raises(AiParseError, match='Invalid node type: "mj-carousel"'):
            parse_ai_response(json.dumps(data))

    def test_plain_text_fails_with_reason(self):
        """Test a conversational reply yields an extraction failure."""
        raw = "What colors would you like for your newsletter?"

        with pytest.raises(AiParseError) as exc_info:
            parse_ai_response(raw)

        assert exc_info.value.reason == EXTRACTION_FAILED
        assert exc_info.value.raw_input == raw

    def test_parse_error_is_recovery_error(self):
        """Test AiParseError belongs to the shared exception hierarchy."""
        assert issubclass(AiParseError, RecoveryError)


class TestTryParseAiResponse:
    """Test the non-raising result wrapper."""

    def test_failure_result(self):
        """Test failures are reported on the result instead of raised."""
        result = try_parse_ai_response("no json here")

        assert isinstance(result, RecoveryResult)
        assert not result.success
        assert result.document is None
        assert result.failure.reason == EXTRACTION_FAILED
        assert result.failure.raw_input == "no json here"
        assert result.get_diagnostics_by_severity(DiagnosticSeverity.ERROR)

    def test_non_string_input(self):
        """Test non-string input fails without raising."""
        result = try_parse_ai_response(None)

        assert not result.success
        assert "string" in result.failure.reason

    def test_empty_input(self):
        """Test empty input fails with the extraction reason."""
        result = try_parse_ai_response("   ")

        assert not result.success
        assert result.failure.reason == EXTRACTION_FAILED

    def test_repair_recorded_as_warning(self):
        """Test repaired candidates leave a warning diagnostic."""
        result = try_parse_ai_response(make_valid_json()[:-3])

        assert result.has_warnings()

    def test_raise_for_failure(self):
        """Test raise_for_failure converts the failure into AiParseError."""
        result = try_parse_ai_response("nothing")

        with pytest.raises(AiParseError):
            result.raise_for_failure()

    @pytest.mark.parametrize("raw", [
        "[" * 100000,
        '{"a":' * 5000 + "1" + "}" * 5000,
        "Here it is: " + "{" * 50000,
    ])
    def test_deeply_nested_input_fails_without_raising(self, raw):
        """Test pathological nesting becomes a failure result."""
        result = try_parse_ai_response(raw)

        assert not result.success
        assert result.failure.raw_input == raw

    def test_deeply_nested_input_raises_parse_error(self):
        """Test the raising entry point reports deep nesting as AiParseError."""
        with pytest.raises(AiParseError):
            parse_ai_response("[" * 100000)

    def test_document_nested_past_limit_fails(self):
        """Test a well-formed document deeper than the node limit is rejected."""
        node: Dict[str, Any] = {"type": "mj-text"}
        for _ in range(40):
            node = {"type": "mj-section", "children": [node]}
        doc = make_valid_doc()
        doc["body"]["children"] = [node]

        result = try_parse_ai_response(json.dumps(doc))

        assert not result.success
        assert "nesting" in result.failure.reason

    def test_strict_config_skips_small_documents(self):
        """Test a larger minimum candidate length excludes tiny embedded documents."""
        tiny = '{"version": 1, "headAttributes": {}, "body": {"type": "mj-body"}}'
        raw = f"prefix {tiny} suffix"
        config = RecoveryConfig(min_candidate_length=100)

        assert try_parse_ai_response(raw).success
        assert not try_parse_ai_response(raw, config).success


class TestParseWithRetry:
    """Test the one-shot retry policy."""

    def test_no_retry_on_success(self):
        """Test the model is not asked again when the first reply parses."""
        calls = []

        document = parse_with_retry(make_valid_json(), lambda text: calls.append(text) or "")

        assert document.body.type == NodeType.BODY
        assert calls == []

    def test_retry_once_with_instruction(self):
        """Test a failed reply triggers exactly one retry with the instruction."""
        calls = []

        def ask_again(instruction: str) -> str:
            calls.append(instruction)
            return make_valid_json()

        document = parse_with_retry("Sorry, here is some text.", ask_again)

        assert document.body.type == NodeType.BODY
        assert calls == [RETRY_INSTRUCTION]

    def test_second_failure_propagates(self):
        """Test a failing retry reply raises AiParseError."""
        with pytest.raises(AiParseError):
            parse_with_retry("not json", lambda instruction: "still not json")

    def test_retry_instruction_text(self):
        """Test the instruction asks for raw JSON only."""
        assert RETRY_INSTRUCTION.startswith("Your previous response could not be parsed.")
        assert "starting with { and ending with }" in RETRY_INSTRUCTION


class TestLooksLikeJsonResponse:
    """Test the conversation-versus-template heuristic."""

    @pytest.mark.parametrize("raw", [
        '  {"version": 1}',
        'Here:\n```json\n{"a": 1}\n```',
        'Text "version" then "body" with "mj-body"',
        'The "headAttributes" and "mj-body" are here',
    ])
    def test_template_replies(self, raw):
        """Test replies carrying a template are detected."""
        assert looks_like_json_response(raw)

    @pytest.mark.parametrize("raw", [
        "What industry is your newsletter for?",
        "Use a body with version 2",
        "",
    ])
    def test_conversation_replies(self, raw):
        """Test conversational replies are not mistaken for templates."""
        assert not looks_like_json_response(raw)
