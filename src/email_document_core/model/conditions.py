"""Evaluation of conditional display rules against merge-tag values."""

import re
from typing import Callable, Mapping, Optional

from email_document_core.model.types import ConditionalRule, ConditionOperator, Node

_MERGE_TAG = re.compile(r"^\{\{\s*(.*?)\s*\}\}$")

NodeFilter = Callable[[Node], bool]


def variable_name(variable: str) -> str:
    """Strip merge-tag braces: ``{{ plan }}`` -> ``plan``."""
    match = _MERGE_TAG.match(variable.strip())
    return match.group(1) if match else variable.strip()


def evaluate_condition(rule: ConditionalRule, variables: Mapping[str, Optional[str]]) -> bool:
    """Decide whether a rule holds for the given variable values.

    A variable that is missing, None or empty counts as not existing; the
    comparison operators then compare against the empty string.
    """
    actual = variables.get(variable_name(rule.variable))
    exists = actual is not None and actual != ""
    actual_text = actual or ""
    expected = rule.value or ""

    if rule.operator == ConditionOperator.EXISTS:
        return exists
    if rule.operator == ConditionOperator.NOT_EXISTS:
        return not exists
    if rule.operator == ConditionOperator.EQUALS:
        return actual_text == expected
    if rule.operator == ConditionOperator.NOT_EQUALS:
        return actual_text != expected
    if rule.operator == ConditionOperator.CONTAINS:
        return expected in actual_text
    if rule.operator == ConditionOperator.NOT_CONTAINS:
        return expected not in actual_text
    raise ValueError(f"Unsupported operator: {rule.operator}")


def condition_filter(variables: Mapping[str, Optional[str]]) -> NodeFilter:
    """Build a serializer filter that drops nodes whose condition fails."""

    def include(node: Node) -> bool:
        if node.condition is None:
            return True
        return evaluate_condition(node.condition, variables)

    return include


def include_all(node: Node) -> bool:
    """Default filter: unresolved conditions count as included."""
    return True
