"""Text-level repair of malformed JSON produced by language models.

Handles the malformations seen in practice: ``//`` line comments, trailing
commas before a closing bracket or brace, and truncation (an unterminated
string and unclosed brackets at end of input). Every step tracks string and
escape state so that characters inside string values are never touched.
"""

from typing import List

_CLOSERS = {"{": "}", "[": "]"}


def strip_line_comments(text: str) -> str:
    """Remove ``//`` comments that start outside string values."""
    out: List[str] = []
    in_string = False
    escape = False
    i = 0
    length = len(text)

    while i < length:
        ch = text[i]
        if in_string:
            out.append(ch)
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
        elif ch == "/" and i + 1 < length and text[i + 1] == "/":
            newline = text.find("\n", i)
            i = length if newline == -1 else newline
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def strip_trailing_commas(text: str) -> str:
    """Drop commas that are followed (after whitespace) by ``]`` or ``}``."""
    out: List[str] = []
    in_string = False
    escape = False
    length = len(text)

    for i, ch in enumerate(text):
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            out.append(ch)
            continue

        if ch == '"':
            in_string = True
        elif ch == ",":
            j = i + 1
            while j < length and text[j].isspace():
                j += 1
            if j < length and text[j] in "]}":
                continue

        out.append(ch)

    return "".join(out)


def close_truncated(text: str) -> str:
    """Close an unterminated string and any brackets left open.

    Open brackets are tracked on a stack during one left-to-right scan and
    closed in reverse nesting order.
    """
    stack: List[str] = []
    in_string = False
    escape = False

    for ch in text:
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif ch in "]}" and stack and stack[-1] == ch:
            stack.pop()

    repaired = text
    if in_string:
        if escape:
            # Dangling backslash would escape the closing quote
            repaired = repaired[:-1]
        repaired += '"'

    if stack and repaired.rstrip().endswith(":"):
        # Key whose value was cut off entirely
        repaired += "null"

    return repaired + "".join(reversed(stack))


def repair_json(text: str, strip_comments: bool = True) -> str:
    """Apply the full repair pass.

    Running it on balanced, comma-clean text returns the text unchanged.

    Args:
        text: Candidate JSON text
        strip_comments: Whether to remove ``//`` line comments first

    Returns:
        Repaired text, which may still fail to parse
    """
    repaired = strip_line_comments(text) if strip_comments else text
    repaired = strip_trailing_commas(repaired)
    repaired = close_truncated(repaired)
    # Closing can leave a comma in front of a new bracket
    return strip_trailing_commas(repaired)
