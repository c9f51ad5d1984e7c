"""
Extract a JSON object from free-form model output.

Models asked for "JSON only" still wrap answers in markdown fences or
prose. The grammar here is: the first ``{`` starts a candidate, and the
candidate ends at the brace that balances it. Braces inside JSON string
literals (including escaped quotes) do not count.
"""

import json
from typing import Any, Dict, Optional


def find_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced ``{...}`` substring, or None.

    Examples:
        >>> find_json_object('```json\\n{"done": true}\\n```')
        '{"done": true}'
        >>> find_json_object('no object here') is None
        True
    """
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    return None


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Parse the first JSON object embedded in ``text``.

    Raises:
        ValueError: If there is no balanced object or it is not valid JSON
    """
    if not isinstance(text, str):
        raise ValueError(f"Expected text, got {type(text).__name__}")

    candidate = find_json_object(text)
    if candidate is None:
        raise ValueError("No JSON object found in text")

    # json.JSONDecodeError is a ValueError subclass
    data = json.loads(candidate)
    if not isinstance(data, dict):
        raise ValueError("Extracted JSON is not an object")
    return data
