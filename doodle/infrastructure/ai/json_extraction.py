"""
Helpers for pulling JSON out of free-form LLM completions.

Models often wrap the payload in prose, ```json fences or <think> blocks, and
occasionally emit raw newlines inside string values. These helpers locate the
payload and parse it leniently.
"""

import json
import logging
import re
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

_ARRAY_SPAN = re.compile(r"\[[\s\S]*\]")


def _fenced_block(text: str, opener: str) -> str:
    if "```" not in text:
        return ""
    for part in text.split("```")[1::2]:
        cleaned = part.strip()
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:].strip()
        if cleaned.startswith(opener):
            return cleaned
    return ""


def _escape_control_chars(payload: str) -> str:
    cleaned = []
    in_string = False
    escape_next = False

    for char in payload:
        if escape_next:
            cleaned.append(char)
            escape_next = False
            continue
        if char == "\\":
            cleaned.append(char)
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            cleaned.append(char)
            continue
        if in_string and char == "\n":
            cleaned.append("\\n")
        elif in_string and char == "\r":
            cleaned.append("\\r")
        elif in_string and char == "\t":
            cleaned.append("\\t")
        else:
            cleaned.append(char)

    return "".join(cleaned)


def loads_lenient(payload: str) -> Any:
    payload = payload.replace("**", "")
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        if "control character" not in str(e) and "Invalid" not in str(e):
            raise
        logger.warning("JSON has control characters, attempting to escape them")
        return json.loads(_escape_control_chars(payload))


def extract_json_array(text: str) -> List[Any]:
    """
    Return the first JSON array found in ``text``.

    Raises ValueError when no array is present or it does not parse.
    """
    text = text or ""
    payload = _fenced_block(text, "[")
    if not payload:
        match = _ARRAY_SPAN.search(text)
        payload = match.group(0) if match else ""
    if not payload:
        raise ValueError("No JSON array found in LLM response")

    data = loads_lenient(payload)
    if not isinstance(data, list):
        raise ValueError("LLM response JSON is not an array")
    return data


def extract_json_object(text: str) -> Dict[str, Any]:
    """Return the JSON object in ``text`` (fenced, whole-string, or first {...} span)."""
    text = (text or "").strip()
    payload = _fenced_block(text, "{")

    if not payload and text.startswith("{") and text.endswith("}"):
        payload = text

    if not payload:
        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end > start:
            payload = text[start : end + 1]

    if not payload:
        raise ValueError("No JSON object found in LLM response")

    data = loads_lenient(payload)
    if not isinstance(data, dict):
        raise ValueError("LLM response JSON is not an object")
    return data
