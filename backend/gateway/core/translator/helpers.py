"""
Shared Translation Helpers

JSON-safe parsing, text extraction, data URI splitting and the
finish-reason / stop-reason mapping tables.
"""
import json
import re
from typing import Any, Dict, List, Optional, Tuple

# Stamp placed before Gemini function-call parts we synthesize; tells the
# backend to skip thought signature validation for calls it did not produce.
DEFAULT_THOUGHT_SIGNATURE = "skip_thought_signature_validator"

DEFAULT_SAFETY_SETTINGS: List[Dict[str, str]] = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "OFF"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "OFF"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "OFF"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "OFF"},
    {"category": "HARM_CATEGORY_CIVIC_INTEGRITY", "threshold": "OFF"},
]

CLAUDE_TO_OPENAI_FINISH = {
    "end_turn": "stop",
    "stop_sequence": "stop",
    "max_tokens": "length",
    "tool_use": "tool_calls",
}

OPENAI_TO_CLAUDE_STOP = {
    "stop": "end_turn",
    "length": "max_tokens",
    "tool_calls": "tool_use",
}

_DATA_URI_RE = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)


def try_parse_json(value: Any) -> Any:
    """Parse a JSON string, returning the input unchanged if it is not valid JSON."""
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return value


def extract_text_content(content: Any) -> str:
    """Join the text parts of a string-or-array message body."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "\n".join(
            part.get("text", "")
            for part in content
            if isinstance(part, dict) and part.get("type") == "text"
        )
    return ""


def parse_data_uri(url: Any) -> Optional[Tuple[str, str]]:
    """Split ``data:<mediaType>;base64,<payload>`` into (media_type, payload)."""
    if not isinstance(url, str):
        return None
    match = _DATA_URI_RE.match(url)
    if not match:
        return None
    return match.group(1), match.group(2)


def claude_stop_to_openai_finish(reason: Optional[str]) -> str:
    return CLAUDE_TO_OPENAI_FINISH.get(reason or "", "stop")


def openai_finish_to_claude_stop(reason: Optional[str]) -> str:
    return OPENAI_TO_CLAUDE_STOP.get(reason or "", "end_turn")
