"""
Canonical Content Normalizer

Turns OpenAI- or Claude-shaped message bodies into canonical content blocks
and merges them into Claude-style turns.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .claude_models import (
    EPHEMERAL,
    ClaudeMessage,
    ContentBlock,
    ImageBlock,
    ImageSource,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)
from .helpers import parse_data_uri, try_parse_json
from .openai_models import OpenAIMessage

logger = logging.getLogger(__name__)


@dataclass
class Message:
    """A source message reduced to its role and canonical blocks."""
    role: str
    blocks: List[ContentBlock] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(block.text for block in self.blocks if isinstance(block, TextBlock))


@dataclass
class MergedConversation:
    system: str
    messages: List[ClaudeMessage]


# --- Recognizers ---
# Each entry is (predicate, builder); the first matching predicate wins and
# a builder returning None drops the element.

def _is_text(part: Dict[str, Any]) -> bool:
    return part.get("type") == "text"


def _build_text(part: Dict[str, Any]) -> Optional[ContentBlock]:
    text = part.get("text")
    if isinstance(text, str) and text:
        return TextBlock(text=text)
    return None


def _is_image_url(part: Dict[str, Any]) -> bool:
    return part.get("type") == "image_url"


def _build_image_url(part: Dict[str, Any]) -> Optional[ContentBlock]:
    image_url = part.get("image_url")
    url = image_url.get("url") if isinstance(image_url, dict) else image_url
    parsed = parse_data_uri(url)
    if parsed is None:
        logger.debug("Dropping image_url part without a base64 data URI")
        return None
    media_type, data = parsed
    return ImageBlock(source=ImageSource(media_type=media_type, data=data))


def _is_native_image(part: Dict[str, Any]) -> bool:
    return part.get("type") == "image" and isinstance(part.get("source"), dict)


def _build_native_image(part: Dict[str, Any]) -> Optional[ContentBlock]:
    source = part["source"]
    if source.get("type", "base64") != "base64" or not source.get("media_type") or not source.get("data"):
        logger.debug("Dropping image part with non-base64 source")
        return None
    return ImageBlock(source=ImageSource(media_type=source["media_type"], data=source["data"]))


def _is_tool_use(part: Dict[str, Any]) -> bool:
    return part.get("type") == "tool_use"


def _build_tool_use(part: Dict[str, Any]) -> Optional[ContentBlock]:
    name = part.get("name")
    if not name:
        logger.warning("Dropping tool_use block without a name")
        return None
    tool_input = part.get("input")
    return ToolUseBlock(id=part.get("id") or "", name=name, input={} if tool_input is None else tool_input)


def _is_function_call(part: Dict[str, Any]) -> bool:
    return part.get("type", "function") == "function" and isinstance(part.get("function"), dict)


def _build_function_call(part: Dict[str, Any]) -> Optional[ContentBlock]:
    function = part["function"]
    name = function.get("name")
    if not name:
        logger.warning("Dropping tool call without a function name")
        return None
    arguments = function.get("arguments")
    tool_input = try_parse_json(arguments) if arguments not in (None, "") else {}
    return ToolUseBlock(id=part.get("id") or "", name=name, input=tool_input)


def _is_tool_result(part: Dict[str, Any]) -> bool:
    return part.get("type") == "tool_result"


def _build_tool_result(part: Dict[str, Any]) -> Optional[ContentBlock]:
    return ToolResultBlock(
        tool_use_id=part.get("tool_use_id") or "",
        content=part.get("content"),
        is_error=True if part.get("is_error") else None,
    )


Recognizer = Tuple[Callable[[Dict[str, Any]], bool], Callable[[Dict[str, Any]], Optional[ContentBlock]]]

RECOGNIZERS: Tuple[Recognizer, ...] = (
    (_is_text, _build_text),
    (_is_image_url, _build_image_url),
    (_is_native_image, _build_native_image),
    (_is_tool_use, _build_tool_use),
    (_is_tool_result, _build_tool_result),
    (_is_function_call, _build_function_call),
)


def recognize(part: Any) -> Optional[ContentBlock]:
    """Map one content element to a canonical block, or None if unrecognized."""
    if not isinstance(part, dict):
        return None
    for matches, build in RECOGNIZERS:
        if matches(part):
            return build(part)
    return None


def normalize_content(content: Any) -> List[ContentBlock]:
    if isinstance(content, str):
        return [TextBlock(text=content)] if content else []
    if isinstance(content, list):
        return [block for block in (recognize(part) for part in content) if block is not None]
    return []


def normalize(message: OpenAIMessage) -> List[ContentBlock]:
    """
    Normalize one source-format message into canonical content blocks.

    Tool-role messages become a single tool result; OpenAI ``tool_calls``
    become tool-use blocks after the message's own content.
    """
    if message.role == "tool":
        return [ToolResultBlock(tool_use_id=message.tool_call_id or "", content=message.content)]

    blocks = normalize_content(message.content)
    for call in message.tool_calls or []:
        block = recognize(call)
        if isinstance(block, ToolUseBlock):
            blocks.append(block)
    return blocks


def normalize_messages(messages: Sequence[OpenAIMessage]) -> List[Message]:
    return [Message(role=message.role, blocks=normalize(message)) for message in messages]


def merge_messages(messages: Sequence[Message]) -> MergedConversation:
    """
    Assemble Claude turns from normalized messages.

    System text is pulled out. Tool results always travel alone in a user
    turn; a turn containing a tool use ends right after it; consecutive
    messages of the same role share one turn.
    """
    system_texts = [message.text for message in messages if message.role == "system"]
    merged: List[ClaudeMessage] = []
    pending_role: Optional[str] = None
    pending: List[ContentBlock] = []

    def flush() -> None:
        nonlocal pending
        if pending_role and pending:
            merged.append(ClaudeMessage(role=pending_role, content=pending))
        pending = []

    for message in messages:
        if message.role == "system":
            continue
        role = "user" if message.role in ("user", "tool") else "assistant"

        tool_results = [block for block in message.blocks if isinstance(block, ToolResultBlock)]
        if tool_results:
            flush()
            merged.append(ClaudeMessage(role="user", content=tool_results))
            others = [block for block in message.blocks if not isinstance(block, ToolResultBlock)]
            if others:
                pending_role = role
                pending = others
            continue

        if role != pending_role:
            flush()
            pending_role = role
        pending.extend(message.blocks)

        if any(isinstance(block, ToolUseBlock) for block in message.blocks):
            flush()

    flush()
    return MergedConversation(
        system="\n".join(text for text in system_texts if text),
        messages=merged,
    )


def mark_cache_breakpoint(messages: List[ClaudeMessage]) -> None:
    """Mark the final block of the last non-empty assistant turn as cacheable."""
    for message in reversed(messages):
        if message.role == "assistant" and message.content:
            message.content[-1].cache_control = dict(EPHEMERAL)
            return
