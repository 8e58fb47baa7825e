"""
OpenAI to Claude Request Mapper

Transforms OpenAI chat completion requests into Anthropic Messages requests.
"""
import logging
from typing import Any, Dict, List, Optional

from ..config import Settings, get_settings
from .claude_models import EPHEMERAL_1H, ClaudeRequest, ClaudeTool, TextBlock
from .content import mark_cache_breakpoint, merge_messages, normalize_messages
from .ids import IdProvider
from .openai_models import OpenAIRequest, parse_openai_request

logger = logging.getLogger(__name__)

DEFAULT_INPUT_SCHEMA = {"type": "object", "properties": {}, "required": []}
CLAUDE_TOOL_CHOICE_TYPES = {"auto", "any", "tool", "none"}


def transform_openai_to_claude(
    model: str,
    body: Any,
    stream: bool = False,
    credentials: Any = None,
    ids: Optional[IdProvider] = None,
) -> Dict[str, Any]:
    """
    Transform an OpenAI ChatCompletion request into a Claude /v1/messages request.

    Args:
        model: Target Claude model name.
        body: The incoming OpenAI format request (dict or OpenAIRequest).
        stream: Whether the upstream call will stream.
        credentials: Unused; accepted so every request translator shares one signature.
        ids: Unused; Claude requests need no generated identifiers.

    Returns:
        Claude API request payload.
    """
    request = parse_openai_request(body)
    settings = get_settings()

    # 1. Normalize and merge messages (system text is pulled out here)
    merged = merge_messages(normalize_messages(request.messages))
    mark_cache_breakpoint(merged.messages)

    # 2. System: fixed preamble, then the caller's system text
    system = [TextBlock(text=settings.claude_system_prompt)]
    if merged.system:
        system.append(TextBlock(text=merged.system, cache_control=dict(EPHEMERAL_1H)))

    # 3. Tools
    tools = convert_tools(request.tools) if request.tools is not None else None

    # 4. Tool choice
    tool_choice = convert_tool_choice(request.tool_choice) if request.tool_choice else None

    claude_request = ClaudeRequest(
        model=model,
        max_tokens=adjust_max_tokens(request, settings),
        stream=stream,
        temperature=request.temperature,
        messages=merged.messages,
        system=system,
        tools=tools,
        tool_choice=tool_choice,
        stop_sequences=request.stop_sequences or None,
        thinking=request.thinking,
    )
    return claude_request.to_wire()


def adjust_max_tokens(request: OpenAIRequest, settings: Optional[Settings] = None) -> int:
    """
    Token budget policy: requested or default budget, raised for tool use so
    arguments are not truncated, and kept above any thinking budget.
    """
    settings = settings or get_settings()
    max_tokens = request.max_tokens or settings.default_max_tokens

    if request.tools:
        max_tokens = max(max_tokens, settings.min_tool_max_tokens)

    budget = (request.thinking or {}).get("budget_tokens")
    if isinstance(budget, int) and max_tokens <= budget:
        max_tokens = budget + settings.thinking_headroom_tokens

    return max_tokens


def convert_tools(tools: List[Any]) -> List[ClaudeTool]:
    """Map OpenAI function tools (or Claude-shaped tools) to Claude tools."""
    converted: List[ClaudeTool] = []
    for tool in tools:
        if not isinstance(tool, dict):
            continue
        function = tool.get("function")
        data = function if tool.get("type") == "function" and isinstance(function, dict) else tool

        name = data.get("name")
        if not name:
            logger.warning("Dropping tool definition without a name")
            continue

        schema = data.get("parameters") or data.get("input_schema")
        converted.append(ClaudeTool(
            name=name,
            description=data.get("description") or "",
            input_schema=schema if isinstance(schema, dict) else dict(DEFAULT_INPUT_SCHEMA),
        ))

    if converted:
        converted[-1].cache_control = dict(EPHEMERAL_1H)
    return converted


def convert_tool_choice(choice: Any) -> Dict[str, Any]:
    if isinstance(choice, dict):
        function = choice.get("function")
        if isinstance(function, dict) and function.get("name"):
            return {"type": "tool", "name": function["name"]}
        # Already Claude format
        if choice.get("type") in CLAUDE_TOOL_CHOICE_TYPES:
            return choice
        return {"type": "auto"}
    if choice == "required":
        return {"type": "any"}
    return {"type": "auto"}
