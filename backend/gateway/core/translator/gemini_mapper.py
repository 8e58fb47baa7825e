"""
OpenAI to Gemini Request Mapper

This module transforms OpenAI chat completion requests into Google Gemini
GenerateContent requests, plus the Gemini CLI and Antigravity variants that
travel inside a Cloud Code envelope.
"""
import copy
import logging
from typing import Any, Dict, List, Optional

from ..config import Settings, get_settings
from .claude_models import ImageBlock, TextBlock
from .content import recognize
from .envelope import wrap_in_cloud_code_envelope
from .helpers import (
    DEFAULT_SAFETY_SETTINGS,
    DEFAULT_THOUGHT_SIGNATURE,
    extract_text_content,
    try_parse_json,
)
from .ids import IdProvider
from .openai_models import OpenAIMessage, OpenAIRequest, parse_openai_request
from .schema import clean_json_schema

logger = logging.getLogger(__name__)

DEFAULT_PARAMETERS = {"type": "object", "properties": {}}


def transform_openai_to_gemini(
    model: str,
    body: Any,
    stream: bool = False,
    credentials: Any = None,
    ids: Optional[IdProvider] = None,
) -> Dict[str, Any]:
    """
    Transform an OpenAI ChatCompletion request into a Gemini GenerateContent request.

    Args:
        model: The target Gemini model name (e.g., "gemini-2.5-flash").
        body: The incoming OpenAI format request (dict or OpenAIRequest).
        stream: Whether the upstream call will stream (Gemini encodes this in the URL).

    Returns:
        A dictionary representing the Gemini API request payload.
    """
    return _build_gemini_request(model, parse_openai_request(body))


def build_gemini_cli_request(model: str, body: Any, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Gemini request plus the Cloud Code additions: a thinking budget and tool
    schemas cleaned for the Cloud Code validator.

    Claude models served through Cloud Code read the schema from
    ``parameters``; native Gemini models read ``parametersJsonSchema``.
    """
    settings = settings or get_settings()
    request = parse_openai_request(body)
    gemini = _build_gemini_request(model, request)

    gemini["generationConfig"]["thinkingConfig"] = {
        "thinkingBudget": thinking_budget(request, settings),
        "include_thoughts": True,
    }

    is_claude = "claude" in model.lower()
    for tool in gemini.get("tools", []):
        for declaration in tool.get("functionDeclarations", []):
            if "parameters" not in declaration:
                continue
            cleaned = clean_json_schema(declaration["parameters"])
            if is_claude:
                declaration["parameters"] = cleaned
            else:
                declaration["parametersJsonSchema"] = cleaned
                del declaration["parameters"]
    return gemini


def transform_openai_to_gemini_cli(
    model: str,
    body: Any,
    stream: bool = False,
    credentials: Any = None,
    ids: Optional[IdProvider] = None,
) -> Dict[str, Any]:
    return wrap_in_cloud_code_envelope(
        model, build_gemini_cli_request(model, body), credentials, ids=ids
    )


def transform_openai_to_antigravity(
    model: str,
    body: Any,
    stream: bool = False,
    credentials: Any = None,
    ids: Optional[IdProvider] = None,
) -> Dict[str, Any]:
    return wrap_in_cloud_code_envelope(
        model, build_gemini_cli_request(model, body), credentials, ids=ids
    )


def thinking_budget(request: OpenAIRequest, settings: Optional[Settings] = None) -> int:
    """Explicit budget first, then the reasoning effort keyword, then the medium budget."""
    settings = settings or get_settings()
    budget = (request.thinking or {}).get("budget_tokens")
    if isinstance(budget, int) and budget > 0:
        return budget
    if request.reasoning_effort:
        return settings.thinking_budget_for(request.reasoning_effort)
    return settings.thinking_budget_medium


def resolve_tool_name(call_id: str, names: Dict[str, str]) -> str:
    """
    Name for a tool call id: the recorded name, else the ``<name>-<timestamp>-<index>``
    layout our own Gemini responses use. The fallback is lossy: any id with
    more than two hyphens is assumed to follow that layout.
    """
    if call_id in names:
        return names[call_id]
    pieces = call_id.split("-")
    if len(pieces) > 2:
        return "-".join(pieces[:-2])
    return call_id


def convert_content_to_parts(content: Any) -> List[Dict[str, Any]]:
    """Build Gemini parts from an OpenAI string-or-array message body."""
    if isinstance(content, str):
        return [{"text": content}] if content else []
    if not isinstance(content, list):
        return []

    parts: List[Dict[str, Any]] = []
    for item in content:
        url = _remote_image_url(item)
        if url:
            parts.append({"fileData": {"fileUri": url, "mimeType": "image/jpeg"}})
            continue
        block = recognize(item)
        if isinstance(block, TextBlock):
            parts.append({"text": block.text})
        elif isinstance(block, ImageBlock):
            parts.append({"inlineData": {"mimeType": block.source.media_type, "data": block.source.data}})
    return parts


def _remote_image_url(item: Any) -> Optional[str]:
    if not isinstance(item, dict) or item.get("type") != "image_url":
        return None
    image_url = item.get("image_url")
    url = image_url.get("url") if isinstance(image_url, dict) else image_url
    if isinstance(url, str) and url.startswith(("http://", "https://")):
        return url
    return None


def _build_gemini_request(model: str, request: OpenAIRequest) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "model": model,
        "contents": [],
        "generationConfig": _generation_config(request),
        "safetySettings": copy.deepcopy(DEFAULT_SAFETY_SETTINGS),
    }
    messages = request.messages

    # 1. Lookup tables for tool calls and their results
    names = _tool_call_names(messages)
    responses = {
        msg.tool_call_id: msg.content
        for msg in messages
        if msg.role == "tool" and msg.tool_call_id
    }

    # 2. Convert messages; tool messages are consumed through `responses`
    system_texts: List[str] = []
    for msg in messages:
        if msg.role == "system" and len(messages) > 1:
            system_texts.append(extract_text_content(msg.content))
        elif msg.role == "user" or (msg.role == "system" and len(messages) == 1):
            parts = convert_content_to_parts(msg.content)
            if parts:
                result["contents"].append({"role": "user", "parts": parts})
        elif msg.role == "assistant":
            result["contents"].extend(_assistant_contents(msg, names, responses))

    # 3. System instruction
    system_text = "\n".join(text for text in system_texts if text)
    if system_text:
        result["systemInstruction"] = {"role": "user", "parts": [{"text": system_text}]}

    # 4. Tools
    declarations = _function_declarations(request.tools or [])
    if declarations:
        result["tools"] = [{"functionDeclarations": declarations}]

    return result


def _generation_config(request: OpenAIRequest) -> Dict[str, Any]:
    gen_config: Dict[str, Any] = {}
    if request.temperature is not None:
        gen_config["temperature"] = request.temperature
    if request.top_p is not None:
        gen_config["topP"] = request.top_p
    if request.top_k is not None:
        gen_config["topK"] = request.top_k
    if request.max_tokens is not None:
        gen_config["maxOutputTokens"] = request.max_tokens
    if request.stop_sequences:
        gen_config["stopSequences"] = request.stop_sequences
    return gen_config


def _function_calls(msg: OpenAIMessage) -> List[Dict[str, Any]]:
    return [
        call for call in msg.tool_calls or []
        if isinstance(call, dict)
        and call.get("type", "function") == "function"
        and isinstance(call.get("function"), dict)
    ]


def _tool_call_names(messages: List[OpenAIMessage]) -> Dict[str, str]:
    names: Dict[str, str] = {}
    for msg in messages:
        if msg.role != "assistant":
            continue
        for call in _function_calls(msg):
            if call.get("id") and call["function"].get("name"):
                names[call["id"]] = call["function"]["name"]
    return names


def _assistant_contents(
    msg: OpenAIMessage,
    names: Dict[str, str],
    responses: Dict[str, Any],
) -> List[Dict[str, Any]]:
    """A model turn, followed by a user turn of function responses when the assistant called tools."""
    parts: List[Dict[str, Any]] = []
    text = extract_text_content(msg.content)
    if text:
        parts.append({"text": text})

    calls = _function_calls(msg)
    if not calls:
        return [{"role": "model", "parts": parts}] if parts else []

    answered = []
    for call in calls:
        call_id = call.get("id") or ""
        name = call["function"].get("name") or resolve_tool_name(call_id, names)
        if not name:
            logger.warning("Dropping tool call without a name or id")
            continue
        parts.append({
            "thoughtSignature": DEFAULT_THOUGHT_SIGNATURE,
            "functionCall": {
                "id": call_id,
                "name": name,
                "args": try_parse_json(call["function"].get("arguments") or "{}"),
            },
        })
        answered.append((call_id, name))

    contents: List[Dict[str, Any]] = []
    if parts:
        contents.append({"role": "model", "parts": parts})

    response_parts = [
        {
            "functionResponse": {
                "id": call_id,
                "name": name,
                "response": _function_response(responses.get(call_id)),
            }
        }
        for call_id, name in answered
    ]
    if response_parts:
        contents.append({"role": "user", "parts": response_parts})
    return contents


def _function_response(content: Any) -> Dict[str, Any]:
    if isinstance(content, list):
        content = extract_text_content(content)
    if content is None or content == "":
        content = "{}"
    parsed = try_parse_json(content)
    if isinstance(parsed, dict):
        return parsed
    return {"result": parsed}


def _function_declarations(tools: List[Any]) -> List[Dict[str, Any]]:
    declarations = []
    for tool in tools:
        if not isinstance(tool, dict) or tool.get("type") != "function":
            continue
        function = tool.get("function")
        if not isinstance(function, dict) or not function.get("name"):
            logger.warning("Dropping tool definition without a function name")
            continue
        parameters = function.get("parameters")
        declarations.append({
            "name": function["name"],
            "description": function.get("description") or "",
            "parameters": copy.deepcopy(parameters if isinstance(parameters, dict) else DEFAULT_PARAMETERS),
        })
    return declarations
