"""
Gemini to OpenAI Streaming Response Mapper

Transforms Gemini, Gemini CLI and Antigravity stream chunks into OpenAI
``chat.completion.chunk`` objects. Cloud Code chunks arrive wrapped in a
``response`` key; native Gemini chunks do not.
"""
import json
from typing import Any, Dict, List

from .openai_models import OpenAICompletionTokensDetails, OpenAIUsage
from .stream_state import StreamState


def transform_gemini_to_openai_chunk(chunk: Any, state: StreamState) -> List[Dict[str, Any]]:
    """
    Convert one Gemini stream chunk into OpenAI chunks.

    Args:
        chunk: A parsed ``streamGenerateContent`` SSE payload.
        state: The exchange's stream state.

    Returns:
        The OpenAI chunks to forward, possibly none.
    """
    if not isinstance(chunk, dict):
        return []
    response = chunk.get("response") if isinstance(chunk.get("response"), dict) else chunk

    # Usage first so the finish chunk can carry it
    usage_meta = response.get("usageMetadata") or chunk.get("usageMetadata")
    if isinstance(usage_meta, dict):
        state.usage = _usage_from_metadata(usage_meta)

    candidates = response.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return []
    candidate = candidates[0]

    results: List[Dict[str, Any]] = []
    if not state.message_started:
        state.message_id = response.get("responseId") or f"msg_{state.ids.now_ms()}"
        state.model = response.get("modelVersion") or "gemini"
        state.next_tool_index = 0
        state.message_started = True
        results.append(state.chunk({"role": "assistant"}))

    for part in (candidate.get("content") or {}).get("parts") or []:
        if isinstance(part, dict):
            results.extend(_convert_part(part, state))

    finish = candidate.get("finishReason")
    if finish and not state.finish_reason_sent:
        finish_reason = str(finish).lower()
        if finish_reason == "stop" and len(state.tool_calls):
            finish_reason = "tool_calls"
        state.finish_reason = finish_reason
        state.finish_reason_sent = True
        results.append(state.chunk({}, finish_reason=finish_reason, usage=state.usage))

    return results


def finalize_gemini_to_openai(state: StreamState) -> List[Dict[str, Any]]:
    """Send the finish chunk if the stream ended without a finishReason."""
    if not state.message_started or state.finish_reason_sent:
        return []
    state.finish_reason = "tool_calls" if len(state.tool_calls) else "stop"
    state.finish_reason_sent = True
    return [state.chunk({}, finish_reason=state.finish_reason, usage=state.usage)]


def _convert_part(part: Dict[str, Any], state: StreamState) -> List[Dict[str, Any]]:
    results = []

    text = part.get("text")
    if isinstance(text, str) and text:
        if part.get("thought") is True:
            results.append(state.chunk({"reasoning_content": text}))
        else:
            results.append(state.chunk({"content": text}))

    function_call = part.get("functionCall")
    if isinstance(function_call, dict):
        results.append(_tool_call_chunk(function_call, state))

    inline_data = part.get("inlineData") or part.get("inline_data")
    if isinstance(inline_data, dict) and inline_data.get("data"):
        mime_type = inline_data.get("mimeType") or inline_data.get("mime_type") or "image/png"
        results.append(state.chunk({
            "images": [{
                "type": "image_url",
                "image_url": {"url": f"data:{mime_type};base64,{inline_data['data']}"},
            }]
        }))

    return results


def _tool_call_chunk(function_call: Dict[str, Any], state: StreamState) -> Dict[str, Any]:
    # Gemini sends whole calls, never argument fragments
    name = function_call.get("name") or ""
    index = state.allocate_tool_index()
    call = state.tool_calls.add(
        provider_index=index,
        output_index=index,
        call_id=f"{name}-{state.ids.now_ms()}-{index}",
        name=name,
    )
    call.append_arguments(json.dumps(function_call.get("args") or {}))
    call.closed = True
    return state.chunk({
        "tool_calls": [{
            "id": call.id,
            "index": call.output_index,
            "type": "function",
            "function": {"name": call.name, "arguments": call.arguments},
        }]
    })


def _usage_from_metadata(usage_meta: Dict[str, Any]) -> OpenAIUsage:
    thoughts = usage_meta.get("thoughtsTokenCount") or 0
    return OpenAIUsage(
        prompt_tokens=(usage_meta.get("promptTokenCount") or 0) + thoughts,
        completion_tokens=usage_meta.get("candidatesTokenCount") or 0,
        total_tokens=usage_meta.get("totalTokenCount") or 0,
        completion_tokens_details=OpenAICompletionTokensDetails(reasoning_tokens=thoughts) if thoughts > 0 else None,
    )
