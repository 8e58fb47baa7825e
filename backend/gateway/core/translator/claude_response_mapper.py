"""
Claude <-> OpenAI Streaming Response Mapper

Two per-exchange reducers:

* ``transform_claude_to_openai_chunk`` turns Claude Messages stream events into
  OpenAI ``chat.completion.chunk`` objects.
* ``transform_openai_to_claude_chunk`` turns OpenAI chunks into Claude stream
  events, opening and closing content blocks as the deltas change kind.

Each call takes one provider event plus the exchange's ``StreamState`` and
returns the (possibly empty) list of target events.
"""
import logging
from typing import Any, Callable, Dict, List

from .claude_models import (
    content_block_delta_event,
    content_block_start_event,
    content_block_stop_event,
    message_start_event,
)
from .helpers import claude_stop_to_openai_finish, openai_finish_to_claude_stop
from .openai_models import OpenAICompletionTokensDetails, OpenAIUsage
from .stream_state import TEXT, THINKING, OpenBlock, StreamState

logger = logging.getLogger(__name__)

THINK_OPEN = "<think>"
THINK_CLOSE = "</think>"


# ============================================================================
# Claude -> OpenAI
# ============================================================================

def transform_claude_to_openai_chunk(event: Any, state: StreamState) -> List[Dict[str, Any]]:
    """Convert one Claude stream event to zero or more OpenAI chunks."""
    if not isinstance(event, dict):
        return []
    handler = _CLAUDE_EVENT_HANDLERS.get(event.get("type"))
    if handler is None:
        return []
    return handler(event, state)


def _on_message_start(event: Dict[str, Any], state: StreamState) -> List[Dict[str, Any]]:
    message = event.get("message") or {}
    state.message_id = message.get("id") or f"msg_{state.ids.now_ms()}"
    state.model = message.get("model")
    state.next_tool_index = 0
    state.message_started = True
    _record_claude_usage(state, message.get("usage"))
    return [state.chunk({"role": "assistant"})]


def _on_content_block_start(event: Dict[str, Any], state: StreamState) -> List[Dict[str, Any]]:
    block = event.get("content_block") or {}
    index = event.get("index", 0)
    block_type = block.get("type")

    if block_type == "text":
        results = _close_thinking_marker(state)
        state.open_block = OpenBlock(TEXT, index)
        return results

    if block_type == "thinking":
        state.open_block = OpenBlock(THINKING, index)
        return [state.chunk({"content": THINK_OPEN})]

    if block_type == "tool_use":
        # OpenAI tool_call indices are their own sequence starting at 0
        call = state.tool_calls.add(
            provider_index=index,
            output_index=state.allocate_tool_index(),
            call_id=block.get("id") or "",
            name=block.get("name") or "",
        )
        return [state.chunk({
            "tool_calls": [{
                "index": call.output_index,
                "id": call.id,
                "type": "function",
                "function": {"name": call.name, "arguments": ""},
            }]
        })]

    return []


def _on_content_block_delta(event: Dict[str, Any], state: StreamState) -> List[Dict[str, Any]]:
    delta = event.get("delta") or {}
    delta_type = delta.get("type")

    if delta_type == "text_delta" and delta.get("text"):
        return [state.chunk({"content": delta["text"]})]

    if delta_type == "thinking_delta" and delta.get("thinking"):
        return [state.chunk({"content": delta["thinking"]})]

    if delta_type == "input_json_delta" and delta.get("partial_json"):
        call = state.tool_calls.by_provider(event.get("index", 0))
        if call is None:
            logger.debug(f"input_json_delta for unknown block index {event.get('index')}")
            return []
        fragment = delta["partial_json"]
        call.append_arguments(fragment)
        return [state.chunk({
            "tool_calls": [{
                "index": call.output_index,
                "id": call.id,
                "function": {"arguments": fragment},
            }]
        })]

    return []


def _on_content_block_stop(event: Dict[str, Any], state: StreamState) -> List[Dict[str, Any]]:
    index = event.get("index", 0)
    call = state.tool_calls.by_provider(index)
    if call is not None:
        call.closed = True

    if state.open_block is None or state.open_block.index != index:
        return []
    return _close_thinking_marker(state) if state.open_block.kind == THINKING else _clear_open_block(state)


def _on_message_delta(event: Dict[str, Any], state: StreamState) -> List[Dict[str, Any]]:
    _record_claude_usage(state, event.get("usage"))
    stop_reason = (event.get("delta") or {}).get("stop_reason")
    if not stop_reason:
        return []

    state.finish_reason = claude_stop_to_openai_finish(stop_reason)
    return _emit_openai_finish(state, state.finish_reason)


def _on_message_stop(event: Dict[str, Any], state: StreamState) -> List[Dict[str, Any]]:
    state.message_stopped = True
    reason = state.finish_reason or ("tool_calls" if len(state.tool_calls) else "stop")
    return _emit_openai_finish(state, reason)


def _on_error(event: Dict[str, Any], state: StreamState) -> List[Dict[str, Any]]:
    error = event.get("error") or {}
    logger.warning(f"Upstream stream error: {error}")
    return [{"error": {"message": error.get("message", ""), "type": error.get("type", "upstream_error")}}]


_CLAUDE_EVENT_HANDLERS: Dict[str, Callable[[Dict[str, Any], StreamState], List[Dict[str, Any]]]] = {
    "message_start": _on_message_start,
    "content_block_start": _on_content_block_start,
    "content_block_delta": _on_content_block_delta,
    "content_block_stop": _on_content_block_stop,
    "message_delta": _on_message_delta,
    "message_stop": _on_message_stop,
    "error": _on_error,
}


def finalize_claude_to_openai(state: StreamState) -> List[Dict[str, Any]]:
    """Close an exchange whose Claude stream ended without a terminal event."""
    if not state.message_started or state.finish_reason_sent:
        return []
    results = _close_thinking_marker(state)
    reason = state.finish_reason or ("tool_calls" if len(state.tool_calls) else "stop")
    return results + _emit_openai_finish(state, reason)


def _emit_openai_finish(state: StreamState, reason: str) -> List[Dict[str, Any]]:
    if state.finish_reason_sent:
        return []
    state.finish_reason_sent = True
    return [state.chunk({}, finish_reason=reason, usage=state.usage)]


def _close_thinking_marker(state: StreamState) -> List[Dict[str, Any]]:
    if state.open_block is None or state.open_block.kind != THINKING:
        return []
    state.open_block = None
    return [state.chunk({"content": THINK_CLOSE})]


def _clear_open_block(state: StreamState) -> List[Dict[str, Any]]:
    state.open_block = None
    return []


def _record_claude_usage(state: StreamState, usage: Any) -> None:
    if not isinstance(usage, dict):
        return
    current = state.usage or OpenAIUsage()
    if "input_tokens" in usage:
        # OpenAI prompt_tokens include cached input
        current.prompt_tokens = (
            (usage.get("input_tokens") or 0)
            + (usage.get("cache_read_input_tokens") or 0)
            + (usage.get("cache_creation_input_tokens") or 0)
        )
    if "output_tokens" in usage:
        current.completion_tokens = usage.get("output_tokens") or 0
    current.total_tokens = current.prompt_tokens + current.completion_tokens
    state.usage = current


# ============================================================================
# OpenAI -> Claude
# ============================================================================

def transform_openai_to_claude_chunk(chunk: Any, state: StreamState) -> List[Dict[str, Any]]:
    """Convert one OpenAI chunk to zero or more Claude stream events."""
    if not isinstance(chunk, dict):
        return []
    if isinstance(chunk.get("error"), dict):
        return [{"type": "error", "error": chunk["error"]}]
    if isinstance(chunk.get("usage"), dict):
        _record_openai_usage(state, chunk["usage"])

    choices = chunk.get("choices") or []
    if not choices or not isinstance(choices[0], dict) or state.message_stopped:
        return []
    choice = choices[0]
    delta = choice.get("delta") or {}
    results: List[Dict[str, Any]] = []

    # First chunk always opens the message
    if not state.message_started:
        results.append(_start_claude_message(chunk, state))

    # Reasoning (GLM, DeepSeek, etc.)
    reasoning = delta.get("reasoning_content") or delta.get("reasoning")
    if isinstance(reasoning, str) and reasoning:
        results.extend(_open_block(state, THINKING))
        results.append(content_block_delta_event(
            state.open_block.index, {"type": "thinking_delta", "thinking": reasoning}
        ))

    content = delta.get("content")
    if isinstance(content, str) and content:
        results.extend(_open_block(state, TEXT))
        results.append(content_block_delta_event(
            state.open_block.index, {"type": "text_delta", "text": content}
        ))

    for tool_delta in delta.get("tool_calls") or []:
        results.extend(_on_tool_call_delta(tool_delta, state))

    if choice.get("finish_reason"):
        results.extend(_finish_claude_message(state, choice["finish_reason"]))

    return results


def finalize_openai_to_claude(state: StreamState) -> List[Dict[str, Any]]:
    """Close every open block when the OpenAI stream ended without a finish_reason."""
    if not state.message_started or state.finish_reason_sent:
        return []
    return _finish_claude_message(state, "tool_calls" if len(state.tool_calls) else "stop")


def _start_claude_message(chunk: Dict[str, Any], state: StreamState) -> Dict[str, Any]:
    message_id = chunk.get("id") if isinstance(chunk.get("id"), str) else ""
    if message_id.startswith("chatcmpl-"):
        message_id = message_id[len("chatcmpl-"):]
    if len(message_id) < 8:
        extend_fields = chunk.get("extend_fields") or {}
        message_id = (
            extend_fields.get("requestId")
            or extend_fields.get("traceId")
            or f"msg_{state.ids.now_ms()}"
        )
    state.message_id = message_id
    state.model = chunk.get("model") or "unknown"
    state.next_block_index = 0
    state.message_started = True
    return message_start_event(state.message_id, state.model)


def _open_block(state: StreamState, kind: str) -> List[Dict[str, Any]]:
    """Make ``kind`` the open text/thinking block, closing the other kind first."""
    if state.open_block is not None and state.open_block.kind == kind:
        return []
    results = _close_open_block(state)
    index = state.allocate_block_index()
    state.open_block = OpenBlock(kind, index)
    if kind == THINKING:
        results.append(content_block_start_event(index, {"type": "thinking", "thinking": ""}))
    else:
        results.append(content_block_start_event(index, {"type": "text", "text": ""}))
    return results


def _close_open_block(state: StreamState) -> List[Dict[str, Any]]:
    if state.open_block is None:
        return []
    index = state.open_block.index
    state.open_block = None
    return [content_block_stop_event(index)]


def _on_tool_call_delta(tool_delta: Any, state: StreamState) -> List[Dict[str, Any]]:
    if not isinstance(tool_delta, dict):
        return []
    tool_index = tool_delta.get("index") or 0
    function = tool_delta.get("function") or {}
    results: List[Dict[str, Any]] = []

    call_id = tool_delta.get("id")
    existing = state.tool_calls.by_provider(tool_index)
    # Some providers repeat the id on every fragment of the same call
    if call_id and (existing is None or existing.id != call_id):
        results.extend(_close_open_block(state))
        block_index = state.allocate_block_index()
        call = state.tool_calls.add(
            provider_index=tool_index,
            output_index=block_index,
            call_id=call_id,
            name=function.get("name") or "",
        )
        results.append(content_block_start_event(block_index, {
            "type": "tool_use",
            "id": call.id,
            "name": call.name,
            "input": {},
        }))

    arguments = function.get("arguments")
    if arguments:
        call = state.tool_calls.by_provider(tool_index)
        if call is None or call.closed:
            logger.debug(f"Tool call arguments for unknown index {tool_index}")
        else:
            call.append_arguments(arguments)
            results.append(content_block_delta_event(
                call.output_index, {"type": "input_json_delta", "partial_json": arguments}
            ))
    return results


def _finish_claude_message(state: StreamState, finish_reason: str) -> List[Dict[str, Any]]:
    if state.finish_reason_sent:
        return []
    results = _close_open_block(state)
    for call in state.tool_calls.open_calls():
        call.closed = True
        results.append(content_block_stop_event(call.output_index))

    state.finish_reason = openai_finish_to_claude_stop(finish_reason)
    state.finish_reason_sent = True
    state.message_stopped = True

    usage = {"output_tokens": state.usage.completion_tokens if state.usage else 0}
    if state.usage is not None:
        usage["input_tokens"] = state.usage.prompt_tokens
    results.append({
        "type": "message_delta",
        "delta": {"stop_reason": state.finish_reason, "stop_sequence": None},
        "usage": usage,
    })
    results.append({"type": "message_stop"})
    return results


def _record_openai_usage(state: StreamState, usage: Dict[str, Any]) -> None:
    details = usage.get("completion_tokens_details") or {}
    reasoning_tokens = details.get("reasoning_tokens") or 0
    state.usage = OpenAIUsage(
        prompt_tokens=usage.get("prompt_tokens") or 0,
        completion_tokens=usage.get("completion_tokens") or 0,
        total_tokens=usage.get("total_tokens") or 0,
        completion_tokens_details=(
            OpenAICompletionTokensDetails(reasoning_tokens=reasoning_tokens) if reasoning_tokens else None
        ),
    )
