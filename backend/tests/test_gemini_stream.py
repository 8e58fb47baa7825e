"""Tests for the Gemini-family -> OpenAI streaming translator."""
import json

from gateway.core.translator.response_mapper import (
    finalize_gemini_to_openai,
    transform_gemini_to_openai_chunk,
)


def _candidate(parts, finish_reason=None):
    candidate = {"content": {"role": "model", "parts": parts}}
    if finish_reason:
        candidate["finishReason"] = finish_reason
    return candidate


def _deltas(chunks):
    return [chunk["choices"][0]["delta"] for chunk in chunks]


def test_first_chunk_announces_role(state):
    """Test the first chunk emits a role announcement using the response id and model."""
    chunks = transform_gemini_to_openai_chunk({
        "responseId": "resp-1",
        "modelVersion": "gemini-2.5-pro",
        "candidates": [_candidate([{"text": "Hello"}])],
    }, state)

    assert _deltas(chunks) == [{"role": "assistant"}, {"content": "Hello"}]
    assert chunks[0]["id"] == "chatcmpl-resp-1"
    assert chunks[0]["model"] == "gemini-2.5-pro"

    more = transform_gemini_to_openai_chunk({"candidates": [_candidate([{"text": " there"}])]}, state)
    assert _deltas(more) == [{"content": " there"}]


def test_cloud_code_wrapper_and_thoughts(state):
    """Test wrapped chunks are unwrapped and thought parts become reasoning_content."""
    chunks = transform_gemini_to_openai_chunk({"response": {
        "candidates": [_candidate([
            {"text": "Considering...", "thought": True, "thoughtSignature": "sig"},
            {"text": "Answer", "thoughtSignature": "sig"},
            {"text": ""},
        ])],
    }}, state)

    assert _deltas(chunks) == [
        {"role": "assistant"},
        {"reasoning_content": "Considering..."},
        {"content": "Answer"},
    ]
    assert chunks[0]["id"] == "chatcmpl-msg_1700000000123"
    assert chunks[0]["model"] == "gemini"


def test_function_calls_and_finish(state):
    """Test whole function calls get sequential indices and stop becomes tool_calls."""
    chunks = transform_gemini_to_openai_chunk({
        "responseId": "resp-2",
        "candidates": [_candidate([
            {"functionCall": {"name": "lookup", "args": {"q": 1}}, "thoughtSignature": "sig"},
            {"functionCall": {"name": "ping"}},
        ], finish_reason="STOP")],
        "usageMetadata": {
            "promptTokenCount": 10,
            "candidatesTokenCount": 5,
            "totalTokenCount": 20,
            "thoughtsTokenCount": 5,
        },
    }, state)

    calls = [d["tool_calls"][0] for d in _deltas(chunks) if "tool_calls" in d]
    assert calls[0] == {
        "id": "lookup-1700000000123-0",
        "index": 0,
        "type": "function",
        "function": {"name": "lookup", "arguments": json.dumps({"q": 1})},
    }
    assert calls[1]["index"] == 1
    assert calls[1]["function"]["arguments"] == "{}"

    final = chunks[-1]
    assert final["choices"][0]["finish_reason"] == "tool_calls"
    assert final["usage"] == {
        "prompt_tokens": 15,
        "completion_tokens": 5,
        "total_tokens": 20,
        "completion_tokens_details": {"reasoning_tokens": 5},
    }


def test_finish_reason_lowercased(state):
    """Test other finish reasons are passed through lower-cased, once."""
    chunks = transform_gemini_to_openai_chunk({
        "candidates": [_candidate([{"text": "cut"}], finish_reason="MAX_TOKENS")],
    }, state)
    assert chunks[-1]["choices"][0]["finish_reason"] == "max_tokens"

    again = transform_gemini_to_openai_chunk({"candidates": [_candidate([], finish_reason="STOP")]}, state)
    assert again == []
    assert finalize_gemini_to_openai(state) == []


def test_inline_image(state):
    """Test inline image data becomes a data URI image delta."""
    chunks = transform_gemini_to_openai_chunk({
        "candidates": [_candidate([{"inlineData": {"mimeType": "image/jpeg", "data": "/9j/4AAQ"}}])],
    }, state)
    assert _deltas(chunks)[1] == {"images": [{
        "type": "image_url",
        "image_url": {"url": "data:image/jpeg;base64,/9j/4AAQ"},
    }]}


def test_usage_only_chunk_and_finalize(state):
    """Test usage without candidates is kept for the finalizer's finish chunk."""
    transform_gemini_to_openai_chunk({"candidates": [_candidate([{"text": "hi"}])]}, state)
    assert transform_gemini_to_openai_chunk(
        {"usageMetadata": {"promptTokenCount": 3, "candidatesTokenCount": 1, "totalTokenCount": 4}}, state
    ) == []

    chunks = finalize_gemini_to_openai(state)
    assert chunks[0]["choices"][0]["finish_reason"] == "stop"
    assert chunks[0]["usage"] == {"prompt_tokens": 3, "completion_tokens": 1, "total_tokens": 4}


def test_ignores_empty_input(state):
    assert transform_gemini_to_openai_chunk(None, state) == []
    assert transform_gemini_to_openai_chunk({"candidates": []}, state) == []
    assert finalize_gemini_to_openai(state) == []
