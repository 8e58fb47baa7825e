"""
SSE Stream Driver

Reads a provider's server-sent events, folds them through the registered
response translator with one ``StreamState`` per exchange, and yields the
translated events already framed as SSE.
"""
import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Dict, Iterable, Optional, Union

import httpx

from .formats import Format
from .registry import FormatLike, get_response_translator, lookup
from .stream_state import StreamState, new_stream_state

logger = logging.getLogger(__name__)

DONE_LINE = "data: [DONE]\n\n"


def parse_sse_data(line: str) -> Optional[Dict[str, Any]]:
    """
    Parse one SSE line into a JSON object.

    Returns None for blank lines, comments, ``event:`` lines, ``[DONE]`` and
    payloads that are not valid JSON objects.
    """
    line = line.strip()
    if not line.startswith("data:"):
        return None
    data_str = line[5:].strip()
    if not data_str or data_str == "[DONE]":
        return None
    try:
        data = json.loads(data_str)
    except json.JSONDecodeError:
        logger.warning(f"Skipping malformed SSE payload: {data_str[:200]}")
        return None
    return data if isinstance(data, dict) else None


def format_sse(event: Dict[str, Any], target: FormatLike) -> str:
    """Frame one event for the target format; Claude streams name every event."""
    payload = json.dumps(event, ensure_ascii=False)
    if Format(target) == Format.CLAUDE and event.get("type"):
        return f"event: {event['type']}\ndata: {payload}\n\n"
    return f"data: {payload}\n\n"


async def translate_sse_stream(
    lines: Union[AsyncIterable[str], Iterable[str]],
    source: FormatLike,
    target: FormatLike,
    state: Optional[StreamState] = None,
) -> AsyncIterator[str]:
    """
    Translate a provider SSE stream into target-format SSE frames.

    Args:
        lines: Raw SSE lines from the provider.
        source: Format of the provider stream.
        target: Format the client expects.
        state: Exchange state; a fresh one is created when omitted.

    Yields:
        SSE frames in the target format, ending with ``data: [DONE]`` for OpenAI clients.
    """
    translator = get_response_translator(source, target)
    finalize = lookup(source, target).finalize
    state = state or new_stream_state()

    async for line in _iterate(lines):
        event = parse_sse_data(line)
        if event is None:
            continue
        for translated in translator(event, state):
            yield format_sse(translated, target)

    if finalize is not None:
        for translated in finalize(state):
            yield format_sse(translated, target)

    if Format(target) == Format.OPENAI:
        yield DONE_LINE


async def stream_translated_response(
    response: httpx.Response,
    source: FormatLike,
    target: FormatLike,
    state: Optional[StreamState] = None,
) -> AsyncIterator[str]:
    """Drive an upstream ``httpx`` streaming response through ``translate_sse_stream``."""
    async for frame in translate_sse_stream(response.aiter_lines(), source, target, state):
        yield frame


async def _iterate(lines: Union[AsyncIterable[str], Iterable[str]]) -> AsyncIterator[str]:
    if hasattr(lines, "__aiter__"):
        async for line in lines:
            yield line
    else:
        for line in lines:
            yield line
