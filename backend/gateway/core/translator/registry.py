"""
Format Registry

Maps a (source, target) format pair to the converters for that direction.
The key ``(A, B)`` holds converters that turn A-shaped data into B-shaped data:
request translators are registered under ``(openai, <provider>)`` and
streaming response translators under ``(<provider>, openai)``.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .claude_mapper import transform_openai_to_claude
from .claude_response_mapper import (
    finalize_claude_to_openai,
    finalize_openai_to_claude,
    transform_claude_to_openai_chunk,
    transform_openai_to_claude_chunk,
)
from .errors import UnsupportedTranslationError
from .formats import GEMINI_FAMILY, Format
from .gemini_mapper import (
    transform_openai_to_antigravity,
    transform_openai_to_gemini,
    transform_openai_to_gemini_cli,
)
from .ids import IdProvider
from .response_mapper import finalize_gemini_to_openai, transform_gemini_to_openai_chunk
from .stream_state import StreamState

logger = logging.getLogger(__name__)

RequestTranslator = Callable[..., Dict[str, Any]]
ResponseTranslator = Callable[[Any, StreamState], List[Dict[str, Any]]]
Finalizer = Callable[[StreamState], List[Dict[str, Any]]]
FormatLike = Union[Format, str]


@dataclass
class TranslatorPair:
    request: Optional[RequestTranslator] = None
    response: Optional[ResponseTranslator] = None
    finalize: Optional[Finalizer] = None


_registry: Dict[Tuple[Format, Format], TranslatorPair] = {}


def register(
    source: FormatLike,
    target: FormatLike,
    request: Optional[RequestTranslator] = None,
    response: Optional[ResponseTranslator] = None,
    finalize: Optional[Finalizer] = None,
) -> None:
    """Register converters for ``source -> target``; unset directions keep their previous value."""
    key = (Format(source), Format(target))
    pair = _registry.setdefault(key, TranslatorPair())
    if request is not None:
        pair.request = request
    if response is not None:
        pair.response = response
    if finalize is not None:
        pair.finalize = finalize
    logger.debug(f"Registered translator {key[0]} -> {key[1]}")


def lookup(source: FormatLike, target: FormatLike) -> TranslatorPair:
    """Converters for a pair; an empty pair when nothing is registered."""
    try:
        key = (Format(source), Format(target))
    except ValueError:
        return TranslatorPair()
    return _registry.get(key) or TranslatorPair()


def get_request_translator(source: FormatLike, target: FormatLike) -> RequestTranslator:
    translator = lookup(source, target).request
    if translator is None:
        raise UnsupportedTranslationError(str(source), str(target), "request")
    return translator


def get_response_translator(source: FormatLike, target: FormatLike) -> ResponseTranslator:
    translator = lookup(source, target).response
    if translator is None:
        raise UnsupportedTranslationError(str(source), str(target), "response")
    return translator


def translate_request(
    source: FormatLike,
    target: FormatLike,
    model: str,
    body: Any,
    stream: bool = False,
    credentials: Any = None,
    ids: Optional[IdProvider] = None,
) -> Dict[str, Any]:
    """Translate a request body from ``source`` to ``target`` format."""
    translator = get_request_translator(source, target)
    return translator(model, body, stream, credentials=credentials, ids=ids)


def translate_response(
    source: FormatLike,
    target: FormatLike,
    event: Any,
    state: StreamState,
) -> List[Dict[str, Any]]:
    """Translate one streamed event from ``source`` to ``target`` format."""
    return get_response_translator(source, target)(event, state)


# Request: OpenAI -> providers
register(Format.OPENAI, Format.CLAUDE, request=transform_openai_to_claude)
register(Format.OPENAI, Format.GEMINI, request=transform_openai_to_gemini)
register(Format.OPENAI, Format.GEMINI_CLI, request=transform_openai_to_gemini_cli)
register(Format.OPENAI, Format.ANTIGRAVITY, request=transform_openai_to_antigravity)

# Response: Claude <-> OpenAI
register(Format.CLAUDE, Format.OPENAI, response=transform_claude_to_openai_chunk, finalize=finalize_claude_to_openai)
register(Format.OPENAI, Format.CLAUDE, response=transform_openai_to_claude_chunk, finalize=finalize_openai_to_claude)

# Response: Gemini variants -> OpenAI (all use the same handler)
for _gemini_format in GEMINI_FAMILY:
    register(_gemini_format, Format.OPENAI, response=transform_gemini_to_openai_chunk, finalize=finalize_gemini_to_openai)
