"""
Translator module initialization.
"""
from .errors import InvalidRequestError, TranslationError, UnsupportedTranslationError
from .formats import Format
from .ids import IdProvider
from .stream_state import StreamState, new_stream_state
from .registry import (
    TranslatorPair,
    get_request_translator,
    get_response_translator,
    lookup,
    register,
    translate_request,
    translate_response,
)
from .stream import format_sse, parse_sse_data, stream_translated_response, translate_sse_stream
