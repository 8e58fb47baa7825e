"""Tests for JSON schema cleaning, helpers and the Cloud Code envelope."""
import pytest

from gateway.core.translator.envelope import credentials_project_id, wrap_in_cloud_code_envelope
from gateway.core.translator.helpers import (
    claude_stop_to_openai_finish,
    extract_text_content,
    openai_finish_to_claude_stop,
    parse_data_uri,
    try_parse_json,
)
from gateway.core.translator.ids import IdProvider
from gateway.core.translator.schema import clean_json_schema


# ===== Schema cleaning =====

def test_clean_schema_strips_unsupported_keywords():
    """Test validator-rejected keywords are removed at every depth."""
    schema = {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "type": "object",
        "title": "Args",
        "properties": {
            "tags": {
                "type": "array",
                "minItems": 1,
                "items": {"type": "string", "format": "uri", "default": "x"},
            },
        },
        "additionalProperties": False,
    }
    assert clean_json_schema(schema) == {
        "type": "object",
        "properties": {"tags": {"type": "array", "items": {"type": "string"}}},
    }
    # the input is left untouched
    assert "$schema" in schema


def test_clean_schema_keeps_keyword_named_properties():
    """Test a property called like a keyword survives cleaning."""
    cleaned = clean_json_schema({
        "type": "object",
        "properties": {"pattern": {"type": "string"}, "format": {"type": "string"}},
        "required": ["pattern", "missing"],
    })
    assert set(cleaned["properties"]) == {"pattern", "format"}
    assert cleaned["required"] == ["pattern"]


def test_clean_schema_const_and_nullable_types():
    """Test const becomes enum and nullable type lists collapse to one type."""
    cleaned = clean_json_schema({
        "anyOf": [
            {"const": "fast"},
            {"type": ["integer", "null"]},
        ]
    })
    assert cleaned["anyOf"] == [
        {"enum": ["fast"], "type": "string"},
        {"type": "integer"},
    ]


# ===== Helpers =====

def test_try_parse_json():
    """Test JSON strings are parsed and anything else comes back unchanged."""
    assert try_parse_json('{"a": 1}') == {"a": 1}
    assert try_parse_json("{broken") == "{broken"
    assert try_parse_json({"a": 1}) == {"a": 1}


def test_extract_text_content():
    """Test text parts are newline-joined and other parts ignored."""
    assert extract_text_content("plain") == "plain"
    assert extract_text_content([
        {"type": "text", "text": "a"},
        {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}},
        {"type": "text", "text": "b"},
    ]) == "a\nb"
    assert extract_text_content(None) == ""


def test_parse_data_uri():
    assert parse_data_uri("data:image/webp;base64,UklGR") == ("image/webp", "UklGR")
    assert parse_data_uri("https://example.com/a.png") is None
    assert parse_data_uri(None) is None


@pytest.mark.parametrize("claude,openai", [
    ("end_turn", "stop"),
    ("stop_sequence", "stop"),
    ("max_tokens", "length"),
    ("tool_use", "tool_calls"),
    ("pause_turn", "stop"),
])
def test_claude_stop_to_openai_finish(claude, openai):
    assert claude_stop_to_openai_finish(claude) == openai


@pytest.mark.parametrize("openai,claude", [
    ("stop", "end_turn"),
    ("length", "max_tokens"),
    ("tool_calls", "tool_use"),
    ("content_filter", "end_turn"),
])
def test_openai_finish_to_claude_stop(openai, claude):
    assert openai_finish_to_claude_stop(openai) == claude


# ===== Envelope =====

def test_credentials_project_id_shapes():
    """Test project ids are read from dict keys or attributes."""

    class Account:
        project_id = "attr-project"

    assert credentials_project_id({"projectId": "camel"}) == "camel"
    assert credentials_project_id({"project_id": "snake"}) == "snake"
    assert credentials_project_id(Account()) == "attr-project"
    assert credentials_project_id({}) is None
    assert credentials_project_id(None) is None


def test_envelope_nests_request_fields(ids):
    """Test only the request fields are nested and absent ones are skipped."""
    body = {
        "model": "gemini-2.5-pro",
        "contents": [{"role": "user", "parts": [{"text": "hi"}]}],
        "generationConfig": {"temperature": 0.1},
        "safetySettings": [],
    }
    envelope = wrap_in_cloud_code_envelope("gemini-2.5-pro", body, {"projectId": "p-1"}, ids=ids)

    assert envelope == {
        "project": "p-1",
        "model": "gemini-2.5-pro",
        "userAgent": "gemini-cli",
        "requestId": "agent-00000000-0000-4000-8000-000000000000",
        "request": {
            "sessionId": "-123456789012345678",
            "contents": body["contents"],
            "generationConfig": {"temperature": 0.1},
            "safetySettings": [],
        },
    }


def test_envelope_ids_are_fresh_per_call():
    """Test the default provider generates new request and session ids each call."""
    body = {"contents": [], "generationConfig": {}, "safetySettings": []}
    first = wrap_in_cloud_code_envelope("m", body)
    second = wrap_in_cloud_code_envelope("m", body)

    assert first["requestId"].startswith("agent-")
    assert first["requestId"] != second["requestId"]
    assert first["request"]["sessionId"].startswith("-")
    assert len(first["request"]["sessionId"]) == 19


def test_generated_project_id_layout():
    """Test generated project ids look like adjective-noun-suffix."""
    adjective, noun, suffix = IdProvider().project_id().split("-")
    assert adjective and noun
    assert len(suffix) == 5


def test_project_id_suffix_comes_from_uuid():
    """Test the project id suffix is taken from the provider's uuid."""

    class StaticUuid(IdProvider):
        def uuid(self):
            return "abcdef12-0000-4000-8000-000000000000"

    assert StaticUuid().project_id().endswith("-abcde")
