"""
Claude/Anthropic Protocol Models

Pydantic models for the Claude Messages format. The content block models are
also the canonical content representation every request translator builds on.
"""
from typing import Any, ClassVar, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel

EPHEMERAL = {"type": "ephemeral"}
EPHEMERAL_1H = {"type": "ephemeral", "ttl": "1h"}


class WireModel(BaseModel):
    # Fields holding arbitrary JSON, emitted verbatim (None-valued keys inside
    # them are part of the payload, not absent fields).
    raw_fields: ClassVar[Tuple[str, ...]] = ()

    def to_wire(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_none=True, exclude=set(self.raw_fields))
        for name in self.raw_fields:
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data


# --- Content Blocks ---

class ImageSource(BaseModel):
    type: str = "base64"
    media_type: str
    data: str


class TextBlock(WireModel):
    type: Literal["text"] = "text"
    text: str
    cache_control: Optional[Dict[str, str]] = None


class ImageBlock(WireModel):
    type: Literal["image"] = "image"
    source: ImageSource
    cache_control: Optional[Dict[str, str]] = None


class ToolUseBlock(WireModel):
    raw_fields: ClassVar[Tuple[str, ...]] = ("input",)

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: Any = None
    cache_control: Optional[Dict[str, str]] = None

    def to_wire(self) -> Dict[str, Any]:
        data = super().to_wire()
        data.setdefault("input", {})
        return data


class ToolResultBlock(WireModel):
    raw_fields: ClassVar[Tuple[str, ...]] = ("content",)

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: Any = None
    is_error: Optional[bool] = None
    cache_control: Optional[Dict[str, str]] = None


ContentBlock = Union[TextBlock, ImageBlock, ToolUseBlock, ToolResultBlock]


# --- Request Models ---

class ClaudeMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: List[ContentBlock]

    def to_wire(self) -> Dict[str, Any]:
        return {"role": self.role, "content": [block.to_wire() for block in self.content]}


class ClaudeTool(WireModel):
    raw_fields: ClassVar[Tuple[str, ...]] = ("input_schema",)

    name: str
    description: str = ""
    input_schema: Dict[str, Any]
    cache_control: Optional[Dict[str, str]] = None


class ClaudeRequest(BaseModel):
    model: str
    max_tokens: int
    stream: bool = False
    temperature: Optional[float] = None
    messages: List[ClaudeMessage]
    system: List[TextBlock]
    tools: Optional[List[ClaudeTool]] = None
    tool_choice: Optional[Dict[str, Any]] = None
    stop_sequences: Optional[List[str]] = None
    thinking: Optional[Dict[str, Any]] = None

    def to_wire(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "stream": self.stream,
        }
        if self.temperature is not None:
            body["temperature"] = self.temperature
        body["messages"] = [message.to_wire() for message in self.messages]
        body["system"] = [block.to_wire() for block in self.system]
        if self.tools is not None:
            body["tools"] = [tool.to_wire() for tool in self.tools]
        if self.tool_choice is not None:
            body["tool_choice"] = self.tool_choice
        if self.stop_sequences:
            body["stop_sequences"] = self.stop_sequences
        if self.thinking is not None:
            body["thinking"] = self.thinking
        return body


# --- Streaming Events ---

def message_start_event(message_id: str, model: str) -> Dict[str, Any]:
    return {
        "type": "message_start",
        "message": {
            "id": message_id,
            "type": "message",
            "role": "assistant",
            "model": model,
            "content": [],
            "stop_reason": None,
            "stop_sequence": None,
            "usage": {"input_tokens": 0, "output_tokens": 0},
        },
    }


def content_block_start_event(index: int, content_block: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "content_block_start", "index": index, "content_block": content_block}


def content_block_delta_event(index: int, delta: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "content_block_delta", "index": index, "delta": delta}


def content_block_stop_event(index: int) -> Dict[str, Any]:
    return {"type": "content_block_stop", "index": index}
