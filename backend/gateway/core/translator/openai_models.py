"""
OpenAI Protocol Models

These Pydantic models define the structure of OpenAI chat requests and
streaming chunks. Request models are lenient: unknown fields are kept,
non-object messages are dropped and scalar ids are coerced to strings.
"""
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidRequestError

logger = logging.getLogger(__name__)


class OpenAIMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str = "user"
    content: Any = None
    tool_calls: Optional[List[Any]] = None
    tool_call_id: Optional[str] = None
    name: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def _default_role(cls, value: Any) -> Any:
        return "user" if value is None else value

    @field_validator("tool_call_id", "name", mode="before")
    @classmethod
    def _coerce_to_str(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class OpenAIRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    model: Optional[str] = None
    messages: List[OpenAIMessage] = Field(default_factory=list)
    stream: bool = False
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    stop: Optional[Union[str, List[str]]] = None
    tools: Optional[List[Any]] = None
    tool_choice: Optional[Any] = None
    reasoning_effort: Optional[str] = None
    thinking: Optional[Dict[str, Any]] = None

    @property
    def stop_sequences(self) -> List[str]:
        if isinstance(self.stop, str):
            return [self.stop]
        return list(self.stop or [])


def parse_openai_request(body: Any) -> OpenAIRequest:
    """
    Validate an OpenAI request body.

    Top-level nulls are treated as absent fields. Only a body that is not a
    chat request at all raises.
    """
    if isinstance(body, OpenAIRequest):
        return body
    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    data = {k: v for k, v in body.items() if v is not None}
    messages = data.get("messages")
    if isinstance(messages, list):
        kept = [m for m in messages if isinstance(m, (dict, OpenAIMessage))]
        if len(kept) != len(messages):
            logger.warning(f"Dropping {len(messages) - len(kept)} malformed message(s)")
        data["messages"] = kept
    try:
        return OpenAIRequest.model_validate(data)
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid request format: {e}") from e


# --- OpenAI Streaming Models ---

class OpenAICompletionTokensDetails(BaseModel):
    reasoning_tokens: int = 0


class OpenAIUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    completion_tokens_details: Optional[OpenAICompletionTokensDetails] = None

    @property
    def reasoning_tokens(self) -> int:
        if self.completion_tokens_details is None:
            return 0
        return self.completion_tokens_details.reasoning_tokens


class OpenAIChunkChoice(BaseModel):
    index: int = 0
    delta: Dict[str, Any] = Field(default_factory=dict)
    finish_reason: Optional[str] = None


class OpenAIChatCompletionChunk(BaseModel):
    id: str
    object: str = "chat.completion.chunk"
    created: int
    model: Optional[str] = None
    choices: List[OpenAIChunkChoice]
    usage: Optional[OpenAIUsage] = None

    def to_wire(self) -> Dict[str, Any]:
        data = self.model_dump(exclude={"usage"})
        if self.usage is not None:
            data["usage"] = self.usage.model_dump(exclude_none=True)
        return data
