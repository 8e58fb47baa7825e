"""
Streaming Exchange State

One ``StreamState`` per streamed exchange. It is mutated once per provider
event by a response translator and must never be shared between exchanges.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from .ids import IdProvider, default_ids
from .openai_models import OpenAIChatCompletionChunk, OpenAIChunkChoice, OpenAIUsage

TEXT = "text"
THINKING = "thinking"


@dataclass
class OpenBlock:
    kind: str  # TEXT or THINKING
    index: int


@dataclass
class ToolCallState:
    """A tool call seen in this exchange, addressed in both index spaces."""
    provider_index: int
    output_index: int
    id: str
    name: str
    arguments: str = ""
    closed: bool = False

    def append_arguments(self, fragment: str) -> None:
        self.arguments += fragment


class ToolCallTable:
    """
    Bidirectional map between the provider's index space and the output
    index space for one exchange's tool calls.
    """

    def __init__(self):
        self._by_provider: Dict[int, ToolCallState] = {}
        self._by_output: Dict[int, ToolCallState] = {}
        self._order: List[ToolCallState] = []

    def add(self, provider_index: int, output_index: int, call_id: str, name: str) -> ToolCallState:
        call = ToolCallState(provider_index=provider_index, output_index=output_index, id=call_id, name=name)
        self._by_provider[provider_index] = call
        self._by_output[output_index] = call
        self._order.append(call)
        return call

    def by_provider(self, provider_index: int) -> Optional[ToolCallState]:
        return self._by_provider.get(provider_index)

    def by_output(self, output_index: int) -> Optional[ToolCallState]:
        return self._by_output.get(output_index)

    def open_calls(self) -> List[ToolCallState]:
        return [call for call in self._order if not call.closed]

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[ToolCallState]:
        return iter(self._order)


@dataclass
class StreamState:
    ids: IdProvider = field(default_factory=lambda: default_ids)
    message_id: Optional[str] = None
    model: Optional[str] = None
    message_started: bool = False
    message_stopped: bool = False
    open_block: Optional[OpenBlock] = None
    next_block_index: int = 0
    next_tool_index: int = 0
    tool_calls: ToolCallTable = field(default_factory=ToolCallTable)
    finish_reason: Optional[str] = None
    finish_reason_sent: bool = False
    usage: Optional[OpenAIUsage] = None

    def allocate_block_index(self) -> int:
        index = self.next_block_index
        self.next_block_index += 1
        return index

    def allocate_tool_index(self) -> int:
        index = self.next_tool_index
        self.next_tool_index += 1
        return index

    def chunk(
        self,
        delta: Dict[str, Any],
        finish_reason: Optional[str] = None,
        usage: Optional[OpenAIUsage] = None,
    ) -> Dict[str, Any]:
        """Build one OpenAI chat.completion.chunk for this exchange."""
        return OpenAIChatCompletionChunk(
            id=f"chatcmpl-{self.message_id}",
            created=self.ids.now(),
            model=self.model,
            choices=[OpenAIChunkChoice(index=0, delta=delta, finish_reason=finish_reason)],
            usage=usage,
        ).to_wire()


def new_stream_state(ids: Optional[IdProvider] = None) -> StreamState:
    """Create the state for a new streamed exchange."""
    return StreamState(ids=ids or default_ids)
