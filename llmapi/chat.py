"""Chat completion request, response and streaming chunk types."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Iterable, Mapping

from .errors import ContentFieldsMisusedError


class ChatMessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"
    TOOL = "tool"
    DEVELOPER = "developer"


class ChatMessagePartType(str, Enum):
    TEXT = "text"
    IMAGE_URL = "image_url"


class ImageURLDetail(str, Enum):
    HIGH = "high"
    LOW = "low"
    AUTO = "auto"


class ToolType(str, Enum):
    FUNCTION = "function"


class FinishReason(str, Enum):
    STOP = "stop"
    LENGTH = "length"
    FUNCTION_CALL = "function_call"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"
    NULL = "null"

    def to_json(self) -> str | None:
        return finish_reason_to_json(self)


def _value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _jsonable(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return _value(value)


def _compact(pairs: Iterable[tuple[str, Any]], keep: Iterable[str] = ()) -> dict[str, Any]:
    """Drop None always, and empty values unless the key is in ``keep``."""
    keep = frozenset(keep)
    return {k: _jsonable(v) for k, v in pairs if v is not None and (v or k in keep)}


def _load(cls: Any, data: Mapping[str, Any] | None, **overrides: Any) -> Any:
    """Build a dataclass from a mapping whose keys match its field names."""
    data = data or {}
    kwargs = {f.name: data[f.name] for f in fields(cls) if data.get(f.name) is not None}
    kwargs.update(overrides)
    return cls(**kwargs)


def _opt(cls: Any, value: Any) -> Any:
    return None if value is None else cls.from_dict(value)


def _many(cls: Any, items: Any) -> list[Any]:
    return [cls.from_dict(item) for item in items or []]


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def finish_reason_to_json(reason: str | FinishReason | None) -> str | None:
    """Map an empty or "null" finish reason to None, anything else to its string."""
    text = _value(reason)
    return None if not text or text == FinishReason.NULL.value else str(text)


@dataclass
class ChatMessageImageURL:
    url: str = ""
    detail: str | ImageURLDetail = ""

    def to_dict(self) -> dict[str, Any]:
        return _compact([("url", self.url), ("detail", self.detail)])

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessageImageURL":
        return _load(cls, data)


@dataclass
class ChatMessagePart:
    type: str | ChatMessagePartType = ""
    text: str = ""
    image_url: ChatMessageImageURL | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            [("type", self.type), ("text", self.text), ("image_url", self.image_url)],
            keep={"image_url"},
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessagePart":
        return _load(cls, data, image_url=_opt(ChatMessageImageURL, data.get("image_url")))


@dataclass
class FunctionCall:
    name: str = ""
    arguments: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _compact([("name", self.name), ("arguments", self.arguments)])

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FunctionCall":
        return _load(cls, data)


@dataclass
class ToolCall:
    id: str = ""
    type: str | ToolType = ToolType.FUNCTION
    function: FunctionCall = field(default_factory=FunctionCall)
    index: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out = _compact([("index", self.index), ("id", self.id)], keep={"index"})
        return {**out, "type": _value(self.type), "function": self.function.to_dict()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToolCall":
        return _load(
            cls,
            data,
            type=data.get("type") or "",
            function=FunctionCall.from_dict(data.get("function") or {}),
        )


@dataclass
class FunctionDefinition:
    name: str = ""
    description: str = ""
    strict: bool = False
    parameters: Any = None

    def to_dict(self) -> dict[str, Any]:
        optional = _compact([("description", self.description), ("strict", self.strict)])
        return {"name": self.name, **optional, "parameters": _jsonable(self.parameters)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FunctionDefinition":
        return _load(cls, data)


@dataclass
class Tool:
    type: str | ToolType = ToolType.FUNCTION
    function: FunctionDefinition | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"type": _value(self.type), **_compact([("function", self.function)], keep={"function"})}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Tool":
        return _load(
            cls,
            data,
            type=data.get("type") or "",
            function=_opt(FunctionDefinition, data.get("function")),
        )


@dataclass
class StreamOptions:
    include_usage: bool = False

    def to_dict(self) -> dict[str, Any]:
        return _compact([("include_usage", self.include_usage)])


@dataclass
class Prediction:
    content: str = ""
    type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"content": self.content, "type": self.type}


@dataclass
class ChatCompletionResponseFormat:
    type: str = ""
    json_schema: Mapping[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact([("type", self.type), ("json_schema", self.json_schema)], keep={"json_schema"})


@dataclass
class ChatCompletionMessage:
    role: str | ChatMessageRole = ""
    content: str = ""
    refusal: str = ""
    multi_content: list[ChatMessagePart] | None = None
    name: str = ""
    reasoning_content: str = ""
    function_call: FunctionCall | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_call_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialise; multi-part content goes under "content" as a list."""
        if self.content and self.multi_content is not None:
            raise ContentFieldsMisusedError()
        content = self.multi_content if self.multi_content else self.content
        pairs = [
            ("content", content),
            ("refusal", self.refusal),
            ("name", self.name),
            ("reasoning_content", self.reasoning_content),
            ("function_call", self.function_call),
            ("tool_calls", self.tool_calls),
            ("tool_call_id", self.tool_call_id),
        ]
        return {"role": _value(self.role), **_compact(pairs, keep={"function_call"})}

    @classmethod
    def from_dict(cls, data: Any) -> "ChatCompletionMessage":
        if not isinstance(data, Mapping):
            raise ValueError(f"chat message must be a JSON object, got {type(data).__name__}")
        raw = data.get("content")
        if raw is not None and not isinstance(raw, (str, list)):
            raise ValueError("chat message content must be a string or a list of parts")
        return _load(
            cls,
            data,
            content=raw if isinstance(raw, str) else "",
            multi_content=_many(ChatMessagePart, raw) if isinstance(raw, list) else None,
            function_call=_opt(FunctionCall, data.get("function_call")),
            tool_calls=_many(ToolCall, data.get("tool_calls")),
        )


def dump_messages(messages: Iterable[ChatCompletionMessage]) -> str:
    """Serialise messages to a compact JSON array."""
    return _dumps([message.to_dict() for message in messages])


def load_messages(text: str | bytes) -> list[ChatCompletionMessage]:
    """Parse a JSON array of chat messages."""
    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("expected a JSON array of messages")
    return [ChatCompletionMessage.from_dict(item) for item in data]


_KEEP_WHEN_SET = {
    "response_format", "seed", "function_call", "tool_choice",
    "stream_options", "parallel_tool_calls", "prediction",
}


@dataclass
class ChatCompletionRequest:
    model: str = ""
    messages: list[ChatCompletionMessage] | None = None
    max_tokens: int = 0
    max_completion_tokens: int = 0
    temperature: float = 0.0
    top_p: float = 0.0
    n: int = 0
    stream: bool = False
    stop: list[str] = field(default_factory=list)
    presence_penalty: float = 0.0
    response_format: ChatCompletionResponseFormat | None = None
    seed: int | None = None
    frequency_penalty: float = 0.0
    logit_bias: dict[str, int] = field(default_factory=dict)
    logprobs: bool = False
    top_logprobs: int = 0
    user: str = ""
    functions: list[FunctionDefinition] = field(default_factory=list)
    function_call: Any = None
    tools: list[Tool] = field(default_factory=list)
    tool_choice: Any = None
    stream_options: StreamOptions | None = None
    parallel_tool_calls: Any = None
    store: bool = False
    reasoning_effort: str = ""
    metadata: dict[str, str] = field(default_factory=dict)
    prediction: Prediction | None = None
    chat_template_kwargs: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialise, leaving out empty optional fields."""
        messages = None if self.messages is None else [m.to_dict() for m in self.messages]
        optional = ((f.name, getattr(self, f.name)) for f in fields(self)[2:])
        return {"model": self.model, "messages": messages, **_compact(optional, keep=_KEEP_WHEN_SET)}

    def to_json(self) -> str:
        return _dumps(self.to_dict())


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Usage":
        return _load(cls, data)


@dataclass
class ChatCompletionChoice:
    index: int = 0
    message: ChatCompletionMessage = field(default_factory=ChatCompletionMessage)
    finish_reason: str | FinishReason = ""
    logprobs: dict[str, Any] | None = None
    content_filter_results: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        optional = _compact(
            [("logprobs", self.logprobs), ("content_filter_results", self.content_filter_results)],
            keep={"logprobs", "content_filter_results"},
        )
        return {
            "index": self.index,
            "message": self.message.to_dict(),
            "finish_reason": finish_reason_to_json(self.finish_reason),
            **optional,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatCompletionChoice":
        return _load(cls, data, message=ChatCompletionMessage.from_dict(data.get("message") or {}))


@dataclass
class ChatCompletionResponse:
    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[ChatCompletionChoice] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    system_fingerprint: str = ""
    prompt_filter_results: list[dict[str, Any]] = field(default_factory=list)
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], headers: Mapping[str, str] | None = None
    ) -> "ChatCompletionResponse":
        return _load(
            cls,
            data,
            choices=_many(ChatCompletionChoice, data.get("choices")),
            usage=Usage.from_dict(data.get("usage")),
            headers=headers if headers is not None else {},
        )


@dataclass
class ChatCompletionStreamChoiceDelta:
    content: str = ""
    role: str = ""
    function_call: FunctionCall | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    refusal: str = ""
    reasoning_content: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "ChatCompletionStreamChoiceDelta":
        data = data or {}
        return _load(
            cls,
            data,
            function_call=_opt(FunctionCall, data.get("function_call")),
            tool_calls=_many(ToolCall, data.get("tool_calls")),
        )


@dataclass
class ChatCompletionTokenLogprob:
    token: str = ""
    bytes: list[int] = field(default_factory=list)
    logprob: float = 0.0
    top_logprobs: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatCompletionTokenLogprob":
        return _load(cls, data)


@dataclass
class ChatCompletionStreamChoiceLogprobs:
    content: list[ChatCompletionTokenLogprob] | None = None
    refusal: list[ChatCompletionTokenLogprob] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatCompletionStreamChoiceLogprobs":
        content, refusal = data.get("content"), data.get("refusal")
        return cls(
            content=None if content is None else _many(ChatCompletionTokenLogprob, content),
            refusal=None if refusal is None else _many(ChatCompletionTokenLogprob, refusal),
        )


@dataclass
class ChatCompletionStreamChoice:
    index: int = 0
    delta: ChatCompletionStreamChoiceDelta = field(default_factory=ChatCompletionStreamChoiceDelta)
    logprobs: ChatCompletionStreamChoiceLogprobs | None = None
    finish_reason: str | FinishReason = ""
    content_filter_results: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatCompletionStreamChoice":
        return _load(
            cls,
            data,
            delta=ChatCompletionStreamChoiceDelta.from_dict(data.get("delta")),
            logprobs=_opt(ChatCompletionStreamChoiceLogprobs, data.get("logprobs")),
        )


@dataclass
class ChatCompletionStreamResponse:
    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[ChatCompletionStreamChoice] = field(default_factory=list)
    system_fingerprint: str = ""
    prompt_annotations: list[dict[str, Any]] = field(default_factory=list)
    prompt_filter_results: list[dict[str, Any]] = field(default_factory=list)
    usage: Usage | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatCompletionStreamResponse":
        return _load(
            cls,
            data,
            choices=_many(ChatCompletionStreamChoice, data.get("choices")),
            usage=_opt(Usage, data.get("usage")),
        )