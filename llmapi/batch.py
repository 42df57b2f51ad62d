"""Batch request and response types, and JSONL batch input files."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from .chat import ChatCompletionRequest, _dumps, _load, _value


class BatchEndpoint(str, Enum):
    CHAT_COMPLETIONS = "/v1/chat/completions"
    COMPLETIONS = "/v1/completions"
    EMBEDDINGS = "/v1/embeddings"


@dataclass
class BatchLineItem:
    """One request line of a batch input file."""

    custom_id: str
    body: Any
    url: str | BatchEndpoint
    method: str = "POST"

    def to_dict(self) -> dict[str, Any]:
        if hasattr(self.body, "to_dict"):
            body = self.body.to_dict()
        elif isinstance(self.body, Mapping):
            body = dict(self.body)
        else:
            raise TypeError(f"batch body must be a mapping or have to_dict(), got {type(self.body).__name__}")
        return {"custom_id": self.custom_id, "body": body, "method": self.method, "url": _value(self.url)}

    def to_json(self) -> str:
        return _dumps(self.to_dict())


@dataclass
class UploadBatchFileRequest:
    file_name: str = ""
    lines: list[BatchLineItem] = field(default_factory=list)

    def add_chat_completion(self, custom_id: str, body: ChatCompletionRequest) -> None:
        self.lines.append(BatchLineItem(custom_id, body, BatchEndpoint.CHAT_COMPLETIONS))

    def add_completion(self, custom_id: str, body: Any) -> None:
        self.lines.append(BatchLineItem(custom_id, body, BatchEndpoint.COMPLETIONS))

    def add_embedding(self, custom_id: str, body: Any) -> None:
        self.lines.append(BatchLineItem(custom_id, body, BatchEndpoint.EMBEDDINGS))

    def to_jsonl(self) -> bytes:
        """The lines joined by newlines, with no trailing newline."""
        return b"\n".join(line.to_json().encode("utf-8") for line in self.lines)


@dataclass
class CreateBatchRequest:
    input_file_id: str = ""
    endpoint: str | BatchEndpoint = ""
    completion_window: str = ""
    metadata: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "input_file_id": self.input_file_id,
            "endpoint": _value(self.endpoint),
            "completion_window": self.completion_window,
            "metadata": None if self.metadata is None else dict(self.metadata),
        }


@dataclass
class CreateBatchWithUploadFileRequest(UploadBatchFileRequest):
    endpoint: str | BatchEndpoint = ""
    completion_window: str = ""
    metadata: dict[str, Any] | None = None


@dataclass
class BatchRequestCounts:
    total: int = 0
    completed: int = 0
    failed: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "BatchRequestCounts":
        return _load(cls, data)


@dataclass
class Batch:
    id: str = ""
    object: str = ""
    endpoint: str = ""
    errors: dict[str, Any] | None = None
    input_file_id: str = ""
    completion_window: str = ""
    status: str = ""
    output_file_id: str | None = None
    error_file_id: str | None = None
    created_at: int = 0
    in_progress_at: int | None = None
    expires_at: int | None = None
    finalizing_at: int | None = None
    completed_at: int | None = None
    failed_at: int | None = None
    expired_at: int | None = None
    cancelling_at: int | None = None
    cancelled_at: int | None = None
    request_counts: BatchRequestCounts = field(default_factory=BatchRequestCounts)
    metadata: dict[str, Any] | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], headers: Mapping[str, str] | None = None) -> "Batch":
        return _load(
            cls,
            data,
            request_counts=BatchRequestCounts.from_dict(data.get("request_counts")),
            headers=headers if headers is not None else {},
        )


@dataclass
class ListBatchResponse:
    object: str = ""
    data: list[Batch] = field(default_factory=list)
    first_id: str = ""
    last_id: str = ""
    has_more: bool = False
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], headers: Mapping[str, str] | None = None
    ) -> "ListBatchResponse":
        return _load(
            cls,
            data,
            data=[Batch.from_dict(b) for b in data.get("data") or []],
            has_more=bool(data.get("has_more")),
            headers=headers if headers is not None else {},
        )