"""Assistant request and response types."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Mapping
from urllib.parse import urlencode

from .chat import FunctionDefinition, _compact, _load, _many, _opt


class AssistantToolType(str, Enum):
    CODE_INTERPRETER = "code_interpreter"
    RETRIEVAL = "retrieval"
    FUNCTION = "function"
    FILE_SEARCH = "file_search"


@dataclass
class AssistantTool:
    type: str | AssistantToolType = ""
    function: FunctionDefinition | None = None

    def to_dict(self) -> dict[str, Any]:
        return _compact([("type", self.type), ("function", self.function)], keep={"type", "function"})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssistantTool":
        return _load(cls, data, function=_opt(FunctionDefinition, data.get("function")))


@dataclass
class AssistantToolResource:
    """Resources for the file search and code interpreter tools.

    ``file_search`` holds vector store ids, ``code_interpreter`` holds file ids;
    ``None`` leaves the corresponding section out.
    """

    file_search: list[str] | None = None
    code_interpreter: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.file_search is not None:
            out["file_search"] = {"vector_store_ids": list(self.file_search)}
        if self.code_interpreter is not None:
            out["code_interpreter"] = {"file_ids": list(self.code_interpreter)}
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssistantToolResource":
        def ids(section: Any, key: str) -> list[str] | None:
            return None if section is None else list(section.get(key) or [])

        return cls(
            file_search=ids(data.get("file_search"), "vector_store_ids"),
            code_interpreter=ids(data.get("code_interpreter"), "file_ids"),
        )


_REQUEST_KEEP_WHEN_SET = frozenset(
    {"name", "description", "instructions", "tool_resources", "response_format", "temperature", "top_p"}
)


@dataclass
class AssistantRequest:
    """Parameters for creating or modifying an assistant.

    ``tools`` of ``None`` leaves the assistant's tools unchanged, an empty list
    removes them all, and a populated list replaces them.
    """

    model: str = ""
    name: str | None = None
    description: str | None = None
    instructions: str | None = None
    tools: list[AssistantTool] | None = None
    file_ids: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    tool_resources: AssistantToolResource | None = None
    response_format: Any = None
    temperature: float | None = None
    top_p: float | None = None

    def to_dict(self) -> dict[str, Any]:
        out = _compact([("tools", self.tools)], keep={"tools"})
        out["model"] = self.model
        rest = (
            (f.name, getattr(self, f.name))
            for f in fields(self)
            if f.name not in ("model", "tools")
        )
        out.update(_compact(rest, keep=_REQUEST_KEEP_WHEN_SET))
        return out


@dataclass
class Assistant:
    id: str = ""
    object: str = ""
    created_at: int = 0
    name: str | None = None
    description: str | None = None
    model: str = ""
    instructions: str | None = None
    tools: list[AssistantTool] | None = None
    tool_resources: AssistantToolResource | None = None
    file_ids: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    temperature: float | None = None
    top_p: float | None = None
    response_format: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], headers: Mapping[str, str] | None = None
    ) -> "Assistant":
        tools = data.get("tools")
        return _load(
            cls,
            data,
            tools=_many(AssistantTool, tools) if tools is not None else None,
            tool_resources=_opt(AssistantToolResource, data.get("tool_resources")),
            headers=headers if headers is not None else {},
        )


@dataclass
class AssistantsList:
    assistants: list[Assistant] = field(default_factory=list)
    last_id: str | None = None
    first_id: str | None = None
    has_more: bool = False
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], headers: Mapping[str, str] | None = None
    ) -> "AssistantsList":
        return _load(
            cls,
            data,
            assistants=_many(Assistant, data.get("data")),
            headers=headers if headers is not None else {},
        )


@dataclass
class AssistantDeleteResponse:
    id: str = ""
    object: str = ""
    deleted: bool = False
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], headers: Mapping[str, str] | None = None
    ) -> "AssistantDeleteResponse":
        return _load(cls, data, headers=headers if headers is not None else {})


@dataclass
class AssistantFileRequest:
    file_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"file_id": self.file_id}


@dataclass
class AssistantFile:
    id: str = ""
    object: str = ""
    created_at: int = 0
    assistant_id: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], headers: Mapping[str, str] | None = None
    ) -> "AssistantFile":
        return _load(cls, data, headers=headers if headers is not None else {})


@dataclass
class AssistantFilesList:
    assistant_files: list[AssistantFile] = field(default_factory=list)
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], headers: Mapping[str, str] | None = None
    ) -> "AssistantFilesList":
        return cls(
            assistant_files=_many(AssistantFile, data.get("data")),
            headers=headers if headers is not None else {},
        )


def list_query(
    limit: int | None = None,
    order: str | None = None,
    after: str | None = None,
    before: str | None = None,
) -> str:
    """Build the "?..." query string for list calls, or "" when nothing is set."""
    params = {
        key: str(value)
        for key, value in (("limit", limit), ("order", order), ("after", after), ("before", before))
        if value is not None
    }
    return "?" + urlencode(sorted(params.items())) if params else ""