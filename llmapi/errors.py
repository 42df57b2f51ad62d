"""Exceptions raised by the API client."""

from __future__ import annotations

from typing import Any, Mapping


class LLMAPIError(Exception):
    """Base class for every error raised by this package."""


class ChatCompletionInvalidModelError(LLMAPIError):
    """The model cannot be used with the chat completion endpoint."""

    def __init__(
        self,
        message: str = (
            "this model is not supported with this method, "
            "please use CreateCompletion client method instead"
        ),
    ) -> None:
        super().__init__(message)


class ChatCompletionStreamNotSupportedError(LLMAPIError):
    """Streaming was requested from the non-streaming chat call."""

    def __init__(
        self,
        message: str = (
            "streaming is not supported with this method, "
            "please use CreateChatCompletionStream"
        ),
    ) -> None:
        super().__init__(message)


class ContentFieldsMisusedError(LLMAPIError):
    """A chat message sets both plain content and multi-part content."""

    def __init__(
        self,
        message: str = "can't use both Content and MultiContent properties simultaneously",
    ) -> None:
        super().__init__(message)


class APIError(LLMAPIError):
    """An error object returned by the API."""

    def __init__(
        self,
        message: str,
        type: str | None = None,
        code: Any = None,
        param: str | None = None,
        http_status_code: int = 0,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.type = type
        self.code = code
        self.param = param
        self.http_status_code = http_status_code

    @classmethod
    def from_payload(
        cls, payload: Mapping[str, Any], http_status_code: int = 0
    ) -> "APIError":
        """Build an error from a response body, wrapped in "error" or not."""
        if not isinstance(payload, Mapping):
            raise ValueError("error payload must be a JSON object")
        inner = payload.get("error")
        if isinstance(inner, Mapping):
            payload = inner
        message = payload.get("message")
        return cls(
            message="" if message is None else str(message),
            type=payload.get("type"),
            code=payload.get("code"),
            param=payload.get("param"),
            http_status_code=http_status_code,
        )


class RequestError(LLMAPIError):
    """An HTTP failure whose body carried no API error object."""

    def __init__(self, http_status_code: int, body: bytes | str = b"") -> None:
        super().__init__(f"status code {http_status_code}: {body!r}")
        self.http_status_code = http_status_code
        self.body = body