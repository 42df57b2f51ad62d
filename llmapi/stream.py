"""Reading chat completion chunks from a server-sent event stream."""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable, Iterator, Mapping

from .chat import ChatCompletionStreamResponse
from .errors import APIError

_DATA_PREFIX = "data:"
_DONE = "[DONE]"


class ChatCompletionStream:
    """Iterates over the chunks of a streamed chat completion.

    ``recv`` returns the next chunk and raises ``EOFError`` once the stream
    has ended; iterating yields chunks until then.
    """

    def __init__(
        self,
        lines: Iterable[str | bytes],
        headers: Mapping[str, str] | None = None,
        close: Callable[[], Any] | None = None,
    ) -> None:
        self._lines = iter(lines)
        self.headers: Mapping[str, str] = headers if headers is not None else {}
        self._close = close
        self._closed = False
        self._finished = False
        self._error_lines: list[str] = []

    def _accumulated_error(self) -> APIError | None:
        text = "\n".join(self._error_lines)
        self._error_lines.clear()
        if not text.strip():
            return None
        try:
            payload = json.loads(text)
        except ValueError:
            return None
        if isinstance(payload, Mapping) and isinstance(payload.get("error"), Mapping):
            return APIError.from_payload(payload)
        return None

    def recv(self) -> ChatCompletionStreamResponse:
        if self._finished:
            raise EOFError("stream finished")
        for raw in self._lines:
            line = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
            line = line.rstrip("\r\n").strip()
            if not line.startswith(_DATA_PREFIX):
                if line:
                    self._error_lines.append(line)
                continue
            payload = line[len(_DATA_PREFIX):].strip()
            if payload == _DONE:
                self._finished = True
                raise EOFError("stream finished")
            data = json.loads(payload)
            if isinstance(data, Mapping) and isinstance(data.get("error"), Mapping):
                raise APIError.from_payload(data)
            return ChatCompletionStreamResponse.from_dict(data)
        self._finished = True
        error = self._accumulated_error()
        if error is not None:
            raise error
        raise EOFError("stream finished")

    def __iter__(self) -> Iterator[ChatCompletionStreamResponse]:
        while True:
            try:
                yield self.recv()
            except EOFError:
                return

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._close is not None:
            self._close()

    def __enter__(self) -> "ChatCompletionStream":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()