"""Audio transcription and translation requests and multipart form building."""

from __future__ import annotations

import io
import os
import secrets
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO, Iterator, Mapping

from .chat import _load, _value
from .errors import LLMAPIError

WHISPER_1 = "whisper-1"


class AudioResponseFormat(str, Enum):
    JSON = "json"
    TEXT = "text"
    SRT = "srt"
    VERBOSE_JSON = "verbose_json"
    VTT = "vtt"


class TranscriptionTimestampGranularity(str, Enum):
    WORD = "word"
    SEGMENT = "segment"


@dataclass
class AudioRequest:
    """Transcription or translation parameters; with ``reader`` set, ``file_path`` is only the name sent."""

    model: str = ""
    file_path: str = ""
    reader: BinaryIO | None = None
    prompt: str = ""
    temperature: float = 0.0
    language: str = ""
    format: str | AudioResponseFormat = ""
    timestamp_granularities: list[str | TranscriptionTimestampGranularity] = field(default_factory=list)

    def has_json_response(self) -> bool:
        return _value(self.format) in ("", AudioResponseFormat.JSON.value, AudioResponseFormat.VERBOSE_JSON.value)


@dataclass
class AudioResponse:
    task: str = ""
    language: str = ""
    duration: float = 0.0
    segments: list[dict[str, Any]] = field(default_factory=list)
    words: list[dict[str, Any]] = field(default_factory=list)
    text: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], headers: Mapping[str, str] | None = None) -> "AudioResponse":
        return _load(cls, data, headers=headers if headers is not None else {})

    @classmethod
    def from_text(cls, text: str, headers: Mapping[str, str] | None = None) -> "AudioResponse":
        return cls(text=text, headers=headers if headers is not None else {})


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


class FormBuilder:
    """Builds a multipart/form-data body in memory."""

    def __init__(self, boundary: str | None = None) -> None:
        self.boundary = boundary or secrets.token_hex(30)
        self._buffer = io.BytesIO()
        self._parts = 0
        self._closed = False

    def _part(self, field_name: str, content: bytes, filename: str | None = None) -> None:
        if self._closed:
            raise LLMAPIError("multipart form is already closed")
        headers = f'Content-Disposition: form-data; name="{_quote(field_name)}"'
        if filename is not None:
            headers += f'; filename="{_quote(filename)}"\r\nContent-Type: application/octet-stream'
        prefix = "\r\n" if self._parts else ""
        self._parts += 1
        self._buffer.write(f"{prefix}--{self.boundary}\r\n{headers}\r\n\r\n".encode("utf-8") + content)

    def create_form_file(self, field_name: str, file: BinaryIO) -> None:
        """Add a file part named after the open file's base name."""
        self._part(field_name, file.read(), os.path.basename(str(getattr(file, "name", ""))))

    def create_form_file_reader(self, field_name: str, reader: BinaryIO, filename: str) -> None:
        content = reader.read()
        if isinstance(content, str):
            content = content.encode("utf-8")
        self._part(field_name, content, os.path.basename(filename))

    def write_field(self, field_name: str, value: str) -> None:
        self._part(field_name, value.encode("utf-8"))

    def close(self) -> None:
        if not self._closed:
            prefix = "\r\n" if self._parts else ""
            self._buffer.write(f"{prefix}--{self.boundary}--\r\n".encode("ascii"))
            self._closed = True

    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()


@contextmanager
def _step(what: str) -> Iterator[None]:
    try:
        yield
    except Exception as err:
        raise LLMAPIError(f"{what}: {err}") from err


def create_file_field(request: AudioRequest, builder: Any) -> None:
    """Add the "file" part from the request's reader or from the file on disk."""
    if request.reader is not None:
        with _step("creating form using reader"):
            builder.create_form_file_reader("file", request.reader, request.file_path)
        return
    with _step("opening audio file"):
        handle = open(request.file_path, "rb")
    with handle, _step("creating form file"):
        builder.create_form_file("file", handle)


def audio_multipart_form(request: AudioRequest, builder: Any) -> None:
    """Fill the builder with the audio file and the request's options, then close it."""
    create_file_field(request, builder)
    fields: list[tuple[str, str, str]] = [("model", request.model, "model name")]
    if request.prompt:
        fields.append(("prompt", request.prompt, "prompt"))
    if request.format:
        fields.append(("response_format", str(_value(request.format)), "format"))
    if request.temperature != 0:
        fields.append(("temperature", f"{request.temperature:.2f}", "temperature"))
    if request.language:
        fields.append(("language", request.language, "language"))
    for granularity in request.timestamp_granularities:
        name = "timestamp_granularities[]"
        fields.append((name, str(_value(granularity)), name))
    for name, value, what in fields:
        with _step(f"writing {what}"):
            builder.write_field(name, value)
    builder.close()