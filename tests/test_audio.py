import io
from email.parser import BytesParser

import pytest

from llmapi.audio import (
    AudioRequest,
    AudioResponse,
    AudioResponseFormat,
    FormBuilder,
    TranscriptionTimestampGranularity,
    audio_multipart_form,
    create_file_field,
)
from llmapi.errors import LLMAPIError


class FakeBuilder:
    def __init__(self, file_error=None, reader_error=None, field_error=None, fail_field=None):
        self.file_error = file_error
        self.reader_error = reader_error
        self.field_error = field_error
        self.fail_field = fail_field
        self.fields = []
        self.closed = False

    def create_form_file(self, field_name, file):
        if self.file_error is not None:
            raise self.file_error

    def create_form_file_reader(self, field_name, reader, filename):
        if self.reader_error is not None:
            raise self.reader_error

    def write_field(self, field_name, value):
        if field_name == self.fail_field:
            raise self.field_error
        self.fields.append((field_name, value))

    def close(self):
        self.closed = True

    def content_type(self):
        return "multipart/form-data"


@pytest.fixture
def audio_path(tmp_path):
    path = tmp_path / "fake.mp3"
    path.write_bytes(b"hello")
    return str(path)


def _full_request(path):
    return AudioRequest(
        file_path=path,
        prompt="test",
        temperature=0.5,
        language="en",
        format=AudioResponseFormat.SRT,
        timestamp_granularities=[
            TranscriptionTimestampGranularity.SEGMENT,
            TranscriptionTimestampGranularity.WORD,
        ],
    )


def _parse(builder):
    raw = b"Content-Type: " + builder.content_type().encode() + b"\r\n\r\n" + builder.getvalue()
    message = BytesParser().parsebytes(raw)
    return [
        (
            part.get_param("name", header="content-disposition"),
            part.get_filename(),
            part.get_payload(decode=True),
        )
        for part in message.get_payload()
    ]


def test_failing_form_file(audio_path):
    failure = RuntimeError("mock form builder fail")
    with pytest.raises(LLMAPIError) as excinfo:
        audio_multipart_form(_full_request(audio_path), FakeBuilder(file_error=failure))
    assert excinfo.value.__cause__ is failure


@pytest.mark.parametrize(
    "field_name",
    ["model", "prompt", "temperature", "language", "response_format", "timestamp_granularities[]"],
)
def test_failing_field(audio_path, field_name):
    failure = RuntimeError(f"mock form builder fail on field {field_name}")
    builder = FakeBuilder(field_error=failure, fail_field=field_name)
    with pytest.raises(LLMAPIError) as excinfo:
        audio_multipart_form(_full_request(audio_path), builder)
    assert excinfo.value.__cause__ is failure
    assert builder.closed is False


def test_create_file_field_failing_file(audio_path):
    failure = RuntimeError("mock form builder fail")
    with pytest.raises(LLMAPIError) as excinfo:
        create_file_field(AudioRequest(file_path=audio_path), FakeBuilder(file_error=failure))
    assert excinfo.value.__cause__ is failure


def test_create_file_field_failing_reader():
    failure = RuntimeError("mock form builder fail")
    request = AudioRequest(file_path="test.wav", reader=io.BytesIO(b"wav test contents"))
    with pytest.raises(LLMAPIError) as excinfo:
        create_file_field(request, FakeBuilder(reader_error=failure))
    assert excinfo.value.__cause__ is failure


def test_create_file_field_failing_open():
    with pytest.raises(LLMAPIError) as excinfo:
        create_file_field(AudioRequest(file_path="non_existing_file.wav"), FakeBuilder())
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_fields_written_in_order(audio_path):
    builder = FakeBuilder()
    request = _full_request(audio_path)
    request.model = "whisper-3"
    audio_multipart_form(request, builder)
    assert builder.fields == [
        ("model", "whisper-3"),
        ("prompt", "test"),
        ("response_format", "srt"),
        ("temperature", "0.50"),
        ("language", "en"),
        ("timestamp_granularities[]", "segment"),
        ("timestamp_granularities[]", "word"),
    ]
    assert builder.closed is True


def test_optional_fields_left_out(audio_path):
    builder = FakeBuilder()
    audio_multipart_form(AudioRequest(file_path=audio_path, model="whisper-1"), builder)
    assert builder.fields == [("model", "whisper-1")]


def test_form_builder_round_trip_with_file(audio_path):
    builder = FormBuilder()
    audio_multipart_form(AudioRequest(file_path=audio_path, model="whisper-3"), builder)
    parts = _parse(builder)
    assert parts[0] == ("file", "fake.mp3", b"hello")
    assert parts[1] == ("model", None, b"whisper-3")
    assert builder.getvalue().endswith(f"--{builder.boundary}--\r\n".encode())


def test_form_builder_round_trip_with_reader():
    builder = FormBuilder(boundary="xyz")
    request = AudioRequest(
        file_path="fake.webm",
        reader=io.BytesIO(b"some webm binary data"),
        model="whisper-3",
        prompt="用简体中文",
    )
    audio_multipart_form(request, builder)
    assert builder.content_type() == "multipart/form-data; boundary=xyz"
    parts = _parse(builder)
    assert parts[0] == ("file", "fake.webm", b"some webm binary data")
    assert parts[2] == ("prompt", None, "用简体中文".encode("utf-8"))


@pytest.mark.parametrize(
    "fmt, expected",
    [
        ("", True),
        (AudioResponseFormat.JSON, True),
        (AudioResponseFormat.VERBOSE_JSON, True),
        (AudioResponseFormat.TEXT, False),
        (AudioResponseFormat.SRT, False),
        (AudioResponseFormat.VTT, False),
    ],
)
def test_has_json_response(fmt, expected):
    assert AudioRequest(format=fmt).has_json_response() is expected


def test_audio_response_from_text_and_dict():
    headers = {"X-CUSTOM-HEADER": "test"}
    text_response = AudioResponse.from_text("hello", headers)
    assert text_response.text == "hello"
    assert text_response.headers["X-CUSTOM-HEADER"] == "test"
    parsed = AudioResponse.from_dict(
        {"task": "transcribe", "language": "en", "duration": 1.5, "text": "hi", "words": [{"word": "hi"}]}
    )
    assert (parsed.task, parsed.language, parsed.duration, parsed.text) == ("transcribe", "en", 1.5, "hi")
    assert parsed.words == [{"word": "hi"}]