# llmapi

Typed building blocks for LLM HTTP APIs in the style of the chat completion
service. The package uses only the standard library. It provides:

- chat completion requests, responses and streamed chunks (`llmapi.chat`)
- a reader for streamed chat completions sent as server-sent events (`llmapi.stream`)
- assistant requests, responses and list query strings (`llmapi.assistant`)
- audio transcription/translation requests and a multipart form builder (`llmapi.audio`)
- batch requests, responses and JSONL batch input files (`llmapi.batch`)
- the exceptions for all of these (`llmapi.errors`)

Requests and responses are dataclasses. Requests serialise with `to_dict()`
(and sometimes `to_json()`), and responses are built with `from_dict()`.

## What it does not do

The package does not send HTTP requests. It has no client object and no
network code. You choose the HTTP library yourself. This package builds the
bodies and query strings you send, and it parses what comes back.

## Installation

```
pip install llmapi
```

To also install what the test suite needs:

```
pip install "llmapi[test]"
```

## Chat completions

```python
from llmapi.chat import (
    ChatCompletionMessage, ChatCompletionRequest, ChatCompletionResponse, ChatMessageRole,
)

request = ChatCompletionRequest(
    model="gpt-3.5-turbo",
    messages=[ChatCompletionMessage(role=ChatMessageRole.USER, content="Hello!")],
    max_tokens=5,
)
body = request.to_json()
# '{"model":"gpt-3.5-turbo","messages":[{"role":"user","content":"Hello!"}],"max_tokens":5}'

response = ChatCompletionResponse.from_dict(parsed_json, headers=http_headers)
print(response.choices[0].message.content)
```

How requests are serialised:

- `model` and `messages` are always written. `messages` is written as `null` when it is `None`.
- Other fields are left out while they are empty or unset.
- A message can carry multi-part content in `multi_content`, a list of
  `ChatMessagePart`. That content is written under `"content"` as a list. A
  message that sets both `content` and `multi_content` raises
  `ContentFieldsMisusedError` when it is serialised.

Helper functions:

- `dump_messages(messages)` writes a compact JSON array of messages.
- `load_messages(text)` reads such an array back. When a message's `"content"`
  is a list, it becomes `multi_content`.
- `finish_reason_to_json(reason)` maps `""` and `"null"` to `None` and returns
  any other finish reason as its string. `ChatCompletionChoice.to_dict()` uses it.

## Streaming

`ChatCompletionStream` reads an iterable of SSE lines, as `str` or `bytes`. You
can also pass it the response headers and a callback to run on close.

```python
from llmapi.stream import ChatCompletionStream

with ChatCompletionStream(response.iter_lines(), headers=response.headers,
                          close=response.close) as stream:
    for chunk in stream:
        for choice in chunk.choices:
            print(choice.delta.content, end="")
```

- Each `data:` line becomes a `ChatCompletionStreamResponse`.
- `recv()` returns one chunk at a time and raises `EOFError` at `data: [DONE]`
  or when the lines run out. Every later call raises `EOFError` again.
- Iterating over the stream stops at that point.
- `recv()` raises `APIError` in two cases:
  - a `data:` line holds an `{"error": {...}}` object;
  - the stream ends and the lines without a `data:` prefix, joined together,
    form such an object.

## Assistants

```python
from llmapi.assistant import AssistantRequest, AssistantTool, AssistantToolType, list_query

body = AssistantRequest(
    model="gpt-4-turbo-preview",
    name="Ambrogio",
    tools=[AssistantTool(type=AssistantToolType.FUNCTION)],
).to_dict()

path = "/assistants" + list_query(limit=20, order="desc")
# "/assistants?limit=20&order=desc"
```

The value of `tools` on `AssistantRequest` decides what `to_dict()` writes:

| `tools` value        | In the body         | Meaning to the service          |
|----------------------|---------------------|---------------------------------|
| `None`               | left out            | the tools are left unchanged    |
| an empty list        | `"tools": []`       | all tools are removed           |
| a list with entries  | the list            | the tools are replaced by these |

`list_query` builds the query string from the parameters that are not `None`,
with keys sorted. It returns `""` when none of them is set.

The response types each have `from_dict(data, headers)`: `Assistant`,
`AssistantsList`, `AssistantDeleteResponse`, `AssistantFile` and
`AssistantFilesList`.

## Audio

```python
from llmapi.audio import WHISPER_1, AudioRequest, AudioResponseFormat, FormBuilder, audio_multipart_form

request = AudioRequest(model=WHISPER_1, file_path="speech.mp3", format=AudioResponseFormat.SRT)
builder = FormBuilder()
audio_multipart_form(request, builder)
body, content_type = builder.getvalue(), builder.content_type()
```

How `audio_multipart_form` builds the form:

1. It adds the `file` part. If `reader` is set, the part is read from it and
   `file_path` only supplies the file name. Otherwise the file at `file_path`
   is opened and read.
2. It writes `model`.
3. It writes each of these fields only when it is set: `prompt`,
   `response_format`, `temperature` (formatted with two decimals), `language`,
   and one `timestamp_granularities[]` field per entry.
4. It closes the form.

A failure at any step is raised as `LLMAPIError`, naming the step.

To decide how to read the reply:

- `request.has_json_response()` is true when the format is empty, `json` or
  `verbose_json`. Parse such a reply with `AudioResponse.from_dict`.
- For any other format, wrap the reply body with `AudioResponse.from_text`.

## Batches

```python
from llmapi.batch import CreateBatchRequest, BatchEndpoint, UploadBatchFileRequest

upload = UploadBatchFileRequest(file_name="batchinput.jsonl")
upload.add_chat_completion("req-1", request)
jsonl = upload.to_jsonl()   # bytes, one JSON object per line, no trailing newline

body = CreateBatchRequest(
    input_file_id="file-abc",
    endpoint=BatchEndpoint.CHAT_COMPLETIONS,
    completion_window="24h",
).to_dict()
```

- `add_chat_completion`, `add_completion` and `add_embedding` each add a
  `POST` line aimed at the matching endpoint. The body of each line is either
  an object with `to_dict()` or a mapping.
- `CreateBatchWithUploadFileRequest` combines an upload with `endpoint`,
  `completion_window` and `metadata`.
- Responses are parsed with `Batch.from_dict` and `ListBatchResponse.from_dict`.

## Errors

Every exception derives from `llmapi.errors.LLMAPIError`:

- `APIError` carries `message`, `type`, `code`, `param` and
  `http_status_code`. `APIError.from_payload(payload, http_status_code)`
  builds one from a response body, whether or not that body is wrapped in
  `"error"`.
- `RequestError(http_status_code, body)` is for an HTTP failure whose body has
  no API error object.
- `ChatCompletionInvalidModelError`, `ChatCompletionStreamNotSupportedError`
  and `ContentFieldsMisusedError` carry fixed default messages.