import json

import pytest

from llmapi.batch import (
    Batch,
    BatchEndpoint,
    BatchLineItem,
    BatchRequestCounts,
    CreateBatchRequest,
    CreateBatchWithUploadFileRequest,
    ListBatchResponse,
    UploadBatchFileRequest,
)
from llmapi.chat import ChatCompletionMessage, ChatCompletionRequest

BATCH_JSON = """{
  "id": "batch_abc123",
  "object": "batch",
  "endpoint": "/v1/completions",
  "errors": null,
  "input_file_id": "file-abc123",
  "completion_window": "24h",
  "status": "completed",
  "output_file_id": "file-cvaTdG",
  "error_file_id": "file-HOWS94",
  "created_at": 1711471533,
  "in_progress_at": 1711471538,
  "expires_at": 1711557933,
  "finalizing_at": 1711493133,
  "completed_at": 1711493163,
  "failed_at": null,
  "expired_at": null,
  "cancelling_at": null,
  "cancelled_at": null,
  "request_counts": {"total": 100, "completed": 95, "failed": 5},
  "metadata": {"customer_id": "user_123456789", "batch_description": "Nightly eval job"}
}"""


def _chat_request():
    return ChatCompletionRequest(
        max_tokens=5,
        model="gpt-3.5-turbo",
        messages=[ChatCompletionMessage(role="user", content="Hello!")],
    )


def test_add_chat_completion():
    request = UploadBatchFileRequest()
    request.add_chat_completion("req-1", _chat_request())
    request.add_chat_completion("req-2", _chat_request())
    expected = (
        b'{"custom_id":"req-1","body":{"model":"gpt-3.5-turbo","messages":[{"role":"user",'
        b'"content":"Hello!"}],"max_tokens":5},"method":"POST","url":"/v1/chat/completions"}\n'
        b'{"custom_id":"req-2","body":{"model":"gpt-3.5-turbo","messages":[{"role":"user",'
        b'"content":"Hello!"}],"max_tokens":5},"method":"POST","url":"/v1/chat/completions"}'
    )
    assert request.to_jsonl() == expected


def test_add_completion():
    request = UploadBatchFileRequest()
    request.add_completion("req-1", {"model": "gpt-3.5-turbo", "user": "Hello"})
    request.add_completion("req-2", {"model": "gpt-3.5-turbo", "user": "Hello"})
    expected = (
        b'{"custom_id":"req-1","body":{"model":"gpt-3.5-turbo","user":"Hello"},'
        b'"method":"POST","url":"/v1/completions"}\n'
        b'{"custom_id":"req-2","body":{"model":"gpt-3.5-turbo","user":"Hello"},'
        b'"method":"POST","url":"/v1/completions"}'
    )
    assert request.to_jsonl() == expected


def test_add_embedding():
    request = UploadBatchFileRequest()
    request.add_embedding("req-1", {"input": ["Hello", "World"], "model": "gpt-3.5-turbo"})
    request.add_embedding(
        "req-2", {"input": ["Hello", "World"], "model": "text-embedding-ada-002"}
    )
    expected = (
        b'{"custom_id":"req-1","body":{"input":["Hello","World"],"model":"gpt-3.5-turbo"},'
        b'"method":"POST","url":"/v1/embeddings"}\n'
        b'{"custom_id":"req-2","body":{"input":["Hello","World"],'
        b'"model":"text-embedding-ada-002"},"method":"POST","url":"/v1/embeddings"}'
    )
    assert request.to_jsonl() == expected


def test_empty_jsonl():
    assert UploadBatchFileRequest().to_jsonl() == b""


def test_line_item_rejects_bad_body():
    item = BatchLineItem("req-1", 42, BatchEndpoint.COMPLETIONS)
    with pytest.raises(TypeError):
        item.to_dict()


def test_line_item_to_json_round_trip():
    item = BatchLineItem("req-1", {"model": "gpt-3.5-turbo"}, BatchEndpoint.EMBEDDINGS)
    assert json.loads(item.to_json()) == {
        "custom_id": "req-1",
        "body": {"model": "gpt-3.5-turbo"},
        "method": "POST",
        "url": "/v1/embeddings",
    }


def test_create_batch_request_to_dict():
    request = CreateBatchRequest(
        input_file_id="file-abc",
        endpoint=BatchEndpoint.CHAT_COMPLETIONS,
        completion_window="24h",
    )
    assert request.to_dict() == {
        "input_file_id": "file-abc",
        "endpoint": "/v1/chat/completions",
        "completion_window": "24h",
        "metadata": None,
    }


def test_create_with_upload_collects_lines():
    request = CreateBatchWithUploadFileRequest(endpoint=BatchEndpoint.CHAT_COMPLETIONS)
    request.add_chat_completion("req-1", _chat_request())
    assert len(request.lines) == 1
    assert request.lines[0].url == BatchEndpoint.CHAT_COMPLETIONS
    assert json.loads(request.to_jsonl())["custom_id"] == "req-1"


def test_batch_from_dict():
    batch = Batch.from_dict(json.loads(BATCH_JSON), headers={"X-CUSTOM-HEADER": "test"})
    assert batch.id == "batch_abc123"
    assert batch.endpoint == "/v1/completions"
    assert batch.errors is None
    assert batch.output_file_id == "file-cvaTdG"
    assert batch.created_at == 1711471533
    assert batch.failed_at is None
    assert batch.request_counts == BatchRequestCounts(total=100, completed=95, failed=5)
    assert batch.metadata["batch_description"] == "Nightly eval job"
    assert batch.headers["X-CUSTOM-HEADER"] == "test"


def test_list_batch_response():
    payload = {
        "object": "list",
        "data": [json.loads(BATCH_JSON)],
        "first_id": "batch_abc123",
        "last_id": "batch_abc456",
        "has_more": True,
    }
    listing = ListBatchResponse.from_dict(payload)
    assert listing.object == "list"
    assert [b.id for b in listing.data] == ["batch_abc123"]
    assert listing.last_id == "batch_abc456"
    assert listing.has_more is True