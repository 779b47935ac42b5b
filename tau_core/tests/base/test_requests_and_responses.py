from __future__ import annotations

import json

import pytest

from tau_core.base.models import Message, Model
from tau_core.base.protocol import Protocol, protocol_strings, valid_protocols
from tau_core.config import ModelConfig
from tau_core.ollama.client import OllamaProvider
from tau_core.request import ChatRequest, EmbeddingsRequest, VisionRequest
from tau_core.response import ChatResponse, EmbeddingsResponse, ResponseDecodeError, parse, parse_stream_chunk
from tau_core.response.tools import ToolCallFunction
from tau_core.tests.utils import chat_body


@pytest.fixture()
def ollama():
    return OllamaProvider("ollama", "http://h")


def test_protocol_catalogue():
    assert [p.value for p in valid_protocols()] == ["chat", "vision", "tools", "embeddings"]  # nosec B101 - asserts are appropriate in unit tests
    assert protocol_strings() == "chat, vision, tools, embeddings"  # nosec B101 - asserts are appropriate in unit tests
    assert Protocol.is_valid("tools")  # nosec B101 - asserts are appropriate in unit tests
    assert not Protocol.is_valid("audio")  # nosec B101 - asserts are appropriate in unit tests
    assert not Protocol.EMBEDDINGS.supports_streaming()  # nosec B101 - asserts are appropriate in unit tests
    assert all(p.supports_streaming() for p in (Protocol.CHAT, Protocol.VISION, Protocol.TOOLS))  # nosec B101 - asserts are appropriate in unit tests


def test_model_from_config_validates_capabilities():
    model = Model.from_config(ModelConfig(name="m", capabilities={"chat": {"temperature": 0.3}}))
    assert model.options_for(Protocol.CHAT) == {"temperature": 0.3}  # nosec B101 - asserts are appropriate in unit tests
    assert model.options_for(Protocol.TOOLS) == {}  # nosec B101 - asserts are appropriate in unit tests
    model.options_for(Protocol.CHAT)["temperature"] = 1.0
    assert model.options_for(Protocol.CHAT) == {"temperature": 0.3}  # nosec B101 - asserts are appropriate in unit tests

    with pytest.raises(ValueError) as ei:
        Model.from_config(ModelConfig(name="m", capabilities={"audio": {}}))
    assert "audio" in str(ei.value)  # nosec B101 - asserts are appropriate in unit tests


def test_request_copies_inputs_and_merges_options(ollama):
    model = Model(name="m", options={Protocol.CHAT: {"temperature": 0.1, "top_p": 0.5}})
    messages = [Message("user", "hi")]
    options = {"temperature": 0.7}
    request = ChatRequest(ollama, model, messages, options)

    messages.append(Message("user", "later"))
    options["top_p"] = 0.0

    assert request.protocol is Protocol.CHAT  # nosec B101 - asserts are appropriate in unit tests
    assert len(request.messages) == 1  # nosec B101 - asserts are appropriate in unit tests
    assert request.options == {"temperature": 0.7, "top_p": 0.5}  # nosec B101 - asserts are appropriate in unit tests
    headers = request.headers()
    headers["X-Extra"] = "1"
    assert request.headers() == {"Content-Type": "application/json"}  # nosec B101 - asserts are appropriate in unit tests


def test_vision_request_lifts_vision_options(ollama):
    model = Model(name="m", options={Protocol.VISION: {"vision_options": {"detail": "low"}, "max_tokens": 10}})
    request = VisionRequest(ollama, model, [Message("user", "x")], ["a.png"], vision_options={"detail": "high"})
    assert request.vision_options == {"detail": "high"}  # nosec B101 - asserts are appropriate in unit tests
    assert request.options == {"max_tokens": 10}  # nosec B101 - asserts are appropriate in unit tests

    body = json.loads(request.marshal())
    assert "vision_options" not in body  # nosec B101 - asserts are appropriate in unit tests
    assert body["messages"][0]["content"][1]["image_url"]["detail"] == "high"  # nosec B101 - asserts are appropriate in unit tests


def test_embeddings_request_accepts_single_and_batch(ollama):
    model = Model(name="e")
    assert json.loads(EmbeddingsRequest(ollama, model, "one").marshal())["input"] == "one"  # nosec B101 - asserts are appropriate in unit tests
    assert json.loads(EmbeddingsRequest(ollama, model, ("a", "b")).marshal())["input"] == ["a", "b"]  # nosec B101 - asserts are appropriate in unit tests


def test_chat_response_content_variants():
    assert ChatResponse().content() == ""  # nosec B101 - asserts are appropriate in unit tests
    text = parse(Protocol.CHAT, json.dumps(chat_body("hello")))
    assert text.content() == "hello"  # nosec B101 - asserts are appropriate in unit tests
    structured = parse(Protocol.VISION, json.dumps(chat_body([{"type": "text", "text": "hi"}])))
    assert json.loads(structured.content()) == [{"type": "text", "text": "hi"}]  # nosec B101 - asserts are appropriate in unit tests


def test_tool_call_arguments_decode():
    assert ToolCallFunction(name="f", arguments='{"a": 1}').parsed_arguments() == {"a": 1}  # nosec B101 - asserts are appropriate in unit tests
    assert ToolCallFunction(name="f", arguments="").parsed_arguments() == {}  # nosec B101 - asserts are appropriate in unit tests
    with pytest.raises(ValueError):
        ToolCallFunction(name="f", arguments="[1, 2]").parsed_arguments()


def test_embeddings_vectors_follow_index():
    resp = parse(
        Protocol.EMBEDDINGS,
        b'{"data": [{"embedding": [2.0], "index": 1}, {"embedding": [1.0], "index": 0}]}',
    )
    assert isinstance(resp, EmbeddingsResponse)  # nosec B101 - asserts are appropriate in unit tests
    assert resp.vectors() == [[1.0], [2.0]]  # nosec B101 - asserts are appropriate in unit tests


def test_parse_errors_are_decode_errors():
    with pytest.raises(ResponseDecodeError) as ei:
        parse(Protocol.CHAT, b"<html>")
    assert str(ei.value).startswith("failed to parse chat response")  # nosec B101 - asserts are appropriate in unit tests
    with pytest.raises(ResponseDecodeError):
        parse_stream_chunk(Protocol.EMBEDDINGS, b"{}")


def test_stream_chunk_ignores_wire_error_field():
    chunk = parse_stream_chunk(Protocol.TOOLS, '{"choices": [{"delta": {"content": "x"}}], "error": "remote"}')
    assert chunk.content() == "x"  # nosec B101 - asserts are appropriate in unit tests
    assert chunk.error is None  # nosec B101 - asserts are appropriate in unit tests
