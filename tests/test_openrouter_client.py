"""Tests for the OpenRouter client."""

import json

import httpx
import pytest
from pydantic import BaseModel

from openapi_directory.config import config
from openapi_directory.exceptions import LLMUnavailableError
from openapi_directory.integrations.llm.openrouter_client import OpenRouterClient


class Answer(BaseModel):
    detailed_description: str
    use_cases: list


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def make_client(handler, api_key="test-key"):
    transport = httpx.MockTransport(handler)
    return OpenRouterClient(api_key=api_key, http_client=httpx.Client(transport=transport))


def test_generate_structured():
    requests = []

    def handler(request):
        requests.append(request)
        content = '```json\n{"detailed_description": "Test description", "use_cases": ["case1"]}\n```'
        return httpx.Response(200, json=completion(content))

    client = make_client(handler)
    answer = client.generate_structured("Describe the endpoint", Answer)

    assert answer.detailed_description == "Test description"
    assert answer.use_cases == ["case1"]

    request = requests[0]
    assert request.url == "https://openrouter.ai/api/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer test-key"
    body = json.loads(request.content)
    assert body["response_format"] == {"type": "json_object"}
    assert body["messages"][1] == {"role": "user", "content": "Describe the endpoint"}
    assert "detailed_description" in body["messages"][0]["content"]


def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(config, "openrouter_api_key", None)

    def handler(request):
        raise AssertionError("no request expected")

    client = make_client(handler, api_key=None)

    with pytest.raises(LLMUnavailableError):
        client.generate_structured("prompt", Answer)


def test_http_error():
    client = make_client(lambda request: httpx.Response(503, text="unavailable"))

    with pytest.raises(LLMUnavailableError):
        client.generate_structured("prompt", Answer)


def test_unexpected_response_shape():
    client = make_client(lambda request: httpx.Response(200, json={"error": "quota"}))

    with pytest.raises(LLMUnavailableError):
        client.generate_structured("prompt", Answer)


def test_answer_not_matching_model():
    client = make_client(lambda request: httpx.Response(200, json=completion("{invalid json}")))

    with pytest.raises(LLMUnavailableError):
        client.generate_structured("prompt", Answer)
