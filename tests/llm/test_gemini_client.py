import json

import httpx
import pytest

from extractly.config import Settings
from extractly.errors import ConfigurationError, LLMResponseError
from extractly.llm.model import GeminiClient


def make_client(handler, **kwargs):
    return GeminiClient(api_key="secret", transport=httpx.MockTransport(handler), **kwargs)


def test_generate_posts_prompt_and_returns_text():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"candidates": [{"content": {"parts": [{"text": '{"parsed_fields": '}, {"text": "[]}"}]}}]},
        )

    client = make_client(handler)
    assert client.generate("extract things") == '{"parsed_fields": []}'
    assert seen["url"] == (
        "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.5-pro:generateContent"
    )
    assert seen["key"] == "secret"
    assert seen["body"]["contents"][0]["parts"][0]["text"] == "extract things"
    assert seen["body"]["generationConfig"] == {"temperature": 0.4, "topK": 60, "topP": 0.9}
    client.close()


def test_http_errors_propagate():
    client = make_client(lambda request: httpx.Response(503, json={"error": {"message": "overloaded"}}))
    with pytest.raises(httpx.HTTPStatusError):
        client.generate("anything")


def test_blocked_prompt_raises():
    client = make_client(
        lambda request: httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})
    )
    with pytest.raises(LLMResponseError, match="SAFETY"):
        client.generate("anything")


def test_empty_parts_raise():
    client = make_client(
        lambda request: httpx.Response(200, json={"candidates": [{"content": {"parts": []}}]})
    )
    with pytest.raises(LLMResponseError):
        client.generate("anything")


def test_missing_api_key():
    with pytest.raises(ConfigurationError):
        GeminiClient(api_key=None)
    with pytest.raises(ConfigurationError):
        GeminiClient.from_settings(Settings(gemini_api_key=None))


def test_from_settings_uses_model_and_base_url():
    client = GeminiClient.from_settings(
        Settings(gemini_api_key="k", gemini_model="gemini-2.5-flash", gemini_base_url="http://llm.local/v1/")
    )
    assert client.model_id == "gemini-2.5-flash"
    assert client.base_url == "http://llm.local/v1"
    client.close()


@pytest.mark.parametrize(
    "body",
    [
        ["not", "an", "object"],
        {"candidates": "nope"},
        {"candidates": ["just a string"]},
        {"candidates": [{"content": "text"}]},
        {"candidates": [{"content": {"parts": ["raw text"]}}]},
        {"promptFeedback": "blocked"},
    ],
)
def test_malformed_envelope_raises(body):
    client = make_client(lambda request: httpx.Response(200, json=body))
    with pytest.raises(LLMResponseError):
        client.generate("anything")
