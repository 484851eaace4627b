import httpx
import orjson
import pytest

from fep.config import Settings
from fep.enrichment.llm import GeminiClient, OpenAiClient, build_client
from fep.errors import LlmError


def _settings(**overrides):
    values = {
        "GOOGLE_API_KEY": "g-key",
        "OPENAI_API_KEY": "o-key",
        "GEMINI_API_BASE_URL": "https://gemini.test/v1beta",
        "OPENAI_API_URL": "https://openai.test/v1/chat/completions",
    }
    values.update(overrides)
    return Settings(**values)


def _http(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_gemini_sends_prompt_and_reads_text_and_usage():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        seen["body"] = orjson.loads(request.content)
        return httpx.Response(
            200,
            json={
                "candidates": [{"content": {"parts": [{"text": '{"category": "music"}'}]}}],
                "usageMetadata": {"promptTokenCount": 321, "candidatesTokenCount": 12},
            },
        )

    client = GeminiClient(_settings(), http_client=_http(handler))
    completion = client.complete("hello")

    assert completion.text == '{"category": "music"}'
    assert (completion.prompt_tokens, completion.completion_tokens) == (321, 12)
    assert seen["url"].path == "/v1beta/models/gemini-2.5-flash:generateContent"
    assert seen["url"].params["key"] == "g-key"
    assert seen["body"]["contents"][0]["parts"][0]["text"] == "hello"
    assert seen["body"]["generationConfig"]["responseMimeType"] == "application/json"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="unavailable"),
        httpx.Response(200, text="<html>"),
        httpx.Response(200, json={"candidates": []}),
        httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": ""}]}}]}),
    ],
)
def test_gemini_failures_raise_llm_error(response):
    client = GeminiClient(_settings(), http_client=_http(lambda request: response))
    with pytest.raises(LlmError):
        client.complete("hello")


def test_gemini_transport_error_raises_llm_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client = GeminiClient(_settings(), http_client=_http(handler))
    with pytest.raises(LlmError):
        client.complete("hello")


@pytest.mark.parametrize(
    ("client_class", "missing"),
    [(GeminiClient, "GOOGLE_API_KEY"), (OpenAiClient, "OPENAI_API_KEY")],
)
def test_missing_api_key_fails_the_call_not_the_construction(client_class, missing):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={})

    client = client_class(_settings(**{missing: None}), http_client=_http(handler))

    with pytest.raises(LlmError, match=missing):
        client.complete("hello")
    assert requests == []


def test_openai_sends_bearer_and_json_mode():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = orjson.loads(request.content)
        return httpx.Response(
            200,
            json={
                "choices": [{"message": {"content": '{"age_min": 3}'}}],
                "usage": {"prompt_tokens": 50, "completion_tokens": 9},
            },
        )

    client = OpenAiClient(_settings(), http_client=_http(handler))
    completion = client.complete("hello")

    assert completion.text == '{"age_min": 3}'
    assert completion.prompt_tokens == 50
    assert seen["auth"] == "Bearer o-key"
    assert seen["body"]["model"] == "gpt-4o-mini"
    assert seen["body"]["response_format"] == {"type": "json_object"}
    assert [m["role"] for m in seen["body"]["messages"]] == ["system", "user"]


def test_openai_error_status_raises_llm_error():
    client = OpenAiClient(
        _settings(), http_client=_http(lambda request: httpx.Response(429, text="slow down"))
    )
    with pytest.raises(LlmError, match="429"):
        client.complete("hello")


def test_build_client_follows_provider_setting():
    assert isinstance(build_client(_settings(ENRICHMENT_AI_PROVIDER="gemini")), GeminiClient)
    assert isinstance(build_client(_settings(ENRICHMENT_AI_PROVIDER="openai")), OpenAiClient)
