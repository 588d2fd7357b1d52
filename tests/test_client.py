import asyncio
import json

import httpx
import pytest

from bookrec.client import GeminiError, GeminiResponseError, extract_text

from conftest import gemini_body


def test_generate_posts_prompt_and_returns_first_part(make_client):
    seen = {}

    def handler(request):
        seen["request"] = request
        return httpx.Response(200, json=gemini_body("Some books"))

    text = asyncio.run(make_client(handler).generate("Recommend books"))

    assert text == "Some books"
    request = seen["request"]
    assert request.method == "POST"
    assert request.url.path == "/v1/models/gemini-2.5-flash:generateContent"
    assert request.url.params["key"] == "test-key"
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {"contents": [{"parts": [{"text": "Recommend books"}]}]}


def test_missing_api_key_fails_before_any_request(make_client):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=gemini_body("x"))

    with pytest.raises(GeminiError, match="Gemini API key not found"):
        asyncio.run(make_client(handler, gemini_api_key="").generate("p"))
    assert calls == []


def test_http_error_uses_api_error_message(make_client):
    def handler(request):
        return httpx.Response(403, json={"error": {"code": 403, "message": "API key not valid"}})

    with pytest.raises(GeminiError) as exc:
        asyncio.run(make_client(handler).generate("p"))
    assert str(exc.value) == "API error: 403 - API key not valid"
    assert not isinstance(exc.value, GeminiResponseError)


def test_http_error_falls_back_to_reason_phrase(make_client):
    def handler(request):
        return httpx.Response(500, text="oops")

    with pytest.raises(GeminiError, match="API error: 500 - Internal Server Error"):
        asyncio.run(make_client(handler).generate("p"))


def test_transport_failure_is_a_gemini_error(make_client):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GeminiError, match="connection refused"):
        asyncio.run(make_client(handler).generate("p"))


def test_non_json_success_body(make_client):
    def handler(request):
        return httpx.Response(200, text="<html>")

    with pytest.raises(GeminiError, match="not valid JSON"):
        asyncio.run(make_client(handler).generate("p"))


def test_extract_text_rejects_candidate_without_parts():
    with pytest.raises(GeminiResponseError, match="Invalid response structure from API"):
        extract_text({"candidates": [{"content": {"parts": []}}]})
    with pytest.raises(GeminiResponseError, match="Invalid response structure from API"):
        extract_text({"candidates": [{"finishReason": "SAFETY"}]})


def test_extract_text_reports_error_body():
    with pytest.raises(GeminiResponseError, match="API Error: quota exceeded"):
        extract_text({"error": {"message": "quota exceeded"}})
    with pytest.raises(GeminiResponseError, match="API Error: Unknown error"):
        extract_text({"error": {"code": 500}})


def test_extract_text_empty_body():
    with pytest.raises(GeminiResponseError, match="No recommendations received from API"):
        extract_text({"candidates": []})
    with pytest.raises(GeminiResponseError, match="No recommendations received from API"):
        extract_text({})
