"""
Tests for decision_journal/ai/client.py.

GeminiClient is exercised against ``httpx.MockTransport``; no network.
"""

from __future__ import annotations

import json

import httpx
import pytest

from decision_journal.ai.client import BaseLLMClient, GeminiClient, _candidate_text, client_from_config
from decision_journal.config import LLMConfig
from decision_journal.models.ai import Parsed, ParseFailure, RecommendedOption


def _gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _client(handler, **kwargs) -> GeminiClient:
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return GeminiClient(api_key="test-key", http_client=http, **kwargs)


class TestGeminiClient:
    def test_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers.get("x-goog-api-key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_gemini_body("Go out."))

        client = _client(handler, fast_model="fast-1", temperature=0.3)
        assert client.generate_text("Pizza or sushi?") == "Go out."

        assert seen["url"].endswith("/models/fast-1:generateContent")
        assert seen["key"] == "test-key"
        assert seen["body"]["contents"][0]["parts"][0]["text"] == "Pizza or sushi?"
        assert seen["body"]["generationConfig"] == {"temperature": 0.3}

    def test_json_mode_and_model_override(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_gemini_body("{}"))

        _client(handler).generate_text("x", model="pro-9", json_mode=True)
        assert "/models/pro-9:" in seen["url"]
        assert seen["body"]["generationConfig"]["responseMimeType"] == "application/json"

    def test_http_error_propagates(self):
        client = _client(lambda request: httpx.Response(500, json={"error": "boom"}))
        with pytest.raises(httpx.HTTPStatusError):
            client.generate_text("x")

    def test_missing_key(self):
        client = GeminiClient(api_key=None)
        with pytest.raises(RuntimeError, match="must be set"):
            client.generate_text("x")

    def test_extract_structured_success(self):
        payload = {"recommended_option": "Tea", "reasoning": "Calmer"}
        client = _client(lambda request: httpx.Response(200, json=_gemini_body(json.dumps(payload))))
        result = client.extract_structured("Pick one", RecommendedOption)
        assert isinstance(result, Parsed)
        assert result.value.recommended_option == "Tea"

    def test_extract_structured_appends_schema(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["prompt"] = json.loads(request.content)["contents"][0]["parts"][0]["text"]
            return httpx.Response(200, json=_gemini_body("not json"))

        result = _client(handler).extract_structured("Pick one", RecommendedOption)
        assert isinstance(result, ParseFailure)
        assert seen["prompt"].startswith("Pick one")
        assert "recommended_option" in seen["prompt"]


class TestCandidateText:
    def test_joins_parts(self):
        body = {"candidates": [{"content": {"parts": [{"text": "a"}, {"text": "b"}]}}]}
        assert _candidate_text(body) == "ab"

    def test_no_candidates(self):
        assert _candidate_text({"promptFeedback": {"blockReason": "SAFETY"}}) == ""


class TestClientFromConfig:
    def test_reads_key_from_env(self, monkeypatch):
        monkeypatch.setenv("MY_KEY", "abc")
        client = client_from_config(LLMConfig(api_key_env="MY_KEY", fast_model="f", pro_model="p"))
        assert client.api_key == "abc"
        assert (client.fast_model, client.pro_model) == ("f", "p")

    def test_base_class_is_abstract(self):
        with pytest.raises(TypeError):
            BaseLLMClient()
