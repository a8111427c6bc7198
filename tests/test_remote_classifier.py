"""
Unit tests for the Gemini remote classifier.
"""

import asyncio
import json

import httpx
import pytest

from tab_topics.agents.models import Tab, UNCATEGORIZED
from tab_topics.agents.remote_classifier import RemoteClassifier
from tab_topics.errors import ConfigurationError, RemoteClassifierError


def gemini_reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_classifier(handler, api_key="test-gemini-key"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RemoteClassifier(api_key=api_key, model="gemini-2.0-flash", http_client=client)


@pytest.fixture
def tabs():
    return [
        Tab(id=1, title="Neo4j Documentation", url="https://neo4j.com/docs"),
        Tab(id=2, title="React Hooks", url="https://react.dev/reference/react"),
        Tab(id=3, title="Weather Forecast", url="https://weather.com"),
    ]


class TestPrompt:
    """Tests for prompt construction."""

    def test_lists_tabs_in_order(self, tabs):
        classifier = RemoteClassifier(api_key="key")
        prompt = classifier.build_prompt(tabs, ["Databases"])

        assert '1. Title: "Neo4j Documentation", URL: "https://neo4j.com/docs"' in prompt
        assert '3. Title: "Weather Forecast", URL: "https://weather.com"' in prompt
        assert "Existing Categories: Databases" in prompt

    def test_no_existing_categories(self, tabs):
        prompt = RemoteClassifier(api_key="key").build_prompt(tabs, [])
        assert "Existing Categories: None" in prompt


class TestClassify:
    """Tests for the request/response cycle."""

    def test_pairs_lines_with_tabs(self, tabs):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=gemini_reply("Databases\n\nweb development!\nWeather"))

        assignments = asyncio.run(make_classifier(handler).classify(tabs, ["Databases"]))

        assert [a.topic for a in assignments] == ["Databases", "Web Development", "Weather"]
        assert [a.tab.id for a in assignments] == [1, 2, 3]

        assert len(requests) == 1
        request = requests[0]
        assert request.method == "POST"
        assert request.url.path == "/v1beta/models/gemini-2.0-flash:generateContent"
        assert request.url.params["key"] == "test-gemini-key"
        body = json.loads(request.content)
        assert body["generationConfig"] == {"temperature": 0.1}
        assert "Neo4j Documentation" in body["contents"][0]["parts"][0]["text"]

    def test_missing_lines_are_uncategorized(self, tabs):
        def handler(request):
            return httpx.Response(200, json=gemini_reply("Databases"))

        assignments = asyncio.run(make_classifier(handler).classify(tabs, []))

        assert [a.topic for a in assignments] == ["Databases", UNCATEGORIZED, UNCATEGORIZED]

    def test_non_2xx_raises(self, tabs):
        def handler(request):
            return httpx.Response(429, json={"error": "quota"})

        with pytest.raises(RemoteClassifierError) as exc_info:
            asyncio.run(make_classifier(handler).classify(tabs, []))
        assert exc_info.value.status_code == 429

    def test_empty_text_raises(self, tabs):
        def handler(request):
            return httpx.Response(200, json=gemini_reply("   "))

        with pytest.raises(RemoteClassifierError):
            asyncio.run(make_classifier(handler).classify(tabs, []))

    def test_malformed_body_raises(self, tabs):
        def handler(request):
            return httpx.Response(200, json={"candidates": []})

        with pytest.raises(RemoteClassifierError):
            asyncio.run(make_classifier(handler).classify(tabs, []))

    def test_transport_error_raises(self, tabs):
        def handler(request):
            raise httpx.ConnectError("offline", request=request)

        with pytest.raises(RemoteClassifierError):
            asyncio.run(make_classifier(handler).classify(tabs, []))

    def test_missing_key_short_circuits(self, tabs):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=gemini_reply("x"))

        with pytest.raises(ConfigurationError):
            asyncio.run(make_classifier(handler, api_key="").classify(tabs, []))
        assert calls == []


class TestParseCategories:
    """Tests for response parsing."""

    def test_strips_punctuation_and_title_cases(self):
        tabs = [Tab(id=1, title="a"), Tab(id=2, title="b")]
        assignments = RemoteClassifier.parse_categories("- SHOPPING\n\"news & media\"", tabs)

        assert [a.topic for a in assignments] == ["Shopping", "News  Media"]

    def test_punctuation_only_line_is_uncategorized(self):
        tabs = [Tab(id=1, title="a")]
        assignments = RemoteClassifier.parse_categories("---", tabs)

        assert assignments[0].topic == UNCATEGORIZED
