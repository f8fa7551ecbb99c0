"""Tests for the Gemini filler classification client.

The Gemini API is never called: requests go through httpx.MockTransport.
"""

import json

import httpx
import pytest

from clean_speech.config import load_api_key, load_timeout
from clean_speech.llm import (
    FILLER_SYSTEM_PROMPT,
    ClassificationError,
    FillerClassifier,
    GeminiAPIError,
    GeminiClient,
    parse_classification,
    serialize_transcript,
)
from clean_speech.models import FillerWord
from conftest import make_words


def gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_client(handler) -> GeminiClient:
    return GeminiClient(
        api_key="test-key",
        model="gemini-test",
        transport=httpx.MockTransport(handler),
    )


# ---------------------------------------------------------------------------
# Serialization and parsing
# ---------------------------------------------------------------------------


class TestSerializeTranscript:

    def test_compact_word_array(self):
        words = make_words(("um", 0.123, 0.356), ("hello", 1.0, 1.4))
        assert json.loads(serialize_transcript(words)) == [
            {"word": "um", "start": 0.12, "end": 0.36},
            {"word": "hello", "start": 1.0, "end": 1.4},
        ]


class TestParseClassification:

    def test_valid_reply(self):
        reply = '{"remove_segments": [{"start": 1.5, "end": 1.8, "reason": "FILLER: uh"},' \
                ' {"start": 0.5, "end": 0.8, "reason": "FILLER: um"}]}'
        segments = parse_classification(reply)
        assert [(s.start, s.end) for s in segments] == [(0.5, 0.8), (1.5, 1.8)]
        assert segments[0].reason == FillerWord("um")

    def test_reply_wrapped_in_prose(self):
        reply = 'Here you go:\n```json\n{"remove_segments": [{"start": 1, "end": 2}]}\n```'
        segments = parse_classification(reply)
        assert len(segments) == 1
        assert segments[0].reason == FillerWord("filler")
        assert segments[0].reason.label == "FILLER_WORD: filler"

    def test_empty_list_is_valid(self):
        assert parse_classification('{"remove_segments": []}') == []

    def test_degenerate_segments_are_skipped(self):
        reply = json.dumps({"remove_segments": [
            {"start": 2.0, "end": 2.0},
            {"start": 3.0, "end": 2.5},
            {"start": -1.0, "end": 0.5},
            {"start": 4.0, "end": 4.2, "reason": "you know"},
        ]})
        segments = parse_classification(reply)
        assert [s.reason for s in segments] == [FillerWord("you know")]

    @pytest.mark.parametrize("reply", [
        "no json here",
        "{not valid json}",
        '{"segments": []}',
        '{"remove_segments": {"start": 1, "end": 2}}',
        '{"remove_segments": ["um"]}',
        '{"remove_segments": [{"start": "1.0", "end": 2}]}',
        '{"remove_segments": [{"start": true, "end": 2}]}',
        '{"remove_segments": [{"end": 2}]}',
        '{"remove_segments": [{"start": NaN, "end": 1.0}]}',
        '{"remove_segments": [{"start": 0.5, "end": Infinity}]}',
        '{"remove_segments": [{"start": -Infinity, "end": 1.0}]}',
        '{"remove_segments": [{"start": 0, "end": 1' + "0" * 400 + '}]}',
    ])
    def test_bad_shapes_raise(self, reply):
        with pytest.raises(ClassificationError):
            parse_classification(reply)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


class TestGeminiClient:

    def test_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["key"] = request.url.params.get("key")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=gemini_reply("hi"))

        with make_client(handler) as client:
            assert client.send_chat_request("system", "user") == "hi"

        assert seen["path"].endswith("/models/gemini-test:generateContent")
        assert seen["key"] == "test-key"
        body = seen["body"]
        assert body["system_instruction"]["parts"][0]["text"] == "system"
        assert body["contents"][0]["role"] == "user"
        assert body["contents"][0]["parts"][0]["text"] == "user"
        assert body["generationConfig"]["temperature"] == 0.3

    def test_error_status_raises(self):
        def handler(request):
            return httpx.Response(429, text="quota exceeded")

        with make_client(handler) as client:
            with pytest.raises(GeminiAPIError) as exc_info:
                client.send_chat_request("s", "u")
        assert exc_info.value.status_code == 429
        assert "quota exceeded" in str(exc_info.value)

    def test_reply_without_candidates_raises(self):
        def handler(request):
            return httpx.Response(200, json={"candidates": []})

        with make_client(handler) as client:
            with pytest.raises(GeminiAPIError):
                client.send_chat_request("s", "u")

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert not GeminiClient.is_available()
        with pytest.raises(ValueError):
            GeminiClient()

    def test_placeholder_key_is_ignored(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "paste-your-key-here")
        assert load_api_key() is None
        monkeypatch.setenv("GEMINI_API_KEY", "  real-key ")
        assert load_api_key() == "real-key"

    def test_timeout_from_environment(self, monkeypatch):
        monkeypatch.setenv("GEMINI_TIMEOUT_S", "45")
        assert load_timeout() == 45.0
        monkeypatch.delenv("GEMINI_TIMEOUT_S")
        assert load_timeout() == 120.0

    @pytest.mark.parametrize("value", ["soon", "0", "-5", "nan", "inf"])
    def test_invalid_timeout_falls_back_to_default(self, monkeypatch, value):
        monkeypatch.setenv("GEMINI_TIMEOUT_S", value)
        assert load_timeout() == 120.0

    def test_invalid_timeout_does_not_break_client(self, monkeypatch):
        monkeypatch.setenv("GEMINI_TIMEOUT_S", "two minutes")
        with make_client(lambda request: httpx.Response(200, json=gemini_reply("ok"))) as client:
            assert client.send_chat_request("s", "u") == "ok"


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


class TestFillerClassifier:

    words = make_words(("um", 0.0, 0.3), ("hello", 0.4, 0.8))

    def test_success(self):
        def handler(request):
            body = json.loads(request.content)
            assert body["system_instruction"]["parts"][0]["text"] == FILLER_SYSTEM_PROMPT
            assert '"word": "um"' in body["contents"][0]["parts"][0]["text"]
            reply = '{"remove_segments": [{"start": 0.0, "end": 0.3, "reason": "FILLER: um"}]}'
            return httpx.Response(200, json=gemini_reply(reply))

        with make_client(handler) as client:
            result = FillerClassifier(client).classify(self.words)

        assert result.ok
        assert [s.reason for s in result.segments] == [FillerWord("um")]

    def test_network_error_becomes_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with make_client(handler) as client:
            result = FillerClassifier(client).classify(self.words)

        assert not result.ok
        assert "connection refused" in result.error

    def test_timeout_becomes_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with make_client(handler) as client:
            result = FillerClassifier(client).classify(self.words)

        assert not result.ok

    def test_api_error_becomes_failure(self):
        def handler(request):
            return httpx.Response(500, text="internal")

        with make_client(handler) as client:
            result = FillerClassifier(client).classify(self.words)

        assert not result.ok
        assert "500" in result.error

    def test_bad_json_becomes_failure(self):
        def handler(request):
            return httpx.Response(200, json=gemini_reply("Sorry, I can't help with that."))

        with make_client(handler) as client:
            result = FillerClassifier(client).classify(self.words)

        assert not result.ok
        assert result.segments == []

    def test_non_finite_bounds_become_failure(self):
        def handler(request):
            reply = '{"remove_segments": [{"start": 0.0, "end": Infinity}]}'
            return httpx.Response(200, json=gemini_reply(reply))

        with make_client(handler) as client:
            result = FillerClassifier(client).classify(self.words)

        assert not result.ok
        assert "non-finite" in result.error
