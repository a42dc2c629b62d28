"""Tests for the remote keyword-ranking client.

WHY: The ranking service speaks free text. The parser decides which of
the model's lines become keywords, and the client maps HTTP failures to
typed errors that FallbackRanker catches.

HOW: Replies are served by httpx.MockTransport; no network access.
"""

import asyncio
import json

import httpx
import pytest

from listening_trainer.api.client import (
    RankingAPIError,
    RankingClient,
    RankingResponseError,
    build_prompt,
    parse_ranked_words,
)
from listening_trainer.api.models import ChatCompletion


def _completion(content):
    return {
        "model": "test-model",
        "choices": [{"message": {"role": "assistant", "content": content}}],
    }


def _run_rank(handler, target=5, auxiliary_text=""):
    async def _go():
        client = RankingClient(
            api_key="test-key",
            base_url="https://ranker.test/v1",
            model="test-model",
            transport=httpx.MockTransport(handler),
        )
        async with client:
            return await client.rank_keywords("Some transcript", auxiliary_text, target)

    return asyncio.run(_go())


class TestParseRankedWords:

    def test_strips_enumeration_and_punctuation(self):
        content = "1. Climate\n2) energy!\n- CO2\n* ok\n\nclimate\n• Renewable-energy"
        assert parse_ranked_words(content, 10) == [
            "climate", "energy", "co2", "renewableenergy",
        ]

    def test_words_starting_with_digits_are_kept(self):
        assert parse_ranked_words("3d\n3dprinting", 5) == ["3dprinting"]

    def test_truncates_to_target(self):
        content = "\n".join("word{}".format(i) for i in range(10))
        assert parse_ranked_words(content, 3) == ["word0", "word1", "word2"]

    def test_empty_content(self):
        assert parse_ranked_words("", 5) == []


class TestBuildPrompt:

    def test_requests_exact_count(self):
        assert "Select exactly 12 keywords" in build_prompt("text", "", 12)

    def test_transcript_is_truncated(self):
        prompt = build_prompt("z" * 5000, "", 5)
        assert "z" * 3000 in prompt
        assert "z" * 3001 not in prompt

    def test_auxiliary_text_is_truncated(self):
        prompt = build_prompt("text", "w" * 2000, 5)
        assert "w" * 1000 in prompt
        assert "w" * 1001 not in prompt

    def test_auxiliary_section_omitted_when_empty(self):
        assert "Questions" not in build_prompt("text", "", 5)


class TestChatCompletion:

    def test_from_dict(self):
        completion = ChatCompletion.from_dict(_completion("solar"))
        assert completion.content == "solar"
        assert completion.model == "test-model"

    def test_missing_choices(self):
        with pytest.raises(IndexError):
            ChatCompletion.from_dict({"choices": []})

    def test_non_string_content(self):
        with pytest.raises(TypeError):
            ChatCompletion.from_dict(_completion(None))

    def test_non_object_payload(self):
        with pytest.raises(TypeError):
            ChatCompletion.from_dict(["solar"])


class TestRankingClient:

    def test_posts_chat_completion_request(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion("1. solar\n2. carbon"))

        result = _run_rank(handler, target=5, auxiliary_text="Which energy source?")

        assert result == ["solar", "carbon"]
        assert seen["path"] == "/v1/chat/completions"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["model"] == "test-model"
        assert "Which energy source?" in seen["body"]["messages"][1]["content"]

    def test_error_status_raises_api_error(self):
        def handler(request):
            return httpx.Response(500, text="upstream exploded")

        with pytest.raises(RankingAPIError) as exc_info:
            _run_rank(handler)
        assert exc_info.value.status_code == 500
        assert "upstream exploded" in exc_info.value.message

    def test_malformed_body_raises_response_error(self):
        def handler(request):
            return httpx.Response(200, json={"choices": []})

        with pytest.raises(RankingResponseError):
            _run_rank(handler)

    def test_json_list_raises_response_error(self):
        def handler(request):
            return httpx.Response(200, json=["solar"])

        with pytest.raises(RankingResponseError):
            _run_rank(handler)

    def test_no_usable_words_raises_response_error(self):
        def handler(request):
            return httpx.Response(200, json=_completion("1. a\n2. to\n"))

        with pytest.raises(RankingResponseError):
            _run_rank(handler)

    def test_requires_api_key(self, monkeypatch):
        monkeypatch.delenv("KEYWORD_RANKER_API_KEY", raising=False)
        with pytest.raises(ValueError, match="KEYWORD_RANKER_API_KEY"):
            RankingClient()

    def test_requires_context_manager(self):
        client = RankingClient(api_key="test-key")
        with pytest.raises(RuntimeError, match="async context manager"):
            asyncio.run(client.rank_keywords("text", "", 5))
