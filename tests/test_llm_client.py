"""Tests for the text-generation client and its JSON parsing helpers."""
import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from app.errors import UpstreamGenerationFailure
from app.models.generation import GeneratedChallenges, GeneratedSurvey
from app.services.llm_client import GenerationClient, parse_llm_json, strip_llm_fences


def _reply(*texts: str):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=t) for t in texts])


def _client_returning(response=None, side_effect=None) -> GenerationClient:
    anthropic_client = MagicMock()
    anthropic_client.messages.create = AsyncMock(return_value=response, side_effect=side_effect)
    return GenerationClient(api_key=None, model="test-model", client=anthropic_client)


class TestStripFences:

    def test_json_fence(self):
        assert strip_llm_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_llm_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_text_around_fence(self):
        assert strip_llm_fences('Here you go:\n```json\n{"a": 1}\n```\nThanks') == '{"a": 1}'

    def test_no_fence(self):
        assert strip_llm_fences('  {"a": 1}  ') == '{"a": 1}'


class TestParseJson:

    def test_valid(self):
        parsed = parse_llm_json(
            '{"challenges": [{"use_case_id": "UC-001", "challenge_type": "kpi"}]}',
            GeneratedChallenges,
        )
        assert parsed.challenges[0].use_case_id == "UC-001"

    def test_not_json(self):
        with pytest.raises(UpstreamGenerationFailure, match="not valid JSON"):
            parse_llm_json("I cannot help with that.", GeneratedChallenges)

    def test_schema_mismatch(self):
        with pytest.raises(UpstreamGenerationFailure, match="GeneratedSurvey"):
            parse_llm_json('{"questions": []}', GeneratedSurvey)


class TestGenerationClient:

    def test_disabled_without_key(self):
        client = GenerationClient(api_key=None, model="test-model")

        assert not client.enabled
        with pytest.raises(UpstreamGenerationFailure):
            asyncio.run(client.complete("system", [{"role": "user", "content": "hi"}]))

    def test_complete_joins_text_blocks(self):
        client = _client_returning(_reply("Hello ", "world"))

        text = asyncio.run(client.complete("system", [{"role": "user", "content": "hi"}]))

        assert text == "Hello world"
        kwargs = client._client.messages.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["system"] == "system"

    def test_empty_reply(self):
        client = _client_returning(_reply("   "))
        with pytest.raises(UpstreamGenerationFailure, match="no text"):
            asyncio.run(client.complete("system", [{"role": "user", "content": "hi"}]))

    def test_api_error_is_wrapped(self):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        client = _client_returning(side_effect=anthropic.APIConnectionError(request=request))

        with pytest.raises(UpstreamGenerationFailure, match="Generation call failed"):
            asyncio.run(client.complete("system", [{"role": "user", "content": "hi"}]))

    def test_generate_json(self):
        client = _client_returning(_reply(
            '```json\n{"challenges": [{"use_case_id": "UC-002", "challenge_type": "benefit",'
            ' "original_value": 100, "challenged_value": 50}]}\n```'
        ))

        result = asyncio.run(client.generate_json("system", "prompt", GeneratedChallenges))

        assert result.challenges[0].use_case_id == "UC-002"
        assert result.challenges[0].challenged_value == 50
