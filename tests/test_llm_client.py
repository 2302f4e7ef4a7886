import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from exceptions import InvalidAnalysisError, ProviderUnavailableError
from llm.client import LLMClient
from llm.schemas import EMOTION_VOCABULARY, MOOD_ANALYSIS_JSON_SCHEMA, MoodAnalysis


VALID_PAYLOAD = {
    "overall_mood_score": 82,
    "energy_level": 55,
    "emotional_complexity": 20,
    "dominant_emotions": ["joy", "gratitude", "serenity"],
}


def _completion(content, finish_reason="stop"):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content), finish_reason=finish_reason)]
    )


def _client_with_response(create):
    """返回一个LLMClient，其底层openai调用被替换为create"""
    client = LLMClient()
    fake_openai = MagicMock()
    fake_openai.chat.completions.create = create
    client._get_client = MagicMock(return_value=(fake_openai, "test-model"))
    return client, fake_openai


def test_vocabulary_has_23_lowercase_terms():
    assert len(EMOTION_VOCABULARY) == 23
    assert len(set(EMOTION_VOCABULARY)) == 23
    assert all(term == term.lower() for term in EMOTION_VOCABULARY)


def test_json_schema_matches_contract():
    schema = MOOD_ANALYSIS_JSON_SCHEMA["schema"]
    emotions = schema["properties"]["dominant_emotions"]
    assert set(schema["required"]) == set(VALID_PAYLOAD)
    assert emotions["minItems"] == 3
    assert emotions["maxItems"] == 5
    assert emotions["items"]["enum"] == list(EMOTION_VOCABULARY)


def test_parse_valid_response():
    analysis = LLMClient.parse_mood_analysis(json.dumps(VALID_PAYLOAD))
    assert analysis == MoodAnalysis(**VALID_PAYLOAD)


def test_parse_fenced_response():
    text = f"好的，分析如下：\n```json\n{json.dumps(VALID_PAYLOAD)}\n```"
    analysis = LLMClient.parse_mood_analysis(text)
    assert analysis.dominant_emotions == ["joy", "gratitude", "serenity"]


def test_parse_ignores_extra_keys():
    payload = dict(VALID_PAYLOAD, reasoning="sunny")
    analysis = LLMClient.parse_mood_analysis(json.dumps(payload))
    assert analysis.overall_mood_score == 82


@pytest.mark.parametrize(
    "override",
    [
        {"dominant_emotions": ["joy", "hope"]},
        {"dominant_emotions": ["joy", "hope", "awe", "love", "pride", "fear"]},
        {"dominant_emotions": ["joy", "hope", "happiness"]},
        {"dominant_emotions": ["Joy", "hope", "awe"]},
        {"dominant_emotions": ["joy", "joy", "hope"]},
        {"overall_mood_score": 101},
        {"energy_level": -1},
        {"emotional_complexity": "50"},
        {"overall_mood_score": 50.5},
    ],
)
def test_parse_rejects_contract_violations(override):
    payload = dict(VALID_PAYLOAD, **override)
    with pytest.raises(InvalidAnalysisError):
        LLMClient.parse_mood_analysis(json.dumps(payload))


def test_parse_rejects_missing_field():
    payload = {key: value for key, value in VALID_PAYLOAD.items() if key != "energy_level"}
    with pytest.raises(InvalidAnalysisError):
        LLMClient.parse_mood_analysis(json.dumps(payload))


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "not json at all",
        "[1, 2, 3]",
        # 截断在第三个情绪之后
        '{"overall_mood_score": 82, "energy_level": 55, "emotional_complexity": 20, '
        '"dominant_emotions": ["joy", "hope", "awe"',
        str(VALID_PAYLOAD),
        json.dumps(VALID_PAYLOAD).replace(",", ""),
    ],
)
def test_parse_rejects_non_object(text):
    with pytest.raises(InvalidAnalysisError):
        LLMClient.parse_mood_analysis(text)


@pytest.mark.asyncio
async def test_analyze_mood_sends_stateless_schema_request():
    create = AsyncMock(return_value=_completion(json.dumps(VALID_PAYLOAD)))
    client, _ = _client_with_response(create)

    analysis = await client.analyze_mood("Great day!")

    assert analysis.overall_mood_score == 82
    create.assert_awaited_once()
    kwargs = create.await_args.kwargs
    assert [message["role"] for message in kwargs["messages"]] == ["system", "user"]
    assert "Great day!" in kwargs["messages"][1]["content"]
    assert "nostalgia" in kwargs["messages"][0]["content"]
    assert kwargs["response_format"] == {"type": "json_schema", "json_schema": MOOD_ANALYSIS_JSON_SCHEMA}


@pytest.mark.asyncio
async def test_analyze_mood_rejects_blank_text():
    create = AsyncMock()
    client, _ = _client_with_response(create)

    with pytest.raises(ValueError):
        await client.analyze_mood("   ")
    create.assert_not_awaited()


@pytest.mark.asyncio
async def test_analyze_mood_invalid_response_is_invalid_analysis():
    payload = dict(VALID_PAYLOAD, dominant_emotions=["joy", "hope"])
    create = AsyncMock(return_value=_completion(json.dumps(payload)))
    client, _ = _client_with_response(create)

    with pytest.raises(InvalidAnalysisError):
        await client.analyze_mood("Great day!")


@pytest.mark.asyncio
async def test_analyze_mood_empty_choices_is_invalid_analysis():
    create = AsyncMock(return_value=SimpleNamespace(choices=[]))
    client, _ = _client_with_response(create)

    with pytest.raises(InvalidAnalysisError):
        await client.analyze_mood("Great day!")


@pytest.mark.asyncio
async def test_analyze_mood_truncated_output_is_invalid_analysis():
    create = AsyncMock(return_value=_completion(json.dumps(VALID_PAYLOAD), finish_reason="length"))
    client, _ = _client_with_response(create)

    with pytest.raises(InvalidAnalysisError):
        await client.analyze_mood("Great day!")


@pytest.mark.asyncio
async def test_provider_error_is_provider_unavailable():
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    create = AsyncMock(side_effect=openai.APIConnectionError(request=request))
    client, _ = _client_with_response(create)

    with pytest.raises(ProviderUnavailableError) as exc_info:
        await client.analyze_mood("Great day!")
    assert exc_info.value.kind == "ProviderUnavailable"
    create.assert_awaited_once()


@pytest.mark.asyncio
async def test_timeout_is_provider_unavailable(monkeypatch):
    monkeypatch.setattr("llm.client.settings.ANALYSIS_TIMEOUT_SECONDS", 0.01)

    async def slow_create(**kwargs):
        await asyncio.sleep(1)

    client, _ = _client_with_response(slow_create)

    with pytest.raises(ProviderUnavailableError):
        await client.analyze_mood("Great day!")
