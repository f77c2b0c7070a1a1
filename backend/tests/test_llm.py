"""
Provider layer: response parsing, prompt content, generator factory and SDK error mapping.
SDK clients are replaced with stubs; no network.
"""
import json
from types import SimpleNamespace

import anthropic
import httpx
import openai
import pytest

from app.config import settings
from app.errors import InternalError, ProviderContractError, ProviderTimeoutError, ProviderUnavailableError
from app.llm import get_topic_generator
from app.llm.base import GenerationContext
from app.llm.claude_impl import ClaudeTopicGenerator
from app.llm.mock_impl import MockTopicGenerator
from app.llm.openai_impl import OpenRouterTopicGenerator
from app.llm.parsing import parse_topic_items, strip_json_fences
from app.services.generation_service import validate_candidates
from app.services.prompt_helpers import build_system_prompt, build_user_prompt


def _context(**overrides):
    fields = dict(technology="Python", experience_level="intermediate", years_away=3, min_topics=3, max_topics=10)
    fields.update(overrides)
    return GenerationContext(**fields)


def test_strip_json_fences():
    assert strip_json_fences('```json\n[1, 2]\n```') == "[1, 2]"
    assert strip_json_fences("```\n{}\n```") == "{}"
    assert strip_json_fences('  [1]  ') == "[1]"


def test_parse_accepts_array_and_topics_object():
    assert parse_topic_items('[{"title": "a"}]') == [{"title": "a"}]
    assert parse_topic_items('{"topics": [{"title": "b"}]}') == [{"title": "b"}]


@pytest.mark.parametrize("raw", ["", "   ", "not json", '{"items": []}', '{"topics": null}', '"just a string"'])
def test_parse_rejects_other_shapes(raw):
    with pytest.raises(ProviderContractError):
        parse_topic_items(raw)


def test_legacy_leetcode_links_key_is_accepted(owner_id):
    raw = json.dumps([
        {"title": f"t{i}", "leetcode_links": [{"title": "p", "url": "https://leetcode.com/problems/p/", "difficulty": "Hard"}]}
        for i in range(3)
    ])
    candidates = validate_candidates(raw, owner_id, "Python")
    assert candidates[0].practice_links[0].difficulty == "Hard"


def test_user_prompt_for_root_and_subtopics():
    root = build_user_prompt(_context(hint="async", completed_titles=["Decorators", "Typing"]))
    assert "root-level" in root
    assert "async" in root
    assert "Decorators; Typing" in root

    sub = build_user_prompt(_context(parent_title="Async IO", parent_description=None))
    assert 'parent topic "Async IO"' in sub
    assert "Not provided" in sub


def test_system_prompt_carries_bounds_and_level():
    prompt = build_system_prompt(_context(experience_level="beginner", years_away=7))
    assert "between 3 and 10 topics" in prompt
    assert "beginner" in prompt
    assert "7 years" in prompt


def test_mock_generator_output_validates(owner_id):
    raw = MockTopicGenerator().generate_topics(_context())
    candidates = validate_candidates(raw, owner_id, "Python")
    assert len(candidates) == 3
    assert raw == MockTopicGenerator().generate_topics(_context())


def test_factory_selects_mock(monkeypatch):
    monkeypatch.setattr(settings, "llm_provider", "mock")
    assert get_topic_generator().name == "mock"


def test_factory_without_key_is_not_configured(monkeypatch):
    monkeypatch.setattr(settings, "llm_provider", "openrouter")
    monkeypatch.setattr(settings, "openrouter_api_key", "")
    with pytest.raises(InternalError) as exc_info:
        get_topic_generator()
    assert exc_info.value.message == "AI service not configured"


def _stub_client(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def _raiser(exc):
    def create(**kwargs):
        raise exc
    return create


_REQUEST = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")


def _status_error(cls, status_code):
    return cls("provider error", response=httpx.Response(status_code, request=_REQUEST), body=None)


@pytest.mark.parametrize(
    "exc, expected",
    [
        (openai.APITimeoutError(request=_REQUEST), ProviderTimeoutError),
        (openai.APIConnectionError(request=_REQUEST), ProviderUnavailableError),
        (_status_error(openai.RateLimitError, 429), ProviderUnavailableError),
        (_status_error(openai.InternalServerError, 502), ProviderUnavailableError),
        (_status_error(openai.AuthenticationError, 401), InternalError),
    ],
)
def test_openrouter_error_mapping(exc, expected):
    gen = OpenRouterTopicGenerator(model="test-model", client=_stub_client(_raiser(exc)))
    with pytest.raises(expected):
        gen.generate_topics(_context())


def test_openrouter_returns_message_content():
    captured = {}

    def create(**kwargs):
        captured.update(kwargs)
        message = SimpleNamespace(content='{"topics": []}')
        return SimpleNamespace(choices=[SimpleNamespace(message=message)], usage=None)

    gen = OpenRouterTopicGenerator(model="test-model", client=_stub_client(create))
    assert gen.generate_topics(_context()) == '{"topics": []}'
    assert captured["model"] == "test-model"
    assert captured["response_format"] == {"type": "json_object"}
    assert [m["role"] for m in captured["messages"]] == ["system", "user"]


def test_openrouter_empty_choices_is_contract_error():
    def create(**kwargs):
        return SimpleNamespace(choices=[], usage=None)

    gen = OpenRouterTopicGenerator(model="test-model", client=_stub_client(create))
    with pytest.raises(ProviderContractError):
        gen.generate_topics(_context())


def test_system_prompt_uses_configured_description_bound(monkeypatch):
    monkeypatch.setattr(settings, "topic_description_max_length", 5000)
    prompt = build_system_prompt(_context())
    assert "max 5000 characters" in prompt
    assert "max 1000 characters" not in prompt


def _claude_client(create):
    return SimpleNamespace(messages=SimpleNamespace(create=create))


_CLAUDE_REQUEST = httpx.Request("POST", "https://api.anthropic.com/v1/messages")


def _claude_status_error(cls, status_code):
    return cls("provider error", response=httpx.Response(status_code, request=_CLAUDE_REQUEST), body=None)


@pytest.mark.parametrize(
    "exc, expected",
    [
        (anthropic.APITimeoutError(request=_CLAUDE_REQUEST), ProviderTimeoutError),
        (anthropic.APIConnectionError(request=_CLAUDE_REQUEST), ProviderUnavailableError),
        (_claude_status_error(anthropic.RateLimitError, 429), ProviderUnavailableError),
        (_claude_status_error(anthropic.InternalServerError, 529), ProviderUnavailableError),
        (_claude_status_error(anthropic.AuthenticationError, 401), InternalError),
    ],
)
def test_claude_error_mapping(exc, expected):
    gen = ClaudeTopicGenerator(model="test-model", client=_claude_client(_raiser(exc)))
    with pytest.raises(expected):
        gen.generate_topics(_context())


def test_claude_joins_text_blocks():
    captured = {}

    def create(**kwargs):
        captured.update(kwargs)
        blocks = [SimpleNamespace(text='{"topics": '), SimpleNamespace(type="other"), SimpleNamespace(text="[]}")]
        return SimpleNamespace(content=blocks, usage=SimpleNamespace(input_tokens=10, output_tokens=5))

    gen = ClaudeTopicGenerator(model="test-model", client=_claude_client(create))
    assert gen.generate_topics(_context(parent_title="Async IO")) == '{"topics": []}'
    assert captured["model"] == "test-model"
    assert "between 3 and 10 topics" in captured["system"]
    assert 'parent topic "Async IO"' in captured["messages"][0]["content"]
