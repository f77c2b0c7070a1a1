"""
Topic generator factory: LLM_PROVIDER selects openrouter, claude or mock.
A real provider without an API key is a configuration error, not a silent fallback to mock.
"""
import logging

from app.config import settings
from app.errors import InternalError
from app.llm.base import GenerationContext, TopicGenerator

logger = logging.getLogger(__name__)


def get_topic_generator() -> TopicGenerator:
    """Return the configured generator. Raises InternalError when the selected provider has no key."""
    provider = settings.llm_provider
    if provider == "mock":
        from app.llm.mock_impl import MockTopicGenerator
        return MockTopicGenerator()
    if provider == "claude":
        from app.llm.claude_impl import ClaudeTopicGenerator, get_api_key
        if not get_api_key():
            logger.error("LLM_PROVIDER=claude but CLAUDE_API_KEY / ANTHROPIC_API_KEY is not set")
            raise InternalError("AI service not configured")
        return ClaudeTopicGenerator()
    from app.llm.openai_impl import OpenRouterTopicGenerator
    if not settings.openrouter_api_key.strip():
        logger.error("LLM_PROVIDER=openrouter but OPENROUTER_API_KEY is not set")
        raise InternalError("AI service not configured")
    return OpenRouterTopicGenerator()


__all__ = ["GenerationContext", "TopicGenerator", "get_topic_generator"]
