"""
Claude (Anthropic) implementation of TopicGenerator.
Uses CLAUDE_API_KEY or ANTHROPIC_API_KEY. SDK retries are off; the generation service owns the
single retry on timeout. Overloaded (529) and other 5xx answers count as unavailable.
"""
import logging
import os

import anthropic
from anthropic import Anthropic

from app.config import settings
from app.errors import InternalError, ProviderTimeoutError, ProviderUnavailableError
from app.llm.base import GenerationContext
from app.services.prompt_helpers import build_system_prompt, build_user_prompt

logger = logging.getLogger(__name__)


def get_api_key() -> str:
    """Resolve Claude/Anthropic API key from settings or env. Never log the key."""
    return (settings.claude_api_key or os.environ.get("ANTHROPIC_API_KEY") or "").strip()


class ClaudeTopicGenerator:
    name = "claude"

    def __init__(self, api_key: str | None = None, model: str | None = None, client: Anthropic | None = None):
        self._model = model or settings.claude_model
        self._client = client or Anthropic(
            api_key=api_key or get_api_key(),
            timeout=settings.ai_generation_timeout_seconds,
            max_retries=0,
        )

    def generate_topics(self, context: GenerationContext) -> str:
        try:
            response = self._client.messages.create(
                model=self._model,
                max_tokens=1500,
                temperature=0.7,
                system=build_system_prompt(context),
                messages=[{"role": "user", "content": build_user_prompt(context)}],
            )
        except anthropic.APITimeoutError as e:
            raise ProviderTimeoutError("AI service timed out. Please try again.") from e
        except anthropic.APIConnectionError as e:
            logger.warning("Claude connection failed: %s", e)
            raise ProviderUnavailableError("AI service temporarily unavailable") from e
        except anthropic.APIStatusError as e:
            if e.status_code == 429 or e.status_code >= 500:
                logger.warning("Claude unavailable: status=%s", e.status_code)
                raise ProviderUnavailableError("AI service temporarily unavailable") from e
            logger.error("Claude rejected request: status=%s", e.status_code)
            raise InternalError("AI service not configured") from e

        inp = getattr(response.usage, "input_tokens", 0) or 0
        out = getattr(response.usage, "output_tokens", 0) or 0
        logger.info("Claude response: model=%s input_tokens=%s output_tokens=%s", self._model, inp, out)
        raw = ""
        for block in response.content or []:
            text = getattr(block, "text", None)
            if text:
                raw += str(text)
        return raw
