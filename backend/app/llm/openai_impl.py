"""
OpenRouter implementation of TopicGenerator via the OpenAI SDK (OpenAI-compatible endpoint).
Uses OPENROUTER_API_KEY / OPENROUTER_MODEL / OPENROUTER_BASE_URL. SDK retries are off; the
generation service owns the single retry on timeout.
"""
import logging

import openai
from openai import OpenAI

from app.config import settings
from app.errors import InternalError, ProviderContractError, ProviderTimeoutError, ProviderUnavailableError
from app.llm.base import GenerationContext
from app.services.prompt_helpers import build_system_prompt, build_user_prompt

logger = logging.getLogger(__name__)


class OpenRouterTopicGenerator:
    name = "openrouter"

    def __init__(self, api_key: str | None = None, model: str | None = None, client: OpenAI | None = None):
        self._model = model or settings.openrouter_model
        self._client = client or OpenAI(
            api_key=api_key or settings.openrouter_api_key,
            base_url=settings.openrouter_base_url,
            timeout=settings.ai_generation_timeout_seconds,
            max_retries=0,
        )

    def generate_topics(self, context: GenerationContext) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": build_system_prompt(context)},
                    {"role": "user", "content": build_user_prompt(context)},
                ],
                response_format={"type": "json_object"},
                max_tokens=1500,
                temperature=0.7,
            )
        except openai.APITimeoutError as e:
            raise ProviderTimeoutError("AI service timed out. Please try again.") from e
        except openai.APIConnectionError as e:
            logger.warning("OpenRouter connection failed: %s", e)
            raise ProviderUnavailableError("AI service temporarily unavailable") from e
        except openai.APIStatusError as e:
            if e.status_code == 429 or e.status_code >= 500:
                logger.warning("OpenRouter unavailable: status=%s", e.status_code)
                raise ProviderUnavailableError("AI service temporarily unavailable") from e
            logger.error("OpenRouter rejected request: status=%s", e.status_code)
            raise InternalError("AI service not configured") from e

        if not response.choices:
            raise ProviderContractError("AI service returned an empty response")
        usage = response.usage
        logger.info(
            "OpenRouter response: model=%s prompt_tokens=%s completion_tokens=%s",
            self._model,
            (usage.prompt_tokens or 0) if usage else 0,
            (usage.completion_tokens or 0) if usage else 0,
        )
        return response.choices[0].message.content or ""
