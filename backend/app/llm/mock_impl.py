"""
Mock topic generator: deterministic placeholder topics for local development and tests (LLM_PROVIDER=mock).
Same technology and parent always give the same titles.
"""
import hashlib
import json
import logging

from app.llm.base import GenerationContext

logger = logging.getLogger(__name__)

# Mock default; clamped into [min_topics, max_topics] of the context
DEFAULT_NUM_TOPICS = 3


def _make_mock_topics(context: GenerationContext, num_topics: int) -> list[dict]:
    seed_source = f"{context.technology}|{context.parent_title or ''}"
    seed = hashlib.sha256(seed_source.encode()).hexdigest()[:8]
    scope = f"{context.parent_title} " if context.parent_title else ""
    topics = []
    for i in range(num_topics):
        topics.append({
            "title": f"[Mock] {context.technology} {scope}topic {i + 1} ({seed})",
            "description": f"Placeholder topic {i + 1} for a {context.experience_level} developer. "
                           "Set LLM_PROVIDER and an API key in .env for real generation.",
            "practice_links": [
                {
                    "title": f"Practice problem {i + 1}",
                    "url": f"https://leetcode.com/problems/mock-{seed}-{i + 1}/",
                    "difficulty": ["Easy", "Medium", "Hard"][i % 3],
                }
            ],
        })
    return topics


class MockTopicGenerator:
    """Returns placeholder topics so generation works without an API key."""

    name = "mock"

    def __init__(self, num_topics: int | None = None):
        self._num_topics = num_topics

    def generate_topics(self, context: GenerationContext) -> str:
        n = self._num_topics if self._num_topics is not None else DEFAULT_NUM_TOPICS
        n = max(context.min_topics, min(context.max_topics, n))
        logger.info("Mock generator: %s topics for %s", n, context.technology)
        return json.dumps({"topics": _make_mock_topics(context, n)})
