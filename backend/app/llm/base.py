"""
Topic generator interface. A generator turns a GenerationContext into the provider's raw text answer;
parsing and validation of that text happen once, in app.llm.parsing and the generation service,
so every provider is held to the same contract.
Implementations translate their SDK failures into the app.errors provider errors:
ProviderTimeoutError, ProviderUnavailableError (transport, 429, 5xx) or InternalError (misconfiguration).
"""
from dataclasses import dataclass, field
from typing import Protocol


@dataclass
class GenerationContext:
    technology: str
    experience_level: str
    years_away: int
    min_topics: int
    max_topics: int
    hint: str | None = None
    # Titles the owner already completed for this technology; the model should not repeat them.
    completed_titles: list[str] = field(default_factory=list)
    parent_title: str | None = None
    parent_description: str | None = None


class TopicGenerator(Protocol):
    """Abstract interface for AI topic generation."""

    name: str

    def generate_topics(self, context: GenerationContext) -> str:
        """
        Ask the model for topic candidates. Returns the raw response text
        (JSON array, or object with a "topics" array, possibly in a code fence).
        """
        ...
