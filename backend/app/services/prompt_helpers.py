"""
Prompt helpers: system and user prompts for topic generation.
The system prompt fixes the output shape (JSON object with a "topics" array) and the count bounds;
the user prompt carries the request: technology, parent topic, hint and titles to avoid.
"""
from app.config import settings
from app.llm.base import GenerationContext
from app.schemas.topic import TITLE_MAX_LENGTH

LEVEL_GUIDANCE = {
    "beginner": "Focus on fundamentals, syntax and basic patterns.",
    "intermediate": "Include design patterns, best practices and common pitfalls.",
    "advanced": "Emphasize architecture, advanced patterns and performance.",
    "expert": "Go deep on internals, trade-offs and recent changes in the ecosystem.",
}


def build_system_prompt(context: GenerationContext) -> str:
    guidance = LEVEL_GUIDANCE.get(context.experience_level, "")
    return f"""You are an experienced software development educator writing a refresher study plan.

Rules:
1. Generate between {context.min_topics} and {context.max_topics} topics for the given technology.
2. The learner's experience level is {context.experience_level}. {guidance}
3. The learner has been away from hands-on development for {context.years_away} years; prioritise what changed and what fades first.
4. Each topic has a title (max {TITLE_MAX_LENGTH} characters), a description of what it covers (max {settings.topic_description_max_length} characters) and 0-3 practice problems.
5. Order topics from fundamental to advanced. Keep them practical.

Output valid JSON only, no markdown or extra text:
{{"topics": [{{"title": "...", "description": "...", "practice_links": [{{"title": "...", "url": "https://...", "difficulty": "Easy|Medium|Hard"}}]}}]}}"""


def format_avoid_instruction(titles: list[str]) -> str:
    """Instruction listing titles the model must not repeat; empty string when there are none."""
    if not titles:
        return ""
    return "Do not repeat these topics the learner has already completed: " + "; ".join(titles)


def build_user_prompt(context: GenerationContext) -> str:
    if context.parent_title:
        parts = [
            f'Generate subtopics for "{context.technology}" under the parent topic "{context.parent_title}".',
            f"Parent topic description: {context.parent_description or 'Not provided'}",
        ]
    else:
        parts = [f"Generate root-level learning topics for {context.technology}."]
    if context.hint:
        parts.append(f"Learner's focus: {context.hint}")
    avoid = format_avoid_instruction(context.completed_titles)
    if avoid:
        parts.append(avoid)
    return "\n\n".join(parts)
