"""
Parse raw generator output into a list of candidate dicts. Accepts a JSON array or an object with a
"topics" array, optionally wrapped in a markdown code fence. Anything else is a ProviderContractError.
Raw content is never logged; it may echo user input.
"""
import json
import logging

from app.errors import ProviderContractError

logger = logging.getLogger(__name__)

INVALID_RESPONSE_MSG = "AI service returned invalid data structure"


def strip_json_fences(raw: str) -> str:
    """Remove a leading ```/```json fence and the closing ``` if present."""
    raw = raw.strip()
    if raw.startswith("```"):
        lines = raw.split("\n")
        lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        raw = "\n".join(lines).strip()
    return raw


def parse_topic_items(raw: str | None) -> list:
    if not raw or not raw.strip():
        logger.warning("Topic generator returned an empty response")
        raise ProviderContractError("AI service returned an empty response")
    try:
        data = json.loads(strip_json_fences(raw))
    except json.JSONDecodeError as e:
        logger.warning("Topic generator returned invalid JSON: %s (len=%s)", e.msg, len(raw))
        raise ProviderContractError(INVALID_RESPONSE_MSG) from e
    if isinstance(data, dict):
        data = data.get("topics")
    if not isinstance(data, list):
        logger.warning("Topic generator response has no topics array")
        raise ProviderContractError(INVALID_RESPONSE_MSG)
    return data
