"""JSON utilities for cleaning model output."""

import json
import logging
import re

logger = logging.getLogger(__name__)


def _strip_code_fence(content: str) -> str:
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def clean_json_string(content: str) -> str:
    """Clean and fix a JSON object returned by a language model.

    Args:
        content: Raw model output

    Returns:
        Valid JSON string ("{}" when nothing usable is found)
    """
    if not content or not content.strip():
        logger.error("Empty content provided")
        return "{}"

    content = _strip_code_fence(content)

    # Try to parse as is first
    try:
        return json.dumps(json.loads(content))
    except json.JSONDecodeError:
        logger.debug("Initial parse failed, attempting cleanup")

    # Keep the outermost object only, dropping any surrounding prose
    start = content.find("{")
    end = content.rfind("}")
    if start >= 0 and end > start:
        content = content[start : end + 1]

    content = re.sub(r"[\x00-\x1F\x7F]", " ", content)  # Remove control characters
    content = re.sub(r",\s*([}\]])", r"\1", content)  # Trailing commas

    try:
        return json.dumps(json.loads(content))
    except json.JSONDecodeError:
        pass

    # Single quoted keys and values
    content = re.sub(r"'([^'\\]*)'", r'"\1"', content)
    # Unquoted property names
    content = re.sub(r'([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)\s*:', r'\1"\2":', content)

    try:
        return json.dumps(json.loads(content))
    except json.JSONDecodeError as e:
        logger.error(f"Failed to extract valid JSON structure: {e}")
        logger.debug(f"Final content that failed to parse: {content}")

    return "{}"


__all__ = ["clean_json_string"]
