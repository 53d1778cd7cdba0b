"""
Split a final agent response into conversational text and A2UI data parts.

The agent answers in UI mode as::

    <conversational text>
    ---a2ui_JSON---
    <JSON array of A2UI messages, optionally inside a ``` fence>
"""

import json
import logging
import re

from .extension import create_a2ui_part
from .models import Part

logger = logging.getLogger(__name__)

# Wire contract with the agent's output format. Do not change without versioning.
A2UI_DELIMITER = "---a2ui_JSON---"

_LEADING_FENCE = re.compile(r"^```[\w+-]*")
_TRAILING_FENCE = re.compile(r"```$")


def strip_code_fences(segment: str) -> str:
    """Remove a leading ``` (optionally with a language tag) and a trailing ```."""
    cleaned = segment.strip()
    cleaned = _LEADING_FENCE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def split_final_response(content: str) -> list[Part]:
    """Build the ordered final parts for a completed agent response."""
    content = content or ""

    if A2UI_DELIMITER not in content:
        text = content.strip()
        return [Part.text_part(text)] if text else []

    logger.info("Splitting final response into text and UI parts.")
    text_content, json_segment = content.split(A2UI_DELIMITER, 1)

    parts: list[Part] = []
    if text_content.strip():
        parts.append(Part.text_part(text_content.strip()))

    if not json_segment.strip():
        return parts

    cleaned = strip_code_fences(json_segment)
    try:
        ui_data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse UI JSON: {e}")
        parts.append(Part.text_part(json_segment))
        return parts

    if isinstance(ui_data, list):
        logger.info(f"Found {len(ui_data)} messages. Creating individual DataParts.")
        parts.extend(create_a2ui_part(message) for message in ui_data)
    elif isinstance(ui_data, dict):
        logger.info("Received a single JSON object. Creating a DataPart.")
        parts.append(create_a2ui_part(ui_data))
    else:
        logger.error(f"UI JSON is neither an object nor an array: {type(ui_data).__name__}")
        parts.append(Part.text_part(json_segment))

    return parts
