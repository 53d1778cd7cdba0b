"""Tools the agent can call, in OpenAI function-calling format."""

import json
import logging
from typing import Any, Optional

from .restaurant_data import DEFAULT_IMAGE_BASE_URL, RESTAURANT_DATA

logger = logging.getLogger(__name__)


def get_restaurants(cuisine: str, location: str, count: int = 5, base_url: Optional[str] = None) -> str:
    """
    Get a list of restaurants based on cuisine and location.

    Only New York has data. Image URLs are rewritten to ``base_url`` when
    given so clients can fetch them from this server.

    Returns:
        JSON array string of restaurant records
    """
    logger.info(f"--- TOOL CALLED: get_restaurants (count: {count}) ---")
    logger.info(f"  - Cuisine: {cuisine}")
    logger.info(f"  - Location: {location}")

    location_lower = (location or "").lower()
    if "new york" not in location_lower and "ny" not in location_lower:
        return json.dumps([])

    items = [dict(r) for r in RESTAURANT_DATA]
    if base_url:
        for item in items:
            item["imageUrl"] = item["imageUrl"].replace(DEFAULT_IMAGE_BASE_URL, base_url)
        logger.info(f"Updated base URL from tool context: {base_url}")

    items = items[:max(int(count), 0)]
    logger.info(f"  - Success: Found {len(RESTAURANT_DATA)} restaurants, returning {len(items)}.")
    return json.dumps(items)


TOOL_DEFINITIONS = [
    {
        "type": "function",
        "function": {
            "name": "get_restaurants",
            "description": (
                "Get a list of restaurants based on a cuisine and location. "
                "'count' is the number of restaurants to return."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "cuisine": {
                        "type": "string",
                        "description": "The type of cuisine to search for (e.g., Chinese, Italian, Mexican)",
                    },
                    "location": {
                        "type": "string",
                        "description": "The location to search for restaurants (e.g., New York, NY)",
                    },
                    "count": {
                        "type": "number",
                        "description": "The number of restaurants to return (default: 5)",
                    },
                },
                "required": ["cuisine", "location"],
            },
        },
    }
]


def execute_tool(tool_name: str, arguments: dict[str, Any], state: Optional[dict[str, Any]] = None) -> str:
    """Execute a tool by name. ``state`` carries per-request values such as base_url."""
    state = state or {}
    if tool_name == "get_restaurants":
        count = arguments.get("count")
        return get_restaurants(
            cuisine=arguments.get("cuisine", ""),
            location=arguments.get("location", ""),
            count=5 if count is None else count,
            base_url=state.get("base_url"),
        )
    raise ValueError(f"Unknown tool: {tool_name}")
