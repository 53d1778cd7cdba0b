"""Translate A2UI client events into natural-language queries for the agent."""

import json
import logging
from typing import Any, Callable, Optional

from .models import Part, PartKind, UIEventAction

logger = logging.getLogger(__name__)

USER_ACTION_KEY = "userAction"


def parse_ui_event(parts: list[Part]) -> Optional[UIEventAction]:
    """Return the first user action found in the data parts, if any."""
    for part in parts:
        if part.kind != PartKind.DATA or not isinstance(part.data, dict):
            continue
        user_action = part.data.get(USER_ACTION_KEY)
        if not isinstance(user_action, dict):
            continue

        action_name = user_action.get("actionName") or user_action.get("name") or ""
        return UIEventAction(
            actionName=str(action_name),
            context=_normalize_context(user_action.get("context")),
            surfaceId=user_action.get("surfaceId"),
            sourceComponentId=user_action.get("sourceComponentId"),
        )
    return None


def _normalize_context(context: Any) -> dict[str, Any]:
    # Clients may send unresolved [{key, value}] entries instead of a map
    if isinstance(context, dict):
        return context
    if isinstance(context, list):
        return {
            entry["key"]: entry.get("value")
            for entry in context
            if isinstance(entry, dict) and "key" in entry
        }
    return {}


def get_user_input(parts: list[Part]) -> str:
    """Plain-text fallback: the first non-empty text part wins."""
    for part in parts:
        if part.kind == PartKind.TEXT and part.text:
            return part.text
    return ""


# =============================================================================
# Query builders, keyed by action name
# =============================================================================

def _book_restaurant_query(ctx: dict[str, Any]) -> str:
    restaurant_name = ctx.get("restaurantName") or "Unknown Restaurant"
    address = ctx.get("address") or "Address not provided"
    image_url = ctx.get("imageUrl") or ""
    return f"USER_WANTS_TO_BOOK: {restaurant_name}, Address: {address}, ImageURL: {image_url}"


def _submit_booking_query(ctx: dict[str, Any]) -> str:
    restaurant_name = ctx.get("restaurantName") or "Unknown Restaurant"
    party_size = ctx.get("partySize") or "Unknown Size"
    reservation_time = ctx.get("reservationTime") or "Unknown Time"
    dietary = ctx.get("dietary") or "None"
    image_url = ctx.get("imageUrl") or ""
    return (
        f"User submitted a booking for {restaurant_name} for {party_size} people "
        f"at {reservation_time} with dietary requirements: {dietary}. "
        f"The image URL is {image_url}"
    )


QUERY_BUILDERS: dict[str, Callable[[dict[str, Any]], str]] = {
    "book_restaurant": _book_restaurant_query,
    "submit_booking": _submit_booking_query,
}


def build_query_from_ui_event(action: UIEventAction) -> str:
    """Render a user action as the query sent to the agent."""
    builder = QUERY_BUILDERS.get(action.actionName)
    if builder is not None:
        return builder(action.context or {})

    logger.debug(f"No query builder for action '{action.actionName}', using generic text")
    context_json = json.dumps(action.context or {}, separators=(",", ":"), default=str)
    return f"User submitted an event: {action.actionName} with data: {context_json}"
