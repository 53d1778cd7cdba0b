"""Restaurant agent: OpenAI-compatible chat completions with local tool execution."""

import json
import logging
import time
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from .config import LLM_CONFIG_ERROR_MESSAGE, Config
from .models import StreamItem
from .prompt_builder import get_system_prompt
from .splitter import A2UI_DELIMITER, strip_code_fences
from .tools import TOOL_DEFINITIONS, execute_tool

logger = logging.getLogger(__name__)


def validate_ui_response(content: str) -> Optional[str]:
    """Return why ``content`` is not a usable A2UI response, or None if it is."""
    if A2UI_DELIMITER not in content:
        return f"missing the '{A2UI_DELIMITER}' delimiter"

    _, json_segment = content.split(A2UI_DELIMITER, 1)
    cleaned = strip_code_fences(json_segment)
    if not cleaned:
        return "the A2UI JSON part is empty"
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        return f"the A2UI JSON part is not valid JSON ({e})"
    if not isinstance(data, (list, dict)):
        return "the A2UI JSON part must be a list of messages"
    return None


class RestaurantAgent:
    """
    Streams one agent turn as StreamItems.

    Handles:
    - Per-context conversation history
    - Tool calls (get_restaurants) executed locally between LLM rounds
    - Retrying UI answers that do not split/parse
    """

    SUPPORTED_CONTENT_TYPES = ["text", "text/plain"]

    def __init__(self, config: Config, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.llm_timeout, connect=10.0)
        )
        self._histories: Dict[str, List[Dict[str, Any]]] = {}
        self._last_access: Dict[str, float] = {}

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()

    def history(self, context_id: str) -> List[Dict[str, Any]]:
        return self._histories.get(context_id, [])

    def _expire_histories(self):
        """Drop conversations idle for longer than HISTORY_TTL."""
        now = time.monotonic()
        expired = [
            cid for cid, last in self._last_access.items()
            if now - last > self.config.history_ttl
        ]
        for cid in expired:
            self._histories.pop(cid, None)
            self._last_access.pop(cid, None)
        if expired:
            logger.info(f"Expired {len(expired)} idle conversations")

    async def _chat(self, messages: List[Dict[str, Any]]) -> Dict[str, Any]:
        """One non-streaming chat completion round. Returns the assistant message."""
        provider = self.config.provider
        if provider is None:
            raise RuntimeError(LLM_CONFIG_ERROR_MESSAGE)

        headers = dict(provider.headers)
        if provider.api_key:
            headers["Authorization"] = f"Bearer {provider.api_key}"

        payload = {
            "model": self.config.model,
            "messages": messages,
            "tools": TOOL_DEFINITIONS,
        }

        logger.debug(f"Chat round: provider={provider.name}, model={self.config.model}, messages={len(messages)}")
        resp = await self.client.post(
            f"{provider.base_url.rstrip('/')}/chat/completions",
            json=payload,
            headers=headers,
        )
        resp.raise_for_status()
        data = resp.json()

        choices = data.get("choices") or []
        if not choices:
            raise RuntimeError(f"LLM returned no choices: {str(data)[:200]}")
        return choices[0].get("message") or {}

    def _call_tool(self, tool_call: Dict[str, Any]) -> str:
        func = tool_call.get("function", {})
        name = func.get("name", "")
        try:
            arguments = json.loads(func.get("arguments") or "{}")
            return execute_tool(name, arguments, {"base_url": self.config.base_url})
        except (ValueError, TypeError) as e:
            # Reported back to the model as the tool result
            logger.warning(f"Tool call {name} failed: {e}")
            return json.dumps({"error": str(e)})

    async def stream(self, query: str, context_id: str, use_ui: bool) -> AsyncIterator[StreamItem]:
        """
        Run the LLM for one query.

        Yields a progress item per tool round or UI retry, then exactly one
        item with ``is_task_complete=True`` holding the final content.
        """
        self._expire_histories()
        history = self._histories.setdefault(context_id, [])
        self._last_access[context_id] = time.monotonic()
        user_message = {"role": "user", "content": query}
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": get_system_prompt(use_ui, self.config.base_url)},
            *history,
            user_message,
        ]

        tool_rounds = 0
        ui_retries = 0

        while True:
            reply = await self._chat(messages)
            tool_calls = reply.get("tool_calls") or []

            if tool_calls:
                tool_rounds += 1
                if tool_rounds > self.config.max_tool_rounds:
                    raise RuntimeError(f"Exceeded {self.config.max_tool_rounds} tool rounds")

                messages.append({
                    "role": "assistant",
                    "content": reply.get("content") or "",
                    "tool_calls": tool_calls,
                })
                names = ", ".join(tc.get("function", {}).get("name", "?") for tc in tool_calls)
                logger.info(f"Tool round {tool_rounds}: {names}")
                yield StreamItem(is_task_complete=False, updates=f"Calling {names}...")

                for tool_call in tool_calls:
                    messages.append({
                        "role": "tool",
                        "tool_call_id": tool_call.get("id", ""),
                        "content": self._call_tool(tool_call),
                    })
                continue

            content = reply.get("content") or ""

            if use_ui:
                error = validate_ui_response(content)
                if error and ui_retries < self.config.max_ui_retries:
                    ui_retries += 1
                    logger.warning(f"UI response rejected ({error}), retry {ui_retries}/{self.config.max_ui_retries}")
                    messages.append({"role": "assistant", "content": content})
                    messages.append({
                        "role": "user",
                        "content": (
                            f"Your previous response was invalid: {error}. "
                            f"You MUST answer with conversational text, then '{A2UI_DELIMITER}', "
                            f"then a valid A2UI JSON array. Please retry for the original query: {query}"
                        ),
                    })
                    yield StreamItem(is_task_complete=False, updates="Regenerating the UI response...")
                    continue
                if error:
                    logger.error(f"UI response still invalid after {ui_retries} retries: {error}")

            break

        history.append(user_message)
        history.append({"role": "assistant", "content": content})
        self._histories[context_id] = history
        self._last_access[context_id] = time.monotonic()
        yield StreamItem(is_task_complete=True, content=content)
