import asyncio
from typing import Optional

import pytest

from a2ui_agent.config import Config
from a2ui_agent.models import Message, Part, StreamItem


class FakeAgent:
    """Agent stub that replays scripted stream items."""

    def __init__(self, items=None, error: Optional[Exception] = None, block: bool = False):
        self.items = list(items) if items is not None else [StreamItem(is_task_complete=True, content="Done")]
        self.error = error
        self.block = block
        self.calls = []
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.closed = False

    async def stream(self, query, context_id, use_ui):
        self.calls.append((query, context_id, use_ui))
        self.started.set()
        try:
            if self.block:
                await self.release.wait()
            for item in self.items:
                yield item
            if self.error:
                raise self.error
        finally:
            self.closed = True


def text_message(text: str, **kwargs) -> Message:
    return Message(role="user", parts=[Part.text_part(text)], **kwargs)


def action_message(action_name: str, context: Optional[dict] = None) -> Message:
    return Message(
        role="user",
        parts=[Part.data_part({"userAction": {"actionName": action_name, "context": context or {}}})],
    )


@pytest.fixture
def config():
    return Config(
        host="localhost",
        port=9999,
        cors_origins=["http://localhost:5173"],
        openrouter_api_key="",
        openai_api_key="sk-test",
        openai_base_url="https://llm.test/v1",
        gemini_api_key="",
        llm_base_url="",
        llm_api_key="",
        llm_model="",
        llm_timeout=5.0,
        stream_timeout=0.0,
        max_tool_rounds=2,
        max_ui_retries=1,
        history_ttl=1800,
    )
