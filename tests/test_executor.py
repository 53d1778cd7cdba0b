import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import FakeAgent, action_message, text_message
from a2ui_agent.event_bus import QueueEventBus
from a2ui_agent.executor import RestaurantAgentExecutor, Turn, TurnState
from a2ui_agent.extension import A2UI_EXTENSION_URI
from a2ui_agent.models import (
    Message,
    PartKind,
    RequestContext,
    StreamItem,
    TaskState,
    TaskStatusUpdateEvent,
)


def make_context(message, extensions=()):
    return RequestContext(
        task_id="task-1",
        context_id="ctx-1",
        message=message,
        requested_extensions=list(extensions),
    )


async def run_turn(executor, message, extensions=(), bus=None):
    bus = bus or QueueEventBus("task-1")
    await executor.execute(make_context(message, extensions), bus)
    return [e async for e in bus.events()]


def final_updates(events):
    return [e for e in events if isinstance(e, TaskStatusUpdateEvent) and e.final]


class FailingOnceBus(QueueEventBus):
    """Raises on the first Message published."""

    def __init__(self):
        super().__init__("flaky")
        self.raised = False

    async def publish(self, event):
        if isinstance(event, Message) and not self.raised:
            self.raised = True
            raise ConnectionError("sink unavailable")
        await super().publish(event)


# =============================================================================
# Terminal state selection
# =============================================================================

@pytest.mark.asyncio
async def test_submit_booking_completes_task():
    executor = RestaurantAgentExecutor(FakeAgent())
    events = await run_turn(executor, action_message("submit_booking", {"restaurantName": "RedFarm"}))

    assert isinstance(events[0], Message)
    assert events[-1].status.state == TaskState.COMPLETED
    assert events[-1].final is True
    assert events[-1].status.message == events[0]


@pytest.mark.asyncio
async def test_other_action_requires_input():
    executor = RestaurantAgentExecutor(FakeAgent())
    events = await run_turn(executor, action_message("book_restaurant"))
    assert events[-1].status.state == TaskState.INPUT_REQUIRED


@pytest.mark.asyncio
async def test_plain_text_requires_input():
    executor = RestaurantAgentExecutor(FakeAgent())
    events = await run_turn(executor, text_message("Top 5 chinese restaurants in New York"))
    assert events[-1].status.state == TaskState.INPUT_REQUIRED


# =============================================================================
# Query and variant selection
# =============================================================================

@pytest.mark.asyncio
async def test_ui_event_becomes_query_and_extension_selects_ui():
    agent = FakeAgent()
    executor = RestaurantAgentExecutor(agent)
    message = action_message("book_restaurant", {
        "restaurantName": "Cafe China", "address": "59 W 37th St", "imageUrl": "http://x/y.jpg",
    })

    await run_turn(executor, message, extensions=[A2UI_EXTENSION_URI])

    assert agent.calls == [(
        "USER_WANTS_TO_BOOK: Cafe China, Address: 59 W 37th St, ImageURL: http://x/y.jpg",
        "ctx-1",
        True,
    )]


@pytest.mark.asyncio
async def test_text_query_without_extension_uses_text_variant():
    agent = FakeAgent()
    executor = RestaurantAgentExecutor(agent)
    await run_turn(executor, text_message("hello"))
    assert agent.calls == [("hello", "ctx-1", False)]


# =============================================================================
# Event sequencing
# =============================================================================

@pytest.mark.asyncio
async def test_working_updates_precede_final_pair():
    agent = FakeAgent(items=[
        StreamItem(is_task_complete=False, updates="Looking up restaurants..."),
        StreamItem(is_task_complete=False, updates="Almost there..."),
        StreamItem(is_task_complete=True, content='Here---a2ui_JSON---[{"a":1},{"b":2}]'),
    ])
    executor = RestaurantAgentExecutor(agent)
    events = await run_turn(executor, text_message("find food"))

    assert len(events) == 4
    for update, text in zip(events[:2], ["Looking up restaurants...", "Almost there..."]):
        assert update.status.state == TaskState.WORKING
        assert update.final is False
        assert update.status.message.parts[0].text == text

    final_message = events[2]
    assert final_message.role == "agent"
    assert [p.kind for p in final_message.parts] == [PartKind.TEXT, PartKind.DATA, PartKind.DATA]
    assert events[3].final is True


@pytest.mark.asyncio
async def test_stops_after_first_complete_item():
    agent = FakeAgent(items=[
        StreamItem(is_task_complete=True, content="first"),
        StreamItem(is_task_complete=True, content="second"),
    ])
    executor = RestaurantAgentExecutor(agent)
    events = await run_turn(executor, text_message("hi"))

    messages = [e for e in events if isinstance(e, Message)]
    assert len(messages) == 1
    assert messages[0].parts[0].text == "first"
    assert len(final_updates(events)) == 1
    assert agent.closed


@pytest.mark.asyncio
async def test_malformed_ui_payload_still_completes():
    agent = FakeAgent(items=[StreamItem(is_task_complete=True, content="Sorry---a2ui_JSON---not-json")])
    executor = RestaurantAgentExecutor(agent)
    events = await run_turn(executor, action_message("submit_booking"))

    assert [p.text for p in events[0].parts] == ["Sorry", "not-json"]
    assert events[-1].status.state == TaskState.COMPLETED


# =============================================================================
# Failures
# =============================================================================

@pytest.mark.asyncio
async def test_agent_error_fails_turn():
    agent = FakeAgent(
        items=[StreamItem(is_task_complete=False, updates="working")],
        error=RuntimeError("boom"),
    )
    executor = RestaurantAgentExecutor(agent)
    bus = QueueEventBus("task-1")
    events = await run_turn(executor, text_message("hi"), bus=bus)

    assert events[0].status.state == TaskState.WORKING
    assert events[1].parts[0].text == "I'm sorry, I encountered an error: boom"
    assert events[2].status.state == TaskState.FAILED
    assert events[2].final is True
    assert bus.is_finished
    assert executor.active_turn("task-1") is None


@pytest.mark.asyncio
async def test_stream_without_final_item_fails():
    agent = FakeAgent(items=[StreamItem(is_task_complete=False, updates="...")])
    executor = RestaurantAgentExecutor(agent)
    events = await run_turn(executor, text_message("hi"))

    assert events[-1].status.state == TaskState.FAILED
    assert "ended without a final response" in events[-2].parts[0].text


@pytest.mark.asyncio
async def test_publish_error_fails_turn():
    executor = RestaurantAgentExecutor(FakeAgent())
    bus = FailingOnceBus()
    events = await run_turn(executor, action_message("submit_booking"), bus=bus)

    assert len(final_updates(events)) == 1
    assert events[-1].status.state == TaskState.FAILED
    assert "sink unavailable" in events[-2].parts[0].text


@pytest.mark.asyncio
async def test_stream_timeout_fails_turn():
    agent = FakeAgent(block=True)
    executor = RestaurantAgentExecutor(agent, stream_timeout=0.05)
    events = await run_turn(executor, text_message("hi"))

    assert events[-1].status.state == TaskState.FAILED
    assert "Agent produced no output for 0.05s" in events[-2].parts[0].text


# =============================================================================
# Cancellation
# =============================================================================

@pytest.mark.asyncio
async def test_cancel_in_flight_turn():
    agent = FakeAgent(block=True)
    executor = RestaurantAgentExecutor(agent)
    bus = QueueEventBus("task-1")
    job = asyncio.create_task(executor.execute(make_context(text_message("hi")), bus))
    await agent.started.wait()

    assert await executor.cancel("task-1", "ctx-1")
    await job

    events = [e async for e in bus.events()]
    assert len(events) == 1
    assert events[0].status.state == TaskState.CANCELED
    assert events[0].final is True
    assert agent.closed
    assert not await executor.cancel("task-1", "ctx-1")


@pytest.mark.asyncio
async def test_cancel_without_running_turn_publishes_on_given_bus():
    executor = RestaurantAgentExecutor(FakeAgent())
    bus = QueueEventBus("cancel")

    assert await executor.cancel("task-9", "ctx-9", bus)

    events = [e async for e in bus.events()]
    assert [(e.taskId, e.status.state, e.final) for e in events] == [("task-9", TaskState.CANCELED, True)]


@pytest.mark.asyncio
async def test_cancel_after_terminal_is_noop():
    bus = MagicMock()
    bus.publish = AsyncMock()
    bus.finished = AsyncMock()
    turn = Turn("task-1", "ctx-1", bus)

    assert await turn.complete(TaskState.COMPLETED, [])
    assert not await turn.cancel()
    await turn.finish()
    await turn.finish()

    assert turn.state == TurnState.COMPLETED
    assert bus.publish.await_count == 2
    bus.finished.assert_awaited_once()


@pytest.mark.asyncio
async def test_complete_after_cancel_is_dropped():
    bus = QueueEventBus("task-1")
    turn = Turn("task-1", "ctx-1", bus)

    assert await turn.cancel()
    assert not await turn.complete(TaskState.COMPLETED, [])
    assert not await turn.working("late")
    assert not await turn.fail(RuntimeError("late"))

    events = [e async for e in bus.events()]
    assert len(events) == 1
    assert events[0].status.state == TaskState.CANCELED


def test_resolve_final_state_is_overridable():
    class CompletingExecutor(RestaurantAgentExecutor):
        COMPLETING_ACTIONS = frozenset({"submit_booking", "confirm"})

    executor = CompletingExecutor(FakeAgent())
    assert executor.resolve_final_state("confirm") == TaskState.COMPLETED
    assert executor.resolve_final_state(None) == TaskState.INPUT_REQUIRED
