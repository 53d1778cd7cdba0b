"""
Agent executor: runs one A2A turn against the restaurant agent.

Flow per turn:
1. Negotiate the A2UI extension (UI or text variant)
2. Turn a submitted UI event (or the first text part) into a query
3. Drive the agent stream, publishing a ``working`` update per progress item
4. Split the final response into text/data parts, publish the final
   message and the terminal status update
5. Mark the event bus finished, whatever happened
"""

import asyncio
import json
import logging
from enum import Enum
from typing import AsyncIterator, Optional, Protocol

from .event_bus import EventBus
from .extension import try_activate_a2ui_extension
from .models import (
    Message,
    Part,
    PartKind,
    RequestContext,
    StreamItem,
    TaskState,
    TaskStatus,
    TaskStatusUpdateEvent,
)
from .splitter import split_final_response
from .ui_events import build_query_from_ui_event, get_user_input, parse_ui_event

logger = logging.getLogger(__name__)


class QueryAgent(Protocol):
    """The LLM side: yields progress items, then one complete item."""

    def stream(self, query: str, context_id: str, use_ui: bool) -> AsyncIterator[StreamItem]: ...


class TurnState(str, Enum):
    """Stream coordinator state for a single turn."""
    IDLE = "idle"
    WORKING = "working"
    COMPLETED = "completed"
    INPUT_REQUIRED = "input-required"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self not in (TurnState.IDLE, TurnState.WORKING)


class Turn:
    """
    State machine for one turn of one task.

    Idle -> Working -> Completed | InputRequired | Failed | Canceled

    Terminal states are claimed synchronously before anything is awaited, so
    a cancel racing the final response sees the claim and backs off. The one
    exception: a completion whose publication raised never reached the
    caller and is superseded by Failed.
    """

    def __init__(self, task_id: str, context_id: str, event_bus: EventBus):
        self.task_id = task_id
        self.context_id = context_id
        self.event_bus = event_bus
        self.state = TurnState.IDLE
        self._terminal_published = False
        self._finished = False
        self._consumer: Optional[asyncio.Task] = None

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    @property
    def cancel_requested(self) -> bool:
        return self.state == TurnState.CANCELED

    def attach_consumer(self, task: Optional[asyncio.Task]) -> None:
        self._consumer = task

    def _agent_message(self, parts: list[Part]) -> Message:
        return Message(
            role="agent",
            parts=parts,
            contextId=self.context_id,
            taskId=self.task_id,
        )

    def _status_event(self, state: TaskState, message: Optional[Message], final: bool) -> TaskStatusUpdateEvent:
        return TaskStatusUpdateEvent(
            taskId=self.task_id,
            contextId=self.context_id,
            status=TaskStatus(state=state, message=message),
            final=final,
        )

    async def working(self, text: str) -> bool:
        """Publish an incremental ``working`` update. False once terminal."""
        if self.is_terminal:
            return False
        self.state = TurnState.WORKING
        message = self._agent_message([Part.text_part(text or "")])
        await self.event_bus.publish(self._status_event(TaskState.WORKING, message, final=False))
        return True

    async def complete(self, final_state: TaskState, parts: list[Part]) -> bool:
        """Publish the final message followed by the terminal status update."""
        if self.is_terminal:
            logger.info(f"Turn for task {self.task_id} already {self.state.value}, dropping final response")
            return False
        self.state = TurnState(final_state.value)

        final_message = self._agent_message(parts)
        await self.event_bus.publish(final_message)
        await self.event_bus.publish(self._status_event(final_state, final_message, final=True))
        self._terminal_published = True
        return True

    async def fail(self, error: BaseException) -> bool:
        """Publish an error message and a terminal ``failed`` status update."""
        if self._terminal_published or self.state in (TurnState.FAILED, TurnState.CANCELED):
            return False
        self.state = TurnState.FAILED

        error_message = self._agent_message(
            [Part.text_part(f"I'm sorry, I encountered an error: {error}")]
        )
        await self.event_bus.publish(error_message)
        await self.event_bus.publish(self._status_event(TaskState.FAILED, error_message, final=True))
        self._terminal_published = True
        return True

    async def cancel(self) -> bool:
        """Publish a terminal ``canceled`` update and stop consuming the stream."""
        if self.is_terminal:
            logger.info(f"Cancel for task {self.task_id} ignored, turn already {self.state.value}")
            return False
        self.state = TurnState.CANCELED

        await self.event_bus.publish(self._status_event(TaskState.CANCELED, None, final=True))
        self._terminal_published = True
        await self.finish()

        consumer = self._consumer
        if consumer is not None and consumer is not asyncio.current_task() and not consumer.done():
            consumer.cancel()
        return True

    async def finish(self) -> None:
        """Signal the bus exactly once."""
        if self._finished:
            return
        self._finished = True
        await self.event_bus.finished()


async def _with_timeout(stream: AsyncIterator[StreamItem], timeout: Optional[float]) -> AsyncIterator[StreamItem]:
    if not timeout:
        async for item in stream:
            yield item
        return

    while True:
        try:
            item = await asyncio.wait_for(stream.__anext__(), timeout)
        except StopAsyncIteration:
            return
        except asyncio.TimeoutError:
            raise asyncio.TimeoutError(f"Agent produced no output for {timeout}s") from None
        yield item


class RestaurantAgentExecutor:
    """
    Protocol adapter between A2A requests and the restaurant agent.

    One instance serves every task. Turns for different tasks share no
    mutable state apart from the registry of in-flight turns used to route
    cancellations.
    """

    # UI actions whose turn ends the task instead of waiting for more input
    COMPLETING_ACTIONS = frozenset({"submit_booking"})

    def __init__(self, agent: QueryAgent, stream_timeout: Optional[float] = None):
        self.agent = agent
        self.stream_timeout = stream_timeout
        self._turns: dict[str, Turn] = {}

    def resolve_final_state(self, action_name: Optional[str]) -> TaskState:
        """Terminal state for a turn, given the UI action that started it."""
        if action_name in self.COMPLETING_ACTIONS:
            return TaskState.COMPLETED
        return TaskState.INPUT_REQUIRED

    def build_query(self, context: RequestContext) -> tuple[str, Optional[str]]:
        """Return the agent query and the UI action name (None for text turns)."""
        parts = context.message.parts
        logger.info(f"--- AGENT_EXECUTOR: Processing {len(parts)} message parts ---")

        ui_event = parse_ui_event(parts)
        if ui_event is not None:
            logger.info(f"Received a2ui ClientEvent: {ui_event.model_dump(exclude_none=True)}")
            return build_query_from_ui_event(ui_event), ui_event.actionName

        logger.info("No a2ui UI event part found. Falling back to text input.")
        return get_user_input(parts), None

    def active_turn(self, task_id: str) -> Optional[Turn]:
        return self._turns.get(task_id)

    async def execute(self, context: RequestContext, event_bus: EventBus) -> None:
        """Run one turn. All output goes through ``event_bus``."""
        turn = Turn(context.task_id, context.context_id, event_bus)
        turn.attach_consumer(asyncio.current_task())
        self._turns[context.task_id] = turn

        try:
            logger.info(f"--- Client requested extensions: {context.requested_extensions} ---")
            use_ui = try_activate_a2ui_extension(context.requested_extensions)
            if use_ui:
                logger.info("--- AGENT_EXECUTOR: A2UI extension is active. Using UI agent. ---")
            else:
                logger.info("--- AGENT_EXECUTOR: A2UI extension is not active. Using text agent. ---")

            query, action_name = self.build_query(context)
            logger.info(f"--- AGENT_EXECUTOR: Final query for LLM: '{query}' ---")

            await self._drive(turn, query, use_ui, action_name)

        except asyncio.CancelledError:
            if not turn.cancel_requested:
                raise
            logger.info(f"Stopped streaming for canceled task {turn.task_id}")
        except Exception as e:
            logger.error(f"Error in agent execution: {e}", exc_info=True)
            await turn.fail(e)
        finally:
            if self._turns.get(context.task_id) is turn:
                del self._turns[context.task_id]
            await turn.finish()

    async def _drive(self, turn: Turn, query: str, use_ui: bool, action_name: Optional[str]) -> None:
        stream = self.agent.stream(query, turn.context_id, use_ui)
        items = _with_timeout(stream, self.stream_timeout)
        try:
            async for item in items:
                if turn.is_terminal:
                    # Canceled while we were waiting on the agent
                    return

                if not item.is_task_complete:
                    await turn.working(item.updates or "")
                    continue

                final_parts = split_final_response(item.content or "")
                _log_final_parts(final_parts)
                await turn.complete(self.resolve_final_state(action_name), final_parts)
                return
        finally:
            # Stop the producer even if it would yield more after the final item
            await items.aclose()
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        if not turn.is_terminal:
            raise RuntimeError("Agent stream ended without a final response")

    async def cancel(self, task_id: str, context_id: str = "", event_bus: Optional[EventBus] = None) -> bool:
        """
        Cancel a task.

        An in-flight turn is canceled on its own bus. Without one, the
        canceled status goes to ``event_bus`` if given. Returns False when
        the turn had already reached a terminal state.
        """
        logger.info(f"Canceling task: {task_id}")

        turn = self._turns.get(task_id)
        if turn is not None:
            return await turn.cancel()

        if event_bus is None:
            logger.info(f"No running turn for task {task_id}, nothing to cancel")
            return False

        idle_turn = Turn(task_id, context_id, event_bus)
        return await idle_turn.cancel()


def _log_final_parts(parts: list[Part]) -> None:
    logger.info("--- FINAL PARTS TO BE SENT ---")
    for i, part in enumerate(parts):
        logger.info(f"  - Part {i}: Kind = {part.kind.value}")
        if part.kind == PartKind.TEXT:
            logger.info(f"    - Text: {(part.text or '')[:200]}...")
        else:
            logger.info(f"    - Data: {json.dumps(part.data, default=str)[:200]}...")
    logger.info("-----------------------------")
