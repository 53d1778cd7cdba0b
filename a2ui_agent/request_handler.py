"""
A2A JSON-RPC method handlers.

Binds the executor's event bus to the two transports:
- message/send    - run the turn to completion, return the Task
- message/stream  - yield every event as it is published
- tasks/get       - look up a task
- tasks/cancel    - cancel a task (no-op once its turn has ended)
"""

import asyncio
import logging
from typing import Any, AsyncIterator, Optional

from pydantic import ValidationError

from .event_bus import QueueEventBus
from .executor import RestaurantAgentExecutor
from .extension import collect_requested_extensions
from .models import (
    JSONRPCError,
    Message,
    RequestContext,
    Task,
    TaskState,
    dump_event,
)
from .task_store import InMemoryTaskStore

logger = logging.getLogger(__name__)

# Task states a new message cannot continue
CLOSED_STATES = frozenset({TaskState.COMPLETED, TaskState.FAILED, TaskState.CANCELED})


class A2AError(Exception):
    """Error reported to the caller as a JSON-RPC error object."""
    code = JSONRPCError.INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidParamsError(A2AError):
    code = JSONRPCError.INVALID_PARAMS


class TaskNotFoundError(A2AError):
    code = JSONRPCError.TASK_NOT_FOUND

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")


def parse_message(data: Any) -> Message:
    """Parse an inbound message, accepting ``type`` as an alias of ``kind``."""
    if not isinstance(data, dict):
        raise InvalidParamsError("params.message is required")

    data = dict(data)
    data.setdefault("role", "user")
    if "parts" not in data and "content" in data:
        data["parts"] = [{"kind": "text", "text": data.pop("content")}]

    parts = []
    for part in data.get("parts") or []:
        if isinstance(part, dict) and "kind" not in part and "type" in part:
            part = {**part, "kind": part["type"]}
            part.pop("type")
        parts.append(part)
    data["parts"] = parts

    try:
        return Message.model_validate(data)
    except ValidationError as e:
        raise InvalidParamsError(f"Invalid message: {e}") from e


class RequestHandler:
    """Runs executor turns for JSON-RPC requests and keeps the task store current."""

    def __init__(self, executor: RestaurantAgentExecutor, task_store: InMemoryTaskStore):
        self.executor = executor
        self.tasks = task_store
        self._running: dict[str, tuple[asyncio.Task, QueueEventBus]] = {}

    # -------------------------------------------------------------------------
    # Turn setup
    # -------------------------------------------------------------------------

    async def _prepare(self, params: dict, header_extensions: Optional[str]) -> tuple[RequestContext, Task, bool]:
        message = parse_message(params.get("message"))
        task_id = message.taskId or params.get("taskId") or params.get("task_id")

        if task_id:
            task = await self.tasks.get(task_id)
            if not task:
                raise TaskNotFoundError(task_id)
            if task.status.state in CLOSED_STATES:
                raise InvalidParamsError(f"Task {task_id} is already {task.status.state.value}")
            if self._turn_in_progress(task_id):
                raise InvalidParamsError(f"Task {task_id} already has a turn in progress")
            message = message.model_copy(update={"taskId": task.id, "contextId": task.contextId})
            await self.tasks.add_message(task.id, message)
            is_new = False
        else:
            task = await self.tasks.create(message, metadata=params.get("metadata"))
            message = message.model_copy(update={"taskId": task.id, "contextId": task.contextId})
            is_new = True

        extensions = collect_requested_extensions(
            header_extensions,
            (message.metadata or {}).get("extensions"),
            message.extensions,
            (task.metadata or {}).get("extensions"),
        )

        context = RequestContext(
            task_id=task.id,
            context_id=task.contextId,
            message=message,
            requested_extensions=extensions,
            task=task,
        )
        return context, task, is_new

    def _turn_in_progress(self, task_id: str) -> bool:
        # The bus closes before the job's done-callback runs
        entry = self._running.get(task_id)
        return entry is not None and not entry[0].done() and not entry[1].is_finished

    def _start(self, context: RequestContext) -> QueueEventBus:
        # The store follows the turn as it publishes; readers only relay
        bus = QueueEventBus(name=context.task_id, listener=self.tasks.apply)
        job = asyncio.create_task(self.executor.execute(context, bus))
        entry = (job, bus)
        self._running[context.task_id] = entry

        def _cleanup(_: asyncio.Task) -> None:
            if self._running.get(context.task_id) is entry:
                del self._running[context.task_id]

        job.add_done_callback(_cleanup)
        return bus

    # -------------------------------------------------------------------------
    # JSON-RPC methods
    # -------------------------------------------------------------------------

    async def on_message_send(self, params: dict, header_extensions: Optional[str] = None) -> dict:
        context, _, _ = await self._prepare(params, header_extensions)
        bus = self._start(context)

        async for _ in bus.events():
            pass

        task = await self.tasks.get(context.task_id)
        return dump_event(task)

    async def on_message_stream(self, params: dict, header_extensions: Optional[str] = None) -> AsyncIterator[dict]:
        """Validate and start the turn, then return the event iterator."""
        context, task, is_new = await self._prepare(params, header_extensions)
        first = dump_event(task) if is_new else None
        bus = self._start(context)
        return self._stream_events(bus, first)

    async def _stream_events(self, bus: QueueEventBus, first: Optional[dict]) -> AsyncIterator[dict]:
        if first is not None:
            yield first
        async for event in bus.events():
            yield dump_event(event)

    async def on_get_task(self, params: dict) -> dict:
        task_id = params.get("id") or params.get("task_id")
        if not task_id:
            raise InvalidParamsError("id required")

        task = await self.tasks.get(task_id)
        if not task:
            raise TaskNotFoundError(task_id)

        result = dump_event(task)
        history_length = params.get("historyLength")
        if isinstance(history_length, int) and history_length >= 0:
            result["history"] = result.get("history", [])[-history_length:] if history_length else []
        return result

    async def on_cancel_task(self, params: dict) -> dict:
        task_id = params.get("id") or params.get("task_id")
        if not task_id:
            raise InvalidParamsError("id required")

        task = await self.tasks.get(task_id)
        if not task:
            raise TaskNotFoundError(task_id)

        if task.status.state.is_final:
            logger.info(f"Task {task_id} already {task.status.state.value}, cancel is a no-op")
            return dump_event(task)

        # Canceled events go out on the turn's own bus, whose listener updates the store
        if self.executor.active_turn(task_id) is not None:
            await self.executor.cancel(task_id, task.contextId)
        elif self._turn_in_progress(task_id):
            # Turn scheduled but not started: stop it and close its bus here
            job, bus = self._running[task_id]
            job.cancel()
            await self.executor.cancel(task_id, task.contextId, bus)
        else:
            # Only reachable when a turn died without a terminal event
            logger.warning(f"Task {task_id} is {task.status.state.value} with no turn running, marking canceled")
            await self.tasks.update_status(task_id, TaskState.CANCELED)

        task = await self.tasks.get(task_id)
        return dump_event(task)
