"""In-memory task state management."""

import asyncio
import logging
from typing import Optional

from .event_bus import Event
from .models import Message, Task, TaskState, TaskStatus, TaskStatusUpdateEvent

logger = logging.getLogger(__name__)


class InMemoryTaskStore:
    """
    Task store keyed by task id.

    Handles:
    - Task creation for new conversations
    - Applying executor events (status updates, messages) to task state
    - Listing and lookup for tasks/get
    """

    def __init__(self):
        self._tasks: dict[str, Task] = {}
        self._lock = asyncio.Lock()

    async def create(self, message: Message, metadata: Optional[dict] = None) -> Task:
        async with self._lock:
            task = Task(metadata=metadata)
            if message.contextId:
                task.contextId = message.contextId
            task.history.append(message.model_copy(update={"taskId": task.id, "contextId": task.contextId}))
            self._tasks[task.id] = task
            logger.debug(f"Created task {task.id} (context {task.contextId})")
            return task

    async def get(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    async def add_message(self, task_id: str, message: Message) -> Optional[Task]:
        async with self._lock:
            task = self._tasks.get(task_id)
            if task:
                task.history.append(message)
            return task

    async def update_status(self, task_id: str, state: TaskState, message: Optional[Message] = None) -> Optional[Task]:
        async with self._lock:
            task = self._tasks.get(task_id)
            if task:
                task.status = TaskStatus(state=state, message=message)
                logger.debug(f"Updated task {task_id}: {state.value}")
            return task

    async def apply(self, event: Event) -> Optional[Task]:
        """Fold an executor event into the stored task."""
        if isinstance(event, TaskStatusUpdateEvent):
            return await self.update_status(event.taskId, event.status.state, event.status.message)
        if isinstance(event, Message) and event.taskId:
            return await self.add_message(event.taskId, event)
        return None

    async def list_tasks(self, state: Optional[TaskState] = None) -> list[Task]:
        tasks = list(self._tasks.values())
        if state:
            tasks = [t for t in tasks if t.status.state == state]
        return sorted(tasks, key=lambda t: t.status.timestamp, reverse=True)

    def __len__(self) -> int:
        return len(self._tasks)
