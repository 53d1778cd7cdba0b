"""A2A protocol types used by the restaurant agent."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


def new_id() -> str:
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# A2A Protocol Types
# =============================================================================

class TaskState(str, Enum):
    """A2A Task lifecycle states"""
    SUBMITTED = "submitted"
    WORKING = "working"
    INPUT_REQUIRED = "input-required"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_final(self) -> bool:
        """States after which a turn publishes nothing more."""
        return self in FINAL_STATES


FINAL_STATES = frozenset({
    TaskState.INPUT_REQUIRED,
    TaskState.COMPLETED,
    TaskState.FAILED,
    TaskState.CANCELED,
})


class PartKind(str, Enum):
    """A2A Message Part kinds"""
    TEXT = "text"
    DATA = "data"


class Part(BaseModel):
    """A2A Message Part - either text or structured data"""
    kind: PartKind = PartKind.TEXT
    text: Optional[str] = None
    data: Optional[Any] = None
    metadata: Optional[dict] = None

    @classmethod
    def text_part(cls, text: str) -> "Part":
        return cls(kind=PartKind.TEXT, text=text)

    @classmethod
    def data_part(cls, data: Any, metadata: Optional[dict] = None) -> "Part":
        return cls(kind=PartKind.DATA, data=data, metadata=metadata)


class Message(BaseModel):
    """A2A Message format"""
    kind: str = "message"
    role: str  # "user" or "agent"
    messageId: str = Field(default_factory=new_id)
    parts: list[Part] = []
    contextId: Optional[str] = None
    taskId: Optional[str] = None
    extensions: Optional[list[str]] = None
    metadata: Optional[dict] = None


class TaskStatus(BaseModel):
    """Current state of a task plus the message that produced it"""
    state: TaskState
    message: Optional[Message] = None
    timestamp: str = Field(default_factory=utc_timestamp)


class Task(BaseModel):
    """A2A Task representation"""
    kind: str = "task"
    id: str = Field(default_factory=new_id)
    contextId: str = Field(default_factory=new_id)
    status: TaskStatus = Field(default_factory=lambda: TaskStatus(state=TaskState.SUBMITTED))
    history: list[Message] = []
    metadata: Optional[dict] = None


class TaskStatusUpdateEvent(BaseModel):
    """Outbound status-update event"""
    kind: str = "status-update"
    taskId: str
    contextId: str
    status: TaskStatus
    final: bool = False


class AgentExtension(BaseModel):
    """Extension advertised in the agent card"""
    uri: str
    description: Optional[str] = None
    required: bool = False
    params: Optional[dict] = None


class Skill(BaseModel):
    """Agent skill/capability"""
    id: str
    name: str
    description: str
    tags: list[str] = []
    examples: list[str] = []


class AgentCapabilities(BaseModel):
    streaming: bool = True
    pushNotifications: bool = False
    extensions: list[AgentExtension] = []


class AgentCard(BaseModel):
    """A2A Agent Card for discovery"""
    name: str
    description: str
    url: str
    version: str = "1.0.0"
    protocolVersion: str = "0.3.0"
    capabilities: AgentCapabilities = Field(default_factory=AgentCapabilities)
    skills: list[Skill] = []
    defaultInputModes: list[str] = ["text"]
    defaultOutputModes: list[str] = ["text"]


# =============================================================================
# A2UI client events and agent stream items
# =============================================================================

class UIEventAction(BaseModel):
    """User action submitted from a rendered A2UI surface"""
    actionName: str
    context: dict[str, Any] = {}
    surfaceId: Optional[str] = None
    sourceComponentId: Optional[str] = None


@dataclass
class StreamItem:
    """One item yielded by the agent stream.

    Only the last item of a turn has ``is_task_complete`` set; it carries the
    full response in ``content``. Earlier items carry progress text in
    ``updates``.
    """
    is_task_complete: bool
    updates: Optional[str] = None
    content: Optional[str] = None


@dataclass
class RequestContext:
    """Everything the executor needs to know about one inbound turn."""
    task_id: str
    context_id: str
    message: Message
    requested_extensions: list[str]
    task: Optional[Task] = None


# =============================================================================
# JSON-RPC Types
# =============================================================================

class JSONRPCRequest(BaseModel):
    """JSON-RPC 2.0 Request"""
    jsonrpc: str = "2.0"
    method: str
    params: Optional[dict] = None
    id: Optional[str | int] = None


class JSONRPCResponse(BaseModel):
    """JSON-RPC 2.0 Response"""
    jsonrpc: str = "2.0"
    result: Optional[Any] = None
    error: Optional[dict] = None
    id: Optional[str | int] = None


class JSONRPCError:
    """Standard JSON-RPC error codes"""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    # A2A specific
    TASK_NOT_FOUND = -32001


def dump_event(event: BaseModel) -> dict:
    """Serialize an outbound event for the wire."""
    return event.model_dump(mode="json", exclude_none=True)
