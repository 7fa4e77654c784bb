"""Run, tool call and provider event models used by the orchestrator."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from ..errors import InvalidRunTransitionError, ToolStatusRegressionError


class RunStatus(str, Enum):
    """Statuses reported by the agent runtime for a run."""

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    REQUIRES_ACTION = "requires_action"
    CANCELLING = "cancelling"
    CANCELLED = "cancelled"
    FAILED = "failed"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"
    EXPIRED = "expired"


# Statuses for which the recorder keeps polling (plain strings, as returned by providers)
ACTIVE_RUN_STATUSES = frozenset({
    RunStatus.QUEUED.value,
    RunStatus.IN_PROGRESS.value,
    RunStatus.CANCELLING.value,
    RunStatus.REQUIRES_ACTION.value,
})


class RunState(str, Enum):
    """Local lifecycle of a run as seen by the driver."""

    CREATED = "created"
    STREAMING = "streaming"
    REQUIRES_ACTION = "requires_action"
    COMPLETED = "completed"
    FAILED = "failed"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


TERMINAL_RUN_STATES = frozenset({
    RunState.COMPLETED,
    RunState.FAILED,
    RunState.EXPIRED,
    RunState.CANCELLED,
})

_RUN_TRANSITIONS = {
    RunState.CREATED: {RunState.STREAMING, RunState.FAILED},
    RunState.STREAMING: {RunState.REQUIRES_ACTION} | TERMINAL_RUN_STATES,
    RunState.REQUIRES_ACTION: {RunState.STREAMING, RunState.FAILED},
}


class RunLifecycle:
    """Tracks the state of one run and rejects illegal transitions."""

    def __init__(self):
        self.state = RunState.CREATED
        self.run_id: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_RUN_STATES

    def transition(self, new_state: RunState) -> None:
        """
        Move the run to a new state.

        Raises:
            InvalidRunTransitionError: If the transition is not allowed
        """
        allowed = _RUN_TRANSITIONS.get(self.state, set())
        if new_state not in allowed:
            raise InvalidRunTransitionError(self.state.value, new_state.value)
        self.state = new_state


class ToolCallStatus(str, Enum):
    """User-visible lifecycle of one tool call."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


_TOOL_STATUS_ORDER = {
    ToolCallStatus.PENDING: 0,
    ToolCallStatus.IN_PROGRESS: 1,
    ToolCallStatus.COMPLETED: 2,
    ToolCallStatus.FAILED: 2,
}


@dataclass
class ToolCall:
    """A tool call requested by the agent within one run."""

    id: str
    name: str
    arguments: str
    status: ToolCallStatus = ToolCallStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status in (ToolCallStatus.COMPLETED, ToolCallStatus.FAILED)

    def advance(self, status: ToolCallStatus) -> None:
        """
        Move the call forward.

        Raises:
            ToolStatusRegressionError: If the call is terminal or the status goes backwards
        """
        if self.is_terminal or _TOOL_STATUS_ORDER[status] <= _TOOL_STATUS_ORDER[self.status]:
            raise ToolStatusRegressionError(self.id, self.status.value, status.value)
        self.status = status


@dataclass
class ToolOutput:
    tool_call_id: str
    output: str


class ProviderEventType(str, Enum):
    """Normalized events produced by an agent run provider."""

    RUN_CREATED = "run_created"
    MESSAGE_CREATED = "message_created"
    TEXT_DELTA = "text_delta"
    REQUIRES_ACTION = "requires_action"
    RUN_COMPLETED = "run_completed"
    RUN_FAILED = "run_failed"
    RUN_EXPIRED = "run_expired"
    RUN_CANCELLED = "run_cancelled"


TERMINAL_EVENT_STATES = {
    ProviderEventType.RUN_COMPLETED: RunState.COMPLETED,
    ProviderEventType.RUN_FAILED: RunState.FAILED,
    ProviderEventType.RUN_EXPIRED: RunState.EXPIRED,
    ProviderEventType.RUN_CANCELLED: RunState.CANCELLED,
}


@dataclass
class ProviderEvent:
    """One event of a streaming run."""

    type: ProviderEventType
    run_id: Optional[str] = None
    message_id: Optional[str] = None
    text: Optional[str] = None
    tool_calls: List[ToolCall] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class StepToolCall:
    """A tool call as reported in the post-hoc step log."""

    type: str
    name: Optional[str] = None
    arguments: Optional[str] = None
    output: Optional[str] = None


@dataclass
class RunStep:
    """One step of a finished run."""

    id: str
    type: str
    created_at: datetime
    message_text: Optional[str] = None
    tool_calls: List[StepToolCall] = field(default_factory=list)


@dataclass
class ThreadMessage:
    id: str
    created_at: datetime


@dataclass
class UploadedFile:
    """An attachment received with a turn."""

    filename: str
    content: bytes
    content_type: Optional[str] = None


@dataclass
class TurnRequest:
    """Input of one conversational turn."""

    text: str
    conversation_id: Optional[str] = None
    files: List[UploadedFile] = field(default_factory=list)
