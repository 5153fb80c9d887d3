"""Domain snapshots returned by the Temporal backend.

Plain frozen records. The only behavior here is display metadata
(status labels and symbols) so renderers don't re-derive it.

// [LAW:one-source-of-truth] Status label/symbol tables live next to the enums.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ExecutionStatus(Enum):
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"
    CANCELED = "Canceled"
    TERMINATED = "Terminated"
    TIMED_OUT = "TimedOut"
    CONTINUED_AS_NEW = "ContinuedAsNew"
    UNKNOWN = "Unknown"

    @property
    def label(self) -> str:
        return self.value

    @property
    def symbol(self) -> str:
        return _STATUS_SYMBOLS[self]

    @property
    def is_open(self) -> bool:
        return self is ExecutionStatus.RUNNING


_STATUS_SYMBOLS: dict[ExecutionStatus, str] = {
    ExecutionStatus.RUNNING: "\u25cf",  # ●
    ExecutionStatus.COMPLETED: "\u2713",  # ✓
    ExecutionStatus.FAILED: "\u2717",  # ✗
    ExecutionStatus.CANCELED: "\u2298",  # ⊘
    ExecutionStatus.TERMINATED: "\u2297",  # ⊗
    ExecutionStatus.TIMED_OUT: "\u23f1",  # ⏱
    ExecutionStatus.CONTINUED_AS_NEW: "\u21bb",  # ↻
    ExecutionStatus.UNKNOWN: "?",
}


class ScheduleState(Enum):
    ACTIVE = "Active"
    PAUSED = "Paused"

    @property
    def label(self) -> str:
        return self.value


class PendingActivityState(Enum):
    SCHEDULED = "Scheduled"
    STARTED = "Started"
    CANCEL_REQUESTED = "CancelRequested"
    PAUSED = "Paused"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ExecutionSummary:
    """One row of a visibility listing."""

    workflow_id: str
    run_id: str
    workflow_type: str
    status: ExecutionStatus
    start_time: datetime | None
    close_time: datetime | None = None
    task_queue: str = ""
    history_length: int = 0


@dataclass(frozen=True)
class FailureInfo:
    message: str
    failure_type: str = ""
    stack_trace: str | None = None
    cause: FailureInfo | None = None


@dataclass(frozen=True)
class PendingActivity:
    activity_id: str
    activity_type: str
    state: PendingActivityState
    attempt: int = 1
    maximum_attempts: int = 0
    scheduled_time: datetime | None = None
    last_started_time: datetime | None = None
    last_heartbeat_time: datetime | None = None
    last_failure_message: str | None = None


@dataclass(frozen=True)
class ExecutionDetail:
    """Describe-execution result, optionally enriched from history."""

    summary: ExecutionSummary
    input: Any = None
    output: Any = None
    failure: FailureInfo | None = None
    history_length: int = 0
    memo: dict[str, Any] = field(default_factory=dict)
    search_attributes: dict[str, Any] = field(default_factory=dict)
    pending_activities: tuple[PendingActivity, ...] = ()
    parent_workflow_id: str | None = None

    @property
    def workflow_id(self) -> str:
        return self.summary.workflow_id

    @property
    def run_id(self) -> str:
        return self.summary.run_id


@dataclass(frozen=True)
class HistoryEvent:
    event_id: int
    event_type: str
    timestamp: datetime | None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Schedule:
    schedule_id: str
    workflow_type: str
    state: ScheduleState
    spec_description: str = ""
    next_run: datetime | None = None
    recent_action_count: int = 0
    notes: str = ""

    @property
    def paused(self) -> bool:
        return self.state is ScheduleState.PAUSED


@dataclass(frozen=True)
class Poller:
    identity: str
    last_access_time: datetime | None = None
    rate_per_second: float = 0.0


@dataclass(frozen=True)
class TaskQueueInfo:
    name: str
    pollers: tuple[Poller, ...] = ()


@dataclass(frozen=True)
class Namespace:
    name: str
    state: str = ""
    description: str = ""
    owner_email: str = ""
    retention: str | None = None


@dataclass(frozen=True)
class ExecutionPage:
    """One page of a visibility listing plus its continuation token."""

    executions: tuple[ExecutionSummary, ...]
    next_page_token: str = ""
