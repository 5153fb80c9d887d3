"""Effects: side-effect requests emitted by the reducer for the worker.

Every effect is self-contained: it carries the namespace and any query or page
token it needs, so the worker never reads State.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class LoadExecutions:
    namespace: str
    query: str | None = None
    page_size: int = 50


@dataclass(frozen=True)
class LoadMoreExecutions:
    namespace: str
    query: str | None
    page_token: str
    page_size: int = 50


@dataclass(frozen=True)
class LoadExecutionDetail:
    namespace: str
    workflow_id: str
    run_id: str | None = None


@dataclass(frozen=True)
class LoadHistory:
    namespace: str
    workflow_id: str
    run_id: str | None = None


@dataclass(frozen=True)
class LoadExecutionCount:
    namespace: str
    query: str | None = None


@dataclass(frozen=True)
class LoadNamespaces:
    pass


@dataclass(frozen=True)
class LoadSchedules:
    namespace: str
    query: str | None = None


@dataclass(frozen=True)
class LoadScheduleDetail:
    namespace: str
    schedule_id: str


@dataclass(frozen=True)
class LoadTaskQueue:
    namespace: str
    task_queue: str


@dataclass(frozen=True)
class CancelExecution:
    namespace: str
    workflow_id: str
    run_id: str | None = None


@dataclass(frozen=True)
class TerminateExecution:
    namespace: str
    workflow_id: str
    run_id: str | None = None
    reason: str = "terminated via t9s"


@dataclass(frozen=True)
class SignalExecution:
    namespace: str
    workflow_id: str
    run_id: str | None
    signal_name: str
    payload: str | None = None


@dataclass(frozen=True)
class PauseSchedule:
    namespace: str
    schedule_id: str
    pause: bool


@dataclass(frozen=True)
class TriggerSchedule:
    namespace: str
    schedule_id: str


@dataclass(frozen=True)
class DeleteSchedule:
    namespace: str
    schedule_id: str


@dataclass(frozen=True)
class Quit:
    """Handled by the main loop; never reaches the worker."""


Effect = Union[
    LoadExecutions, LoadMoreExecutions, LoadExecutionDetail, LoadHistory,
    LoadExecutionCount, LoadNamespaces, LoadSchedules, LoadScheduleDetail,
    LoadTaskQueue, CancelExecution, TerminateExecution, SignalExecution,
    PauseSchedule, TriggerSchedule, DeleteSchedule, Quit,
]
