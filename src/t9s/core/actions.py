"""Actions: the closed set of events the reducer consumes.

Three families: user input (navigation, overlays, text entry), backend results
posted by the worker, and control (refresh, tick, quit, errors).

// [LAW:one-type-per-behavior] Each event is its own frozen dataclass; the reducer
//   dispatches on type through a table, never on string tags.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from t9s.core import domain
from t9s.core.ids import KindId, OperationId
from t9s.core.location import Location


# ─── Navigation ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class NavigateUp:
    pass


@dataclass(frozen=True)
class NavigateDown:
    pass


@dataclass(frozen=True)
class NavigateTop:
    pass


@dataclass(frozen=True)
class NavigateBottom:
    pass


@dataclass(frozen=True)
class PageUp:
    pass


@dataclass(frozen=True)
class PageDown:
    pass


@dataclass(frozen=True)
class Select:
    pass


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class SwitchKind:
    kind: KindId


@dataclass(frozen=True)
class NextTab:
    pass


@dataclass(frozen=True)
class PrevTab:
    pass


@dataclass(frozen=True)
class OpenScheduleExecutions:
    """Jump from a schedule to the executions it started."""


@dataclass(frozen=True)
class OpenExecutionActivities:
    """Jump from an execution detail to its pending activities tab."""


@dataclass(frozen=True)
class ApplyLocation:
    location: Location


# ─── Chords, overlays, text entry ────────────────────────────────────────────


@dataclass(frozen=True)
class EnterPendingChord:
    pass


@dataclass(frozen=True)
class CancelChord:
    pass


@dataclass(frozen=True)
class RunOperation:
    op: OperationId


@dataclass(frozen=True)
class ConfirmOperation:
    pass


@dataclass(frozen=True)
class CancelConfirm:
    pass


@dataclass(frozen=True)
class OpenCommandInput:
    pass


@dataclass(frozen=True)
class OpenSearch:
    pass


@dataclass(frozen=True)
class CloseOverlay:
    """Escape out of the current overlay or text-entry mode."""


@dataclass(frozen=True)
class UpdateInputBuffer:
    text: str


@dataclass(frozen=True)
class SubmitCommand:
    pass


@dataclass(frozen=True)
class SubmitSearch:
    pass


@dataclass(frozen=True)
class ToggleHelp:
    pass


@dataclass(frozen=True)
class OpenNamespaceSelector:
    pass


@dataclass(frozen=True)
class SwitchNamespace:
    namespace: str


# ─── Backend results ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ExecutionsLoaded:
    executions: tuple[domain.ExecutionSummary, ...]
    next_page_token: str = ""


@dataclass(frozen=True)
class MoreExecutionsLoaded:
    executions: tuple[domain.ExecutionSummary, ...]
    next_page_token: str = ""


@dataclass(frozen=True)
class ExecutionDetailLoaded:
    detail: domain.ExecutionDetail


@dataclass(frozen=True)
class HistoryLoaded:
    workflow_id: str
    run_id: str | None
    events: tuple[domain.HistoryEvent, ...]


@dataclass(frozen=True)
class NamespacesLoaded:
    namespaces: tuple[domain.Namespace, ...]


@dataclass(frozen=True)
class SchedulesLoaded:
    schedules: tuple[domain.Schedule, ...]


@dataclass(frozen=True)
class ScheduleDetailLoaded:
    schedule: domain.Schedule


@dataclass(frozen=True)
class ExecutionCountLoaded:
    count: int


@dataclass(frozen=True)
class TaskQueueLoaded:
    """Pollers for ``task_queue.name``; applies only while that queue is on screen."""

    task_queue: domain.TaskQueueInfo


@dataclass(frozen=True)
class OperationSucceeded:
    message: str


# ─── Control ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Refresh:
    pass


@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class DetailViewportMeasured:
    """The detail body can scroll at most ``max_scroll`` lines at its current size."""

    max_scroll: int


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class Error:
    message: str


@dataclass(frozen=True)
class ClearError:
    pass


@dataclass(frozen=True)
class TogglePolling:
    pass


@dataclass(frozen=True)
class ShowToast:
    message: str
    is_error: bool = False


Action = Union[
    NavigateUp, NavigateDown, NavigateTop, NavigateBottom, PageUp, PageDown,
    Select, Back, SwitchKind, NextTab, PrevTab, OpenScheduleExecutions,
    OpenExecutionActivities, ApplyLocation, EnterPendingChord, CancelChord,
    RunOperation, ConfirmOperation, CancelConfirm, OpenCommandInput, OpenSearch,
    CloseOverlay, UpdateInputBuffer, SubmitCommand, SubmitSearch, ToggleHelp,
    OpenNamespaceSelector, SwitchNamespace, ExecutionsLoaded, MoreExecutionsLoaded,
    ExecutionDetailLoaded, HistoryLoaded, NamespacesLoaded, SchedulesLoaded,
    ScheduleDetailLoaded, ExecutionCountLoaded, TaskQueueLoaded, OperationSucceeded,
    Refresh, Quit, DetailViewportMeasured, Tick, Error, ClearError, TogglePolling, ShowToast,
]

# Results that prove the backend is reachable.
DATA_LOADED: tuple[type[Any], ...] = (
    ExecutionsLoaded,
    MoreExecutionsLoaded,
    ExecutionDetailLoaded,
    HistoryLoaded,
    NamespacesLoaded,
    SchedulesLoaded,
    ScheduleDetailLoaded,
    ExecutionCountLoaded,
    TaskQueueLoaded,
    OperationSucceeded,
)
