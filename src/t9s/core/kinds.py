"""Kind registry: one declarative entry per controllable resource kind.

The reducer and event mapper never branch on the kind. Everything that differs
between executions and schedules (columns, tabs, operations, cross-navigation
keys, which Effects load a view) is declared here.

// [LAW:one-source-of-truth] KIND_REGISTRY is the only place kind behavior lives.
// [LAW:locality-or-seam] Adding a kind = one KindSpec entry + its renderers.

Renderers are referenced by dotted path and resolved in the TUI layer so this
module never imports Textual or rich.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from t9s.core import actions, domain, effects
from t9s.core.ids import KindId, OperationId
from t9s.core.state import DetailRef, ViewMode

if TYPE_CHECKING:
    from t9s.core.state import State


# ─── Operation targets ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ExecutionTarget:
    workflow_id: str
    run_id: str | None = None


@dataclass(frozen=True)
class ScheduleTarget:
    schedule_id: str
    paused: bool = False


# ─── Spec records ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ColumnSpec:
    header: str
    width: Optional[int] = None  # None = flexible


@dataclass(frozen=True)
class OperationSpec:
    id: OperationId
    label: str
    key: str
    requires_confirm: bool
    to_effects: Callable[[Any, "State"], list]


@dataclass(frozen=True)
class TabSpec:
    name: str
    param: str
    # Lazily fetched tabs emit their load Effects when entered.
    load: Optional[Callable[["State"], list]] = None


@dataclass(frozen=True)
class CrossNavSpec:
    key: str
    label: str
    action: Callable[[], Any]
    modes: frozenset = frozenset({ViewMode.DETAIL})


@dataclass(frozen=True)
class KindSpec:
    id: KindId
    label: str
    singular: str
    columns: tuple[ColumnSpec, ...]
    row_renderer: str  # dotted path
    detail_renderer: str  # dotted path
    loading_label: str
    empty_label: str
    collection_effects: Callable[["State"], list]
    detail_ref: Callable[[Any], DetailRef]
    load_detail: Callable[["State", DetailRef], list]
    refresh_detail: Callable[["State", DetailRef], list]
    target_for: Callable[[Any], Any]
    record_id: Callable[[Any], str]
    tabs: tuple[TabSpec, ...] = ()
    operations: tuple[OperationSpec, ...] = ()
    cross_nav: tuple[CrossNavSpec, ...] = ()
    load_more: Optional[Callable[["State"], list]] = None
    # Builds an operation target from the detail ref alone, before describe arrives.
    # None when the target needs fields only the record carries.
    target_for_ref: Optional[Callable[[DetailRef], Any]] = None

    @property
    def paginated(self) -> bool:
        return self.load_more is not None

    def open_detail(self, state: "State", record: Any) -> tuple[DetailRef, list]:
        ref = self.detail_ref(record)
        return ref, self.load_detail(state, ref)


# ─── Executions ──────────────────────────────────────────────────────────────


def _execution_collection_effects(state: "State") -> list:
    query = state.search_query(KindId.EXECUTIONS)
    return [
        effects.LoadExecutions(state.namespace, query, state.page_size),
        effects.LoadExecutionCount(state.namespace, query),
    ]


def _execution_load_more(state: "State") -> list:
    return [
        effects.LoadMoreExecutions(
            state.namespace,
            state.search_query(KindId.EXECUTIONS),
            state.next_page_token,
            state.page_size,
        )
    ]


def _execution_detail_ref(record: Any) -> DetailRef:
    return DetailRef(record.workflow_id, record.run_id or None)


def _execution_load_detail(state: "State", ref: DetailRef) -> list:
    return [
        effects.LoadExecutionDetail(state.namespace, ref.record_id, ref.run_id),
        effects.LoadHistory(state.namespace, ref.record_id, ref.run_id),
    ]


def _execution_refresh_detail(state: "State", ref: DetailRef) -> list:
    return [effects.LoadExecutionDetail(state.namespace, ref.record_id, ref.run_id)]


def _execution_target(record: Any) -> ExecutionTarget:
    return ExecutionTarget(record.workflow_id, record.run_id or None)


def _execution_target_for_ref(ref: DetailRef) -> ExecutionTarget:
    return ExecutionTarget(ref.record_id, ref.run_id)


def _load_history_tab(state: "State") -> list:
    ref = state.detail_refs.get(KindId.EXECUTIONS)
    if ref is None:
        return []
    return [effects.LoadHistory(state.namespace, ref.record_id, ref.run_id)]


def _load_task_queue_tab(state: "State") -> list:
    detail = state.details.get(KindId.EXECUTIONS)
    if detail is None or not detail.summary.task_queue:
        return []
    return [effects.LoadTaskQueue(state.namespace, detail.summary.task_queue)]


def _cancel_effects(target: ExecutionTarget, state: "State") -> list:
    return [effects.CancelExecution(state.namespace, target.workflow_id, target.run_id)]


def _terminate_effects(target: ExecutionTarget, state: "State") -> list:
    return [effects.TerminateExecution(state.namespace, target.workflow_id, target.run_id)]


EXECUTION_TABS: tuple[TabSpec, ...] = (
    TabSpec("Summary", "summary"),
    TabSpec("Input/Output", "io"),
    TabSpec("History", "history", load=_load_history_tab),
    TabSpec("Pending Activities", "pending"),
    TabSpec("Task Queue", "task-queue", load=_load_task_queue_tab),
)

PENDING_ACTIVITIES_TAB = 3

EXECUTIONS_SPEC = KindSpec(
    id=KindId.EXECUTIONS,
    label="Workflows",
    singular="workflow",
    columns=(
        ColumnSpec("", 2),
        ColumnSpec("STATUS", 15),
        ColumnSpec("WORKFLOW ID"),
        ColumnSpec("TYPE", 28),
        ColumnSpec("STARTED", 20),
        ColumnSpec("DURATION", 10),
    ),
    row_renderer="t9s.tui.kind_renderers.execution_row",
    detail_renderer="t9s.tui.kind_renderers.execution_detail",
    loading_label="Loading workflows...",
    empty_label="No workflows found",
    collection_effects=_execution_collection_effects,
    detail_ref=_execution_detail_ref,
    load_detail=_execution_load_detail,
    refresh_detail=_execution_refresh_detail,
    target_for=_execution_target,
    record_id=lambda record: record.workflow_id,
    tabs=EXECUTION_TABS,
    operations=(
        OperationSpec(OperationId.CANCEL, "Cancel workflow", "c", True, _cancel_effects),
        OperationSpec(OperationId.TERMINATE, "Terminate workflow", "t", True, _terminate_effects),
    ),
    cross_nav=(
        CrossNavSpec("a", "Activities", actions.OpenExecutionActivities),
    ),
    load_more=_execution_load_more,
    target_for_ref=_execution_target_for_ref,
)


# ─── Schedules ───────────────────────────────────────────────────────────────


def _schedule_collection_effects(state: "State") -> list:
    return [effects.LoadSchedules(state.namespace, state.search_query(KindId.SCHEDULES))]


def _schedule_load_detail(state: "State", ref: DetailRef) -> list:
    return [effects.LoadScheduleDetail(state.namespace, ref.record_id)]


def _schedule_target(record: domain.Schedule) -> ScheduleTarget:
    return ScheduleTarget(record.schedule_id, record.paused)


def _pause_effects(target: ScheduleTarget, state: "State") -> list:
    # Direction comes from the target: a paused schedule is unpaused.
    return [effects.PauseSchedule(state.namespace, target.schedule_id, pause=not target.paused)]


def _trigger_effects(target: ScheduleTarget, state: "State") -> list:
    return [effects.TriggerSchedule(state.namespace, target.schedule_id)]


def _delete_effects(target: ScheduleTarget, state: "State") -> list:
    return [effects.DeleteSchedule(state.namespace, target.schedule_id)]


SCHEDULES_SPEC = KindSpec(
    id=KindId.SCHEDULES,
    label="Schedules",
    singular="schedule",
    columns=(
        ColumnSpec("SCHEDULE ID"),
        ColumnSpec("WORKFLOW TYPE", 28),
        ColumnSpec("STATE", 8),
        ColumnSpec("SPEC", 24),
        ColumnSpec("NEXT RUN", 20),
        ColumnSpec("RUNS", 6),
    ),
    row_renderer="t9s.tui.kind_renderers.schedule_row",
    detail_renderer="t9s.tui.kind_renderers.schedule_detail",
    loading_label="Loading schedules...",
    empty_label="No schedules found",
    collection_effects=_schedule_collection_effects,
    detail_ref=lambda record: DetailRef(record.schedule_id),
    load_detail=_schedule_load_detail,
    refresh_detail=_schedule_load_detail,
    target_for=_schedule_target,
    record_id=lambda record: record.schedule_id,
    operations=(
        OperationSpec(OperationId.PAUSE, "Pause/unpause schedule", "p", False, _pause_effects),
        OperationSpec(OperationId.TRIGGER, "Trigger schedule", "T", True, _trigger_effects),
        OperationSpec(OperationId.DELETE, "Delete schedule", "d", True, _delete_effects),
    ),
    cross_nav=(
        CrossNavSpec(
            "w",
            "Workflows",
            actions.OpenScheduleExecutions,
            modes=frozenset({ViewMode.COLLECTION, ViewMode.DETAIL}),
        ),
    ),
)


# [LAW:one-source-of-truth] Ordered registry; tab bar order follows it.
KIND_REGISTRY: tuple[KindSpec, ...] = (EXECUTIONS_SPEC, SCHEDULES_SPEC)

_BY_ID: dict[KindId, KindSpec] = {spec.id: spec for spec in KIND_REGISTRY}


def kind_spec(kind: KindId) -> KindSpec:
    return _BY_ID[kind]


def operation_for_key(kind: KindId, key: str) -> OperationId | None:
    for op in kind_spec(kind).operations:
        if op.key == key:
            return op.id
    return None


def operation_spec(kind: KindId, op_id: OperationId) -> OperationSpec | None:
    for op in kind_spec(kind).operations:
        if op.id is op_id:
            return op
    return None


def cross_nav_for_key(kind: KindId, key: str, mode: ViewMode) -> CrossNavSpec | None:
    for nav in kind_spec(kind).cross_nav:
        if nav.key == key and mode in nav.modes:
            return nav
    return None


def tab_count(kind: KindId) -> int:
    return len(kind_spec(kind).tabs)


def tab_index_for_param(kind: KindId, param: str | None) -> int:
    """Map a ``tab`` URI parameter to a tab index; unknown values open the first tab."""
    if not param:
        return 0
    normalized = _TAB_ALIASES.get(param.strip().lower(), param.strip().lower())
    for index, tab in enumerate(kind_spec(kind).tabs):
        if tab.param == normalized:
            return index
    return 0


def tab_param(kind: KindId, index: int) -> str | None:
    tabs = kind_spec(kind).tabs
    if not tabs or not 0 <= index < len(tabs):
        return None
    return tabs[index].param


_TAB_ALIASES = {
    "input": "io",
    "output": "io",
    "input-output": "io",
    "input_output": "io",
    "pending-activities": "pending",
    "pending_activities": "pending",
    "activities": "pending",
    "task_queue": "task-queue",
    "taskqueue": "task-queue",
}
