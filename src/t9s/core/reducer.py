"""Pure reducer: (State, Action) -> (State', [Effect]).

Synchronous, never performs I/O, never mutates the State it is given. Every
handler receives a private clone and returns the Effects to dispatch, in order.

// [LAW:single-enforcer] This module is the only producer of new States.
// [LAW:dataflow-not-control-flow] Dispatch is a type -> handler table; kind
//   differences come from the registry, never from branches here.
// [LAW:one-source-of-truth] Loading markers are derived from the emitted
//   Effects in _mark_pending, not set ad hoc by handlers.
"""

from __future__ import annotations

import dataclasses
import time
from typing import Any, Callable

from t9s.core import actions, domain, effects
from t9s.core.commands import parse_command
from t9s.core.ids import KindId
from t9s.core.kinds import PENDING_ACTIVITIES_TAB, TabSpec, kind_spec, operation_spec
from t9s.core.kinds import tab_index_for_param, tab_param
from t9s.core.location import (
    DeepLinkError,
    ExecutionActivities,
    ExecutionDetail,
    ExecutionsCollection,
    Location,
    ScheduleDetail,
    ScheduleExecutions,
    SchedulesCollection,
    compose_schedule_query,
    format_deep_link,
    parse_deep_link,
)
from t9s.core.state import (
    MAX_POLL_INTERVAL,
    NAMESPACE_OVERLAY,
    HELP_OVERLAY,
    NO_OVERLAY,
    NOT_LOADED,
    TOAST_TTL,
    ConnectionStatus,
    DetailRef,
    InputMode,
    LoadState,
    LoadStatus,
    Overlay,
    OverlayKind,
    PendingConfirm,
    State,
    Toast,
    View,
)

# Bottom of a detail body that has not been measured yet; renderers clamp it.
DETAIL_SCROLL_BOTTOM = 1_000_000

# Look-ahead distance for fetching the next page.
LOAD_MORE_THRESHOLD = 5

MAX_BACKOFF_EXPONENT = 5

Handler = Callable[[State, Any, float], list]


def reduce(state: State, action: Any, now: float | None = None) -> tuple[State, list]:
    """Compute the next State and the Effects to dispatch for ``action``.

    ``now`` is monotonic seconds; callers pass it explicitly so time-based
    rules (toast expiry, polling) are deterministic.
    """
    now = time.monotonic() if now is None else now
    new = state.clone()
    _expire_toast(new, now)

    handler = _HANDLERS.get(type(action))
    if handler is None:
        return new, []

    if isinstance(action, actions.DATA_LOADED):
        _record_success(new)

    emitted = list(handler(new, action, now) or [])
    _mark_pending(new, emitted)
    return new, emitted


# ─── Shared helpers ──────────────────────────────────────────────────────────


def _expire_toast(state: State, now: float) -> None:
    if state.toast is not None and now - state.toast.at > TOAST_TTL:
        state.toast = None


def _toast(state: State, message: str, now: float, is_error: bool = False) -> None:
    state.toast = Toast(message, now, is_error)


def _record_success(state: State) -> None:
    state.error_count = 0
    state.polling_interval = state.base_interval
    state.connection_status = ConnectionStatus.CONNECTED


def backoff_interval(base: float, error_count: int) -> float:
    """Polling interval after ``error_count`` consecutive failures."""
    grown = base * 2 ** min(error_count, MAX_BACKOFF_EXPONENT)
    return max(base, min(grown, MAX_POLL_INTERVAL))


_COLLECTION_LOADS: dict[type, KindId] = {
    effects.LoadExecutions: KindId.EXECUTIONS,
    effects.LoadSchedules: KindId.SCHEDULES,
}

_TAB_LOADS: dict[type, str] = {
    effects.LoadHistory: "history",
    effects.LoadTaskQueue: "task_queue",
}

# Tab URI param -> State attribute holding that tab's lazily fetched data.
_TAB_LOAD_STATE: dict[str, str] = {
    "history": "history",
    "task-queue": "task_queue",
}


def _mark_pending(state: State, emitted: list) -> None:
    # Loaded data stays visible while a refresh is in flight.
    for effect in emitted:
        kind = _COLLECTION_LOADS.get(type(effect))
        if kind is not None and not state.collection(kind).is_loaded:
            state.collections[kind] = LoadState.loading()
        attr = _TAB_LOADS.get(type(effect))
        if attr is not None and not getattr(state, attr).is_loaded:
            setattr(state, attr, LoadState.loading())


def _clamp_index(index: int | None, delta: int, length: int) -> int | None:
    if length == 0:
        return None
    if index is None:
        return 0
    return max(0, min(index + delta, length - 1))


def _rederive_cursor(state: State, kind: KindId) -> None:
    length = len(state.collection(kind).items)
    current = state.cursor(kind)
    if length == 0:
        state.cursors[kind] = None
    elif current is None:
        state.cursors[kind] = 0
    else:
        state.cursors[kind] = min(current, length - 1)


def _current_record(state: State) -> Any:
    kind = state.view.kind
    if state.view.is_detail:
        return state.details.get(kind)
    return state.selected_row(kind)


def _current_target(state: State) -> Any:
    """Operation target for the row or detail on screen, or None."""
    spec = kind_spec(state.view.kind)
    record = _current_record(state)
    if record is not None:
        return spec.target_for(record)
    ref = state.detail_refs.get(spec.id) if state.view.is_detail else None
    if ref is None or spec.target_for_ref is None:
        return None
    return spec.target_for_ref(ref)


def _current_tab(state: State) -> TabSpec | None:
    tabs = kind_spec(state.view.kind).tabs
    if not state.view.is_detail or not 0 <= state.detail_tab < len(tabs):
        return None
    return tabs[state.detail_tab]


def _tab_effects(state: State) -> list:
    tab = _current_tab(state)
    if tab is None or tab.load is None:
        return []
    return tab.load(state)


def _clear_kind_state(state: State) -> None:
    state.collections = {}
    state.cursors = {}
    state.details = {}
    state.detail_refs = {}
    state.search_queries = {}
    state.history = NOT_LOADED
    state.task_queue = NOT_LOADED
    state.execution_count = None
    state.detail_tab = 0
    state.detail_scroll = 0
    state.detail_scroll_max = None
    state.next_page_token = ""
    state.loading_more = False


def _set_query(state: State, kind: KindId, query: str | None) -> None:
    """Replace a kind's visibility query; the old rows no longer apply."""
    if query:
        state.search_queries[kind] = query
    else:
        state.search_queries.pop(kind, None)
    state.collections[kind] = NOT_LOADED
    state.cursors[kind] = None
    if kind_spec(kind).paginated:
        state.next_page_token = ""
        state.loading_more = False
        state.execution_count = None


def _show_collection(state: State, kind: KindId) -> list:
    state.view = View.collection(kind)
    state.detail_scroll = 0
    state.detail_scroll_max = None
    return kind_spec(kind).collection_effects(state)


def _enter_detail(state: State, kind: KindId, ref: DetailRef, tab: int = 0) -> list:
    spec = kind_spec(kind)
    state.view = View.detail(kind)
    state.detail_tab = tab
    state.detail_scroll = 0
    state.detail_scroll_max = None
    state.detail_refs[kind] = ref
    state.details[kind] = None
    state.history = NOT_LOADED
    state.task_queue = NOT_LOADED
    emitted = spec.load_detail(state, ref)
    for effect in _tab_effects(state):
        if effect not in emitted:
            emitted.append(effect)
    return emitted


def _refresh(state: State, now: float) -> list:
    state.last_refresh = now
    kind = state.view.kind
    spec = kind_spec(kind)
    if not state.view.is_detail:
        return spec.collection_effects(state)
    ref = state.detail_refs.get(kind)
    if ref is None:
        return []
    emitted = spec.refresh_detail(state, ref)
    for effect in _tab_effects(state):
        if effect not in emitted:
            emitted.append(effect)
    return emitted


def _maybe_load_more(state: State) -> list:
    kind = state.view.kind
    spec = kind_spec(kind)
    if (
        not spec.paginated
        or state.view.is_detail
        or state.loading_more
        or not state.next_page_token
    ):
        return []
    cursor = state.cursor(kind)
    rows = state.collection(kind).items
    if cursor is None or cursor + LOAD_MORE_THRESHOLD < len(rows):
        return []
    state.loading_more = True
    return spec.load_more(state)


# ─── Location ────────────────────────────────────────────────────────────────


def current_location(state: State) -> Location:
    """Where the user is, as a deep-linkable Location."""
    kind = state.view.kind
    ref = state.detail_refs.get(kind) if state.view.is_detail else None
    query = state.search_query(kind)
    if kind is KindId.EXECUTIONS:
        if ref is not None:
            tab = tab_param(kind, state.detail_tab) if state.detail_tab else None
            segment = ExecutionDetail(ref.record_id, ref.run_id, tab)
        else:
            segment = ExecutionsCollection(query)
    elif ref is not None:
        segment = ScheduleDetail(ref.record_id)
    else:
        segment = SchedulesCollection(query)
    return Location(state.namespace, (segment,))


def _route_executions(state: State, leaf: ExecutionsCollection) -> list:
    _set_query(state, KindId.EXECUTIONS, leaf.query)
    return _show_collection(state, KindId.EXECUTIONS)


def _route_execution_detail(state: State, leaf: ExecutionDetail) -> list:
    tab = tab_index_for_param(KindId.EXECUTIONS, leaf.tab)
    return _enter_detail(state, KindId.EXECUTIONS, DetailRef(leaf.workflow_id, leaf.run_id), tab)


def _route_execution_activities(state: State, leaf: ExecutionActivities) -> list:
    ref = DetailRef(leaf.workflow_id)
    return _enter_detail(state, KindId.EXECUTIONS, ref, PENDING_ACTIVITIES_TAB)


def _route_schedules(state: State, leaf: SchedulesCollection) -> list:
    _set_query(state, KindId.SCHEDULES, leaf.query)
    return _show_collection(state, KindId.SCHEDULES)


def _route_schedule_detail(state: State, leaf: ScheduleDetail) -> list:
    return _enter_detail(state, KindId.SCHEDULES, DetailRef(leaf.schedule_id))


def _route_schedule_executions(state: State, leaf: ScheduleExecutions) -> list:
    _set_query(state, KindId.EXECUTIONS, compose_schedule_query(leaf.schedule_id, leaf.query))
    return _show_collection(state, KindId.EXECUTIONS)


_ROUTES: dict[type, Callable[[State, Any], list]] = {
    ExecutionsCollection: _route_executions,
    ExecutionDetail: _route_execution_detail,
    ExecutionActivities: _route_execution_activities,
    SchedulesCollection: _route_schedules,
    ScheduleDetail: _route_schedule_detail,
    ScheduleExecutions: _route_schedule_executions,
}


def _apply_location(state: State, location: Location) -> list:
    _clear_kind_state(state)
    state.namespace = location.namespace
    state.overlay = NO_OVERLAY
    state.input_mode = InputMode.NORMAL
    state.input_buffer = ""
    return _ROUTES[type(location.leaf)](state, location.leaf)


def _switch_namespace(state: State, namespace: str) -> list:
    _clear_kind_state(state)
    state.namespace = namespace
    state.overlay = NO_OVERLAY
    return _show_collection(state, state.view.kind)


# ─── Navigation handlers ─────────────────────────────────────────────────────


def _scroll_limit(state: State) -> int:
    if state.detail_scroll_max is None:
        return DETAIL_SCROLL_BOTTOM
    return state.detail_scroll_max


def _move(state: State, step: int, repeat: int = 1) -> list:
    if state.overlay.kind is OverlayKind.NAMESPACE_SELECTOR:
        index = state.namespace_cursor
        for _ in range(repeat):
            index = _clamp_index(index, step, len(state.namespaces))
        state.namespace_cursor = index or 0
        return []
    if state.view.is_detail:
        limit = _scroll_limit(state)
        state.detail_scroll = max(0, min(min(state.detail_scroll, limit) + step * repeat, limit))
        return []
    kind = state.view.kind
    length = len(state.collection(kind).items)
    index = state.cursor(kind)
    for _ in range(repeat):
        index = _clamp_index(index, step, length)
    state.cursors[kind] = index
    return _maybe_load_more(state) if step > 0 else []


def _jump(state: State, bottom: bool) -> list:
    if state.overlay.kind is OverlayKind.NAMESPACE_SELECTOR:
        state.namespace_cursor = max(0, len(state.namespaces) - 1) if bottom else 0
        return []
    if state.view.is_detail:
        state.detail_scroll = _scroll_limit(state) if bottom else 0
        return []
    kind = state.view.kind
    length = len(state.collection(kind).items)
    if length == 0:
        state.cursors[kind] = None
        return []
    state.cursors[kind] = length - 1 if bottom else 0
    return _maybe_load_more(state) if bottom else []


def _on_navigate_up(state: State, action, now: float) -> list:
    return _move(state, -1)


def _on_navigate_down(state: State, action, now: float) -> list:
    return _move(state, 1)


def _on_page_up(state: State, action, now: float) -> list:
    return _move(state, -1, state.page_height)


def _on_page_down(state: State, action, now: float) -> list:
    return _move(state, 1, state.page_height)


def _on_navigate_top(state: State, action, now: float) -> list:
    state.input_mode = InputMode.NORMAL
    return _jump(state, bottom=False)


def _on_navigate_bottom(state: State, action, now: float) -> list:
    return _jump(state, bottom=True)


def _on_select(state: State, action, now: float) -> list:
    if state.overlay.kind is OverlayKind.NAMESPACE_SELECTOR:
        if not state.namespaces:
            return []
        index = min(state.namespace_cursor, len(state.namespaces) - 1)
        return _switch_namespace(state, state.namespaces[index].name)
    if state.view.is_detail:
        return []
    kind = state.view.kind
    record = state.selected_row(kind)
    if record is None:
        return []
    ref = kind_spec(kind).detail_ref(record)
    return _enter_detail(state, kind, ref)


def _on_back(state: State, action, now: float) -> list:
    kind = state.view.kind
    if state.view.is_detail:
        state.view = View.collection(kind)
        state.detail_scroll = 0
        state.detail_scroll_max = None
        if state.collection(kind).status is LoadStatus.NOT_LOADED:
            return kind_spec(kind).collection_effects(state)
        return []
    if state.search_query(kind):
        _set_query(state, kind, None)
        return kind_spec(kind).collection_effects(state)
    return []


def _on_switch_kind(state: State, action: actions.SwitchKind, now: float) -> list:
    return _show_collection(state, action.kind)


def _cycle_tab(state: State, delta: int) -> list:
    if not state.view.is_detail:
        return []
    count = len(kind_spec(state.view.kind).tabs)
    if count == 0:
        return []
    state.detail_tab = (state.detail_tab + delta) % count
    state.detail_scroll = 0
    state.detail_scroll_max = None
    return _tab_effects(state)


def _on_next_tab(state: State, action, now: float) -> list:
    return _cycle_tab(state, 1)


def _on_prev_tab(state: State, action, now: float) -> list:
    return _cycle_tab(state, -1)


def _on_open_schedule_executions(state: State, action, now: float) -> list:
    if state.view.kind is not KindId.SCHEDULES:
        return []
    schedule = _current_record(state)
    if schedule is None:
        schedule_ref = state.detail_refs.get(KindId.SCHEDULES) if state.view.is_detail else None
        if schedule_ref is None:
            _toast(state, "no schedule selected", now, is_error=True)
            return []
        schedule_id = schedule_ref.record_id
    else:
        schedule_id = schedule.schedule_id
    _set_query(state, KindId.EXECUTIONS, compose_schedule_query(schedule_id))
    return _show_collection(state, KindId.EXECUTIONS)


def _on_open_execution_activities(state: State, action, now: float) -> list:
    if state.view.kind is not KindId.EXECUTIONS:
        return []
    if state.view.is_detail:
        state.detail_tab = PENDING_ACTIVITIES_TAB
        state.detail_scroll = 0
        state.detail_scroll_max = None
        return []
    record = state.selected_row(KindId.EXECUTIONS)
    if record is None:
        _toast(state, "no workflow selected", now, is_error=True)
        return []
    ref = kind_spec(KindId.EXECUTIONS).detail_ref(record)
    return _enter_detail(state, KindId.EXECUTIONS, ref, PENDING_ACTIVITIES_TAB)


def _on_apply_location(state: State, action: actions.ApplyLocation, now: float) -> list:
    return _apply_location(state, action.location)


# ─── Overlay and text entry handlers ─────────────────────────────────────────


def _on_enter_chord(state: State, action, now: float) -> list:
    state.input_mode = InputMode.PENDING_G
    return []


def _on_cancel_chord(state: State, action, now: float) -> list:
    state.input_mode = InputMode.NORMAL
    return []


def _on_run_operation(state: State, action: actions.RunOperation, now: float) -> list:
    kind = state.view.kind
    spec = kind_spec(kind)
    op = operation_spec(kind, action.op)
    if op is None:
        return []
    target = _current_target(state)
    if target is None:
        _toast(state, f"no {spec.singular} selected", now, is_error=True)
        return []
    if op.requires_confirm:
        state.overlay = Overlay.confirming(PendingConfirm(kind, op.id, target))
        return []
    return op.to_effects(target, state)


def _on_confirm(state: State, action, now: float) -> list:
    pending = state.overlay.confirm
    if state.overlay.kind is not OverlayKind.CONFIRM or pending is None:
        return []
    state.overlay = NO_OVERLAY
    op = operation_spec(pending.kind, pending.op)
    if op is None:
        return []
    return op.to_effects(pending.target, state)


def _on_cancel_confirm(state: State, action, now: float) -> list:
    if state.overlay.kind is OverlayKind.CONFIRM:
        state.overlay = NO_OVERLAY
    return []


def _on_open_command(state: State, action, now: float) -> list:
    state.input_mode = InputMode.COMMAND
    state.input_buffer = ""
    return []


def _on_open_search(state: State, action, now: float) -> list:
    if state.view.is_detail:
        return []
    state.input_mode = InputMode.SEARCH
    state.input_buffer = state.search_query(state.view.kind) or ""
    return []


def _on_close_overlay(state: State, action, now: float) -> list:
    if state.input_mode is not InputMode.NORMAL:
        state.input_mode = InputMode.NORMAL
        state.input_buffer = ""
    else:
        state.overlay = NO_OVERLAY
    return []


def _on_update_buffer(state: State, action: actions.UpdateInputBuffer, now: float) -> list:
    state.input_buffer = action.text
    return []


def _on_submit_command(state: State, action, now: float) -> list:
    text = state.input_buffer
    state.input_mode = InputMode.NORMAL
    state.input_buffer = ""
    return _run_command(state, text, now)


def _on_submit_search(state: State, action, now: float) -> list:
    query = state.input_buffer.strip()
    state.input_mode = InputMode.NORMAL
    state.input_buffer = ""
    if state.view.is_detail:
        return []
    kind = state.view.kind
    _set_query(state, kind, query or None)
    return kind_spec(kind).collection_effects(state)


def _on_toggle_help(state: State, action, now: float) -> list:
    state.overlay = NO_OVERLAY if state.overlay.kind is OverlayKind.HELP else HELP_OVERLAY
    return []


def _open_namespace_selector(state: State) -> list:
    state.overlay = NAMESPACE_OVERLAY
    state.namespace_cursor = _namespace_index(state)
    return [effects.LoadNamespaces()]


def _namespace_index(state: State) -> int:
    for index, ns in enumerate(state.namespaces):
        if ns.name == state.namespace:
            return index
    return 0


def _on_open_namespace_selector(state: State, action, now: float) -> list:
    return _open_namespace_selector(state)


def _on_switch_namespace(state: State, action: actions.SwitchNamespace, now: float) -> list:
    namespace = action.namespace.strip()
    if not namespace:
        return []
    return _switch_namespace(state, namespace)


# ─── Commands ────────────────────────────────────────────────────────────────


def _cmd_workflows(state: State, args: str, now: float) -> list:
    return _show_collection(state, KindId.EXECUTIONS)


def _cmd_schedules(state: State, args: str, now: float) -> list:
    return _show_collection(state, KindId.SCHEDULES)


def _cmd_namespace(state: State, args: str, now: float) -> list:
    if args:
        return _switch_namespace(state, args.split()[0])
    return _open_namespace_selector(state)


def _cmd_signal(state: State, args: str, now: float) -> list:
    if not args:
        _toast(state, "usage: signal <name> [payload]", now, is_error=True)
        return []
    target = _current_target(state) if state.view.kind is KindId.EXECUTIONS else None
    if target is None:
        _toast(state, "no workflow selected", now, is_error=True)
        return []
    name, _, payload = args.partition(" ")
    return [
        effects.SignalExecution(
            state.namespace,
            target.workflow_id,
            target.run_id,
            name,
            payload.strip() or None,
        )
    ]


def _cmd_open(state: State, args: str, now: float) -> list:
    if not args:
        _toast(state, "usage: open <uri>", now, is_error=True)
        return []
    try:
        location = parse_deep_link(args)
    except DeepLinkError as e:
        _toast(state, f"invalid uri: {e}", now, is_error=True)
        return []
    return _apply_location(state, location)


def _cmd_link(state: State, args: str, now: float) -> list:
    _toast(state, format_deep_link(current_location(state)), now)
    return []


def _cmd_refresh(state: State, args: str, now: float) -> list:
    return _refresh(state, now)


def _cmd_poll(state: State, args: str, now: float) -> list:
    return _toggle_polling(state, now)


def _cmd_quit(state: State, args: str, now: float) -> list:
    state.should_quit = True
    return [effects.Quit()]


def _cmd_help(state: State, args: str, now: float) -> list:
    state.overlay = HELP_OVERLAY
    return []


_COMMAND_HANDLERS: dict[str, Callable[[State, str, float], list]] = {
    "workflows": _cmd_workflows,
    "schedules": _cmd_schedules,
    "namespace": _cmd_namespace,
    "signal": _cmd_signal,
    "open": _cmd_open,
    "link": _cmd_link,
    "refresh": _cmd_refresh,
    "poll": _cmd_poll,
    "quit": _cmd_quit,
    "help": _cmd_help,
}


def _run_command(state: State, text: str, now: float) -> list:
    parsed = parse_command(text)
    if not parsed.word:
        return []
    if parsed.spec is None:
        _toast(state, f"unknown command: {parsed.word}", now, is_error=True)
        return []
    return _COMMAND_HANDLERS[parsed.spec.name](state, parsed.args, now)


# ─── Result handlers ─────────────────────────────────────────────────────────


def _on_executions_loaded(state: State, action: actions.ExecutionsLoaded, now: float) -> list:
    state.collections[KindId.EXECUTIONS] = LoadState.loaded(tuple(action.executions))
    state.next_page_token = action.next_page_token
    state.loading_more = False
    _rederive_cursor(state, KindId.EXECUTIONS)
    return []


def _on_more_executions_loaded(state: State, action: actions.MoreExecutionsLoaded, now: float) -> list:
    existing = state.collection(KindId.EXECUTIONS)
    if existing.is_loaded:
        rows = existing.items + tuple(action.executions)
        state.collections[KindId.EXECUTIONS] = LoadState.loaded(rows)
    state.next_page_token = action.next_page_token
    state.loading_more = False
    _rederive_cursor(state, KindId.EXECUTIONS)
    return []


def _matches_ref(state: State, kind: KindId, record_id: str) -> bool:
    ref = state.detail_refs.get(kind)
    return ref is None or ref.record_id == record_id


def _on_execution_detail_loaded(state: State, action: actions.ExecutionDetailLoaded, now: float) -> list:
    detail = action.detail
    if not _matches_ref(state, KindId.EXECUTIONS, detail.workflow_id):
        return []
    previous = state.details.get(KindId.EXECUTIONS)
    if previous is not None and previous.workflow_id == detail.workflow_id:
        # Describe does not carry payloads; keep what history already provided.
        detail = dataclasses.replace(
            detail,
            input=detail.input if detail.input is not None else previous.input,
            output=detail.output if detail.output is not None else previous.output,
            failure=detail.failure if detail.failure is not None else previous.failure,
            history_length=detail.history_length or previous.history_length,
        )
    state.details[KindId.EXECUTIONS] = detail

    tab = _current_tab(state) if state.view.kind is KindId.EXECUTIONS else None
    attr = _TAB_LOAD_STATE.get(tab.param) if tab is not None else None
    if attr is not None and getattr(state, attr).status is LoadStatus.NOT_LOADED:
        return _tab_effects(state)
    return []


def _is_workflow_event(event: domain.HistoryEvent, name: str) -> bool:
    return name in event.event_type and "Child" not in event.event_type


def _failure_from(raw: Any) -> domain.FailureInfo | None:
    if not isinstance(raw, dict):
        return None
    return domain.FailureInfo(
        message=str(raw.get("message", "")),
        failure_type=str(raw.get("source", "")),
        stack_trace=raw.get("stack_trace"),
        cause=_failure_from(raw.get("cause")),
    )


def _enrich_from_history(
    detail: domain.ExecutionDetail, events: tuple[domain.HistoryEvent, ...]
) -> domain.ExecutionDetail:
    changes: dict[str, Any] = {"history_length": len(events)}
    for event in events:
        if _is_workflow_event(event, "WorkflowExecutionStarted") and "input" in event.details:
            changes["input"] = event.details["input"]
        elif _is_workflow_event(event, "WorkflowExecutionCompleted") and "result" in event.details:
            changes["output"] = event.details["result"]
        elif _is_workflow_event(event, "WorkflowExecutionFailed"):
            failure = _failure_from(event.details.get("failure"))
            if failure is not None:
                changes["failure"] = failure
    return dataclasses.replace(detail, **changes)


def _is_current_run(state: State, workflow_id: str, run_id: str | None) -> bool:
    ref = state.detail_refs.get(KindId.EXECUTIONS)
    if ref is None or ref.record_id != workflow_id:
        return False
    return ref.run_id is None or run_id is None or ref.run_id == run_id


def _on_history_loaded(state: State, action: actions.HistoryLoaded, now: float) -> list:
    if not _is_current_run(state, action.workflow_id, action.run_id):
        return []
    events = tuple(action.events)
    state.history = LoadState.loaded(events)
    detail = state.details.get(KindId.EXECUTIONS)
    if detail is not None:
        state.details[KindId.EXECUTIONS] = _enrich_from_history(detail, events)
    return []


def _on_namespaces_loaded(state: State, action: actions.NamespacesLoaded, now: float) -> list:
    state.namespaces = tuple(action.namespaces)
    state.namespace_cursor = _namespace_index(state)
    return []


def _on_schedules_loaded(state: State, action: actions.SchedulesLoaded, now: float) -> list:
    state.collections[KindId.SCHEDULES] = LoadState.loaded(tuple(action.schedules))
    _rederive_cursor(state, KindId.SCHEDULES)
    return []


def _on_schedule_detail_loaded(state: State, action: actions.ScheduleDetailLoaded, now: float) -> list:
    if _matches_ref(state, KindId.SCHEDULES, action.schedule.schedule_id):
        state.details[KindId.SCHEDULES] = action.schedule
    return []


def _on_execution_count_loaded(state: State, action: actions.ExecutionCountLoaded, now: float) -> list:
    state.execution_count = action.count
    return []


def _on_task_queue_loaded(state: State, action: actions.TaskQueueLoaded, now: float) -> list:
    detail = state.details.get(KindId.EXECUTIONS)
    if detail is None or detail.summary.task_queue != action.task_queue.name:
        return []
    state.task_queue = LoadState.loaded(action.task_queue)
    return []


def _on_operation_succeeded(state: State, action: actions.OperationSucceeded, now: float) -> list:
    _toast(state, action.message, now)
    return _refresh(state, now)


# ─── Control handlers ────────────────────────────────────────────────────────


def _on_refresh(state: State, action, now: float) -> list:
    return _refresh(state, now)


def _on_quit(state: State, action, now: float) -> list:
    state.should_quit = True
    return [effects.Quit()]


def _on_detail_viewport_measured(state: State, action: actions.DetailViewportMeasured, now: float) -> list:
    state.detail_scroll_max = max(0, action.max_scroll)
    state.detail_scroll = min(state.detail_scroll, state.detail_scroll_max)
    return []


def _on_tick(state: State, action, now: float) -> list:
    if not state.polling_enabled:
        return []
    if state.last_refresh is not None and now - state.last_refresh < state.polling_interval:
        return []
    return _refresh(state, now)


def _on_error(state: State, action: actions.Error, now: float) -> list:
    _toast(state, action.message, now, is_error=True)
    state.error_count += 1
    state.polling_interval = backoff_interval(state.base_interval, state.error_count)
    state.loading_more = False
    if state.connection_status is ConnectionStatus.CONNECTED:
        state.connection_status = ConnectionStatus.ERROR
    # Whatever was still loading will not arrive; show the failure in place.
    for kind, load in list(state.collections.items()):
        if load.is_loading:
            state.collections[kind] = LoadState.failed(action.message)
    for attr in _TAB_LOADS.values():
        if getattr(state, attr).is_loading:
            setattr(state, attr, LoadState.failed(action.message))
    return []


def _on_clear_error(state: State, action, now: float) -> list:
    state.toast = None
    return []


def _toggle_polling(state: State, now: float) -> list:
    state.polling_enabled = not state.polling_enabled
    _toast(state, f"polling {'on' if state.polling_enabled else 'off'}", now)
    return []


def _on_toggle_polling(state: State, action, now: float) -> list:
    return _toggle_polling(state, now)


def _on_show_toast(state: State, action: actions.ShowToast, now: float) -> list:
    _toast(state, action.message, now, action.is_error)
    return []


_HANDLERS: dict[type, Handler] = {
    actions.NavigateUp: _on_navigate_up,
    actions.NavigateDown: _on_navigate_down,
    actions.NavigateTop: _on_navigate_top,
    actions.NavigateBottom: _on_navigate_bottom,
    actions.PageUp: _on_page_up,
    actions.PageDown: _on_page_down,
    actions.Select: _on_select,
    actions.Back: _on_back,
    actions.SwitchKind: _on_switch_kind,
    actions.NextTab: _on_next_tab,
    actions.PrevTab: _on_prev_tab,
    actions.OpenScheduleExecutions: _on_open_schedule_executions,
    actions.OpenExecutionActivities: _on_open_execution_activities,
    actions.ApplyLocation: _on_apply_location,
    actions.EnterPendingChord: _on_enter_chord,
    actions.CancelChord: _on_cancel_chord,
    actions.RunOperation: _on_run_operation,
    actions.ConfirmOperation: _on_confirm,
    actions.CancelConfirm: _on_cancel_confirm,
    actions.OpenCommandInput: _on_open_command,
    actions.OpenSearch: _on_open_search,
    actions.CloseOverlay: _on_close_overlay,
    actions.UpdateInputBuffer: _on_update_buffer,
    actions.SubmitCommand: _on_submit_command,
    actions.SubmitSearch: _on_submit_search,
    actions.ToggleHelp: _on_toggle_help,
    actions.OpenNamespaceSelector: _on_open_namespace_selector,
    actions.SwitchNamespace: _on_switch_namespace,
    actions.ExecutionsLoaded: _on_executions_loaded,
    actions.MoreExecutionsLoaded: _on_more_executions_loaded,
    actions.ExecutionDetailLoaded: _on_execution_detail_loaded,
    actions.HistoryLoaded: _on_history_loaded,
    actions.NamespacesLoaded: _on_namespaces_loaded,
    actions.SchedulesLoaded: _on_schedules_loaded,
    actions.ScheduleDetailLoaded: _on_schedule_detail_loaded,
    actions.ExecutionCountLoaded: _on_execution_count_loaded,
    actions.TaskQueueLoaded: _on_task_queue_loaded,
    actions.OperationSucceeded: _on_operation_succeeded,
    actions.Refresh: _on_refresh,
    actions.Quit: _on_quit,
    actions.DetailViewportMeasured: _on_detail_viewport_measured,
    actions.Tick: _on_tick,
    actions.Error: _on_error,
    actions.ClearError: _on_clear_error,
    actions.TogglePolling: _on_toggle_polling,
    actions.ShowToast: _on_show_toast,
}
