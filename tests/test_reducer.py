"""Tests for the pure reducer: navigation, pagination, operations, polling and errors."""

import pytest

from t9s.core import actions, domain, effects
from t9s.core.ids import KindId, OperationId
from t9s.core.kinds import ExecutionTarget, ScheduleTarget
from t9s.core.location import ExecutionDetail, ExecutionsCollection, Location, SchedulesCollection
from t9s.core.reducer import DETAIL_SCROLL_BOTTOM, backoff_interval, reduce
from t9s.core.state import (
    ConnectionStatus,
    DetailRef,
    InputMode,
    LoadStatus,
    OverlayKind,
    PendingConfirm,
    ViewMode,
    initial_state,
)
from tests.harness import (
    execution_detail_state,
    executions_state,
    make_detail,
    make_event,
    make_execution,
    make_executions,
    make_schedule,
    run_actions,
    schedules_state,
)

EXECUTIONS = KindId.EXECUTIONS
SCHEDULES = KindId.SCHEDULES


def _collection_effects(namespace="default", query=None):
    return [
        effects.LoadExecutions(namespace, query, 50),
        effects.LoadExecutionCount(namespace, query),
    ]


# ─── Purity ──────────────────────────────────────────────────────────────────


class TestPurity:
    def test_input_state_is_not_mutated(self):
        state = executions_state(3)
        new, _ = reduce(state, actions.NavigateDown(), 100.0)
        assert state.cursor(EXECUTIONS) == 0
        assert new.cursor(EXECUTIONS) == 1

    def test_unknown_action_is_a_no_op(self):
        state = executions_state(3)
        new, emitted = reduce(state, object(), 100.0)
        assert emitted == []
        assert new == state


# ─── Navigation ──────────────────────────────────────────────────────────────


class TestNavigation:
    def test_down_clamps_at_last_row(self):
        state, _ = run_actions(executions_state(3), *[actions.NavigateDown()] * 5)
        assert state.cursor(EXECUTIONS) == 2

    def test_up_clamps_at_first_row(self):
        state, _ = run_actions(executions_state(3), actions.NavigateUp())
        assert state.cursor(EXECUTIONS) == 0

    def test_unset_cursor_moves_to_first_row(self):
        state = executions_state(3)
        state.cursors[EXECUTIONS] = None
        state, _ = run_actions(state, actions.NavigateDown())
        assert state.cursor(EXECUTIONS) == 0

    def test_empty_collection_keeps_cursor_unset(self):
        state, _ = run_actions(executions_state(0), actions.NavigateDown(), actions.NavigateBottom())
        assert state.cursor(EXECUTIONS) is None

    def test_top_and_bottom(self):
        state, _ = run_actions(executions_state(10), actions.NavigateBottom())
        assert state.cursor(EXECUTIONS) == 9
        state, _ = run_actions(state, actions.NavigateTop())
        assert state.cursor(EXECUTIONS) == 0

    def test_page_moves_by_page_height(self):
        state = executions_state(50, page_height=20)
        state, _ = run_actions(state, actions.PageDown())
        assert state.cursor(EXECUTIONS) == 20
        state, _ = run_actions(state, actions.PageDown(), actions.PageDown())
        assert state.cursor(EXECUTIONS) == 49
        state, _ = run_actions(state, actions.PageUp())
        assert state.cursor(EXECUTIONS) == 29

    def test_pending_chord_then_top(self):
        state, _ = run_actions(executions_state(5), actions.NavigateBottom(), actions.EnterPendingChord())
        assert state.input_mode is InputMode.PENDING_G
        state, _ = run_actions(state, actions.NavigateTop())
        assert state.input_mode is InputMode.NORMAL
        assert state.cursor(EXECUTIONS) == 0

    def test_cancel_chord(self):
        state, _ = run_actions(executions_state(5), actions.EnterPendingChord(), actions.CancelChord())
        assert state.input_mode is InputMode.NORMAL

    def test_detail_scroll_saturates_at_zero(self):
        state = execution_detail_state()
        state, _ = run_actions(state, *[actions.NavigateDown()] * 3)
        assert state.detail_scroll == 3
        state, _ = run_actions(state, *[actions.NavigateUp()] * 5)
        assert state.detail_scroll == 0

    def test_detail_bottom_uses_sentinel(self):
        state, _ = run_actions(execution_detail_state(), actions.NavigateBottom())
        assert state.detail_scroll == DETAIL_SCROLL_BOTTOM
        state, _ = run_actions(state, actions.NavigateTop())
        assert state.detail_scroll == 0

    def test_up_after_bottom_leaves_measured_bottom(self):
        # 100 body lines in a 20 row viewport.
        state, _ = run_actions(
            execution_detail_state(), actions.DetailViewportMeasured(80), actions.NavigateBottom()
        )
        assert state.detail_scroll == 80
        state, _ = run_actions(state, *[actions.NavigateUp()] * 10)
        assert state.detail_scroll == 70

    def test_measurement_resolves_unmeasured_bottom(self):
        state, _ = run_actions(execution_detail_state(), actions.NavigateBottom())
        state, _ = run_actions(state, actions.DetailViewportMeasured(80))
        assert state.detail_scroll == 80
        state, _ = run_actions(state, actions.NavigateUp())
        assert state.detail_scroll == 79

    def test_up_from_unmeasured_bottom_still_moves(self):
        state, _ = run_actions(execution_detail_state(), actions.NavigateBottom(), actions.NavigateUp())
        assert state.detail_scroll == DETAIL_SCROLL_BOTTOM - 1

    def test_down_saturates_at_measured_limit(self):
        state, _ = run_actions(
            execution_detail_state(), actions.DetailViewportMeasured(2), *[actions.NavigateDown()] * 5
        )
        assert state.detail_scroll == 2

    def test_negative_measurement_means_no_scroll(self):
        state, _ = run_actions(
            execution_detail_state(), actions.NavigateDown(), actions.DetailViewportMeasured(-3)
        )
        assert state.detail_scroll_max == 0
        assert state.detail_scroll == 0

    def test_reload_rederives_cursor(self):
        state, _ = run_actions(executions_state(5), actions.NavigateBottom())
        state, _ = run_actions(state, actions.ExecutionsLoaded(tuple(make_executions(2))))
        assert state.cursor(EXECUTIONS) == 1
        state, _ = run_actions(state, actions.ExecutionsLoaded(()))
        assert state.cursor(EXECUTIONS) is None


# ─── Pagination ──────────────────────────────────────────────────────────────


class TestPagination:
    def test_look_ahead_requests_next_page_once(self):
        state = executions_state(20, next_page_token="tok")
        state.cursors[EXECUTIONS] = 14

        state, emitted = reduce(state, actions.NavigateDown(), 100.0)
        assert emitted == [effects.LoadMoreExecutions("default", None, "tok", 50)]
        assert state.loading_more is True

        state, emitted = reduce(state, actions.NavigateDown(), 100.0)
        assert emitted == []

        more = tuple(make_execution(f"wf-more-{i}") for i in range(20))
        state, emitted = reduce(state, actions.MoreExecutionsLoaded(more, ""), 100.0)
        assert emitted == []
        assert state.loading_more is False
        assert len(state.collection(EXECUTIONS).items) == 40
        assert state.cursor(EXECUTIONS) == 16
        assert state.next_page_token == ""

    def test_no_request_far_from_the_end(self):
        state = executions_state(20, next_page_token="tok")
        state, emitted = reduce(state, actions.NavigateDown(), 100.0)
        assert emitted == []
        assert state.loading_more is False

    def test_no_request_without_token(self):
        state = executions_state(20)
        state, emitted = reduce(state, actions.NavigateBottom(), 100.0)
        assert emitted == []

    def test_bottom_and_page_down_also_look_ahead(self):
        state = executions_state(20, next_page_token="tok")
        _, emitted = reduce(state, actions.NavigateBottom(), 100.0)
        assert isinstance(emitted[0], effects.LoadMoreExecutions)
        _, emitted = reduce(state, actions.PageDown(), 100.0)
        assert isinstance(emitted[0], effects.LoadMoreExecutions)

    def test_error_clears_loading_more(self):
        state = executions_state(20, next_page_token="tok")
        state, _ = run_actions(state, actions.NavigateBottom(), actions.Error("boom"))
        assert state.loading_more is False

    def test_search_query_is_carried_into_next_page(self):
        state = executions_state(3)
        state, _ = run_actions(
            state,
            actions.OpenSearch(),
            actions.UpdateInputBuffer("Status = 'Running'"),
            actions.SubmitSearch(),
            actions.ExecutionsLoaded(tuple(make_executions(6)), "tok"),
        )
        _, emitted = reduce(state, actions.NavigateBottom(), 100.0)
        assert emitted == [effects.LoadMoreExecutions("default", "Status = 'Running'", "tok", 50)]


# ─── Selection and detail ────────────────────────────────────────────────────


class TestSelection:
    def test_select_enters_execution_detail(self):
        state, emitted = run_actions(executions_state(3), actions.NavigateDown(), actions.Select())
        assert state.view.mode is ViewMode.DETAIL
        assert state.view.kind is EXECUTIONS
        assert state.detail_refs[EXECUTIONS] == DetailRef("wf-1", "run-wf-1")
        assert state.detail_tab == 0
        assert state.detail_scroll == 0
        assert emitted == [
            effects.LoadExecutionDetail("default", "wf-1", "run-wf-1"),
            effects.LoadHistory("default", "wf-1", "run-wf-1"),
        ]
        assert state.history.is_loading

    def test_select_enters_schedule_detail(self):
        state, emitted = run_actions(schedules_state(make_schedule("nightly")), actions.Select())
        assert state.view.is_detail
        assert emitted == [effects.LoadScheduleDetail("default", "nightly")]

    def test_select_with_nothing_loaded_is_a_no_op(self):
        state, emitted = run_actions(executions_state(0), actions.Select())
        assert not state.view.is_detail
        assert emitted == []

    def test_back_from_detail_keeps_loaded_collection(self):
        state, emitted = run_actions(execution_detail_state(), actions.Back())
        assert state.view.mode is ViewMode.COLLECTION
        assert emitted == []

    def test_stale_detail_result_is_ignored(self):
        state = execution_detail_state("wf-0")
        state, _ = run_actions(state, actions.ExecutionDetailLoaded(make_detail("wf-9")))
        assert state.details[EXECUTIONS].workflow_id == "wf-0"

    def test_history_enriches_detail(self):
        state = execution_detail_state("wf-0")
        history = (
            make_event(1, "WorkflowExecutionStarted", input={"order": 42}),
            make_event(2, "StartChildWorkflowExecutionInitiated", input="child"),
            make_event(3, "WorkflowExecutionCompleted", result="ok"),
        )
        state, _ = run_actions(state, actions.HistoryLoaded("wf-0", "run-wf-0", history))
        detail = state.details[EXECUTIONS]
        assert detail.input == {"order": 42}
        assert detail.output == "ok"
        assert detail.history_length == 3
        assert state.history.items == history

        # A later describe refresh keeps the payloads history provided.
        state, _ = run_actions(state, actions.ExecutionDetailLoaded(make_detail("wf-0", run_id="run-wf-0")))
        assert state.details[EXECUTIONS].input == {"order": 42}
        assert state.details[EXECUTIONS].history_length == 3

    def test_history_failure_becomes_failure_info(self):
        state = execution_detail_state("wf-0")
        failure = {"message": "boom", "source": "GoSDK", "stack_trace": "at main", "cause": {"message": "inner"}}
        failed = (make_event(5, "WorkflowExecutionFailed", failure=failure),)
        state, _ = run_actions(state, actions.HistoryLoaded("wf-0", "run-wf-0", failed))
        assert state.details[EXECUTIONS].failure == domain.FailureInfo(
            "boom", "GoSDK", "at main", domain.FailureInfo("inner")
        )

    def test_history_of_a_previous_workflow_is_ignored(self):
        state, _ = run_actions(
            executions_state(3),
            actions.Select(),
            actions.Back(),
            actions.NavigateDown(),
            actions.Select(),
            actions.ExecutionDetailLoaded(make_detail("wf-1", run_id="run-wf-1")),
        )
        assert state.detail_refs[EXECUTIONS] == DetailRef("wf-1", "run-wf-1")
        stale = (make_event(1, "WorkflowExecutionStarted", input="wf-0 input"),)
        state, _ = run_actions(state, actions.HistoryLoaded("wf-0", "run-wf-0", stale))
        assert not state.history.is_loaded
        assert state.history.is_loading
        assert state.details[EXECUTIONS].input is None

    def test_history_of_another_run_is_ignored(self):
        state = execution_detail_state("wf-0")
        started = (make_event(1, "WorkflowExecutionStarted"),)
        state, _ = run_actions(state, actions.HistoryLoaded("wf-0", "run-older", started))
        assert not state.history.is_loaded

    def test_history_without_run_applies_to_latest(self):
        loc = Location("default", (ExecutionDetail("wf-1", None),))
        state, _ = run_actions(initial_state(), actions.ApplyLocation(loc))
        started = (make_event(1, "WorkflowExecutionStarted"),)
        state, _ = run_actions(state, actions.HistoryLoaded("wf-1", None, started))
        assert state.history.is_loaded

    def test_task_queue_of_another_queue_is_ignored(self):
        state, _ = run_actions(execution_detail_state("wf-0"), actions.PrevTab())
        state, _ = run_actions(state, actions.TaskQueueLoaded(domain.TaskQueueInfo("billing")))
        assert state.task_queue.is_loading
        state, _ = run_actions(state, actions.TaskQueueLoaded(domain.TaskQueueInfo("orders")))
        assert state.task_queue.is_loaded


# ─── Tabs ────────────────────────────────────────────────────────────────────


class TestTabs:
    def test_tabs_wrap_around(self):
        state, _ = run_actions(execution_detail_state(), *[actions.NextTab()] * 5)
        assert state.detail_tab == 0
        state, _ = run_actions(state, actions.PrevTab())
        assert state.detail_tab == 4

    def test_kind_without_tabs_is_a_no_op(self):
        state, _ = run_actions(schedules_state(), actions.Select(), actions.NextTab())
        assert state.detail_tab == 0

    def test_tab_cycling_in_collection_is_a_no_op(self):
        state, emitted = run_actions(executions_state(3), actions.NextTab())
        assert state.detail_tab == 0
        assert emitted == []

    def test_tab_change_resets_scroll(self):
        state, _ = run_actions(
            execution_detail_state(),
            actions.NavigateDown(),
            actions.DetailViewportMeasured(40),
            actions.NextTab(),
        )
        assert state.detail_scroll == 0
        assert state.detail_scroll_max is None

    def test_history_tab_loads_lazily(self):
        state, emitted = run_actions(execution_detail_state("wf-0"), actions.NextTab(), actions.NextTab())
        assert state.detail_tab == 2
        assert emitted == [effects.LoadHistory("default", "wf-0", "run-wf-0")]

    def test_task_queue_tab_loads_lazily(self):
        state, emitted = run_actions(execution_detail_state("wf-0"), actions.PrevTab())
        assert state.detail_tab == 4
        assert emitted == [effects.LoadTaskQueue("default", "orders")]
        assert state.task_queue.is_loading

    def test_deep_link_to_task_queue_tab_waits_for_detail(self):
        loc = Location("default", (ExecutionDetail("wf-1", None, "task-queue"),))
        state, emitted = run_actions(initial_state(), actions.ApplyLocation(loc))
        assert state.detail_tab == 4
        assert emitted == [
            effects.LoadExecutionDetail("default", "wf-1", None),
            effects.LoadHistory("default", "wf-1", None),
        ]
        state, emitted = run_actions(state, actions.ExecutionDetailLoaded(make_detail("wf-1", task_queue="billing")))
        assert emitted == [effects.LoadTaskQueue("default", "billing")]

    def test_activities_from_collection_opens_pending_tab(self):
        state, emitted = run_actions(executions_state(3), actions.OpenExecutionActivities())
        assert state.view.is_detail
        assert state.detail_tab == 3
        assert emitted[0] == effects.LoadExecutionDetail("default", "wf-0", "run-wf-0")

    def test_activities_in_detail_switches_tab(self):
        state, emitted = run_actions(execution_detail_state(), actions.OpenExecutionActivities())
        assert state.detail_tab == 3
        assert emitted == []


# ─── Operations ──────────────────────────────────────────────────────────────


class TestOperations:
    def test_confirm_gating(self):
        state, emitted = run_actions(executions_state(3), actions.RunOperation(OperationId.CANCEL))
        assert emitted == []
        assert state.overlay.kind is OverlayKind.CONFIRM
        assert state.overlay.confirm == PendingConfirm(
            EXECUTIONS, OperationId.CANCEL, ExecutionTarget("wf-0", "run-wf-0")
        )
        state, emitted = run_actions(state, actions.ConfirmOperation())
        assert emitted == [effects.CancelExecution("default", "wf-0", "run-wf-0")]
        assert not state.overlay.active

    def test_cancel_confirm_emits_nothing(self):
        state, emitted = run_actions(
            executions_state(3), actions.RunOperation(OperationId.TERMINATE), actions.CancelConfirm()
        )
        assert emitted == []
        assert not state.overlay.active

    def test_terminate_from_detail(self):
        state, emitted = run_actions(
            execution_detail_state("wf-2"),
            actions.RunOperation(OperationId.TERMINATE),
            actions.ConfirmOperation(),
        )
        assert emitted == [effects.TerminateExecution("default", "wf-2", "run-wf-2")]

    def test_pause_runs_immediately_and_flips_direction(self):
        _, emitted = run_actions(schedules_state(make_schedule("s1")), actions.RunOperation(OperationId.PAUSE))
        assert emitted == [effects.PauseSchedule("default", "s1", pause=True)]
        _, emitted = run_actions(
            schedules_state(make_schedule("s1", paused=True)), actions.RunOperation(OperationId.PAUSE)
        )
        assert emitted == [effects.PauseSchedule("default", "s1", pause=False)]

    def test_trigger_and_delete_need_confirmation(self):
        state, _ = run_actions(schedules_state(), actions.RunOperation(OperationId.DELETE))
        assert state.overlay.confirm == PendingConfirm(SCHEDULES, OperationId.DELETE, ScheduleTarget("sched-1", False))
        state, emitted = run_actions(state, actions.ConfirmOperation())
        assert emitted == [effects.DeleteSchedule("default", "sched-1")]

        _, emitted = run_actions(
            schedules_state(), actions.RunOperation(OperationId.TRIGGER), actions.ConfirmOperation()
        )
        assert emitted == [effects.TriggerSchedule("default", "sched-1")]

    def test_nothing_selected_toasts(self):
        state, emitted = run_actions(executions_state(0), actions.RunOperation(OperationId.CANCEL))
        assert emitted == []
        assert state.toast.message == "no workflow selected"
        assert state.toast.is_error

    def test_detail_before_describe_targets_the_opened_run(self):
        state, _ = run_actions(executions_state(3), actions.NavigateDown(), actions.Select())
        assert state.details[EXECUTIONS] is None
        state, _ = run_actions(state, actions.RunOperation(OperationId.CANCEL))
        assert state.overlay.confirm == PendingConfirm(
            EXECUTIONS, OperationId.CANCEL, ExecutionTarget("wf-1", "run-wf-1")
        )

    def test_schedule_detail_before_describe_has_no_target(self):
        state, _ = run_actions(schedules_state(), actions.Select(), actions.RunOperation(OperationId.PAUSE))
        assert state.details[SCHEDULES] is None
        assert state.toast.message == "no schedule selected"

    def test_operation_of_another_kind_is_ignored(self):
        state, emitted = run_actions(executions_state(3), actions.RunOperation(OperationId.DELETE))
        assert emitted == []
        assert not state.overlay.active

    def test_success_toasts_and_refreshes(self):
        state, emitted = reduce(executions_state(3), actions.OperationSucceeded("cancel requested for wf-0"), 42.0)
        assert state.toast.message == "cancel requested for wf-0"
        assert not state.toast.is_error
        assert emitted == _collection_effects()
        assert state.last_refresh == 42.0


# ─── Text entry and commands ─────────────────────────────────────────────────


def _command(state, text):
    return run_actions(state, actions.OpenCommandInput(), actions.UpdateInputBuffer(text), actions.SubmitCommand())


class TestSearch:
    def test_submit_sets_query_and_reloads(self):
        state, emitted = run_actions(
            executions_state(3),
            actions.OpenSearch(),
            actions.UpdateInputBuffer("Status = 'Failed'"),
            actions.SubmitSearch(),
        )
        assert state.input_mode is InputMode.NORMAL
        assert state.search_query(EXECUTIONS) == "Status = 'Failed'"
        assert state.collection(EXECUTIONS).is_loading
        assert emitted == _collection_effects(query="Status = 'Failed'")

    def test_open_search_prefills_existing_query(self):
        state, _ = run_actions(
            executions_state(3), actions.OpenSearch(), actions.UpdateInputBuffer("x"), actions.SubmitSearch()
        )
        state, _ = run_actions(state, actions.OpenSearch())
        assert state.input_buffer == "x"

    def test_empty_query_clears(self):
        state, _ = run_actions(
            executions_state(3), actions.OpenSearch(), actions.UpdateInputBuffer("x"), actions.SubmitSearch()
        )
        state, emitted = run_actions(state, actions.OpenSearch(), actions.UpdateInputBuffer("  "), actions.SubmitSearch())
        assert state.search_query(EXECUTIONS) is None
        assert emitted == _collection_effects()

    def test_back_clears_active_query(self):
        state, _ = run_actions(
            executions_state(3), actions.OpenSearch(), actions.UpdateInputBuffer("x"), actions.SubmitSearch()
        )
        state, emitted = run_actions(state, actions.Back())
        assert state.search_query(EXECUTIONS) is None
        assert emitted == _collection_effects()

    def test_search_is_unavailable_in_detail(self):
        state, _ = run_actions(execution_detail_state(), actions.OpenSearch())
        assert state.input_mode is InputMode.NORMAL

    def test_escape_leaves_text_entry(self):
        state, _ = run_actions(executions_state(3), actions.OpenSearch(), actions.UpdateInputBuffer("abc"), actions.CloseOverlay())
        assert state.input_mode is InputMode.NORMAL
        assert state.input_buffer == ""
        assert state.search_query(EXECUTIONS) is None


class TestCommands:
    def test_switch_kind_by_alias(self):
        state, emitted = _command(executions_state(3), "sch")
        assert state.view.kind is SCHEDULES
        assert emitted == [effects.LoadSchedules("default", None)]

    def test_unknown_command(self):
        state, emitted = _command(executions_state(3), "bogus arg")
        assert emitted == []
        assert state.toast.message == "unknown command: bogus"

    def test_blank_command_does_nothing(self):
        state, emitted = _command(executions_state(3), "   ")
        assert emitted == []
        assert state.toast is None

    def test_quit(self):
        state, emitted = _command(executions_state(3), "q")
        assert emitted == [effects.Quit()]
        assert state.should_quit

    def test_signal_selected_execution(self):
        _, emitted = _command(executions_state(3), 'signal approve {"ok": true}')
        assert emitted == [effects.SignalExecution("default", "wf-0", "run-wf-0", "approve", '{"ok": true}')]

    def test_signal_from_detail_before_describe(self):
        state, _ = run_actions(executions_state(3), actions.Select())
        _, emitted = _command(state, "signal approve")
        assert emitted == [effects.SignalExecution("default", "wf-0", "run-wf-0", "approve", None)]

    def test_signal_requires_name(self):
        state, emitted = _command(executions_state(3), "signal")
        assert emitted == []
        assert state.toast.message == "usage: signal <name> [payload]"

    def test_signal_requires_selection(self):
        state, emitted = _command(schedules_state(), "signal go")
        assert emitted == []
        assert state.toast.message == "no workflow selected"

    def test_open_applies_deep_link(self):
        state, emitted = _command(executions_state(3), "open temporal://tui/namespaces/prod/schedules/s1")
        assert state.namespace == "prod"
        assert state.view.kind is SCHEDULES and state.view.is_detail
        assert emitted == [effects.LoadScheduleDetail("prod", "s1")]

    def test_open_invalid_uri(self):
        state, emitted = _command(executions_state(3), "goto http://nope")
        assert emitted == []
        assert state.toast.message == "invalid uri: invalid scheme"
        assert state.toast.is_error

    def test_link_shows_current_location(self):
        state, _ = _command(execution_detail_state("wf-1"), "link")
        assert state.toast.message == "temporal://tui/namespaces/default/workflows/wf-1?run_id=run-wf-1"

    def test_poll_toggles(self):
        state, _ = _command(executions_state(3), "poll")
        assert state.polling_enabled is False
        assert state.toast.message == "polling off"

    def test_help_opens_overlay(self):
        state, _ = _command(executions_state(3), "help")
        assert state.overlay.kind is OverlayKind.HELP

    def test_namespace_without_argument_opens_selector(self):
        state, emitted = _command(executions_state(3), "ns")
        assert state.overlay.kind is OverlayKind.NAMESPACE_SELECTOR
        assert emitted == [effects.LoadNamespaces()]

    def test_namespace_with_argument_switches(self):
        state, emitted = _command(executions_state(3), "namespace prod")
        assert state.namespace == "prod"
        assert emitted == _collection_effects("prod")


# ─── Namespaces and locations ────────────────────────────────────────────────


class TestNamespaces:
    def test_selector_flow(self):
        namespaces = (domain.Namespace("default"), domain.Namespace("prod"))
        state, _ = run_actions(executions_state(3), actions.OpenNamespaceSelector(), actions.NamespacesLoaded(namespaces))
        assert state.namespace_cursor == 0
        state, _ = run_actions(state, actions.NavigateDown(), actions.NavigateDown())
        assert state.namespace_cursor == 1
        state, emitted = run_actions(state, actions.Select())
        assert state.namespace == "prod"
        assert not state.overlay.active
        assert emitted == _collection_effects("prod")

    def test_switch_clears_kind_state(self):
        state, _ = run_actions(
            executions_state(3),
            actions.OpenSearch(),
            actions.UpdateInputBuffer("x"),
            actions.SubmitSearch(),
            actions.ExecutionCountLoaded(7),
        )
        state, _ = run_actions(state, actions.SwitchNamespace("prod"))
        assert state.search_query(EXECUTIONS) is None
        assert state.execution_count is None
        assert state.cursor(EXECUTIONS) is None
        assert state.collection(EXECUTIONS).is_loading

    def test_blank_namespace_is_ignored(self):
        state, emitted = run_actions(executions_state(3), actions.SwitchNamespace("  "))
        assert state.namespace == "default"
        assert emitted == []

    def test_apply_location_replaces_navigation(self):
        state = execution_detail_state()
        loc = Location("staging", (SchedulesCollection("x"),))
        state, emitted = run_actions(state, actions.ApplyLocation(loc))
        assert state.namespace == "staging"
        assert state.view.kind is SCHEDULES and not state.view.is_detail
        assert state.details == {}
        assert state.search_query(SCHEDULES) == "x"
        assert emitted == [effects.LoadSchedules("staging", "x")]

    def test_schedule_executions_cross_navigation(self):
        state, emitted = run_actions(schedules_state(make_schedule("nightly")), actions.OpenScheduleExecutions())
        assert state.view.kind is EXECUTIONS
        assert state.search_query(EXECUTIONS) == "ScheduledBy = 'nightly'"
        assert emitted == _collection_effects(query="ScheduledBy = 'nightly'")


# ─── Polling, errors, toasts ─────────────────────────────────────────────────


class TestPolling:
    def test_first_tick_refreshes(self):
        state = executions_state(3)
        state.last_refresh = None
        state, emitted = reduce(state, actions.Tick(), 10.0)
        assert emitted == _collection_effects()
        assert state.last_refresh == 10.0

    def test_tick_waits_for_interval(self):
        state = executions_state(3)
        state, _ = reduce(state, actions.Refresh(), 10.0)
        _, emitted = reduce(state, actions.Tick(), 12.9)
        assert emitted == []
        _, emitted = reduce(state, actions.Tick(), 13.0)
        assert emitted == _collection_effects()

    def test_disabled_polling_ignores_ticks(self):
        state, _ = run_actions(executions_state(3), actions.TogglePolling())
        _, emitted = reduce(state, actions.Tick(), 1000.0)
        assert emitted == []

    def test_detail_refresh_reloads_describe_only(self):
        state = execution_detail_state("wf-0")
        _, emitted = reduce(state, actions.Refresh(), 50.0)
        assert emitted == [effects.LoadExecutionDetail("default", "wf-0", "run-wf-0")]

    def test_loaded_rows_stay_visible_during_refresh(self):
        state, _ = run_actions(executions_state(3), actions.Refresh())
        assert state.collection(EXECUTIONS).is_loaded


class TestErrors:
    @pytest.mark.parametrize("count, expected", [(0, 3.0), (1, 6.0), (2, 12.0), (4, 48.0), (5, 60.0), (9, 60.0)])
    def test_backoff_interval(self, count, expected):
        assert backoff_interval(3.0, count) == expected

    def test_backoff_never_drops_below_base(self):
        assert backoff_interval(90.0, 3) == 90.0

    def test_consecutive_errors_grow_interval_and_success_resets(self):
        state = executions_state(3)
        state, _ = run_actions(state, actions.Error("a"), actions.Error("b"), actions.Error("c"))
        assert state.error_count == 3
        assert state.polling_interval == 24.0
        state, _ = run_actions(state, actions.ExecutionCountLoaded(3))
        assert state.error_count == 0
        assert state.polling_interval == 3.0

    def test_error_sets_toast(self):
        state, _ = reduce(executions_state(3), actions.Error("failed to load workflows: down"), 5.0)
        assert state.toast.message == "failed to load workflows: down"
        assert state.toast.is_error

    def test_connection_downgrades_only_from_connected(self):
        state, _ = run_actions(initial_state(), actions.Error("x"))
        assert state.connection_status is ConnectionStatus.UNKNOWN
        state, _ = run_actions(executions_state(3), actions.Error("x"))
        assert state.connection_status is ConnectionStatus.ERROR
        state, _ = run_actions(state, actions.SchedulesLoaded(()))
        assert state.connection_status is ConnectionStatus.CONNECTED

    def test_error_fails_pending_loads(self):
        loc = Location("default", (ExecutionsCollection(),))
        state, _ = run_actions(initial_state(), actions.ApplyLocation(loc), actions.Error("down"))
        load = state.collection(EXECUTIONS)
        assert load.status is LoadStatus.ERROR
        assert load.error == "down"


class TestToasts:
    def test_toast_expires_lazily_after_ttl(self):
        state, _ = reduce(initial_state(), actions.ShowToast("hi"), 0.0)
        state, _ = reduce(state, actions.NavigateDown(), 5.0)
        assert state.toast is not None
        state, _ = reduce(state, actions.NavigateDown(), 5.1)
        assert state.toast is None

    def test_clear_error(self):
        state, _ = run_actions(initial_state(), actions.ShowToast("x", is_error=True), actions.ClearError())
        assert state.toast is None


class TestOverlays:
    def test_toggle_help(self):
        state, _ = run_actions(initial_state(), actions.ToggleHelp())
        assert state.overlay.kind is OverlayKind.HELP
        state, _ = run_actions(state, actions.ToggleHelp())
        assert not state.overlay.active

    def test_close_overlay(self):
        state, _ = run_actions(initial_state(), actions.ToggleHelp(), actions.CloseOverlay())
        assert not state.overlay.active
