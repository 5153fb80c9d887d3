"""Per-kind row and detail renderers.

Referenced by dotted path from the kind registry and resolved by
panel_renderers. Pure functions: State in, rich Text out.

Row renderers return one cell per registry column.
Detail renderers return a list of lines; the caller windows them by scroll.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable

from rich.text import Text

import t9s.palette
from t9s.core import domain
from t9s.core.ids import KindId
from t9s.core.kinds import kind_spec
from t9s.core.state import LoadState, LoadStatus, State


# ─── Formatting helpers ──────────────────────────────────────────────────────


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def format_time(value: datetime | None) -> str:
    if value is None:
        return "--"
    return _utc(value).astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def format_duration(start: datetime | None, end: datetime | None, now: datetime) -> str:
    """Compact elapsed time: 45s, 3m12s, 2h05m, 4d03h. Open executions run to ``now``."""
    if start is None:
        return "--"
    seconds = int(max(0.0, (_utc(end or now) - _utc(start)).total_seconds()))
    if seconds < 60:
        return "{}s".format(seconds)
    minutes, seconds = divmod(seconds, 60)
    if minutes < 60:
        return "{}m{:02d}s".format(minutes, seconds)
    hours, minutes = divmod(minutes, 60)
    if hours < 24:
        return "{}h{:02d}m".format(hours, minutes)
    days, hours = divmod(hours, 24)
    return "{}d{:02d}h".format(days, hours)


def format_value(value: Any) -> list[str]:
    """Decoded payloads as indented JSON lines; None shows as a dash."""
    if value is None:
        return ["--"]
    if isinstance(value, str):
        return value.splitlines() or [""]
    return json.dumps(value, indent=2, sort_keys=True, default=str).splitlines()


def _heading(title: str) -> Text:
    return Text(title, style="bold {}".format(t9s.palette.PALETTE.info))


def _field_rows(rows: list[tuple[str, str]]) -> list[Text]:
    # // [LAW:dataflow-not-control-flow] All rows always rendered; empty values shown as "--".
    width = max(len(label) for label, _ in rows)
    lines = []
    for label, value in rows:
        line = Text("  ")
        line.append("{:<{}}".format(label + ":", width + 1), style="bold")
        line.append(" ")
        line.append(value or "--")
        lines.append(line)
    return lines


def _indented(lines: list[str], style: str = "") -> list[Text]:
    return [Text("  " + line, style=style) for line in lines]


def _load_placeholder(load: LoadState, what: str) -> list[Text] | None:
    """Status line for a tab whose data is not loaded yet, or None when it is."""
    if load.status is LoadStatus.LOADED:
        return None
    if load.status is LoadStatus.ERROR:
        return [Text("  failed to load {}: {}".format(what, load.error), style=t9s.palette.PALETTE.error)]
    return [Text("  Loading {}...".format(what), style="dim")]


# ─── Executions ──────────────────────────────────────────────────────────────


def execution_row(record: domain.ExecutionSummary, now: datetime) -> list[Text]:
    style = t9s.palette.status_style(record.status)
    return [
        Text(record.status.symbol, style=style),
        Text(record.status.label, style=style),
        Text(record.workflow_id),
        Text(record.workflow_type, style="dim"),
        Text(format_time(record.start_time)),
        Text(format_duration(record.start_time, record.close_time, now)),
    ]


def _summary_tab(state: State, detail: domain.ExecutionDetail, now: datetime) -> list[Text]:
    summary = detail.summary
    status = Text("  ")
    status.append("{} {}".format(summary.status.symbol, summary.status.label), style=t9s.palette.status_style(summary.status))
    lines = [status, Text("")]
    lines.extend(_field_rows([
        ("Workflow ID", summary.workflow_id),
        ("Run ID", summary.run_id),
        ("Type", summary.workflow_type),
        ("Task Queue", summary.task_queue),
        ("Started", format_time(summary.start_time)),
        ("Closed", format_time(summary.close_time) if summary.close_time else ""),
        ("Duration", format_duration(summary.start_time, summary.close_time, now)),
        ("History Events", str(detail.history_length or summary.history_length)),
        ("Parent", detail.parent_workflow_id or ""),
    ]))
    for title, values in (("Memo", detail.memo), ("Search Attributes", detail.search_attributes)):
        if values:
            lines.append(Text(""))
            lines.append(_heading(title))
            lines.extend(_field_rows([(k, json.dumps(v, default=str)) for k, v in sorted(values.items())]))
    return lines


def _failure_lines(failure: domain.FailureInfo) -> list[Text]:
    error = t9s.palette.PALETTE.error
    lines: list[Text] = []
    depth = 0
    current: domain.FailureInfo | None = failure
    while current is not None:
        prefix = "  " + "  " * depth + ("caused by: " if depth else "")
        label = "{}: {}".format(current.failure_type, current.message) if current.failure_type else current.message
        lines.append(Text(prefix + label, style=error))
        if current.stack_trace:
            lines.extend(Text("  " + "  " * (depth + 1) + line, style="dim") for line in current.stack_trace.splitlines())
        current = current.cause
        depth += 1
    return lines


def _io_tab(state: State, detail: domain.ExecutionDetail, now: datetime) -> list[Text]:
    lines = [_heading("Input")]
    lines.extend(_indented(format_value(detail.input)))
    lines.append(Text(""))
    if detail.failure is not None:
        lines.append(_heading("Failure"))
        lines.extend(_failure_lines(detail.failure))
    else:
        lines.append(_heading("Output"))
        lines.extend(_indented(format_value(detail.output)))
    return lines


def _event_summary(details: dict[str, Any]) -> str:
    parts = []
    for key, value in details.items():
        if key in ("input", "result", "details", "failure"):
            continue
        parts.append("{}={}".format(key, value))
    failure = details.get("failure")
    if isinstance(failure, dict) and failure.get("message"):
        parts.append("failure={}".format(failure["message"]))
    return " ".join(parts)


def _history_tab(state: State, detail: domain.ExecutionDetail, now: datetime) -> list[Text]:
    placeholder = _load_placeholder(state.history, "history")
    if placeholder is not None:
        return placeholder
    events = state.history.items
    if not events:
        return [Text("  No events", style="dim")]
    width = len(str(events[-1].event_id))
    lines = []
    for event in events:
        line = Text("  ")
        line.append("{:>{}}".format(event.event_id, width), style="dim")
        line.append("  ")
        line.append(format_time(event.timestamp), style="dim")
        line.append("  ")
        line.append(event.event_type, style="bold" if "Failed" in event.event_type else "")
        summary = _event_summary(event.details)
        if summary:
            line.append("  " + summary, style="dim")
        lines.append(line)
    return lines


def _pending_tab(state: State, detail: domain.ExecutionDetail, now: datetime) -> list[Text]:
    if not detail.pending_activities:
        return [Text("  No pending activities", style="dim")]
    lines: list[Text] = []
    for activity in detail.pending_activities:
        lines.append(_heading("{} ({})".format(activity.activity_id, activity.activity_type)))
        attempts = str(activity.attempt)
        if activity.maximum_attempts:
            attempts += " / {}".format(activity.maximum_attempts)
        lines.extend(_field_rows([
            ("State", activity.state.value),
            ("Attempt", attempts),
            ("Scheduled", format_time(activity.scheduled_time)),
            ("Last Started", format_time(activity.last_started_time)),
            ("Last Heartbeat", format_time(activity.last_heartbeat_time)),
            ("Last Failure", activity.last_failure_message or ""),
        ]))
        lines.append(Text(""))
    return lines


def _task_queue_tab(state: State, detail: domain.ExecutionDetail, now: datetime) -> list[Text]:
    if not detail.summary.task_queue:
        return [Text("  No task queue recorded", style="dim")]
    placeholder = _load_placeholder(state.task_queue, "task queue")
    if placeholder is not None:
        return placeholder
    info: domain.TaskQueueInfo = state.task_queue.data
    lines = [_heading(info.name)]
    if not info.pollers:
        lines.append(Text("  No pollers", style=t9s.palette.PALETTE.warning))
        return lines
    for poller in info.pollers:
        line = Text("  ")
        line.append(poller.identity, style="bold")
        line.append("  last access {}".format(format_time(poller.last_access_time)), style="dim")
        if poller.rate_per_second:
            line.append("  {:g}/s".format(poller.rate_per_second), style="dim")
        lines.append(line)
    return lines


# [LAW:dataflow-not-control-flow] Tab param -> content renderer.
_EXECUTION_TAB_RENDERERS: dict[str, Callable[[State, domain.ExecutionDetail, datetime], list[Text]]] = {
    "summary": _summary_tab,
    "io": _io_tab,
    "history": _history_tab,
    "pending": _pending_tab,
    "task-queue": _task_queue_tab,
}


def execution_detail(state: State, now: datetime) -> list[Text]:
    detail = state.details.get(KindId.EXECUTIONS)
    if detail is None:
        return [Text("  Loading workflow...", style="dim")]
    tabs = kind_spec(KindId.EXECUTIONS).tabs
    index = min(max(state.detail_tab, 0), len(tabs) - 1)
    return _EXECUTION_TAB_RENDERERS[tabs[index].param](state, detail, now)


# ─── Schedules ───────────────────────────────────────────────────────────────


def schedule_row(record: domain.Schedule, now: datetime) -> list[Text]:
    return [
        Text(record.schedule_id),
        Text(record.workflow_type, style="dim"),
        Text(record.state.label, style=t9s.palette.schedule_state_style(record.state)),
        Text(record.spec_description or "--"),
        Text(format_time(record.next_run)),
        Text(str(record.recent_action_count)),
    ]


def schedule_detail(state: State, now: datetime) -> list[Text]:
    schedule = state.details.get(KindId.SCHEDULES)
    if schedule is None:
        return [Text("  Loading schedule...", style="dim")]
    state_line = Text("  ")
    state_line.append(schedule.state.label, style=t9s.palette.schedule_state_style(schedule.state))
    lines = [state_line, Text("")]
    lines.extend(_field_rows([
        ("Schedule ID", schedule.schedule_id),
        ("Workflow Type", schedule.workflow_type),
        ("Spec", schedule.spec_description),
        ("Next Run", format_time(schedule.next_run) if schedule.next_run else ""),
        ("Recent Runs", str(schedule.recent_action_count)),
        ("Notes", schedule.notes),
    ]))
    lines.append(Text(""))
    lines.append(Text("  w: workflows started by this schedule", style="dim"))
    return lines
