"""Raw Temporal HTTP API JSON -> domain snapshots.

Pure functions. Shape problems (missing required keys, wrong types, malformed
timestamps) surface as BackendParseError so the worker reports them like any
other backend failure.
"""

from __future__ import annotations

import base64
import binascii
import functools
import json
import re
from datetime import datetime
from typing import Any, Callable, TypeVar

from t9s.backend.errors import BackendParseError
from t9s.core import domain

T = TypeVar("T")

_STATUS_PREFIX = "WORKFLOW_EXECUTION_STATUS_"
_ACTIVITY_STATE_PREFIX = "PENDING_ACTIVITY_STATE_"
_EVENT_TYPE_PREFIX = "EVENT_TYPE_"

_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_guard(fn: Callable[..., T]) -> Callable[..., T]:
    """Turn shape errors raised inside a transform into BackendParseError."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except BackendParseError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise BackendParseError(f"unexpected response shape in {fn.__name__}: {e!r}") from e

    return wrapper


# ─── Scalars ─────────────────────────────────────────────────────────────────


def parse_timestamp(raw: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp. Nanosecond fractions are truncated to microseconds."""
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str):
        raise BackendParseError(f"timestamp is not a string: {raw!r}")
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise BackendParseError(f"invalid timestamp: {raw!r}") from e


def _int(raw: Any, default: int = 0) -> int:
    # int64 fields arrive as JSON strings.
    if raw is None or raw == "":
        return default
    return int(raw)


def _name(raw: Any) -> str:
    if isinstance(raw, dict):
        return str(raw.get("name", ""))
    return str(raw or "")


def execution_status(raw: Any) -> domain.ExecutionStatus:
    name = str(raw or "").removeprefix(_STATUS_PREFIX)
    try:
        return domain.ExecutionStatus[name]
    except KeyError:
        return domain.ExecutionStatus.UNKNOWN


def activity_state(raw: Any) -> domain.PendingActivityState:
    name = str(raw or "").removeprefix(_ACTIVITY_STATE_PREFIX)
    try:
        return domain.PendingActivityState[name]
    except KeyError:
        return domain.PendingActivityState.UNKNOWN


def event_type_name(raw: Any) -> str:
    """``EVENT_TYPE_WORKFLOW_EXECUTION_STARTED`` -> ``WorkflowExecutionStarted``."""
    text = str(raw or "")
    if not text.startswith(_EVENT_TYPE_PREFIX):
        return text
    words = text.removeprefix(_EVENT_TYPE_PREFIX).split("_")
    return "".join(word.capitalize() for word in words if word)


# ─── Payloads ────────────────────────────────────────────────────────────────


def _b64(raw: str) -> bytes:
    return base64.b64decode(raw, validate=True)


def decode_payload(payload: Any) -> Any:
    """Decode one payload to plain JSON data.

    Encoded payloads carry base64 ``metadata.encoding`` and ``data``; anything
    else is assumed to be already-decoded JSON and returned unchanged.
    """
    if not isinstance(payload, dict) or "data" not in payload:
        return payload
    metadata = payload.get("metadata") or {}
    try:
        encoding = _b64(metadata["encoding"]).decode("utf-8") if "encoding" in metadata else ""
        data = _b64(payload.get("data") or "")
    except (binascii.Error, ValueError, UnicodeDecodeError):
        return payload
    if encoding == "binary/null":
        return None
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return f"<binary {len(data)} bytes>"
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def decode_payloads(raw: Any) -> Any:
    """A ``{"payloads": [...]}`` block -> one value, a list, or None."""
    if not isinstance(raw, dict):
        return raw
    values = [decode_payload(p) for p in raw.get("payloads") or []]
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return values


def _decode_fields(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict):
        return {}
    return {key: decode_payload(value) for key, value in raw.items()}


def decode_failure(raw: Any) -> dict[str, Any] | None:
    if not isinstance(raw, dict):
        return None
    out: dict[str, Any] = {}
    for source_key, target_key in (("message", "message"), ("source", "source"), ("stackTrace", "stack_trace")):
        if raw.get(source_key):
            out[target_key] = raw[source_key]
    if raw.get("cause"):
        out["cause"] = decode_failure(raw["cause"])
    return out


# ─── Executions ──────────────────────────────────────────────────────────────


@parse_guard
def execution_summary(raw: dict) -> domain.ExecutionSummary:
    execution = raw["execution"]
    return domain.ExecutionSummary(
        workflow_id=str(execution["workflowId"]),
        run_id=str(execution.get("runId", "")),
        workflow_type=_name(raw.get("type")),
        status=execution_status(raw.get("status")),
        start_time=parse_timestamp(raw.get("startTime")),
        close_time=parse_timestamp(raw.get("closeTime")),
        task_queue=_name(raw.get("taskQueue")),
        history_length=_int(raw.get("historyLength")),
    )


@parse_guard
def execution_page(raw: dict) -> domain.ExecutionPage:
    executions = tuple(execution_summary(item) for item in raw.get("executions") or [])
    return domain.ExecutionPage(executions, str(raw.get("nextPageToken") or ""))


@parse_guard
def pending_activity(raw: dict) -> domain.PendingActivity:
    last_failure = raw.get("lastFailure") or {}
    return domain.PendingActivity(
        activity_id=str(raw.get("activityId", "")),
        activity_type=_name(raw.get("activityType")),
        state=activity_state(raw.get("state")),
        attempt=_int(raw.get("attempt"), 1),
        maximum_attempts=_int(raw.get("maximumAttempts")),
        scheduled_time=parse_timestamp(raw.get("scheduledTime")),
        last_started_time=parse_timestamp(raw.get("lastStartedTime")),
        last_heartbeat_time=parse_timestamp(raw.get("lastHeartbeatTime")),
        last_failure_message=last_failure.get("message") or None,
    )


@parse_guard
def execution_detail(raw: dict) -> domain.ExecutionDetail:
    info = raw["workflowExecutionInfo"]
    summary = execution_summary(info)
    memo = (info.get("memo") or {}).get("fields")
    search = (info.get("searchAttributes") or {}).get("indexedFields")
    parent = info.get("parentExecution") or {}
    return domain.ExecutionDetail(
        summary=summary,
        history_length=summary.history_length,
        memo=_decode_fields(memo),
        search_attributes=_decode_fields(search),
        pending_activities=tuple(pending_activity(pa) for pa in raw.get("pendingActivities") or []),
        parent_workflow_id=parent.get("workflowId") or None,
    )


# ─── History ─────────────────────────────────────────────────────────────────

_PAYLOAD_KEYS = ("input", "result", "details")
_NAMED_KEYS = ("workflowType", "activityType", "taskQueue")
_PLAIN_KEYS = ("signalName", "timerId", "reason", "identity", "activityId", "workflowId")


def _attributes(raw: dict) -> dict:
    for key, value in raw.items():
        if key.endswith("EventAttributes") and isinstance(value, dict):
            return value
    return {}


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)([A-Z])", r"_\1", name).lower()


def event_details(attrs: dict) -> dict[str, Any]:
    """Flatten the interesting parts of an event's attributes with snake_case keys."""
    details: dict[str, Any] = {}
    for key in _NAMED_KEYS:
        if key in attrs:
            details[_snake(key)] = _name(attrs[key])
    for key in _PLAIN_KEYS:
        if attrs.get(key):
            details[_snake(key)] = attrs[key]
    for key in _PAYLOAD_KEYS:
        value = decode_payloads(attrs.get(key))
        if value is not None:
            details[key] = value
    failure = decode_failure(attrs.get("failure"))
    if failure:
        details["failure"] = failure
    return details


@parse_guard
def history_event(raw: dict) -> domain.HistoryEvent:
    return domain.HistoryEvent(
        event_id=_int(raw["eventId"]),
        event_type=event_type_name(raw.get("eventType")),
        timestamp=parse_timestamp(raw.get("eventTime")),
        details=event_details(_attributes(raw)),
    )


@parse_guard
def history_page(raw: dict) -> tuple[list[domain.HistoryEvent], str]:
    events = (raw.get("history") or {}).get("events") or []
    return [history_event(e) for e in events], str(raw.get("nextPageToken") or "")


# ─── Schedules ───────────────────────────────────────────────────────────────


def describe_schedule_spec(spec: Any) -> str:
    """One-line human summary of a schedule spec."""
    if not isinstance(spec, dict):
        return ""
    parts: list[str] = []
    parts.extend(str(c) for c in spec.get("cronString") or [])
    for interval in spec.get("interval") or []:
        every = interval.get("interval", "")
        phase = interval.get("phase")
        parts.append(f"every {every}" + (f" offset {phase}" if phase else ""))
    calendars = spec.get("structuredCalendar") or spec.get("calendar") or []
    if calendars:
        parts.append(f"{len(calendars)} calendar rule(s)")
    return ", ".join(parts)


@parse_guard
def schedule_from_listing(raw: dict) -> domain.Schedule:
    info = raw.get("info") or {}
    future = info.get("futureActionTimes") or []
    return domain.Schedule(
        schedule_id=str(raw["scheduleId"]),
        workflow_type=_name(info.get("workflowType")) or "Unknown",
        state=domain.ScheduleState.PAUSED if info.get("paused") else domain.ScheduleState.ACTIVE,
        spec_description=describe_schedule_spec(info.get("spec")),
        next_run=parse_timestamp(future[0]) if future else None,
        recent_action_count=len(info.get("recentActions") or []),
        notes=str(info.get("notes") or ""),
    )


@parse_guard
def schedule_from_describe(schedule_id: str, raw: dict) -> domain.Schedule:
    schedule = raw["schedule"]
    info = raw.get("info") or {}
    state = schedule.get("state") or {}
    start = (schedule.get("action") or {}).get("startWorkflow") or {}
    future = info.get("futureActionTimes") or []
    return domain.Schedule(
        schedule_id=schedule_id,
        workflow_type=_name(start.get("workflowType")) or "Unknown",
        state=domain.ScheduleState.PAUSED if state.get("paused") else domain.ScheduleState.ACTIVE,
        spec_description=describe_schedule_spec(schedule.get("spec")),
        next_run=parse_timestamp(future[0]) if future else None,
        recent_action_count=_int(info.get("actionCount"), len(info.get("recentActions") or [])),
        notes=str(state.get("notes") or ""),
    )


# ─── Namespaces, task queues, counts ─────────────────────────────────────────


@parse_guard
def namespace(raw: dict) -> domain.Namespace:
    info = raw["namespaceInfo"]
    config = raw.get("config") or {}
    return domain.Namespace(
        name=str(info["name"]),
        state=str(info.get("state", "")).removeprefix("NAMESPACE_STATE_"),
        description=str(info.get("description") or ""),
        owner_email=str(info.get("ownerEmail") or ""),
        retention=config.get("workflowExecutionRetentionTtl"),
    )


@parse_guard
def task_queue(name: str, raw: dict) -> domain.TaskQueueInfo:
    pollers = tuple(
        domain.Poller(
            identity=str(p.get("identity", "")),
            last_access_time=parse_timestamp(p.get("lastAccessTime")),
            rate_per_second=float(p.get("ratePerSecond") or 0.0),
        )
        for p in raw.get("pollers") or []
    )
    return domain.TaskQueueInfo(name=name, pollers=pollers)


@parse_guard
def execution_count(raw: dict) -> int:
    return _int(raw.get("count"))


def encode_payload(value: Any) -> dict[str, Any]:
    """Plain data -> a ``json/plain`` payload with base64 fields."""
    return {
        "metadata": {"encoding": base64.b64encode(b"json/plain").decode("ascii")},
        "data": base64.b64encode(json.dumps(value).encode("utf-8")).decode("ascii"),
    }
