"""Deep-link locations and their URI codec.

A Location is "where the user is": a namespace plus a non-empty stack of
route segments whose last element (the leaf) decides which view to open.

    temporal://tui/namespaces/<ns>/workflows[/<id>[/activities[/<activity>]]]?q=&run_id=&tab=
    temporal://tui/namespaces/<ns>/schedules[/<id>[/workflows]]?q=

// [LAW:one-source-of-truth] format_deep_link / parse_deep_link are the only
//   producers and consumers of the URI string; they are mutual inverses.
// [LAW:single-enforcer] compose_schedule_query is the only place the
//   schedule -> executions visibility filter is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union
from urllib.parse import quote, unquote, unquote_plus

SCHEME = "temporal"
AUTHORITY = "tui"

_EXECUTIONS_SEGMENT = "workflows"
_SCHEDULES_SEGMENT = "schedules"
_ACTIVITIES_SEGMENT = "activities"


# ─── Route segments ──────────────────────────────────────────────────────────


def _require(value: str, what: str) -> None:
    if not value:
        raise ValueError(f"{what} must be non-empty")


@dataclass(frozen=True)
class ExecutionsCollection:
    query: str | None = None


@dataclass(frozen=True)
class ExecutionDetail:
    workflow_id: str
    run_id: str | None = None
    tab: str | None = None

    def __post_init__(self):
        _require(self.workflow_id, "workflow_id")


@dataclass(frozen=True)
class ExecutionActivities:
    workflow_id: str
    activity_id: str | None = None

    def __post_init__(self):
        _require(self.workflow_id, "workflow_id")
        if self.activity_id is not None:
            _require(self.activity_id, "activity_id")


@dataclass(frozen=True)
class SchedulesCollection:
    query: str | None = None


@dataclass(frozen=True)
class ScheduleDetail:
    schedule_id: str

    def __post_init__(self):
        _require(self.schedule_id, "schedule_id")


@dataclass(frozen=True)
class ScheduleExecutions:
    schedule_id: str
    query: str | None = None

    def __post_init__(self):
        _require(self.schedule_id, "schedule_id")


RouteSegment = Union[
    ExecutionsCollection,
    ExecutionDetail,
    ExecutionActivities,
    SchedulesCollection,
    ScheduleDetail,
    ScheduleExecutions,
]


@dataclass(frozen=True)
class Location:
    namespace: str
    segments: tuple[RouteSegment, ...]

    def __post_init__(self):
        _require(self.namespace, "namespace")
        if not self.segments:
            raise ValueError("a location needs at least one route segment")

    @property
    def leaf(self) -> RouteSegment:
        return self.segments[-1]


# ─── Errors ──────────────────────────────────────────────────────────────────


class DeepLinkErrorKind(Enum):
    INVALID_SCHEME = "invalid scheme"
    INVALID_AUTHORITY = "invalid authority"
    MISSING_NAMESPACE = "missing namespace"
    INVALID_PATH = "invalid path"
    UNSUPPORTED_ROUTE = "unsupported route"


class DeepLinkError(ValueError):
    """A URI that does not describe a Location."""

    def __init__(self, kind: DeepLinkErrorKind, uri: str = ""):
        self.kind = kind
        self.uri = uri
        super().__init__(kind.value)


# ─── Percent coding ──────────────────────────────────────────────────────────


def percent_encode(value: str) -> str:
    """Encode everything except ASCII letters, digits and ``-._~`` (UTF-8)."""
    return quote(value, safe="")


def _decode_path(value: str) -> str:
    return unquote(value)


def _decode_query(value: str) -> str:
    return unquote_plus(value)


# ─── Formatting ──────────────────────────────────────────────────────────────


def _segment_path(segment: RouteSegment) -> list[str]:
    if isinstance(segment, ExecutionsCollection):
        return [_EXECUTIONS_SEGMENT]
    if isinstance(segment, ExecutionDetail):
        return [_EXECUTIONS_SEGMENT, segment.workflow_id]
    if isinstance(segment, ExecutionActivities):
        parts = [_EXECUTIONS_SEGMENT, segment.workflow_id, _ACTIVITIES_SEGMENT]
        if segment.activity_id is not None:
            parts.append(segment.activity_id)
        return parts
    if isinstance(segment, SchedulesCollection):
        return [_SCHEDULES_SEGMENT]
    if isinstance(segment, ScheduleDetail):
        return [_SCHEDULES_SEGMENT, segment.schedule_id]
    if isinstance(segment, ScheduleExecutions):
        return [_SCHEDULES_SEGMENT, segment.schedule_id, _EXECUTIONS_SEGMENT]
    raise TypeError(f"not a route segment: {segment!r}")


def _leaf_params(leaf: RouteSegment) -> list[tuple[str, str]]:
    # [LAW:dataflow-not-control-flow] Every leaf yields a param list; most are empty.
    if isinstance(leaf, (ExecutionsCollection, SchedulesCollection, ScheduleExecutions)):
        return [("q", leaf.query)] if leaf.query is not None else []
    if isinstance(leaf, ExecutionDetail):
        params = []
        if leaf.run_id is not None:
            params.append(("run_id", leaf.run_id))
        if leaf.tab is not None:
            params.append(("tab", leaf.tab))
        return params
    return []


def format_deep_link(location: Location) -> str:
    """URI for the leaf of ``location``.

    Segments above the leaf are how the user got there, not where they are, so
    they are not encoded. Parsing the result gives the single-segment Location
    for the same leaf; for single-segment Locations format and parse are inverses.
    """
    path_parts = ["namespaces", location.namespace, *_segment_path(location.leaf)]
    path = "/" + "/".join(percent_encode(part) for part in path_parts)

    params = _leaf_params(location.leaf)
    uri = f"{SCHEME}://{AUTHORITY}{path}"
    if params:
        uri += "?" + "&".join(f"{percent_encode(k)}={percent_encode(v)}" for k, v in params)
    return uri


# ─── Parsing ─────────────────────────────────────────────────────────────────


def _parse_query(raw: str | None) -> dict[str, str]:
    params: dict[str, str] = {}
    if not raw:
        return params
    for pair in raw.split("&"):
        if not pair:
            continue
        key, _, value = pair.partition("=")
        params[_decode_query(key)] = _decode_query(value)
    return params


def _parse_executions(rest: list[str], params: dict[str, str]) -> RouteSegment:
    if not rest:
        return ExecutionsCollection(query=params.get("q"))
    workflow_id = rest[0]
    if len(rest) == 1:
        return ExecutionDetail(
            workflow_id=workflow_id,
            run_id=params.get("run_id"),
            tab=params.get("tab"),
        )
    if rest[1] == _ACTIVITIES_SEGMENT and len(rest) <= 3:
        activity_id = rest[2] if len(rest) == 3 else None
        return ExecutionActivities(workflow_id=workflow_id, activity_id=activity_id)
    raise DeepLinkError(DeepLinkErrorKind.UNSUPPORTED_ROUTE)


def _parse_schedules(rest: list[str], params: dict[str, str]) -> RouteSegment:
    if not rest:
        return SchedulesCollection(query=params.get("q"))
    schedule_id = rest[0]
    if len(rest) == 1:
        return ScheduleDetail(schedule_id=schedule_id)
    if len(rest) == 2 and rest[1] == _EXECUTIONS_SEGMENT:
        return ScheduleExecutions(schedule_id=schedule_id, query=params.get("q"))
    raise DeepLinkError(DeepLinkErrorKind.UNSUPPORTED_ROUTE)


_ROUTE_PARSERS = {
    _EXECUTIONS_SEGMENT: _parse_executions,
    _SCHEDULES_SEGMENT: _parse_schedules,
}


def parse_deep_link(uri: str) -> Location:
    """Parse a deep-link URI. Raises DeepLinkError with a distinct kind per cause."""
    scheme, sep, rest = uri.strip().partition("://")
    if not sep or scheme != SCHEME:
        raise DeepLinkError(DeepLinkErrorKind.INVALID_SCHEME, uri)

    authority, slash, path_and_query = rest.partition("/")
    if authority != AUTHORITY:
        raise DeepLinkError(DeepLinkErrorKind.INVALID_AUTHORITY, uri)

    path, _, raw_query = (slash + path_and_query).partition("?")
    parts = [_decode_path(p) for p in path.split("/") if p]
    if len(parts) < 2 or parts[0] != "namespaces" or not parts[1]:
        raise DeepLinkError(DeepLinkErrorKind.MISSING_NAMESPACE, uri)

    namespace, route = parts[1], parts[2:]
    if not route:
        raise DeepLinkError(DeepLinkErrorKind.INVALID_PATH, uri)

    parser = _ROUTE_PARSERS.get(route[0])
    if parser is None:
        raise DeepLinkError(DeepLinkErrorKind.UNSUPPORTED_ROUTE, uri)
    try:
        segment = parser(route[1:], _parse_query(raw_query))
    except DeepLinkError as e:
        raise DeepLinkError(e.kind, uri) from None
    except ValueError:
        # Empty ids after decoding (e.g. "%20" is fine, "" is not).
        raise DeepLinkError(DeepLinkErrorKind.INVALID_PATH, uri) from None
    return Location(namespace=namespace, segments=(segment,))


# ─── Query composition ───────────────────────────────────────────────────────


def escape_single_quotes(value: str) -> str:
    return value.replace("'", "\\'")


def compose_schedule_query(schedule_id: str, extra: str | None = None) -> str:
    """Visibility filter for executions started by a schedule.

    ``nightly`` + ``Status = 'Failed'`` -> ``(ScheduledBy = 'nightly') AND (Status = 'Failed')``.
    """
    base = f"ScheduledBy = '{escape_single_quotes(schedule_id)}'"
    if extra is None or not extra.strip():
        return base
    return f"({base}) AND ({extra.strip()})"
