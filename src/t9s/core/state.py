"""The single State value and its tagged parts.

State is owned by the App and replaced wholesale after every reduce call.
The reducer never mutates the State it is given: it works on ``clone()``,
which copies the per-kind dicts so the caller's value stays intact.

// [LAW:one-source-of-truth] Every piece of UI-relevant data lives on State.
// [LAW:single-enforcer] Only the reducer produces new States.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from t9s.core import domain
from t9s.core.ids import KindId, OperationId


DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_PAGE_SIZE = 50
DEFAULT_PAGE_HEIGHT = 20
MAX_POLL_INTERVAL = 60.0
TOAST_TTL = 5.0


class ViewMode(Enum):
    COLLECTION = auto()
    DETAIL = auto()


@dataclass(frozen=True)
class View:
    kind: KindId
    mode: ViewMode = ViewMode.COLLECTION

    @classmethod
    def collection(cls, kind: KindId) -> View:
        return cls(kind, ViewMode.COLLECTION)

    @classmethod
    def detail(cls, kind: KindId) -> View:
        return cls(kind, ViewMode.DETAIL)

    @property
    def is_detail(self) -> bool:
        return self.mode is ViewMode.DETAIL


class InputMode(Enum):
    NORMAL = auto()
    COMMAND = auto()
    SEARCH = auto()
    PENDING_G = auto()


class OverlayKind(Enum):
    NONE = auto()
    HELP = auto()
    NAMESPACE_SELECTOR = auto()
    CONFIRM = auto()


@dataclass(frozen=True)
class PendingConfirm:
    """A deferred operation waiting for y/n."""

    kind: KindId
    op: OperationId
    target: Any


@dataclass(frozen=True)
class Overlay:
    kind: OverlayKind = OverlayKind.NONE
    confirm: PendingConfirm | None = None

    @classmethod
    def confirming(cls, pending: PendingConfirm) -> Overlay:
        return cls(OverlayKind.CONFIRM, pending)

    @property
    def active(self) -> bool:
        return self.kind is not OverlayKind.NONE


NO_OVERLAY = Overlay()
HELP_OVERLAY = Overlay(OverlayKind.HELP)
NAMESPACE_OVERLAY = Overlay(OverlayKind.NAMESPACE_SELECTOR)


class LoadStatus(Enum):
    NOT_LOADED = auto()
    LOADING = auto()
    LOADED = auto()
    ERROR = auto()


@dataclass(frozen=True)
class LoadState:
    status: LoadStatus = LoadStatus.NOT_LOADED
    data: Any = None
    error: str | None = None

    @classmethod
    def loading(cls) -> LoadState:
        return cls(LoadStatus.LOADING)

    @classmethod
    def loaded(cls, data: Any) -> LoadState:
        return cls(LoadStatus.LOADED, data)

    @classmethod
    def failed(cls, message: str) -> LoadState:
        return cls(LoadStatus.ERROR, error=message)

    @property
    def is_loaded(self) -> bool:
        return self.status is LoadStatus.LOADED

    @property
    def is_loading(self) -> bool:
        return self.status is LoadStatus.LOADING

    @property
    def items(self) -> tuple:
        """Loaded rows, or an empty tuple in every other state."""
        return tuple(self.data) if self.is_loaded and self.data is not None else ()


NOT_LOADED = LoadState()


class ConnectionStatus(Enum):
    UNKNOWN = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass(frozen=True)
class Toast:
    message: str
    at: float
    is_error: bool = False


@dataclass(frozen=True)
class DetailRef:
    """What a detail view is showing, known before the record arrives."""

    record_id: str
    run_id: str | None = None


@dataclass
class State:
    namespace: str = "default"
    view: View = field(default_factory=lambda: View.collection(KindId.EXECUTIONS))
    input_mode: InputMode = InputMode.NORMAL
    overlay: Overlay = NO_OVERLAY

    namespaces: tuple[domain.Namespace, ...] = ()
    namespace_cursor: int = 0

    collections: dict[KindId, LoadState] = field(default_factory=dict)
    cursors: dict[KindId, int | None] = field(default_factory=dict)
    details: dict[KindId, Any] = field(default_factory=dict)
    detail_refs: dict[KindId, DetailRef] = field(default_factory=dict)
    search_queries: dict[KindId, str] = field(default_factory=dict)

    history: LoadState = NOT_LOADED
    task_queue: LoadState = NOT_LOADED
    execution_count: int | None = None

    next_page_token: str = ""
    loading_more: bool = False

    polling_enabled: bool = True
    base_interval: float = DEFAULT_POLL_INTERVAL
    polling_interval: float = DEFAULT_POLL_INTERVAL
    error_count: int = 0
    last_refresh: float | None = None

    toast: Toast | None = None
    detail_tab: int = 0
    detail_scroll: int = 0
    # Furthest useful scroll offset, reported by the view after it renders.
    detail_scroll_max: int | None = None
    input_buffer: str = ""
    connection_status: ConnectionStatus = ConnectionStatus.UNKNOWN
    should_quit: bool = False

    page_size: int = DEFAULT_PAGE_SIZE
    page_height: int = DEFAULT_PAGE_HEIGHT

    def clone(self) -> State:
        new = copy.copy(self)
        new.collections = dict(self.collections)
        new.cursors = dict(self.cursors)
        new.details = dict(self.details)
        new.detail_refs = dict(self.detail_refs)
        new.search_queries = dict(self.search_queries)
        return new

    # ─── Read helpers ────────────────────────────────────────────────────────

    def collection(self, kind: KindId) -> LoadState:
        return self.collections.get(kind, NOT_LOADED)

    def cursor(self, kind: KindId) -> int | None:
        return self.cursors.get(kind)

    def selected_row(self, kind: KindId) -> Any:
        """Row under the cursor in the kind's collection, or None."""
        rows = self.collection(kind).items
        index = self.cursor(kind)
        if index is None or not 0 <= index < len(rows):
            return None
        return rows[index]

    def search_query(self, kind: KindId) -> str | None:
        return self.search_queries.get(kind)


def initial_state(
    namespace: str = "default",
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    page_size: int = DEFAULT_PAGE_SIZE,
    page_height: int = DEFAULT_PAGE_HEIGHT,
) -> State:
    return State(
        namespace=namespace,
        base_interval=poll_interval,
        polling_interval=poll_interval,
        page_size=page_size,
        page_height=page_height,
    )
