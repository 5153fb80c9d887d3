"""Main TUI application for t9s.

The App owns the only State value. Keys and ticks become Actions, Actions go
through the reducer, emitted Effects go to the BackendWorker thread, and
worker results come back as ActionArrived messages into the same dispatch.

// [LAW:single-enforcer] dispatch_action() is the only place State is replaced.
// [LAW:one-way-deps] Widgets read State through panel_renderers; nothing writes back.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

from textual.app import App, ComposeResult
from textual.message import Message

import t9s.tui.event_mapper
from t9s.backend.client import TemporalBackend
from t9s.core import actions, effects
from t9s.core.location import ExecutionsCollection, Location
from t9s.core.reducer import reduce
from t9s.core.state import State, initial_state
from t9s.tui.widgets import (
    FooterBar,
    InputLine,
    MainView,
    OverlayPanel,
    StatusLine,
    TabBar,
    ToastLine,
)
from t9s.worker import BackendWorker

logger = logging.getLogger(__name__)


class ActionArrived(Message, bubble=False):
    """Thread-safe bridge: worker thread -> app message pump."""

    def __init__(self, action: Any) -> None:
        self.action = action
        super().__init__()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class T9sApp(App):
    """k9s-style dashboard for Temporal workflows and schedules."""

    TITLE = "t9s"

    CSS = """
    Screen {
        layers: base overlay;
    }
    """

    # Widget order is the bottom-dock stacking order.
    _DISPLAY_WIDGETS = (TabBar, FooterBar, StatusLine, ToastLine, InputLine, MainView, OverlayPanel)

    def __init__(
        self,
        backend: TemporalBackend,
        state: State | None = None,
        initial_location: Location | None = None,
        tick_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = _utc_now,
    ):
        super().__init__()
        self._state = state if state is not None else initial_state()
        self._initial_location = initial_location or Location(
            self._state.namespace, (ExecutionsCollection(),)
        )
        self._tick_interval = tick_interval
        self._clock = clock
        self._wall_clock = wall_clock
        self._worker = BackendWorker(backend, emit=self._emit)

    @property
    def state(self) -> State:
        return self._state

    def compose(self) -> ComposeResult:
        for widget_cls in self._DISPLAY_WIDGETS:
            yield widget_cls()

    def on_mount(self) -> None:
        self.run_worker(self._worker.run, thread=True, exclusive=False, name="backend")
        self.set_interval(self._tick_interval, self._on_tick_timer)
        logger.info("t9s started at %s", self._initial_location)
        self.dispatch_action(actions.ApplyLocation(self._initial_location))

    def on_unmount(self) -> None:
        logger.info("t9s shutting down")
        self._worker.stop()

    # ─── Event sources ───────────────────────────────────────────────────────

    def _emit(self, action: Any) -> None:
        # Called from the worker thread; post_message is thread-safe.
        self.post_message(ActionArrived(action))

    def on_action_arrived(self, message: ActionArrived) -> None:
        self.dispatch_action(message.action)

    def _on_tick_timer(self) -> None:
        self.dispatch_action(actions.Tick())

    def on_key(self, event) -> None:
        """// [LAW:single-enforcer] on_key is the sole key dispatcher."""
        state = self._state
        action = t9s.tui.event_mapper.key_to_action(
            event.key,
            event.character,
            state.view,
            state.input_mode,
            state.overlay,
            state.input_buffer,
        )
        if action is None:
            return
        event.prevent_default()
        event.stop()
        self.dispatch_action(action)

    def on_resize(self, event) -> None:
        self._render_state()

    # ─── Dispatch ────────────────────────────────────────────────────────────

    def dispatch_action(self, action: Any) -> None:
        """Reduce ``action``, hand Effects to the worker in order, re-render."""
        self._state, emitted = reduce(self._state, action, self._clock())
        for effect in emitted:
            if isinstance(effect, effects.Quit):
                logger.info("quit requested")
                self.exit()
                return
            self._worker.submit(effect)
        self._render_state()

    def _render_state(self) -> None:
        now = self._wall_clock()
        for widget_cls in self._DISPLAY_WIDGETS:
            for widget in self.query(widget_cls):
                try:
                    widget.update_display(self._state, now)
                except Exception:
                    # A broken renderer must not take the dashboard down.
                    logger.exception("render failed in %s", widget_cls.__name__)
        self._sync_scroll_limit(now)

    def _sync_scroll_limit(self, now: datetime) -> None:
        """Tell the reducer how far the detail body can scroll at its current size."""
        for view in self.query(MainView):
            try:
                limit = view.scroll_limit(self._state, now)
            except Exception:
                logger.exception("measuring the detail view failed")
                return
            if limit is not None and limit != self._state.detail_scroll_max:
                self.dispatch_action(actions.DetailViewportMeasured(limit))
