"""Display widgets. Each one is a Static fed by a panel renderer.

Widgets hold no State of their own: the App calls ``update_display`` after
every dispatch and the widget asks panel_renderers for its renderable.
"""

from __future__ import annotations

from datetime import datetime

from textual.widgets import Static

# Use module-level imports so renderers resolve at call time
import t9s.tui.panel_renderers
from t9s.core.state import State


class TabBar(Static):
    """Kinds, namespace, connection and polling indicators."""

    DEFAULT_CSS = """
    TabBar {
        dock: top;
        height: 1;
        background: $panel;
    }
    """

    def update_display(self, state: State, now: datetime) -> None:
        self.update(t9s.tui.panel_renderers.render_tab_bar(state))


class MainView(Static):
    """Collection table or detail view for the active kind."""

    DEFAULT_CSS = """
    MainView {
        height: 1fr;
        padding: 0 1;
    }
    """

    def update_display(self, state: State, now: datetime) -> None:
        # Before the first layout pass the real height is unknown.
        height = self.size.height or state.page_height
        self.update(t9s.tui.panel_renderers.render_main(state, height, now))

    def scroll_limit(self, state: State, now: datetime) -> int | None:
        if not state.view.is_detail:
            return None
        height = self.size.height or state.page_height
        return t9s.tui.panel_renderers.detail_scroll_limit(state, height, now)


class OverlayPanel(Static):
    """Modal body for help, confirm and the namespace selector.

    // [LAW:dataflow-not-control-flow] display follows state.overlay; content from OVERLAY_RENDERERS.
    """

    DEFAULT_CSS = """
    OverlayPanel {
        layer: overlay;
        display: none;
        offset: 8 3;
        width: 64;
        max-height: 80%;
        padding: 1 2;
        border: round $accent;
        background: $surface;
        overflow-y: auto;
    }
    """

    def update_display(self, state: State, now: datetime) -> None:
        body = t9s.tui.panel_renderers.render_overlay(state)
        self.display = body is not None
        if body is not None:
            self.update(body)


class ToastLine(Static):
    DEFAULT_CSS = """
    ToastLine {
        dock: bottom;
        height: 1;
    }
    """

    def update_display(self, state: State, now: datetime) -> None:
        self.update(t9s.tui.panel_renderers.render_toast(state))


class InputLine(Static):
    """Command / search prompt. Collapsed outside text entry."""

    DEFAULT_CSS = """
    InputLine {
        dock: bottom;
        height: 1;
        background: $boost;
    }
    """

    def update_display(self, state: State, now: datetime) -> None:
        text = t9s.tui.panel_renderers.render_input_line(state)
        self.display = bool(text.plain)
        self.update(text)


class StatusLine(Static):
    """Deep link of the current location."""

    DEFAULT_CSS = """
    StatusLine {
        dock: bottom;
        height: 1;
    }
    """

    def update_display(self, state: State, now: datetime) -> None:
        self.update(t9s.tui.panel_renderers.render_status_line(state))


class FooterBar(Static):
    DEFAULT_CSS = """
    FooterBar {
        dock: bottom;
        height: 1;
        background: $panel;
    }
    """

    def update_display(self, state: State, now: datetime) -> None:
        self.update(t9s.tui.panel_renderers.render_footer(state))
