"""Panel rendering logic - pure functions for building display renderables.

Every function reads State and returns a rich renderable. None of them
change State; widgets call them from ``update_display``.
"""

from __future__ import annotations

import importlib
from datetime import datetime

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

import t9s.palette
import t9s.tui.input_modes
from t9s.core.commands import COMMANDS
from t9s.core.kinds import KIND_REGISTRY, KindSpec, kind_spec
from t9s.core.location import format_deep_link
from t9s.core.reducer import current_location
from t9s.core.state import ConnectionStatus, InputMode, LoadStatus, OverlayKind, State


def _resolve_factory(dotted_path: str):
    """Resolve a dotted renderer path like 't9s.tui.kind_renderers.execution_row'.

    Uses importlib to resolve the module, then getattr for the function.
    This lets the kind registry reference renderers without importing them.
    """
    module_path, func_name = dotted_path.rsplit(".", 1)
    mod = importlib.import_module(module_path)
    return getattr(mod, func_name)


def window_bounds(cursor: int | None, length: int, height: int) -> tuple[int, int]:
    """Slice [start, end) of ``length`` rows that keeps ``cursor`` visible.

    The cursor sits mid-window where possible and the window never runs past
    either end.
    """
    height = max(1, height)
    if length <= height:
        return 0, length
    focus = cursor or 0
    start = max(0, min(focus - height // 2, length - height))
    return start, start + height


def clamp_scroll(scroll: int, line_count: int, height: int) -> int:
    return max(0, min(scroll, line_count - max(1, height)))


# ─── Tab bar / status ────────────────────────────────────────────────────────


_CONNECTION_INDICATORS: dict[ConnectionStatus, tuple[str, str]] = {
    ConnectionStatus.UNKNOWN: ("\u25cb", "warning"),  # hollow
    ConnectionStatus.CONNECTED: ("\u25cf", "success"),  # filled
    ConnectionStatus.ERROR: ("\u25cf", "error"),
}


def render_tab_bar(state: State) -> Text:
    """Kinds, namespace, connection and polling on one line.

    // [LAW:dataflow-not-control-flow] All segments always rendered; state drives styles.
    """
    p = t9s.palette.PALETTE
    text = Text()
    text.append(" t9s ", style=f"bold {p.accent}")
    for spec in KIND_REGISTRY:
        active = spec.id is state.view.kind
        text.append(" ")
        text.append(f" {spec.label} ", style=f"bold reverse {p.info}" if active else "dim")
    text.append("   ns: ", style="dim")
    text.append(state.namespace, style=f"bold {p.info}")

    symbol, role = _CONNECTION_INDICATORS[state.connection_status]
    text.append("   ")
    text.append(symbol, style=p.role(role))
    text.append(" " + state.connection_status.value, style="dim")

    text.append("   ")
    if state.polling_enabled:
        text.append("\u21bb {:g}s".format(state.polling_interval), style="dim")
    else:
        text.append("polling off", style=p.warning)
    return text


def render_status_line(state: State) -> Text:
    """Deep link of the current location."""
    text = Text(" ")
    text.append(format_deep_link(current_location(state)), style="dim")
    return text


# ─── Collection ──────────────────────────────────────────────────────────────


def _collection_header(state: State, spec: KindSpec) -> Text:
    p = t9s.palette.PALETTE
    load = state.collection(spec.id)
    text = Text()
    text.append(spec.label, style=f"bold {p.info}")
    shown = len(load.items)
    if spec.paginated and state.execution_count is not None:
        text.append(" [{}/{}]".format(shown, state.execution_count), style="dim")
    else:
        text.append(" [{}]".format(shown), style="dim")
    query = state.search_query(spec.id)
    if query:
        text.append("  filter: ", style="dim")
        text.append(query, style=p.warning)
    if state.loading_more and spec.paginated:
        text.append("  loading more...", style="dim")
    return text


def render_collection(state: State, height: int, now: datetime) -> RenderableType:
    """Registry-driven table for the active kind, windowed around the cursor."""
    p = t9s.palette.PALETTE
    spec = kind_spec(state.view.kind)
    load = state.collection(spec.id)
    header = _collection_header(state, spec)

    if load.status is LoadStatus.ERROR:
        return Group(header, Text(""), Text("  Error: {}".format(load.error), style=p.error))
    if load.status in (LoadStatus.NOT_LOADED, LoadStatus.LOADING):
        return Group(header, Text(""), Text("  " + spec.loading_label, style="dim"))
    rows = load.items
    if not rows:
        return Group(header, Text(""), Text("  " + spec.empty_label, style="dim"))

    table = Table(box=None, expand=True, show_edge=False, pad_edge=False, header_style="bold")
    for column in spec.columns:
        table.add_column(column.header, width=column.width, no_wrap=True, overflow="ellipsis")

    row_renderer = _resolve_factory(spec.row_renderer)
    cursor = state.cursor(spec.id)
    # Header line, blank line and table header take three rows.
    start, end = window_bounds(cursor, len(rows), height - 3)
    for index in range(start, end):
        selected = index == cursor
        table.add_row(
            *row_renderer(rows[index], now),
            style=f"bold on {p.selection_bg}" if selected else None,
        )
    return Group(header, Text(""), table)


# ─── Detail ──────────────────────────────────────────────────────────────────


def _detail_header(state: State, spec: KindSpec) -> Text:
    p = t9s.palette.PALETTE
    ref = state.detail_refs.get(spec.id)
    text = Text()
    text.append(spec.singular.capitalize(), style=f"bold {p.info}")
    text.append(" ")
    text.append(ref.record_id if ref else "--", style="bold")
    if ref is not None and ref.run_id:
        text.append("  run ", style="dim")
        text.append(ref.run_id, style="dim")
    return text


def render_detail_tabs(state: State, spec: KindSpec) -> Text:
    p = t9s.palette.PALETTE
    text = Text()
    for index, tab in enumerate(spec.tabs):
        active = index == state.detail_tab
        text.append(" ")
        text.append(f" {tab.name} ", style=f"bold reverse {p.info}" if active else "dim")
    return text


def _detail_parts(state: State, height: int, now: datetime) -> tuple[list, list, int]:
    spec = kind_spec(state.view.kind)
    chrome: list[RenderableType] = [_detail_header(state, spec)]
    if spec.tabs:
        chrome.append(render_detail_tabs(state, spec))
    chrome.append(Text(""))
    lines = _resolve_factory(spec.detail_renderer)(state, now)
    return chrome, lines, max(1, height - len(chrome))


def detail_scroll_limit(state: State, height: int, now: datetime) -> int:
    """Largest offset that still fills the detail body at ``height``."""
    _chrome, lines, body_height = _detail_parts(state, height, now)
    return max(0, len(lines) - body_height)


def render_detail(state: State, height: int, now: datetime) -> RenderableType:
    chrome, lines, body_height = _detail_parts(state, height, now)
    offset = clamp_scroll(state.detail_scroll, len(lines), body_height)
    return Group(*chrome, *lines[offset:offset + body_height])


def render_main(state: State, height: int, now: datetime) -> RenderableType:
    if state.view.is_detail:
        return render_detail(state, height, now)
    return render_collection(state, height, now)


# ─── Footer / input / toast ──────────────────────────────────────────────────


def _kind_hints(state: State) -> list[tuple[str, str]]:
    spec = kind_spec(state.view.kind)
    hints = [(op.key, op.label.split()[0].lower()) for op in spec.operations]
    hints.extend((nav.key, nav.label.lower()) for nav in spec.cross_nav if state.view.mode in nav.modes)
    return hints


def footer_keys(state: State) -> list[tuple[str, str]]:
    """(key, description) hints for the current mode and overlay."""
    modes = t9s.tui.input_modes
    if state.overlay.active:
        return modes.OVERLAY_FOOTER_KEYS[state.overlay.kind]
    if state.input_mode is not InputMode.NORMAL:
        return modes.FOOTER_KEYS[state.input_mode]
    base = modes.DETAIL_FOOTER_KEYS if state.view.is_detail else modes.FOOTER_KEYS[InputMode.NORMAL]
    return list(base) + _kind_hints(state)


def render_footer(state: State) -> Text:
    p = t9s.palette.PALETTE
    text = Text()
    for key, description in footer_keys(state):
        text.append(" ")
        text.append(key, style=f"bold {p.accent}")
        text.append(" " + description, style="dim")
        text.append(" ")
    return text


def render_input_line(state: State) -> Text:
    """Command or search prompt with its buffer; empty outside text entry."""
    prompt = t9s.tui.input_modes.PROMPTS.get(state.input_mode)
    text = Text()
    if prompt is not None:
        text.append(prompt, style=f"bold {t9s.palette.PALETTE.accent}")
        text.append(state.input_buffer)
        text.append("\u2588", style="blink")
    elif state.input_mode is InputMode.PENDING_G:
        text.append("g-", style="dim")
    return text


def render_toast(state: State) -> Text:
    if state.toast is None:
        return Text("")
    p = t9s.palette.PALETTE
    style = f"bold {p.error}" if state.toast.is_error else p.info
    return Text(" " + state.toast.message, style=style)


# ─── Overlays ────────────────────────────────────────────────────────────────


def render_help() -> Text:
    """Keyboard shortcuts, per-kind keys and commands.

    // [LAW:one-source-of-truth] KEY_GROUPS, KIND_REGISTRY and COMMANDS are the sole data sources.
    """
    p = t9s.palette.PALETTE
    text = Text()
    text.append("Keys", style=f"bold {p.info}")
    text.append("\n")

    groups = list(t9s.tui.input_modes.KEY_GROUPS)
    for spec in KIND_REGISTRY:
        keys = [(op.key, op.label) for op in spec.operations]
        keys.extend((nav.key, nav.label) for nav in spec.cross_nav)
        groups.append((spec.label, keys))

    for group_title, keys in groups:
        text.append(" ")
        text.append(group_title, style="bold underline")
        text.append("\n")
        for key_display, description in keys:
            text.append("  ")
            text.append("{:>6}".format(key_display), style=f"bold {p.info}")
            text.append("  ")
            text.append(description, style="dim")
            text.append("\n")

    text.append(" ")
    text.append("Commands", style="bold underline")
    text.append("\n")
    for command in COMMANDS:
        text.append("  ")
        text.append(":" + command.usage, style=f"bold {p.info}")
        if command.aliases:
            text.append(" ({})".format(", ".join(command.aliases)), style="dim")
        text.append("  ")
        text.append(command.description, style="dim")
        text.append("\n")
    return text


def _target_label(target) -> str:
    for attr in ("workflow_id", "schedule_id"):
        value = getattr(target, attr, None)
        if value:
            return str(value)
    return str(target)


def render_confirm(state: State) -> Text:
    p = t9s.palette.PALETTE
    pending = state.overlay.confirm
    text = Text()
    if pending is None:
        return text
    op = next((o for o in kind_spec(pending.kind).operations if o.id is pending.op), None)
    label = op.label if op is not None else pending.op.value
    text.append(label, style=f"bold {p.warning}")
    text.append("\n\n  ")
    text.append(_target_label(pending.target), style="bold")
    text.append("\n\n")
    text.append("  y", style=f"bold {p.accent}")
    text.append(" confirm   ", style="dim")
    text.append("n", style=f"bold {p.accent}")
    text.append(" cancel", style="dim")
    return text


def render_namespace_selector(state: State) -> Text:
    p = t9s.palette.PALETTE
    text = Text()
    text.append("Namespaces", style=f"bold {p.info}")
    text.append("\n")
    if not state.namespaces:
        text.append("  Loading namespaces...", style="dim")
        return text
    for index, namespace in enumerate(state.namespaces):
        selected = index == state.namespace_cursor
        marker = "\u25b8 " if selected else "  "
        style = f"bold on {p.selection_bg}" if selected else ""
        text.append(marker + namespace.name, style=style)
        if namespace.name == state.namespace:
            text.append("  (current)", style="dim")
        text.append("\n")
    return text


# [LAW:dataflow-not-control-flow] Overlay kind -> body renderer.
OVERLAY_RENDERERS = {
    OverlayKind.HELP: lambda state: render_help(),
    OverlayKind.CONFIRM: render_confirm,
    OverlayKind.NAMESPACE_SELECTOR: render_namespace_selector,
}


def render_overlay(state: State) -> Text | None:
    renderer = OVERLAY_RENDERERS.get(state.overlay.kind)
    return renderer(state) if renderer is not None else None
