"""Key tables per input mode and overlay.

All keyboard input routes through App.on_key -> event_mapper.key_to_action.
Textual BINDINGS are not used; these tables are the only key vocabulary.

Values are Action factories (zero-argument callables) so the tables stay
plain data.
"""

from __future__ import annotations

from typing import Any, Callable

from t9s.core import actions
from t9s.core.state import InputMode, OverlayKind

ActionFactory = Callable[[], Any]


# [LAW:one-source-of-truth] Key -> action mapping in NORMAL mode, any view.
NORMAL_KEYMAP: dict[str, ActionFactory] = {
    "ctrl+c": actions.Quit,
    "q": actions.Quit,
    "ctrl+r": actions.Refresh,
    "ctrl+d": actions.PageDown,
    "ctrl+u": actions.PageUp,
    ":": actions.OpenCommandInput,
    "colon": actions.OpenCommandInput,
    "?": actions.ToggleHelp,
    "question_mark": actions.ToggleHelp,
    "j": actions.NavigateDown,
    "down": actions.NavigateDown,
    "k": actions.NavigateUp,
    "up": actions.NavigateUp,
    "g": actions.EnterPendingChord,
    "G": actions.NavigateBottom,
    "enter": actions.Select,
    "escape": actions.Back,
    "tab": actions.NextTab,
    "shift+tab": actions.PrevTab,
}

# NORMAL mode keys that only apply in collection views.
COLLECTION_KEYMAP: dict[str, ActionFactory] = {
    "/": actions.OpenSearch,
    "slash": actions.OpenSearch,
}

# NORMAL mode keys that only apply in detail views.
DETAIL_KEYMAP: dict[str, ActionFactory] = {
    "h": actions.PrevTab,
    "left": actions.PrevTab,
    "l": actions.NextTab,
    "right": actions.NextTab,
}

# Overlays capture input before anything else.
OVERLAY_KEYMAPS: dict[OverlayKind, dict[str, ActionFactory]] = {
    OverlayKind.HELP: {
        "escape": actions.CloseOverlay,
        "?": actions.CloseOverlay,
        "question_mark": actions.CloseOverlay,
        "q": actions.CloseOverlay,
    },
    OverlayKind.CONFIRM: {
        "y": actions.ConfirmOperation,
        "enter": actions.ConfirmOperation,
        "n": actions.CancelConfirm,
        "escape": actions.CancelConfirm,
    },
    OverlayKind.NAMESPACE_SELECTOR: {
        "j": actions.NavigateDown,
        "down": actions.NavigateDown,
        "k": actions.NavigateUp,
        "up": actions.NavigateUp,
        "g": actions.NavigateTop,
        "G": actions.NavigateBottom,
        "enter": actions.Select,
        "escape": actions.CloseOverlay,
    },
}

# Text entry modes: what Enter submits.
SUBMIT_ACTIONS: dict[InputMode, ActionFactory] = {
    InputMode.COMMAND: actions.SubmitCommand,
    InputMode.SEARCH: actions.SubmitSearch,
}

# Prompt shown before the input buffer.
PROMPTS: dict[InputMode, str] = {
    InputMode.COMMAND: ":",
    InputMode.SEARCH: "/",
}


# [LAW:one-source-of-truth] Footer display per mode.
# Format: list of (key, description) tuples.
FOOTER_KEYS: dict[InputMode, list[tuple[str, str]]] = {
    InputMode.NORMAL: [
        ("j/k", "move"),
        ("enter", "open"),
        ("esc", "back"),
        ("/", "filter"),
        (":", "command"),
        ("^R", "refresh"),
        ("?", "help"),
        ("q", "quit"),
    ],
    InputMode.COMMAND: [
        ("enter", "run"),
        ("tab", "complete"),
        ("esc", "cancel"),
    ],
    InputMode.SEARCH: [
        ("enter", "apply"),
        ("esc", "cancel"),
    ],
    InputMode.PENDING_G: [
        ("g", "top"),
        ("any", "cancel"),
    ],
}

DETAIL_FOOTER_KEYS: list[tuple[str, str]] = [
    ("j/k", "scroll"),
    ("h/l", "tab"),
    ("esc", "back"),
    (":", "command"),
    ("?", "help"),
]

OVERLAY_FOOTER_KEYS: dict[OverlayKind, list[tuple[str, str]]] = {
    OverlayKind.HELP: [("esc/?", "close")],
    OverlayKind.CONFIRM: [("y/enter", "confirm"), ("n/esc", "cancel")],
    OverlayKind.NAMESPACE_SELECTOR: [("j/k", "move"), ("enter", "switch"), ("esc", "close")],
}


# [LAW:one-source-of-truth] Display data for the help overlay.
# Format: list of (group_title, [(key_display, description), ...]) tuples.
KEY_GROUPS: list[tuple[str, list[tuple[str, str]]]] = [
    ("Nav", [
        ("j/k", "Down / up"),
        ("gg/G", "Top / bottom"),
        ("^D/^U", "Page down / up"),
        ("enter", "Open detail"),
        ("esc", "Back / clear filter"),
    ]),
    ("Detail", [
        ("h/l", "Prev / next tab"),
        ("tab", "Next tab"),
        ("S-tab", "Prev tab"),
    ]),
    ("Input", [
        (":", "Command"),
        ("/", "Filter (visibility query)"),
        ("tab", "Complete command"),
    ]),
    ("Other", [
        ("^R", "Refresh"),
        ("?", "This help"),
        ("q/^C", "Quit"),
    ]),
]
