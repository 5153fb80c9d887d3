"""Pure key -> Action mapping.

// [LAW:single-enforcer] The only place key events become Actions.

Precedence, first match wins:
  1. active overlay
  2. text entry (command / search)
  3. pending ``g`` chord
  4. NORMAL globals (view-scoped extras for collections and details)
  5. registry fallback: cross-navigation keys, then operation keys
"""

from __future__ import annotations

from typing import Any

from t9s.core import actions
from t9s.core.commands import complete
from t9s.core.kinds import cross_nav_for_key, operation_for_key
from t9s.core.state import InputMode, Overlay, View
from t9s.tui.input_modes import (
    COLLECTION_KEYMAP,
    DETAIL_KEYMAP,
    NORMAL_KEYMAP,
    OVERLAY_KEYMAPS,
    SUBMIT_ACTIONS,
)


def _lookup(keymap: dict, key: str, character: str | None):
    factory = keymap.get(key)
    if factory is None and character:
        factory = keymap.get(character)
    return factory() if factory is not None else None


def _is_printable(character: str | None) -> bool:
    return bool(character) and len(character) == 1 and character.isprintable()


def _text_entry(key: str, character: str | None, mode: InputMode, buffer: str):
    if key == "escape":
        return actions.CloseOverlay()
    if key == "enter":
        return SUBMIT_ACTIONS[mode]()
    if key == "backspace":
        return actions.UpdateInputBuffer(buffer[:-1])
    if key == "tab":
        if mode is InputMode.COMMAND:
            return actions.UpdateInputBuffer(complete(buffer))
        return None
    if _is_printable(character):
        return actions.UpdateInputBuffer(buffer + character)
    return None


def key_to_action(
    key: str,
    character: str | None,
    view: View,
    mode: InputMode,
    overlay: Overlay,
    buffer: str = "",
) -> Any:
    """Map one key press to an Action, or None when the key means nothing here."""
    if overlay.active:
        return _lookup(OVERLAY_KEYMAPS.get(overlay.kind, {}), key, character)

    if mode in SUBMIT_ACTIONS:
        return _text_entry(key, character, mode, buffer)

    if mode is InputMode.PENDING_G:
        return actions.NavigateTop() if key == "g" else actions.CancelChord()

    scoped = DETAIL_KEYMAP if view.is_detail else COLLECTION_KEYMAP
    action = _lookup(NORMAL_KEYMAP, key, character) or _lookup(scoped, key, character)
    if action is not None:
        return action

    if not _is_printable(character):
        return None
    nav = cross_nav_for_key(view.kind, character, view.mode)
    if nav is not None:
        return nav.action()
    op = operation_for_key(view.kind, character)
    if op is not None:
        return actions.RunOperation(op)
    return None
