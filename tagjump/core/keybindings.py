"""Jump-mode keybinding models, defaults and normalization."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from PySide6.QtCore import QKeyCombination, Qt
from PySide6.QtGui import QKeyEvent, QKeySequence


@dataclass(frozen=True, slots=True)
class KeybindingAction:
    action_id: str
    action_name: str
    default_sequence: tuple[str, ...]


KEYBINDING_ACTIONS: tuple[KeybindingAction, ...] = (
    KeybindingAction("action.tag_jump", "Tag Jump", ("Ctrl+;",)),
    KeybindingAction("action.tag_jump_regex", "Tag Jump (Regex)", ("Ctrl+Shift+;",)),
    KeybindingAction("action.tag_jump_nearest", "Jump to Nearest Tag", ("Return",)),
    KeybindingAction("action.tag_jump_cancel", "Cancel Tag Jump", ("Esc",)),
)

_ACTIONS_BY_ID: dict[str, KeybindingAction] = {action.action_id: action for action in KEYBINDING_ACTIONS}


def default_keybindings() -> dict[str, list[str]]:
    return {action.action_id: list(action.default_sequence) for action in KEYBINDING_ACTIONS}


def normalize_chord_text(chord_text: str) -> str:
    tokens = [tok.strip() for tok in str(chord_text or "").split("+") if tok.strip()]
    if not tokens:
        return ""
    order = {"ctrl": 0, "alt": 1, "shift": 2, "meta": 3, "cmd": 3}
    mods = sorted({tok.capitalize() for tok in tokens[:-1] if tok.lower() in order}, key=lambda m: order[m.lower()])
    return "+".join([*mods, tokens[-1]])


def normalize_keybindings(raw: Any) -> dict[str, list[str]]:
    """Known actions only; unset or invalid entries fall back to their defaults."""
    out = default_keybindings()
    if not isinstance(raw, Mapping):
        return out
    for action_id, value in raw.items():
        if action_id not in _ACTIONS_BY_ID or not isinstance(value, list):
            continue
        chords = [normalize_chord_text(item) for item in value if isinstance(item, str)]
        out[action_id] = [chord for chord in chords if chord]
    return out


def sequence_to_qkeysequence(sequence: list[str]) -> QKeySequence:
    return QKeySequence(", ".join(sequence))


def action_sequence(keybindings: Mapping[str, list[str]], action_id: str) -> list[str]:
    value = keybindings.get(action_id)
    if isinstance(value, list):
        return [str(item) for item in value if str(item).strip()]
    action = _ACTIONS_BY_ID.get(action_id)
    return list(action.default_sequence) if action is not None else []


def event_matches_sequence(event: QKeyEvent, sequence: list[str]) -> bool:
    if not sequence:
        return False
    chord = str(sequence[0] or "").strip()
    if not chord:
        return False
    target = QKeySequence(chord)
    if target.isEmpty():
        return False
    try:
        mods = event.modifiers() & (
            Qt.KeyboardModifier.ControlModifier
            | Qt.KeyboardModifier.AltModifier
            | Qt.KeyboardModifier.ShiftModifier
            | Qt.KeyboardModifier.MetaModifier
        )
        pressed = QKeySequence(QKeyCombination(mods, Qt.Key(event.key())))
    except (TypeError, ValueError):
        return False
    return bool(pressed.matches(target) == QKeySequence.SequenceMatch.ExactMatch)
