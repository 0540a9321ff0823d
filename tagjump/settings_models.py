from __future__ import annotations

import re
from copy import deepcopy
from typing import Any, Mapping, TypedDict

from tagjump.core.keybindings import default_keybindings, normalize_keybindings
from tagjump.services.tag_alphabet import DEFAULT_TAG_CHARACTERS

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_MIN_MAX_MATCHES = 100


class JumpSettings(TypedDict, total=False):
    tag_characters: str
    max_matches: int
    marker_background: str
    marker_foreground: str
    marker_typed_color: str
    keybindings: dict[str, list[str]]


def default_jump_settings() -> JumpSettings:
    return {
        "tag_characters": DEFAULT_TAG_CHARACTERS,
        "max_matches": 10000,
        "marker_background": "#FFD24A",
        "marker_foreground": "#1E1E1E",
        "marker_typed_color": "#3C8DFF",
        "keybindings": default_keybindings(),
    }


def _coerce_int(value: object, *, default: int, minimum: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return max(minimum, number)


def _coerce_color(value: object, fallback: str) -> str:
    text = str(value or "").strip()
    if _HEX_COLOR.match(text):
        return text.upper()
    return fallback


def _coerce_tag_characters(value: object, fallback: str) -> str:
    seen: list[str] = []
    for ch in str(value or "").lower():
        if ch.isspace() or not ch.isprintable() or ch in seen:
            continue
        seen.append(ch)
    return "".join(seen) if len(seen) >= 2 else fallback


def normalize_jump_settings(raw: Mapping[str, Any] | None) -> JumpSettings:
    defaults = default_jump_settings()
    data: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    return {
        "tag_characters": _coerce_tag_characters(data.get("tag_characters"), defaults["tag_characters"]),
        "max_matches": _coerce_int(data.get("max_matches"), default=defaults["max_matches"], minimum=_MIN_MAX_MATCHES),
        "marker_background": _coerce_color(data.get("marker_background"), defaults["marker_background"]),
        "marker_foreground": _coerce_color(data.get("marker_foreground"), defaults["marker_foreground"]),
        "marker_typed_color": _coerce_color(data.get("marker_typed_color"), defaults["marker_typed_color"]),
        "keybindings": normalize_keybindings(deepcopy(data.get("keybindings"))),
    }
