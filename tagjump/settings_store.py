from __future__ import annotations

import json
import os
import tempfile
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

from tagjump.settings_models import JumpSettings, default_jump_settings, normalize_jump_settings


class SettingsStoreError(RuntimeError):
    """Raised when a settings file cannot be loaded or saved."""


def deep_merge_defaults(data: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Merge defaults into data without overwriting explicitly provided values."""
    merged = deepcopy(dict(data))
    for key, default_value in defaults.items():
        if key not in merged:
            merged[key] = deepcopy(default_value)
            continue
        current = merged[key]
        if isinstance(current, dict) and isinstance(default_value, dict):
            merged[key] = deep_merge_defaults(current, default_value)
    return merged


def load_jump_settings(path: str | Path) -> JumpSettings:
    target = Path(path).expanduser()
    if not target.exists():
        return default_jump_settings()
    try:
        raw = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise SettingsStoreError(f"Could not read jump settings from {target}: {exc}") from exc
    if not isinstance(raw, dict):
        raise SettingsStoreError(f"Jump settings in {target} must be a JSON object.")
    return normalize_jump_settings(deep_merge_defaults(raw, default_jump_settings()))


def save_jump_settings(path: str | Path, settings: Mapping[str, Any]) -> None:
    target = Path(path).expanduser()
    payload = json.dumps(normalize_jump_settings(settings), indent=2, sort_keys=True) + "\n"
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=target.name + ".", suffix=".tmp", dir=str(target.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_path, target)
        finally:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
    except OSError as exc:
        raise SettingsStoreError(f"Could not save jump settings to {target}: {exc}") from exc
