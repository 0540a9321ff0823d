"""Buffer search pass that feeds raw match offsets to a jump session."""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)


def compile_occurrence_pattern(query: str, *, regex: bool = False) -> re.Pattern[str] | None:
    text = str(query or "")
    if not text:
        return None
    pattern_text = text if regex else re.escape(text)
    try:
        return re.compile(pattern_text, re.IGNORECASE)
    except re.error as exc:
        logger.warning(f"Invalid jump pattern \"{text}\": {exc}")
        return None


def find_occurrences(
    text: str,
    query: str,
    *,
    regex: bool = False,
    max_results: int = 10000,
    start: int = 0,
    end: int | None = None,
) -> list[int]:
    """Ascending start offsets of ``query`` in ``text[start:end]``.

    Literal queries match case-insensitively and may overlap, so "ee" is found
    twice in "eee". Regex matches resume after the previous match and empty
    ones are skipped.
    """
    pattern = compile_occurrence_pattern(query, regex=regex)
    if pattern is None:
        return []
    stop = len(text) if end is None else max(0, min(int(end), len(text)))
    pos = max(0, int(start))
    offsets: list[int] = []
    while pos <= stop and len(offsets) < max_results:
        m = pattern.search(text, pos, stop)
        if m is None:
            break
        s = int(m.start())
        e = int(m.end())
        if e > s:
            offsets.append(s)
        pos = e if regex and e > s else s + 1
    return offsets
