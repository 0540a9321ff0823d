"""Detects when the live query completes exactly one assigned tag."""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from typing import Iterable, Mapping

from .jump_types import EditorContext, ViewBounds

logger = logging.getLogger(__name__)


def text_portion_of_query(tag: str, query: str) -> str:
    lowered = query.lower()
    if lowered.endswith(tag.lower()):
        return query[: len(query) - len(tag)]
    if lowered.endswith(tag[0].lower()):
        return query[:-1]
    return query


def is_compatible_with_query(tag: str, offset: int, query: str, text: str, *, regex: bool = False) -> bool:
    """Whether the typed text in front of ``tag`` still matches the buffer at ``offset``."""
    if regex:
        return True
    portion = text_portion_of_query(tag, query)
    if offset < 0 or offset + len(portion) > len(text):
        return False
    return text[offset : offset + len(portion)].lower() == portion.lower()


def solves(tag: str, offset: int, query: str, text: str, *, regex: bool = False) -> bool:
    return query.lower().endswith(tag.lower()) and is_compatible_with_query(tag, offset, query, text, regex=regex)


def completing_keys(tags: Iterable[str], query: str) -> set[str]:
    """Second keys of two-character tags whose first key ends the query.

    A single-character tag on one of these keys would be completed by the
    same keystroke as the pair, so it must not be on screen.
    """
    lowered = query.lower()
    if not lowered:
        return set()
    return {tag[1].lower() for tag in tags if len(tag) == 2 and tag[0].lower() == lowered[-1]}


def try_select(assignment: Mapping[str, int], query: str, text: str, *, regex: bool = False) -> int | None:
    if not query:
        return None
    solved = [(tag, offset) for tag, offset in sorted(assignment.items()) if solves(tag, offset, query, text, regex=regex)]
    if not solved:
        return None
    if len(solved) > 1:
        logger.warning(f"Query \"{query}\" completes {len(solved)} tags; ignoring selection")
        return None
    tag, offset = solved[0]
    logger.info(f"User selected tag: {tag.upper()}")
    return offset


def has_tag_suffix_in_view(
    assignment: Mapping[str, int],
    query: str,
    context: EditorContext,
    *,
    regex: bool = False,
) -> bool:
    return any(
        offset in context.view_bounds and is_compatible_with_query(tag, offset, query, context.text, regex=regex)
        for tag, offset in assignment.items()
    )


def nearest_visible(assignment: Mapping[str, int], context: EditorContext) -> int | None:
    """Next tagged match after the caret, else the previous one, within the view.

    When the caret is scrolled out of view, the first visible match wins.
    """
    bounds = context.view_bounds
    visible = sorted(offset for offset in assignment.values() if offset in bounds)
    if not visible:
        return None
    caret = context.caret_offset
    if caret not in bounds:
        return visible[0]
    for offset in visible:
        if offset > caret:
            return offset
    for offset in reversed(visible):
        if offset < caret:
            return offset
    return None


def has_match_between_views(matches: list[int] | tuple[int, ...], old: ViewBounds, new: ViewBounds) -> bool:
    """Whether scrolling from ``old`` to ``new`` exposes a match that was not visible.

    ``matches`` must be in ascending order.
    """
    idx = bisect_left(matches, old.first)
    before_old = matches[idx - 1] if idx > 0 else -1
    idx = bisect_right(matches, old.last)
    after_old = matches[idx] if idx < len(matches) else new.last
    return before_old >= new.first or after_old < new.last
