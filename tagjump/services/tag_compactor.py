"""Shortens two-character tags whose first key alone is already unambiguous."""

from __future__ import annotations

from typing import Mapping

from .selection_matcher import completing_keys


def can_be_selected_with_one_key(tag: str, assignment: Mapping[str, int]) -> bool:
    return sum(1 for other in assignment if other[0] == tag[0]) == 1


def compact_tags(assignment: Mapping[str, int], query: str) -> dict[str, int]:
    """Return a new mapping with safe two-character tags cut to one character.

    A tag is shortened only when no other tag starts with the same character
    and the query does not already end with that character or the full tag.
    The short form must also not be the key that finishes a pair the query
    has already started.
    """
    lowered = query.lower()
    reserved = completing_keys(assignment, query)
    compacted: dict[str, int] = {}
    for tag, offset in assignment.items():
        if len(tag) == 2 and can_be_selected_with_one_key(tag, assignment):
            if not lowered.endswith(tag[0]) and not lowered.endswith(tag) and tag[0] not in reserved:
                compacted[tag[0]] = offset
                continue
        compacted[tag] = offset
    return compacted
