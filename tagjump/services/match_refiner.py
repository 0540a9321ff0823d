"""Narrows raw search matches down to sites that can carry a tag."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

logger = logging.getLogger(__name__)

_LINE_TERMINATORS = {"\r", "\n"}


@dataclass(frozen=True, slots=True)
class RefinedMatches:
    matches: tuple[int, ...]
    discarded: int = 0
    out_of_bounds: int = 0

    @property
    def complete(self) -> bool:
        return self.out_of_bounds == 0


def _is_unlike(a: str, b: str) -> bool:
    return (a.isalnum() != b.isalnum()) or (a.isspace() != b.isspace())


def admits_tag_at_location(text: str, loc: int, query_length: int) -> bool:
    """Whether a tag placed at ``loc`` stays visually unambiguous.

    The middle of a run of identical characters is rejected for one-character
    queries since neighbouring tags would cover the same glyphs.
    """
    if query_length > 1:
        return True
    if loc - 1 < 0 or loc + 1 >= len(text):
        return True
    ch = text[loc]
    left = text[loc - 1]
    right = text[loc + 1]
    if _is_unlike(ch, left) or _is_unlike(ch, right):
        return True
    if ch != left or ch != right:
        return True
    if right in _LINE_TERMINATORS:
        return True
    return False


def feasible_region(sites: Iterable[int], capacity: int, *, tagged: Iterable[int] = ()) -> tuple[list[int], int]:
    """Longest ascending prefix whose untagged sites fit in ``capacity``.

    Sites that already hold a tag never count against the capacity and are
    always kept. Returns ``(kept, dropped_count)``.
    """
    holders = set(tagged)
    budget = max(0, int(capacity))
    kept: list[int] = []
    dropped = 0
    for site in sites:
        if site in holders:
            kept.append(site)
        elif budget > 0:
            kept.append(site)
            budget -= 1
        else:
            dropped += 1
    return kept, dropped


def refine_matches(
    matches: Iterable[int],
    query: str,
    text: str,
    *,
    regex: bool = False,
    capacity: int | None = None,
    tagged: Iterable[int] = (),
) -> RefinedMatches:
    ordered = sorted(set(matches))
    if regex:
        return RefinedMatches(tuple(ordered))

    sites = [loc for loc in ordered if admits_tag_at_location(text, loc, len(query))]
    discarded = len(ordered) - len(sites)
    if discarded > 0:
        logger.info(f"Discarded {discarded} contiguous results")

    if capacity is None:
        return RefinedMatches(tuple(sites), discarded=discarded)

    holders = set(tagged)
    untagged = sum(1 for site in sites if site not in holders)
    if untagged <= capacity:
        return RefinedMatches(tuple(sites), discarded=discarded)

    kept, dropped = feasible_region(sites, capacity, tagged=holders)
    if dropped > 0:
        logger.info(f"Discarded {dropped} OOBs")
    return RefinedMatches(tuple(kept), discarded=discarded, out_of_bounds=dropped)
