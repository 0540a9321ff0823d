"""Assigns tags to matches, reusing tags the user has already seen.

Fresh tags are drawn so that the whole assignment stays prefix-free: typing a
complete tag can never be the first keystroke of another tag. A tag whose
first character follows any occurrence of the query in the buffer is skipped,
since typing it could just as well be the user extending the search.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from .jump_types import EditorContext
from .selection_matcher import completing_keys, has_tag_suffix_in_view, is_compatible_with_query
from .tag_alphabet import TagAlphabet

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Allocation:
    assignment: dict[str, int] = field(default_factory=dict)
    complete: bool = True


def follow_characters(text: str, occurrences: Iterable[int], query: str) -> set[str]:
    """Lowercased characters that directly follow ``query`` at each occurrence."""
    width = len(query)
    out: set[str] = set()
    for offset in occurrences:
        pos = offset + width
        if 0 <= pos < len(text):
            out.add(text[pos].lower())
    return out


def available_tags(
    alphabet: TagAlphabet,
    query: str,
    *,
    in_use: Iterable[str] = (),
    blocked: Iterable[str] = (),
    reserved: Iterable[str] = (),
) -> list[str]:
    """Tags free to hand out next to ``in_use``.

    ``blocked`` characters may not lead a tag; ``reserved`` characters may not
    be used as single-character tags.
    """
    used = set(in_use)
    blocked_chars = {str(ch).lower() for ch in blocked}
    reserved_chars = {str(ch).lower() for ch in reserved}
    out: list[str] = []
    for tag in alphabet.filter_tags(query):
        if tag in used or tag[0] in blocked_chars or (len(tag) == 1 and tag in reserved_chars):
            continue
        if any(tag.startswith(other) or other.startswith(tag) for other in used):
            continue
        out.append(tag)
    return out


def _group_by_lead(candidates: list[str]) -> tuple[list[str], set[str], dict[str, int]]:
    leads: list[str] = []
    singles: set[str] = set()
    pairs: dict[str, int] = {}
    for tag in candidates:
        lead = tag[0]
        if lead not in pairs and lead not in singles:
            leads.append(lead)
        if len(tag) == 1:
            singles.add(lead)
        else:
            pairs[lead] = pairs.get(lead, 0) + 1
    return leads, singles, pairs


def tag_capacity(candidates: list[str]) -> int:
    """Size of the largest prefix-free subset of ``candidates``."""
    leads, singles, pairs = _group_by_lead(candidates)
    return sum(max(1 if lead in singles else 0, pairs.get(lead, 0)) for lead in leads)


def pack_tags(candidates: list[str], count: int) -> list[str]:
    """Choose up to ``count`` prefix-free tags, keeping single keys where possible.

    Lead characters are expanded into their two-character tags starting from
    the least preferred one, only as far as needed to cover ``count``.
    """
    if count <= 0:
        return []
    leads, singles, pairs = _group_by_lead(candidates)
    total = sum(1 for lead in leads if lead in singles)
    expanded: set[str] = set()
    for lead in reversed(leads):
        if total >= count:
            break
        own = 1 if lead in singles else 0
        gain = pairs.get(lead, 0) - own
        if gain > 0:
            expanded.add(lead)
            total += gain
    chosen = [
        tag
        for tag in candidates
        if (len(tag) == 1 and tag not in expanded) or (len(tag) == 2 and tag[0] in expanded)
    ]
    return chosen[:count]


def transfer_tags(
    assignment: Mapping[str, int],
    query: str,
    matches: Iterable[int],
    text: str,
    *,
    regex: bool = False,
) -> dict[str, int]:
    """Prior tags still compatible with ``query`` or still pointing at a live match."""
    live = set(matches)
    return {
        tag: offset
        for tag, offset in assignment.items()
        if is_compatible_with_query(tag, offset, query, text, regex=regex) or offset in live
    }


def allocate_tags(
    matches: Iterable[int],
    assignment: Mapping[str, int],
    query: str,
    context: EditorContext,
    alphabet: TagAlphabet,
    *,
    regex: bool = False,
    occurrences: Iterable[int] | None = None,
) -> Allocation:
    started = time.perf_counter()
    ordered = sorted(set(matches))
    transferred = transfer_tags(assignment, query, ordered, context.text, regex=regex)
    reserved = completing_keys(transferred, query)
    if reserved:
        transferred = {tag: offset for tag, offset in transferred.items() if tag not in reserved}

    if transferred:
        in_view = [offset in context.view_bounds for offset in transferred.values()]
        if (regex and all(in_view)) or has_tag_suffix_in_view(transferred, query, context, regex=regex):
            holders = set(transferred.values())
            logger.debug(f"Keeping {len(transferred)} transferred tags for \"{query}\"")
            return Allocation(transferred, complete=all(offset in holders for offset in ordered))

    bounds = context.view_bounds
    on_screen = [offset for offset in ordered if offset in bounds]
    off_screen = [offset for offset in ordered if offset not in bounds]
    holders = set(transferred.values())
    vacant = [offset for offset in on_screen + off_screen if offset not in holders]

    blocked: set[str] = set()
    if not regex:
        blocked = follow_characters(context.text, ordered if occurrences is None else occurrences, query)
    candidates = available_tags(alphabet, query, in_use=transferred.keys(), blocked=blocked, reserved=reserved)
    fresh = pack_tags(candidates, len(vacant))
    if regex:
        fresh.sort(key=alphabet.default_order)
    complete = len(fresh) >= len(vacant)

    elapsed_ms = (time.perf_counter() - started) * 1000.0
    logger.info(f"Results on screen: {len(on_screen)}, off screen: {len(off_screen)}")
    logger.info(f"Vacant Results: {len(vacant)}")
    logger.info(f"Available Tags: {len(candidates)}")
    logger.info(f"Time elapsed: {elapsed_ms:.1f} ms")

    allocated = dict(transferred)
    allocated.update(zip(fresh, vacant))
    return Allocation(allocated, complete=complete)
