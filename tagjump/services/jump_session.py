"""Per-keystroke tag-jump cycle.

A session receives every query update together with the raw match offsets
produced by the host's search pass. Since there is no explicit signal that the
user started typing a tag, each update first checks whether the new query
completes a tag already on screen; only when it does not are tags reassigned.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Iterable

from .jump_types import (
    ContextProvider,
    EditorContext,
    JumpExecutor,
    Marker,
    Scroller,
    TagRenderer,
    ViewBounds,
    normalize_query,
)
from .match_refiner import refine_matches
from .selection_matcher import completing_keys, has_match_between_views, nearest_visible, try_select
from .tag_allocator import allocate_tags, available_tags, follow_characters, tag_capacity
from .tag_alphabet import TagAlphabet
from .tag_compactor import compact_tags
from .tag_store import TagStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class JumpOutcome:
    jumped: bool = False
    offset: int | None = None
    markers: tuple[Marker, ...] = ()
    complete: bool = True
    scrolled: bool = False


class JumpSession:
    def __init__(
        self,
        *,
        alphabet: TagAlphabet,
        context_provider: ContextProvider,
        jumper: JumpExecutor,
        renderer: TagRenderer | None = None,
        scroller: Scroller | None = None,
    ) -> None:
        self.alphabet = alphabet
        self._context_provider = context_provider
        self._jumper = jumper
        self._renderer = renderer
        self._scroller = scroller
        self.store = TagStore()

    def update(self, query_text: str, matches: Iterable[int], *, regex: bool = False) -> JumpOutcome:
        regex = self.store.regex or bool(regex)
        query = normalize_query(query_text, regex=regex)
        logger.info(f"Received query: \"{query}\"")
        context = self._context_provider()
        raw = sorted(set(matches))

        started = time.perf_counter()
        prior = self.store.assignment
        capacity = None
        if not regex:
            blocked = follow_characters(context.text, raw, query)
            reserved = completing_keys(prior, query)
            candidates = available_tags(self.alphabet, query, in_use=prior.keys(), blocked=blocked, reserved=reserved)
            capacity = tag_capacity(candidates)
        refined = refine_matches(
            raw,
            query,
            context.text,
            regex=regex,
            capacity=capacity,
            tagged=prior.values(),
        )
        if not regex:
            logger.info(f"Refined search results in {(time.perf_counter() - started) * 1000.0:.1f} ms")
        self.store.commit(query=query, regex=regex, matches=refined.matches)

        selected = try_select(prior, query, context.text, regex=regex)
        if selected is not None and self._jumper.jump(selected):
            self.reset()
            return JumpOutcome(jumped=True, offset=selected)

        return self._mark_or_scroll(context, raw, refined.complete)

    def _mark_or_scroll(self, context: EditorContext, raw: list[int], refined_complete: bool) -> JumpOutcome:
        query = self.store.query
        if not query:
            self.store.commit(assignment={}, complete=True, markers=())
            if self._renderer is not None:
                self._renderer.clear_markers()
            return JumpOutcome()

        allocation = allocate_tags(
            self.store.matches,
            self.store.assignment,
            query,
            context,
            self.alphabet,
            regex=self.store.regex,
            occurrences=raw,
        )
        assignment = compact_tags(allocation.assignment, query)
        markers = tuple(
            Marker(query, tag, offset) for tag, offset in sorted(assignment.items(), key=lambda item: item[1])
        )
        complete = refined_complete and allocation.complete
        self.store.commit(assignment=assignment, complete=complete, markers=markers)
        if self._renderer is not None:
            self._renderer.show_markers(markers)

        scrolled = False
        none_in_view = not any(marker.offset in context.view_bounds for marker in markers)
        if markers and none_in_view and len(query) > 1 and self._scroller is not None:
            self._scroller.scroll_to_next_occurrence(query)
            scrolled = True
        return JumpOutcome(markers=markers, complete=complete, scrolled=scrolled)

    def jump_to_nearest_visible(self) -> bool:
        offset = nearest_visible(self.store.assignment, self._context_provider())
        if offset is None:
            return False
        if not self._jumper.jump(offset):
            return False
        self.reset()
        return True

    def has_match_between_old_and_new_view(self, old: ViewBounds, new: ViewBounds) -> bool:
        return has_match_between_views(self.store.matches, old, new)

    def reset(self) -> None:
        self.store.reset()
        if self._renderer is not None:
            self._renderer.clear_markers()
