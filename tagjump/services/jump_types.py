"""Value types and collaborator contracts shared by the tag-jump engine (pure Python)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

REGEX_QUERY_MARKER = " "


@dataclass(frozen=True, slots=True)
class ViewBounds:
    """Inclusive range of document offsets currently visible."""

    first: int
    last: int

    def __contains__(self, offset: object) -> bool:
        if not isinstance(offset, int):
            return False
        return self.first <= offset <= self.last

    @property
    def is_empty(self) -> bool:
        return self.last < self.first


@dataclass(frozen=True, slots=True)
class EditorContext:
    text: str
    view_bounds: ViewBounds
    caret_offset: int = 0


@dataclass(frozen=True, slots=True)
class Marker:
    query: str
    tag: str
    offset: int


def normalize_query(text: str, *, regex: bool = False) -> str:
    """Return the query as the engine sees it.

    Literal queries keep their first character and lowercase the rest; regex
    queries are kept verbatim behind a single marker character. An empty query
    stays empty in both modes.
    """
    raw = str(text or "")
    if not raw:
        return ""
    if regex:
        return REGEX_QUERY_MARKER + raw
    return raw[0] + raw[1:].lower()


class JumpExecutor(Protocol):
    def jump(self, offset: int) -> bool:
        ...


class TagRenderer(Protocol):
    def show_markers(self, markers: Sequence[Marker]) -> None:
        ...

    def clear_markers(self) -> None:
        ...


class Scroller(Protocol):
    def scroll_to_next_occurrence(self, query: str) -> None:
        ...


ContextProvider = Callable[[], EditorContext]
