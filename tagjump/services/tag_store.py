"""Authoritative per-session tag state."""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from .jump_types import Marker


class TagStore:
    """Current assignment, query and lifecycle flags of one jump session.

    Read freely; only ``JumpSession`` writes through ``commit``.
    """

    def __init__(self) -> None:
        self._assignment: Mapping[str, int] = MappingProxyType({})
        self._query = ""
        self._regex = False
        self._matches: tuple[int, ...] = ()
        self._complete = False
        self._markers: tuple[Marker, ...] = ()

    @property
    def assignment(self) -> Mapping[str, int]:
        return self._assignment

    @property
    def query(self) -> str:
        return self._query

    @property
    def regex(self) -> bool:
        return self._regex

    @property
    def matches(self) -> tuple[int, ...]:
        return self._matches

    @property
    def complete(self) -> bool:
        return self._complete

    @property
    def markers(self) -> tuple[Marker, ...]:
        return self._markers

    def tag_for_offset(self, offset: int) -> str | None:
        for tag, value in self._assignment.items():
            if value == offset:
                return tag
        return None

    def commit(
        self,
        *,
        assignment: Mapping[str, int] | None = None,
        query: str | None = None,
        regex: bool | None = None,
        matches: Iterable[int] | None = None,
        complete: bool | None = None,
        markers: Iterable[Marker] | None = None,
    ) -> None:
        if assignment is not None:
            self._assignment = MappingProxyType(dict(assignment))
        if query is not None:
            self._query = str(query)
        if regex is not None:
            self._regex = bool(regex)
        if matches is not None:
            self._matches = tuple(matches)
        if complete is not None:
            self._complete = bool(complete)
        if markers is not None:
            self._markers = tuple(markers)

    def reset(self) -> None:
        self._assignment = MappingProxyType({})
        self._query = ""
        self._regex = False
        self._matches = ()
        self._complete = False
        self._markers = ()

    def snapshot(self) -> dict:
        return {
            "assignment": dict(self._assignment),
            "query": self._query,
            "regex": self._regex,
            "matches": list(self._matches),
            "complete": self._complete,
            "markers": list(self._markers),
        }
