"""Shared fixtures for tag-jump tests."""

from __future__ import annotations

import os
from typing import Sequence

import pytest

from tagjump.services.jump_types import EditorContext, Marker, ViewBounds
from tagjump.services.tag_alphabet import TagAlphabet

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

LOWER_ALPHABET = "abcdefghijklmnopqrstuvwxyz"


def make_context(text: str, first: int = 0, last: int | None = None, caret: int = 0) -> EditorContext:
    end = len(text) - 1 if last is None else last
    return EditorContext(text=text, view_bounds=ViewBounds(first, end), caret_offset=caret)


class FixedAlphabet(TagAlphabet):
    """Alphabet whose tag list is given verbatim."""

    def __init__(self, tags: Sequence[str]) -> None:
        super().__init__("".join(dict.fromkeys(tag[0] for tag in tags)))
        self._tags = tuple(tags)


class RecordingJumper:
    def __init__(self, accept: bool = True) -> None:
        self.accept = accept
        self.offsets: list[int] = []

    def jump(self, offset: int) -> bool:
        self.offsets.append(offset)
        return self.accept


class RecordingRenderer:
    def __init__(self) -> None:
        self.shown: list[tuple[Marker, ...]] = []
        self.cleared = 0

    def show_markers(self, markers: Sequence[Marker]) -> None:
        self.shown.append(tuple(markers))

    def clear_markers(self) -> None:
        self.cleared += 1


class RecordingScroller:
    def __init__(self) -> None:
        self.queries: list[str] = []

    def scroll_to_next_occurrence(self, query: str) -> None:
        self.queries.append(query)


@pytest.fixture
def jumper() -> RecordingJumper:
    return RecordingJumper()


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def scroller() -> RecordingScroller:
    return RecordingScroller()


@pytest.fixture(scope="session")
def qt_app():
    widgets = pytest.importorskip("PySide6.QtWidgets")
    app = widgets.QApplication.instance() or widgets.QApplication([])
    yield app
