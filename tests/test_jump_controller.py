"""Tests for the editor-facing jump controller."""

import pytest

pytest.importorskip("PySide6")

from PySide6.QtCore import Qt  # noqa: E402
from PySide6.QtTest import QTest  # noqa: E402
from PySide6.QtWidgets import QPlainTextEdit  # noqa: E402

from tagjump.ui.controllers import JumpController  # noqa: E402

TEXT = "alpha beta\ngamma beta\n"


@pytest.fixture
def editor(qt_app):
    widget = QPlainTextEdit()
    widget.setPlainText(TEXT)
    widget.resize(400, 300)
    yield widget
    widget.deleteLater()


@pytest.fixture
def controller(editor):
    return JumpController(editor)


def test_inactive_controller_ignores_queries(controller):
    assert controller.set_query("b") is None
    assert not controller.is_active()


def test_typing_a_tag_moves_the_caret(editor, controller):
    jumped = []
    ended = []
    controller.jumpCompleted.connect(jumped.append)
    controller.sessionEnded.connect(lambda: ended.append(True))

    controller.start()
    outcome = controller.set_query("b")
    assert sorted(m.offset for m in outcome.markers) == [6, 17]
    assert len(controller.overlay.markers()) == 2

    tag = controller.session.store.tag_for_offset(17)
    outcome = controller.set_query("b" + tag)
    assert outcome.jumped
    assert editor.textCursor().position() == 17
    assert jumped == [17]
    assert ended == [True]
    assert not controller.is_active()
    assert controller.overlay.markers() == ()


def test_keys_are_captured_while_active(editor, controller):
    controller.start()
    QTest.keyClicks(editor, "b")
    assert controller.query() == "b"
    assert editor.toPlainText() == TEXT

    QTest.keyClick(editor, Qt.Key.Key_Backspace)
    assert controller.query() == ""
    assert controller.is_active()
    assert controller.overlay.markers() == ()

    QTest.keyClick(editor, Qt.Key.Key_Escape)
    assert not controller.is_active()


def test_jump_rejects_offsets_outside_the_document(controller):
    assert not controller.jump(-1)
    assert not controller.jump(len(TEXT) + 5)
    assert controller.jump(3)


def test_regex_backspace_to_empty_drops_old_tags(editor, controller):
    controller.start(regex=True)
    QTest.keyClicks(editor, "b")
    assert len(controller.overlay.markers()) == 2

    QTest.keyClick(editor, Qt.Key.Key_Backspace)
    assert controller.overlay.markers() == ()
    assert dict(controller.session.store.assignment) == {}

    QTest.keyClicks(editor, "a")
    assert controller.is_active()
    assert editor.textCursor().position() == 0
