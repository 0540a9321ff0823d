"""Controller that runs tag-jump sessions inside a QPlainTextEdit."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from PySide6.QtCore import QEvent, QObject, QPoint, Qt, Signal
from PySide6.QtGui import QKeyEvent, QShortcut
from PySide6.QtWidgets import QPlainTextEdit

from tagjump.core.keybindings import action_sequence, event_matches_sequence, sequence_to_qkeysequence
from tagjump.services.jump_session import JumpOutcome, JumpSession
from tagjump.services.jump_types import EditorContext, ViewBounds
from tagjump.services.occurrence_search import find_occurrences
from tagjump.services.tag_alphabet import TagAlphabet
from tagjump.settings_models import normalize_jump_settings
from tagjump_pyside.widgets import TagMarkerOverlay

logger = logging.getLogger(__name__)

_BLOCKING_MODIFIERS = (
    Qt.KeyboardModifier.ControlModifier
    | Qt.KeyboardModifier.AltModifier
    | Qt.KeyboardModifier.MetaModifier
)


class JumpController(QObject):
    jumpCompleted = Signal(int)
    sessionEnded = Signal()

    def __init__(self, editor: QPlainTextEdit, settings: Mapping[str, Any] | None = None, parent=None):
        super().__init__(parent or editor)
        self.editor = editor
        self._settings = normalize_jump_settings(settings)
        self._overlay = TagMarkerOverlay(editor)
        self._overlay.set_colors(
            background=self._settings["marker_background"],
            foreground=self._settings["marker_foreground"],
            typed=self._settings["marker_typed_color"],
        )
        self.session = JumpSession(
            alphabet=TagAlphabet(self._settings["tag_characters"]),
            context_provider=self.editor_context,
            jumper=self,
            renderer=self._overlay,
            scroller=self,
        )
        self._active = False
        self._regex = False
        self._typed = ""
        self._view = ViewBounds(0, -1)
        self._in_cycle = False
        self._rerun_pending = False
        self._shortcuts: list[QShortcut] = []

        editor.installEventFilter(self)
        editor.verticalScrollBar().valueChanged.connect(self._on_view_scrolled)
        self._rebuild_shortcuts()

    @property
    def overlay(self) -> TagMarkerOverlay:
        return self._overlay

    def is_active(self) -> bool:
        return self._active

    def query(self) -> str:
        return self._typed

    # --------- view state ---------
    def visible_bounds(self) -> ViewBounds:
        vp = self.editor.viewport().rect()
        if vp.width() <= 0 or vp.height() <= 0:
            return ViewBounds(0, -1)
        first = self.editor.cursorForPosition(QPoint(0, 0)).position()
        bottom = self.editor.cursorForPosition(QPoint(vp.width() - 1, vp.height() - 1))
        block = bottom.block()
        last = block.position() + max(0, block.length() - 1) if block.isValid() else bottom.position()
        return ViewBounds(first, max(first, last))

    def editor_context(self) -> EditorContext:
        return EditorContext(
            text=self.editor.toPlainText(),
            view_bounds=self.visible_bounds(),
            caret_offset=self.editor.textCursor().position(),
        )

    # --------- session lifecycle ---------
    def start(self, regex: bool = False) -> None:
        self.session.reset()
        self._active = True
        self._regex = bool(regex)
        self._typed = ""
        self._view = self.visible_bounds()
        logger.info(f"Tag jump started ({'regex' if self._regex else 'literal'})")

    def cancel(self) -> None:
        if self._active:
            self._finish()

    def _finish(self) -> None:
        self._active = False
        self._typed = ""
        self._rerun_pending = False
        self.session.reset()
        self.sessionEnded.emit()

    def set_query(self, text: str) -> JumpOutcome | None:
        if not self._active:
            return None
        self._typed = str(text or "")
        return self._run_cycle()

    def jump_to_nearest(self) -> bool:
        if not self._active:
            return False
        if self.session.jump_to_nearest_visible():
            self._finish()
            return True
        return False

    def _run_cycle(self) -> JumpOutcome | None:
        if not self._active:
            return None
        if self._in_cycle:
            self._rerun_pending = True
            return None
        self._in_cycle = True
        try:
            matches = find_occurrences(
                self.editor.toPlainText(),
                self._typed,
                regex=self._regex,
                max_results=self._settings["max_matches"],
            )
            outcome = self.session.update(self._typed, matches, regex=self._regex)
        finally:
            self._in_cycle = False

        if outcome.jumped:
            self._finish()
            return outcome
        self._view = self.visible_bounds()
        if self._rerun_pending:
            self._rerun_pending = False
            return self._run_cycle()
        return outcome

    # --------- collaborator callbacks ---------
    def jump(self, offset: int) -> bool:
        length = max(0, self.editor.document().characterCount() - 1)
        if offset < 0 or offset > length:
            return False
        cursor = self.editor.textCursor()
        cursor.setPosition(offset)
        self.editor.setTextCursor(cursor)
        self.editor.ensureCursorVisible()
        self.jumpCompleted.emit(offset)
        return True

    def scroll_to_next_occurrence(self, query: str) -> None:
        offsets = sorted(self.session.store.assignment.values())
        if not offsets:
            return
        bounds = self.visible_bounds()
        target = next((offset for offset in offsets if offset > bounds.last), offsets[0])
        block = self.editor.document().findBlock(target)
        if not block.isValid():
            return
        visible_lines = max(1, self.editor.viewport().height() // max(1, self.editor.fontMetrics().height()))
        bar = self.editor.verticalScrollBar()
        bar.setValue(max(bar.minimum(), min(bar.maximum(), block.blockNumber() - visible_lines // 2)))
        logger.debug(f"Scrolled to next occurrence of \"{query}\" at {target}")

    # --------- Qt plumbing ---------
    def _on_view_scrolled(self, _value: int) -> None:
        if not self._active:
            return
        old = self._view
        new = self.visible_bounds()
        self._view = new
        if self.session.has_match_between_old_and_new_view(old, new):
            self._run_cycle()

    def _rebuild_shortcuts(self) -> None:
        for shortcut in self._shortcuts:
            shortcut.deleteLater()
        self._shortcuts.clear()
        keys = self._settings["keybindings"]
        self._install_shortcut(action_sequence(keys, "action.tag_jump"), lambda: self.start(regex=False))
        self._install_shortcut(action_sequence(keys, "action.tag_jump_regex"), lambda: self.start(regex=True))

    def _install_shortcut(self, sequence: list[str], callback) -> None:
        qseq = sequence_to_qkeysequence(sequence)
        if qseq.isEmpty():
            return
        shortcut = QShortcut(qseq, self.editor)
        shortcut.setContext(Qt.ShortcutContext.WidgetWithChildrenShortcut)
        shortcut.activated.connect(callback)
        self._shortcuts.append(shortcut)

    def eventFilter(self, watched, event):
        if watched is self.editor and self._active:
            if event.type() == QEvent.KeyPress and isinstance(event, QKeyEvent):
                if self._handle_key_press(event):
                    return True
            elif event.type() == QEvent.FocusOut:
                self.cancel()
        return super().eventFilter(watched, event)

    def _handle_key_press(self, event: QKeyEvent) -> bool:
        keys = self._settings["keybindings"]
        if event_matches_sequence(event, action_sequence(keys, "action.tag_jump_cancel")):
            self.cancel()
            return True
        if event.key() == Qt.Key.Key_Enter or event_matches_sequence(
            event, action_sequence(keys, "action.tag_jump_nearest")
        ):
            self.jump_to_nearest()
            return True
        if event.key() == Qt.Key.Key_Backspace:
            self.set_query(self._typed[:-1])
            return True
        text = str(event.text() or "")
        if text and text.isprintable() and not (event.modifiers() & _BLOCKING_MODIFIERS):
            self.set_query(self._typed + text)
            return True
        return False
