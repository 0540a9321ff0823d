"""Viewport overlay that paints jump tags next to their matches."""

from __future__ import annotations

from typing import Sequence

from PySide6.QtCore import QEvent, QRect, Qt
from PySide6.QtGui import QColor, QPainter, QTextCursor
from PySide6.QtWidgets import QPlainTextEdit, QWidget

from tagjump.services.jump_types import Marker


class TagMarkerOverlay(QWidget):
    """Transparent layer over an editor viewport that paints jump tags."""

    def __init__(self, editor: QPlainTextEdit):
        super().__init__(editor.viewport())
        self._editor = editor
        self._markers: tuple[Marker, ...] = ()
        self._background = QColor("#FFD24A")
        self._foreground = QColor("#1E1E1E")
        self._typed = QColor("#3C8DFF")
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)
        self.setFocusPolicy(Qt.FocusPolicy.NoFocus)
        editor.viewport().installEventFilter(self)
        self.hide()

    def set_colors(self, *, background: str, foreground: str, typed: str) -> None:
        self._background = QColor(background)
        self._foreground = QColor(foreground)
        self._typed = QColor(typed)
        self.update()

    def markers(self) -> tuple[Marker, ...]:
        return self._markers

    def show_markers(self, markers: Sequence[Marker]) -> None:
        self._markers = tuple(markers)
        self._sync_geometry()
        self.setVisible(bool(self._markers))
        self.raise_()
        self.update()

    def clear_markers(self) -> None:
        self._markers = ()
        self.hide()
        self.update()

    def _sync_geometry(self) -> None:
        self.setGeometry(self._editor.viewport().rect())

    def eventFilter(self, watched, event):
        if watched is self._editor.viewport() and event.type() == QEvent.Resize:
            self._sync_geometry()
        return super().eventFilter(watched, event)

    def _marker_rect(self, marker: Marker) -> QRect:
        doc = self._editor.document()
        cursor = QTextCursor(doc)
        cursor.setPosition(max(0, min(marker.offset, doc.characterCount() - 1)))
        return self._editor.cursorRect(cursor)

    def paintEvent(self, event):
        if not self._markers:
            return
        painter = QPainter(self)
        painter.setFont(self._editor.font())
        fm = painter.fontMetrics()
        visible = self.rect()
        for marker in self._markers:
            anchor = self._marker_rect(marker)
            if not anchor.intersects(visible):
                continue
            label = marker.tag.upper()
            box = QRect(anchor.left(), anchor.top(), fm.horizontalAdvance(label) + 4, max(anchor.height(), fm.height()))
            painter.fillRect(box, self._background)

            typed_chars = 1 if len(marker.tag) == 2 and marker.query.lower().endswith(marker.tag[0]) else 0
            x = box.left() + 2
            for idx, ch in enumerate(label):
                painter.setPen(self._typed if idx < typed_chars else self._foreground)
                width = fm.horizontalAdvance(ch)
                painter.drawText(QRect(x, box.top(), width, box.height()), Qt.AlignmentFlag.AlignCenter, ch)
                x += width
        painter.end()
