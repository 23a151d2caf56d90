# git_graph_view.py

import logging
from typing import Optional

from PyQt6.QtCore import QPointF, QRectF, Qt, pyqtSignal
from PyQt6.QtGui import QAction, QBrush, QColor, QFont, QFontMetricsF, QPainter, QPen
from PyQt6.QtWidgets import QApplication, QMenu, QWidget

from git_graph_data import CommitGraph
from git_graph_items import BACKGROUND_COLOR, Circle, CursorHint, HAlign, Line, Text, VAlign
from git_graph_layout import CommitLayout
from git_graph_viewport import (
    InputEvent,
    PointerButton,
    PointerDown,
    PointerMove,
    PointerUp,
    RequestCheckout,
    SelectCommit,
    UnselectCommit,
    ViewportController,
    WheelScroll,
)

logger = logging.getLogger(__name__)

# Qt reports wheel rotation in eighths of a degree, 120 per notch
WHEEL_ANGLE_PER_LINE = 120.0

_BUTTONS = {
    Qt.MouseButton.LeftButton: PointerButton.LEFT,
    Qt.MouseButton.MiddleButton: PointerButton.MIDDLE,
    Qt.MouseButton.RightButton: PointerButton.RIGHT,
}

_CURSORS = {
    CursorHint.IDLE: Qt.CursorShape.ArrowCursor,
    CursorHint.POINTER: Qt.CursorShape.PointingHandCursor,
    CursorHint.GRAB: Qt.CursorShape.OpenHandCursor,
    CursorHint.GRABBING: Qt.CursorShape.ClosedHandCursor,
}


class GitGraphView(QWidget):
    """Paints the controller's primitives and feeds it the widget's mouse input."""

    commit_selected = pyqtSignal(str)
    commit_unselected = pyqtSignal()
    checkout_requested = pyqtSignal(str)

    def __init__(self, controller: Optional[ViewportController] = None, parent=None):
        super().__init__(parent)
        self.controller = controller if controller is not None else ViewportController()

        self.setMouseTracking(True)  # Move events without a pressed button update the pointer
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(200, 150)

        self.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.customContextMenuRequested.connect(self._show_context_menu)

    def set_graph(self, graph: Optional[CommitGraph], layout: Optional[CommitLayout], reset_view: bool = True):
        self.controller.set_graph(graph, layout)
        if reset_view:
            self.controller.reset_view()
        self._update_cursor()
        self.update()

    def clear_graph(self):
        self.set_graph(None, None)

    # --- Input ---

    def _dispatch(self, event: InputEvent) -> bool:
        result = self.controller.handle(event)
        for intent in result.intents:
            if isinstance(intent, SelectCommit):
                self.commit_selected.emit(intent.commit_id)
            elif isinstance(intent, UnselectCommit):
                self.commit_unselected.emit()
            elif isinstance(intent, RequestCheckout):
                self.checkout_requested.emit(intent.commit_id)
        if result.consumed:
            self._update_cursor()
            self.update()
        return result.consumed

    @staticmethod
    def _position(event) -> tuple[float, float]:
        pos = event.position()
        return pos.x(), pos.y()

    def mousePressEvent(self, event):
        button = _BUTTONS.get(event.button(), PointerButton.OTHER)
        if self._dispatch(PointerDown(self._position(event), button)):
            event.accept()
        else:
            super().mousePressEvent(event)

    def mouseReleaseEvent(self, event):
        button = _BUTTONS.get(event.button(), PointerButton.OTHER)
        if self._dispatch(PointerUp(self._position(event), button)):
            event.accept()
        else:
            super().mouseReleaseEvent(event)

    def mouseMoveEvent(self, event):
        if self._dispatch(PointerMove(self._position(event))):
            event.accept()
        else:
            super().mouseMoveEvent(event)

    def mouseDoubleClickEvent(self, event):
        if event.button() == Qt.MouseButton.LeftButton:
            intent = self.controller.request_checkout(self._position(event))
            if intent is not None:
                self.checkout_requested.emit(intent.commit_id)
                event.accept()
                return
        super().mouseDoubleClickEvent(event)

    def wheelEvent(self, event):
        """Zoom around the cursor."""
        lines = event.angleDelta().y() / WHEEL_ANGLE_PER_LINE
        if not lines:
            super().wheelEvent(event)
            return
        # The wheel can arrive without a preceding move event
        self._dispatch(PointerMove(self._position(event)))
        if self._dispatch(WheelScroll(lines)):
            event.accept()
        else:
            super().wheelEvent(event)

    def keyPressEvent(self, event):
        """Ctrl+0 recenters the graph."""
        if event.key() == Qt.Key.Key_0 and event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            self.controller.reset_view()
            self.update()
        else:
            super().keyPressEvent(event)

    def resizeEvent(self, event):
        size = event.size()
        self.controller.set_viewport_size(size.width(), size.height())
        super().resizeEvent(event)

    def _update_cursor(self):
        self.setCursor(_CURSORS[self.controller.cursor()])

    # --- Painting ---

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor(BACKGROUND_COLOR))

        for primitive in self.controller.draw_primitives():
            if isinstance(primitive, Line):
                self._draw_line(painter, primitive)
            elif isinstance(primitive, Circle):
                self._draw_circle(painter, primitive)
            elif isinstance(primitive, Text):
                self._draw_text(painter, primitive)
        painter.end()

    @staticmethod
    def _draw_line(painter: QPainter, line: Line):
        pen = QPen(QColor(line.color), line.stroke_width, Qt.PenStyle.SolidLine, Qt.PenCapStyle.RoundCap)
        painter.setPen(pen)
        painter.drawLine(QPointF(*line.start), QPointF(*line.end))

    @staticmethod
    def _draw_circle(painter: QPainter, circle: Circle):
        painter.setPen(QPen(Qt.GlobalColor.black, 1))
        painter.setBrush(QBrush(QColor(circle.fill_color)))
        painter.drawEllipse(QPointF(*circle.center), circle.radius, circle.radius)

    @staticmethod
    def _draw_text(painter: QPainter, text: Text):
        if text.size <= 0:
            return
        font = QFont("Arial")
        font.setPointSizeF(text.size)
        metrics = QFontMetricsF(font)
        width = metrics.horizontalAdvance(text.content)
        height = metrics.height()

        x, y = text.position
        if text.h_align is HAlign.CENTER:
            x -= width / 2
        elif text.h_align is HAlign.RIGHT:
            x -= width
        if text.v_align is VAlign.CENTER:
            y -= height / 2
        elif text.v_align is VAlign.BOTTOM:
            y -= height

        painter.setFont(font)
        painter.setPen(QColor(text.color))
        painter.drawText(QRectF(x, y, width, height), Qt.AlignmentFlag.AlignCenter, text.content)

    # --- Context menu ---

    def _show_context_menu(self, pos):
        """Context menu for right-click on a commit."""
        intent = self.controller.request_checkout((pos.x(), pos.y()))
        if intent is None:
            return

        menu = QMenu(self)

        checkout_action = QAction("Checkout", self)
        checkout_action.triggered.connect(lambda: self.checkout_requested.emit(intent.commit_id))
        menu.addAction(checkout_action)

        copy_action = QAction("Copy Commit", self)
        copy_action.triggered.connect(lambda: self._copy_commit_sha(intent.commit_id))
        menu.addAction(copy_action)

        menu.exec(self.mapToGlobal(pos))

    def _copy_commit_sha(self, sha):
        """Copy commit SHA to clipboard."""
        clipboard = QApplication.clipboard()
        clipboard.setText(sha)
