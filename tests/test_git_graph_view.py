import os
import sys
import unittest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtCore import QPoint, QPointF, Qt
from PyQt6.QtGui import QWheelEvent
from PyQt6.QtTest import QTest
from PyQt6.QtWidgets import QApplication

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from fake_commits import make_history
from git_graph_builder import GraphBuilder
from git_graph_layout import calculate_commit_positions
from git_graph_view import GitGraphView
from git_graph_viewport import ViewportMode

# It's good practice to have a QApplication instance for widget tests
app = None


def setUpModule():
    global app
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv if hasattr(sys, 'argv') else [])


def tearDownModule():
    global app
    app = None


class TestGitGraphView(unittest.TestCase):
    def setUp(self):
        self.view = GitGraphView()
        self.view.resize(400, 300)
        self.view.show()
        QApplication.processEvents()

        commits = make_history({"A": [], "B": ["A"], "C": ["A"]})
        self.graph = GraphBuilder().build(
            [("refs/heads/main", commits["B"]), ("refs/heads/topic", commits["C"])]
        )
        self.layout = calculate_commit_positions(self.graph)
        self.view.set_graph(self.graph, self.layout, reset_view=False)

        self.selected = []
        self.unselected = []
        self.checkouts = []
        self.view.commit_selected.connect(self.selected.append)
        self.view.commit_unselected.connect(lambda: self.unselected.append(True))
        self.view.checkout_requested.connect(self.checkouts.append)

    def tearDown(self):
        self.view.close()
        self.view.deleteLater()

    def _screen_point(self, sha):
        x, y = self.view.controller.graph_to_screen(self.layout.position(sha))
        return QPoint(int(round(x)), int(round(y)))

    def test_viewport_size_follows_widget(self):
        self.assertEqual(self.view.controller.state.size, (400.0, 300.0))

    def test_click_on_commit_emits_selection(self):
        QTest.mouseClick(self.view, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, self._screen_point("A"))
        self.assertEqual(self.selected, ["A"])
        self.assertEqual(self.unselected, [])

    def test_click_on_empty_canvas_unselects(self):
        QTest.mouseClick(self.view, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, QPoint(5, 5))
        self.assertEqual(self.selected, [])
        self.assertEqual(len(self.unselected), 1)
        self.assertEqual(self.view.controller.mode, ViewportMode.IDLE)

    def test_right_click_is_not_handled_by_controller(self):
        QTest.mousePress(self.view, Qt.MouseButton.RightButton, Qt.KeyboardModifier.NoModifier, QPoint(5, 5))
        self.assertEqual(self.unselected, [])
        self.assertEqual(self.view.controller.mode, ViewportMode.IDLE)
        QTest.mouseRelease(self.view, Qt.MouseButton.RightButton, Qt.KeyboardModifier.NoModifier, QPoint(5, 5))

    def test_double_click_on_commit_requests_checkout(self):
        QTest.mouseDClick(self.view, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, self._screen_point("B"))
        self.assertEqual(self.checkouts, ["B"])

    def test_double_click_on_empty_canvas_does_not_request_checkout(self):
        QTest.mouseDClick(self.view, Qt.MouseButton.LeftButton, Qt.KeyboardModifier.NoModifier, QPoint(5, 5))
        self.assertEqual(self.checkouts, [])

    def test_wheel_zooms_around_event_position(self):
        controller = self.view.controller
        cursor = (300.0, 200.0)
        anchored = controller.screen_to_graph(cursor)

        event = QWheelEvent(
            QPointF(*cursor),
            QPointF(*cursor),
            QPoint(0, 0),
            QPoint(0, 120),
            Qt.MouseButton.NoButton,
            Qt.KeyboardModifier.NoModifier,
            Qt.ScrollPhase.NoScrollPhase,
            False,
        )
        self.view.wheelEvent(event)

        self.assertAlmostEqual(controller.state.zoom, 1.15)
        x, y = controller.graph_to_screen(anchored)
        self.assertAlmostEqual(x, cursor[0])
        self.assertAlmostEqual(y, cursor[1])

    def test_paint(self):
        image = self.view.grab()
        self.assertFalse(image.isNull())

    def test_clear_graph(self):
        self.view.clear_graph()
        self.assertIsNone(self.view.controller.graph)
        self.assertEqual(self.view.controller.draw_primitives(), [])


if __name__ == "__main__":
    unittest.main()
