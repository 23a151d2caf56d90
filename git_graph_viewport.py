# git_graph_viewport.py

import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Union

from git_graph_data import CommitGraph
from git_graph_errors import GraphConsistencyError
from git_graph_items import (
    COMMIT_RADIUS,
    DEFAULT_EDGE_COLOR,
    EDGE_THICKNESS,
    LABEL_COLOR,
    LABEL_FONT_SIZE,
    LABEL_OFFSET,
    SELECTED_COMMIT_COLOR,
    Circle,
    CursorHint,
    HAlign,
    Line,
    Point,
    Primitive,
    Text,
    VAlign,
    branch_color,
)
from git_graph_layout import CommitLayout

logger = logging.getLogger(__name__)

DEFAULT_ZOOM_MIN = 0.1
DEFAULT_ZOOM_MAX = 5.0
DEFAULT_ZOOM_STEP = 0.15


class ViewportMode(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class PointerButton(Enum):
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"
    OTHER = "other"


# --- Input events ---


@dataclass(frozen=True)
class PointerDown:
    position: Point
    button: PointerButton = PointerButton.LEFT


@dataclass(frozen=True)
class PointerUp:
    position: Point
    button: PointerButton = PointerButton.LEFT


@dataclass(frozen=True)
class PointerMove:
    position: Point


@dataclass(frozen=True)
class WheelScroll:
    delta_y: float  # Lines scrolled, positive zooms in


InputEvent = Union[PointerDown, PointerUp, PointerMove, WheelScroll]


# --- Intents for the hosting application ---


@dataclass(frozen=True)
class SelectCommit:
    commit_id: str


@dataclass(frozen=True)
class UnselectCommit:
    pass


@dataclass(frozen=True)
class RequestCheckout:
    commit_id: str


Intent = Union[SelectCommit, UnselectCommit, RequestCheckout]


@dataclass
class HandleResult:
    consumed: bool
    intents: list = field(default_factory=list)


@dataclass(frozen=True)
class DragAnchor:
    pointer: Point
    offset: Point


@dataclass
class ViewportState:
    offset: Point = (0.0, 0.0)  # Graph-space units
    zoom: float = 1.0
    pointer_position: Point = (0.0, 0.0)  # Component-local screen coordinates
    drag_anchor: Optional[DragAnchor] = None
    size: Point = (0.0, 0.0)
    origin: Point = (0.0, 0.0)  # Canvas origin subtracted from incoming positions
    selected: Optional[str] = None

    @property
    def mode(self) -> ViewportMode:
        return ViewportMode.DRAGGING if self.drag_anchor is not None else ViewportMode.IDLE


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class ViewportController:
    """
    Pan/zoom state and the pointer/wheel state machine for one graph view.

    The controller is the only owner of its ViewportState. The graph and layout
    it receives through set_graph() are treated as read-only snapshots.
    """

    def __init__(
        self,
        node_radius: float = COMMIT_RADIUS,
        zoom_min: float = DEFAULT_ZOOM_MIN,
        zoom_max: float = DEFAULT_ZOOM_MAX,
        zoom_step: float = DEFAULT_ZOOM_STEP,
    ):
        if not 0 < zoom_min <= zoom_max:
            raise ValueError(f"Invalid zoom range [{zoom_min}, {zoom_max}]")
        self.node_radius = node_radius
        self.zoom_min = zoom_min
        self.zoom_max = zoom_max
        self.zoom_step = zoom_step
        self.state = ViewportState(zoom=_clamp(1.0, zoom_min, zoom_max))
        self._graph: Optional[CommitGraph] = None
        self._layout: Optional[CommitLayout] = None

    @property
    def mode(self) -> ViewportMode:
        return self.state.mode

    @property
    def graph(self) -> Optional[CommitGraph]:
        return self._graph

    def snapshot(self) -> ViewportState:
        return replace(self.state)

    def set_graph(self, graph: Optional[CommitGraph], layout: Optional[CommitLayout]):
        if graph is not None and (layout is None or layout.revision != graph.revision):
            raise GraphConsistencyError("Layout does not match the current graph revision")
        self._graph = graph
        self._layout = layout
        selected = self.state.selected
        if selected is not None and (graph is None or selected not in graph):
            self.state.selected = None

    def set_viewport_size(self, width: float, height: float, origin: Point = (0.0, 0.0)):
        self.state.size = (float(width), float(height))
        self.state.origin = (float(origin[0]), float(origin[1]))

    def reset_view(self):
        """Centers the layout in the viewport at zoom 1 (clamped to the zoom range)."""
        self.state.zoom = _clamp(1.0, self.zoom_min, self.zoom_max)
        bounds = self._layout.bounds() if self._layout is not None else None
        if bounds is None:
            self.state.offset = (0.0, 0.0)
            return
        min_x, min_y, max_x, max_y = bounds
        self.state.offset = (-(min_x + max_x) / 2, -(min_y + max_y) / 2)

    # --- Transforms ---

    def graph_to_screen(self, point: Point) -> Point:
        s = self.state
        return (
            s.zoom * (point[0] + s.offset[0]) + s.size[0] / 2,
            s.zoom * (point[1] + s.offset[1]) + s.size[1] / 2,
        )

    def screen_to_graph(self, point: Point) -> Point:
        s = self.state
        return (
            (point[0] - s.size[0] / 2) / s.zoom - s.offset[0],
            (point[1] - s.size[1] / 2) / s.zoom - s.offset[1],
        )

    def _local(self, point: Point) -> Point:
        origin = self.state.origin
        return (point[0] - origin[0], point[1] - origin[1])

    def _screen_radius(self) -> float:
        return self.node_radius * self.state.zoom

    def _has_size(self) -> bool:
        width, height = self.state.size
        return width > 0 and height > 0

    def is_visible(self, screen_point: Point) -> bool:
        """False only for points whose node circle lies fully outside the viewport."""
        if not self._has_size():
            return True
        r = self._screen_radius()
        width, height = self.state.size
        x, y = screen_point
        return -r <= x <= width + r and -r <= y <= height + r

    def _segment_visible(self, a: Point, b: Point) -> bool:
        if not self._has_size():
            return True
        width, height = self.state.size
        return not (
            max(a[0], b[0]) < 0 or min(a[0], b[0]) > width or max(a[1], b[1]) < 0 or min(a[1], b[1]) > height
        )

    def _screen_positions(self) -> list[tuple[str, Point]]:
        if self._graph is None or self._layout is None:
            return []
        positions = self._layout.positions
        result = []
        for node in self._graph:
            point = positions.get(node.sha)
            if point is None:
                raise GraphConsistencyError(f"Commit {node.sha} has no layout position")
            result.append((node.sha, self.graph_to_screen(point)))
        return result

    def node_at(self, screen_pos: Point) -> Optional[str]:
        """First commit (in graph order) whose circle contains `screen_pos`."""
        threshold = self._screen_radius()
        for sha, center in self._screen_positions():
            if not self.is_visible(center):
                continue
            if math.hypot(screen_pos[0] - center[0], screen_pos[1] - center[1]) <= threshold:
                return sha
        return None

    # --- State machine ---

    def handle(self, event: InputEvent) -> HandleResult:
        if isinstance(event, PointerDown):
            return self._on_pointer_down(event)
        if isinstance(event, PointerUp):
            return self._on_pointer_up(event)
        if isinstance(event, PointerMove):
            return self._on_pointer_move(event)
        if isinstance(event, WheelScroll):
            return self._on_wheel(event)
        logger.debug("Ignoring unsupported input event %r", event)
        return HandleResult(consumed=False)

    def _on_pointer_down(self, event: PointerDown) -> HandleResult:
        if event.button is not PointerButton.LEFT:
            return HandleResult(consumed=False)
        s = self.state
        s.pointer_position = self._local(event.position)

        sha = self.node_at(s.pointer_position)
        if sha is not None:
            s.selected = sha
            return HandleResult(consumed=True, intents=[SelectCommit(sha)])

        s.drag_anchor = DragAnchor(pointer=s.pointer_position, offset=s.offset)
        s.selected = None
        return HandleResult(consumed=True, intents=[UnselectCommit()])

    def _on_pointer_up(self, event: PointerUp) -> HandleResult:
        if event.button is not PointerButton.LEFT:
            return HandleResult(consumed=False)
        self.state.drag_anchor = None
        return HandleResult(consumed=True)

    def _on_pointer_move(self, event: PointerMove) -> HandleResult:
        s = self.state
        s.pointer_position = self._local(event.position)
        anchor = s.drag_anchor
        if anchor is not None:
            s.offset = (
                anchor.offset[0] + (s.pointer_position[0] - anchor.pointer[0]) / s.zoom,
                anchor.offset[1] + (s.pointer_position[1] - anchor.pointer[1]) / s.zoom,
            )
        return HandleResult(consumed=True)

    def _on_wheel(self, event: WheelScroll) -> HandleResult:
        s = self.state
        if s.mode is ViewportMode.DRAGGING:
            return HandleResult(consumed=False)

        cursor = s.pointer_position
        anchored = self.screen_to_graph(cursor)

        s.zoom = _clamp(s.zoom + event.delta_y * self.zoom_step * s.zoom, self.zoom_min, self.zoom_max)

        # Screen position of the anchored point under the new zoom, before correcting the offset
        moved = self.graph_to_screen(anchored)
        s.offset = (
            s.offset[0] + (cursor[0] - moved[0]) / s.zoom,
            s.offset[1] + (cursor[1] - moved[1]) / s.zoom,
        )
        return HandleResult(consumed=True)

    def request_checkout(self, screen_pos: Optional[Point] = None) -> Optional[RequestCheckout]:
        """Checkout intent for the commit under `screen_pos`, or for the selection when no position is given."""
        if screen_pos is None:
            sha = self.state.selected
        else:
            sha = self.node_at(self._local(screen_pos))
        if sha is None:
            return None
        return RequestCheckout(sha)

    def cursor(self) -> CursorHint:
        if self._graph is None or len(self._graph) == 0:
            return CursorHint.IDLE
        if self.mode is ViewportMode.DRAGGING:
            return CursorHint.GRABBING
        if self.node_at(self.state.pointer_position) is not None:
            return CursorHint.POINTER
        return CursorHint.GRAB

    # --- Rendering ---

    def draw_primitives(self) -> list[Primitive]:
        """Edges, then commit circles, then reference labels, all in screen space."""
        screen = dict(self._screen_positions())
        if not screen:
            return []

        zoom = self.state.zoom
        radius = self._screen_radius()
        lines: list[Primitive] = []
        circles: list[Primitive] = []
        labels: list[Primitive] = []

        for node in self._graph:
            center = screen[node.sha]
            for parent_sha in node.parents:
                parent_center = screen.get(parent_sha)
                if parent_center is None:
                    raise GraphConsistencyError(f"Parent {parent_sha} of {node.sha} is not in the graph")
                if self._segment_visible(center, parent_center):
                    lines.append(Line(center, parent_center, EDGE_THICKNESS * zoom, DEFAULT_EDGE_COLOR))

            if not self.is_visible(center):
                continue

            if node.sha == self.state.selected:
                color = SELECTED_COMMIT_COLOR
            else:
                color = branch_color(self._layout.height[node.sha])
            circles.append(Circle(center, radius, color))

            if node.label:
                labels.append(
                    Text(
                        node.label,
                        (center[0], center[1] - radius - LABEL_OFFSET),
                        LABEL_FONT_SIZE * zoom,
                        LABEL_COLOR,
                        HAlign.CENTER,
                        VAlign.BOTTOM,
                    )
                )

        return lines + circles + labels
