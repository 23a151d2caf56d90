# git_graph_items.py

from dataclasses import dataclass
from enum import Enum
from typing import Union

Point = tuple[float, float]

# --- Configuration for items ---
COMMIT_RADIUS = 10
HORIZONTAL_SPACING = COMMIT_RADIUS * 2.5
VERTICAL_SPACING = COMMIT_RADIUS * 1.5

# Colors are '#rrggbb' strings so the primitives stay toolkit independent
COLOR_PALETTE = [
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#7f7f7f",
    "#bcbd22",
    "#17becf",
]
SELECTED_COMMIT_COLOR = "#ffff00"
BACKGROUND_COLOR = "#ffffff"

DEFAULT_EDGE_COLOR = "#a9a9a9"
EDGE_THICKNESS = 1.5

LABEL_FONT_SIZE = 9
LABEL_COLOR = "#444444"
LABEL_OFFSET = 4


class HAlign(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class VAlign(Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


class CursorHint(Enum):
    IDLE = "idle"
    POINTER = "pointer"
    GRAB = "grab"
    GRABBING = "grabbing"


@dataclass(frozen=True)
class Circle:
    center: Point
    radius: float
    fill_color: str


@dataclass(frozen=True)
class Text:
    content: str
    position: Point
    size: float
    color: str
    h_align: HAlign = HAlign.CENTER
    v_align: VAlign = VAlign.BOTTOM


@dataclass(frozen=True)
class Line:
    start: Point
    end: Point
    stroke_width: float
    color: str


Primitive = Union[Circle, Text, Line]


def branch_color(height: int) -> str:
    """Commits on the same row share a color."""
    return COLOR_PALETTE[height % len(COLOR_PALETTE)]
