"""
floorplan - Restaurant floor-plan editor core

A Python library for editing grid-based restaurant floor plans: placing,
dragging, resizing and renaming tables, and keeping entrances snapped to the
perimeter, inside a draft/commit edit session.

Example:
    >>> from floorplan import EditSession, DragResizeController, default_layout
    >>> session = EditSession(default_layout())
    >>> session.enter_edit()
    True
    >>> table = session.add_table(width=2, height=1)
    >>> (table.x, table.y)
    (1, 1)
    >>> controller = DragResizeController(session, cell_size=60)
    >>> controller.begin_drag(table.id, (70, 70))
    True
    >>> controller.release((250, 190))
    True
"""

from .export import FloorPlanExporter
from .gestures import (
    Dragging,
    DragResizeController,
    GhostPreview,
    Idle,
    ResizeHandle,
    Resizing,
)
from .grid import GridModel, clamp_rect, pixel_to_cell
from .models import (
    GRID_MAX,
    GRID_MIN,
    TABLE_MAX_HEIGHT,
    TABLE_MAX_WIDTH,
    Entrance,
    EntityKind,
    GridSpec,
    Layout,
    Rect,
    Side,
    Table,
    TableShape,
)
from .occupancy import FoodStatus, Occupancy, lookup_from_mapping
from .placement import CollisionResolver, EntrancePlacement, TablePlacement
from .renderer import ASCIIFloorPlanRenderer, Canvas, render_floor_plan
from .session import CommitError, EditSession, SessionMode
from .snapping import EdgeSnap, EdgeSnapper
from .store import (
    InMemoryLayoutStore,
    JsonFileLayoutStore,
    LayoutStore,
    StoreError,
    default_layout,
)
from .validation import LayoutIssue, validate_layout

__version__ = "0.9.1"

__all__ = [
    # Models
    "GridSpec",
    "Rect",
    "Table",
    "Entrance",
    "Layout",
    "Side",
    "TableShape",
    "EntityKind",
    "GRID_MIN",
    "GRID_MAX",
    "TABLE_MAX_WIDTH",
    "TABLE_MAX_HEIGHT",
    # Geometry
    "GridModel",
    "clamp_rect",
    "pixel_to_cell",
    "CollisionResolver",
    "TablePlacement",
    "EntrancePlacement",
    "EdgeSnapper",
    "EdgeSnap",
    # Editing
    "EditSession",
    "SessionMode",
    "CommitError",
    "DragResizeController",
    "GhostPreview",
    "ResizeHandle",
    "Idle",
    "Dragging",
    "Resizing",
    # Persistence
    "LayoutStore",
    "InMemoryLayoutStore",
    "JsonFileLayoutStore",
    "StoreError",
    "default_layout",
    # Occupancy
    "Occupancy",
    "FoodStatus",
    "lookup_from_mapping",
    # Validation
    "LayoutIssue",
    "validate_layout",
    # Output
    "Canvas",
    "ASCIIFloorPlanRenderer",
    "render_floor_plan",
    "FloorPlanExporter",
]
