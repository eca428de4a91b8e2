"""
Grid geometry for the floor-plan editor.

This module handles every conversion between pixel space (where pointer
events happen) and grid-cell space (where entities live), including:
- Cell size derivation from the available container size
- Pixel to cell conversion
- Bounds clamping for rectangles moved around the grid

All functions are pure and total over their domains; degenerate grids are
ruled out by the GridSpec invariant, not here.
"""

import math
from typing import Tuple

from .models import Entrance, GridSpec, Table

# Cell size bounds in pixels
MIN_CELL_SIZE = 30
MAX_CELL_SIZE = 160

# Space kept free around the grid inside its container
DEFAULT_MARGIN = 40

# Used when the container has not been measured yet
FALLBACK_CELL_SIZE = 60


def clamp(value: int, low: int, high: int) -> int:
    """Clamp value into [low, high]; ``low`` wins if the range is empty."""
    return max(low, min(high, value))


def pixel_to_cell(px: float, py: float, cell_size: int) -> Tuple[int, int]:
    """
    Convert a pixel position to the cell that contains it.

    Uses floor division rather than rounding so the cell under the pointer is
    chosen consistently, including for negative coordinates (pointer left of
    or above the canvas).
    """
    return math.floor(px / cell_size), math.floor(py / cell_size)


def clamp_rect(x: int, y: int, width: int, height: int, grid: GridSpec) -> Tuple[int, int]:
    """
    Clamp a rectangle's origin so the rectangle stays inside the grid.

    Returns:
        The clamped (x, y). Width and height are not changed.
    """
    return (
        clamp(x, 0, grid.columns - width),
        clamp(y, 0, grid.rows - height),
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up (not to even)."""
    return math.floor(value + 0.5)


class GridModel:
    """
    Pixel/cell conversions for one grid.

    Attributes:
        grid: The grid being edited.
        min_cell_size: Smallest cell size ever returned, in pixels.
        max_cell_size: Largest cell size ever returned, in pixels.
    """

    def __init__(
        self,
        grid: GridSpec,
        min_cell_size: int = MIN_CELL_SIZE,
        max_cell_size: int = MAX_CELL_SIZE,
    ):
        self.grid = grid
        self.min_cell_size = min_cell_size
        self.max_cell_size = max_cell_size

    def cell_size_for(
        self,
        container_width: float,
        container_height: float,
        margin: int = DEFAULT_MARGIN,
    ) -> int:
        """
        Compute the cell size that fits the grid into a container.

        The result is min(floor((width - 2*margin) / columns),
        floor((height - 2*margin) / rows)), bounded to
        [min_cell_size, max_cell_size].

        Args:
            container_width: Available width in pixels.
            container_height: Available height in pixels.
            margin: Pixels kept free on each side.

        Returns:
            Cell size in pixels.
        """
        if container_width <= 0 or container_height <= 0:
            return clamp(FALLBACK_CELL_SIZE, self.min_cell_size, self.max_cell_size)

        cell_w = math.floor((container_width - 2 * margin) / self.grid.columns)
        cell_h = math.floor((container_height - 2 * margin) / self.grid.rows)
        return clamp(min(cell_w, cell_h), self.min_cell_size, self.max_cell_size)

    def canvas_size(self, cell_size: int) -> Tuple[int, int]:
        """Pixel size of the whole grid for a given cell size."""
        return self.grid.columns * cell_size, self.grid.rows * cell_size

    def pixel_to_cell(self, px: float, py: float, cell_size: int) -> Tuple[int, int]:
        return pixel_to_cell(px, py, cell_size)

    def clamp_rect(self, x: int, y: int, width: int, height: int) -> Tuple[int, int]:
        return clamp_rect(x, y, width, height, self.grid)

    def fit_table(self, table: Table) -> Table:
        """
        Force a table back inside the grid.

        The footprint shrinks first when it is larger than the grid, then the
        origin is clamped. Tables are never dropped.
        """
        width = min(table.width, self.grid.columns)
        height = min(table.height, self.grid.rows)
        x, y = clamp_rect(table.x, table.y, width, height, self.grid)
        if (x, y, width, height) == (table.x, table.y, table.width, table.height):
            return table
        return table.resized(width, height).moved_to(x, y)

    def fit_entrance(self, entrance: Entrance) -> Entrance:
        """Force an entrance's segment back inside its edge."""
        length = self.grid.edge_length(entrance.side)
        span = min(entrance.span, length)
        offset = clamp(entrance.offset, 0, length - span)
        if (offset, span) == (entrance.offset, entrance.span):
            return entrance
        return Entrance(id=entrance.id, side=entrance.side, offset=offset, span=span)
