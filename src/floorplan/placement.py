"""
Collision-free placement of newly created entities.

Tables are placed by scanning candidate top-left cells in row-major order;
entrances by walking the perimeter edges in the fixed order top, bottom,
left, right. The scan order never changes, so the same layout always yields
the same placement for the same add action.

Collision avoidance only applies here, at creation time. Dragging a table
onto another one is allowed.
"""

import logging
from dataclasses import dataclass
from typing import List

from .grid import clamp_rect
from .models import SIDE_ORDER, Layout, Rect, Side

logger = logging.getLogger(__name__)

# Cells kept free between the grid edge and newly placed tables
SCAN_MARGIN = 1

FALLBACK_ENTRANCE_SIDE = Side.TOP
FALLBACK_ENTRANCE_OFFSET = 0


@dataclass(frozen=True)
class TablePlacement:
    """
    Where a new table goes.

    Attributes:
        x: Left column.
        y: Top row.
        exhausted: True when no free slot existed and the fallback was used;
                   the table may then overlap an existing one.
    """

    x: int
    y: int
    exhausted: bool = False


@dataclass(frozen=True)
class EntrancePlacement:
    """Where a new entrance goes; ``exhausted`` as for TablePlacement."""

    side: Side
    offset: int
    exhausted: bool = False


class CollisionResolver:
    """
    Finds free placements for new tables and entrances.

    Attributes:
        margin: Cells kept free from the grid edge when scanning for tables.
    """

    def __init__(self, margin: int = SCAN_MARGIN):
        self.margin = margin

    def place_table(self, layout: Layout, width: int, height: int) -> TablePlacement:
        """
        Find the first free cell for a width x height table.

        Candidates run row-major from (margin, margin) and keep the same
        margin from the right and bottom edges. A candidate is accepted when
        it overlaps no existing table.

        Args:
            layout: Current draft layout.
            width: Footprint width in cells.
            height: Footprint height in cells.

        Returns:
            TablePlacement; on exhaustion the fallback is the margin corner
            clamped into the grid, flagged with ``exhausted=True``.
        """
        grid = layout.grid
        occupied: List[Rect] = [table.rect() for table in layout.tables]

        for y in range(self.margin, grid.rows - height - self.margin + 1):
            for x in range(self.margin, grid.columns - width - self.margin + 1):
                candidate = Rect(x, y, width, height)
                if not any(candidate.overlaps(rect) for rect in occupied):
                    return TablePlacement(x, y)

        x, y = clamp_rect(self.margin, self.margin, width, height, grid)
        logger.warning(
            "No free slot for %dx%d table on %dx%d grid; falling back to (%d, %d)",
            width,
            height,
            grid.columns,
            grid.rows,
            x,
            y,
        )
        return TablePlacement(x, y, exhausted=True)

    def place_entrance(self, layout: Layout, span: int = 1) -> EntrancePlacement:
        """
        Find the first free perimeter segment of ``span`` cells.

        Sides are walked top, bottom, left, right; along each side offsets
        run from 0. Only entrances on the same side can conflict.

        Args:
            layout: Current draft layout.
            span: Length of the new entrance in cells.

        Returns:
            EntrancePlacement; on exhaustion (top, 0) with ``exhausted=True``.
        """
        grid = layout.grid

        for side in SIDE_ORDER:
            on_side = [e for e in layout.entrances if e.side is side]
            for offset in range(0, grid.edge_length(side) - span + 1):
                if not any(e.segment_overlaps(side, offset, span) for e in on_side):
                    return EntrancePlacement(side, offset)

        logger.warning(
            "No free perimeter slot for entrance of span %d; falling back to %s:%d",
            span,
            FALLBACK_ENTRANCE_SIDE.value,
            FALLBACK_ENTRANCE_OFFSET,
        )
        return EntrancePlacement(
            FALLBACK_ENTRANCE_SIDE, FALLBACK_ENTRANCE_OFFSET, exhausted=True
        )
