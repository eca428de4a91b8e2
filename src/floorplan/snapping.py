"""
Nearest-edge snapping for entrances.

While an entrance is dragged, the pointer may be anywhere on (or off) the
grid. EdgeSnapper projects that position onto the closest perimeter edge so
an entrance is never shown mid-grid.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .grid import clamp
from .models import SIDE_ORDER, Entrance, GridSpec, Side


@dataclass(frozen=True)
class EdgeSnap:
    """
    A legal entrance position.

    Attributes:
        side: Edge chosen.
        offset: First cell along the edge, clamped so offset + span fits.
        x: Cell column of the segment start.
        y: Cell row of the segment start.
    """

    side: Side
    offset: int
    x: int
    y: int


class EdgeSnapper:
    """Projects grid positions onto the nearest perimeter edge."""

    def __init__(self, grid: GridSpec):
        self.grid = grid

    def distances(self, px: int, py: int) -> Dict[Side, int]:
        """Distance in cells from (px, py) to each edge."""
        return {
            Side.TOP: py,
            Side.BOTTOM: (self.grid.rows - 1) - py,
            Side.LEFT: px,
            Side.RIGHT: (self.grid.columns - 1) - px,
        }

    def snap(
        self, px: int, py: int, span: int = 1, prefer: Optional[Side] = None
    ) -> EdgeSnap:
        """
        Snap a raw cell position to the nearest edge.

        Ties go to ``prefer`` when given, then to the fixed order
        top > bottom > left > right.

        Args:
            px: Cell column under the pointer.
            py: Cell row under the pointer.
            span: Length of the entrance being placed.
            prefer: Side that wins ties (usually the entrance's current side).

        Returns:
            EdgeSnap with the chosen side and clamped offset.
        """
        distances = self.distances(px, py)
        order: Tuple[Side, ...] = SIDE_ORDER
        if prefer is not None:
            order = (prefer,) + tuple(s for s in SIDE_ORDER if s is not prefer)
        # min() keeps the first of equal keys, which is the tie-break order
        side = min(order, key=lambda s: distances[s])
        return self.project(side, px, py, span)

    def project(self, side: Side, px: int, py: int, span: int = 1) -> EdgeSnap:
        """Project (px, py) onto a given side."""
        span = min(span, self.grid.edge_length(side))
        if side.is_horizontal:
            offset = clamp(px, 0, self.grid.columns - span)
            y = 0 if side is Side.TOP else self.grid.rows - 1
            return EdgeSnap(side, offset, offset, y)
        offset = clamp(py, 0, self.grid.rows - span)
        x = 0 if side is Side.LEFT else self.grid.columns - 1
        return EdgeSnap(side, offset, x, offset)

    def resnap(self, entrance: Entrance) -> EdgeSnap:
        """
        Snap an entrance from its own anchor cell.

        A legal entrance comes back unchanged, including one sitting in a
        corner cell where two edges are equally close.
        """
        rect = entrance.rect(self.grid)
        return self.snap(rect.x, rect.y, entrance.span, prefer=entrance.side)
