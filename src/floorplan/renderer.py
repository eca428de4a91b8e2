"""
ASCII renderer for floor plans.

Draws the perimeter wall, entrances as marked openings in the wall, tables as
boxes labelled with their display name (or id), and an optional ghost preview
as a shaded block, using Unicode box-drawing characters.

Every grid cell becomes a ``cell_width`` x ``cell_height`` block of
characters inside a one-character wall.
"""

from typing import Dict, List, Optional

from .gestures import GhostPreview
from .models import Entrance, GridSpec, Layout, Side, Table, TableShape
from .occupancy import EMPTY, OccupancyLookup

BOX_CHARS = {
    "top_left": "┌",
    "top_right": "┐",
    "bottom_left": "└",
    "bottom_right": "┘",
    "horizontal": "─",
    "vertical": "│",
}

BOX_CHARS_ROUNDED = {
    "top_left": "╭",
    "top_right": "╮",
    "bottom_left": "╰",
    "bottom_right": "╯",
    "horizontal": "─",
    "vertical": "│",
}

# Occupied tables get a double border
BOX_CHARS_DOUBLE = {
    "top_left": "╔",
    "top_right": "╗",
    "bottom_left": "╚",
    "bottom_right": "╝",
    "horizontal": "═",
    "vertical": "║",
}

WALL_CHARS = {
    "top_left": "┏",
    "top_right": "┓",
    "bottom_left": "┗",
    "bottom_right": "┛",
    "horizontal": "━",
    "vertical": "┃",
}

ENTRANCE_CHARS = {
    "horizontal": "╍",
    "vertical": "╏",
}

GHOST_CHAR = "░"
GRID_DOT = "·"


class Canvas:
    """
    A 2D character canvas for drawing ASCII art.
    """

    def __init__(self, width: int, height: int, fill_char: str = " "):
        self.width = width
        self.height = height
        self.grid: List[List[str]] = [
            [fill_char for _ in range(width)] for _ in range(height)
        ]

    def set(self, x: int, y: int, char: str) -> None:
        """Set a character at position (x, y)."""
        if 0 <= x < self.width and 0 <= y < self.height:
            self.grid[y][x] = char

    def get(self, x: int, y: int) -> str:
        """Get character at position (x, y)."""
        if 0 <= x < self.width and 0 <= y < self.height:
            return self.grid[y][x]
        return " "

    def draw_text(self, x: int, y: int, text: str) -> None:
        """Draw text starting at position (x, y)."""
        for i, char in enumerate(text):
            self.set(x + i, y, char)

    def draw_box(
        self, x: int, y: int, width: int, height: int, chars: Dict[str, str]
    ) -> None:
        """Draw a rectangle outline; width and height include the border."""
        if width < 2 or height < 1:
            return
        for i in range(1, width - 1):
            self.set(x + i, y, chars["horizontal"])
            self.set(x + i, y + height - 1, chars["horizontal"])
        for row in range(1, height - 1):
            self.set(x, y + row, chars["vertical"])
            self.set(x + width - 1, y + row, chars["vertical"])
        self.set(x, y, chars["top_left"])
        self.set(x + width - 1, y, chars["top_right"])
        self.set(x, y + height - 1, chars["bottom_left"])
        self.set(x + width - 1, y + height - 1, chars["bottom_right"])

    def fill(self, x: int, y: int, width: int, height: int, char: str) -> None:
        for row in range(height):
            for col in range(width):
                self.set(x + col, y + row, char)

    def render(self) -> str:
        """Render the canvas to a string."""
        lines = []
        for row in self.grid:
            line = "".join(row).rstrip()
            lines.append(line)

        # Remove trailing empty lines
        while lines and not lines[-1]:
            lines.pop()

        return "\n".join(lines)


class ASCIIFloorPlanRenderer:
    """
    Renders a Layout as ASCII art.

    Attributes:
        cell_width: Characters per grid cell horizontally.
        cell_height: Lines per grid cell vertically.
        show_grid: Whether to mark cell corners with dots.
    """

    def __init__(self, cell_width: int = 6, cell_height: int = 3, show_grid: bool = True):
        self.cell_width = max(3, cell_width)
        self.cell_height = max(1, cell_height)
        self.show_grid = show_grid

    def canvas_for(self, grid: GridSpec) -> Canvas:
        return Canvas(
            grid.columns * self.cell_width + 2, grid.rows * self.cell_height + 2
        )

    def cell_origin(self, cell_x: int, cell_y: int):
        """Canvas coordinates of a cell's top-left character."""
        return 1 + cell_x * self.cell_width, 1 + cell_y * self.cell_height

    def render(
        self,
        layout: Layout,
        occupancy: Optional[OccupancyLookup] = None,
        ghost: Optional[GhostPreview] = None,
    ) -> str:
        """
        Render a layout.

        Args:
            layout: Layout to draw.
            occupancy: Optional lookup used to decorate occupied tables.
            ghost: Optional gesture preview drawn under the tables.

        Returns:
            The floor plan as a multi-line string.
        """
        canvas = self.canvas_for(layout.grid)
        if self.show_grid:
            self.draw_grid(canvas, layout.grid)
        self.draw_walls(canvas, layout.grid)
        for entrance in layout.entrances:
            self.draw_entrance(canvas, layout.grid, entrance)
        if ghost is not None:
            self.draw_ghost(canvas, layout.grid, ghost)
        for table in layout.tables:
            self.draw_table(canvas, table, occupancy)
        return canvas.render()

    def draw_grid(self, canvas: Canvas, grid: GridSpec) -> None:
        for cell_y in range(grid.rows):
            for cell_x in range(grid.columns):
                x, y = self.cell_origin(cell_x, cell_y)
                canvas.set(x, y, GRID_DOT)

    def draw_walls(self, canvas: Canvas, grid: GridSpec) -> None:
        canvas.draw_box(0, 0, canvas.width, canvas.height, WALL_CHARS)

    def wall_span(self, grid: GridSpec, side: Side, offset: int, span: int):
        """Canvas cells of the wall segment covering [offset, offset+span)."""
        if side.is_horizontal:
            y = 0 if side is Side.TOP else grid.rows * self.cell_height + 1
            start = 1 + offset * self.cell_width
            return [(x, y) for x in range(start, start + span * self.cell_width)]
        x = 0 if side is Side.LEFT else grid.columns * self.cell_width + 1
        start = 1 + offset * self.cell_height
        return [(x, y) for y in range(start, start + span * self.cell_height)]

    def draw_entrance(self, canvas: Canvas, grid: GridSpec, entrance: Entrance) -> None:
        char = ENTRANCE_CHARS["horizontal" if entrance.side.is_horizontal else "vertical"]
        for x, y in self.wall_span(grid, entrance.side, entrance.offset, entrance.span):
            canvas.set(x, y, char)

    def draw_ghost(self, canvas: Canvas, grid: GridSpec, ghost: GhostPreview) -> None:
        if ghost.side is not None:
            for x, y in self.wall_span(grid, ghost.side, ghost.offset, ghost.span):
                canvas.set(x, y, GHOST_CHAR)
            return
        x, y = self.cell_origin(ghost.x, ghost.y)
        canvas.fill(
            x, y, ghost.width * self.cell_width, ghost.height * self.cell_height, GHOST_CHAR
        )

    def draw_table(
        self, canvas: Canvas, table: Table, occupancy: Optional[OccupancyLookup] = None
    ) -> None:
        """
        Draw a table box with its label centred.

        Box structure for a 2x1 table, occupied:
        ╔══════════╗
        ║    T1    ║
        ╚══════════╝
        """
        info = occupancy(table.id) if occupancy is not None else EMPTY
        if info.occupied:
            chars = BOX_CHARS_DOUBLE
        elif table.shape is TableShape.ROUND:
            chars = BOX_CHARS_ROUNDED
        else:
            chars = BOX_CHARS

        x, y = self.cell_origin(table.x, table.y)
        w = table.width * self.cell_width
        h = table.height * self.cell_height
        canvas.fill(x, y, w, h, " ")
        canvas.draw_box(x, y, w, h, chars)

        inner_width = w - 2
        lines = [table.label]
        if info.occupied:
            lines.append(info.label)
        # Fit text into the rows between the borders
        content_rows = max(1, h - 2)
        lines = lines[:content_rows]
        first_row = y + (h - len(lines)) // 2
        for line_idx, line in enumerate(lines):
            text = line[:inner_width]
            text_x = x + 1 + (inner_width - len(text)) // 2
            canvas.draw_text(text_x, first_row + line_idx, text)


def render_floor_plan(
    layout: Layout,
    occupancy: Optional[OccupancyLookup] = None,
    ghost: Optional[GhostPreview] = None,
) -> str:
    """
    Convenience function to render a layout with default settings.

    Args:
        layout: Layout to draw.
        occupancy: Optional occupancy lookup.
        ghost: Optional gesture preview.

    Returns:
        The floor plan as a multi-line string.
    """
    return ASCIIFloorPlanRenderer().render(layout, occupancy=occupancy, ghost=ghost)
