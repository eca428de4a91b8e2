"""
File export functionality for floor plans.

This module handles exporting floor plans to various file formats:
- Text files (.txt) - ASCII art from ASCIIFloorPlanRenderer
- PNG images - Grid, tables, entrances and occupancy drawn with Pillow

The FloorPlanExporter class provides methods for saving floor plans and
handles font loading, image rendering, and file I/O.
"""

from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .gestures import GhostPreview
from .grid import FALLBACK_CELL_SIZE
from .models import Layout, Rect, Side, Table, TableShape
from .occupancy import EMPTY, OccupancyLookup
from .renderer import ASCIIFloorPlanRenderer

COLORS = {
    "background": "#FAFAF9",
    "grid": "#D6D3D1",
    "wall": "#44403C",
    "table_fill": "#FFFFFF",
    "table_outline": "#E7E5E4",
    "occupied_fill": "#FFF7ED",
    "occupied_outline": "#FB923C",
    "entrance_fill": "#FFFBEB",
    "entrance_outline": "#FCD34D",
    "ghost_fill": "#DBEAFE",
    "ghost_outline": "#3B82F6",
    "text": "#57534E",
    "occupied_text": "#EA580C",
}

# Fraction of a cell kept free around each table
TABLE_INSET_RATIO = 0.1


class FloorPlanExporter:
    """
    Exports floor plans to text and PNG files.

    Attributes:
        cell_size: Pixel size of one grid cell in PNG output.
        padding: Pixels around the grid in PNG output.
        font: Optional font name or path for PNG labels.
    """

    def __init__(
        self,
        cell_size: int = FALLBACK_CELL_SIZE,
        padding: int = 20,
        font: Optional[str] = None,
    ):
        self.cell_size = cell_size
        self.padding = padding
        self.font = font

    def save_txt(
        self,
        layout: Layout,
        filename: str,
        occupancy: Optional[OccupancyLookup] = None,
    ) -> None:
        """
        Save a floor plan as ASCII art.

        Args:
            layout: Layout to export.
            filename: Output filename (should end in .txt).
            occupancy: Optional lookup used to decorate occupied tables.
        """
        text = ASCIIFloorPlanRenderer().render(layout, occupancy=occupancy)
        Path(filename).write_text(text, encoding="utf-8")

    def save_png(
        self,
        layout: Layout,
        filename: str,
        occupancy: Optional[OccupancyLookup] = None,
        ghost: Optional[GhostPreview] = None,
    ) -> None:
        """
        Save a floor plan as a PNG image.

        Args:
            layout: Layout to export.
            filename: Output filename (should end in .png).
            occupancy: Optional lookup used to colour occupied tables.
            ghost: Optional gesture preview to draw.

        Example:
            >>> exporter = FloorPlanExporter(cell_size=80)
            >>> exporter.save_png(layout, "floor.png")
        """
        image = self.render_image(layout, occupancy=occupancy, ghost=ghost)
        image.save(Path(filename), "PNG")

    def image_size(self, layout: Layout) -> Tuple[int, int]:
        return (
            layout.grid.columns * self.cell_size + self.padding * 2,
            layout.grid.rows * self.cell_size + self.padding * 2,
        )

    def render_image(
        self,
        layout: Layout,
        occupancy: Optional[OccupancyLookup] = None,
        ghost: Optional[GhostPreview] = None,
    ) -> Image.Image:
        """Draw a floor plan onto a new RGB image."""
        image = Image.new("RGB", self.image_size(layout), COLORS["background"])
        draw = ImageDraw.Draw(image)
        font = self._load_font(max(10, self.cell_size // 4))

        self._draw_grid(draw, layout)
        for entrance in layout.entrances:
            self._draw_entrance(draw, entrance.side, entrance.rect(layout.grid))
        if ghost is not None:
            self._draw_ghost(draw, ghost)
        for table in layout.tables:
            self._draw_table(draw, table, occupancy, font)
        return image

    def _to_pixels(self, cell_x: int, cell_y: int) -> Tuple[int, int]:
        return (
            self.padding + cell_x * self.cell_size,
            self.padding + cell_y * self.cell_size,
        )

    def _draw_grid(self, draw: ImageDraw.ImageDraw, layout: Layout) -> None:
        grid = layout.grid
        left, top = self._to_pixels(0, 0)
        right, bottom = self._to_pixels(grid.columns, grid.rows)
        for column in range(grid.columns + 1):
            x = left + column * self.cell_size
            draw.line([(x, top), (x, bottom)], fill=COLORS["grid"], width=1)
        for row in range(grid.rows + 1):
            y = top + row * self.cell_size
            draw.line([(left, y), (right, y)], fill=COLORS["grid"], width=1)
        draw.rectangle([left, top, right, bottom], outline=COLORS["wall"], width=3)

    def _entrance_box(self, side: Side, rect: Rect):
        """Pixel box of an entrance bar hugging its wall."""
        thickness = max(4, self.cell_size // 3)
        left, top = self._to_pixels(rect.x, rect.y)
        right = left + rect.width * self.cell_size
        bottom = top + rect.height * self.cell_size
        if side is Side.TOP:
            bottom = top + thickness
        elif side is Side.BOTTOM:
            top = bottom - thickness
        elif side is Side.LEFT:
            right = left + thickness
        else:
            left = right - thickness
        return [left, top, right, bottom]

    def _draw_entrance(self, draw: ImageDraw.ImageDraw, side: Side, rect: Rect) -> None:
        draw.rectangle(
            self._entrance_box(side, rect),
            fill=COLORS["entrance_fill"],
            outline=COLORS["entrance_outline"],
            width=2,
        )

    def _draw_ghost(self, draw: ImageDraw.ImageDraw, ghost: GhostPreview) -> None:
        if ghost.side is not None:
            box = self._entrance_box(
                ghost.side, Rect(ghost.x, ghost.y, ghost.width, ghost.height)
            )
        else:
            left, top = self._to_pixels(ghost.x, ghost.y)
            box = [
                left,
                top,
                left + ghost.width * self.cell_size,
                top + ghost.height * self.cell_size,
            ]
        draw.rectangle(box, fill=COLORS["ghost_fill"], outline=COLORS["ghost_outline"], width=2)

    def _draw_table(
        self,
        draw: ImageDraw.ImageDraw,
        table: Table,
        occupancy: Optional[OccupancyLookup],
        font: ImageFont.ImageFont,
    ) -> None:
        info = occupancy(table.id) if occupancy is not None else EMPTY
        inset = int(self.cell_size * TABLE_INSET_RATIO)
        left, top = self._to_pixels(table.x, table.y)
        box = [
            left + inset,
            top + inset,
            left + table.width * self.cell_size - inset,
            top + table.height * self.cell_size - inset,
        ]
        fill = COLORS["occupied_fill"] if info.occupied else COLORS["table_fill"]
        outline = COLORS["occupied_outline"] if info.occupied else COLORS["table_outline"]

        if table.shape is TableShape.ROUND:
            draw.ellipse(box, fill=fill, outline=outline, width=2)
        else:
            draw.rounded_rectangle(
                box, radius=max(2, self.cell_size // 5), fill=fill, outline=outline, width=2
            )

        text_color = COLORS["occupied_text"] if info.occupied else COLORS["text"]
        bbox = draw.textbbox((0, 0), table.label, font=font)
        text_w = bbox[2] - bbox[0]
        text_h = bbox[3] - bbox[1]
        center_x = (box[0] + box[2]) // 2
        center_y = (box[1] + box[3]) // 2
        draw.text(
            (center_x - text_w // 2, center_y - text_h // 2),
            table.label,
            font=font,
            fill=text_color,
        )

    def _load_font(self, font_size: int) -> ImageFont.ImageFont:
        """
        Load a font for table labels.

        Tries the following in order:
        1. User-specified font name or path if provided
        2. Common system sans-serif fonts
        3. Pillow's default font
        """
        fonts_to_try = []
        if self.font:
            fonts_to_try.append(self.font)
        fonts_to_try.extend(
            [
                # Linux
                "DejaVuSans.ttf",
                "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
                "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
                # macOS
                "Helvetica",
                "/System/Library/Fonts/Helvetica.ttc",
                # Windows
                "Arial",
                "C:/Windows/Fonts/arial.ttf",
            ]
        )

        for font in fonts_to_try:
            try:
                return ImageFont.truetype(font, font_size)
            except OSError:
                continue

        # Fall back to Pillow's default font
        try:
            return ImageFont.load_default(size=font_size)
        except TypeError:
            # Older Pillow versions don't support size parameter
            return ImageFont.load_default()
