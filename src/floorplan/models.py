"""
Data models for the floor-plan editor.

This module contains the immutable value types that describe a restaurant
floor plan: the grid, the tables placed on it and the entrances that hug its
perimeter. Every transformation returns a new value, so a draft layout can be
edited freely without ever touching the committed copy it was derived from.

Classes:
    Side: One of the four perimeter edges.
    TableShape: Visual shape of a table.
    EntityKind: The two placeable kinds (table, entrance).
    GridSpec: Grid dimensions in cells.
    Rect: Axis-aligned rectangle in cell units.
    Table: A table occupying a rectangle of cells.
    Entrance: A span of cells along one perimeter edge.
    Layout: Grid, tables and entrances; the unit of persistence.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional, Tuple

# Editable grid range, in cells
GRID_MIN = 4
GRID_MAX = 20

DEFAULT_COLUMNS = 12
DEFAULT_ROWS = 8

# Tables have a bounded footprint so labels stay legible
TABLE_MAX_WIDTH = 4
TABLE_MAX_HEIGHT = 3


class Side(str, Enum):
    """Perimeter edge an entrance is anchored to."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"

    @property
    def is_horizontal(self) -> bool:
        """True for edges that run along the x-axis (top, bottom)."""
        return self in (Side.TOP, Side.BOTTOM)


# Fixed scan / tie-break priority shared by placement and snapping
SIDE_ORDER: Tuple[Side, ...] = (Side.TOP, Side.BOTTOM, Side.LEFT, Side.RIGHT)


class TableShape(str, Enum):
    """Table shape for visual representation."""

    SQUARE = "square"
    ROUND = "round"


class EntityKind(str, Enum):
    """Kind of placeable entity."""

    TABLE = "table"
    ENTRANCE = "entrance"


@dataclass(frozen=True)
class GridSpec:
    """
    Grid dimensions in cells.

    Both dimensions must lie in [GRID_MIN, GRID_MAX]. Construction with
    out-of-range values raises ValueError; callers clamp first, usually via
    GridSpec.clamped().

    Attributes:
        columns: Number of cells along the x-axis.
        rows: Number of cells along the y-axis.
    """

    columns: int = DEFAULT_COLUMNS
    rows: int = DEFAULT_ROWS

    def __post_init__(self):
        for name in ("columns", "rows"):
            value = getattr(self, name)
            if not GRID_MIN <= value <= GRID_MAX:
                raise ValueError(
                    f"GridSpec.{name} must be between {GRID_MIN} and "
                    f"{GRID_MAX}, got {value}"
                )

    @classmethod
    def clamped(cls, columns: int, rows: int) -> "GridSpec":
        """Build a GridSpec with both dimensions clamped into the legal range."""
        return cls(
            columns=max(GRID_MIN, min(GRID_MAX, int(columns))),
            rows=max(GRID_MIN, min(GRID_MAX, int(rows))),
        )

    def edge_length(self, side: Side) -> int:
        """Length in cells of the given perimeter edge."""
        return self.columns if side.is_horizontal else self.rows


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in cell units."""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def overlaps(self, other: "Rect") -> bool:
        """Return True when the two rectangles share at least one cell."""
        return (
            self.x < other.right
            and self.right > other.x
            and self.y < other.bottom
            and self.bottom > other.y
        )

    def within(self, grid: GridSpec) -> bool:
        """Return True when the rectangle lies entirely inside the grid."""
        return (
            self.x >= 0
            and self.y >= 0
            and self.right <= grid.columns
            and self.bottom <= grid.rows
        )


@dataclass(frozen=True)
class Table:
    """
    A table on the floor plan.

    Position (x, y) is the top-left cell; the table covers width x height
    cells. ``id`` is stable and unique; ``display_name`` is optional cosmetic
    text and the UI falls back to ``id`` when it is absent.

    Attributes:
        id: Stable identifier (e.g. "T3").
        x: Left column of the table.
        y: Top row of the table.
        width: Width in cells (>= 1).
        height: Height in cells (>= 1).
        display_name: Optional label shown instead of the id.
        shape: Square or round.
        capacity: Optional number of seats.
    """

    id: str
    x: int = 0
    y: int = 0
    width: int = 2
    height: int = 1
    display_name: Optional[str] = None
    shape: TableShape = TableShape.SQUARE
    capacity: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, "shape", TableShape(self.shape))
        if self.width < 1 or self.height < 1:
            raise ValueError(
                f"Table {self.id} must be at least 1x1, "
                f"got {self.width}x{self.height}"
            )

    @property
    def label(self) -> str:
        """Text shown on the table: display name, else id."""
        return self.display_name or self.id

    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def moved_to(self, x: int, y: int) -> "Table":
        return replace(self, x=x, y=y)

    def resized(self, width: int, height: int) -> "Table":
        return replace(self, width=width, height=height)


@dataclass(frozen=True)
class Entrance:
    """
    An opening along one perimeter edge.

    The entrance covers ``span`` cells of ``side`` starting at cell index
    ``offset``, measured along the x-axis for top/bottom and along the y-axis
    for left/right.

    Attributes:
        id: Stable identifier (e.g. "E1").
        side: Edge the entrance is anchored to.
        offset: First cell index along the edge (>= 0).
        span: Length of the opening in cells (>= 1).
    """

    id: str
    side: Side = Side.TOP
    offset: int = 0
    span: int = 1

    def __post_init__(self):
        object.__setattr__(self, "side", Side(self.side))
        if self.offset < 0:
            raise ValueError(f"Entrance {self.id} offset must be >= 0")
        if self.span < 1:
            raise ValueError(f"Entrance {self.id} span must be >= 1")

    @property
    def end(self) -> int:
        """Cell index one past the last covered cell along the edge."""
        return self.offset + self.span

    def rect(self, grid: GridSpec) -> Rect:
        """Cells covered by the entrance, so it can be treated as a rectangle."""
        if self.side is Side.TOP:
            return Rect(self.offset, 0, self.span, 1)
        if self.side is Side.BOTTOM:
            return Rect(self.offset, grid.rows - 1, self.span, 1)
        if self.side is Side.LEFT:
            return Rect(0, self.offset, 1, self.span)
        return Rect(grid.columns - 1, self.offset, 1, self.span)

    def fits(self, grid: GridSpec) -> bool:
        return self.end <= grid.edge_length(self.side)

    def segment_overlaps(self, side: Side, offset: int, span: int) -> bool:
        """True if [offset, offset+span) on ``side`` intersects this entrance."""
        return self.side is side and offset < self.end and offset + span > self.offset


def _check_unique(kind: str, ids: Iterable[str]) -> None:
    seen = set()
    for entity_id in ids:
        if entity_id in seen:
            raise ValueError(f"Duplicate {kind} id: {entity_id}")
        seen.add(entity_id)


@dataclass(frozen=True)
class Layout:
    """
    A complete floor plan: the unit of persistence.

    Attributes:
        grid: Grid dimensions.
        tables: Tables, unique by id.
        entrances: Entrances, unique by id.
    """

    grid: GridSpec = field(default_factory=GridSpec)
    tables: Tuple[Table, ...] = ()
    entrances: Tuple[Entrance, ...] = ()

    def __post_init__(self):
        # Accept any iterable but always store tuples
        object.__setattr__(self, "tables", tuple(self.tables))
        object.__setattr__(self, "entrances", tuple(self.entrances))
        _check_unique("table", (t.id for t in self.tables))
        _check_unique("entrance", (e.id for e in self.entrances))

    def find_table(self, table_id: str) -> Optional[Table]:
        for table in self.tables:
            if table.id == table_id:
                return table
        return None

    def find_entrance(self, entrance_id: str) -> Optional[Entrance]:
        for entrance in self.entrances:
            if entrance.id == entrance_id:
                return entrance
        return None

    def kind_of(self, entity_id: str) -> Optional[EntityKind]:
        """Resolve which kind of entity owns an id (tables take precedence)."""
        if self.find_table(entity_id) is not None:
            return EntityKind.TABLE
        if self.find_entrance(entity_id) is not None:
            return EntityKind.ENTRANCE
        return None

    def replace_table(self, table: Table) -> "Layout":
        tables = tuple(table if t.id == table.id else t for t in self.tables)
        return replace(self, tables=tables)

    def replace_entrance(self, entrance: Entrance) -> "Layout":
        entrances = tuple(
            entrance if e.id == entrance.id else e for e in self.entrances
        )
        return replace(self, entrances=entrances)

    def with_table(self, table: Table) -> "Layout":
        return replace(self, tables=self.tables + (table,))

    def with_entrance(self, entrance: Entrance) -> "Layout":
        return replace(self, entrances=self.entrances + (entrance,))

    def without(self, entity_id: str, kind: Optional[EntityKind] = None) -> "Layout":
        """
        Drop one entity by id (no-op if absent).

        Ids are only unique per kind, so a table and an entrance may share
        one. Only the collection of ``kind`` is filtered; when omitted the
        kind is resolved with kind_of(), tables first.
        """
        kind = EntityKind(kind) if kind is not None else self.kind_of(entity_id)
        if kind is EntityKind.TABLE:
            return replace(
                self, tables=tuple(t for t in self.tables if t.id != entity_id)
            )
        if kind is EntityKind.ENTRANCE:
            return replace(
                self,
                entrances=tuple(e for e in self.entrances if e.id != entity_id),
            )
        return self

    def next_table_id(self) -> str:
        return _next_id("T", {t.id for t in self.tables}, len(self.tables))

    def next_entrance_id(self) -> str:
        return _next_id("E", {e.id for e in self.entrances}, len(self.entrances))


def _next_id(prefix: str, taken: set, count: int) -> str:
    number = count + 1
    while f"{prefix}{number}" in taken:
        number += 1
    return f"{prefix}{number}"
