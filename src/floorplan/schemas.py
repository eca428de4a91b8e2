"""
Persistence records for floor plans.

A saved floor plan is two documents: the table collection and a single
floor-plan record (grid size plus entrances). These pydantic models validate
both on the way in and convert to and from the in-memory Layout.

Older records stored a single door as ``doorPosition`` {x, y, width, side},
and some stored entrances with x/y/width instead of offset/span. Both shapes
are migrated on load; only the current shape is ever written.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .grid import GridModel
from .models import (
    DEFAULT_COLUMNS,
    DEFAULT_ROWS,
    Entrance,
    GridSpec,
    Layout,
    Side,
    Table,
    TableShape,
)

LEGACY_DOOR_ID = "E1"


class EntranceRecord(BaseModel):
    """Stored entrance."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    side: Side = Side.TOP
    offset: int = Field(0, ge=0)
    span: int = Field(1, ge=1)

    @model_validator(mode="before")
    @classmethod
    def migrate_legacy_shape(cls, data: Any) -> Any:
        """Turn {x, y, width, side} entrances into {offset, span, side}."""
        if isinstance(data, dict) and "offset" not in data and "x" in data:
            data = dict(data)
            side = Side(data.get("side", Side.TOP))
            data["offset"] = data["x"] if side.is_horizontal else data.get("y", 0)
            data["span"] = data.get("width", 1)
        return data

    def to_entrance(self) -> Entrance:
        return Entrance(id=self.id, side=self.side, offset=self.offset, span=self.span)

    @classmethod
    def from_entrance(cls, entrance: Entrance) -> "EntranceRecord":
        return cls(
            id=entrance.id,
            side=entrance.side,
            offset=entrance.offset,
            span=entrance.span,
        )


class TableRecord(BaseModel):
    """Stored table."""

    model_config = ConfigDict(populate_by_name=True)

    table_id: str = Field(..., alias="tableId", min_length=1)
    name: Optional[str] = None
    x: int = Field(0, ge=0)
    y: int = Field(0, ge=0)
    width: int = Field(2, ge=1)
    height: int = Field(1, ge=1)
    shape: TableShape = TableShape.SQUARE
    capacity: Optional[int] = Field(None, ge=0)

    def to_table(self) -> Table:
        return Table(
            id=self.table_id,
            x=self.x,
            y=self.y,
            width=self.width,
            height=self.height,
            display_name=self.name or None,
            shape=self.shape,
            capacity=self.capacity,
        )

    @classmethod
    def from_table(cls, table: Table) -> "TableRecord":
        return cls(
            table_id=table.id,
            name=table.display_name,
            x=table.x,
            y=table.y,
            width=table.width,
            height=table.height,
            shape=table.shape,
            capacity=table.capacity,
        )


class FloorPlanRecord(BaseModel):
    """Stored grid size and entrances."""

    model_config = ConfigDict(populate_by_name=True)

    grid_width: int = Field(DEFAULT_COLUMNS, alias="gridWidth")
    grid_height: int = Field(DEFAULT_ROWS, alias="gridHeight")
    entrances: List[EntranceRecord] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def migrate_door_position(cls, data: Any) -> Any:
        """Turn a legacy single ``doorPosition`` into an entrances list."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        door = data.pop("doorPosition", None)
        if door is not None and not isinstance(door, dict):
            raise ValueError("doorPosition must be an object with x, y, width and side")
        if data.get("entrances") is None:
            data["entrances"] = [{"id": LEGACY_DOOR_ID, **door}] if door else []
        return data

    def grid(self) -> GridSpec:
        return GridSpec.clamped(self.grid_width, self.grid_height)

    @classmethod
    def from_layout(cls, layout: Layout) -> "FloorPlanRecord":
        return cls(
            grid_width=layout.grid.columns,
            grid_height=layout.grid.rows,
            entrances=[EntranceRecord.from_entrance(e) for e in layout.entrances],
        )


class LayoutDocument(BaseModel):
    """Both documents together, as written by the JSON file store."""

    model_config = ConfigDict(populate_by_name=True)

    floor_plan: FloorPlanRecord = Field(
        default_factory=FloorPlanRecord, alias="floorPlan"
    )
    tables: List[TableRecord] = Field(default_factory=list)

    def to_layout(self) -> Layout:
        return build_layout(self.floor_plan, self.tables)

    @classmethod
    def from_layout(cls, layout: Layout) -> "LayoutDocument":
        return cls(
            floor_plan=FloorPlanRecord.from_layout(layout),
            tables=[TableRecord.from_table(t) for t in layout.tables],
        )


def build_layout(floor_plan: FloorPlanRecord, tables: List[TableRecord]) -> Layout:
    """
    Assemble a Layout from stored records.

    The grid is clamped into the editable range and every entity is clamped
    into the grid, so a stored record can never produce an invalid layout.
    Later duplicates of an id are dropped.
    """
    grid = floor_plan.grid()
    model = GridModel(grid)

    seen_tables = set()
    layout_tables = []
    for record in tables:
        if record.table_id in seen_tables:
            continue
        seen_tables.add(record.table_id)
        layout_tables.append(model.fit_table(record.to_table()))

    seen_entrances = set()
    layout_entrances = []
    for record in floor_plan.entrances:
        if record.id in seen_entrances:
            continue
        seen_entrances.add(record.id)
        layout_entrances.append(model.fit_entrance(record.to_entrance()))

    return Layout(grid=grid, tables=layout_tables, entrances=layout_entrances)
