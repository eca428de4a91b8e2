"""
Layout persistence collaborators.

The editor only needs two calls: ``load_layout()`` and ``save_layout()``.
Stores here implement them over an in-memory pair of documents (the shape a
document database would hold) or a JSON file on disk.

Saving fans out into two writes, one for the tables and one for the
floor-plan record, issued together. If either fails the whole save fails and
the caller keeps its draft; both writes are idempotent upserts, so retrying
converges even after a half-applied save.
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Protocol, Union

from pydantic import ValidationError

from .models import DEFAULT_COLUMNS, DEFAULT_ROWS, Entrance, GridSpec, Layout, Side
from .schemas import FloorPlanRecord, LayoutDocument, TableRecord, build_layout
from .validation import validate_layout

logger = logging.getLogger(__name__)

DEFAULT_ENTRANCE_SPAN = 2


class StoreError(Exception):
    """Raised when a stored layout cannot be read or written."""

    pass


def default_layout(grid: Optional[GridSpec] = None) -> Layout:
    """
    Layout used when nothing has been saved yet.

    A 12x8 grid (unless given) with no tables and a single entrance centred
    on the top edge.
    """
    grid = grid or GridSpec(DEFAULT_COLUMNS, DEFAULT_ROWS)
    span = min(DEFAULT_ENTRANCE_SPAN, grid.columns)
    entrance = Entrance(
        id="E1", side=Side.TOP, offset=(grid.columns - span) // 2, span=span
    )
    return Layout(grid=grid, tables=(), entrances=(entrance,))


class LayoutStore(Protocol):
    """What an EditSession host needs from persistence."""

    async def load_layout(self) -> Layout:
        ...

    async def save_layout(self, layout: Layout) -> None:
        ...


def _log_issues(layout: Layout) -> None:
    for issue in validate_layout(layout):
        logger.warning("Saving layout with %s: %s", issue.type, issue.message)


class InMemoryLayoutStore:
    """
    Layout store backed by two in-memory documents.

    Attributes:
        floor_plan: The floor-plan record, or None before the first save.
        tables: Table records keyed by table id.
        save_count: Number of successful saves.
    """

    def __init__(self, layout: Optional[Layout] = None):
        self.floor_plan: Optional[FloorPlanRecord] = None
        self.tables: Dict[str, TableRecord] = {}
        self.save_count = 0
        if layout is not None:
            self.floor_plan = FloorPlanRecord.from_layout(layout)
            self.tables = {t.id: TableRecord.from_table(t) for t in layout.tables}

    async def load_layout(self) -> Layout:
        floor_plan = self.floor_plan or FloorPlanRecord.from_layout(default_layout())
        return build_layout(floor_plan, list(self.tables.values()))

    async def save_layout(self, layout: Layout) -> None:
        _log_issues(layout)
        records = [TableRecord.from_table(t) for t in layout.tables]
        await asyncio.gather(
            self.bulk_update_tables(records),
            self.update_floor_plan(FloorPlanRecord.from_layout(layout)),
        )
        self.save_count += 1

    async def bulk_update_tables(self, records: Iterable[TableRecord]) -> int:
        """
        Replace the table collection.

        Tables missing from ``records`` are deleted; the rest are inserted or
        updated by table id.

        Returns:
            Number of tables written.
        """
        records = list(records)
        incoming = {record.table_id for record in records}
        for table_id in list(self.tables):
            if table_id not in incoming:
                del self.tables[table_id]
        for record in records:
            self.tables[record.table_id] = record
        return len(records)

    async def update_floor_plan(self, record: FloorPlanRecord) -> None:
        self.floor_plan = record


class JsonFileLayoutStore:
    """
    Layout store backed by a single JSON document on disk.

    Attributes:
        path: File holding {"floorPlan": {...}, "tables": [...]}.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    async def load_layout(self) -> Layout:
        """Read the layout; a missing file yields default_layout()."""
        return await asyncio.to_thread(self.read_layout)

    async def save_layout(self, layout: Layout) -> None:
        """Write the layout, replacing the file in one step."""
        _log_issues(layout)
        await asyncio.to_thread(self.write_layout, layout)

    def read_layout(self) -> Layout:
        """Blocking read; load_layout() runs it in a worker thread."""
        if not self.path.exists():
            return default_layout()
        try:
            text = self.path.read_text(encoding="utf-8")
            document = LayoutDocument.model_validate_json(text)
        except (OSError, ValidationError) as exc:
            raise StoreError(f"Cannot read floor plan from {self.path}: {exc}") from exc
        return document.to_layout()

    def write_layout(self, layout: Layout) -> None:
        """Blocking write through a temporary file; see save_layout()."""
        document = LayoutDocument.from_layout(layout)
        payload = document.model_dump_json(by_alias=True, indent=2)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as exc:
            raise StoreError(f"Cannot write floor plan to {self.path}: {exc}") from exc
