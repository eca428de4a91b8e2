"""
Edit sessions over a persisted floor plan.

EditSession owns the viewing/editing mode and the draft layout. Entering edit
mode starts a draft from the committed layout; every editing action replaces
the draft with a new value; discarding drops it; committing hands it to a
persistence callable and, on success, makes it the new committed layout.

Example:
    >>> session = EditSession(layout)
    >>> session.enter_edit()
    True
    >>> session.add_table(width=2, height=1)
    Table(id='T1', x=1, y=1, ...)
    >>> await session.commit(store.save_layout)
    True
"""

import asyncio
import inspect
import logging
from dataclasses import replace
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union

from .grid import GridModel, clamp, clamp_rect
from .models import (
    TABLE_MAX_HEIGHT,
    TABLE_MAX_WIDTH,
    Entrance,
    EntityKind,
    GridSpec,
    Layout,
    Side,
    Table,
    TableShape,
)
from .placement import CollisionResolver
from .validation import LayoutIssue, validate_layout

logger = logging.getLogger(__name__)

PersistFn = Callable[[Layout], Union[Awaitable[None], None]]


class SessionMode(str, Enum):
    """Whether the floor plan is being viewed or edited."""

    VIEWING = "viewing"
    EDITING = "editing"


class CommitError(Exception):
    """Raised when persisting the draft fails. The draft is kept."""

    retryable = True


class EditSession:
    """
    Draft/commit editing session for one floor plan.

    While viewing, ``draft`` is None and the UI renders ``committed``. While
    editing, all mutations target ``draft``; ``committed`` only changes on a
    successful commit (or a reload while viewing).

    Mutating methods return False/None instead of raising when called in the
    wrong mode, while a commit is in flight, or for unknown ids. Geometry is
    always clamped, never rejected.

    Attributes:
        mode: Current SessionMode.
        busy: True while a commit is awaiting the persistence call.
        closed: True after close(); the session ignores everything afterwards.
        last_error: Exception from the most recent failed commit, if any.
        resolver: CollisionResolver used by add_table/add_entrance.
    """

    def __init__(self, committed: Layout, resolver: Optional[CollisionResolver] = None):
        self._committed = committed
        self._draft: Optional[Layout] = None
        self.mode = SessionMode.VIEWING
        self.busy = False
        self.closed = False
        self.last_error: Optional[Exception] = None
        self.resolver = resolver or CollisionResolver()
        # Bumped whenever an in-flight commit result must be ignored
        self._generation = 0

    @property
    def committed(self) -> Layout:
        return self._committed

    @property
    def draft(self) -> Optional[Layout]:
        return self._draft

    @property
    def layout(self) -> Layout:
        """The layout the UI should render right now."""
        return self._draft if self._draft is not None else self._committed

    @property
    def is_editing(self) -> bool:
        return self.mode is SessionMode.EDITING

    @property
    def can_edit(self) -> bool:
        """True when editing actions are currently accepted."""
        return self.is_editing and not self.busy and not self.closed

    @property
    def is_dirty(self) -> bool:
        return self._draft is not None and self._draft != self._committed

    # -- mode transitions ---------------------------------------------------

    def enter_edit(self) -> bool:
        """Start a draft from the committed layout. No-op if already editing."""
        if self.is_editing or self.closed:
            return False
        self._draft = self._committed
        self.mode = SessionMode.EDITING
        self.last_error = None
        logger.info("Entered floor plan edit mode")
        return True

    def discard(self) -> bool:
        """Drop the draft and return to viewing with ``committed`` untouched."""
        if not self.is_editing:
            return False
        self._draft = None
        self.mode = SessionMode.VIEWING
        self.busy = False
        self._generation += 1
        logger.info("Discarded floor plan changes")
        return True

    async def commit(self, persist: PersistFn) -> bool:
        """
        Persist the draft and make it the committed layout.

        Args:
            persist: Callable receiving the draft layout; may be a coroutine
                     function (e.g. ``store.save_layout``) or a plain one.

        Returns:
            True when the draft became the committed layout, False when the
            call was not valid (not editing, already busy) or its result
            arrived after the session was discarded or closed.

        Raises:
            CommitError: If ``persist`` raised. The session stays in editing
                         mode with the draft intact so the user can retry or
                         discard.
            asyncio.CancelledError: If the commit task is cancelled. The
                         session likewise stays editing and can retry.
        """
        if not self.is_editing or self.busy or self.closed:
            return False

        snapshot = self._draft
        generation = self._generation
        self.busy = True
        self.last_error = None

        try:
            result = persist(snapshot)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            logger.info("Floor plan save cancelled; draft kept for retry")
            raise
        except Exception as exc:
            if generation != self._generation:
                logger.info("Ignoring failed save for an abandoned edit session")
                return False
            self.last_error = exc
            logger.exception("Failed to save floor plan; draft kept for retry")
            raise CommitError(f"Failed to save floor plan: {exc}") from exc
        finally:
            # A discard or close while saving already reset the flag
            if generation == self._generation:
                self.busy = False

        if generation != self._generation:
            logger.info("Ignoring late save result for an abandoned edit session")
            return False

        self._committed = snapshot
        self._draft = None
        self.mode = SessionMode.VIEWING
        self._generation += 1
        logger.info(
            "Committed floor plan: %d tables, %d entrances",
            len(snapshot.tables),
            len(snapshot.entrances),
        )
        return True

    def reload(self, layout: Layout) -> bool:
        """Replace ``committed`` with a fresh server copy (viewing mode only)."""
        if self.is_editing or self.closed:
            return False
        self._committed = layout
        return True

    def close(self) -> None:
        """Tear the session down; pending commit results will be ignored."""
        self._draft = None
        self.mode = SessionMode.VIEWING
        self.busy = False
        self.closed = True
        self._generation += 1

    def issues(self) -> List[LayoutIssue]:
        return validate_layout(self.layout)

    # -- editing actions ----------------------------------------------------

    def add_table(
        self,
        width: int = 2,
        height: int = 1,
        shape: TableShape = TableShape.SQUARE,
        capacity: Optional[int] = None,
        display_name: Optional[str] = None,
    ) -> Optional[Table]:
        """Place a new table in the first free slot of the draft."""
        if not self.can_edit:
            return None
        grid = self._draft.grid
        width = clamp(width, 1, min(TABLE_MAX_WIDTH, grid.columns))
        height = clamp(height, 1, min(TABLE_MAX_HEIGHT, grid.rows))
        placement = self.resolver.place_table(self._draft, width, height)
        table = Table(
            id=self._draft.next_table_id(),
            x=placement.x,
            y=placement.y,
            width=width,
            height=height,
            display_name=display_name,
            shape=shape,
            capacity=capacity,
        )
        self._draft = self._draft.with_table(table)
        return table

    def add_entrance(self, span: int = 1) -> Optional[Entrance]:
        """Place a new entrance in the first free perimeter slot."""
        if not self.can_edit:
            return None
        grid = self._draft.grid
        span = clamp(span, 1, min(grid.columns, grid.rows))
        placement = self.resolver.place_entrance(self._draft, span)
        entrance = Entrance(
            id=self._draft.next_entrance_id(),
            side=placement.side,
            offset=placement.offset,
            span=span,
        )
        self._draft = self._draft.with_entrance(entrance)
        return entrance

    def delete_entity(self, entity_id: str, kind: Optional[EntityKind] = None) -> bool:
        """
        Remove a table or entrance from the draft.

        Pass ``kind`` to pick the entrance when a table shares its id;
        otherwise the table wins.
        """
        if not self.can_edit:
            return False
        kind = EntityKind(kind) if kind is not None else self._draft.kind_of(entity_id)
        if kind is EntityKind.TABLE:
            found = self._draft.find_table(entity_id)
        elif kind is EntityKind.ENTRANCE:
            found = self._draft.find_entrance(entity_id)
        else:
            found = None
        if found is None:
            return False
        self._draft = self._draft.without(entity_id, kind)
        return True

    def rename_table(self, table_id: str, name: Optional[str]) -> bool:
        """Set a table's display name; blank names fall back to the id."""
        table = self._editable_table(table_id)
        if table is None:
            return False
        name = (name or "").strip() or None
        self._draft = self._draft.replace_table(replace(table, display_name=name))
        return True

    def update_table(
        self,
        table_id: str,
        shape: Optional[TableShape] = None,
        capacity: Optional[int] = None,
    ) -> bool:
        """Change a table's shape and/or capacity. None leaves a field as is."""
        table = self._editable_table(table_id)
        if table is None:
            return False
        if shape is not None:
            table = replace(table, shape=TableShape(shape))
        if capacity is not None:
            table = replace(table, capacity=max(0, capacity))
        self._draft = self._draft.replace_table(table)
        return True

    def resize_grid(self, columns: int, rows: int) -> bool:
        """
        Change the grid size, re-clamping every entity into the new bounds.

        Columns and rows are clamped to the editable range. Entities that no
        longer fit shrink and move inward; none are deleted.
        """
        if not self.can_edit:
            return False
        grid = GridSpec.clamped(columns, rows)
        model = GridModel(grid)
        self._draft = Layout(
            grid=grid,
            tables=[model.fit_table(t) for t in self._draft.tables],
            entrances=[model.fit_entrance(e) for e in self._draft.entrances],
        )
        logger.debug("Resized grid to %dx%d", grid.columns, grid.rows)
        return True

    def move_table(self, table_id: str, x: int, y: int) -> bool:
        """Move a table, clamping it inside the grid."""
        table = self._editable_table(table_id)
        if table is None:
            return False
        x, y = clamp_rect(x, y, table.width, table.height, self._draft.grid)
        self._draft = self._draft.replace_table(table.moved_to(x, y))
        return True

    def resize_table(self, table_id: str, width: int, height: int) -> bool:
        """
        Resize a table from its top-left corner.

        Width is clamped to [1, TABLE_MAX_WIDTH] and height to
        [1, TABLE_MAX_HEIGHT], both also limited by the remaining grid space.
        """
        table = self._editable_table(table_id)
        if table is None:
            return False
        width, height = table_size_limits(table, self._draft.grid, width, height)
        self._draft = self._draft.replace_table(table.resized(width, height))
        return True

    def place_entrance(self, entrance_id: str, side: Side, offset: int) -> bool:
        """Move an entrance to a side/offset, clamping it onto the edge."""
        entrance = self._editable_entrance(entrance_id)
        if entrance is None:
            return False
        moved = Entrance(
            id=entrance.id, side=Side(side), offset=max(0, offset), span=entrance.span
        )
        self._draft = self._draft.replace_entrance(
            GridModel(self._draft.grid).fit_entrance(moved)
        )
        return True

    def resize_entrance(self, entrance_id: str, offset: int, span: int) -> bool:
        """
        Change an entrance's offset and span, keeping it on its edge.

        The offset is clamped first; the span is then cut to the cells left
        between the offset and the end of the edge.
        """
        entrance = self._editable_entrance(entrance_id)
        if entrance is None:
            return False
        length = self._draft.grid.edge_length(entrance.side)
        offset = clamp(offset, 0, length - 1)
        span = clamp(span, 1, length - offset)
        self._draft = self._draft.replace_entrance(
            Entrance(id=entrance.id, side=entrance.side, offset=offset, span=span)
        )
        return True

    def _editable_table(self, table_id: str) -> Optional[Table]:
        if not self.can_edit:
            return None
        return self._draft.find_table(table_id)

    def _editable_entrance(self, entrance_id: str) -> Optional[Entrance]:
        if not self.can_edit:
            return None
        return self._draft.find_entrance(entrance_id)


def table_size_limits(table: Table, grid: GridSpec, width: int, height: int):
    """Clamp a requested table size for a table anchored at (table.x, table.y)."""
    max_width = max(1, min(TABLE_MAX_WIDTH, grid.columns - table.x))
    max_height = max(1, min(TABLE_MAX_HEIGHT, grid.rows - table.y))
    return clamp(width, 1, max_width), clamp(height, 1, max_height)
