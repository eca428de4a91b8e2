"""
Pointer gesture handling for the floor-plan editor.

A gesture is pointer-down, any number of pointer-moves, then pointer-up. Two
gestures exist (move and resize) over two entity kinds (table and entrance).
While a gesture runs, each pointer-move produces a ghost preview; pointer-up
writes the last preview into the edit session's draft.

Every preview is recomputed from the gesture's start state and the current
pointer position alone, never accumulated across ticks, so dropped or
coalesced pointer events cannot desynchronise the preview from the pointer.

The state transitions are plain functions (``drag_preview``,
``resize_preview``) over explicit state values; DragResizeController is the
thin stateful wrapper a UI adapter talks to.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from .grid import FALLBACK_CELL_SIZE, clamp, clamp_rect, pixel_to_cell, round_half_up
from .models import Entrance, EntityKind, GridSpec, Side, Table
from .session import EditSession, table_size_limits
from .snapping import EdgeSnapper

logger = logging.getLogger(__name__)

Entity = Union[Table, Entrance]
Point = Tuple[float, float]


class ResizeHandle(str, Enum):
    """
    Which handle a resize grabbed.

    Entrances have one handle at each end of their span. Tables only have
    the bottom-right corner, which counts as END.
    """

    START = "start"
    END = "end"


@dataclass(frozen=True)
class Idle:
    """No gesture in progress."""


@dataclass(frozen=True)
class Dragging:
    """
    A move gesture in progress.

    Attributes:
        entity: The entity as it was when the gesture started.
        kind: Table or entrance.
        grab_offset: Cell delta between the pointer and the entity origin at
                     pointer-down, so the entity does not jump to the pointer.
    """

    entity: Entity
    kind: EntityKind
    grab_offset: Tuple[int, int] = (0, 0)

    @property
    def entity_id(self) -> str:
        return self.entity.id


@dataclass(frozen=True)
class Resizing:
    """
    A resize gesture in progress.

    Attributes:
        entity: The entity as it was when the gesture started.
        kind: Table or entrance.
        start_pointer: Pointer position in pixels at pointer-down.
        handle: Handle that was grabbed.
    """

    entity: Entity
    kind: EntityKind
    start_pointer: Point
    handle: ResizeHandle = ResizeHandle.END

    @property
    def entity_id(self) -> str:
        return self.entity.id

    @property
    def start_size(self) -> Tuple[int, int]:
        if isinstance(self.entity, Table):
            return self.entity.width, self.entity.height
        return self.entity.span, 1


GestureState = Union[Idle, Dragging, Resizing]

IDLE = Idle()


@dataclass(frozen=True)
class GhostPreview:
    """
    Transient, uncommitted position/size shown during a gesture.

    x, y, width and height are in cells and describe the covered rectangle
    for both kinds. side/offset/span are only set for entrances.
    """

    entity_id: str
    kind: EntityKind
    x: int
    y: int
    width: int
    height: int
    side: Optional[Side] = None
    offset: Optional[int] = None
    span: Optional[int] = None

    @classmethod
    def for_table(cls, table: Table) -> "GhostPreview":
        return cls(
            table.id, EntityKind.TABLE, table.x, table.y, table.width, table.height
        )

    @classmethod
    def for_entrance(cls, entrance: Entrance, grid: GridSpec) -> "GhostPreview":
        rect = entrance.rect(grid)
        return cls(
            entrance.id,
            EntityKind.ENTRANCE,
            rect.x,
            rect.y,
            rect.width,
            rect.height,
            side=entrance.side,
            offset=entrance.offset,
            span=entrance.span,
        )


def drag_preview(
    state: Dragging, grid: GridSpec, pointer: Point, cell_size: int
) -> GhostPreview:
    """Compute the ghost for a move gesture at the given pointer position."""
    cell_x, cell_y = pixel_to_cell(pointer[0], pointer[1], cell_size)
    entity = state.entity

    if isinstance(entity, Table):
        x, y = clamp_rect(
            cell_x - state.grab_offset[0],
            cell_y - state.grab_offset[1],
            entity.width,
            entity.height,
            grid,
        )
        return GhostPreview.for_table(entity.moved_to(x, y))

    snap = EdgeSnapper(grid).snap(cell_x, cell_y, entity.span)
    span = min(entity.span, grid.edge_length(snap.side))
    moved = Entrance(id=entity.id, side=snap.side, offset=snap.offset, span=span)
    return GhostPreview.for_entrance(moved, grid)


def resize_preview(
    state: Resizing, grid: GridSpec, pointer: Point, cell_size: int
) -> GhostPreview:
    """Compute the ghost for a resize gesture at the given pointer position."""
    delta_x = round_half_up((pointer[0] - state.start_pointer[0]) / cell_size)
    delta_y = round_half_up((pointer[1] - state.start_pointer[1]) / cell_size)
    entity = state.entity

    if isinstance(entity, Table):
        width, height = table_size_limits(
            entity, grid, entity.width + delta_x, entity.height + delta_y
        )
        return GhostPreview.for_table(entity.resized(width, height))

    delta = delta_x if entity.side.is_horizontal else delta_y
    length = grid.edge_length(entity.side)

    if state.handle is ResizeHandle.START:
        # The far end stays put: offset and span move in lockstep
        end = entity.offset + entity.span
        offset = clamp(entity.offset + delta, 0, end - 1)
        span = end - offset
    else:
        offset = entity.offset
        span = clamp(entity.span + delta, 1, length - offset)

    resized = Entrance(id=entity.id, side=entity.side, offset=offset, span=span)
    return GhostPreview.for_entrance(resized, grid)


class DragResizeController:
    """
    Drives move/resize gestures and writes their results into a session.

    Only one gesture may be active at a time; starting another while one is
    active is rejected. Stray pointer-ups are ignored. Neither case touches
    the draft.

    Attributes:
        session: The EditSession whose draft is edited.
        cell_size: Current cell size in pixels; update it when the canvas
                   is resized.
    """

    def __init__(self, session: EditSession, cell_size: int = FALLBACK_CELL_SIZE):
        self.session = session
        self.cell_size = cell_size
        self._state: GestureState = IDLE
        self._ghost: Optional[GhostPreview] = None

    @property
    def state(self) -> GestureState:
        return self._state

    @property
    def ghost(self) -> Optional[GhostPreview]:
        """Latest preview, or None before the first pointer-move."""
        return self._ghost

    @property
    def is_active(self) -> bool:
        return not isinstance(self._state, Idle)

    def begin_drag(
        self, entity_id: str, pointer: Point, kind: Optional[EntityKind] = None
    ) -> bool:
        """
        Start moving a table or entrance.

        Args:
            entity_id: Id of the grabbed entity.
            pointer: Pointer position in canvas pixels.
            kind: Entity kind; looked up from the draft when omitted.

        Returns:
            True if the gesture started.
        """
        entity, kind = self._resolve_start(entity_id, kind)
        if entity is None:
            return False

        grab_offset = (0, 0)
        if kind is EntityKind.TABLE:
            cell_x, cell_y = pixel_to_cell(pointer[0], pointer[1], self.cell_size)
            grab_offset = (cell_x - entity.x, cell_y - entity.y)

        self._state = Dragging(entity=entity, kind=kind, grab_offset=grab_offset)
        self._ghost = None
        logger.debug("Drag started for %s %s", kind.value, entity_id)
        return True

    def begin_resize(
        self,
        entity_id: str,
        pointer: Point,
        handle: ResizeHandle = ResizeHandle.END,
        kind: Optional[EntityKind] = None,
    ) -> bool:
        """Start resizing a table (corner handle) or an entrance (either end)."""
        entity, kind = self._resolve_start(entity_id, kind)
        if entity is None:
            return False

        if kind is EntityKind.TABLE:
            handle = ResizeHandle.END
        self._state = Resizing(
            entity=entity,
            kind=kind,
            start_pointer=(float(pointer[0]), float(pointer[1])),
            handle=ResizeHandle(handle),
        )
        self._ghost = None
        logger.debug("Resize started for %s %s (%s)", kind.value, entity_id, handle)
        return True

    def move(self, pointer: Point) -> Optional[GhostPreview]:
        """
        Handle a pointer-move: recompute and publish the ghost preview.

        Returns:
            The new ghost, or None when no gesture is active.
        """
        if not self.is_active:
            return None
        if not self.session.can_edit:
            # Session left edit mode mid-gesture
            self.cancel()
            return None

        grid = self.session.draft.grid
        if isinstance(self._state, Dragging):
            self._ghost = drag_preview(self._state, grid, pointer, self.cell_size)
        else:
            self._ghost = resize_preview(self._state, grid, pointer, self.cell_size)
        return self._ghost

    def release(self, pointer: Optional[Point] = None) -> bool:
        """
        Handle a pointer-up and commit the last ghost into the draft.

        Releasing outside the canvas is handled like releasing inside: the
        final position is computed from the pointer and clamped.

        Args:
            pointer: Final pointer position, if known. Without it the last
                     ghost from move() is used.

        Returns:
            True if the ghost was written into the draft, False for a stray
            pointer-up or a gesture that never produced a preview.
        """
        if not self.is_active:
            logger.debug("Ignoring pointer-up with no active gesture")
            return False

        if pointer is not None:
            self.move(pointer)

        state, ghost = self._state, self._ghost
        self._state = IDLE
        self._ghost = None

        if ghost is None or not self.session.can_edit:
            return False
        return self._apply(state, ghost)

    def cancel(self) -> None:
        """Abandon the current gesture without touching the draft."""
        self._state = IDLE
        self._ghost = None

    def _resolve_start(self, entity_id: str, kind: Optional[EntityKind]):
        if self.is_active:
            logger.debug("Ignoring gesture start on %s: gesture already active", entity_id)
            return None, None
        if not self.session.can_edit:
            return None, None

        draft = self.session.draft
        kind = EntityKind(kind) if kind is not None else draft.kind_of(entity_id)
        if kind is EntityKind.TABLE:
            entity = draft.find_table(entity_id)
        elif kind is EntityKind.ENTRANCE:
            entity = draft.find_entrance(entity_id)
        else:
            entity = None
        if entity is None:
            return None, None
        return entity, kind

    def _apply(self, state: GestureState, ghost: GhostPreview) -> bool:
        session = self.session
        if isinstance(state, Dragging):
            if state.kind is EntityKind.TABLE:
                applied = session.move_table(ghost.entity_id, ghost.x, ghost.y)
            else:
                applied = session.place_entrance(ghost.entity_id, ghost.side, ghost.offset)
        elif state.kind is EntityKind.TABLE:
            applied = session.resize_table(ghost.entity_id, ghost.width, ghost.height)
        else:
            applied = session.resize_entrance(ghost.entity_id, ghost.offset, ghost.span)
        logger.debug("Gesture on %s committed to draft: %s", ghost.entity_id, applied)
        return applied
