"""Pytest configuration and shared fixtures for floorplan tests."""

import pytest

from floorplan import (
    DragResizeController,
    EditSession,
    Entrance,
    GridSpec,
    Layout,
    Side,
    Table,
    default_layout,
)

CELL = 50


@pytest.fixture
def grid():
    """Default 12x8 grid."""
    return GridSpec(12, 8)


@pytest.fixture
def empty_layout(grid):
    """12x8 grid with no tables and no entrances."""
    return Layout(grid=grid)


@pytest.fixture
def starter_layout():
    """Layout used when nothing has been saved yet."""
    return default_layout()


@pytest.fixture
def dining_layout(grid):
    """A small dining room with three tables and two entrances."""
    return Layout(
        grid=grid,
        tables=[
            Table(id="T1", x=1, y=2, width=2, height=1),
            Table(id="T2", x=4, y=2, width=2, height=2, display_name="Window"),
            Table(id="T3", x=10, y=7, width=2, height=1),
        ],
        entrances=[
            Entrance(id="E1", side=Side.TOP, offset=5, span=2),
            Entrance(id="E2", side=Side.LEFT, offset=3, span=1),
        ],
    )


@pytest.fixture
def editing_session(dining_layout):
    """Session over the dining layout, already in edit mode."""
    session = EditSession(dining_layout)
    session.enter_edit()
    return session


@pytest.fixture
def controller(editing_session):
    """Gesture controller with 50px cells."""
    return DragResizeController(editing_session, cell_size=CELL)
