"""Unit tests for the ASCII floor-plan renderer."""

from floorplan.gestures import GhostPreview
from floorplan.models import EntityKind, GridSpec, Layout, Side, Table, TableShape
from floorplan.occupancy import FoodStatus, Occupancy, lookup_from_mapping
from floorplan.renderer import (
    BOX_CHARS,
    ENTRANCE_CHARS,
    GHOST_CHAR,
    GRID_DOT,
    ASCIIFloorPlanRenderer,
    Canvas,
    render_floor_plan,
)


class TestCanvas:
    """Tests for Canvas class."""

    def test_set_and_get(self):
        """Test setting and reading characters."""
        c = Canvas(5, 3)
        c.set(2, 1, "X")
        assert c.get(2, 1) == "X"

    def test_out_of_bounds_ignored(self):
        """Test writes outside the canvas are dropped."""
        c = Canvas(3, 3)
        c.set(5, 5, "X")
        c.set(-1, 0, "X")
        assert c.get(5, 5) == " "
        assert "X" not in c.render()

    def test_draw_box(self):
        """Test a box outline with corners."""
        c = Canvas(4, 3)
        c.draw_box(0, 0, 4, 3, BOX_CHARS)
        assert c.render().split("\n") == ["┌──┐", "│  │", "└──┘"]

    def test_draw_box_too_small(self):
        """Test boxes narrower than two characters draw nothing."""
        c = Canvas(4, 3)
        c.draw_box(0, 0, 1, 3, BOX_CHARS)
        assert c.render() == ""

    def test_fill(self):
        """Test filling a block."""
        c = Canvas(4, 2)
        c.fill(1, 0, 2, 2, "#")
        assert c.render().split("\n") == [" ##", " ##"]

    def test_render_strips_trailing_space(self):
        """Test trailing spaces and empty lines are removed."""
        c = Canvas(6, 4)
        c.draw_text(0, 0, "Hi")
        assert c.render() == "Hi"


class TestASCIIFloorPlanRenderer:
    """Tests for ASCIIFloorPlanRenderer."""

    def test_canvas_dimensions(self, dining_layout):
        """Test each cell is 6x3 characters inside a one-character wall."""
        lines = render_floor_plan(dining_layout).split("\n")
        assert len(lines) == 8 * 3 + 2
        assert len(lines[0]) == 12 * 6 + 2

    def test_walls(self, empty_layout):
        """Test the perimeter wall corners."""
        lines = ASCIIFloorPlanRenderer().render(empty_layout).split("\n")
        assert lines[0][0] == "┏"
        assert lines[0][-1] == "┓"
        assert lines[-1][0] == "┗"
        assert lines[-1][-1] == "┛"

    def test_grid_dots(self, empty_layout):
        """Test cell corners are dotted only when show_grid is set."""
        with_grid = ASCIIFloorPlanRenderer().render(empty_layout)
        without_grid = ASCIIFloorPlanRenderer(show_grid=False).render(empty_layout)
        assert with_grid.count(GRID_DOT) == 12 * 8
        assert GRID_DOT not in without_grid

    def test_entrances_in_wall(self, dining_layout):
        """Test entrances replace their wall segment."""
        lines = render_floor_plan(dining_layout).split("\n")
        # E1: top, offset 5, span 2 -> columns 31..42
        assert lines[0][31:43] == ENTRANCE_CHARS["horizontal"] * 12
        assert lines[0][30] == "━"
        assert lines[0][43] == "━"
        # E2: left, offset 3, span 1 -> rows 10..12
        assert [lines[row][0] for row in range(10, 13)] == [ENTRANCE_CHARS["vertical"]] * 3
        assert lines[9][0] == "┃"

    def test_table_labels(self, dining_layout):
        """Test tables are boxed and labelled with display name or id."""
        lines = render_floor_plan(dining_layout).split("\n")
        # T1 at (1, 2), 2x1 -> box from (7, 7), label centred on row 8
        assert lines[7][7] == "┌"
        assert lines[8][12:14] == "T1"
        # T2 at (4, 2), 2x2 with display name
        assert lines[9][28:34] == "Window"

    def test_round_table(self, grid):
        """Test round tables get rounded corners."""
        layout = Layout(grid=grid, tables=[Table(id="T1", x=0, y=0, shape=TableShape.ROUND)])
        lines = render_floor_plan(layout).split("\n")
        assert lines[1][1] == "╭"

    def test_occupied_table(self, dining_layout):
        """Test occupied tables get a double border and a status line."""
        lookup = lookup_from_mapping(
            {
                "T1": Occupancy(True, FoodStatus.READY),
                "T2": Occupancy(True, FoodStatus.PREPARING),
            }
        )
        lines = render_floor_plan(dining_layout, occupancy=lookup).split("\n")
        assert lines[7][7] == "╔"
        assert lines[7][25] == "╔"
        assert lines[9][28:34] == "Window"
        assert lines[10][27:34] == "Cooking"
        # T3 stays empty
        assert lines[22][61] == "┌"

    def test_long_label_truncated(self, grid):
        """Test labels wider than the table are cut."""
        layout = Layout(grid=grid, tables=[Table(id="T1", width=1, display_name="Banquet")])
        lines = render_floor_plan(layout).split("\n")
        assert lines[2][2:6] == "Banq"

    def test_table_ghost(self, dining_layout):
        """Test a table ghost shades its cells."""
        ghost = GhostPreview("T1", EntityKind.TABLE, 8, 5, 2, 1)
        lines = render_floor_plan(dining_layout, ghost=ghost).split("\n")
        assert lines[16][49:61] == GHOST_CHAR * 12

    def test_entrance_ghost(self, empty_layout):
        """Test an entrance ghost shades its wall segment."""
        ghost = GhostPreview(
            "E1", EntityKind.ENTRANCE, 0, 0, 1, 1, side=Side.TOP, offset=0, span=1
        )
        lines = render_floor_plan(empty_layout, ghost=ghost).split("\n")
        assert lines[0][1:7] == GHOST_CHAR * 6

    def test_small_grid(self):
        """Test the smallest grid renders."""
        lines = render_floor_plan(Layout(grid=GridSpec(4, 4))).split("\n")
        assert len(lines) == 14
        assert len(lines[0]) == 26
