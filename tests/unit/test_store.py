"""Unit tests for layout stores."""

import json
import logging
import threading

import pytest

from floorplan.models import GridSpec, Layout, Side, Table
from floorplan.store import (
    InMemoryLayoutStore,
    JsonFileLayoutStore,
    StoreError,
    default_layout,
)


class FlakyTableStore(InMemoryLayoutStore):
    """In-memory store whose table write fails a given number of times."""

    def __init__(self, layout=None, failures=1):
        super().__init__(layout)
        self.failures = failures

    async def bulk_update_tables(self, records):
        if self.failures:
            self.failures -= 1
            raise ConnectionError("tables collection unavailable")
        return await super().bulk_update_tables(records)


class TestDefaultLayout:
    """Tests for default_layout."""

    def test_default(self):
        """Test the default is a 12x8 grid with one centred top entrance."""
        layout = default_layout()
        assert layout.grid == GridSpec(12, 8)
        assert layout.tables == ()
        (entrance,) = layout.entrances
        assert (entrance.id, entrance.side, entrance.offset, entrance.span) == ("E1", Side.TOP, 5, 2)

    def test_custom_grid(self):
        """Test the entrance is centred on other grids too."""
        (entrance,) = default_layout(GridSpec(9, 4)).entrances
        assert (entrance.offset, entrance.span) == (3, 2)


class TestInMemoryLayoutStore:
    """Tests for InMemoryLayoutStore."""

    @pytest.mark.asyncio
    async def test_load_empty_store(self):
        """Test an empty store loads the default layout."""
        assert await InMemoryLayoutStore().load_layout() == default_layout()

    @pytest.mark.asyncio
    async def test_save_then_load(self, dining_layout):
        """Test a saved layout loads back equal."""
        store = InMemoryLayoutStore()
        await store.save_layout(dining_layout)
        assert await store.load_layout() == dining_layout
        assert store.save_count == 1

    @pytest.mark.asyncio
    async def test_save_replaces_tables(self, dining_layout):
        """Test tables missing from a save are deleted."""
        store = InMemoryLayoutStore(dining_layout)
        await store.save_layout(dining_layout.without("T2"))
        assert sorted(store.tables) == ["T1", "T3"]

    @pytest.mark.asyncio
    async def test_bulk_update_upserts(self, dining_layout):
        """Test bulk updates overwrite by id."""
        store = InMemoryLayoutStore(dining_layout)
        moved = dining_layout.replace_table(Table(id="T1", x=7, y=5))
        await store.save_layout(moved)
        assert store.tables["T1"].x == 7
        assert len(store.tables) == 3

    @pytest.mark.asyncio
    async def test_partial_failure_fails_whole_save(self, dining_layout):
        """Test a failed table write fails the save even if the floor plan was written."""
        store = FlakyTableStore(dining_layout)
        changed = Layout(grid=GridSpec(10, 6), tables=[Table(id="T9", x=2, y=2)])

        with pytest.raises(ConnectionError):
            await store.save_layout(changed)
        assert store.save_count == 0

        # Both writes are upserts, so retrying converges
        await store.save_layout(changed)
        assert await store.load_layout() == changed
        assert store.save_count == 1

    @pytest.mark.asyncio
    async def test_save_logs_issues(self, grid, caplog):
        """Test saving an overlapping layout logs a warning but still saves."""
        layout = Layout(grid=grid, tables=[Table(id="T1", x=1, y=1), Table(id="T2", x=1, y=1)])
        store = InMemoryLayoutStore()
        with caplog.at_level(logging.WARNING, logger="floorplan.store"):
            await store.save_layout(layout)
        assert "overlapping_tables" in caplog.text
        assert store.save_count == 1


class TestJsonFileLayoutStore:
    """Tests for JsonFileLayoutStore."""

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        """Test a missing file loads the default layout."""
        store = JsonFileLayoutStore(tmp_path / "floor.json")
        assert await store.load_layout() == default_layout()

    @pytest.mark.asyncio
    async def test_save_then_load(self, tmp_path, dining_layout):
        """Test a layout written to disk loads back equal."""
        path = tmp_path / "plans" / "floor.json"
        store = JsonFileLayoutStore(path)
        await store.save_layout(dining_layout)

        assert path.exists()
        assert not path.with_name("floor.json.tmp").exists()
        assert await JsonFileLayoutStore(path).load_layout() == dining_layout

    @pytest.mark.asyncio
    async def test_file_format(self, tmp_path, dining_layout):
        """Test the file uses the stored field names."""
        path = tmp_path / "floor.json"
        await JsonFileLayoutStore(path).save_layout(dining_layout)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["floorPlan"]["gridWidth"] == 12
        assert data["floorPlan"]["entrances"][0] == {"id": "E1", "side": "top", "offset": 5, "span": 2}
        assert data["tables"][1]["tableId"] == "T2"
        assert data["tables"][1]["name"] == "Window"

    @pytest.mark.asyncio
    async def test_legacy_file(self, tmp_path):
        """Test files with a legacy doorPosition load with one entrance."""
        path = tmp_path / "floor.json"
        path.write_text(
            json.dumps(
                {
                    "floorPlan": {
                        "gridWidth": 12,
                        "gridHeight": 8,
                        "doorPosition": {"x": 0, "y": 2, "width": 1, "side": "left"},
                    },
                    "tables": [{"tableId": "T1", "x": 3, "y": 3}],
                }
            ),
            encoding="utf-8",
        )
        layout = await JsonFileLayoutStore(path).load_layout()
        (entrance,) = layout.entrances
        assert (entrance.id, entrance.side, entrance.offset, entrance.span) == ("E1", Side.LEFT, 2, 1)
        assert layout.find_table("T1").rect().within(layout.grid)

    @pytest.mark.asyncio
    async def test_corrupt_file(self, tmp_path):
        """Test unreadable content raises StoreError."""
        path = tmp_path / "floor.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreError):
            await JsonFileLayoutStore(path).load_layout()

    @pytest.mark.asyncio
    async def test_malformed_door_position(self, tmp_path):
        """Test a non-object doorPosition surfaces as StoreError."""
        path = tmp_path / "floor.json"
        path.write_text(json.dumps({"floorPlan": {"doorPosition": "top"}}), encoding="utf-8")
        with pytest.raises(StoreError):
            await JsonFileLayoutStore(path).load_layout()

    @pytest.mark.asyncio
    async def test_file_io_off_event_loop(self, tmp_path, dining_layout):
        """Test reads and writes run in a worker thread."""
        threads = []

        class RecordingStore(JsonFileLayoutStore):
            def read_layout(self):
                threads.append(threading.get_ident())
                return super().read_layout()

            def write_layout(self, layout):
                threads.append(threading.get_ident())
                super().write_layout(layout)

        store = RecordingStore(tmp_path / "floor.json")
        await store.save_layout(dining_layout)
        assert await store.load_layout() == dining_layout
        assert len(threads) == 2
        assert threading.get_ident() not in threads

    def test_blocking_round_trip(self, tmp_path, dining_layout):
        """Test the blocking helpers work without an event loop."""
        store = JsonFileLayoutStore(tmp_path / "floor.json")
        store.write_layout(dining_layout)
        assert store.read_layout() == dining_layout

    @pytest.mark.asyncio
    async def test_write_failure(self, tmp_path, dining_layout):
        """Test a path that cannot be written raises StoreError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = JsonFileLayoutStore(blocker / "floor.json")
        with pytest.raises(StoreError):
            await store.save_layout(dining_layout)
