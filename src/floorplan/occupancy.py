"""
Table occupancy as seen by the editor.

The host application owns orders and payments; the editor only asks, per
table id, whether the table is occupied and how far along its food is, to
decorate the floor plan. It never writes occupancy.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional


class FoodStatus(str, Enum):
    """Kitchen progress of the open order on a table."""

    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"


STATUS_LABELS = {
    FoodStatus.PENDING: "Ordered",
    FoodStatus.PREPARING: "Cooking",
    FoodStatus.READY: "Ready",
    FoodStatus.SERVED: "Served",
}


@dataclass(frozen=True)
class Occupancy:
    """
    Occupancy of one table.

    Attributes:
        occupied: True while the table has an unpaid order.
        food_status: Kitchen progress of that order.
        minutes_elapsed: Minutes since the order was placed.
    """

    occupied: bool = False
    food_status: Optional[FoodStatus] = None
    minutes_elapsed: Optional[int] = None

    @property
    def label(self) -> str:
        if not self.occupied:
            return "Empty"
        return STATUS_LABELS[self.food_status or FoodStatus.PENDING]


EMPTY = Occupancy()

OccupancyLookup = Callable[[str], Occupancy]


def no_occupancy(table_id: str) -> Occupancy:
    """Lookup that reports every table as empty."""
    return EMPTY


def lookup_from_mapping(mapping: Mapping[str, Occupancy]) -> OccupancyLookup:
    """Adapt a table-id -> Occupancy mapping into a lookup callable."""

    def lookup(table_id: str) -> Occupancy:
        return mapping.get(table_id, EMPTY)

    return lookup
