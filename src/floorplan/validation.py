"""
Layout validation.

Reports problems in a layout without changing it. Overlapping tables are
legal (only creation avoids them) and are reported as warnings; anything
outside the grid is an error.
"""

from dataclasses import dataclass, field
from typing import List

from .models import TABLE_MAX_HEIGHT, TABLE_MAX_WIDTH, Layout

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


@dataclass
class LayoutIssue:
    """
    A single validation finding.

    Attributes:
        type: Machine-readable issue type (e.g. "overlapping_tables").
        severity: "error" or "warning".
        entity_ids: Ids of the tables/entrances involved.
        message: Human-readable description.
    """

    type: str
    severity: str
    entity_ids: List[str] = field(default_factory=list)
    message: str = ""


def validate_layout(layout: Layout) -> List[LayoutIssue]:
    """Check a layout for out-of-bounds, oversized and overlapping entities."""
    grid = layout.grid
    issues: List[LayoutIssue] = []

    for table in layout.tables:
        if not table.rect().within(grid):
            issues.append(
                LayoutIssue(
                    type="table_out_of_bounds",
                    severity=SEVERITY_ERROR,
                    entity_ids=[table.id],
                    message=f"Table {table.label} extends outside the grid",
                )
            )
        if table.width > TABLE_MAX_WIDTH or table.height > TABLE_MAX_HEIGHT:
            issues.append(
                LayoutIssue(
                    type="table_too_large",
                    severity=SEVERITY_WARNING,
                    entity_ids=[table.id],
                    message=(
                        f"Table {table.label} is {table.width}x{table.height}, "
                        f"larger than {TABLE_MAX_WIDTH}x{TABLE_MAX_HEIGHT}"
                    ),
                )
            )

    for i, first in enumerate(layout.tables):
        for second in layout.tables[i + 1 :]:
            if first.rect().overlaps(second.rect()):
                issues.append(
                    LayoutIssue(
                        type="overlapping_tables",
                        severity=SEVERITY_WARNING,
                        entity_ids=[first.id, second.id],
                        message=f"Tables {first.label} and {second.label} overlap",
                    )
                )

    for entrance in layout.entrances:
        if not entrance.fits(grid):
            issues.append(
                LayoutIssue(
                    type="entrance_out_of_bounds",
                    severity=SEVERITY_ERROR,
                    entity_ids=[entrance.id],
                    message=(
                        f"Entrance {entrance.id} runs past the end of the "
                        f"{entrance.side.value} edge"
                    ),
                )
            )

    for i, first in enumerate(layout.entrances):
        for second in layout.entrances[i + 1 :]:
            if second.segment_overlaps(first.side, first.offset, first.span):
                issues.append(
                    LayoutIssue(
                        type="overlapping_entrances",
                        severity=SEVERITY_WARNING,
                        entity_ids=[first.id, second.id],
                        message=f"Entrances {first.id} and {second.id} overlap",
                    )
                )

    return issues


def has_errors(issues: List[LayoutIssue]) -> bool:
    return any(issue.severity == SEVERITY_ERROR for issue in issues)
