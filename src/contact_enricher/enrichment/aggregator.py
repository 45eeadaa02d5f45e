"""
Completion statistics for enriched tables.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .fields import CONTACT_FIELDS
from .models import Row, Table


@dataclass
class FieldStatistic:
    """How many rows carry a value for one attribute."""
    field: str
    populated: int
    percentage: float


@dataclass
class EnrichmentStatistics:
    """Summary of an enriched table compared to its original."""
    field_stats: List[FieldStatistic]
    overall_completion: float
    total_rows: int
    changed_rows: Table = field(default_factory=list)

    @property
    def changed_count(self) -> int:
        return len(self.changed_rows)


def _has_value(row: Row, name: str) -> bool:
    value = row.get(name)
    return value is not None and str(value).strip() != ''


def _percentage(part: int, whole: int) -> float:
    if whole == 0:
        return 0.0
    return round(part * 100.0 / whole, 1)


class ResultAggregator:
    """Computes per-field and overall completion for a processed table."""

    def __init__(self, tracked_fields: Optional[Sequence[str]] = None):
        self.tracked_fields = tuple(tracked_fields or CONTACT_FIELDS)

    def field_statistics(self, processed: Sequence[Row]) -> List[FieldStatistic]:
        total = len(processed)
        stats = []
        for name in self.tracked_fields:
            populated = sum(1 for row in processed if _has_value(row, name))
            stats.append(FieldStatistic(field=name, populated=populated, percentage=_percentage(populated, total)))
        return stats

    @staticmethod
    def changed_rows(original: Sequence[Row], processed: Sequence[Row]) -> Table:
        """Processed rows that differ from the original row at the same index."""
        changed = []
        for index, processed_row in enumerate(processed):
            if index >= len(original):
                changed.append(processed_row)
                continue
            original_row = original[index]
            if any(processed_row.get(key) != original_row.get(key) for key in processed_row):
                changed.append(processed_row)
        return changed

    def aggregate(self, original: Sequence[Row], processed: Sequence[Row]) -> EnrichmentStatistics:
        """Summarize a processed table against the original it came from."""
        stats = self.field_statistics(processed)
        total_populated = sum(stat.populated for stat in stats)
        total_possible = len(self.tracked_fields) * len(processed)

        return EnrichmentStatistics(
            field_stats=stats,
            overall_completion=_percentage(total_populated, total_possible),
            total_rows=len(processed),
            changed_rows=self.changed_rows(original, processed),
        )
