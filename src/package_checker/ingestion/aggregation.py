"""Aggregated format-parser output shared by every source format."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models import PackageRecord, VulnerabilityDatabase


@dataclass(slots=True)
class SourceAggregation:
    """Records parsed from one source payload, plus what was skipped."""

    records: list[PackageRecord] = field(default_factory=list)
    total_records: int = 0
    skipped_records: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:  # pragma: no cover - convenience
        return bool(self.records)

    def to_database(self) -> VulnerabilityDatabase:
        return VulnerabilityDatabase.from_records(self.records)
