"""In-memory vulnerability database built from any number of sources."""

from __future__ import annotations

from dataclasses import dataclass, field
from collections.abc import Iterable, Iterator

from .package_entry import PackageRecord, VulnerabilityEntry


@dataclass(frozen=True)
class VulnerabilityDatabase:
    """Immutable mapping of package name -> VulnerabilityEntry.

    Merging is a per-package set union, so it is associative, commutative and
    idempotent: the load order of sources never changes the result.
    """

    entries: dict[str, VulnerabilityEntry] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.entries))

    def get(self, name: str) -> VulnerabilityEntry | None:
        return self.entries.get(name)

    @property
    def totals(self) -> dict[str, int]:
        return {
            "packages": len(self.entries),
            "versions": sum(len(e.exact_versions) for e in self.entries.values()),
            "ranges": sum(len(e.ranges) for e in self.entries.values()),
        }

    def merge(self, other: VulnerabilityDatabase) -> VulnerabilityDatabase:
        merged = dict(self.entries)
        for name, entry in other.entries.items():
            existing = merged.get(name)
            merged[name] = entry if existing is None else existing.union(entry)
        return VulnerabilityDatabase(merged)

    def to_dict(self) -> dict[str, dict[str, object]]:
        return {name: self.entries[name].to_dict() for name in sorted(self.entries)}

    @classmethod
    def from_records(cls, records: Iterable[PackageRecord]) -> VulnerabilityDatabase:
        entries: dict[str, VulnerabilityEntry] = {}
        for record in records:
            entry = VulnerabilityEntry.from_iterables(
                record.name, record.exact_versions, record.ranges, record.advisories
            )
            if not entry.exact_versions and not entry.ranges:
                continue
            existing = entries.get(entry.name)
            entries[entry.name] = entry if existing is None else existing.union(entry)
        return cls(entries)


def merge(*databases: VulnerabilityDatabase) -> VulnerabilityDatabase:
    """Merge any number of databases into one."""
    result = VulnerabilityDatabase()
    for database in databases:
        result = result.merge(database)
    return result
