"""Lookup index derived from a vulnerability database."""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import Advisory, VulnerabilityDatabase


@dataclass(frozen=True)
class LookupIndex:
    """Read-only exact-version and range maps keyed by package name."""

    exact: dict[str, frozenset[str]] = field(default_factory=dict)
    ranges: dict[str, frozenset[str]] = field(default_factory=dict)
    advisories: dict[str, frozenset[Advisory]] = field(default_factory=dict)

    def __contains__(self, package: object) -> bool:
        return package in self.exact or package in self.ranges

    def __len__(self) -> int:
        return len(self.exact.keys() | self.ranges.keys())

    def exact_for(self, package: str) -> frozenset[str]:
        return self.exact.get(package, frozenset())

    def ranges_for(self, package: str) -> frozenset[str]:
        return self.ranges.get(package, frozenset())

    def advisories_for(self, package: str, expression: str) -> tuple[Advisory, ...]:
        found = (a for a in self.advisories.get(package, ()) if a.version == expression)
        return tuple(sorted(found, key=lambda a: a.fields))

    def extend(self, database: VulnerabilityDatabase) -> LookupIndex:
        """Return a new index that also covers ``database``.

        Entries already indexed are unioned with the new ones, never replaced.
        """
        exact = dict(self.exact)
        ranges = dict(self.ranges)
        advisories = dict(self.advisories)
        for name in database:
            entry = database.get(name)
            if entry.exact_versions:
                exact[name] = exact.get(name, frozenset()) | entry.exact_versions
            if entry.ranges:
                ranges[name] = ranges.get(name, frozenset()) | entry.ranges
            if entry.advisories:
                advisories[name] = advisories.get(name, frozenset()) | entry.advisories
        return LookupIndex(exact=exact, ranges=ranges, advisories=advisories)


def build_index(database: VulnerabilityDatabase) -> LookupIndex:
    """One pass over ``database`` producing the exact and range maps."""
    return LookupIndex().extend(database)
