"""Package entry models."""

from __future__ import annotations

from dataclasses import dataclass, field
from collections.abc import Iterable, Mapping


@dataclass(frozen=True)
class Advisory:
    """Auxiliary metadata attached to a vulnerable version (never used for matching)."""

    version: str
    fields: tuple[tuple[str, str], ...]

    def get(self, key: str, default: str | None = None) -> str | None:
        for name, value in self.fields:
            if name == key:
                return value
        return default

    def to_dict(self) -> dict[str, str]:
        data = dict(self.fields)
        data["version"] = self.version
        return data

    @classmethod
    def from_mapping(cls, version: str, metadata: Mapping[str, str]) -> Advisory:
        return cls(version=version, fields=tuple(sorted(metadata.items())))


@dataclass(frozen=True)
class PackageRecord:
    """One ``(package, exact versions, ranges)`` tuple produced by a format parser."""

    name: str
    exact_versions: tuple[str, ...] = ()
    ranges: tuple[str, ...] = ()
    advisories: tuple[Advisory, ...] = ()


@dataclass(frozen=True)
class VulnerabilityEntry:
    """Represent a vulnerable package and its affected versions and ranges."""

    name: str
    exact_versions: frozenset[str] = field(default_factory=frozenset)
    ranges: frozenset[str] = field(default_factory=frozenset)
    advisories: frozenset[Advisory] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Package name must be non-empty")
        for value in (*self.exact_versions, *self.ranges):
            if not value or value != value.strip():
                raise ValueError(f"Versions must be non-empty trimmed strings: {value!r}")

    def union(self, other: VulnerabilityEntry) -> VulnerabilityEntry:
        if other.name != self.name:
            raise ValueError(f"Cannot merge entries for {self.name!r} and {other.name!r}")
        return VulnerabilityEntry(
            name=self.name,
            exact_versions=self.exact_versions | other.exact_versions,
            ranges=self.ranges | other.ranges,
            advisories=self.advisories | other.advisories,
        )

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "vulnerability_version": sorted(self.exact_versions),
            "vulnerability_range": sorted(self.ranges),
        }
        if self.advisories:
            data["advisories"] = [
                a.to_dict() for a in sorted(self.advisories, key=lambda a: (a.version, a.fields))
            ]
        return data

    @classmethod
    def from_iterables(
        cls,
        name: str,
        exact_versions: Iterable[str] = (),
        ranges: Iterable[str] = (),
        advisories: Iterable[Advisory] = (),
    ) -> VulnerabilityEntry:
        return cls(
            name=name,
            exact_versions=frozenset(v.strip() for v in exact_versions if v and v.strip()),
            ranges=frozenset(r.strip() for r in ranges if r and r.strip()),
            advisories=frozenset(advisories),
        )
