"""Dependency occurrence and match result models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .package_entry import Advisory


class Ecosystem(str, Enum):
    """Manifest/lockfile grammars understood by the extractors."""

    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"
    BUN = "bun"
    DENO = "deno"
    MANIFEST = "package-json"


class MatchReason(str, Enum):
    EXACT = "exact"
    PRERELEASE = "prerelease-of"
    RANGE = "range"
    KNOWN_NOT_VULNERABLE = "known-but-not-vulnerable"
    NOT_APPLICABLE = "not-applicable"


class Confidence(str, Enum):
    """RESOLVED for lockfile versions, DECLARED for manifest ranges."""

    RESOLVED = "resolved"
    DECLARED = "declared"


DECLARED_NOTE = (
    "package appears in vulnerability list; verify exact resolved version in the lockfile"
)


@dataclass(frozen=True)
class FileDescriptor:
    path: str
    ecosystem: Ecosystem


@dataclass(frozen=True)
class DependencyOccurrence:
    """One sighting of ``package`` at ``version`` inside ``source``."""

    package: str
    version: str
    source: str
    declared: bool = False


@dataclass(frozen=True)
class MatchResult:
    occurrence: DependencyOccurrence
    matched: bool
    matched_against: str | None
    reason: MatchReason
    confidence: Confidence = Confidence.RESOLVED
    advisories: tuple[Advisory, ...] = ()

    @property
    def is_vulnerable(self) -> bool:
        """True only for firm (lockfile) matches."""
        return self.matched and self.confidence is Confidence.RESOLVED

    @property
    def note(self) -> str:
        if not self.matched:
            return "OK" if self.reason is MatchReason.KNOWN_NOT_VULNERABLE else ""
        if self.confidence is Confidence.DECLARED:
            return DECLARED_NOTE
        if self.reason is MatchReason.PRERELEASE:
            return f"vulnerable - pre-release of {self.matched_against}"
        if self.reason is MatchReason.RANGE:
            return f"vulnerable - matches range: {self.matched_against}"
        return "vulnerable"

    def to_dict(self) -> dict[str, object]:
        return {
            "package": self.occurrence.package,
            "installed": self.occurrence.version,
            "location": self.occurrence.source,
            "matched": self.matched,
            "matchedAgainst": self.matched_against,
            "reason": self.reason.value,
            "confidence": self.confidence.value,
            "note": self.note,
            "advisories": [a.to_dict() for a in self.advisories],
        }
