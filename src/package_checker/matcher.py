"""Decide, for each dependency occurrence, whether it is vulnerable."""

from __future__ import annotations

from collections.abc import Iterable

from .index import LookupIndex
from .models import Confidence, DependencyOccurrence, MatchReason, MatchResult
from .parsers.semver import in_range, parse_version


def match(occurrence: DependencyOccurrence, index: LookupIndex) -> MatchResult:
    """Match one occurrence against the index.

    Order: unknown package fast path, exact version (or a pre-release of one),
    then each range; a known package that matches nothing is reported as
    known-but-not-vulnerable.
    """
    package = occurrence.package
    confidence = Confidence.DECLARED if occurrence.declared else Confidence.RESOLVED

    if package not in index:
        return MatchResult(occurrence, False, None, MatchReason.NOT_APPLICABLE, confidence)

    def _hit(expression: str, reason: MatchReason) -> MatchResult:
        return MatchResult(
            occurrence,
            True,
            expression,
            reason,
            confidence,
            index.advisories_for(package, expression),
        )

    exact = index.exact_for(package)
    if occurrence.version in exact:
        return _hit(occurrence.version, MatchReason.EXACT)

    version = parse_version(occurrence.version)
    if version.is_prerelease and version.base in exact:
        return _hit(version.base, MatchReason.PRERELEASE)

    for expression in sorted(index.ranges_for(package)):
        if in_range(version, expression):
            return _hit(expression, MatchReason.RANGE)

    return MatchResult(occurrence, False, None, MatchReason.KNOWN_NOT_VULNERABLE, confidence)


def match_all(
    occurrences: Iterable[DependencyOccurrence], index: LookupIndex
) -> list[MatchResult]:
    return [match(occurrence, index) for occurrence in occurrences]
