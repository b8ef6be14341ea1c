"""Report aggregation and schema-friendly output."""

from __future__ import annotations

from collections import defaultdict
from typing import Any
from collections.abc import Iterable

from .models import Confidence, MatchReason, MatchResult

EXIT_OK = 0
EXIT_VULNERABLE = 1
EXIT_CONFIG_ERROR = 2


def _group(results: Iterable[MatchResult]) -> list[dict[str, Any]]:
    """Group matched results by package@version with sorted locations."""
    grouped: dict[tuple[str, str], dict[str, Any]] = {}
    locations: dict[tuple[str, str], set[str]] = defaultdict(set)
    for result in results:
        key = (result.occurrence.package, result.occurrence.version)
        locations[key].add(result.occurrence.source)
        if key not in grouped:
            finding = result.to_dict()
            del finding["location"], finding["matched"]
            grouped[key] = finding

    findings = []
    for key in sorted(grouped):
        finding = grouped[key]
        finding["locations"] = sorted(locations[key])
        findings.append(finding)
    return findings


def aggregate(
    results: Iterable[MatchResult],
    *,
    files: int = 0,
    warnings: Iterable[str] = (),
    sources: Iterable[dict[str, Any]] = (),
    failures: Iterable[dict[str, Any]] = (),
) -> dict[str, Any]:
    """Aggregate match results into a single deterministic report.

    Results may arrive in any order (e.g. from parallel workers); every list in
    the report is sorted so the output only depends on the results' content.
    """
    results = list(results)
    matched = [r for r in results if r.matched]
    resolved = [r for r in matched if r.confidence is Confidence.RESOLVED]
    declared = [r for r in matched if r.confidence is Confidence.DECLARED]
    known = [r for r in results if r.reason is MatchReason.KNOWN_NOT_VULNERABLE]

    findings = _group(resolved)
    declared_findings = _group(declared)

    report: dict[str, Any] = {
        "version": "1",
        "hasFindings": bool(findings),
        "findings": findings,
        "declared": declared_findings,
        "sources": sorted(sources, key=lambda s: (s.get("name", ""), s.get("location", ""))),
        "sourceFailures": sorted(
            failures, key=lambda s: (s.get("name", ""), s.get("location", ""))
        ),
        "warnings": sorted(warnings),
        "totals": {
            "files": files,
            "occurrences": len(results),
            "findings": len(resolved),
            "packages": len({f["package"] for f in findings}),
            "declared": len(declared),
            "checkedNotVulnerable": len(known),
        },
    }

    return report


def exit_status(report: dict[str, Any], strict: bool = False) -> int:
    """Non-zero when a resolved occurrence is vulnerable (or any declared one when strict)."""
    if report.get("hasFindings"):
        return EXIT_VULNERABLE
    if strict and report.get("declared"):
        return EXIT_VULNERABLE
    return EXIT_OK
