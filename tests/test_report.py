from __future__ import annotations

from package_checker.models import (
    Confidence,
    DependencyOccurrence,
    MatchReason,
    MatchResult,
)
from package_checker.report import EXIT_OK, EXIT_VULNERABLE, aggregate, exit_status
from package_checker.summary import render_summary


def _result(package, version, source, reason, matched_against=None, declared=False):
    occurrence = DependencyOccurrence(package, version, source, declared=declared)
    confidence = Confidence.DECLARED if declared else Confidence.RESOLVED
    matched = reason in (MatchReason.EXACT, MatchReason.PRERELEASE, MatchReason.RANGE)
    return MatchResult(occurrence, matched, matched_against, reason, confidence)


RESULTS = [
    _result("lodash", "4.17.19", "b/package-lock.json", MatchReason.RANGE, "<4.17.21"),
    _result("lodash", "4.17.19", "a/yarn.lock", MatchReason.RANGE, "<4.17.21"),
    _result("express", "4.16.1", "a/yarn.lock", MatchReason.KNOWN_NOT_VULNERABLE),
    _result("left-pad", "1.3.0", "a/yarn.lock", MatchReason.NOT_APPLICABLE),
    _result("react", "19.0.0", "package.json", MatchReason.EXACT, "19.0.0", declared=True),
]


def test_aggregate_groups_findings_by_package_and_version():
    report = aggregate(RESULTS, files=3)

    assert report["hasFindings"] is True
    (finding,) = report["findings"]
    assert finding["package"] == "lodash"
    assert finding["locations"] == ["a/yarn.lock", "b/package-lock.json"]
    assert finding["note"] == "vulnerable - matches range: <4.17.21"
    assert report["totals"] == {
        "files": 3,
        "occurrences": 5,
        "findings": 2,
        "packages": 1,
        "declared": 1,
        "checkedNotVulnerable": 1,
    }


def test_aggregate_is_independent_of_result_order():
    assert aggregate(RESULTS, warnings=["b", "a"]) == aggregate(
        list(reversed(RESULTS)), warnings=["a", "b"]
    )


def test_declared_matches_only_fail_in_strict_mode():
    report = aggregate(RESULTS[2:])
    assert report["hasFindings"] is False
    assert report["declared"][0]["package"] == "react"
    assert exit_status(report) == EXIT_OK
    assert exit_status(report, strict=True) == EXIT_VULNERABLE
    assert exit_status(aggregate(RESULTS)) == EXIT_VULNERABLE


def test_summary_lists_findings_declared_and_warnings():
    report = aggregate(
        RESULTS,
        files=3,
        warnings=["yarn.lock: unreadable"],
        failures=[{"name": "remote", "location": "https://x", "error": "timeout"}],
    )
    summary = render_summary(report)

    assert summary.startswith("# package-checker Summary\n")
    assert "| lodash@4.17.19 | vulnerable - matches range: <4.17.21 |" in summary
    assert "## Declared dependencies to verify" in summary
    assert "- source remote: timeout" in summary
    assert "- yarn.lock: unreadable" in summary


def test_summary_without_findings():
    summary = render_summary(aggregate(RESULTS[2:4]))
    assert "No vulnerable packages detected." in summary
    assert "## Warnings" not in summary
