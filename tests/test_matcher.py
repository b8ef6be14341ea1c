from __future__ import annotations

from package_checker.index import LookupIndex, build_index
from package_checker.ingestion import aggregate_purl_payload, aggregate_structured_payload
from package_checker.matcher import match, match_all
from package_checker.models import (
    DECLARED_NOTE,
    Confidence,
    DependencyOccurrence,
    MatchReason,
)


def _index(payload: str) -> LookupIndex:
    return build_index(aggregate_structured_payload(payload).to_database())


INDEX = _index(
    """
    {
      "lodash": {"vulnerability_range": [">=4.0.0 <4.17.21"]},
      "react": {"vulnerability_version": ["19.0.0"]},
      "express": {"vulnerability_version": ["4.16.0"],
                  "vulnerability_range": [">=3.0.0 <3.5.0", ">=5.0.0-beta <5.0.1"]}
    }
    """
)


def _occ(package: str, version: str, declared: bool = False) -> DependencyOccurrence:
    return DependencyOccurrence(package, version, "package-lock.json", declared=declared)


def test_unknown_package_is_not_applicable():
    result = match(_occ("left-pad", "1.0.0"), INDEX)
    assert result.matched is False
    assert result.reason is MatchReason.NOT_APPLICABLE
    assert result.matched_against is None


def test_exact_match():
    result = match(_occ("react", "19.0.0"), INDEX)
    assert result.matched is True
    assert result.reason is MatchReason.EXACT
    assert result.matched_against == "19.0.0"
    assert result.is_vulnerable


def test_prerelease_of_exact_version_matches():
    result = match(_occ("react", "19.0.0-rc-6230622a1a-20240610"), INDEX)
    assert result.matched is True
    assert result.reason is MatchReason.PRERELEASE
    assert result.matched_against == "19.0.0"
    assert "pre-release of 19.0.0" in result.note


def test_range_match():
    result = match(_occ("lodash", "4.17.19"), INDEX)
    assert result.matched is True
    assert result.reason is MatchReason.RANGE
    assert result.matched_against == ">=4.0.0 <4.17.21"


def test_exact_takes_precedence_over_ranges():
    result = match(_occ("express", "4.16.0"), INDEX)
    assert result.reason is MatchReason.EXACT


def test_any_range_may_match():
    assert match(_occ("express", "3.2.0"), INDEX).matched_against == ">=3.0.0 <3.5.0"
    assert match(_occ("express", "5.0.0"), INDEX).matched_against == ">=5.0.0-beta <5.0.1"


def test_known_package_at_safe_version():
    result = match(_occ("lodash", "4.17.21"), INDEX)
    assert result.matched is False
    assert result.reason is MatchReason.KNOWN_NOT_VULNERABLE
    assert result.note == "OK"


def test_declared_matches_are_lower_confidence():
    result = match(_occ("lodash", "4.17.0", declared=True), INDEX)
    assert result.matched is True
    assert result.confidence is Confidence.DECLARED
    assert result.is_vulnerable is False
    assert result.note == DECLARED_NOTE


def test_match_all_preserves_input_order():
    results = match_all([_occ("react", "19.0.0"), _occ("left-pad", "1.0.0")], INDEX)
    assert [r.occurrence.package for r in results] == ["react", "left-pad"]


def test_purl_metadata_is_attached_but_does_not_affect_matching():
    db = aggregate_purl_payload(
        "pkg:npm/minimist@0.0.8?severity=high&cve=CVE-2020-7598\n"
    ).to_database()
    index = build_index(db)
    hit = match(_occ("minimist", "0.0.8"), index)
    assert hit.reason is MatchReason.EXACT
    assert hit.advisories[0].get("cve") == "CVE-2020-7598"
    assert hit.advisories[0].get("severity") == "high"
    assert match(_occ("minimist", "0.0.9"), index).matched is False


def test_index_extension_unions_instead_of_overwriting():
    first = _index('{"pkg": ["1.0.0"]}')
    second = aggregate_structured_payload('{"pkg": ["2.0.0", "<0.5.0"]}').to_database()
    extended = first.extend(second)
    assert extended.exact_for("pkg") == {"1.0.0", "2.0.0"}
    assert extended.ranges_for("pkg") == {"<0.5.0"}
    assert "pkg" in extended
    assert len(extended) == 1


def test_result_serialisation():
    data = match(_occ("lodash", "4.17.19"), INDEX).to_dict()
    assert data == {
        "package": "lodash",
        "installed": "4.17.19",
        "location": "package-lock.json",
        "matched": True,
        "matchedAgainst": ">=4.0.0 <4.17.21",
        "reason": "range",
        "confidence": "resolved",
        "note": "vulnerable - matches range: >=4.0.0 <4.17.21",
        "advisories": [],
    }
