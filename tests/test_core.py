from __future__ import annotations

import json
import textwrap

import pytest

from package_checker.core import NoSourcesError, scan_repository
from package_checker.ingestion import SourceDescriptor


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "project"
    (root / "web").mkdir(parents=True)
    (root / "package-lock.json").write_text(
        json.dumps(
            {
                "lockfileVersion": 3,
                "packages": {
                    "node_modules/lodash": {"version": "4.17.19"},
                    "node_modules/express": {"version": "4.16.1"},
                    "node_modules/react": {"version": "19.0.0-rc-6230622a1a-20240610"},
                },
            }
        ),
        encoding="utf-8",
    )
    (root / "web" / "yarn.lock").write_text(
        textwrap.dedent(
            '''\
            "@scope/name@^1.0.0":
              version "1.0.1"

            minimist@^0.0.8:
              version "0.0.8"
            '''
        ),
        encoding="utf-8",
    )
    (root / "package.json").write_text(
        json.dumps({"dependencies": {"lodash": "^4.17.0"}}), encoding="utf-8"
    )
    (root / "web" / "deno.lock").write_text("{not json", encoding="utf-8")
    return root


@pytest.fixture
def sources(tmp_path):
    structured = tmp_path / "vulns.json"
    structured.write_text(
        json.dumps(
            {
                "lodash": {"versions_range": [">=4.0.0 <4.17.21"]},
                "react": {"vulnerability_version": ["19.0.0"]},
                "@scope/name": {"vulnerability_version": ["1.0.1"]},
            }
        ),
        encoding="utf-8",
    )
    tabular = tmp_path / "vulns.csv"
    tabular.write_text("name,versions\nexpress,4.16.0\n", encoding="utf-8")
    purl = tmp_path / "vulns.purl"
    purl.write_text("pkg:npm/minimist@0.0.8?severity=critical\n", encoding="utf-8")
    return [
        SourceDescriptor(str(structured), name="structured"),
        SourceDescriptor(str(tabular), name="tabular"),
        SourceDescriptor(str(purl), name="purl"),
    ]


def test_scan_repository_end_to_end(project, sources):
    report = scan_repository(project, sources, respect_gitignore=False)

    findings = {(f["package"], f["installed"]): f for f in report["findings"]}
    assert set(findings) == {
        ("lodash", "4.17.19"),
        ("react", "19.0.0-rc-6230622a1a-20240610"),
        ("@scope/name", "1.0.1"),
        ("minimist", "0.0.8"),
    }
    assert findings[("lodash", "4.17.19")]["reason"] == "range"
    assert findings[("react", "19.0.0-rc-6230622a1a-20240610")]["reason"] == "prerelease-of"
    assert findings[("minimist", "0.0.8")]["advisories"][0]["severity"] == "critical"

    assert [d["package"] for d in report["declared"]] == ["lodash"]
    assert report["totals"]["checkedNotVulnerable"] == 1
    assert report["totals"]["files"] == 4
    assert len(report["sources"]) == 3
    assert len(report["warnings"]) == 1
    assert "deno.lock" in report["warnings"][0]


def test_results_are_identical_with_parallel_workers(project, sources):
    serial = scan_repository(project, sources, respect_gitignore=False)
    parallel = scan_repository(project, sources, max_workers=4, respect_gitignore=False)
    for report in (serial, parallel):
        for source in report["sources"]:
            source.pop("retrievedAt")
    assert serial == parallel


def test_unloadable_sources_raise(project, tmp_path):
    with pytest.raises(NoSourcesError, match="missing"):
        scan_repository(
            project,
            [SourceDescriptor(str(tmp_path / "nope.json"), name="missing")],
            respect_gitignore=False,
        )


def test_partial_source_failure_is_reported(project, sources, tmp_path):
    broken = SourceDescriptor(str(tmp_path / "absent.csv"), name="absent")
    report = scan_repository(project, [*sources, broken], respect_gitignore=False)
    assert [f["name"] for f in report["sourceFailures"]] == ["absent"]
    assert report["hasFindings"] is True


def test_lockfile_with_byte_order_mark_is_scanned(tmp_path, sources):
    root = tmp_path / "bom"
    root.mkdir()
    (root / "package-lock.json").write_text(
        json.dumps({"packages": {"node_modules/lodash": {"version": "4.17.19"}}}),
        encoding="utf-8-sig",
    )

    report = scan_repository(root, sources, respect_gitignore=False)

    assert report["hasFindings"] is True
    assert report["warnings"] == []
    assert report["findings"][0]["package"] == "lodash"
