"""Human-readable Markdown summary of a scan report."""

from __future__ import annotations

from typing import Any


def _finding_rows(findings: list[dict[str, Any]]) -> list[str]:
    rows = []
    for finding in findings:
        pkg = f"{finding.get('package', '')}@{finding.get('installed', '')}"
        note = finding.get("note", "")
        locations = "<br>".join(finding.get("locations", []) or [])
        rows.append(f"| {pkg} | {note} | {locations} |")
    return rows


def render_summary(report: dict[str, Any]) -> str:
    """Return a Markdown string with totals and tables of matched packages."""
    totals = report.get("totals", {})
    findings = report.get("findings") or []
    declared = report.get("declared") or []

    lines = []
    lines.append("# package-checker Summary")
    lines.append("")
    lines.append(
        f"Files scanned: {totals.get('files', 0)} | "
        f"Occurrences: {totals.get('occurrences', 0)} | "
        f"Vulnerable packages: {totals.get('packages', 0)} "
        f"in {totals.get('findings', 0)} location(s)"
    )
    lines.append("")

    if findings:
        lines.append("| Package | Status | Locations |")
        lines.append("| --- | --- | --- |")
        lines.extend(_finding_rows(findings))
    else:
        lines.append("No vulnerable packages detected.")

    if declared:
        lines.append("")
        lines.append("## Declared dependencies to verify")
        lines.append("")
        lines.append("| Package | Status | Locations |")
        lines.append("| --- | --- | --- |")
        lines.extend(_finding_rows(declared))

    failures = report.get("sourceFailures") or []
    warnings = report.get("warnings") or []
    if failures or warnings:
        lines.append("")
        lines.append("## Warnings")
        lines.append("")
        for failure in failures:
            lines.append(f"- source {failure.get('name')}: {failure.get('error')}")
        for warning in warnings:
            lines.append(f"- {warning}")

    return "\n".join(lines) + "\n"
