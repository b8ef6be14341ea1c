"""Structured (JSON object-of-objects) vulnerability source parsing."""

from __future__ import annotations

import json
from typing import Any

from ..models import PackageRecord
from ..parsers.semver import classify_versions
from .aggregation import SourceAggregation

EXACT_FIELDS = ("vulnerability_version", "versions")
RANGE_FIELDS = ("vulnerability_range", "versions_range", "ranges")
BOM = "\ufeff"


class StructuredSourceError(ValueError):
    """Raised when a structured payload cannot be decoded at all."""


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _combine(first: Any, second: Any) -> Any:
    if isinstance(first, dict) or isinstance(second, dict):
        left = first if isinstance(first, dict) else {"versions": first}
        right = second if isinstance(second, dict) else {"versions": second}
        merged = dict(left)
        for key, value in right.items():
            merged[key] = _combine(merged[key], value) if key in merged else value
        return merged
    return [*_as_list(first), *_as_list(second)]


def _union_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    # a package listed twice in one document keeps the versions of both
    data: dict[str, Any] = {}
    for key, value in pairs:
        data[key] = _combine(data[key], value) if key in data else value
    return data


def _record_from_object(name: str, data: dict[str, Any]) -> PackageRecord:
    values: list[Any] = []
    for key in (*EXACT_FIELDS, *RANGE_FIELDS):
        values.extend(v for v in _as_list(data.get(key)) if isinstance(v, (str, int, float)))
    # Values are classified by content, so a range listed under an exact-version
    # field is still matched as a range.
    exact, ranges = classify_versions(values)
    return PackageRecord(name=name, exact_versions=tuple(exact), ranges=tuple(ranges))


def _iter_snapshot_entries(entries: list[Any], skipped: list[str]):
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            skipped.append(f"packages[{index}]: missing package name")
            continue
        yield entry["name"].strip(), entry


def aggregate_structured_payload(text: str) -> SourceAggregation:
    """Aggregate a JSON payload into package records.

    Accepted shapes::

        {"pkg": {"vulnerability_version": [...], "vulnerability_range": [...]}}
        {"pkg": {"versions": [...], "versions_range": [...]}}
        {"pkg": ["1.0.0", ">=2.0.0 <2.1.0"]}
        {"packages": [{"name": "pkg", "versions": [...]}]}
    """
    aggregation = SourceAggregation()
    text = text.removeprefix(BOM)
    if not text.strip():
        return aggregation

    try:
        data = json.loads(text, object_pairs_hook=_union_duplicate_keys)
    except json.JSONDecodeError as exc:
        raise StructuredSourceError(f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc

    if not isinstance(data, dict):
        raise StructuredSourceError("structured source must be a JSON object")

    packages = data.get("packages")
    if isinstance(packages, list):
        items = list(_iter_snapshot_entries(packages, aggregation.skipped_records))
    else:
        items = list(data.items())

    for name, value in items:
        aggregation.total_records += 1
        name = str(name).strip()
        if not name:
            aggregation.skipped_records.append("record with empty package name")
            continue

        if isinstance(value, dict):
            record = _record_from_object(name, value)
        elif isinstance(value, (list, str)):
            exact, ranges = classify_versions(
                v for v in _as_list(value) if isinstance(v, (str, int, float))
            )
            record = PackageRecord(name=name, exact_versions=tuple(exact), ranges=tuple(ranges))
        else:
            aggregation.skipped_records.append(f"{name}: unsupported value type")
            continue

        if not record.exact_versions and not record.ranges:
            aggregation.skipped_records.append(f"{name}: no versions or ranges")
            continue
        aggregation.records.append(record)

    return aggregation
