"""Tabular (CSV) vulnerability source parsing."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable

from ..models import PackageRecord
from ..parsers.semver import classify_versions
from .aggregation import SourceAggregation

HEADER_TOKENS = {"package", "package_name", "name"}
DEFAULT_COLUMNS = (1, 2)
BOM = "\ufeff"


class TabularSourceError(ValueError):
    """Raised when a CSV payload cannot be read."""


def _clean(field: str) -> str:
    # values spanning several physical lines are joined with single spaces
    return " ".join(field.split())


def _iter_rows(text: str) -> Iterable[tuple[int, list[str]]]:
    text = text.removeprefix(BOM).replace("\r", "")
    reader = csv.reader(io.StringIO(text), skipinitialspace=True)
    try:
        for row in reader:
            fields = [_clean(f) for f in row]
            if not any(fields):
                continue
            yield reader.line_num, fields
    except csv.Error as exc:
        raise TabularSourceError(f"line {reader.line_num}: {exc}") from exc


def parse_column_spec(spec: str | None) -> list[str]:
    if not spec:
        return []
    return [token.strip() for token in spec.split(",") if token.strip()]


def resolve_columns(header: list[str], tokens: list[str]) -> tuple[int, int]:
    """Map column tokens to 1-based (package, version) column indices.

    Tokens are 1-based positions or case-insensitive header names; anything
    unresolved falls back to columns 1 and 2.
    """
    lowered = [h.lower() for h in header]
    resolved: list[int | None] = []
    for token in tokens[:2]:
        if token.isdigit() and int(token) > 0:
            resolved.append(int(token))
        elif token.lower() in lowered:
            resolved.append(lowered.index(token.lower()) + 1)
        else:
            resolved.append(None)
    resolved.extend([None] * (2 - len(resolved)))

    package_col = resolved[0] or DEFAULT_COLUMNS[0]
    version_col = resolved[1] or DEFAULT_COLUMNS[1]
    return package_col, version_col


def _field(fields: list[str], column: int) -> str:
    return fields[column - 1] if 0 < column <= len(fields) else ""


def aggregate_tabular_payload(text: str, columns: str | None = None) -> SourceAggregation:
    """Aggregate CSV rows into package records.

    Without ``columns`` the first two fields are used and header rows are
    recognised by name. With ``columns`` the first row is always the header.
    Rows for the same package accumulate.
    """
    aggregation = SourceAggregation()
    tokens = parse_column_spec(columns)

    accumulated: dict[str, tuple[list[str], list[str]]] = {}
    package_col, version_col = DEFAULT_COLUMNS
    header_pending = bool(tokens)

    for line_num, fields in _iter_rows(text):
        if header_pending:
            package_col, version_col = resolve_columns(fields, tokens)
            header_pending = False
            continue

        package = _field(fields, package_col)
        version = _field(fields, version_col)

        if not tokens and package.lower() in HEADER_TOKENS:
            continue

        aggregation.total_records += 1
        if not package or not version:
            aggregation.skipped_records.append(f"row {line_num}: missing package or version")
            continue

        exact, ranges = classify_versions([version])
        if not exact and not ranges:
            aggregation.skipped_records.append(f"row {line_num}: no versions after normalization")
            continue

        bucket = accumulated.setdefault(package, ([], []))
        bucket[0].extend(exact)
        bucket[1].extend(ranges)

    aggregation.records = [
        PackageRecord(name=name, exact_versions=tuple(exact), ranges=tuple(ranges))
        for name, (exact, ranges) in accumulated.items()
    ]
    return aggregation
