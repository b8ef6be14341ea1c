"""Package-URL line list vulnerability source parsing.

One declaration per line::

    pkg:npm/minimist@0.0.8
    pkg:npm/%40scope/name@>=1.0.0 <1.2.0?severity=high&cve=CVE-2021-0001
    # comments and blank lines are ignored
"""

from __future__ import annotations

from urllib.parse import parse_qsl, unquote

from ..models import Advisory, PackageRecord
from ..parsers.semver import classify_versions
from .aggregation import SourceAggregation

PURL_SCHEME = "pkg:"
BOM = "\ufeff"


class PurlSourceError(ValueError):
    """Raised when a package-URL line cannot be parsed."""


def parse_purl(line: str) -> tuple[str, str, dict[str, str]]:
    """Return ``(package, version, metadata)`` for one package-URL.

    The package name is the last path segment, prefixed with its namespace.
    Query-string qualifiers and the purl type end up in ``metadata``.
    """
    if not line.startswith(PURL_SCHEME):
        raise PurlSourceError("missing 'pkg:' scheme")

    body = line[len(PURL_SCHEME):].split("#", 1)[0]
    path, _, query = body.partition("?")

    at = path.rfind("@")
    if at <= path.rfind("/"):
        raise PurlSourceError("missing version")
    coordinates, version = path[:at], unquote(path[at + 1:]).strip()

    segments = [unquote(s) for s in coordinates.strip("/").split("/") if s]
    if len(segments) < 2:
        raise PurlSourceError("missing type or name")
    purl_type, *namespace, name = segments
    package = "/".join([*namespace, name])
    if not version:
        raise PurlSourceError("missing version")

    metadata = {key: value for key, value in parse_qsl(query, keep_blank_values=False)}
    metadata["type"] = purl_type.lower()
    return package, version, metadata


def aggregate_purl_payload(text: str) -> SourceAggregation:
    """Aggregate package-URL lines into package records."""
    aggregation = SourceAggregation()

    for index, raw_line in enumerate(text.removeprefix(BOM).splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        aggregation.total_records += 1
        try:
            package, version, metadata = parse_purl(line)
        except PurlSourceError as exc:
            aggregation.skipped_records.append(f"line {index}: {exc}")
            continue

        exact, ranges = classify_versions([version])
        if not exact and not ranges:
            aggregation.skipped_records.append(f"line {index}: no versions after normalization")
            continue

        advisories = tuple(
            Advisory.from_mapping(expression, metadata) for expression in (*exact, *ranges)
        )
        aggregation.records.append(
            PackageRecord(
                name=package,
                exact_versions=tuple(exact),
                ranges=tuple(ranges),
                advisories=advisories,
            )
        )

    return aggregation
