"""Source descriptors, format registry and multi-source loading.

Every source format is converted into a `VulnerabilityDatabase` before it is
merged, so the rest of the pipeline is format-agnostic. Merging is a set
union, which lets sources load concurrently in any order.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypeAlias
from collections.abc import Callable, Iterable
from urllib.parse import urlsplit

import requests
from requests import Response
from tenacity import retry, stop_after_attempt, wait_fixed

from ..models import SourceFailure, SourceStatus, VulnerabilityDatabase, merge
from .aggregation import SourceAggregation
from .purl_source import aggregate_purl_payload
from .structured_source import StructuredSourceError, aggregate_structured_payload
from .tabular_source import TabularSourceError, aggregate_tabular_payload

logger = logging.getLogger(__name__)

USER_AGENT = "package-checker (+https://pypi.org/project/package-checker/)"
REMOTE_SCHEMES = ("http://", "https://")
FETCH_TIMEOUT = 30


class SourceError(RuntimeError):
    """Base error for failures while fetching or parsing a source."""


class SourceFetchError(SourceError):
    """Raised when a source cannot be fetched."""


class SourceParseError(SourceError):
    """Raised when a source cannot be parsed into records."""


class UnsupportedFormatError(SourceError):
    """Raised when a source names a format that has no parser."""


class SourceFormat(str, Enum):
    STRUCTURED = "structured"
    TABULAR = "tabular"
    PURL = "purl"


FORMAT_ALIASES: dict[str, SourceFormat] = {
    "structured": SourceFormat.STRUCTURED,
    "json": SourceFormat.STRUCTURED,
    "tabular": SourceFormat.TABULAR,
    "csv": SourceFormat.TABULAR,
    "purl": SourceFormat.PURL,
}

EXTENSION_FORMATS: dict[str, SourceFormat] = {
    ".json": SourceFormat.STRUCTURED,
    ".csv": SourceFormat.TABULAR,
    ".purl": SourceFormat.PURL,
}


def detect_format(location: str) -> SourceFormat:
    """Infer the format from the location's extension (query/fragment ignored)."""
    path = urlsplit(location).path if location.startswith(REMOTE_SCHEMES) else location
    suffix = Path(path).suffix.lower()
    return EXTENSION_FORMATS.get(suffix, SourceFormat.STRUCTURED)


def resolve_format(name: str | None, location: str) -> SourceFormat:
    if not name:
        return detect_format(location)
    fmt = FORMAT_ALIASES.get(name.strip().lower())
    if fmt is None:
        known = ", ".join(sorted(FORMAT_ALIASES))
        raise UnsupportedFormatError(f"Unsupported format '{name}'. Known formats: {known}")
    return fmt


@dataclass(slots=True, frozen=True)
class SourceDescriptor:
    """Where a vulnerability source lives and how to read it."""

    location: str
    format: str | None = None
    name: str | None = None
    columns: str | None = None

    @property
    def label(self) -> str:
        return self.name or self.location


ParseFunction: TypeAlias = Callable[[str, SourceDescriptor], SourceAggregation]


def _wrap_structured_parse(text: str, descriptor: SourceDescriptor) -> SourceAggregation:
    try:
        return aggregate_structured_payload(text)
    except StructuredSourceError as exc:
        raise SourceParseError(str(exc)) from exc


def _wrap_tabular_parse(text: str, descriptor: SourceDescriptor) -> SourceAggregation:
    try:
        return aggregate_tabular_payload(text, descriptor.columns)
    except TabularSourceError as exc:
        raise SourceParseError(str(exc)) from exc


def _wrap_purl_parse(text: str, descriptor: SourceDescriptor) -> SourceAggregation:
    return aggregate_purl_payload(text)


# Registry of format parsers, keyed by format.
FORMAT_HANDLERS: dict[SourceFormat, ParseFunction] = {
    SourceFormat.STRUCTURED: _wrap_structured_parse,
    SourceFormat.TABULAR: _wrap_tabular_parse,
    SourceFormat.PURL: _wrap_purl_parse,
}


@retry(reraise=True, stop=stop_after_attempt(3), wait=wait_fixed(2))
def _http_get(url: str) -> Response:
    return requests.get(url, headers={"User-Agent": USER_AGENT}, timeout=FETCH_TIMEOUT)


def fetch_source(location: str) -> str:
    """Return the raw text of a local file or remote URL."""
    if location.startswith(REMOTE_SCHEMES):
        try:
            response = _http_get(location)
        except requests.RequestException as exc:
            raise SourceFetchError(f"Unable to download from {location}: {exc}") from exc
        if response.status_code != 200:
            raise SourceFetchError(
                f"Unexpected status code {response.status_code} fetching {location}"
            )
        return response.content.decode("utf-8-sig", errors="replace")

    path = Path(location)
    if not path.is_file():
        raise SourceFetchError(f"Local file not found: {location}")
    try:
        return path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as exc:
        raise SourceFetchError(f"Failed to read {location}: {exc}") from exc


def parse_source(
    text: str, descriptor: SourceDescriptor
) -> tuple[VulnerabilityDatabase, SourceAggregation]:
    """Parse already-fetched text for ``descriptor`` into a database."""
    fmt = resolve_format(descriptor.format, descriptor.location)
    aggregation = FORMAT_HANDLERS[fmt](text, descriptor)
    for skipped in aggregation.skipped_records:
        logger.debug("%s: skipped %s", descriptor.label, skipped)
    return aggregation.to_database(), aggregation


def load_source(descriptor: SourceDescriptor) -> tuple[VulnerabilityDatabase, SourceStatus]:
    """Fetch and parse a single source.

    Raises:
        SourceError: if fetching or parsing fails, or the format is unknown.
    """
    fmt = resolve_format(descriptor.format, descriptor.location)
    logger.info("Loading %s (format: %s)", descriptor.label, fmt.value)
    text = fetch_source(descriptor.location)
    database, aggregation = parse_source(text, descriptor)
    status = SourceStatus.from_content(
        name=descriptor.label,
        location=descriptor.location,
        format=fmt.value,
        content=text,
        packages=len(database),
        total_records=aggregation.total_records,
        skipped_records=tuple(aggregation.skipped_records),
    )
    logger.info("Loaded %d packages from %s", len(database), descriptor.label)
    return database, status


def _load_one(
    descriptor: SourceDescriptor,
) -> tuple[VulnerabilityDatabase, SourceStatus | SourceFailure]:
    try:
        return load_source(descriptor)
    except SourceError as exc:
        logger.warning("Failed to load %s: %s", descriptor.label, exc)
        failure = SourceFailure(name=descriptor.label, location=descriptor.location, message=str(exc))
        return VulnerabilityDatabase(), failure


def load_sources_with_status(
    descriptors: Iterable[SourceDescriptor], max_workers: int | None = None
) -> tuple[VulnerabilityDatabase, list[SourceStatus], list[SourceFailure]]:
    """Load every source, merge the results, and report per-source outcomes.

    A failing source never prevents the others from loading.
    """
    descriptors = list(descriptors)
    if max_workers and max_workers > 1 and len(descriptors) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(executor.map(_load_one, descriptors))
    else:
        outcomes = [_load_one(d) for d in descriptors]

    database = merge(*(db for db, _ in outcomes))
    statuses = [o for _, o in outcomes if isinstance(o, SourceStatus)]
    failures = [o for _, o in outcomes if isinstance(o, SourceFailure)]
    return database, statuses, failures


def load_sources(
    descriptors: Iterable[SourceDescriptor], max_workers: int | None = None
) -> tuple[VulnerabilityDatabase, list[SourceFailure]]:
    """Return the merged database and the per-source failures."""
    database, _, failures = load_sources_with_status(descriptors, max_workers=max_workers)
    return database, failures


def get_known_formats() -> list[str]:
    """Return a sorted list of all accepted format names and aliases."""
    return sorted(FORMAT_ALIASES)
