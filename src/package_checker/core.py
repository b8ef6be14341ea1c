"""Core scanning entrypoints.

This module MUST NOT contain command-line concerns so it can be used by the
CLI and by other callers alike. The pipeline is phase ordered: load and merge
sources, build the lookup index once, then extract and match every file.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from collections.abc import Iterable

from .discovery import discover_manifests
from .index import LookupIndex, build_index
from .ingestion import SourceDescriptor, load_sources_with_status
from .matcher import match_all
from .models import FileDescriptor, MatchResult
from .parsers import extract_occurrences
from .report import aggregate

logger = logging.getLogger(__name__)


class NoSourcesError(RuntimeError):
    """Raised when no vulnerability source could be loaded."""


@dataclass(slots=True)
class ScanResult:
    results: list[MatchResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    files: int = 0


def scan_file(descriptor: FileDescriptor, index: LookupIndex) -> tuple[list[MatchResult], list[str]]:
    """Read, extract and match one file. Read failures become warnings."""
    try:
        text = Path(descriptor.path).read_text(encoding="utf-8-sig", errors="replace")
    except OSError as exc:
        logger.warning("Unable to read %s: %s", descriptor.path, exc)
        return [], [f"{descriptor.path}: {exc}"]

    occurrences, warnings = extract_occurrences(descriptor, text)
    return match_all(occurrences, index), warnings


def scan_files(
    files: Iterable[FileDescriptor], index: LookupIndex, max_workers: int | None = None
) -> ScanResult:
    """Scan files against a built index; per-file work is independent."""
    files = list(files)
    if max_workers and max_workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            outcomes = list(executor.map(lambda f: scan_file(f, index), files))
    else:
        outcomes = [scan_file(f, index) for f in files]

    scan = ScanResult(files=len(files))
    for results, warnings in outcomes:
        scan.results.extend(results)
        scan.warnings.extend(warnings)
    return scan


def scan_repository(
    root: Path,
    sources: Iterable[SourceDescriptor],
    max_workers: int | None = None,
    respect_gitignore: bool = True,
) -> dict[str, Any]:
    """Scan a directory tree for vulnerable packages.

    Params:
        root: directory to search for lockfiles and package.json manifests
        sources: vulnerability sources to load and merge
        max_workers: thread count for source loading and file scanning
        respect_gitignore: skip files git reports as ignored

    Returns: dict report (see ``report.aggregate``)

    Raises:
        NoSourcesError: if not a single source loaded successfully.
    """
    root = root.resolve()
    sources = list(sources)

    database, statuses, failures = load_sources_with_status(sources, max_workers=max_workers)
    if not statuses:
        raise NoSourcesError(
            "No vulnerability source could be loaded"
            + "".join(f"\n- {f.name}: {f.message}" for f in failures)
        )
    logger.info("Total unique vulnerable packages: %d", len(database))

    index = build_index(database)
    files = discover_manifests(root, respect_gitignore=respect_gitignore)
    logger.info("Analyzing %d file(s) under %s", len(files), root)

    scan = scan_files(files, index, max_workers=max_workers)
    return aggregate(
        scan.results,
        files=scan.files,
        warnings=scan.warnings,
        sources=[s.to_dict() for s in statuses],
        failures=[f.to_dict() for f in failures],
    )
