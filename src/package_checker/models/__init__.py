"""Data models for the vulnerability database and scan results."""

from __future__ import annotations

from .database import VulnerabilityDatabase, merge
from .occurrence import (
    DECLARED_NOTE,
    Confidence,
    DependencyOccurrence,
    Ecosystem,
    FileDescriptor,
    MatchReason,
    MatchResult,
)
from .package_entry import Advisory, PackageRecord, VulnerabilityEntry
from .source_status import SourceFailure, SourceStatus

__all__ = [
    "Advisory",
    "Confidence",
    "DECLARED_NOTE",
    "DependencyOccurrence",
    "Ecosystem",
    "FileDescriptor",
    "MatchReason",
    "MatchResult",
    "PackageRecord",
    "SourceFailure",
    "SourceStatus",
    "VulnerabilityDatabase",
    "VulnerabilityEntry",
    "merge",
]
