"""Lockfile and manifest extractors, one module per grammar.

Each extractor exposes ``parse(text) -> list[tuple[str, str]]``; this module
maps an `Ecosystem` to its extractor and wraps the output into
`DependencyOccurrence` records.
"""

from __future__ import annotations

import logging
from typing import TypeAlias
from collections.abc import Callable

from ..models import DependencyOccurrence, Ecosystem, FileDescriptor
from . import bun_lock, deno_lock, package_json, package_lock, pnpm_lock, yarn_lock
from .errors import ExtractionError

logger = logging.getLogger(__name__)

BOM = "\ufeff"

ExtractFunction: TypeAlias = Callable[[str], list[tuple[str, str]]]

# Registry of extractors, keyed by ecosystem.
EXTRACTORS: dict[Ecosystem, ExtractFunction] = {
    Ecosystem.NPM: package_lock.parse,
    Ecosystem.YARN: yarn_lock.parse,
    Ecosystem.PNPM: pnpm_lock.parse,
    Ecosystem.BUN: bun_lock.parse,
    Ecosystem.DENO: deno_lock.parse,
    Ecosystem.MANIFEST: package_json.parse,
}

# Well-known file names for each ecosystem.
FILENAMES: dict[str, Ecosystem] = {
    "package-lock.json": Ecosystem.NPM,
    "npm-shrinkwrap.json": Ecosystem.NPM,
    "yarn.lock": Ecosystem.YARN,
    "pnpm-lock.yaml": Ecosystem.PNPM,
    "bun.lock": Ecosystem.BUN,
    "deno.lock": Ecosystem.DENO,
    "package.json": Ecosystem.MANIFEST,
}


def ecosystem_for(filename: str) -> Ecosystem | None:
    return FILENAMES.get(filename)


def extract_occurrences(
    descriptor: FileDescriptor, text: str
) -> tuple[list[DependencyOccurrence], list[str]]:
    """Return the occurrences found in ``text`` plus extraction warnings.

    Malformed records are skipped by the extractors; a structurally unreadable
    file yields no occurrences and one warning.
    """
    extractor = EXTRACTORS[Ecosystem(descriptor.ecosystem)]
    declared = descriptor.ecosystem == Ecosystem.MANIFEST
    try:
        pairs = extractor(text.removeprefix(BOM))
    except ExtractionError as exc:
        logger.warning("Skipping %s: %s", descriptor.path, exc)
        return [], [f"{descriptor.path}: {exc}"]

    occurrences = [
        DependencyOccurrence(package=name, version=version, source=descriptor.path, declared=declared)
        for name, version in pairs
    ]
    logger.debug("%s: %d occurrences", descriptor.path, len(occurrences))
    return occurrences, []


__all__ = [
    "EXTRACTORS",
    "ExtractionError",
    "FILENAMES",
    "ecosystem_for",
    "extract_occurrences",
]
