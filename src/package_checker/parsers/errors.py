"""Extractor errors."""

from __future__ import annotations


class ExtractionError(ValueError):
    """Raised when a lockfile or manifest is structurally unreadable."""
