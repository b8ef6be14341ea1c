"""Parse yarn.lock (classic v1 and berry) to capture resolved dependencies."""

from __future__ import annotations

import re

_VERSION_LINE = re.compile(r'^\s+version:?\s+"?([^"\s]+)"?\s*$')
_WORKSPACE_VERSION = "0.0.0-use.local"


def _package_name(header: str) -> str | None:
    """Return the package name from a record header like ``"@a/b@^1.0.0, @a/b@^1.1.0"``."""
    first = header.split(",", 1)[0].strip().strip('"').strip("'")
    idx = first.find("@", 1) if first.startswith("@") else first.find("@")
    if idx <= 0:
        return None
    return first[:idx]


def parse(text: str) -> list[tuple[str, str]]:
    """Return list of (package, version) from yarn lock file."""
    pairs: list[tuple[str, str]] = []

    current_name: str | None = None
    for raw in text.splitlines():
        line = raw.rstrip()
        if not line or line.lstrip().startswith("#"):
            continue
        if not line[0].isspace():
            current_name = _package_name(line[:-1]) if line.endswith(":") else None
            continue

        if current_name is None:
            continue
        match = _VERSION_LINE.match(line)
        if match:
            version = match.group(1)
            if version != _WORKSPACE_VERSION:
                pairs.append((current_name, version))
            current_name = None

    return pairs
