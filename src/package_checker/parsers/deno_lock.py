"""Parse deno.lock to capture resolved npm dependencies."""

from __future__ import annotations

import json
from typing import Any

from .errors import ExtractionError


def _npm_section(data: dict[str, Any]) -> dict[str, Any]:
    npm = data.get("npm")
    if isinstance(npm, dict):
        return npm
    # lockfile v3 nests the section under "packages"
    packages = data.get("packages")
    if isinstance(packages, dict) and isinstance(packages.get("npm"), dict):
        return packages["npm"]
    return {}


def parse(text: str) -> list[tuple[str, str]]:
    """Return list of (package, version) from deno lock file.

    Keys look like ``name@version_peer@version``; everything after the first
    underscore of the version is a peer-dependency suffix and is discarded.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    if not isinstance(data, dict):
        raise ExtractionError("lockfile must be a JSON object")

    pairs: list[tuple[str, str]] = []
    for key in _npm_section(data):
        ref = str(key)
        at = ref.find("@", 1)
        if at <= 0:
            continue
        name, version = ref[:at], ref[at + 1 :].split("_", 1)[0]
        if not version:
            continue
        pairs.append((name, version))

    return list(dict.fromkeys(pairs))
