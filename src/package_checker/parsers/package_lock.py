"""Parse npm package-lock.json / npm-shrinkwrap.json to capture resolved dependencies."""

from __future__ import annotations

import json
from typing import Any

from .errors import ExtractionError

NODE_MODULES = "node_modules/"


def _walk_v1(deps: dict[str, Any], pairs: list[tuple[str, str]]) -> None:
    for name, meta in deps.items():
        if not isinstance(meta, dict):
            continue
        version = meta.get("version")
        if isinstance(version, str) and version:
            pairs.append((name, version))
        nested = meta.get("dependencies")
        if isinstance(nested, dict):
            _walk_v1(nested, pairs)


def parse(text: str) -> list[tuple[str, str]]:
    """Return list of (package, version) from lockfile.

    Supports npm v1 ("dependencies" tree) and v2+ ("packages" map keyed by
    ``node_modules/<name>``, possibly nested).
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    if not isinstance(data, dict):
        raise ExtractionError("lockfile must be a JSON object")

    pairs: list[tuple[str, str]] = []

    # npm v2+ format
    packages = data.get("packages")
    if isinstance(packages, dict):
        for key, meta in packages.items():
            if not isinstance(meta, dict) or NODE_MODULES not in key:
                continue
            name = key.rsplit(NODE_MODULES, 1)[1]
            version = meta.get("version")
            if name and isinstance(version, str) and version:
                pairs.append((name, version))

    # npm v1 format
    deps = data.get("dependencies")
    if isinstance(deps, dict):
        _walk_v1(deps, pairs)

    return list(dict.fromkeys(pairs))
