"""Parse package.json and extract declared dependencies across sections."""

from __future__ import annotations

import json
import re

from .errors import ExtractionError

SECTIONS = (
    "dependencies",
    "devDependencies",
    "optionalDependencies",
    "peerDependencies",
)

_LEADING_OPERATORS = re.compile(r"^[\^~>=<v\s]+")


def best_effort_version(spec: str) -> str | None:
    """Strip range operators from a declared spec (``^1.2.3`` -> ``1.2.3``).

    Returns None for specs that are not version based (tags, URLs,
    ``workspace:``/``file:``/``npm:`` protocols).
    """
    cleaned = _LEADING_OPERATORS.sub("", spec.strip())
    cleaned = cleaned.split(" ", 1)[0]
    if not cleaned or not cleaned[0].isdigit():
        return None
    return cleaned


def parse(text: str) -> list[tuple[str, str]]:
    """Return list of (package, best-effort version) from all dependency sections."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"invalid JSON ({exc.msg} at line {exc.lineno})") from exc
    if not isinstance(data, dict):
        raise ExtractionError("package.json must be a JSON object")

    pairs: list[tuple[str, str]] = []
    for section in SECTIONS:
        deps = data.get(section)
        if not isinstance(deps, dict):
            continue
        for name, spec in deps.items():
            if not isinstance(spec, str):
                continue
            version = best_effort_version(spec)
            if version:
                pairs.append((name, version))

    return list(dict.fromkeys(pairs))
