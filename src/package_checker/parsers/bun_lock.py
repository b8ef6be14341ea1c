"""Parse bun.lock (text lockfile) to capture resolved dependencies.

bun.lock is JSON with trailing commas, so it is read line by line:

    "packages": {
      "lodash": ["lodash@4.17.21", "", {}, "sha512-..."],
      "@types/node": ["@types/node@20.1.0", "", {...}, "sha512-..."],
    }

Pinned versions declared under ``"workspaces"`` are picked up as well.
"""

from __future__ import annotations

import re

_PACKAGE_LINE = re.compile(r'^\s+"[^"]+":\s*\[\s*"([^"]+@[^"]+)"')
_WORKSPACE_PIN = re.compile(r'^\s+"([^"]+)":\s*"(\d[^"]*)",?\s*$')
_WORKSPACES_START = re.compile(r'^\s*"workspaces"\s*:\s*\{')
_STRING = re.compile(r'"(?:[^"\\]|\\.)*"')
_WORKSPACE_FIELDS = {"name", "version"}


def _split_spec(spec: str) -> tuple[str, str] | None:
    # split on the last "@" so that scoped names keep their leading "@"
    name, sep, version = spec.rpartition("@")
    if not sep or not name or not version[:1].isdigit():
        return None
    return name, version


def _brace_delta(line: str) -> int:
    bare = _STRING.sub("", line)
    return bare.count("{") - bare.count("}")


def parse(text: str) -> list[tuple[str, str]]:
    """Return list of (package, version) from bun lock file."""
    pairs: list[tuple[str, str]] = []

    workspace_depth = 0
    for line in text.splitlines():
        if workspace_depth > 0:
            workspace_depth += _brace_delta(line)
            pin = _WORKSPACE_PIN.match(line)
            if pin and pin.group(1) not in _WORKSPACE_FIELDS:
                pairs.append((pin.group(1), pin.group(2)))
            continue

        if _WORKSPACES_START.match(line):
            workspace_depth = _brace_delta(line)
            continue

        match = _PACKAGE_LINE.match(line)
        if match:
            split = _split_spec(match.group(1))
            if split is not None:
                pairs.append(split)

    return list(dict.fromkeys(pairs))
