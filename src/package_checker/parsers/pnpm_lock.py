"""Parse pnpm-lock.yaml to capture resolved dependencies."""

from __future__ import annotations

import re

import yaml

_PACKAGES_HEADER = re.compile(r"^packages:\s*$")
_TOP_LEVEL = re.compile(r"^\S")
_PACKAGE_KEY_LINE = re.compile(r"""^\s+['"]?(/?@?[^\s'"]+?)['"]?:\s*$""")
_V5_KEY = re.compile(r"^(@[^/@]+/[^/@]+|[^/@]+)/(\d[^/]*)$")


def split_key(key: str) -> tuple[str, str] | None:
    """Split a packages key into (name, version).

    Handles ``/name@1.2.3`` (v6), ``name@1.2.3`` (v9), ``/name/1.2.3`` and
    ``/@scope/name/1.2.3_peerhash`` (v5). Peer-dependency suffixes in
    parentheses are dropped.
    """
    ref = str(key).strip().strip("'\"").split("(", 1)[0]
    if ref.startswith("/"):
        ref = ref[1:]

    v5 = _V5_KEY.match(ref)
    if v5:
        name, version = v5.group(1), v5.group(2).split("_", 1)[0]
    elif ref.rfind("@") > 0:
        name, version = ref.rsplit("@", 1)
    else:
        return None

    if not name or not version or not version[0].isdigit():
        return None
    return name, version


def _scan_package_keys(text: str) -> list[str]:
    """Fallback for documents PyYAML cannot load: read keys of the packages block."""
    keys: list[str] = []
    in_packages = False
    for line in text.splitlines():
        if _PACKAGES_HEADER.match(line):
            in_packages = True
            continue
        if _TOP_LEVEL.match(line):
            in_packages = False
            continue
        if in_packages:
            match = _PACKAGE_KEY_LINE.match(line)
            if match and len(line) - len(line.lstrip()) == 2:
                keys.append(match.group(1))
    return keys


def parse(text: str) -> list[tuple[str, str]]:
    """Return list of (package, version) from pnpm lock file."""
    try:
        data = yaml.safe_load(text) or {}
        pkgs = data.get("packages") if isinstance(data, dict) else None
        keys = list(pkgs.keys()) if isinstance(pkgs, dict) else []
    except yaml.YAMLError:
        keys = _scan_package_keys(text)

    pairs: list[tuple[str, str]] = []
    for key in keys:
        split = split_key(key)
        if split is not None:
            pairs.append(split)

    return list(dict.fromkeys(pairs))
