"""Repository lockfile and manifest discovery utilities."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from .models import FileDescriptor
from .parsers import ecosystem_for

logger = logging.getLogger(__name__)

EXCLUDES = {"node_modules", ".git", ".yarn"}


def _git_ignored(root: Path, paths: list[Path]) -> set[Path]:
    """Return the subset of ``paths`` that git reports as ignored.

    Outside a git work tree (or without git installed) nothing is ignored.
    """
    if not paths:
        return set()
    try:
        proc = subprocess.run(
            ["git", "-C", str(root), "check-ignore", "--stdin"],
            input="\n".join(str(p) for p in paths),
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        logger.debug("git unavailable, ignore rules not applied: %s", exc)
        return set()

    # 0: some paths ignored, 1: none ignored, anything else: not a repository
    if proc.returncode not in (0, 1):
        return set()
    return {Path(line) for line in proc.stdout.splitlines() if line}


def discover_manifests(root: Path, respect_gitignore: bool = True) -> list[FileDescriptor]:
    """Find lockfiles and package.json manifests recursively under root.

    Targets include: package-lock.json, npm-shrinkwrap.json, yarn.lock,
    pnpm-lock.yaml, bun.lock, deno.lock and package.json. Vendor directories
    are excluded; inside a git work tree, ignored files are skipped too.
    """
    root = root.resolve()
    found: list[Path] = []

    def should_skip(p: Path) -> bool:
        parts = set(p.parts)
        return any(ex in parts for ex in EXCLUDES)

    for path in root.rglob("*"):
        if ecosystem_for(path.name) is None:
            continue
        if not path.is_file():
            continue
        if should_skip(path.relative_to(root)):
            continue
        found.append(path)

    if respect_gitignore:
        ignored = _git_ignored(root, found)
        found = [p for p in found if p not in ignored]

    return [FileDescriptor(path=str(p), ecosystem=ecosystem_for(p.name)) for p in sorted(found)]
