#!/usr/bin/env python3
"""Local entrypoint to run the checker from a source checkout.

Usage:
  python scripts/scan.py --root . [--source path_or_url [--format csv]] [--warn-only]

This calls the same ``package_checker.cli.main`` as the installed
``package-checker`` command.
"""

from __future__ import annotations

from package_checker.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
