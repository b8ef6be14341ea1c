"""Command-line entrypoint: check projects for vulnerable packages."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .core import NoSourcesError, scan_repository
from .ingestion import ConfigError, SourceDescriptor, get_known_formats, load_settings
from .ingestion.sources_config import resolve_config_path
from .report import EXIT_CONFIG_ERROR, EXIT_OK, exit_status
from .summary import render_summary

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
WARN_ONLY_ENV_VAR = "PACKAGE_CHECKER_WARN_ONLY"


class _SourceAction(argparse.Action):
    """``--source`` starts a new source entry."""

    def __call__(self, parser, namespace, values, option_string=None):
        sources = list(getattr(namespace, self.dest) or [])
        sources.append({"location": values})
        setattr(namespace, self.dest, sources)


class _SourceOptionAction(argparse.Action):
    """``--format`` / ``--csv-columns`` apply to the preceding ``--source``."""

    def __call__(self, parser, namespace, values, option_string=None):
        sources = getattr(namespace, "sources") or []
        if not sources:
            parser.error(f"{option_string} must follow a --source")
        sources[-1][self.dest] = values


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="package-checker",
        description=__doc__,
        epilog=f"Known formats: {', '.join(get_known_formats())}",
    )
    parser.add_argument("--root", type=Path, default=Path("."), help="Directory to scan")
    parser.add_argument(
        "-s",
        "--source",
        dest="sources",
        action=_SourceAction,
        default=[],
        help="Vulnerability source path or URL (repeatable)",
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="format",
        action=_SourceOptionAction,
        help="Format of the preceding source (json, csv, purl)",
    )
    parser.add_argument(
        "--csv-columns",
        dest="columns",
        action=_SourceOptionAction,
        help='Columns of the preceding CSV source, e.g. "1,2" or "package_name,package_versions"',
    )
    parser.add_argument("-c", "--config", type=Path, default=None, help="Configuration file")
    parser.add_argument("--no-config", action="store_true", help="Skip loading the config file")
    parser.add_argument("--json", action="store_true", help="Print the JSON report")
    parser.add_argument("--summary", type=Path, default=None, help="Write a Markdown summary")
    parser.add_argument("--warn-only", action="store_true", help="Always exit 0")
    parser.add_argument(
        "--strict", action="store_true", help="Also fail on package.json declared matches"
    )
    parser.add_argument("--workers", type=int, default=None, help="Worker threads")
    parser.add_argument(
        "--no-gitignore", action="store_true", help="Scan files ignored by git as well"
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser.parse_args(argv)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT)


def collect_sources(args: argparse.Namespace) -> list[SourceDescriptor]:
    """Sources from the config file (unless disabled) followed by ``--source`` ones."""
    descriptors: list[SourceDescriptor] = []

    if not args.no_config:
        config_path = resolve_config_path(args.config)
        if args.config is not None or config_path.exists():
            settings = load_settings(config_path)
            logger.info("Loaded configuration from %s", settings.path)
            descriptors.extend(settings.sources)

    for entry in args.sources:
        descriptors.append(
            SourceDescriptor(
                location=entry["location"],
                format=entry.get("format"),
                name=entry["location"],
                columns=entry.get("columns"),
            )
        )
    return descriptors


def _warn_only_env() -> bool:
    return os.getenv(WARN_ONLY_ENV_VAR, "").strip().lower() in {"1", "true", "yes", "y"}


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.verbose)

    try:
        sources = collect_sources(args)
    except ConfigError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if not sources:
        print(
            "ERROR: No data sources configured. Create a .pkgcheck.json file, "
            "or use --source / --config.",
            file=sys.stderr,
        )
        return EXIT_CONFIG_ERROR

    try:
        report = scan_repository(
            args.root,
            sources,
            max_workers=args.workers,
            respect_gitignore=not args.no_gitignore,
        )
    except NoSourcesError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    summary = render_summary(report)
    if args.summary:
        args.summary.write_text(summary, encoding="utf-8")
    if args.json:
        print(json.dumps(report, indent=2))
    else:
        print(summary, end="")

    if args.warn_only or _warn_only_env():
        return EXIT_OK
    return exit_status(report, strict=args.strict)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
