"""Configuration loader for vulnerability sources.

Reads source configuration from a JSON file (default: ``.pkgcheck.json`` in
the working directory) and validates it against ``CONFIG_SCHEMA``. Each source
entry needs a ``source`` (or ``url``); optional fields are ``format``,
``name`` and ``columns``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from collections.abc import Iterable

from jsonschema import Draft202012Validator

from .sources import SourceDescriptor

DEFAULT_CONFIG_NAME = ".pkgcheck.json"
CONFIG_PATH_ENV_VAR = "PACKAGE_CHECKER_CONFIG"

CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["sources"],
    "properties": {
        "sources": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "anyOf": [{"required": ["source"]}, {"required": ["url"]}],
                "properties": {
                    "source": {"type": "string", "minLength": 1},
                    "url": {"type": "string", "minLength": 1},
                    "format": {"type": ["string", "null"]},
                    "name": {"type": ["string", "null"]},
                    "columns": {"type": ["string", "null"]},
                },
            },
        }
    },
}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be loaded or is invalid."""


@dataclass(slots=True, frozen=True)
class Settings:
    """Top-level settings container."""

    path: Path
    sources: list[SourceDescriptor]


def _format_errors(errors: Iterable) -> str:
    messages = []
    for error in errors:
        pointer = "/".join(str(p) for p in error.path)
        messages.append(f"- {pointer or '<root>'}: {error.message}")
    return "\n".join(messages)


def resolve_config_path(path: Path | str | None = None) -> Path:
    """Resolve the configuration file path.

    Priority:
    1. Explicit path argument
    2. PACKAGE_CHECKER_CONFIG environment variable
    3. ``.pkgcheck.json`` in the current directory
    """
    if path is not None:
        return Path(path)

    env_path = os.environ.get(CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path)

    return Path.cwd() / DEFAULT_CONFIG_NAME


def _descriptor_from_dict(data: dict[str, Any], index: int) -> SourceDescriptor:
    location = data.get("source") or data.get("url")
    return SourceDescriptor(
        location=location,
        format=data.get("format") or None,
        name=data.get("name") or f"Source {index + 1}",
        columns=data.get("columns") or None,
    )


def load_settings(path: Path | str | None = None) -> Settings:
    """Load and validate settings from a JSON file.

    Raises:
        ConfigError: If the file cannot be read or contains invalid data.
    """
    config_path = resolve_config_path(path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8-sig")
    except OSError as exc:
        raise ConfigError(f"Failed to read configuration file: {exc}") from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in configuration file: {exc}") from exc

    validator = Draft202012Validator(CONFIG_SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errors:
        raise ConfigError(f"Invalid configuration file {config_path}:\n{_format_errors(errors)}")

    sources = [_descriptor_from_dict(item, i) for i, item in enumerate(data["sources"])]
    return Settings(path=config_path, sources=sources)
