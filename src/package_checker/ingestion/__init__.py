"""Utilities for fetching, parsing and merging vulnerability sources."""

from .aggregation import SourceAggregation
from .purl_source import aggregate_purl_payload, parse_purl
from .structured_source import aggregate_structured_payload
from .tabular_source import aggregate_tabular_payload
from .sources import (
    FORMAT_HANDLERS,
    SourceDescriptor,
    SourceError,
    SourceFetchError,
    SourceFormat,
    SourceParseError,
    UnsupportedFormatError,
    detect_format,
    fetch_source,
    get_known_formats,
    load_source,
    load_sources,
    load_sources_with_status,
    parse_source,
)
from .sources_config import (
    ConfigError,
    Settings,
    load_settings,
    resolve_config_path,
)

__all__ = [
    # Format parsers
    "SourceAggregation",
    "aggregate_purl_payload",
    "aggregate_structured_payload",
    "aggregate_tabular_payload",
    "parse_purl",
    # Loading
    "FORMAT_HANDLERS",
    "SourceDescriptor",
    "SourceError",
    "SourceFetchError",
    "SourceFormat",
    "SourceParseError",
    "UnsupportedFormatError",
    "detect_format",
    "fetch_source",
    "get_known_formats",
    "load_source",
    "load_sources",
    "load_sources_with_status",
    "parse_source",
    # Configuration
    "ConfigError",
    "Settings",
    "load_settings",
    "resolve_config_path",
]
