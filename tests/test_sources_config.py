from __future__ import annotations

import json

import pytest

from package_checker.ingestion import ConfigError, load_settings, resolve_config_path
from package_checker.ingestion.sources_config import CONFIG_PATH_ENV_VAR, DEFAULT_CONFIG_NAME


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_settings_builds_descriptors(tmp_path):
    config = _write(
        tmp_path / ".pkgcheck.json",
        {
            "sources": [
                {"source": "vulns.json", "name": "internal"},
                {"url": "https://example.com/list.csv", "format": "csv", "columns": "2,3"},
            ]
        },
    )

    settings = load_settings(config)

    first, second = settings.sources
    assert settings.path == config
    assert (first.location, first.name, first.format) == ("vulns.json", "internal", None)
    assert second.location == "https://example.com/list.csv"
    assert second.name == "Source 2"
    assert second.format == "csv"
    assert second.columns == "2,3"


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"sources": []},
        {"sources": [{"name": "no location"}]},
        {"sources": [{"source": "a.json", "format": 3}]},
    ],
)
def test_invalid_configuration_is_rejected(tmp_path, data):
    config = _write(tmp_path / "config.json", data)
    with pytest.raises(ConfigError, match="Invalid configuration file"):
        load_settings(config)


def test_invalid_json_and_missing_file(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(ConfigError, match="Invalid JSON"):
        load_settings(broken)
    with pytest.raises(ConfigError, match="not found"):
        load_settings(tmp_path / "absent.json")


def test_resolve_config_path_priority(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(CONFIG_PATH_ENV_VAR, raising=False)
    assert resolve_config_path() == tmp_path / DEFAULT_CONFIG_NAME

    monkeypatch.setenv(CONFIG_PATH_ENV_VAR, "/etc/pkgcheck.json")
    assert str(resolve_config_path()) == "/etc/pkgcheck.json"
    assert str(resolve_config_path("explicit.json")) == "explicit.json"
