"""Configuration file loading."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kcl_docgen.errors import ConfigError
from kcl_docgen.paths import Platform
from kcl_docgen.render import DocFormat

DEFAULT_CONFIG_FILENAME = "kcl-docgen.toml"
_KNOWN_KEYS = {"package_path", "target", "format", "ignore_deprecated", "escape_html", "platform"}


@dataclass
class DocConfig:
    """Settings read from the ``[docgen]`` table of a config file."""

    package_path: Path | None = None
    target: Path | None = None
    doc_format: DocFormat = DocFormat.MARKDOWN
    ignore_deprecated: bool = False
    escape_html: bool = False
    platform: Platform | None = None


def load_config(path: str | Path) -> DocConfig:
    """Load the configuration stored at *path*.

    Relative paths in the file are resolved against the directory of the
    file itself.
    """
    config_path = Path(path)
    try:
        with config_path.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError as err:
        raise ConfigError(f"config file not found: {config_path}") from err
    except tomllib.TOMLDecodeError as err:
        raise ConfigError(f"failed to parse config file {config_path}: {err}") from err

    table = raw.get("docgen", {})
    if not isinstance(table, dict):
        raise ConfigError("config 'docgen' must be a table")
    unknown = sorted(set(table) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"unknown config keys in 'docgen': {', '.join(unknown)}")

    base = config_path.resolve().parent
    config = DocConfig(
        package_path=_optional_path(table, "package_path", base),
        target=_optional_path(table, "target", base),
        ignore_deprecated=_optional_bool(table, "ignore_deprecated"),
        escape_html=_optional_bool(table, "escape_html"),
    )
    if "format" in table:
        config.doc_format = _parse_choice(table["format"], "format", DocFormat.parse)
    if "platform" in table:
        config.platform = _parse_choice(table["platform"], "platform", Platform.from_name)
    return config


def _optional_path(table: dict[str, Any], key: str, base: Path) -> Path | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"config {key} must be a non-empty string")
    return base / value


def _optional_bool(table: dict[str, Any], key: str) -> bool:
    value = table.get(key, False)
    if not isinstance(value, bool):
        raise ConfigError(f"config {key} must be a boolean")
    return value


def _parse_choice(value: Any, key: str, parse: Any) -> Any:
    if not isinstance(value, str):
        raise ConfigError(f"config {key} must be a string")
    try:
        return parse(value)
    except ValueError as err:
        raise ConfigError(f"config {key}: {err}") from err
