from __future__ import annotations

from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

from varify.policy import PolicyConfiguration

DEFAULT_CONFIG_NAME = "varify.toml"
DEFAULT_JAVA_VERSION = "11"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError):
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def policy_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("policy", {})
    return section if isinstance(section, dict) else {}


def java_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("java", {})
    return section if isinstance(section, dict) else {}


def java_version(section: TomlTable | None) -> str:
    if not isinstance(section, dict):
        return DEFAULT_JAVA_VERSION
    value = section.get("version")
    if value is None or isinstance(value, bool):
        return DEFAULT_JAVA_VERSION
    if isinstance(value, (int, str)):
        return str(value).strip() or DEFAULT_JAVA_VERSION
    return DEFAULT_JAVA_VERSION


def merge_payload(payload: TomlTable, defaults: TomlTable) -> TomlTable:
    merged = dict(defaults)
    for key, value in payload.items():
        if value is None:
            continue
        merged[key] = value
    return merged


def resolve_policy(
    overrides: TomlTable,
    root: Path | None = None,
    config_path: Path | None = None,
) -> PolicyConfiguration:
    """Explicit overrides win over ``[policy]`` in the config file."""
    merged = merge_payload(overrides, policy_defaults(root=root, config_path=config_path))
    return PolicyConfiguration.from_mapping(merged)
