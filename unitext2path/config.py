"""Configuration for unitext2path.

Settings are read from a YAML file. The file is looked up, in order, at
an explicit path, at ``$UT2P_CONFIG``, then at
``~/.config/unitext2path/config.yaml``; if none exists the built-in
defaults apply. Example::

    fallback_family: Noto+Sans
    enable_emoji: true
    font_dirs:
      - ~/fonts
    timeout: 20
    scripts:
      - tag: Ethi
        ranges: [[0x1200, 0x137F]]
        families: [Noto+Sans+Ethiopic]
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from unitext2path.emoji import TWEMOJI_BASE_URL
from unitext2path.exceptions import ConfigError
from unitext2path.text.scripts import DEFAULT_SCRIPT_TABLE, ScriptEntry, ScriptTable

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "UT2P_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/unitext2path/config.yaml")


@dataclass
class Config:
    fallback_family: str | None = "Noto+Sans"
    enable_emoji: bool = True
    enable_international_fonts: bool = True
    emoji_placeholder: bool = True
    emoji_base_url: str = TWEMOJI_BASE_URL
    remote_fonts: bool = True
    font_dirs: list[Path] = field(default_factory=list)
    font_cache_dir: Path | None = None
    timeout: float | None = 30.0
    request_timeout: float = 10.0
    max_workers: int = 8
    precision: int = 2
    scripts: list[ScriptEntry] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load configuration from the first config file found.

        Args:
            path: Explicit config file; it must exist.

        Raises:
            ConfigError: The file is missing (explicit path only), unreadable
                or contains invalid values.
        """
        if path is not None:
            config_path = Path(path).expanduser()
            if not config_path.is_file():
                raise ConfigError(f"Config file not found: {config_path}")
        else:
            env_path = os.environ.get(CONFIG_ENV_VAR)
            config_path = Path(env_path).expanduser() if env_path else DEFAULT_CONFIG_PATH.expanduser()
            if not config_path.is_file():
                if env_path:
                    raise ConfigError(f"Config file not found: {config_path}", details={"env": CONFIG_ENV_VAR})
                return cls()

        try:
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Cannot read {config_path}: {e}") from e

        logger.debug("Loaded config from %s", config_path)
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: Any) -> Config:
        """Build a Config from parsed YAML, validating every key."""
        if not isinstance(data, dict):
            raise ConfigError("config: top level must be a mapping")

        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"{unknown[0]}: unknown key")

        values: dict[str, Any] = {}
        for key, value in data.items():
            parser = _PARSERS[key]
            values[key] = parser(key, value)
        return cls(**values)

    def script_table(self, base: ScriptTable = DEFAULT_SCRIPT_TABLE) -> ScriptTable:
        """Script table with configured entries placed ahead of ``base``."""
        if not self.scripts:
            return base
        return base.extended(self.scripts)


def _bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{key}: expected true or false, got {value!r}")
    return value


def _str(key: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{key}: expected a non-empty string")
    return value.strip()


def _optional_str(key: str, value: Any) -> str | None:
    return None if value is None else _str(key, value)


def _path(key: str, value: Any) -> Path:
    return Path(_str(key, value)).expanduser()


def _optional_path(key: str, value: Any) -> Path | None:
    return None if value is None else _path(key, value)


def _paths(key: str, value: Any) -> list[Path]:
    if not isinstance(value, list):
        raise ConfigError(f"{key}: expected a list of directories")
    return [_path(f"{key}[{i}]", item) for i, item in enumerate(value)]


def _positive_number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{key}: expected a positive number, got {value!r}")
    return float(value)


def _optional_positive_number(key: str, value: Any) -> float | None:
    return None if value is None else _positive_number(key, value)


def _int_in(low: int, high: int):
    def parse(key: str, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or not low <= value <= high:
            raise ConfigError(f"{key}: expected an integer between {low} and {high}, got {value!r}")
        return value

    return parse


def _code_point(key: str, value: Any) -> int:
    # strings are hex: "U+0600", "0x0600" or "0600"
    if isinstance(value, str):
        text = value.strip().upper()
        for prefix in ("U+", "0X"):
            if text.startswith(prefix):
                text = text[len(prefix) :]
        try:
            value = int(text, 16)
        except ValueError:
            raise ConfigError(f"{key}: invalid code point {value!r}") from None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0x10FFFF:
        raise ConfigError(f"{key}: invalid code point {value!r}")
    return value


def _script_entry(key: str, value: Any) -> ScriptEntry:
    if not isinstance(value, dict):
        raise ConfigError(f"{key}: expected a mapping with tag, ranges and families")
    extra = sorted(set(value) - {"tag", "ranges", "families", "cjk"})
    if extra:
        raise ConfigError(f"{key}.{extra[0]}: unknown key")

    tag = _str(f"{key}.tag", value.get("tag"))

    ranges = value.get("ranges")
    if not isinstance(ranges, list) or not ranges:
        raise ConfigError(f"{key}.ranges: expected a non-empty list of [start, end] pairs")
    parsed_ranges = []
    for i, pair in enumerate(ranges):
        where = f"{key}.ranges[{i}]"
        if not isinstance(pair, (list, tuple)) or len(pair) != 2:
            raise ConfigError(f"{where}: expected [start, end]")
        start, end = _code_point(where, pair[0]), _code_point(where, pair[1])
        if start > end:
            raise ConfigError(f"{where}: start is after end")
        parsed_ranges.append((start, end))

    families = value.get("families")
    if isinstance(families, str):
        families = [families]
    if not isinstance(families, list) or not families:
        raise ConfigError(f"{key}.families: expected a non-empty list of family names")
    parsed_families = tuple(_str(f"{key}.families[{i}]", f) for i, f in enumerate(families))

    cjk = _bool(f"{key}.cjk", value.get("cjk", False))
    return ScriptEntry(tag, tuple(parsed_ranges), parsed_families, cjk)


def _scripts(key: str, value: Any) -> list[ScriptEntry]:
    if not isinstance(value, list):
        raise ConfigError(f"{key}: expected a list of script entries")
    return [_script_entry(f"{key}[{i}]", item) for i, item in enumerate(value)]


_PARSERS = {
    "fallback_family": _optional_str,
    "enable_emoji": _bool,
    "enable_international_fonts": _bool,
    "emoji_placeholder": _bool,
    "emoji_base_url": _str,
    "remote_fonts": _bool,
    "font_dirs": _paths,
    "font_cache_dir": _optional_path,
    "timeout": _optional_positive_number,
    "request_timeout": _positive_number,
    "max_workers": _int_in(1, 64),
    "precision": _int_in(0, 10),
    "scripts": _scripts,
}
