"""Unit tests for unitext2path.config.

Tests cover:
- Config file lookup order (explicit path, environment, home directory)
- Value validation and error messages
- Script table entries from configuration
"""

from pathlib import Path

import pytest

from unitext2path.config import CONFIG_ENV_VAR, Config
from unitext2path.exceptions import ConfigError
from unitext2path.text.scripts import DEFAULT_SCRIPT_TABLE


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty HOME and no config environment variable."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    return home


class TestLoad:
    """Tests for Config.load()."""

    def test_explicit_path(self, config_file: Path, font_dir: Path) -> None:
        config = Config.load(config_file)
        assert config.remote_fonts is False
        assert config.enable_emoji is False
        assert config.font_dirs == [font_dir]
        assert config.timeout == 10.0

    def test_explicit_path_must_exist(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            Config.load(tmp_path / "nope.yaml")

    def test_environment_variable(
        self, config_file: Path, isolated_home: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))
        assert Config.load().remote_fonts is False

    def test_environment_variable_must_exist(
        self, tmp_path: Path, isolated_home: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.yaml"))
        with pytest.raises(ConfigError, match="not found"):
            Config.load()

    def test_home_config(self, isolated_home: Path) -> None:
        path = isolated_home / ".config" / "unitext2path" / "config.yaml"
        path.parent.mkdir(parents=True)
        path.write_text("precision: 4\n", encoding="utf-8")
        assert Config.load().precision == 4

    def test_defaults_without_any_file(self, isolated_home: Path) -> None:
        assert Config.load() == Config()

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert Config.load(path) == Config()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("timeout: [1, 2\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            Config.load(path)


class TestFromDict:
    """Tests for Config.from_dict()."""

    def test_defaults(self) -> None:
        config = Config.from_dict({})
        assert config.fallback_family == "Noto+Sans"
        assert config.enable_emoji is True
        assert config.timeout == 30.0
        assert config.max_workers == 8

    def test_nullable_values(self) -> None:
        config = Config.from_dict({"timeout": None, "fallback_family": None, "font_cache_dir": None})
        assert config.timeout is None
        assert config.fallback_family is None

    def test_paths_are_expanded(self, isolated_home: Path) -> None:
        config = Config.from_dict({"font_dirs": ["~/fonts"], "font_cache_dir": "~/cache"})
        assert config.font_dirs == [isolated_home / "fonts"]
        assert config.font_cache_dir == isolated_home / "cache"

    def test_top_level_must_be_mapping(self) -> None:
        with pytest.raises(ConfigError, match="top level must be a mapping"):
            Config.from_dict(["timeout", 3])

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            Config.from_dict({"colour": "red"})
        assert str(exc_info.value) == "colour: unknown key"

    @pytest.mark.parametrize(
        "data,key",
        [
            ({"timeout": -1}, "timeout"),
            ({"timeout": True}, "timeout"),
            ({"enable_emoji": "yes"}, "enable_emoji"),
            ({"max_workers": 0}, "max_workers"),
            ({"precision": 11}, "precision"),
            ({"font_dirs": "fonts"}, "font_dirs"),
            ({"font_dirs": [""]}, "font_dirs[0]"),
            ({"emoji_base_url": ""}, "emoji_base_url"),
        ],
    )
    def test_invalid_values_name_the_key(self, data: dict, key: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            Config.from_dict(data)
        assert str(exc_info.value).startswith(f"{key}:")


class TestScripts:
    """Tests for configured script entries."""

    def test_script_entry(self) -> None:
        config = Config.from_dict(
            {
                "scripts": [
                    {
                        "tag": "Ethi",
                        "ranges": [["U+1200", "0x137F"], [0x2D80, 0x2DDF]],
                        "families": "Noto+Sans+Ethiopic",
                    }
                ]
            }
        )
        [entry] = config.scripts
        assert entry.tag == "Ethi"
        assert entry.ranges == ((0x1200, 0x137F), (0x2D80, 0x2DDF))
        assert entry.families == ("Noto+Sans+Ethiopic",)
        assert entry.cjk is False

    def test_script_table_places_entries_first(self) -> None:
        config = Config.from_dict(
            {"scripts": [{"tag": "Arab", "ranges": [["0600", "06FF"]], "families": ["Amiri"], "cjk": False}]}
        )
        table = config.script_table()
        assert table.script_for(0x0627) == "Arab"
        assert table.families("Arab") == ("Amiri",)
        assert len(table) == len(DEFAULT_SCRIPT_TABLE)

    def test_no_scripts_keeps_default_table(self) -> None:
        assert Config().script_table() is DEFAULT_SCRIPT_TABLE

    @pytest.mark.parametrize(
        "entry,message",
        [
            ({"tag": "Ethi", "ranges": [[0x137F, 0x1200]], "families": ["X"]}, "scripts[0].ranges[0]: start is after end"),
            ({"tag": "Ethi", "ranges": [[0x1200]], "families": ["X"]}, "scripts[0].ranges[0]: expected [start, end]"),
            ({"tag": "Ethi", "ranges": [], "families": ["X"]}, "scripts[0].ranges:"),
            ({"tag": "Ethi", "ranges": [["zz", 1]], "families": ["X"]}, "scripts[0].ranges[0]: invalid code point"),
            ({"tag": "Ethi", "ranges": [[0, 0x110000]], "families": ["X"]}, "scripts[0].ranges[0]: invalid code point"),
            ({"tag": "Ethi", "ranges": [[1, 2]], "families": []}, "scripts[0].families:"),
            ({"tag": "Ethi", "ranges": [[1, 2]], "families": ["X"], "size": 3}, "scripts[0].size: unknown key"),
            ({"ranges": [[1, 2]], "families": ["X"]}, "scripts[0].tag:"),
        ],
    )
    def test_invalid_entries(self, entry: dict, message: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            Config.from_dict({"scripts": [entry]})
        assert str(exc_info.value).startswith(message)
