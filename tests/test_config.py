"""Tests for mbuild.config -- XDG paths, config files, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from mbuild.config import (
    get_config_dir,
    get_data_dir,
    load_global_config,
    load_project_config,
    resolve_config,
)
from mbuild.exceptions import ConfigError
from mbuild.models import MbuildConfig


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


class TestPaths:
    def test_config_dir_xdg(self, isolated_config: Path) -> None:
        assert get_config_dir() == isolated_config / "config" / "mbuild"

    def test_config_dir_not_created(self, isolated_config: Path) -> None:
        assert not get_config_dir().exists()

    def test_data_dir_created(self, isolated_config: Path) -> None:
        path = get_data_dir()
        assert path == isolated_config / "data" / "mbuild"
        assert path.is_dir()

    def test_fallback_on_macos(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("mbuild.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))
        assert get_config_dir() == tmp_path / ".mbuild"
        assert get_data_dir() == tmp_path / ".mbuild"


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        assert load_global_config() == MbuildConfig()

    def test_loads_file(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"host_name": "Birch"})
        assert load_global_config().host_name == "Birch"

    def test_invalid_json(self, isolated_config: Path) -> None:
        path = get_config_dir() / "config.json"
        path.parent.mkdir(parents=True)
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_unknown_key(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"hots_name": "typo"})
        with pytest.raises(ConfigError):
            load_global_config()

    def test_not_an_object(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", ["swift"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_global_config()

    def test_empty_command_rejected(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"build_tool": []})
        with pytest.raises(ConfigError):
            load_global_config()


class TestProjectConfig:
    def test_missing(self, tmp_path: Path) -> None:
        assert load_project_config(tmp_path) is None

    def test_loads(self, tmp_path: Path) -> None:
        _write_json(tmp_path / "mbuild.json", {"archiver": ["ditto"]})
        assert load_project_config(tmp_path) == {"archiver": ["ditto"]}

    def test_defaults_to_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(tmp_path / "mbuild.json", {"host_name": "Cwd"})
        monkeypatch.chdir(tmp_path)
        assert load_project_config() == {"host_name": "Cwd"}

    def test_invalid(self, tmp_path: Path) -> None:
        (tmp_path / "mbuild.json").write_text("[")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config(tmp_path)


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        config = resolve_config(isolated_config)
        assert config.host_name == "Maple"
        assert config.build_tool == ["swift", "build"]
        assert config.archiver == ["zip"]
        assert config.check_prefs_exit is True

    def test_project_overrides_global(self, isolated_config: Path) -> None:
        _write_json(get_config_dir() / "config.json", {"host_name": "Global", "archiver": ["gzip"]})
        _write_json(isolated_config / "mbuild.json", {"host_name": "Project"})
        config = resolve_config(isolated_config)
        assert config.host_name == "Project"
        assert config.archiver == ["gzip"]

    def test_env_overrides_project(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write_json(isolated_config / "mbuild.json", {"host_name": "Project"})
        monkeypatch.setenv("MBUILD_HOST", "Env")
        monkeypatch.setenv("MBUILD_INSTALL_DIR", "/tmp/leafs")
        config = resolve_config(isolated_config)
        assert config.host_name == "Env"
        assert config.install_dir == "/tmp/leafs"

    def test_invalid_project_value(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "mbuild.json", {"check_prefs_exit": "sometimes"})
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config(isolated_config)

    def test_empty_staging_dir_rejected(self, isolated_config: Path) -> None:
        _write_json(isolated_config / "mbuild.json", {"staging_dir": ""})
        with pytest.raises(ConfigError, match="staging_dir"):
            resolve_config(isolated_config)
