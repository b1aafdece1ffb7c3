# MODSYNC Config Tests
# Tests for configuration loading and validation

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from modsync.config.defaults import DEFAULT_CONFIG, generate_default_config
from modsync.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    validate_config_file,
)
from modsync.config.schema import ModsyncConfig, ModuleEntry
from modsync.module.identity import ModuleIdentity
from modsync.registry import Visibility
from modsync.sync import Module


@pytest.fixture
def sample_config(temp_dir: Path) -> dict:
    """Create sample configuration dict."""
    return {
        "git": {"remote": "upstream"},
        "registry": {"path": str(temp_dir / "registry"), "create_visibility": "private"},
        "modules": [
            {"dir": "proto", "identity": "buf.build/acme/petapis"},
            {"dir": "./api/"},
        ],
        "all_branches": True,
        "output": {"verbose": True, "colored": False},
    }


@pytest.fixture
def config_file(temp_dir: Path, sample_config: dict) -> Path:
    """Create a configuration file."""
    config_path = temp_dir / "modsync.yaml"
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(sample_config, f, default_flow_style=False)
    return config_path


class TestModsyncConfig:
    """Tests for ModsyncConfig schema."""

    def test_defaults(self):
        config = ModsyncConfig()
        assert config.git.remote == "origin"
        assert config.modules == []
        assert config.all_branches is False
        assert config.registry.create_visibility is None
        assert "~" not in config.registry.path

    def test_full_config(self, sample_config: dict):
        config = ModsyncConfig.model_validate(sample_config)
        assert config.git.remote == "upstream"
        assert config.registry.create_visibility == Visibility.PRIVATE
        assert config.get_modules() == [
            Module("proto", ModuleIdentity.parse("buf.build/acme/petapis")),
            Module("api"),
        ]

    def test_duplicate_modules(self):
        with pytest.raises(ValidationError, match="duplicate module"):
            ModsyncConfig.model_validate({"modules": [{"dir": "proto"}, {"dir": "./proto"}]})

    def test_invalid_identity(self):
        with pytest.raises(ValidationError):
            ModuleEntry(dir="proto", identity="petapis")

    def test_invalid_dir(self):
        with pytest.raises(ValidationError):
            ModuleEntry(dir="../outside")

    def test_invalid_visibility(self):
        with pytest.raises(ValidationError):
            ModsyncConfig.model_validate({"registry": {"create_visibility": "secret"}})


class TestConfigLoader:
    """Tests for config loading and saving."""

    def test_load(self, config_file: Path):
        config = load_config(config_file)
        assert config.all_branches is True
        assert len(config.modules) == 2

    def test_load_partial_merges_defaults(self, temp_dir: Path):
        path = temp_dir / "partial.yaml"
        path.write_text("registry:\n  create_visibility: public\n", encoding="utf-8")
        config = load_config(path)
        assert config.git.remote == "origin"
        assert config.output.colored is True
        assert config.registry.create_visibility == Visibility.PUBLIC
        assert config.registry.path.endswith("registry")

    def test_load_empty_file(self, temp_dir: Path):
        path = temp_dir / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path).modules == []

    def test_explicit_missing_file(self, temp_dir: Path):
        with pytest.raises(FileNotFoundError):
            load_config(temp_dir / "missing.yaml")

    def test_default_location_missing(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MODSYNC_CONFIG", str(temp_dir / "missing.yaml"))
        assert load_config().modules == []

    def test_env_override(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MODSYNC_CONFIG", str(temp_dir / "custom.yaml"))
        assert get_config_path() == temp_dir / "custom.yaml"

    def test_default_path_in_cwd(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("MODSYNC_CONFIG", raising=False)
        monkeypatch.chdir(temp_dir)
        assert get_config_path() == temp_dir / "modsync.yaml"

    def test_ensure_config_exists(self, temp_dir: Path):
        path = temp_dir / "new.yaml"
        assert ensure_config_exists(path) == (path, True)
        assert ensure_config_exists(path) == (path, False)
        assert load_config(path).modules == []


class TestValidateConfigFile:
    """Tests for validate_config_file."""

    def test_valid(self, config_file: Path):
        assert validate_config_file(config_file) == (True, [])

    def test_missing(self, temp_dir: Path):
        valid, errors = validate_config_file(temp_dir / "missing.yaml")
        assert not valid
        assert "not found" in errors[0]

    def test_invalid_yaml(self, temp_dir: Path):
        path = temp_dir / "bad.yaml"
        path.write_text("modules: [\n", encoding="utf-8")
        valid, errors = validate_config_file(path)
        assert not valid
        assert "Invalid YAML" in errors[0]

    def test_schema_errors(self, temp_dir: Path):
        path = temp_dir / "bad.yaml"
        path.write_text("modules:\n  - dir: proto\n    identity: petapis\n", encoding="utf-8")
        valid, errors = validate_config_file(path)
        assert not valid
        assert errors[0].startswith("modules -> 0 -> identity")

    def test_no_modules(self, temp_dir: Path):
        path = temp_dir / "empty-modules.yaml"
        path.write_text("all_branches: true\n", encoding="utf-8")
        assert validate_config_file(path) == (False, ["No modules defined"])


class TestDefaults:
    """Tests for default configuration."""

    def test_default_config_is_valid(self):
        config = ModsyncConfig.model_validate(DEFAULT_CONFIG)
        assert config.modules == []

    def test_template_parses(self):
        template = generate_default_config()
        assert template.startswith("# MODSYNC")
        assert yaml.safe_load(template) == DEFAULT_CONFIG
