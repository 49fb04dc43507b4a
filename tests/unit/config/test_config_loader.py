"""Tests for configuration loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from analogbind.core.config.loader import (
    LOG_LEVEL_ENV,
    detect_format,
    load_app_config,
    load_config,
)
from analogbind.core.config.models import AppConfig, BackendConfig, EditorConfig


class TestDetectFormat:
    @pytest.mark.parametrize(
        ("name", "fmt"),
        [("app.json", "json"), ("app.yaml", "yaml"), ("APP.YML", "yaml")],
    )
    def test_known(self, name: str, fmt: str) -> None:
        assert detect_format(name) == fmt

    def test_unsupported(self) -> None:
        with pytest.raises(ValueError, match="Unsupported config format"):
            detect_format("app.toml")


class TestLoadConfig:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_empty_yaml_is_empty_dict(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == {}

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_config(path)

    def test_root_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="must be a mapping"):
            load_config(path)


class TestLoadAppConfig:
    def test_defaults_when_file_missing(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        config = load_app_config(tmp_path / "analogbind.yaml")
        assert config == AppConfig()
        assert config.sync.debounce_seconds == 1.0
        assert config.editor.max_movable_points == 12

    def test_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        path = tmp_path / "analogbind.yaml"
        path.write_text(
            "logging:\n  level: DEBUG\n"
            "sync:\n  debounce_seconds: 0.5\n"
            "backend:\n  kind: file\n  path: ./store\n",
            encoding="utf-8",
        )

        config = load_app_config(path)

        assert config.logging.level == "DEBUG"
        assert config.sync.debounce_seconds == 0.5
        assert config.backend.kind == "file"
        assert config.backend.path == "./store"

    def test_json(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        path = tmp_path / "analogbind.json"
        path.write_text(json.dumps({"curves": {"lut_size": 512}}), encoding="utf-8")
        assert load_app_config(path).curves.lut_size == 512

    def test_unknown_top_level_keys_are_ignored(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        path = tmp_path / "analogbind.yaml"
        path.write_text("future_section:\n  enabled: true\n", encoding="utf-8")
        assert load_app_config(path) == AppConfig()

    def test_env_overrides_log_level(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV, "warning")
        assert load_app_config(tmp_path / "missing.yaml").logging.level == "WARNING"

    def test_invalid_env_level(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(LOG_LEVEL_ENV, "chatty")
        with pytest.raises(ValidationError):
            load_app_config(tmp_path / "missing.yaml")

    def test_invalid_level_in_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        path = tmp_path / "analogbind.yaml"
        path.write_text("logging:\n  level: LOUD\n", encoding="utf-8")
        with pytest.raises(ValidationError):
            load_app_config(path)


class TestConfigModels:
    def test_file_backend_needs_path(self) -> None:
        with pytest.raises(ValidationError, match="backend.path is required"):
            BackendConfig(kind="file")

    def test_editor_config_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValidationError):
            EditorConfig(max_points=3)

    def test_editor_point_limit_bounds(self) -> None:
        with pytest.raises(ValidationError):
            EditorConfig(max_movable_points=15)
