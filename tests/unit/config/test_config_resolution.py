"""Configuration resolution: sources, precedence, validation and redaction."""

import json
import logging
from pathlib import Path

import pytest

from stepflow.config import (
    ConfigResolver,
    ResolvedConfig,
    list_available_profiles,
    resolve_config,
    summarize_origins,
    was_user_supplied,
)
from stepflow.config.env_loader import EnvironmentConfigLoader
from stepflow.config.introspection import get_config_info, main
from stepflow.core.exceptions import ConfigurationError

pytestmark = pytest.mark.unit


@pytest.fixture
def project(tmp_path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    (root / "pyproject.toml").write_text(
        """
[tool.stepflow]
model = "file-model"
temperature = 0.2

[tool.stepflow.profiles.fast]
model = "fast-model"
temperature = 0.1
""",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def home_file(monkeypatch, tmp_path) -> Path:
    path = tmp_path / "home" / "stepflow.toml"
    path.parent.mkdir()
    monkeypatch.setenv("STEPFLOW_CONFIG_HOME", str(path))
    return path


class TestSources:
    def test_defaults(self):
        resolved = resolve_config()
        assert resolved.api_key is None
        assert resolved.model == "gpt-4o-mini"
        assert resolved.temperature == 0.4
        assert resolved.mode == "remote"
        assert resolved.provider == "openai"
        assert resolved.request_timeout == 30.0
        assert set(resolved.origin.values()) == {"default"}

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("STEPFLOW_API_KEY", "sk-env")
        monkeypatch.setenv("STEPFLOW_MODEL", "env-model")
        monkeypatch.setenv("STEPFLOW_TEMPERATURE", "0.6")

        resolved = resolve_config()

        assert resolved.api_key == "sk-env"
        assert resolved.model == "env-model"
        assert resolved.temperature == 0.6
        assert resolved.origin["model"] == "env"
        assert resolved.origin["mode"] == "default"

    def test_precedence_programmatic_env_project(self, monkeypatch, project):
        monkeypatch.setenv("STEPFLOW_MODEL", "env-model")

        resolved = resolve_config({"temperature": 0.9}, project_root=project)

        assert resolved.model == "env-model"
        assert resolved.origin["model"] == "env"
        assert resolved.temperature == 0.9
        assert resolved.origin["temperature"] == "programmatic"

    def test_project_file(self, project):
        resolved = resolve_config(project_root=project)
        assert resolved.model == "file-model"
        assert resolved.temperature == 0.2
        assert resolved.origin["model"] == "file"

    @pytest.mark.parametrize("via_env", [False, True])
    def test_profile_selection(self, monkeypatch, project, via_env):
        if via_env:
            monkeypatch.setenv("STEPFLOW_PROFILE", "fast")
            resolved = resolve_config(project_root=project)
        else:
            resolved = resolve_config(profile="fast", project_root=project)
        assert resolved.model == "fast-model"
        assert resolved.temperature == 0.1

    def test_project_overrides_home(self, home_file, project):
        home_file.write_text('model = "home-model"\nprovider = "gemini"\n', encoding="utf-8")

        resolved = resolve_config(project_root=project)

        assert resolved.model == "file-model"
        assert resolved.provider == "gemini"
        assert resolved.origin["provider"] == "file"

    def test_unknown_programmatic_fields_are_ignored(self):
        resolved = resolve_config({"colour": "blue"})
        assert "colour" not in resolved.origin

    def test_dotenv_file_is_overridden_by_process_env(self, monkeypatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "STEPFLOW_MODEL=dotenv-model\nSTEPFLOW_API_KEY=sk-dotenv\n", encoding="utf-8"
        )
        monkeypatch.setenv("STEPFLOW_MODEL", "process-model")

        resolved = resolve_config(use_env_file=env_file)

        assert resolved.model == "process-model"
        assert resolved.api_key == "sk-dotenv"


class TestValidation:
    @pytest.mark.parametrize("value", ["demo", "local_demo", "LOCAL-DEMO"])
    def test_mode_aliases(self, monkeypatch, value):
        monkeypatch.setenv("STEPFLOW_MODE", value)
        assert resolve_config().mode == "local-demo"

    def test_blank_key_is_missing(self, monkeypatch):
        monkeypatch.setenv("STEPFLOW_API_KEY", "   ")
        resolved = resolve_config()
        assert resolved.api_key is None
        assert resolved.has_api_key is False

    @pytest.mark.parametrize(
        "overrides",
        [{"temperature": 1.5}, {"mode": "offline"}, {"provider": "anthropic"}, {"model": ""}],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigurationError):
            resolve_config(overrides)

    def test_invalid_env_value_does_not_leak_key(self, monkeypatch):
        monkeypatch.setenv("STEPFLOW_API_KEY", "sk-secret")
        monkeypatch.setenv("STEPFLOW_TEMPERATURE", "hot")

        with pytest.raises(ConfigurationError) as exc_info:
            resolve_config()

        assert "STEPFLOW_TEMPERATURE=hot" in str(exc_info.value)
        assert "sk-secret" not in str(exc_info.value)

    def test_malformed_project_file(self, tmp_path):
        root = tmp_path / "broken"
        root.mkdir()
        (root / "pyproject.toml").write_text("[tool.stepflow\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Failed to parse TOML"):
            resolve_config(project_root=root)

    def test_malformed_home_file_is_ignored(self, home_file, caplog):
        home_file.write_text("model = \n", encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="stepflow.config.resolver"):
            resolved = resolve_config()
        assert resolved.model == "gpt-4o-mini"
        assert "Ignoring home configuration" in caplog.text

    def test_missing_env_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            resolve_config(use_env_file=tmp_path / "missing.env")


class TestResolvedConfig:
    def test_audit_and_repr_redact_the_key(self, monkeypatch):
        monkeypatch.setenv("STEPFLOW_MODEL", "env-model")

        resolved = resolve_config({"api_key": "sk-secret"})
        report = resolved.audit()

        assert "api_key: programmatic:[REDACTED]" in report
        assert "model: env:STEPFLOW_MODEL=env-model" in report
        assert "temperature: default:0.4" in report
        assert "sk-secret" not in report
        assert "sk-secret" not in str(resolved)
        assert "sk-secret" not in repr(resolved)

    def test_to_run_configuration(self):
        resolved = resolve_config({"api_key": "sk-x", "mode": "demo", "temperature": 0.25})
        config = resolved.to_run_configuration()
        assert config.api_key_present is True
        assert config.mode == "local-demo"
        assert config.temperature == 0.25
        assert config.model_name == "gpt-4o-mini"
        assert not hasattr(config, "api_key")

    def test_with_overrides_updates_origin(self):
        resolved = resolve_config().with_overrides(model="other", colour="blue")
        assert isinstance(resolved, ResolvedConfig)
        assert resolved.model == "other"
        assert resolved.origin["model"] == "programmatic"
        assert resolved.origin["temperature"] == "default"

    def test_summarize_origins(self, monkeypatch):
        monkeypatch.setenv("STEPFLOW_MODEL", "env-model")
        counts = summarize_origins(resolve_config({"mode": "demo"}).origin)
        assert counts == {"default": 4, "env": 1, "programmatic": 1}


class TestProfilesAndIntrospection:
    def test_list_available_profiles(self, home_file, project):
        home_file.write_text('[profiles.night]\ntemperature = 0.0\n', encoding="utf-8")
        assert list_available_profiles(project) == {"project": ["fast"], "home": ["night"]}

    def test_resolver_instances_are_independent(self, project):
        assert ConfigResolver().resolve(project_root=project).model == "file-model"

    def test_env_summary_redacts_key(self, monkeypatch):
        monkeypatch.setenv("STEPFLOW_API_KEY", "sk-secret")
        monkeypatch.setenv("STEPFLOW_MODE", "demo")
        assert EnvironmentConfigLoader().get_env_summary() == {
            "STEPFLOW_API_KEY": "<redacted>",
            "STEPFLOW_MODE": "demo",
        }

    def test_config_info_reports_warnings(self):
        info = get_config_info()
        assert info["status"] == "valid"
        assert info["config"]["has_api_key"] is False
        assert any("No API key" in w for w in info["validation"]["warnings"])

    def test_check_exit_codes(self, monkeypatch):
        assert main(["--check"]) == 0
        monkeypatch.setenv("STEPFLOW_TEMPERATURE", "7")
        assert main(["--check"]) == 1

    def test_json_output(self, capsys):
        assert main(["--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["sources"]["model"] == "default"

    def test_text_output_shows_sources(self, monkeypatch, capsys):
        monkeypatch.setenv("STEPFLOW_API_KEY", "sk-secret")
        assert main([]) == 0
        out = capsys.readouterr().out
        assert "=== Effective Configuration ===" in out
        assert "api_key: [SET]" in out
        assert "api_key: env:[REDACTED]" in out
        assert "sk-secret" not in out


def test_was_user_supplied(monkeypatch):
    monkeypatch.setenv("STEPFLOW_MODE", "demo")
    origin = resolve_config({"model": "gpt-4.1"}).origin
    assert was_user_supplied(origin, "mode")
    assert was_user_supplied(origin, "model")
    assert not was_user_supplied(origin, "temperature")
