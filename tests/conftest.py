"""
Global test configuration.
"""

from contextlib import suppress
import os

import pytest

from stepflow.config import RunConfiguration

# --- Environment Isolation (Autouse) ---


@pytest.fixture(autouse=True)
def block_dotenv(monkeypatch):
    """Prevent python-dotenv from loading a developer's .env file during tests.

    Tests should only see the environment that they explicitly set.
    """
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_stepflow_env(request, monkeypatch):
    """Ensure a clean STEPFLOW_* environment for each test.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the current env.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("STEPFLOW_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("DEBUG", raising=False)


@pytest.fixture(autouse=True)
def neutral_config_files(isolate_stepflow_env, monkeypatch, tmp_path):  # noqa: ARG001
    """Point the home config at a temp file and run from an empty directory.

    Prevents reading a developer's ~/.config/stepflow.toml or a pyproject.toml
    found above the working directory.
    """
    fake_home_dir = tmp_path / "home_config_isolated"
    fake_home_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("STEPFLOW_CONFIG_HOME", str(fake_home_dir / "stepflow.toml"))
    workdir = tmp_path / "workdir"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


# --- Run configurations ---


@pytest.fixture
def remote_config() -> RunConfiguration:
    return RunConfiguration(
        model_name="gpt-4o-mini", temperature=0.4, api_key_present=True
    )


@pytest.fixture
def keyless_config() -> RunConfiguration:
    return RunConfiguration(
        model_name="gpt-4o-mini", temperature=0.4, api_key_present=False
    )


@pytest.fixture
def demo_config() -> RunConfiguration:
    return RunConfiguration.local_demo()
