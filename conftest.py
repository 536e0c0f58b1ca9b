"""Pytest configuration and shared fixtures for the R2 uploader."""

# pylint: disable=wrong-import-position

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

R2_ENV_VARS = (
    "R2_ACCOUNT_ID",
    "R2_ACCESS_KEY_ID",
    "R2_SECRET_ACCESS_KEY",
    "R2_BUCKET",
    "R2_ENDPOINT_URL",
    "R2_ENV_FILE",
    "GITHUB_OUTPUT",
)


@pytest.fixture(autouse=True)
def isolated_r2_env(tmp_path_factory, monkeypatch):
    """Auto-use fixture that keeps tests independent of the caller's R2 settings.

    Clears every R2_* variable and points R2_ENV_FILE at an empty .env file so
    that a developer's real credentials are never picked up.
    """
    for name in R2_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Kept out of tmp_path, which tests use as a source directory
    env_file = tmp_path_factory.mktemp("env") / ".env"
    env_file.write_text("")
    monkeypatch.setenv("R2_ENV_FILE", str(env_file))
    yield str(env_file)
