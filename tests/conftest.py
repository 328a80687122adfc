"""Root test configuration: isolated cwd/env and loguru sink cleanup"""

import pytest
from loguru import logger


SUPABASE_ENV = ["SUPABASE_URL", "SUPABASE_SERVICE_KEY", "SUPABASE_BUCKET", "SUPABASE_TABLE"]


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run each test from a clean tmp directory with no Supabase env vars set."""
    monkeypatch.chdir(tmp_path)
    for name in SUPABASE_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop sinks added by configure_logging so they don't outlive a CliRunner stream."""
    yield
    logger.remove()
