"""Shared fixtures for lifegrid tests."""

import shutil
import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from lifegrid.config.infra_settings import get_infra_settings
from lifegrid.config.omegaconf_settings import SettingsStore, set_settings_store

TEST_DEFAULTS = """
universe:
  width: 16
  height: 16
  pattern: blank
  seed: null
simulation:
  tick_rate_hz: 50.0
  autoplay: false
  max_steps_per_request: 100
"""


@pytest.fixture
def temp_config_dir():
    """Create a temporary config directory for testing."""
    temp_dir = tempfile.mkdtemp()
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


@pytest.fixture
def settings_store(temp_config_dir):
    """Settings store over an empty temp directory."""
    return SettingsStore(config_dir=temp_config_dir)


@pytest.fixture
def test_config_dir(temp_config_dir):
    """Temp config directory holding a small blank 16x16 universe config."""
    (temp_config_dir / "config.defaults.yaml").write_text(TEST_DEFAULTS)
    return temp_config_dir


@pytest.fixture
def client(test_config_dir):
    """TestClient running the full app lifespan against the test config."""
    get_infra_settings.cache_clear()
    store = SettingsStore(config_dir=test_config_dir)
    set_settings_store(store)

    from lifegrid.main import app

    with TestClient(app) as test_client:
        yield test_client

    set_settings_store(None)
