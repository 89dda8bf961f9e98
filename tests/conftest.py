"""Root-level pytest fixtures for the adcpscreen test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture, plus a few frame fixtures most test modules need.
"""

import pytest
from pathlib import Path
import tempfile
import shutil

from adcpscreen.ensemble import ConfigKey, EnsembleSource
from adcpscreen.schemas import ParamConfig, UserConfig, resolve_config

from tests.helpers.fake_ensemble import make_ensemble


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides)."""
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_no_ship_speed(make_config):
    ...     config = make_config(remove_ship_speed=False)
    ...     assert config.screening.remove_ship_speed is False
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        else:
            return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Directory Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory that is cleaned up after test."""
    d = tempfile.mkdtemp()
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


# =============================================================================
# Frame Fixtures
# =============================================================================

@pytest.fixture
def ensemble():
    """A complete 4-beam, 4-bin frame with bottom track at 30 m."""
    return make_ensemble()


@pytest.fixture
def playback_key():
    return ConfigKey("2", 0, 0, EnsembleSource.PLAYBACK)
