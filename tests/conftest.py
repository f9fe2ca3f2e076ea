"""Shared fixtures for the fragments ledger tests."""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from fragments.config.loader import CONFIG_ENV_VAR, load_config
from fragments.engine.ledger import ScaledLedger


def make_config(**overrides):
    """Default config with section-level overrides, e.g. supply={'initial_tokens': 5}."""
    return load_config(overrides=overrides)


@pytest.fixture(autouse=True)
def _isolated_config_env(monkeypatch):
    """Tests load the bundled defaults regardless of the caller's environment."""
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def ledger(config):
    return ScaledLedger(config)


@pytest.fixture
def unit(config):
    """Base units per whole token."""
    return config.unit
