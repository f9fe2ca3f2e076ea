"""Tests for configuration loading and validation."""

import os
import sys

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from conftest import make_config
from fragments.config.loader import CONFIG_ENV_VAR, DEFAULTS_PATH, load_config, resolve_config_path
from fragments.config.schema import ZERO_ADDRESS, LedgerConfig


class TestConfigLoading:
    """Default configuration loads and derives the deployment constants."""

    def test_load_default_config(self):
        """Config loads without errors."""
        config = load_config()
        assert isinstance(config, LedgerConfig)

    def test_default_constants(self):
        """Defaults describe a 10M-token, 9-decimal deployment."""
        config = load_config()
        assert config.unit == 10 ** 9
        assert config.initial_supply == 10_000_000 * 10 ** 9
        assert config.max_supply == 2 ** 128 - 1
        assert config.claim_amount == 10_000 * 10 ** 9
        assert config.supply.uint_bits == 256

    def test_config_hash_is_deterministic(self):
        """Same config produces same hash."""
        assert load_config().compute_hash() == load_config().compute_hash()

    def test_config_hash_tracks_changes(self):
        """Changing a parameter changes the hash."""
        assert make_config(reserve_claim={'claim_tokens': 1}).compute_hash() != load_config().compute_hash()

    def test_round_trip_dict(self):
        """to_dict / from_dict preserve the config."""
        config = load_config()
        assert LedgerConfig.from_dict(config.to_dict()) == config

    def test_load_from_path(self, tmp_path):
        """A YAML file on disk is loaded."""
        path = tmp_path / "ledger.yaml"
        path.write_text(
            "token: {name: Test, symbol: tst, decimals: 2}\n"
            "supply: {initial_tokens: 1000}\n"
            "accounts:\n"
            "  reserve: '0xAA'\n"
            "  ledger: '0xff'\n"
            "  owner: '0x01'\n"
            "reserve_claim: {claim_tokens: 10}\n"
        )
        config = load_config(str(path))
        assert config.token.symbol == "TST"
        assert config.accounts.reserve == "0xaa"
        assert config.initial_supply == 100_000
        assert config.claim_amount == 1_000


class TestConfigResolution:
    """Which file a deployment is loaded from, and layered overrides."""

    def test_defaults_when_unset(self):
        """No path and no environment variable falls back to the bundled file."""
        assert resolve_config_path() == DEFAULTS_PATH

    def test_environment_variable(self, tmp_path, monkeypatch):
        """FRAGMENTS_CONFIG points the loader at another file."""
        path = tmp_path / "env.yaml"
        path.write_text(DEFAULTS_PATH.read_text().replace('"FRAG"', '"ENVT"'))
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert resolve_config_path() == path
        assert load_config().token.symbol == "ENVT"

    def test_explicit_path_beats_environment(self, tmp_path, monkeypatch):
        """An explicit path wins over the environment variable."""
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "ignored.yaml"))
        assert resolve_config_path(DEFAULTS_PATH) == DEFAULTS_PATH

    def test_missing_file(self, tmp_path):
        """A path that does not exist is reported, not silently replaced."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "absent.yaml"))

    def test_overrides_layer_over_file(self):
        """Overrides replace single keys and keep the rest of the section."""
        config = load_config(overrides={'supply': {'initial_tokens': 20_000}})
        assert config.supply.initial_tokens == 20_000
        assert config.supply.max_supply_bits == 128
        assert config.token.symbol == "FRAG"

    def test_invalid_override_rejected(self):
        """Overrides go through the same validation as the file."""
        with pytest.raises(ValidationError):
            load_config(overrides={'accounts': {'owner': ZERO_ADDRESS}})


class TestConfigValidation:
    """Invalid deployments are rejected."""

    def test_max_supply_wider_than_arithmetic(self):
        """Max supply must fit the integer width."""
        with pytest.raises(ValidationError):
            make_config(supply={'max_supply_bits': 300})

    def test_initial_supply_above_cap(self):
        """Initial supply must fit under max supply."""
        with pytest.raises(ValidationError):
            make_config(supply={'max_supply_bits': 32})

    def test_claim_larger_than_supply(self):
        """A single claim cannot exceed the initial supply."""
        with pytest.raises(ValidationError):
            make_config(supply={'initial_tokens': 5_000})

    def test_zero_address_account(self):
        """Well-known accounts cannot be the zero address."""
        with pytest.raises(ValidationError):
            make_config(accounts={'reserve': ZERO_ADDRESS})

    def test_reserve_equals_ledger(self):
        """The reserve cannot be the ledger's own address."""
        config = load_config()
        with pytest.raises(ValidationError):
            make_config(accounts={'reserve': config.accounts.ledger})

    def test_non_positive_supply(self):
        """Initial supply must be positive."""
        with pytest.raises(ValidationError):
            make_config(supply={'initial_tokens': 0})
