"""Tests for config and ledger-state sanity checks."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from conftest import make_config
from fragments.engine.ledger import ScaledLedger
from fragments.validation.sanity_checks import SanityChecker, validate_ledger

ALICE = "0x00000000000000000000000000000000000000a1"


def categories(warnings, severity):
    return {w.category for w in warnings if w.severity == severity}


class TestConfigChecks:
    """Configuration-level warnings."""

    def test_defaults_are_clean(self, config):
        """Default deployment raises nothing."""
        assert SanityChecker(config).check_config_inputs() == []

    def test_pool_below_max_supply(self):
        """A cap as wide as the arithmetic leaves no room for the rate."""
        config = make_config(supply={'uint_bits': 128, 'max_supply_bits': 128})
        warnings = SanityChecker(config).check_config_inputs()
        assert "bounds" in categories(warnings, "error")

    def test_zero_decimals_warns(self):
        """Zero decimals is allowed but flagged."""
        config = make_config(token={'decimals': 0})
        warnings = SanityChecker(config).check_config_inputs()
        assert "precision" in categories(warnings, "warning")

    def test_few_claims_warns(self):
        """A reserve that funds only a handful of claims is flagged."""
        config = make_config(supply={'initial_tokens': 20_000})
        warnings = SanityChecker(config).check_config_inputs()
        assert "sustainability" in categories(warnings, "warning")


class TestLedgerChecks:
    """State-level invariant checks."""

    def test_fresh_ledger_valid(self, ledger):
        """A new ledger passes every check."""
        is_valid, warnings = validate_ledger(ledger)
        assert is_valid
        assert warnings == []

    def test_valid_after_activity(self, ledger, config):
        """Claims, transfers and rebases keep the invariants."""
        ledger.claim_reserve(ALICE)
        ledger.rebase(config.accounts.owner, 173)
        ledger.transfer(ALICE, config.accounts.owner, 12345)
        is_valid, _ = validate_ledger(ledger)
        assert is_valid

    def test_detects_created_units(self, ledger):
        """Units appearing outside the pool break conservation."""
        ledger.state.scaled_balances[ALICE] = 1
        is_valid, warnings = validate_ledger(ledger)
        assert not is_valid
        assert "conservation" in categories(warnings, "error")

    def test_detects_rate_drift(self, ledger):
        """A rate that no longer matches the supply is reported."""
        ledger.state.conversion.rate += 1
        is_valid, warnings = validate_ledger(ledger)
        assert not is_valid
        assert "conversion" in categories(warnings, "error")

    def test_drained_reserve_warns(self):
        """An empty reserve is flagged as unable to fund claims."""
        config = make_config(supply={'initial_tokens': 10_000})
        ledger = ScaledLedger(config)
        ledger.claim_reserve(ALICE)
        warnings = SanityChecker(config).check_ledger(ledger)
        assert "sustainability" in categories(warnings, "warning")
