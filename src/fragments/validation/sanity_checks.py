"""Sanity checks for ledger configuration and ledger state."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..config.schema import LedgerConfig
from ..engine.accounting import LedgerState
from ..engine.arithmetic import CheckedUint
from ..engine.ledger import ScaledLedger


@dataclass
class ValidationWarning:
    """A validation warning with severity and message."""
    severity: str  # "warning" or "error"
    category: str  # e.g., "input", "conservation", "bounds", "precision"
    message: str
    details: Optional[str] = None


class SanityChecker:
    """Run sanity checks on configuration and ledger state."""

    def __init__(self, config: LedgerConfig):
        """Initialize with configuration."""
        self.config = config

    def check_config_inputs(self) -> List[ValidationWarning]:
        """
        Check configuration inputs for implausible values.

        Returns:
            List of validation warnings
        """
        warnings = []
        math = CheckedUint(self.config.supply.uint_bits)
        pool = math.largest_multiple(self.config.initial_supply)

        # A rebase to the cap must still leave at least one scaled unit per fragment
        rate_at_cap = pool // self.config.max_supply
        if rate_at_cap == 0:
            warnings.append(ValidationWarning(
                severity="error",
                category="bounds",
                message="Scaled pool is smaller than max supply; a rebase to the cap breaks conversion",
                details=f"Pool: {pool}, max supply: {self.config.max_supply}"
            ))
        elif rate_at_cap < self.config.unit:
            warnings.append(ValidationWarning(
                severity="warning",
                category="precision",
                message="Fewer scaled units per fragment at max supply than base units per token",
                details=f"Rate at cap: {rate_at_cap}, unit: {self.config.unit}"
            ))

        if self.config.token.decimals == 0:
            warnings.append(ValidationWarning(
                severity="warning",
                category="precision",
                message="Zero decimals: every public balance truncates to whole tokens",
            ))

        if self.config.reserve_claim.claim_tokens == 0:
            warnings.append(ValidationWarning(
                severity="warning",
                category="input",
                message="Reserve claim size is zero; claims only mark accounts",
            ))
        else:
            claims = self.config.supply.initial_tokens // self.config.reserve_claim.claim_tokens
            if claims < 10:
                warnings.append(ValidationWarning(
                    severity="warning",
                    category="sustainability",
                    message="Reserve funds fewer than 10 claims at the initial supply",
                    details=f"Claims available: {claims}"
                ))

        return warnings

    def check_state(self, state: LedgerState) -> List[ValidationWarning]:
        """
        Check stored ledger state for broken invariants.

        Args:
            state: Ledger state

        Returns:
            List of validation warnings
        """
        warnings = []

        is_valid, error_msg = state.validate_conservation()
        if not is_valid:
            warnings.append(ValidationWarning(
                severity="error",
                category="conservation",
                message="Scaled units not conserved",
                details=error_msg
            ))

        is_valid, error_msg = state.conversion.validate_rate()
        if not is_valid:
            warnings.append(ValidationWarning(
                severity="error",
                category="conversion",
                message="Conversion rate identity violated",
                details=error_msg
            ))

        reserve_scaled = state.scaled_balances[self.config.accounts.reserve]
        if reserve_scaled < self.config.claim_amount * state.conversion.rate:
            warnings.append(ValidationWarning(
                severity="warning",
                category="sustainability",
                message="Reserve cannot fund another claim",
                details=f"Reserve scaled balance: {reserve_scaled}"
            ))

        return warnings

    def check_ledger(self, ledger: ScaledLedger) -> List[ValidationWarning]:
        """Check a live ledger, holding its lock for a consistent view."""
        with ledger.lock:
            return self.check_state(ledger.state)


def validate_ledger(ledger: ScaledLedger) -> Tuple[bool, List[ValidationWarning]]:
    """
    Validate configuration and state of a ledger.

    Returns:
        (is_valid, warnings) where is_valid is False if any error was found
    """
    checker = SanityChecker(ledger.config)
    warnings = []
    warnings.extend(checker.check_config_inputs())
    warnings.extend(checker.check_ledger(ledger))
    is_valid = not any(w.severity == "error" for w in warnings)
    return is_valid, warnings
