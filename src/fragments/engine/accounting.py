"""Scaled-unit accounting state - conversion rate and stored balances."""

from dataclasses import dataclass, field
from typing import Optional, Set, Tuple

from .arithmetic import CheckedUint
from .store import ZeroDefaultMap


@dataclass
class ConversionState:
    """Conversion between scaled units and public units (fragments).

    Semantics:
    - scaled_pool: Total scaled units ever allocated (constant). The largest
      multiple of the initial supply that fits the integer width, so the
      initial rate divides it exactly.
    - total_supply: Public supply, changed only by rebase. Never above max_supply.
    - rate: Scaled units per fragment, scaled_pool // total_supply (truncating).

    Identity:
    rate * total_supply <= scaled_pool (truncation only ever loses scaled units)
    """
    scaled_pool: int
    total_supply: int
    max_supply: int
    rate: int

    @classmethod
    def initial(cls, initial_supply: int, max_supply: int, math: CheckedUint) -> 'ConversionState':
        """Conversion state at deployment: the whole pool backs ``initial_supply``."""
        math.require(initial_supply, "initial_supply")
        math.require(max_supply, "max_supply")
        scaled_pool = math.largest_multiple(initial_supply)
        return cls(
            scaled_pool=scaled_pool,
            total_supply=initial_supply,
            max_supply=max_supply,
            rate=math.div(scaled_pool, initial_supply),
        )

    def to_scaled(self, value: int, math: CheckedUint) -> int:
        """Public units to scaled units; fails rather than wraps."""
        return math.mul(value, self.rate)

    def to_public(self, scaled: int) -> int:
        """Scaled units to public units (truncating)."""
        return scaled // self.rate

    def validate_rate(self) -> Tuple[bool, Optional[str]]:
        """
        Validate the conversion identity:
        rate == scaled_pool // total_supply and rate * total_supply <= scaled_pool

        Returns:
            (is_valid, error_message)
        """
        if self.total_supply <= 0:
            return False, f"Total supply must be positive, got {self.total_supply}"
        expected = self.scaled_pool // self.total_supply
        if self.rate != expected:
            return False, f"Rate drift: rate={self.rate}, pool // supply={expected}"
        if self.rate * self.total_supply > self.scaled_pool:
            return False, (
                f"Rate overshoots pool: {self.rate} * {self.total_supply} "
                f"> {self.scaled_pool}"
            )
        if self.total_supply > self.max_supply:
            return False, f"Supply {self.total_supply} above cap {self.max_supply}"
        return True, None


@dataclass
class LedgerState:
    """Stored quantities of the ledger.

    Persisted layout: conversion (total_supply, rate, plus the constant
    scaled_pool and max_supply), scaled_balances, allowances keyed by
    (owner, spender), and the set of accounts that claimed from the reserve.
    """
    conversion: ConversionState
    scaled_balances: ZeroDefaultMap = field(default_factory=ZeroDefaultMap)
    allowances: ZeroDefaultMap = field(default_factory=ZeroDefaultMap)
    claimed: Set[str] = field(default_factory=set)
    epoch: int = 0  # Rebase calls so far

    def validate_conservation(self) -> Tuple[bool, Optional[str]]:
        """
        Validate scaled-unit conservation:
        sum(scaled_balances) == scaled_pool

        Returns:
            (is_valid, error_message)
        """
        total = self.scaled_balances.total()
        pool = self.conversion.scaled_pool
        if total != pool:
            return False, (
                f"Conservation violation: Pool={pool}, Sum={total}, "
                f"Diff={total - pool:+d}, accounts={len(self.scaled_balances)}"
            )
        return True, None
