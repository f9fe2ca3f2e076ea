"""Rebase schedule replay - observe how a series of rebases moves public balances.

Key Features:
- Builds a fresh ledger from config, applies reserve claims and transfers
- Replays a caller-supplied schedule of percentage multipliers as the owner
- Records supply, rate and every holder's public balance after each step
- Measures drift between realized public balances and ideal proportional ones

The schedule is an input: deciding when or by how much to rebase is left to
the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..config.schema import LedgerConfig
from ..engine.authorization import RebaseAuthority
from ..engine.ledger import ScaledLedger

logger = logging.getLogger(__name__)


@dataclass
class LedgerSnapshot:
    """Ledger observation after one simulation step."""
    step: int
    epoch: int
    multiplier: Optional[int]  # None for the setup step
    total_supply: int
    rate: int
    scaled_total: int
    balances: Dict[str, int]  # Public balances of non-zero holders


@dataclass
class SimulationResult:
    """Complete simulation result."""
    config: LedgerConfig
    states: List[LedgerSnapshot]
    metrics_over_time: List[Dict[str, Any]]
    final_metrics: Dict[str, Any]
    conservation_errors: List[str] = field(default_factory=list)

    def balances_frame(self) -> pd.DataFrame:
        """Public balances, one row per step and one column per account."""
        accounts = sorted({a for s in self.states for a in s.balances})
        # object dtype keeps balances above 2**53 exact
        return pd.DataFrame(
            [[s.balances.get(a, 0) for a in accounts] for s in self.states],
            index=pd.Index([s.step for s in self.states], name='step'),
            columns=accounts,
            dtype=object,
        )

    def supply_frame(self) -> pd.DataFrame:
        """Supply and rate per step."""
        return pd.DataFrame([
            {
                'step': s.step,
                'epoch': s.epoch,
                'multiplier': s.multiplier,
                'total_supply': s.total_supply,
                'rate': s.rate,
            }
            for s in self.states
        ]).set_index('step')


class RebaseSimulation:
    """Replay a rebase schedule against a fresh ledger."""

    def __init__(self, config: LedgerConfig, authority: Optional[RebaseAuthority] = None):
        """
        Initialize simulation.

        Args:
            config: Ledger configuration
            authority: Rebase capability (defaults to the configured owner)
        """
        self.config = config
        self.operator = config.accounts.owner
        self.ledger = ScaledLedger(config, authority=authority)
        self._conservation_errors: List[str] = []

    def run(
        self,
        schedule: Sequence[int],
        claimants: Sequence[str] = (),
        transfers: Sequence[Tuple[str, str, int]] = (),
    ) -> SimulationResult:
        """
        Run the simulation.

        Args:
            schedule: Percentage multipliers passed to rebase, in order
            claimants: Accounts that claim from the reserve before the first rebase
            transfers: (sender, recipient, value) transfers applied after the claims

        Returns:
            SimulationResult with one state per step (step 0 is the setup)
        """
        for claimant in claimants:
            self.ledger.claim_reserve(claimant)
        for sender, recipient, value in transfers:
            self.ledger.transfer(sender, recipient, value)

        states = [self._observe(step=0, multiplier=None)]
        metrics_over_time = [self._compute_metrics(states[0], states[0], states[0])]

        for step, multiplier in enumerate(schedule, start=1):
            self.ledger.rebase(self.operator, multiplier)

            is_valid, error_msg = self.ledger.state.validate_conservation()
            if not is_valid:
                self._conservation_errors.append(f"step {step}: {error_msg}")

            state = self._observe(step=step, multiplier=multiplier)
            metrics_over_time.append(self._compute_metrics(state, states[-1], states[0]))
            states.append(state)

        final_metrics = self._compute_final_metrics(states, metrics_over_time)
        logger.info(
            "Simulated %d rebases: supply %d -> %d, max drift %d",
            len(schedule), states[0].total_supply, states[-1].total_supply,
            final_metrics['max_abs_drift'],
        )
        return SimulationResult(
            config=self.config,
            states=states,
            metrics_over_time=metrics_over_time,
            final_metrics=final_metrics,
            conservation_errors=list(self._conservation_errors),
        )

    def _observe(self, step: int, multiplier: Optional[int]) -> LedgerSnapshot:
        with self.ledger.lock:
            conversion = self.ledger.state.conversion
            return LedgerSnapshot(
                step=step,
                epoch=self.ledger.state.epoch,
                multiplier=multiplier,
                total_supply=conversion.total_supply,
                rate=conversion.rate,
                scaled_total=self.ledger.state.scaled_balances.total(),
                balances={a: public for a, (_, public) in self.ledger.holders().items()},
            )

    @staticmethod
    def _drift(state: LedgerSnapshot, base: LedgerSnapshot) -> np.ndarray:
        """Realized minus ideal public balance per account, ideal = base * S / S0."""
        drifts = [
            state.balances.get(account, 0) - balance * state.total_supply // base.total_supply
            for account, balance in base.balances.items()
        ]
        return np.array(drifts, dtype=object)

    def _compute_metrics(
        self,
        state: LedgerSnapshot,
        previous: LedgerSnapshot,
        base: LedgerSnapshot,
    ) -> Dict[str, Any]:
        """Compute metrics for a step."""
        drift = self._drift(state, base)
        abs_drift = np.abs(drift) if drift.size else np.array([0], dtype=object)
        supply_ratio = state.total_supply / previous.total_supply

        return {
            'step': state.step,
            'total_supply': state.total_supply,
            'rate': state.rate,
            'supply_ratio': supply_ratio,
            'holders': len(state.balances),
            'sum_public_balances': sum(state.balances.values()),
            'max_abs_drift': int(abs_drift.max()),
            'total_abs_drift': int(abs_drift.sum()),
            'clamped': state.total_supply == self.ledger.state.conversion.max_supply,
        }

    def _compute_final_metrics(
        self,
        states: List[LedgerSnapshot],
        metrics_over_time: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        """Compute final summary metrics."""
        initial, final = states[0], states[-1]
        ratios = np.array([m['supply_ratio'] for m in metrics_over_time[1:]], dtype=float)
        max_drift = max((m['max_abs_drift'] for m in metrics_over_time), default=0)

        return {
            'initial_supply': initial.total_supply,
            'final_supply': final.total_supply,
            'final_rate': final.rate,
            'supply_growth': final.total_supply / initial.total_supply,
            'rebases': len(states) - 1,
            'mean_step_ratio': float(ratios.mean()) if ratios.size else 1.0,
            'min_step_ratio': float(ratios.min()) if ratios.size else 1.0,
            'max_step_ratio': float(ratios.max()) if ratios.size else 1.0,
            'max_abs_drift': max_drift,
            'final_reserve': final.balances.get(self.config.accounts.reserve, 0),
            'conservation_errors_count': len(self._conservation_errors),
        }
