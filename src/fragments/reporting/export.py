"""Export functionality for CSV and JSON."""

import json

import pandas as pd

from ..engine.events import event_to_dict
from ..engine.ledger import ScaledLedger
from ..simulation.runner import SimulationResult


def export_holders_csv(ledger: ScaledLedger, filepath: str):
    """Export holders and claimants with scaled and public balances to CSV.

    Accounts that claimed from the reserve are listed even at a zero balance.
    """
    data = []
    with ledger.lock:
        holders = ledger.holders()
        claimed = ledger.state.claimed
        for account in sorted(set(holders) | claimed):
            scaled, public = holders.get(account, (0, 0))
            data.append({
                'account': account,
                'scaled_balance': str(scaled),  # Exceeds int64; kept exact as text
                'balance': public,
                'claimed': account in claimed,
            })

    df = pd.DataFrame(data, columns=['account', 'scaled_balance', 'balance', 'claimed'])
    df.to_csv(filepath, index=False)


def export_events_json(ledger: ScaledLedger, filepath: str):
    """Export every emitted event, in order, to JSON."""
    export_data = {
        'config_hash': ledger.config.compute_hash(),
        'events': [event_to_dict(event) for event in ledger.events],
    }

    with open(filepath, 'w') as f:
        json.dump(export_data, f, indent=2)


def export_snapshot_json(ledger: ScaledLedger, filepath: str):
    """Export the ledger's stored state; restore with ScaledLedger.from_snapshot."""
    with open(filepath, 'w') as f:
        json.dump(ledger.snapshot(), f, indent=2)


def export_simulation_csv(result: SimulationResult, filepath: str):
    """Export per-step supply, rate and metrics of a simulation to CSV."""
    df = pd.DataFrame(result.metrics_over_time)
    for column in ('total_supply', 'rate'):
        df[column] = df[column].astype(str)
    df.to_csv(filepath, index=False)


def export_simulation_json(result: SimulationResult, filepath: str):
    """Export a simulation with config, states and metrics to JSON."""
    export_data = {
        'config': result.config.to_dict(),
        'config_hash': result.config.compute_hash(),
        'states': [
            {
                'step': state.step,
                'epoch': state.epoch,
                'multiplier': state.multiplier,
                'total_supply': state.total_supply,
                'rate': state.rate,
                'balances': state.balances,
            }
            for state in result.states
        ],
        'metrics_over_time': result.metrics_over_time,
        'final_metrics': result.final_metrics,
        'conservation_errors': result.conservation_errors,
    }

    with open(filepath, 'w') as f:
        json.dump(export_data, f, indent=2)
