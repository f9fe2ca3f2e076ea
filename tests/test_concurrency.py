"""Tests for serialized access from several threads."""

import os
import sys
import threading

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from fragments.engine.events import RebaseEvent, TransferEvent

ACCOUNTS = [
    "0x00000000000000000000000000000000000000a1",
    "0x00000000000000000000000000000000000000b2",
    "0x00000000000000000000000000000000000000c3",
    "0x00000000000000000000000000000000000000d4",
]


class TestConcurrentAccess:
    """Transfers racing rebases keep the ledger consistent."""

    def test_transfers_during_rebases(self, ledger, config, unit):
        """Concurrent transfers and rebases conserve scaled units."""
        for account in ACCOUNTS:
            ledger.claim_reserve(account)
        errors = []

        def shuffle(index):
            sender = ACCOUNTS[index]
            recipient = ACCOUNTS[(index + 1) % len(ACCOUNTS)]
            try:
                for _ in range(200):
                    ledger.transfer(sender, recipient, unit)
            except Exception as e:  # surfaced through the assertion below
                errors.append(e)

        def rebaser():
            try:
                for i in range(100):
                    ledger.rebase(config.accounts.owner, 101 if i % 2 else 99)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=shuffle, args=(i,)) for i in range(len(ACCOUNTS))]
        threads.append(threading.Thread(target=rebaser))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        is_valid, error = ledger.state.validate_conservation()
        assert is_valid, error
        is_valid, error = ledger.state.conversion.validate_rate()
        assert is_valid, error
        assert len(ledger.events.filter(RebaseEvent)) == 100
        # initial mint + 4 claims + 800 transfers
        assert len(ledger.events.filter(TransferEvent)) == 1 + 4 + 800
