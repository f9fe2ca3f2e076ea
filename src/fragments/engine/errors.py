"""Error taxonomy for ledger operations.

Every error aborts the whole call: the ledger validates before it writes, so
a raised error means no balance, allowance, rate or event changed.
"""

from typing import Any, Optional


class LedgerError(Exception):
    """Base error for a rejected ledger operation."""

    code = "ledger_error"

    def __init__(self, reason: str, details: Optional[Any] = None):
        super().__init__(reason)
        self.reason = reason
        self.details = details

    def __str__(self) -> str:
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


class AuthorizationError(LedgerError):
    """Caller lacks the privilege for a rebase."""

    code = "unauthorized"


class InvalidRecipientError(LedgerError):
    """Transfer target is the zero address or the ledger itself."""

    code = "invalid_recipient"


class InsufficientBalanceError(LedgerError):
    """Debit exceeds the available scaled balance."""

    code = "insufficient_balance"


class InsufficientAllowanceError(InsufficientBalanceError):
    """Debit exceeds the spender's allowance."""

    code = "insufficient_allowance"


class ArithmeticOverflowError(LedgerError):
    """Result does not fit the ledger's unsigned integer width."""

    code = "arithmetic_overflow"


class AlreadyClaimedError(LedgerError):
    """Reserve distribution requested twice by the same account."""

    code = "already_claimed"
