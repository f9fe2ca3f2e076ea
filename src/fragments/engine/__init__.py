"""Scaled-unit ledger engine."""

from .accounting import ConversionState, LedgerState
from .arithmetic import CheckedUint
from .authorization import AllowListAuthority, OwnerAuthority, RebaseAuthority
from .errors import (
    AlreadyClaimedError,
    ArithmeticOverflowError,
    AuthorizationError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidRecipientError,
    LedgerError,
)
from .events import ApprovalEvent, EventLog, RebaseEvent, TransferEvent, event_to_dict
from .ledger import REBASE_IDENTITY, ScaledLedger
from .store import ZeroDefaultMap

__all__ = [
    # State
    "ConversionState",
    "LedgerState",
    "ZeroDefaultMap",
    "CheckedUint",
    # Ledger
    "ScaledLedger",
    "REBASE_IDENTITY",
    # Authorization
    "RebaseAuthority",
    "OwnerAuthority",
    "AllowListAuthority",
    # Events
    "TransferEvent",
    "ApprovalEvent",
    "RebaseEvent",
    "EventLog",
    "event_to_dict",
    # Errors
    "LedgerError",
    "AuthorizationError",
    "InvalidRecipientError",
    "InsufficientBalanceError",
    "InsufficientAllowanceError",
    "ArithmeticOverflowError",
    "AlreadyClaimedError",
]
