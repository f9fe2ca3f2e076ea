"""Notification records emitted by committed ledger operations.

Amounts are always in public units (fragments). Transfer records carry the
nominal value the caller asked for, not the scaled amount that moved.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional, Type, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferEvent:
    """Value moved between two accounts."""
    sender: str
    recipient: str
    value: int

    kind = "Transfer"


@dataclass(frozen=True)
class ApprovalEvent:
    """Allowance set to a new limit."""
    owner: str
    spender: str
    value: int

    kind = "Approval"


@dataclass(frozen=True)
class RebaseEvent:
    """Total public supply changed (or a zero rebase was requested)."""
    epoch: int  # Running count of rebase calls
    total_supply: int

    kind = "Rebase"


LedgerEvent = Union[TransferEvent, ApprovalEvent, RebaseEvent]


def event_to_dict(event: LedgerEvent) -> Dict[str, Any]:
    """Flatten an event for export."""
    data = asdict(event)
    data["event"] = event.kind
    return data


class EventLog:
    """Append-only record of emitted events with optional subscribers."""

    def __init__(self):
        self._events: List[LedgerEvent] = []
        self._subscribers: List[Callable[[LedgerEvent], None]] = []

    def emit(self, event: LedgerEvent) -> None:
        """Record a committed event and notify subscribers.

        A failing subscriber is logged and skipped; the ledger call that
        emitted the event has already committed and still succeeds.
        """
        self._events.append(event)
        for callback in self._subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception("Event subscriber %r failed on %s", callback, event.kind)

    def subscribe(self, callback: Callable[[LedgerEvent], None]) -> None:
        """Call ``callback`` with every event emitted from now on."""
        self._subscribers.append(callback)

    def filter(self, kind: Optional[Type] = None) -> List[LedgerEvent]:
        """Events of the given class, or all events."""
        if kind is None:
            return list(self._events)
        return [e for e in self._events if isinstance(e, kind)]

    def last(self) -> Optional[LedgerEvent]:
        return self._events[-1] if self._events else None

    def __iter__(self):
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)
