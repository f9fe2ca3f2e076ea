"""Scaled ledger - rebasing token accounting over a fixed scaled-unit pool.

Key Concepts:
- Balances are stored in scaled units; public balances are derived as
  scaled // rate, so a rebase rescales every holder without touching them
- rebase(delta) multiplies supply by delta / 100 (delta is a percentage
  multiplier, despite its name) and clamps at max_supply
- Allowances are denominated in public units and are NOT rescaled on rebase;
  their real value drifts with the supply
- Every call validates and computes before its first write, then commits
  state and emits its event; a raised LedgerError leaves no trace
"""

import functools
import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from ..config.schema import ZERO_ADDRESS, LedgerConfig, normalize_address
from .accounting import ConversionState, LedgerState
from .arithmetic import CheckedUint
from .authorization import OwnerAuthority, RebaseAuthority
from .errors import (
    AlreadyClaimedError,
    AuthorizationError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidRecipientError,
)
from .events import ApprovalEvent, EventLog, RebaseEvent, TransferEvent
from .store import ZeroDefaultMap

logger = logging.getLogger(__name__)

# Rebase multiplier that leaves supply unchanged
REBASE_IDENTITY = 100


def _serialized(method):
    """Run a ledger method under the ledger lock."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class ScaledLedger:
    """Rebasing fungible-token ledger.

    All mutating methods take the calling account explicitly as ``caller``.
    """

    def __init__(
        self,
        config: LedgerConfig,
        authority: Optional[RebaseAuthority] = None,
        state: Optional[LedgerState] = None,
    ):
        """
        Initialize the ledger.

        Args:
            config: Deployment configuration
            authority: Rebase capability (defaults to the configured owner)
            state: Restored state; when omitted the whole scaled pool is
                assigned to the reserve account
        """
        self.config = config
        self.math = CheckedUint(config.supply.uint_bits)
        self.reserve = config.accounts.reserve
        self.address = config.accounts.ledger
        self.authority = authority if authority is not None else OwnerAuthority(config.accounts.owner)
        self.events = EventLog()
        self._lock = threading.RLock()

        if state is None:
            conversion = ConversionState.initial(
                initial_supply=config.initial_supply,
                max_supply=config.max_supply,
                math=self.math,
            )
            state = LedgerState(conversion=conversion)
            state.scaled_balances[self.reserve] = conversion.scaled_pool
            self.state = state
            self.events.emit(TransferEvent(ZERO_ADDRESS, self.reserve, conversion.total_supply))
            logger.debug(
                "Initialized ledger: supply=%d pool=%d rate=%d reserve=%s",
                conversion.total_supply, conversion.scaled_pool, conversion.rate, self.reserve,
            )
        else:
            is_valid, error_msg = state.validate_conservation()
            if not is_valid:
                raise ValueError(error_msg)
            is_valid, error_msg = state.conversion.validate_rate()
            if not is_valid:
                raise ValueError(error_msg)
            self.state = state

    # ------------------------------------------------------------------
    # Metadata and queries
    # ------------------------------------------------------------------

    @property
    def lock(self) -> threading.RLock:
        """Ledger lock; hold it to read several quantities as one consistent view."""
        return self._lock

    @property
    def name(self) -> str:
        return self.config.token.name

    @property
    def symbol(self) -> str:
        return self.config.token.symbol

    @property
    def decimals(self) -> int:
        return self.config.token.decimals

    @_serialized
    def total_supply(self) -> int:
        return self.state.conversion.total_supply

    @_serialized
    def scaled_total_supply(self) -> int:
        return self.state.conversion.scaled_pool

    @_serialized
    def conversion_rate(self) -> int:
        """Scaled units per fragment."""
        return self.state.conversion.rate

    @_serialized
    def balance_of(self, account: str) -> int:
        """Public-unit balance, derived from the scaled balance."""
        scaled = self.state.scaled_balances[normalize_address(account)]
        return self.state.conversion.to_public(scaled)

    @_serialized
    def scaled_balance_of(self, account: str) -> int:
        """Raw scaled-unit balance, for tooling and debugging."""
        return self.state.scaled_balances[normalize_address(account)]

    @_serialized
    def allowance(self, owner: str, spender: str) -> int:
        return self.state.allowances[(normalize_address(owner), normalize_address(spender))]

    @_serialized
    def has_claimed(self, account: str) -> bool:
        return normalize_address(account) in self.state.claimed

    @_serialized
    def holders(self) -> Dict[str, Tuple[int, int]]:
        """Map of account -> (scaled balance, public balance) for non-zero holders."""
        conversion = self.state.conversion
        return {
            account: (scaled, conversion.to_public(scaled))
            for account, scaled in self.state.scaled_balances.items()
        }

    # ------------------------------------------------------------------
    # Rebase
    # ------------------------------------------------------------------

    @_serialized
    def rebase(self, caller: str, supply_delta: int) -> int:
        """
        Rescale the public supply by ``supply_delta / 100``.

        ``supply_delta`` multiplies: 100 keeps the supply, 110 grows it 10%,
        50 halves it. Zero is a no-op that still records a Rebase event.

        Args:
            caller: Account requesting the rebase
            supply_delta: Percentage multiplier

        Returns:
            New total public supply

        Raises:
            AuthorizationError: If caller may not rebase
            ArithmeticOverflowError: If the new supply overflows or truncates to zero
        """
        if not self.authority.is_authorized(caller):
            logger.debug("Rejected rebase by unauthorized caller %s", caller)
            raise AuthorizationError("caller may not rebase", caller)

        delta = self.math.require(supply_delta, "supply_delta")
        conversion = self.state.conversion
        epoch = self.state.epoch + 1

        if delta == 0:
            self.state.epoch = epoch
            self.events.emit(RebaseEvent(epoch, conversion.total_supply))
            logger.info("Rebase epoch %d: zero multiplier, supply unchanged at %d", epoch, conversion.total_supply)
            return conversion.total_supply

        new_supply = self.math.div(self.math.mul(conversion.total_supply, delta), 100)
        if new_supply > conversion.max_supply:
            new_supply = conversion.max_supply
        new_rate = self.math.div(conversion.scaled_pool, new_supply)

        old_supply = conversion.total_supply
        conversion.total_supply = new_supply
        conversion.rate = new_rate
        self.state.epoch = epoch
        self.events.emit(RebaseEvent(epoch, new_supply))
        logger.info(
            "Rebase epoch %d: x%d/100 supply %d -> %d, rate=%d",
            epoch, delta, old_supply, new_supply, new_rate,
        )
        return new_supply

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def _require_valid_recipient(self, recipient: str) -> None:
        if recipient == ZERO_ADDRESS or recipient == self.address:
            raise InvalidRecipientError("recipient is the zero address or the ledger", recipient)

    def _plan_move(self, sender: str, recipient: str, scaled: int) -> List[Tuple[str, int]]:
        """Balance writes for moving ``scaled`` units; raises before any write."""
        balances = self.state.scaled_balances
        sender_balance = balances[sender]
        if sender_balance < scaled:
            raise InsufficientBalanceError(
                "scaled balance too low",
                {"account": sender, "scaled_balance": sender_balance, "scaled_required": scaled},
            )
        if sender == recipient:
            return []
        return [
            (sender, sender_balance - scaled),
            (recipient, self.math.add(balances[recipient], scaled)),
        ]

    def _apply(self, writes: List[Tuple[str, int]]) -> None:
        for account, value in writes:
            self.state.scaled_balances[account] = value

    @_serialized
    def transfer(self, caller: str, to: str, value: int) -> bool:
        """
        Move ``value`` fragments from caller to ``to``.

        Raises:
            InvalidRecipientError: If ``to`` is the zero address or the ledger
            InsufficientBalanceError: If caller's scaled balance is too low
            ArithmeticOverflowError: If value * rate overflows
        """
        caller = normalize_address(caller)
        to = normalize_address(to)
        self._require_valid_recipient(to)
        value = self.math.require(value, "value")
        scaled = self.state.conversion.to_scaled(value, self.math)

        writes = self._plan_move(caller, to, scaled)

        self._apply(writes)
        self.events.emit(TransferEvent(caller, to, value))
        return True

    @_serialized
    def transfer_from(self, caller: str, from_: str, to: str, value: int) -> bool:
        """
        Move ``value`` fragments from ``from_`` to ``to``, spending caller's allowance.

        The allowance is spent in public units; the balance move is scaled.

        Raises:
            InvalidRecipientError: If ``to`` is the zero address or the ledger
            InsufficientAllowanceError: If the allowance is below ``value``
            InsufficientBalanceError: If ``from_``'s scaled balance is too low
            ArithmeticOverflowError: If value * rate overflows
        """
        caller = normalize_address(caller)
        from_ = normalize_address(from_)
        to = normalize_address(to)
        self._require_valid_recipient(to)
        value = self.math.require(value, "value")

        key = (from_, caller)
        current = self.state.allowances[key]
        if current < value:
            raise InsufficientAllowanceError(
                "allowance too low",
                {"owner": from_, "spender": caller, "allowance": current, "required": value},
            )
        scaled = self.state.conversion.to_scaled(value, self.math)
        writes = self._plan_move(from_, to, scaled)

        self.state.allowances[key] = current - value
        self._apply(writes)
        self.events.emit(TransferEvent(from_, to, value))
        return True

    # ------------------------------------------------------------------
    # Allowances
    # ------------------------------------------------------------------

    def _set_allowance(self, owner: str, spender: str, value: int) -> None:
        self.state.allowances[(owner, spender)] = value
        self.events.emit(ApprovalEvent(owner, spender, value))

    @_serialized
    def approve(self, caller: str, spender: str, value: int) -> bool:
        """
        Overwrite caller's allowance for ``spender``.

        Overwriting is subject to the usual approve/transfer_from race; use
        increase_allowance / decrease_allowance to adjust an existing limit.
        """
        caller = normalize_address(caller)
        spender = normalize_address(spender)
        value = self.math.require(value, "value")
        self._set_allowance(caller, spender, value)
        return True

    @_serialized
    def increase_allowance(self, caller: str, spender: str, added_value: int) -> bool:
        """Raise caller's allowance for ``spender``; fails on overflow."""
        caller = normalize_address(caller)
        spender = normalize_address(spender)
        added_value = self.math.require(added_value, "added_value")
        new_value = self.math.add(self.state.allowances[(caller, spender)], added_value)
        self._set_allowance(caller, spender, new_value)
        return True

    @_serialized
    def decrease_allowance(self, caller: str, spender: str, subtracted_value: int) -> bool:
        """Lower caller's allowance for ``spender``, clamping at zero."""
        caller = normalize_address(caller)
        spender = normalize_address(spender)
        subtracted_value = self.math.require(subtracted_value, "subtracted_value")
        old_value = self.state.allowances[(caller, spender)]
        if subtracted_value >= old_value:
            new_value = 0
        else:
            new_value = old_value - subtracted_value
        self._set_allowance(caller, spender, new_value)
        return True

    # ------------------------------------------------------------------
    # Reserve distribution
    # ------------------------------------------------------------------

    @_serialized
    def claim_reserve(self, caller: str) -> None:
        """
        Pay the fixed claim amount from the reserve to caller, once per account.

        Raises:
            AlreadyClaimedError: If caller has claimed before
            InvalidRecipientError: If caller is the zero address or the ledger
            InsufficientBalanceError: If the reserve's scaled balance is too low
        """
        caller = normalize_address(caller)
        if caller in self.state.claimed:
            raise AlreadyClaimedError("reserve already claimed", caller)
        self._require_valid_recipient(caller)

        amount = self.config.claim_amount
        scaled = self.state.conversion.to_scaled(amount, self.math)
        writes = self._plan_move(self.reserve, caller, scaled)

        self._apply(writes)
        self.state.claimed.add(caller)
        self.events.emit(TransferEvent(self.reserve, caller, amount))
        logger.info("Reserve claim: %s received %d", caller, amount)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @_serialized
    def snapshot(self) -> Dict[str, Any]:
        """Stored state as plain data (ints, strings, lists)."""
        conversion = self.state.conversion
        return {
            'config_hash': self.config.compute_hash(),
            'epoch': self.state.epoch,
            'scaled_pool': conversion.scaled_pool,
            'max_supply': conversion.max_supply,
            'total_supply': conversion.total_supply,
            'rate': conversion.rate,
            'scaled_balances': dict(sorted(self.state.scaled_balances.items())),
            'allowances': [
                {'owner': owner, 'spender': spender, 'value': value}
                for (owner, spender), value in sorted(self.state.allowances.items())
            ],
            'claimed': sorted(self.state.claimed),
        }

    @classmethod
    def from_snapshot(
        cls,
        config: LedgerConfig,
        data: Dict[str, Any],
        authority: Optional[RebaseAuthority] = None,
    ) -> 'ScaledLedger':
        """
        Restore a ledger from ``snapshot()`` output.

        Raises:
            ValueError: If the snapshot belongs to another config or breaks
                conservation or the rate identity
        """
        if data.get('config_hash') not in (None, config.compute_hash()):
            raise ValueError(
                f"Snapshot config hash {data['config_hash']} does not match "
                f"{config.compute_hash()}"
            )
        conversion = ConversionState(
            scaled_pool=int(data['scaled_pool']),
            total_supply=int(data['total_supply']),
            max_supply=int(data['max_supply']),
            rate=int(data['rate']),
        )
        state = LedgerState(
            conversion=conversion,
            scaled_balances=ZeroDefaultMap(
                {normalize_address(k): int(v) for k, v in data['scaled_balances'].items()}
            ),
            allowances=ZeroDefaultMap({
                (normalize_address(a['owner']), normalize_address(a['spender'])): int(a['value'])
                for a in data.get('allowances', [])
            }),
            claimed={normalize_address(a) for a in data.get('claimed', [])},
            epoch=int(data.get('epoch', 0)),
        )
        return cls(config, authority=authority, state=state)
