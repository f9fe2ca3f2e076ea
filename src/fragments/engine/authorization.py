"""Rebase authorization capabilities.

The ledger only asks a capability whether a caller may rebase. Who holds the
capability, and how it changes hands, is decided outside the ledger.
"""

from typing import Iterable, Protocol

from ..config.schema import normalize_address


class RebaseAuthority(Protocol):
    """Anything that can answer whether an account may trigger a rebase."""

    def is_authorized(self, caller: str) -> bool:
        ...


class OwnerAuthority:
    """Authorizes exactly one account, the owner."""

    def __init__(self, owner: str):
        self.owner = normalize_address(owner)

    def is_authorized(self, caller: str) -> bool:
        return normalize_address(caller) == self.owner

    def __repr__(self) -> str:
        return f"OwnerAuthority({self.owner!r})"


class AllowListAuthority:
    """Authorizes a fixed set of accounts."""

    def __init__(self, accounts: Iterable[str]):
        self.accounts = frozenset(normalize_address(a) for a in accounts)

    def is_authorized(self, caller: str) -> bool:
        return normalize_address(caller) in self.accounts

    def __repr__(self) -> str:
        return f"AllowListAuthority({sorted(self.accounts)!r})"
