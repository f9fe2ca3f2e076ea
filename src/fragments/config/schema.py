"""Pydantic schema for ledger configuration validation."""

import hashlib
import json
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator, model_validator

ZERO_ADDRESS = "0x" + "0" * 40


def normalize_address(address: str) -> str:
    """Canonical form of an account identifier (trimmed, lower-case)."""
    return str(address).strip().lower()


class Token(BaseModel):
    """Token metadata."""
    name: str = Field(min_length=1, description="Human-readable token name")
    symbol: str = Field(min_length=1, max_length=11, description="Ticker symbol")
    decimals: int = Field(ge=0, le=36, default=9, description="Base units per token, as a power of ten")

    @field_validator("symbol")
    @classmethod
    def upper_symbol(cls, v):
        """Store symbols upper-case."""
        return v.upper()


class Supply(BaseModel):
    """Supply parameters."""
    initial_tokens: int = Field(gt=0, description="Initial public supply in whole tokens")
    max_supply_bits: int = Field(gt=0, le=512, default=128, description="MaxSupply = 2**bits - 1 base units")
    uint_bits: int = Field(gt=0, le=512, default=256, description="Integer width of ledger arithmetic")

    @model_validator(mode="after")
    def validate_widths(self):
        """MaxSupply must fit inside the arithmetic width."""
        if self.max_supply_bits > self.uint_bits:
            raise ValueError(
                f"max_supply_bits ({self.max_supply_bits}) must not exceed "
                f"uint_bits ({self.uint_bits})"
            )
        return self


class Accounts(BaseModel):
    """Well-known accounts of a deployment."""
    reserve: str = Field(description="Account holding the undistributed scaled pool")
    ledger: str = Field(description="The ledger's own address (never a valid recipient)")
    owner: str = Field(description="Account authorized to rebase")

    @field_validator("reserve", "ledger", "owner")
    @classmethod
    def canonical(cls, v):
        """Normalize and reject the zero address."""
        v = normalize_address(v)
        if not v:
            raise ValueError("account must not be empty")
        if v == ZERO_ADDRESS:
            raise ValueError("account must not be the zero address")
        return v

    @model_validator(mode="after")
    def validate_distinct(self):
        """The reserve cannot be the ledger itself."""
        if self.reserve == self.ledger:
            raise ValueError("reserve and ledger accounts must differ")
        return self


class ReserveClaim(BaseModel):
    """Reserve distribution parameters."""
    claim_tokens: int = Field(ge=0, default=10_000, description="Whole tokens paid per claim")


class LedgerConfig(BaseModel):
    """Complete configuration for a fragments ledger."""
    token: Token
    supply: Supply
    accounts: Accounts
    reserve_claim: ReserveClaim = Field(default_factory=ReserveClaim)

    @model_validator(mode="after")
    def validate_supply_fits(self):
        """Initial and claim supplies must fit under MaxSupply."""
        if self.initial_supply > self.max_supply:
            raise ValueError(
                f"Initial supply {self.initial_supply} exceeds max supply "
                f"{self.max_supply} (2**{self.supply.max_supply_bits} - 1)"
            )
        if self.claim_amount > self.initial_supply:
            raise ValueError("claim_tokens must not exceed initial_tokens")
        return self

    @property
    def unit(self) -> int:
        """Base units in one whole token."""
        return 10 ** self.token.decimals

    @property
    def initial_supply(self) -> int:
        """Initial public supply in base units."""
        return self.supply.initial_tokens * self.unit

    @property
    def max_supply(self) -> int:
        """Public supply cap in base units."""
        return 2 ** self.supply.max_supply_bits - 1

    @property
    def claim_amount(self) -> int:
        """Reserve claim size in base units."""
        return self.reserve_claim.claim_tokens * self.unit

    def compute_hash(self) -> str:
        """Compute config hash for reproducibility."""
        config_dict = self.model_dump()
        config_str = json.dumps(config_dict, sort_keys=True)
        return hashlib.sha256(config_str.encode()).hexdigest()[:16]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LedgerConfig':
        """Create config from dictionary."""
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return self.model_dump()
