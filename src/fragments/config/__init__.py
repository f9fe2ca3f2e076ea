"""Ledger configuration."""

from .loader import CONFIG_ENV_VAR, load_config, resolve_config_path
from .schema import ZERO_ADDRESS, LedgerConfig, normalize_address

__all__ = [
    "LedgerConfig",
    "ZERO_ADDRESS",
    "CONFIG_ENV_VAR",
    "load_config",
    "normalize_address",
    "resolve_config_path",
]
