"""fragments - rebasing fungible-token ledger with scaled-unit accounting."""

from .config import LedgerConfig, load_config
from .engine import ScaledLedger

__version__ = "1.0.0"

__all__ = ["LedgerConfig", "ScaledLedger", "load_config", "__version__"]
