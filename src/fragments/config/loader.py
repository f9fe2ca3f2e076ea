"""Configuration loader from YAML.

Resolution order for the config file: explicit path, then the
FRAGMENTS_CONFIG environment variable, then the bundled defaults.yaml.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .schema import LedgerConfig

CONFIG_ENV_VAR = "FRAGMENTS_CONFIG"
DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def resolve_config_path(yaml_path: Optional[Union[str, Path]] = None) -> Path:
    """
    Pick the YAML file a ledger deployment is configured from.

    Raises:
        FileNotFoundError: If the explicit or environment path does not exist
    """
    candidate = yaml_path or os.environ.get(CONFIG_ENV_VAR)
    if not candidate:
        return DEFAULTS_PATH
    path = Path(candidate).expanduser()
    if not path.is_file():
        raise FileNotFoundError(f"Ledger config not found: {path}")
    return path


def load_config(
    yaml_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> LedgerConfig:
    """
    Load configuration from YAML file.

    Args:
        yaml_path: Path to YAML file (see module docstring for the fallback order)
        overrides: Per-section values layered over the file,
            e.g. {'supply': {'initial_tokens': 20_000}}

    Returns:
        LedgerConfig object
    """
    with open(resolve_config_path(yaml_path), 'r') as f:
        data = yaml.safe_load(f) or {}

    for section, values in (overrides or {}).items():
        data.setdefault(section, {}).update(values)

    return LedgerConfig.from_dict(data)
