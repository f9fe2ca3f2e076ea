"""CSV and JSON reporting."""

from .export import (
    export_events_json,
    export_holders_csv,
    export_simulation_csv,
    export_simulation_json,
    export_snapshot_json,
)

__all__ = [
    "export_events_json",
    "export_holders_csv",
    "export_simulation_csv",
    "export_simulation_json",
    "export_snapshot_json",
]
