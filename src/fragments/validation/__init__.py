"""Validation and sanity checks for the fragments ledger."""

from .sanity_checks import SanityChecker, ValidationWarning, validate_ledger

__all__ = [
    "SanityChecker",
    "ValidationWarning",
    "validate_ledger"
]
