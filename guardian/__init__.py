"""Pre-confirmation risk checks for native transfers."""
from .engine import validate_transaction
from .types import GuardianResult, GuardianSeverity, ValidationResult
from .validators import (
    check_network_compatibility,
    validate_address,
    validate_amount,
    validate_balance,
)

__all__ = [
    "validate_transaction",
    "GuardianResult",
    "GuardianSeverity",
    "ValidationResult",
    "check_network_compatibility",
    "validate_address",
    "validate_amount",
    "validate_balance",
]
