from __future__ import annotations

import logging
from decimal import Decimal
from typing import List

from guardian.formatting import to_decimal
from guardian.types import GuardianResult, GuardianSeverity, ValidationResult
from guardian.validators import (
    check_network_compatibility,
    validate_address,
    validate_amount,
    validate_balance,
)

logger = logging.getLogger(__name__)


class _Collector:
    def __init__(self) -> None:
        self.issues: List[str] = []
        self.warnings: List[str] = []
        self.recommendations: List[str] = []
        self.requires_double_confirm = False
        self.severity = GuardianSeverity.NONE

    def add(self, result: ValidationResult) -> None:
        if not result.valid:
            self.issues.extend(result.issues)
            self.raise_to(GuardianSeverity.CRITICAL)
        self.warnings.extend(result.warnings)
        self.recommendations.extend(result.recommendations)
        self.requires_double_confirm = self.requires_double_confirm or result.requires_double_confirm

    def raise_to(self, severity: GuardianSeverity) -> None:
        self.severity = self.severity.raised_to(severity)


def _final_severity(collector: _Collector) -> GuardianSeverity:
    severity = collector.severity
    if collector.issues:
        return GuardianSeverity.CRITICAL
    if collector.requires_double_confirm:
        return severity.raised_to(GuardianSeverity.HIGH)
    if collector.warnings:
        return severity.raised_to(GuardianSeverity.MEDIUM)
    return severity


def validate_transaction(
    *,
    from_address: str,
    to_address: str,
    amount,
    chain_id: int,
    token_symbol: str = "ETH",
    current_balance: Decimal | None = None,
    gas_estimate: Decimal | None = None,
) -> GuardianResult:
    """
    Run every guardian check against a prepared transfer.

    Order is fixed: sender address, recipient address, self-transfer,
    network, balance (needs balance and gas), amount (needs balance).
    Severity only ever goes up while the checks run.
    """
    amount = to_decimal(amount)
    logger.info(
        "Guardian: starting validation from=%s to=%s amount=%s chain_id=%s token=%s",
        from_address,
        to_address,
        amount,
        chain_id,
        token_symbol,
    )

    collector = _Collector()

    collector.add(validate_address(from_address, chain_id))
    collector.add(validate_address(to_address, chain_id))

    if (
        isinstance(from_address, str)
        and isinstance(to_address, str)
        and from_address.lower() == to_address.lower()
    ):
        collector.warnings.append(
            "You are sending to your own address. This only burns gas fees with no effect."
        )
        collector.raise_to(GuardianSeverity.LOW)

    collector.add(check_network_compatibility(chain_id, to_address, token_symbol))

    if current_balance is not None and gas_estimate is not None:
        collector.add(
            validate_balance(current_balance, amount, gas_estimate, token_symbol)
        )

    if current_balance is not None:
        amount_check = validate_amount(amount, token_symbol, current_balance)
        collector.add(amount_check)
        if amount_check.warnings:
            collector.raise_to(GuardianSeverity.MEDIUM)

    result = GuardianResult(
        valid=not collector.issues,
        issues=collector.issues,
        warnings=collector.warnings,
        recommendations=collector.recommendations,
        requires_double_confirm=collector.requires_double_confirm,
        severity=_final_severity(collector),
    )

    logger.info(
        "Guardian: validation completed valid=%s issues=%s warnings=%s severity=%s double_confirm=%s",
        result.valid,
        len(result.issues),
        len(result.warnings),
        result.severity.value,
        result.requires_double_confirm,
    )
    return result
