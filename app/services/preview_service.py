from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

from app.contracts.preview import (
    PreviewDetails,
    PreviewValidations,
    TransactionPreview,
    TransactionRequest,
)
from chain.chains import UnsupportedChainError, get_chain
from chain.lookups import BalanceLookup, GasEstimator
from guardian.engine import validate_transaction
from guardian.formatting import format_amount
from guardian.types import GuardianResult
from guardian.validators import total_needed

logger = logging.getLogger(__name__)


class PreviewUnavailableError(RuntimeError):
    """A balance or gas collaborator failed; the caller may retry."""

    retryable = True


def _total_estimate(amount: Decimal, gas: Decimal, token_symbol: str, native_symbol: str) -> str:
    if token_symbol == native_symbol:
        return f"{format_amount(amount + gas)} {native_symbol}"
    return f"{format_amount(amount)} {token_symbol} + {format_amount(gas)} {native_symbol}"


def build_summary(details: PreviewDetails, guardian: GuardianResult) -> str:
    lines = [
        "Transaction preview",
        f"Amount: {details.amount_formatted}",
        f"Estimated gas: {details.gas_estimate}",
        f"Estimated total: {details.total_estimate}",
        f"To: {details.to_address}",
        f"Chain: {details.chain_name} ({details.chain_id})",
    ]

    if guardian.issues:
        lines.append("")
        lines.append("Blocking issues:")
        lines.extend(f"[BLOCKING] {issue}" for issue in guardian.issues)

    if guardian.warnings:
        lines.append("")
        lines.append("Warnings:")
        lines.extend(f"[WARNING] {warning}" for warning in guardian.warnings)

    if guardian.recommendations:
        lines.append("")
        lines.append("Recommendations:")
        lines.extend(f"- {rec}" for rec in guardian.recommendations)

    if guardian.requires_double_confirm:
        lines.append("")
        lines.append(
            "Extra confirmation required: this transfer was flagged as high risk, "
            "you will be asked to confirm it twice."
        )

    lines.append("")
    if guardian.issues:
        lines.append("Fix the blocking issues above before proceeding.")
    else:
        lines.append("Review the details and click Confirm to proceed.")
    return "\n".join(lines)


async def build_transaction_preview(
    request: TransactionRequest,
    *,
    balance_lookup: BalanceLookup,
    gas_estimator: GasEstimator,
) -> TransactionPreview:
    """
    Fetch balance and gas, run the guardian and assemble the preview shown to
    the user before they confirm. Nothing is signed or sent here.

    Raises UnsupportedChainError for unknown chains and PreviewUnavailableError
    when either collaborator fails (no partial preview is returned).
    """
    chain = get_chain(request.chain_id)

    # Both lookups always run to completion before any failure is reported.
    results = await asyncio.gather(
        balance_lookup.get_balance(request.from_address, request.chain_id),
        gas_estimator.estimate_gas(request.chain_id),
        return_exceptions=True,
    )
    failure = next((r for r in results if isinstance(r, BaseException)), None)
    if isinstance(failure, UnsupportedChainError) or (
        failure is not None and not isinstance(failure, Exception)
    ):
        raise failure
    if failure is not None:
        logger.warning(
            "preview collaborators failed chain_id=%s from=%s error=%s",
            request.chain_id,
            request.from_address,
            failure,
        )
        raise PreviewUnavailableError(
            f"Unable to fetch balance or gas estimate: {failure}"
        ) from failure

    balance_info, gas_estimate = results
    gas_estimate = Decimal(str(gas_estimate))
    balance = balance_info.balance_native
    token_symbol = (request.token_symbol or balance_info.token_symbol or chain.native_symbol).upper()

    guardian = validate_transaction(
        from_address=request.from_address,
        to_address=request.to_address,
        amount=request.amount,
        chain_id=request.chain_id,
        token_symbol=token_symbol,
        current_balance=balance,
        gas_estimate=gas_estimate,
    )

    details = PreviewDetails(
        from_address=request.from_address,
        to_address=request.to_address,
        amount=request.amount,
        amount_formatted=f"{format_amount(request.amount)} {token_symbol}",
        token_symbol=token_symbol,
        chain_id=request.chain_id,
        chain_name=balance_info.chain_name or chain.name,
        gas_estimate=f"{format_amount(gas_estimate)} {chain.native_symbol}",
        total_estimate=_total_estimate(request.amount, gas_estimate, token_symbol, chain.native_symbol),
    )

    validations = PreviewValidations(
        has_balance=balance >= total_needed(request.amount, gas_estimate),
        valid=guardian.valid,
        issues=guardian.issues,
        warnings=guardian.warnings,
        recommendations=guardian.recommendations,
        requires_double_confirm=guardian.requires_double_confirm,
        severity=guardian.severity,
    )

    logger.info(
        "preview built chain_id=%s valid=%s severity=%s",
        request.chain_id,
        guardian.valid,
        guardian.severity.value,
    )
    return TransactionPreview(
        success=guardian.valid,
        preview=details,
        validations=validations,
        summary=build_summary(details, guardian),
    )
