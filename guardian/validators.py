from __future__ import annotations

import logging
from decimal import Decimal
from typing import List

from web3 import Web3

from app.config import get_settings
from chain.chains import NATIVE_SYMBOLS, chain_name, get_chain, is_supported_chain
from guardian.formatting import fixed, format_amount, is_round_number, to_decimal
from guardian.types import ValidationResult
from intent.types import ADDRESS_SHAPE

logger = logging.getLogger(__name__)

GAS_BUFFER_RATIO = Decimal("0.15")
DUST_THRESHOLD = Decimal("0.000001")
LARGE_NATIVE_AMOUNT = Decimal("10")
ROUND_NUMBER_MIN = Decimal("100")
HIGH_SHARE_PCT = Decimal("50")
FULL_BALANCE_PCT = Decimal("95")


def total_needed(amount, gas_estimate) -> Decimal:
    """Amount plus gas plus a 15% gas buffer."""
    gas = to_decimal(gas_estimate)
    return to_decimal(amount) + gas + gas * GAS_BUFFER_RATIO


def validate_address(address: str | None, chain_id: int | None = None) -> ValidationResult:
    issues: List[str] = []
    warnings: List[str] = []
    recommendations: List[str] = []

    logger.info("Guardian: validating address address=%s chain_id=%s", address, chain_id)

    if not address or not isinstance(address, str):
        issues.append("Invalid address: format not recognized.")
        return ValidationResult(valid=False, issues=issues)

    if not ADDRESS_SHAPE.match(address):
        issues.append(
            "Invalid address format. Expected 0x followed by 40 hexadecimal characters."
        )
        return ValidationResult(valid=False, issues=issues)

    try:
        canonical = Web3.to_checksum_address(address)
    except ValueError as e:
        logger.error("Guardian: checksum conversion failed address=%s error=%s", address, e)
        issues.append("Address failed checksum validation. Double-check the address.")
        return ValidationResult(valid=False, issues=issues)

    if canonical != address:
        body = address[2:]
        if body == body.lower():
            warnings.append(
                f"Address is all lowercase. For extra safety use the checksum form: {canonical}"
            )
            recommendations.append(
                "Checksum format helps catch typos. Lowercase addresses are still valid."
            )
        elif body == body.upper():
            warnings.append(
                f"Address is all uppercase. For safety use the checksum form: {canonical}"
            )
        else:
            warnings.append(
                f"Address checksum does not match, this may be a typo. Correct form: {canonical}"
            )
            recommendations.append(
                "Re-check the address character by character. A wrong checksum can mean a wrong address."
            )

    if int(address[2:], 16) == 0:
        issues.append(
            "The zero address (0x000...000) cannot receive transfers. Sending there burns the funds."
        )
        return ValidationResult(
            valid=False,
            issues=issues,
            warnings=warnings,
            recommendations=recommendations,
        )

    logger.info(
        "Guardian: address validation passed address=%s warnings=%s",
        address,
        len(warnings),
    )
    return ValidationResult(
        valid=True,
        issues=issues,
        warnings=warnings,
        recommendations=recommendations,
    )


def check_network_compatibility(
    chain_id: int,
    to_address: str | None,
    token_symbol: str | None = None,
) -> ValidationResult:
    warnings: List[str] = []
    recommendations: List[str] = []
    name = chain_name(chain_id)

    logger.info(
        "Guardian: checking network compatibility chain_id=%s to=%s token=%s",
        chain_id,
        to_address,
        token_symbol,
    )

    # EVM addresses look the same on every chain, so the target chain cannot
    # be inferred from the address itself.
    warnings.append(
        f"Make sure the recipient uses this same address on {name}. "
        "EVM addresses are identical across chains, but funds are unreachable "
        "if the recipient has no access to this chain."
    )

    symbol = (token_symbol or "").upper()
    if symbol and symbol not in NATIVE_SYMBOLS:
        warnings.append(
            f"{symbol} on {name} is a chain-specific token contract. "
            f"Make sure the recipient can receive {symbol} on {name}."
        )

    if is_supported_chain(chain_id):
        chain = get_chain(chain_id)
        if chain.is_layer2:
            recommendations.append(
                f"You are sending on {name} (layer 2). Make sure the recipient has access to this chain."
            )
        if chain.is_testnet:
            warnings.append(f"You are sending on {name} (testnet). These tokens have no real value.")

    logger.info("Guardian: network compatibility done warnings=%s", len(warnings))
    return ValidationResult(valid=True, warnings=warnings, recommendations=recommendations)


def validate_balance(
    balance,
    amount,
    gas_estimate,
    token_symbol: str,
    *,
    low_balance_threshold: Decimal | None = None,
    near_zero_threshold: Decimal | None = None,
) -> ValidationResult:
    settings = get_settings()
    low_balance_threshold = to_decimal(
        low_balance_threshold if low_balance_threshold is not None else settings.low_balance_threshold
    )
    near_zero_threshold = to_decimal(
        near_zero_threshold if near_zero_threshold is not None else settings.near_zero_balance_threshold
    )
    balance = to_decimal(balance)

    logger.info(
        "Guardian: validating balance balance=%s amount=%s gas=%s token=%s",
        balance,
        amount,
        gas_estimate,
        token_symbol,
    )

    needed = total_needed(amount, gas_estimate)
    if balance < needed:
        shortfall = needed - balance
        return ValidationResult(
            valid=False,
            issues=[
                f"Insufficient balance. Required: {fixed(needed)} {token_symbol} "
                f"(including gas + buffer), your balance: {fixed(balance)} {token_symbol}. "
                f"Shortfall: {fixed(shortfall)} {token_symbol}."
            ],
            recommendations=["Top up your wallet or reduce the amount you send."],
        )

    warnings: List[str] = []
    recommendations: List[str] = []
    remaining = balance - needed

    if remaining < low_balance_threshold:
        warnings.append(
            f"After this transaction your balance will be {fixed(remaining)} {token_symbol}. "
            "That may not cover your next transaction."
        )
        recommendations.append("Consider keeping more balance for future gas fees.")

    if remaining < near_zero_threshold:
        warnings.append(
            f"WARNING: remaining balance is almost zero ({fixed(remaining, 8)} {token_symbol}). "
            "You may not be able to transact again without a top up."
        )

    logger.info(
        "Guardian: balance validation passed remaining=%s warnings=%s",
        remaining,
        len(warnings),
    )
    return ValidationResult(valid=True, warnings=warnings, recommendations=recommendations)


def validate_amount(amount, token_symbol: str, balance) -> ValidationResult:
    amount = to_decimal(amount)
    balance = to_decimal(balance)
    symbol = (token_symbol or "").upper()
    warnings: List[str] = []
    recommendations: List[str] = []
    double_confirm = False

    logger.info(
        "Guardian: validating amount amount=%s token=%s balance=%s",
        amount,
        token_symbol,
        balance,
    )

    if amount <= 0:
        return ValidationResult(valid=False, issues=["Amount must be greater than 0."])

    if amount < DUST_THRESHOLD:
        warnings.append("Amount is extremely small (dust). Make sure this is what you meant.")

    if balance > 0:
        pct = amount / balance * 100
        if pct > FULL_BALANCE_PCT:
            warnings.append(
                f"You are sending {fixed(pct, 1)}% of your total balance. "
                "Make sure you keep enough for gas fees."
            )
            double_confirm = True
        elif pct > HIGH_SHARE_PCT:
            warnings.append(
                f"You are sending {fixed(pct, 1)}% of your balance. Make sure this is correct."
            )

    if amount > LARGE_NATIVE_AMOUNT and symbol in NATIVE_SYMBOLS:
        warnings.append(
            f"Large transaction: {format_amount(amount)} {token_symbol}. "
            "Check every detail before continuing."
        )
        recommendations.append("For large transfers consider splitting into smaller transactions.")
        double_confirm = True

    # e.g. "100" typed where "1.00" was meant
    if amount >= ROUND_NUMBER_MIN and is_round_number(amount):
        warnings.append(
            f"{format_amount(amount)} {token_symbol} is a large round number. "
            f"Make sure it is not a typo (for example {format_amount(amount / 100)} {token_symbol})."
        )
        double_confirm = True

    logger.info(
        "Guardian: amount validation done double_confirm=%s warnings=%s",
        double_confirm,
        len(warnings),
    )
    return ValidationResult(
        valid=True,
        warnings=warnings,
        recommendations=recommendations,
        requires_double_confirm=double_confirm,
    )
