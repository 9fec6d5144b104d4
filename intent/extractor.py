from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from app.config import get_settings
from chain.chains import SUPPORTED_CHAINS, chain_name
from intent.types import EntitySet

ADDRESS_RE = re.compile(r"(?<![0-9A-Za-z])0x[0-9a-fA-F]{40}(?![0-9a-fA-F])")
NUMBER_RE = re.compile(r"\d+(?:\.\d+)?(?:e[+-]?\d+)?", re.IGNORECASE)
NUMBER_WITH_SYMBOL_RE = re.compile(
    r"(\d+(?:\.\d+)?(?:e[+-]?\d+)?)\s*(?:eth|lsk|usdt|usdc|matic|bnb)",
    re.IGNORECASE,
)
TRADING_PAIR_RE = re.compile(r"(?<![A-Z])([A-Z]{2,10}/[A-Z]{2,10})(?![A-Z])")

# Anything above this is more likely a chain id or a nonce than an amount.
AMOUNT_CEILING = Decimal("1000000")

# First match wins, so stablecoins go before ETH ("tether" contains "eth").
TOKEN_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("USDT", ("usdt", "tether")),
    ("USDC", ("usdc", "circle")),
    ("MATIC", ("matic", "polygon")),
    ("LSK", ("lsk",)),
    ("ETH", ("eth", "ethereum")),
)


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in text for keyword in keywords)


def extract_address(message: str) -> str | None:
    match = ADDRESS_RE.search(message or "")
    return match.group(0) if match else None


def _to_decimal(raw: str) -> Decimal | None:
    try:
        value = Decimal(raw)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def _is_plausible_amount(value: Decimal | None) -> bool:
    return value is not None and Decimal(0) < value <= AMOUNT_CEILING


def extract_amount(message: str) -> Decimal | None:
    text = ADDRESS_RE.sub("", message or "")

    candidates = [_to_decimal(m.group(0)) for m in NUMBER_RE.finditer(text)]
    candidates = [c for c in candidates if _is_plausible_amount(c)]
    if not candidates:
        return None

    with_symbol = NUMBER_WITH_SYMBOL_RE.search(text)
    if with_symbol:
        value = _to_decimal(with_symbol.group(1))
        if _is_plausible_amount(value):
            return value

    return candidates[0]


def detect_token(message: str) -> str | None:
    text = (message or "").lower()
    for symbol, keywords in TOKEN_KEYWORDS:
        if _contains_any(text, keywords):
            return symbol
    return None


def detect_chain(message: str) -> tuple[int, str] | None:
    text = (message or "").lower()
    for chain in SUPPORTED_CHAINS:
        if _contains_any(text, chain.keywords):
            return chain.chain_id, chain.name
    return None


def extract_trading_pair(message: str) -> str | None:
    match = TRADING_PAIR_RE.search(message or "")
    return match.group(1) if match else None


def extract_entities(message: str, *, with_default_chain: bool = True) -> EntitySet:
    """
    Pull amount, token, destination address, chain and trading pair out of a
    single utterance. Each field is extracted independently; anything that
    cannot be found is left as None. Never raises on odd input.
    """
    message = message if isinstance(message, str) else ""

    chain = detect_chain(message)
    if chain is None and with_default_chain:
        default_chain_id = get_settings().DEFAULT_CHAIN_ID
        chain = (default_chain_id, chain_name(default_chain_id))

    return EntitySet(
        amount=extract_amount(message),
        token=detect_token(message),
        to_address=extract_address(message),
        chain_id=chain[0] if chain else None,
        chain_name=chain[1] if chain else None,
        trading_pair=extract_trading_pair(message),
    )
