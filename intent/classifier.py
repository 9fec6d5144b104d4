from __future__ import annotations

import logging
import re

from intent.extractor import extract_entities
from intent.types import EntitySet, IntentKind, ParsedIntent

logger = logging.getLogger(__name__)

_BALANCE_RE = re.compile(r"saldo|balance|cek saldo|berapa|how much", re.IGNORECASE)

_CONSULT_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"slippage",
        r"bandingkan.*exchange",
        r"compare.*exchange",
        r"mana.*exchange",
        r"exchange.*mana",
        r"exchange.*apa",
        r"mana.*terbaik",
        r"terbaik.*exchange",
        r"best.*exchange",
        r"cheapest.*exchange",
        r"which.*exchange",
        r"prediksi.*biaya",
        r"hitung.*biaya",
        r"konsultasi",
        r"mending.*beli",
        r"mending.*jual",
        r"mending.*exchange",
        r"mana.*yang.*lebih",
        r"mana.*lebih.*murah",
        r"rekomendasi.*exchange",
        r"di.*exchange.*mana",
        r"di.*exchange.*apa",
    )
]

_TRANSFER_RE = re.compile(r"kirim|send|transfer|\btf\b", re.IGNORECASE)
_DIRECTION_RE = re.compile(
    r"kesini|ke\s+(?:sini|address|wallet|alamat)|to\s+(?:this|address|wallet|that address)",
    re.IGNORECASE,
)
_SWAP_RE = re.compile(r"swap|tukar|convert", re.IGNORECASE)
_CONFIRM_RE = re.compile(
    r"\b(?:yes|ok|oke|okay|ya|yakin|setuju|konfirmasi|confirm|proceed|lakukan|execute|proses|lanjut)\b",
    re.IGNORECASE,
)


def _has_consult_keyword(message: str) -> bool:
    return any(pattern.search(message) for pattern in _CONSULT_PATTERNS)


def classify_intent(
    message: str,
    entities: EntitySet | None = None,
) -> tuple[IntentKind, float]:
    """
    Map an utterance to (intent, confidence).

    Rules are evaluated top to bottom and the first hit wins. Consultation is
    checked before transfer so that "which exchange should I send to" style
    questions never turn into a SEND.
    """
    message = message if isinstance(message, str) else ""
    if entities is None:
        entities = extract_entities(message)

    if _BALANCE_RE.search(message):
        return IntentKind.GET_BALANCE, 0.95

    if _has_consult_keyword(message):
        return IntentKind.CONSULT_SLIPPAGE, 0.9
    if entities.trading_pair:
        # bare pair: usually a follow-up to an earlier consultation turn
        return IntentKind.CONSULT_SLIPPAGE, 0.8

    if _TRANSFER_RE.search(message):
        return IntentKind.SEND, 0.9

    if entities.to_address and entities.amount is not None:
        return IntentKind.SEND, 0.8

    if entities.to_address and _DIRECTION_RE.search(message):
        return IntentKind.SEND, 0.7

    if _SWAP_RE.search(message):
        return IntentKind.SWAP, 0.7

    if _CONFIRM_RE.search(message):
        # weak on its own; the accumulator pairs it with earlier turns
        return IntentKind.SEND, 0.6

    return IntentKind.UNKNOWN, 0.3


def parse_intent(message: str) -> ParsedIntent:
    entities = extract_entities(message)
    intent, confidence = classify_intent(message, entities)
    logger.debug("parsed intent=%s confidence=%s", intent.value, confidence)
    return ParsedIntent(intent=intent, confidence=confidence, entities=entities)
