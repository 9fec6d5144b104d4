from __future__ import annotations

import logging
from typing import Sequence

from app.config import get_settings
from chain.chains import chain_name
from intent.classifier import classify_intent
from intent.extractor import extract_entities
from intent.types import EntitySet, IntentKind, ParsedIntent, ResolvedIntent

logger = logging.getLogger(__name__)

IMPLICIT_SEND_CONFIDENCE = 0.8


def _parse_turn(message: str) -> ParsedIntent:
    # Chain is only counted when the turn names one; the default is applied
    # once, after folding, so it cannot overwrite an earlier explicit chain.
    entities = extract_entities(message, with_default_chain=False)
    intent, confidence = classify_intent(message, entities)
    return ParsedIntent(intent=intent, confidence=confidence, entities=entities)


def fold_entities(turns: Sequence[ParsedIntent]) -> EntitySet:
    accumulated = EntitySet()
    for turn in turns:
        accumulated = accumulated.merged_with(turn.entities)
    return accumulated


def _with_default_chain(entities: EntitySet) -> EntitySet:
    if entities.chain_id is not None:
        return entities
    default_chain_id = get_settings().DEFAULT_CHAIN_ID
    return entities.model_copy(
        update={"chain_id": default_chain_id, "chain_name": chain_name(default_chain_id)}
    )


def accumulate(conversation: Sequence[str]) -> ResolvedIntent:
    """
    Resolve a whole conversation (oldest utterance first) into one intent plus
    the entities gathered so far.

    - Entities: per field, the most recent turn that mentioned it wins.
    - Intent: the last turn's classification, except that a consultation
      anywhere in the thread outranks SEND, and a thread that already holds
      both an amount and a destination is treated as SEND.
    """
    messages = [m for m in conversation if isinstance(m, str)]
    if not messages:
        return ResolvedIntent(
            intent=IntentKind.UNKNOWN,
            confidence=0.3,
            entities=_with_default_chain(EntitySet()),
            turns=0,
        )

    turns = [_parse_turn(m) for m in messages]
    entities = _with_default_chain(fold_entities(turns))

    last = turns[-1]
    intent = last.intent
    confidence = last.confidence
    continued = False

    has_send_slots = entities.amount is not None and entities.to_address is not None
    if has_send_slots and intent in (IntentKind.SEND, IntentKind.UNKNOWN):
        intent = IntentKind.SEND
        confidence = max(confidence, IMPLICIT_SEND_CONFIDENCE)

    consult_turns = [t for t in turns if t.intent == IntentKind.CONSULT_SLIPPAGE]
    if consult_turns:
        # applies to explicit and implicit SEND alike
        if intent == IntentKind.SEND:
            intent = IntentKind.CONSULT_SLIPPAGE
            confidence = consult_turns[-1].confidence
            continued = True
        elif intent == IntentKind.CONSULT_SLIPPAGE:
            continued = any(t.intent == IntentKind.CONSULT_SLIPPAGE for t in turns[:-1])

    logger.info(
        "conversation resolved intent=%s confidence=%s turns=%s",
        intent.value,
        confidence,
        len(turns),
    )
    return ResolvedIntent(
        intent=intent,
        confidence=confidence,
        entities=entities,
        turns=len(turns),
        continued_from_consultation=continued,
    )
