"""Free-text intent resolution for wallet chat."""
from .accumulator import accumulate
from .classifier import classify_intent, parse_intent
from .extractor import extract_entities
from .types import EntitySet, IntentKind, ParsedIntent, ResolvedIntent

__all__ = [
    "accumulate",
    "classify_intent",
    "parse_intent",
    "extract_entities",
    "EntitySet",
    "IntentKind",
    "ParsedIntent",
    "ResolvedIntent",
]
