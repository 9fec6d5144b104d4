from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from app.config import get_settings
from app.core.context import get_conversation_id

_ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")
_NOISY_LOGGERS = ("uvicorn.access", "web3", "urllib3")


def utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def short_address(value: str) -> str:
    return f"{value[:6]}...{value[-4:]}"


class WalletContextFilter(logging.Filter):
    """
    Tags every record with the active conversation id and, when enabled,
    shortens wallet addresses in the rendered message.
    """

    def __init__(self, *, redact_addresses: bool = False) -> None:
        super().__init__()
        self.redact_addresses = redact_addresses

    def filter(self, record: logging.LogRecord) -> bool:
        record.conversation_id = get_conversation_id() or "-"
        if self.redact_addresses:
            message = record.getMessage()
            redacted = _ADDRESS_RE.sub(lambda m: short_address(m.group(0)), message)
            if redacted != message:
                record.msg = redacted
                record.args = None
        return True


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        "ts": utc_iso(),
        "level": record.levelname,
        "logger": record.name,
        "msg": record.getMessage(),
        "conversation_id": getattr(record, "conversation_id", "-"),
    }


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = _record_fields(record)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        fields = _record_fields(record)
        line = (
            f"{fields['ts']} {fields['level']:<7} conversation_id={fields['conversation_id']} "
            f"{fields['logger']}: {fields['msg']}"
        )
        if record.exc_info:
            return line + "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(level: str | None = None) -> None:
    """Install one stdout handler on the root logger (replacing any others)."""
    settings = get_settings()
    level_name = (level or settings.log_level).upper()

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(WalletContextFilter(redact_addresses=settings.log_redact_addresses))
    handler.setFormatter(JsonFormatter() if settings.log_json else TextFormatter())
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
