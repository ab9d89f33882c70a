from __future__ import annotations

import os

from dotenv import load_dotenv

from .syntax_rules import DEFAULT_TRIGGERS, TriggerTable

load_dotenv()

# Extra characters that force label quoting, e.g. "@"
MERMAID_EXTRA_QUOTE_CHARS = os.getenv("MERMAID_EXTRA_QUOTE_CHARS", "")
MERMAID_SECURITY_FILTER_ENABLED = os.getenv("MERMAID_SECURITY_FILTER_ENABLED", "true").strip().lower() not in ("0", "false", "no", "off")
LOG_LEVEL = os.getenv("LOG_LEVEL") or "INFO"


def get_trigger_table(extra_chars: str | None = MERMAID_EXTRA_QUOTE_CHARS) -> TriggerTable:
    if not extra_chars:
        return DEFAULT_TRIGGERS
    return DEFAULT_TRIGGERS.with_extra(extra_chars)
