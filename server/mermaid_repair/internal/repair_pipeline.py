"""
Diagram repair pipeline

Wires the security filter and the syntax sanitizer into the two places the
application needs them:

1. Right after the AI JSON payload is parsed, before the diagram is stored
   or shown (prepare_generated_diagram)
2. When the client-side renderer reports a parse error for stored source
   (recover_render_error): the sanitizer gets one more try, and if it has
   nothing to fix the caller escalates to the AI fix-syntax prompt

No network, database or model call happens here.
"""

import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from mermaid_repair.schemas import GeneratedDiagramPayload
from .diagram_model import SanitizeResult
from .fix_prompt import build_fix_syntax_prompt
from .mermaid_sanitizer import sanitize
from .security_filter import strip_dangerous_directives
from .settings import MERMAID_SECURITY_FILTER_ENABLED
from .syntax_rules import DEFAULT_TRIGGERS, TriggerTable

logger = logging.getLogger(__name__)

ACTION_AUTO_FIXED = "auto_fixed"
ACTION_ESCALATE = "escalate"


class DiagramPayloadError(ValueError):
    """The model returned something that is not a usable diagram payload"""


@dataclass(frozen=True)
class CleanedDiagram:
    source: str
    security_stripped: bool
    syntax: SanitizeResult

    @property
    def syntax_fixed(self) -> bool:
        return self.syntax.changed


@dataclass(frozen=True)
class PreparedDiagram:
    title: Optional[str]
    slug: str
    tags: list
    diagram_source: str
    summary: Optional[str]
    notes_md: Optional[str]
    syntax_fixed: bool
    security_stripped: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "slug": self.slug,
            "tags": list(self.tags),
            "diagram_source": self.diagram_source,
            "summary": self.summary,
            "notes_md": self.notes_md,
            "syntax_fixed": self.syntax_fixed,
            "security_stripped": self.security_stripped,
        }


@dataclass(frozen=True)
class RecoveryOutcome:
    """
    Result of the render-time recovery attempt.

    action is "auto_fixed" (source holds the repaired diagram) or "escalate"
    (source is untouched and fix_prompt is ready for the AI re-fix service).
    """
    action: str
    source: str
    fix_prompt: Optional[str] = None

    @property
    def escalated(self) -> bool:
        return self.action == ACTION_ESCALATE


def strip_code_fences(text: str) -> str:
    """Remove a ```mermaid ... ``` fence wrapped around the whole diagram"""
    match = re.match(r'^\s*```(?:mermaid)?[ \t]*\r?\n(.*?)\r?\n?```\s*$', text, re.DOTALL)
    return match.group(1) if match else text


def clean_diagram_source(
    source: str,
    triggers: TriggerTable = DEFAULT_TRIGGERS,
    security_filter: bool = MERMAID_SECURITY_FILTER_ENABLED,
) -> CleanedDiagram:
    """
    Security filter first, then syntax repair.

    Args:
        source: Diagram text as produced by the model or the editor
        triggers: Quoting trigger table for the sanitizer
        security_filter: Set False to skip directive stripping

    Returns:
        CleanedDiagram with the final source and what happened to it
    """
    filtered = strip_dangerous_directives(source) if security_filter else source
    result = sanitize(filtered, triggers)

    if result.changed:
        logger.info(f"Mermaid syntax auto-fixed, rules applied: {', '.join(result.rules_applied)}")

    return CleanedDiagram(
        source=result.text,
        security_stripped=filtered != source,
        syntax=result,
    )


def slugify(title: Optional[str]) -> str:
    if not title:
        return f"diagram-{int(time.time() * 1000)}"
    slug = re.sub(r'[^a-z0-9]+', '-', title.lower()).strip('-')
    return slug or f"diagram-{int(time.time() * 1000)}"


def parse_diagram_payload(payload: Union[str, Dict[str, Any]]) -> GeneratedDiagramPayload:
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise DiagramPayloadError(f"Model response is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise DiagramPayloadError("Model response must be a JSON object")

    try:
        return GeneratedDiagramPayload.model_validate(payload)
    except ValidationError as e:
        raise DiagramPayloadError(f"Model response is missing diagram fields: {e}") from e


def prepare_generated_diagram(
    payload: Union[str, Dict[str, Any]],
    triggers: TriggerTable = DEFAULT_TRIGGERS,
) -> PreparedDiagram:
    """
    Turn the generation model's JSON payload into a diagram ready to persist.

    Raises:
        DiagramPayloadError: payload is not JSON, not an object, or lacks "mermaid"
    """
    parsed = parse_diagram_payload(payload)
    source = strip_code_fences(parsed.mermaid).strip()
    if not source:
        raise DiagramPayloadError("Model response contains an empty diagram")

    cleaned = clean_diagram_source(source, triggers)
    logger.info(f"Prepared diagram '{parsed.title}': {len(cleaned.source)} characters")

    return PreparedDiagram(
        title=parsed.title,
        slug=slugify(parsed.title),
        tags=list(parsed.tags),
        diagram_source=cleaned.source,
        summary=parsed.summary,
        notes_md=parsed.notes_md,
        syntax_fixed=cleaned.syntax_fixed,
        security_stripped=cleaned.security_stripped,
    )


def recover_render_error(
    source: str,
    error_message: str = "",
    summary: str = "",
    triggers: TriggerTable = DEFAULT_TRIGGERS,
) -> RecoveryOutcome:
    """
    Second chance for a stored diagram the renderer rejected.

    Returns:
        auto_fixed outcome with the repaired source, or an escalate outcome
        carrying the fix-syntax prompt (with the renderer error as context)
    """
    result = sanitize(source, triggers)
    if result.changed:
        logger.info(f"Render error recovered without AI, rules applied: {', '.join(result.rules_applied)}")
        return RecoveryOutcome(action=ACTION_AUTO_FIXED, source=result.text)

    logger.warning(f"Sanitizer found nothing to fix, escalating to AI fix-syntax: {error_message[:200]}")
    return RecoveryOutcome(
        action=ACTION_ESCALATE,
        source=source,
        fix_prompt=build_fix_syntax_prompt(source, summary, error_message),
    )
