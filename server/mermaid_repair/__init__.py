"""
Mermaid Repair Package

Deterministic repair of AI-generated Mermaid flowchart syntax:
- Dialect detection so only flowchart/graph diagrams are touched
- Line segmentation and label scanning
- Ordered syntax rules (escapes, nested quotes, empty edge labels,
  special character quoting, trailing periods)
- Security filtering of click/config directives
- Pipeline helpers for generation hand-off and render-error recovery
"""

from .internal.diagram_model import SanitizeResult, SanitizeStatus
from .internal.mermaid_sanitizer import sanitize
from .internal.security_filter import strip_dangerous_directives
from .internal.syntax_rules import DEFAULT_TRIGGERS, TriggerTable

__all__ = [
    # Engine
    "sanitize",
    "SanitizeResult",
    "SanitizeStatus",
    "TriggerTable",
    "DEFAULT_TRIGGERS",

    # Security pass
    "strip_dangerous_directives",
]
