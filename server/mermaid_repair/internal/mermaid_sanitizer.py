"""
Mermaid Syntax Sanitizer

Repairs the syntax defects language models reliably produce in flowchart
source, without calling the model again:

- Escaped quotes: -->|"[\\"a\\"]"| -> -->|"['a']"|
- Nested quotes: -->|"{self, "World!"}"| -> -->|"{self, World!}"|
- Empty edge labels: -->|""| -> -->
- Unquoted special characters: A[File.open] -> A["File.open"], -->|{:ok}| -> -->|"{:ok}"|
- Trailing periods: D["text"]. -> D["text"]

Non-flowchart dialects are returned untouched. The function holds no state
and never raises, so it can run inline on every generation and every edit.
"""

import logging
from typing import List

from .dialect import is_flowchart
from .diagram_model import Line, LineKind, SanitizeResult
from .label_scanner import scan_labels
from .line_segmenter import join_lines, segment_lines
from .syntax_rules import DEFAULT_TRIGGERS, SYNTAX_RULES, TriggerTable

logger = logging.getLogger(__name__)


def repair_line(line: Line, triggers: TriggerTable, applied: List[str]) -> Line:
    """
    Run every rule over one content line, rescanning labels between rules.

    Names of rules that changed the line are appended to ``applied``.
    """
    if line.kind is not LineKind.CONTENT or line.spans is None:
        return line

    text = line.text
    spans = line.spans
    for name, rule in SYNTAX_RULES:
        updated = rule(text, spans, triggers)
        if updated == text:
            continue
        logger.debug(f"{name}: {text!r} -> {updated!r}")
        if name not in applied:
            applied.append(name)
        text = updated
        spans = scan_labels(text)
        if spans is None:
            # Keep what was fixed so far, later rules need readable spans
            break

    if text == line.text:
        return line
    return Line(text=text, ending=line.ending, kind=line.kind, spans=spans)


def sanitize(source: str, triggers: TriggerTable = DEFAULT_TRIGGERS) -> SanitizeResult:
    """
    Sanitize a Mermaid diagram source.

    Args:
        source: Diagram text, already passed through the security filter
        triggers: Characters that force quoting in node and edge labels

    Returns:
        SanitizeResult.fixed(new_text) when any defect was repaired,
        otherwise SanitizeResult.unchanged(source)

    Example:
        >>> sanitize('flowchart TD\\n    A[File.open] --> B').text
        'flowchart TD\\n    A["File.open"] --> B'
    """
    if not is_flowchart(source):
        return SanitizeResult.unchanged(source)

    applied: List[str] = []
    lines = [repair_line(line, triggers, applied) for line in segment_lines(source)]
    sanitized = join_lines(lines)

    if sanitized == source:
        return SanitizeResult.unchanged(source)
    return SanitizeResult.fixed(sanitized, tuple(applied))
