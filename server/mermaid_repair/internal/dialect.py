"""
Diagram dialect detection

Only flowchart-family diagrams are repaired. Other dialects use ``:`` and
arrows with different meaning (``A->>B: text``), so label rules would corrupt them.
"""

import re
from typing import Optional

# Exact, case-sensitive header tokens. Renderer variants such as
# "flowchart-elk" are not matched and pass through unrepaired.
FLOWCHART_KEYWORDS = frozenset({"flowchart", "graph"})

DIAGRAM_TYPES = [
    'flowchart', 'graph', 'sequenceDiagram', 'classDiagram',
    'stateDiagram', 'stateDiagram-v2', 'erDiagram', 'gantt',
    'pie', 'gitGraph', 'journey', 'mindmap', 'timeline',
    'quadrantChart', 'sankey', 'xychart', 'block',
]

_LEADING_TOKEN = re.compile(r'[^\s;]+')


def is_comment(stripped_line: str) -> bool:
    return stripped_line.startswith('%%')


def leading_token(line: str) -> Optional[str]:
    """First whitespace/semicolon delimited token of a line"""
    match = _LEADING_TOKEN.match(line.lstrip())
    return match.group(0) if match else None


def detect_diagram_type(source: str) -> Optional[str]:
    """
    Return the leading token of the first significant line.

    Blank lines and ``%%`` comments are skipped. Returns None for text with
    no significant line at all.
    """
    for line in re.split(r'\r\n|\r|\n', source):
        stripped = line.strip()
        if not stripped or is_comment(stripped):
            continue
        return leading_token(stripped)
    return None


def is_flowchart(source: str) -> bool:
    """True when the diagram is a flowchart/graph and therefore repairable"""
    return detect_diagram_type(source) in FLOWCHART_KEYWORDS
