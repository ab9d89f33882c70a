"""
Split diagram source into classified lines without losing a single byte.
"""

import re
from typing import List

from .dialect import FLOWCHART_KEYWORDS, is_comment, leading_token
from .diagram_model import Line, LineKind
from .label_scanner import scan_labels

_LINE_BREAK = re.compile(r'(\r\n|\r|\n)')

# Statements that never carry repairable labels
STRUCTURAL_KEYWORDS = frozenset({
    "subgraph", "end", "style", "click",
    "classDef", "class", "linkStyle", "direction",
})


def split_lines(source: str) -> List[tuple]:
    """
    Split source into (text, ending) pairs.

    The final pair always has an empty ending, so "a\\n" yields
    [("a", "\\n"), ("", "")] and "".join(t + e) gives the source back.
    """
    parts = _LINE_BREAK.split(source)
    pairs = []
    for i in range(0, len(parts) - 1, 2):
        pairs.append((parts[i], parts[i + 1]))
    pairs.append((parts[-1], ""))
    return pairs


def classify_line(text: str) -> LineKind:
    stripped = text.strip()
    if not stripped:
        return LineKind.BLANK
    if is_comment(stripped):
        # %%{init: ...}%% blocks land here too and are left alone
        return LineKind.COMMENT
    token = leading_token(stripped)
    if token in STRUCTURAL_KEYWORDS or token in FLOWCHART_KEYWORDS:
        return LineKind.STRUCTURAL
    return LineKind.CONTENT


def segment_lines(source: str) -> List[Line]:
    """
    Split and classify every line; content lines get their label spans.
    """
    lines = []
    for text, ending in split_lines(source):
        kind = classify_line(text)
        spans = scan_labels(text) if kind is LineKind.CONTENT else ()
        lines.append(Line(text=text, ending=ending, kind=kind, spans=spans))
    return lines


def join_lines(lines: List[Line]) -> str:
    return "".join(line.raw for line in lines)
