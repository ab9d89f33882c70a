"""
Cursor-based label scanner for flowchart content lines

Walks a line left to right and reports every node label (``A[...]``,
``A(...)``, ``A{...}``, ``A((...))``, ``A[[...]]``) and every piped edge
label (``-->|...|``). Shapes the repair rules do not understand (stadium,
cylinder, hexagon, trapezoid, asymmetric, circle-in-circle) are stepped over
without producing a span.

A line whose brackets or quotes cannot be matched is reported as
unscannable (None) so that every span-based rule leaves it alone.
"""

import logging
import re
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from .diagram_model import BracketStyle, LabelSpan, SpanKind

logger = logging.getLogger(__name__)

# Link tokens: -->, --->, ---, -.->, -.-, ==>, ===, <-->, --o, --x, ~~~
ARROW_PATTERN = re.compile(r'<?(?:-{2,}|={2,}|-\.+-|~{3,})(?:>|[ox](?=[\s|]))?')

# Node shapes that are recognised but never repaired, keyed by opener
SKIPPED_SHAPES = [
    ("(((", ")))"),
    ("([", "])"),
    ("[(", ")]"),
    ("[/", "/]"),
    ("[/", "\\]"),
    ("[\\", "\\]"),
    ("[\\", "/]"),
    ("{{", "}}"),
    (">", "]"),
]

# Longest opener first so that "((" wins over "("
NODE_STYLES = [
    BracketStyle.DOUBLE_ROUND,
    BracketStyle.DOUBLE_SQUARE,
    BracketStyle.SQUARE,
    BracketStyle.ROUND,
    BracketStyle.CURLY,
]

STRAY_CHARS = frozenset('[](){}|')

# Text after a backslash-quote-closer that reads as more diagram, not label text
_MORE_DIAGRAM = re.compile(ARROW_PATTERN.pattern + r'|\w[\[({]')


class ScanState(Enum):
    OUTSIDE = "outside"
    IN_NODE_LABEL = "in_node_label"
    IN_EDGE_LABEL = "in_edge_label"
    IN_QUOTE = "in_quote"


class LabelScanError(Exception):
    """Raised when a bracket or quote in a line has no matching closer"""


def is_identifier_char(ch: str) -> bool:
    return ch.isalnum() or ch == '_'


class LabelScanner:
    """
    Scans a single content line.

    The scanner keeps its cursor and state on the instance; create one per
    line (scan_labels() does this for you).
    """

    def __init__(self, line: str):
        self.line = line
        self.pos = 0
        self.state = ScanState.OUTSIDE
        self.spans: List[LabelSpan] = []
        # Index one past the closer of every stepped-over shape
        self.shape_ends: List[int] = []

    def scan(self) -> Tuple[LabelSpan, ...]:
        line = self.line
        length = len(line)

        while self.pos < length:
            ch = line[self.pos]

            if ch == '"':
                # Free-standing string, e.g. A -- "text" --> B
                self.state = ScanState.IN_QUOTE
                closing = line.find('"', self.pos + 1)
                if closing < 0:
                    raise LabelScanError(f"unterminated string at {self.pos}")
                self.pos = closing + 1
                self.state = ScanState.OUTSIDE
                continue

            arrow = ARROW_PATTERN.match(line, self.pos)
            if arrow:
                self._after_arrow(arrow.end())
                continue

            if is_identifier_char(ch) and (self.pos == 0 or not is_identifier_char(line[self.pos - 1])):
                self._after_identifier()
                continue

            if ch in STRAY_CHARS:
                raise LabelScanError(f"unexpected {ch!r} at {self.pos}")

            self.pos += 1

        return tuple(self.spans)

    def _after_arrow(self, arrow_end: int) -> None:
        line = self.line
        cursor = arrow_end
        while cursor < len(line) and line[cursor] in ' \t':
            cursor += 1
        if cursor < len(line) and line[cursor] == '|':
            self.state = ScanState.IN_EDGE_LABEL
            self._read_label(cursor, SpanKind.EDGE_LABEL, BracketStyle.PIPE)
            self.state = ScanState.OUTSIDE
        else:
            self.pos = arrow_end

    def _after_identifier(self) -> None:
        line = self.line
        cursor = self.pos
        while cursor < len(line) and is_identifier_char(line[cursor]):
            cursor += 1
        self.pos = cursor
        if cursor >= len(line) or line[cursor] not in '[({>':
            return

        for opener, closer in SKIPPED_SHAPES:
            if line.startswith(opener, cursor):
                closing = line.find(closer, cursor + len(opener))
                if closing >= 0:
                    self.pos = closing + len(closer)
                    self.shape_ends.append(self.pos)
                    return
        if line.startswith('>', cursor):
            raise LabelScanError(f"unterminated asymmetric shape at {cursor}")
        if any(line.startswith(opener, cursor) for opener, _ in SKIPPED_SHAPES):
            raise LabelScanError(f"unterminated shape at {cursor}")

        for style in NODE_STYLES:
            if line.startswith(style.opener, cursor):
                self.state = ScanState.IN_NODE_LABEL
                self._read_label(cursor, SpanKind.NODE_LABEL, style)
                self.state = ScanState.OUTSIDE
                return

    def _read_label(self, start: int, kind: SpanKind, style: BracketStyle) -> None:
        inner_start = start + len(style.opener)
        if self.line.startswith('"', inner_start):
            inner_end = self._find_quoted_end(inner_start, style.closer)
        else:
            inner_end = self._find_closer(inner_start, style)

        raw_inner = self.line[inner_start:inner_end]
        is_quoted = len(raw_inner) >= 2 and raw_inner[0] == '"' and raw_inner[-1] == '"'
        end = inner_end + len(style.closer)
        self.spans.append(LabelSpan(
            kind=kind,
            bracket_style=style,
            start=start,
            end=end,
            inner_start=inner_start,
            inner_end=inner_end,
            raw_inner_text=raw_inner,
            is_quoted=is_quoted,
        ))
        self.pos = end

    def _find_quoted_end(self, quote_start: int, closer: str) -> int:
        """
        Index one past the quote that closes a quoted label.

        The closing quote is the first unescaped ``"`` directly followed by
        the structural closer, so nested quotes stay inside the span.

        Mermaid itself has no escapes, so ``["C:\\Temp\\"] --> B["x"]`` is two
        nodes. When skipping an escaped quote would pull arrows or node
        openers into the label, the line is ambiguous and raises.
        """
        line = self.line
        cursor = quote_start + 1
        escaped_end = None
        while cursor < len(line):
            ch = line[cursor]
            if ch == '\\':
                if escaped_end is None and line.startswith('"' + closer, cursor + 1):
                    escaped_end = cursor + 2 + len(closer)
                cursor += 2
                continue
            if ch == '"' and line.startswith(closer, cursor + 1):
                if escaped_end is not None and _MORE_DIAGRAM.search(line, escaped_end, cursor):
                    raise LabelScanError(f"escaped quote before closer at {escaped_end - len(closer) - 2} is ambiguous")
                return cursor + 1
            cursor += 1
        raise LabelScanError(f"unterminated quoted label at {quote_start}")

    def _find_closer(self, inner_start: int, style: BracketStyle) -> int:
        """
        Index of the closer of an unquoted label, allowing one nested pair.
        """
        line = self.line
        open_ch = style.opener[0]
        close_ch = style.closer[0]
        depth = 0
        cursor = inner_start
        while cursor < len(line):
            ch = line[cursor]
            if ch == '\\' and style is BracketStyle.PIPE:
                cursor += 2
                continue
            if open_ch != close_ch and ch == open_ch:
                depth += 1
                if depth > 1:
                    raise LabelScanError(f"label nested too deep at {cursor}")
            elif ch == close_ch:
                if depth > 0:
                    depth -= 1
                elif line.startswith(style.closer, cursor):
                    return cursor
                else:
                    raise LabelScanError(f"mismatched {ch!r} at {cursor}")
            cursor += 1
        raise LabelScanError(f"unterminated {style.name.lower()} label at {inner_start}")


def scan_labels(line: str) -> Optional[Tuple[LabelSpan, ...]]:
    """
    Locate all label spans in a content line.

    Returns:
        Spans in left-to-right order, or None when the line cannot be
        scanned confidently.
    """
    try:
        return LabelScanner(line).scan()
    except LabelScanError as e:
        logger.debug(f"Leaving unscannable line untouched ({e}): {line!r}")
        return None


def skipped_shape_ends(line: str) -> FrozenSet[int]:
    """End offsets of the shapes scan_labels() steps over; empty when unscannable"""
    scanner = LabelScanner(line)
    try:
        scanner.scan()
    except LabelScanError:
        return frozenset()
    return frozenset(scanner.shape_ends)
