"""
Syntax repair rules for flowchart content lines

Each rule is a pure function ``rule(text, spans, triggers) -> str`` that
returns the line unchanged unless its own defect class is present. Spans are
edited right to left so earlier offsets stay valid. A line the scanner
could not read (spans is None) passes through every rule untouched.
"""

from dataclasses import dataclass
from typing import Callable, FrozenSet, Optional, Tuple

from .diagram_model import BracketStyle, LabelSpan, SpanKind, find_span_ending_at, splice
from .label_scanner import skipped_shape_ends

Spans = Optional[Tuple[LabelSpan, ...]]

# No curly braces in the node set, inside node brackets they open a diamond shape
NODE_TRIGGER_CHARS = frozenset('.!:&|()')
EDGE_TRIGGER_CHARS = NODE_TRIGGER_CHARS | frozenset('{}')

LABEL_CLOSERS = frozenset(')]}')


@dataclass(frozen=True)
class TriggerTable:
    """Characters that force quoting, one set per label kind"""
    node_chars: FrozenSet[str] = NODE_TRIGGER_CHARS
    edge_chars: FrozenSet[str] = EDGE_TRIGGER_CHARS

    def for_kind(self, kind: SpanKind) -> FrozenSet[str]:
        if kind is SpanKind.EDGE_LABEL:
            return self.edge_chars
        return self.node_chars

    def with_extra(self, chars: str) -> "TriggerTable":
        """
        Widen both sets with extra characters (e.g. "@").

        Quotes and whitespace are ignored, and curly braces are never added
        to the node set.
        """
        extra = frozenset(c for c in chars if c.strip() and c != '"')
        if not extra:
            return self
        return TriggerTable(
            node_chars=self.node_chars | (extra - frozenset('{}')),
            edge_chars=self.edge_chars | extra,
        )


DEFAULT_TRIGGERS = TriggerTable()


def drop_escapes(content: str) -> str:
    """
    Remove backslash escapes from label text.

    ``\\"`` and ``\\'`` become a plain single quote; any other escaped
    character is kept literally. Runs of backslashes collapse together, so
    the result never contains a backslash.
    """
    out = []
    i = 0
    while i < len(content):
        ch = content[i]
        if ch != '\\':
            out.append(ch)
            i += 1
            continue
        while i < len(content) and content[i] == '\\':
            i += 1
        if i >= len(content):
            break
        escaped = content[i]
        out.append("'" if escaped in '"\'' else escaped)
        i += 1
    return "".join(out)


def normalize_escapes(text: str, spans: Spans, triggers: TriggerTable = DEFAULT_TRIGGERS) -> str:
    """Rewrite backslash escapes inside quoted labels"""
    if not spans:
        return text
    for span in reversed(spans):
        if not span.is_quoted or '\\' not in span.quoted_content:
            continue
        text = splice(text, span.inner_start + 1, span.inner_end - 1, drop_escapes(span.quoted_content))
    return text


def resolve_nested_quotes(text: str, spans: Spans, triggers: TriggerTable = DEFAULT_TRIGGERS) -> str:
    """Strip literal double quotes found inside a quoted label: {self, "World!"} -> {self, World!}"""
    if not spans:
        return text
    for span in reversed(spans):
        if not span.is_quoted or '"' not in span.quoted_content:
            continue
        text = splice(text, span.inner_start + 1, span.inner_end - 1, span.quoted_content.replace('"', ''))
    return text


def strip_empty_edge_labels(text: str, spans: Spans, triggers: TriggerTable = DEFAULT_TRIGGERS) -> str:
    """
    Remove ``|""|`` after any arrow.

    ``B -->|""| D`` becomes ``B --> D``: whitespace around the removed label
    collapses to one space, or to nothing at the end of the line.
    """
    if not spans:
        return text
    for span in reversed(spans):
        if span.kind is not SpanKind.EDGE_LABEL or not span.is_empty_quoted():
            continue
        left = span.start
        while left > 0 and text[left - 1] in ' \t':
            left -= 1
        right = span.end
        while right < len(text) and text[right] in ' \t':
            right += 1
        text = splice(text, left, right, ' ' if right < len(text) else '')
    return text


def needs_quoting(span: LabelSpan, triggers: TriggerTable) -> bool:
    if span.is_quoted:
        return False
    # {Diamond} is a shape, its text is never wrapped
    if span.kind is SpanKind.NODE_LABEL and span.bracket_style is BracketStyle.CURLY:
        return False
    chars = triggers.for_kind(span.kind)
    return any(ch in chars for ch in span.raw_inner_text)


def quote_special_chars(text: str, spans: Spans, triggers: TriggerTable = DEFAULT_TRIGGERS) -> str:
    """Wrap unquoted labels holding trigger characters in double quotes"""
    if not spans:
        return text
    for span in reversed(spans):
        if not needs_quoting(span, triggers):
            continue
        content = drop_escapes(span.raw_inner_text)
        if '"' in content:
            # Mixed quoting such as [say "hi".] is ambiguous
            continue
        text = splice(text, span.inner_start, span.inner_end, f'"{content}"')
    return text


def strip_trailing_punctuation(text: str, spans: Spans, triggers: TriggerTable = DEFAULT_TRIGGERS) -> str:
    """
    Drop one sentence-style period after the last node: D["text"]. -> D["text"]

    The closer before the period must end a label span or a shape the
    scanner stepped over (B[(Database)].).
    """
    if spans is None:
        return text
    stripped = text.rstrip()
    if len(stripped) < 2 or not stripped.endswith('.'):
        return text
    dot = len(stripped) - 1
    if stripped[dot - 1] not in LABEL_CLOSERS:
        return text

    if find_span_ending_at(spans, dot) is None and dot not in skipped_shape_ends(text):
        return text
    return splice(text, dot, dot + 1, '')


Rule = Callable[[str, Spans, TriggerTable], str]

# Fixed application order; escapes must be gone before quotes are inspected
SYNTAX_RULES: Tuple[Tuple[str, Rule], ...] = (
    ("escaped_quotes", normalize_escapes),
    ("nested_quotes", resolve_nested_quotes),
    ("empty_edge_labels", strip_empty_edge_labels),
    ("special_chars", quote_special_chars),
    ("trailing_punctuation", strip_trailing_punctuation),
)
