"""
Line and label model for Mermaid syntax repair

Every value here is built per sanitize() call and thrown away afterwards.
Offsets are Python string indices, so they always land on code point
boundaries of the source text.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class LineKind(Enum):
    """Classification assigned by the line segmenter"""
    BLANK = "blank"
    COMMENT = "comment"
    STRUCTURAL = "structural"
    CONTENT = "content"


class SpanKind(Enum):
    NODE_LABEL = "node_label"
    EDGE_LABEL = "edge_label"


class BracketStyle(Enum):
    """
    Label delimiters the scanner understands.

    The value is the (opener, closer) pair as it appears in source text.
    """
    SQUARE = ("[", "]")
    ROUND = ("(", ")")
    CURLY = ("{", "}")
    DOUBLE_ROUND = ("((", "))")
    DOUBLE_SQUARE = ("[[", "]]")
    PIPE = ("|", "|")

    @property
    def opener(self) -> str:
        return self.value[0]

    @property
    def closer(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class LabelSpan:
    """
    A located label inside one content line.

    Attributes:
        kind: Node label or edge label
        bracket_style: Delimiters around the label
        start: Index of the first opener character
        end: Index one past the last closer character
        inner_start: Index of the first character between the delimiters
        inner_end: Index one past the last character between the delimiters
        raw_inner_text: line[inner_start:inner_end], quotes included
        is_quoted: True when the inner text starts and ends with a double quote
    """
    kind: SpanKind
    bracket_style: BracketStyle
    start: int
    end: int
    inner_start: int
    inner_end: int
    raw_inner_text: str
    is_quoted: bool

    @property
    def quoted_content(self) -> str:
        """Inner text without its delimiting quotes (only meaningful when quoted)"""
        if not self.is_quoted:
            return self.raw_inner_text
        return self.raw_inner_text[1:-1]

    def is_empty_quoted(self) -> bool:
        return self.is_quoted and self.raw_inner_text == '""'


@dataclass(frozen=True)
class Line:
    """
    One source line.

    ``text`` never contains the terminator; ``ending`` holds it so that
    ``text + ending`` for every line rebuilds the source exactly.
    ``spans`` is None for content lines whose brackets could not be matched.
    """
    text: str
    ending: str
    kind: LineKind
    spans: Optional[Tuple[LabelSpan, ...]] = field(default_factory=tuple)

    @property
    def raw(self) -> str:
        return self.text + self.ending


class SanitizeStatus(str, Enum):
    UNCHANGED = "unchanged"
    FIXED = "fixed"


@dataclass(frozen=True)
class SanitizeResult:
    """
    Outcome of one sanitize() call.

    FIXED is only produced when ``text`` differs from the input;
    ``rules_applied`` names the passes that modified at least one line.
    """
    status: SanitizeStatus
    text: str
    rules_applied: Tuple[str, ...] = ()

    @classmethod
    def unchanged(cls, text: str) -> "SanitizeResult":
        return cls(SanitizeStatus.UNCHANGED, text)

    @classmethod
    def fixed(cls, text: str, rules_applied: Tuple[str, ...] = ()) -> "SanitizeResult":
        return cls(SanitizeStatus.FIXED, text, tuple(rules_applied))

    @property
    def changed(self) -> bool:
        return self.status is SanitizeStatus.FIXED

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "text": self.text,
            "rules_applied": list(self.rules_applied),
        }


def splice(text: str, start: int, end: int, replacement: str) -> str:
    """Replace text[start:end] with replacement"""
    return text[:start] + replacement + text[end:]


def find_span_ending_at(spans: Optional[Tuple[LabelSpan, ...]], index: int) -> Optional[LabelSpan]:
    """Return the span whose closing delimiter ends exactly at ``index``"""
    for span in spans or ():
        if span.end == index:
            return span
    return None
