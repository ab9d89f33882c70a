"""
Tests for the individual syntax repair rules.

Each rule is exercised on its own, with spans taken straight from the scanner.
"""

import pytest
from mermaid_repair.internal.label_scanner import scan_labels
from mermaid_repair.internal.syntax_rules import (
    DEFAULT_TRIGGERS,
    EDGE_TRIGGER_CHARS,
    NODE_TRIGGER_CHARS,
    SYNTAX_RULES,
    TriggerTable,
    drop_escapes,
    normalize_escapes,
    quote_special_chars,
    resolve_nested_quotes,
    strip_empty_edge_labels,
    strip_trailing_punctuation,
)
from mermaid_repair.internal.diagram_model import SpanKind
from mermaid_repair.internal.settings import get_trigger_table


def apply(rule, line, triggers=DEFAULT_TRIGGERS):
    return rule(line, scan_labels(line), triggers)


class TestTriggerTable:
    """Test the two trigger character sets."""

    def test_default_sets(self):
        assert NODE_TRIGGER_CHARS == frozenset(".!:&|()")
        assert EDGE_TRIGGER_CHARS == NODE_TRIGGER_CHARS | {"{", "}"}
        assert "{" not in DEFAULT_TRIGGERS.for_kind(SpanKind.NODE_LABEL)
        assert "{" in DEFAULT_TRIGGERS.for_kind(SpanKind.EDGE_LABEL)

    def test_with_extra_widens_both_sets(self):
        table = DEFAULT_TRIGGERS.with_extra("@#")

        assert {"@", "#"} <= table.node_chars
        assert {"@", "#"} <= table.edge_chars

    def test_with_extra_never_adds_curly_braces_to_nodes(self):
        table = DEFAULT_TRIGGERS.with_extra("{}")

        assert "{" not in table.node_chars
        assert table.edge_chars == EDGE_TRIGGER_CHARS

    def test_with_extra_ignores_quotes_and_whitespace(self):
        assert DEFAULT_TRIGGERS.with_extra(' "\t') is DEFAULT_TRIGGERS

    def test_table_is_immutable(self):
        with pytest.raises(Exception):
            DEFAULT_TRIGGERS.node_chars = frozenset()


class TestDropEscapes:
    """Test the escape remover shared by two rules."""

    @pytest.mark.parametrize("content,expected", [
        ('[\\"a\\"]', "['a']"),
        ("it\\'s", "it's"),
        ("tab\\there", "tabthere"),
        ("a\\\\b", "ab"),
        ("trailing\\", "trailing"),
        ("plain", "plain"),
    ])
    def test_drop_escapes(self, content, expected):
        assert drop_escapes(content) == expected


class TestNormalizeEscapes:
    def test_only_quoted_spans_are_touched(self):
        line = 'A["a\\"b"] --> B[c\\d]'

        assert apply(normalize_escapes, line) == "A[\"a'b\"] --> B[c\\d]"

    def test_no_op_without_backslashes(self):
        line = 'A["File.open"] --> B'

        assert apply(normalize_escapes, line) is line


class TestResolveNestedQuotes:
    def test_strips_inner_quotes(self):
        assert apply(resolve_nested_quotes, 'B -->|"{self, "World!"}"| C') == 'B -->|"{self, World!}"| C'

    def test_leaves_plain_quoted_labels(self):
        line = 'B -->|"{self}"| C'

        assert apply(resolve_nested_quotes, line) is line


class TestStripEmptyEdgeLabels:
    @pytest.mark.parametrize("line,expected", [
        ('B -->|""| D', "B --> D"),
        ('B ---|""| D[Done]', "B --- D[Done]"),
        ('B -->|""|D', "B --> D"),
        ('B --> |""|   D', "B --> D"),
        ('B -->|""|', "B -->"),
        ('A -->|""| B -->|""| C', "A --> B --> C"),
    ])
    def test_strips(self, line, expected):
        assert apply(strip_empty_edge_labels, line) == expected

    def test_keeps_non_empty_labels(self):
        line = 'B -->|"x"| D'

        assert apply(strip_empty_edge_labels, line) is line

    def test_ignores_empty_node_labels(self):
        line = 'A[""] --> B'

        assert apply(strip_empty_edge_labels, line) is line


class TestQuoteSpecialChars:
    def test_quotes_node_and_edge(self):
        line = "A[File.open] -->|{:ok, file}| B"

        assert apply(quote_special_chars, line) == 'A["File.open"] -->|"{:ok, file}"| B'

    def test_is_additive(self):
        line = "A[ spaced: out ] --> B"

        assert apply(quote_special_chars, line) == 'A[" spaced: out "] --> B'

    def test_diamond_is_never_quoted(self):
        line = "C{Done?: yes.} --> D"

        assert apply(quote_special_chars, line) is line

    def test_custom_trigger_table(self):
        table = TriggerTable(node_chars=frozenset("@"), edge_chars=frozenset())
        line = "A[user@host] -->|a: b| B[x.y]"

        assert apply(quote_special_chars, line, table) == 'A["user@host"] -->|a: b| B[x.y]'


class TestStripTrailingPunctuation:
    @pytest.mark.parametrize("line,expected", [
        ('A --> D["inner function"].', 'A --> D["inner function"]'),
        ("A --> B(Round).", "A --> B(Round)"),
        ("A --> C{Diamond}.", "A --> C{Diamond}"),
        ("A --> B[Done].  ", "A --> B[Done]  "),
        ("A --> B[(Database)].", "A --> B[(Database)]"),
        ("A --> B([Stadium]).", "A --> B([Stadium])"),
    ])
    def test_strips(self, line, expected):
        assert apply(strip_trailing_punctuation, line) == expected

    @pytest.mark.parametrize("line", [
        "A --> B.",
        "A --> B[Wait]..",
        "A --> B[Done]",
        "A[One.] --> B",
        "A --> B(x) C.",
    ])
    def test_keeps(self, line):
        assert apply(strip_trailing_punctuation, line) is line


class TestRuleTable:
    def test_rule_order(self):
        assert [name for name, _ in SYNTAX_RULES] == [
            "escaped_quotes",
            "nested_quotes",
            "empty_edge_labels",
            "special_chars",
            "trailing_punctuation",
        ]

    @pytest.mark.parametrize("name,rule", SYNTAX_RULES)
    def test_rules_skip_unscannable_lines(self, name, rule):
        line = 'A[File.open --> B -->|""| C.'

        assert rule(line, None, DEFAULT_TRIGGERS) is line


class TestConfiguredTriggers:
    """Test the trigger table built from configuration."""

    def test_no_extra_chars_gives_defaults(self):
        assert get_trigger_table("") is DEFAULT_TRIGGERS
        assert get_trigger_table(None) is DEFAULT_TRIGGERS

    def test_extra_chars_are_added(self):
        table = get_trigger_table("@")

        assert "@" in table.node_chars
        assert apply(quote_special_chars, "A[user@host] --> B", table) == 'A["user@host"] --> B'
