"""
Tests for the expression lexer.
"""

import pytest

from inku.expressions.lexer import ExpressionLexer, ExpressionSyntaxError


class TestExpressionLexer:

    def setup_method(self):
        self.lexer = ExpressionLexer()

    def _types(self, text):
        return [t.type for t in self.lexer.tokenize(text)]

    def _values(self, text):
        return [t.value for t in self.lexer.tokenize(text)]

    def test_empty_input_yields_only_eof(self):
        tokens = self.lexer.tokenize("   ")
        assert len(tokens) == 1
        assert tokens[0].type == "EOF"

    def test_numbers(self):
        assert self._values("42 3.14 .5 1e3") == ["42", "3.14", ".5", "1e3", ""]
        assert self._types("42 3.14") == ["NUMBER", "NUMBER", "EOF"]

    def test_strings_are_unescaped(self):
        tokens = self.lexer.tokenize(r"""'it\'s' "a\"b" "x\ny" """)
        assert [t.type for t in tokens[:3]] == ["STRING", "STRING", "STRING"]
        assert tokens[0].value == "it's"
        assert tokens[1].value == 'a"b'
        assert tokens[2].value == "x\ny"

    def test_keywords_and_identifiers(self):
        tokens = self.lexer.tokenize("true and item_1 or $x not None")
        assert [(t.type, t.value) for t in tokens[:-1]] == [
            ("KEYWORD", "true"),
            ("KEYWORD", "and"),
            ("IDENTIFIER", "item_1"),
            ("KEYWORD", "or"),
            ("IDENTIFIER", "$x"),
            ("KEYWORD", "not"),
            ("KEYWORD", "None"),
        ]

    def test_long_operators_take_precedence(self):
        assert self._values("a === b !== c <= d && e || f") == [
            "a", "===", "b", "!==", "c", "<=", "d", "&&", "e", "||", "f", "",
        ]

    def test_positions(self):
        tokens = self.lexer.tokenize("a + bb")
        assert [t.position for t in tokens] == [0, 2, 4, 6]

    def test_unterminated_string(self):
        with pytest.raises(ExpressionSyntaxError, match="Unterminated string literal"):
            self.lexer.tokenize('"abc')

    def test_unexpected_character(self):
        with pytest.raises(ExpressionSyntaxError, match="Unexpected character '@'") as exc:
            self.lexer.tokenize("a @ b")
        assert exc.value.position == 2
