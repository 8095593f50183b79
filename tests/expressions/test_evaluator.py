"""
Tests for the expression evaluator.
"""

import pytest

from inku.context import Context
from inku.expressions import (
    UNEVALUABLE,
    EvaluationError,
    ExpressionSyntaxError,
    evaluate,
    evaluate_literal,
    stringify,
)


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y
        self._secret = "hidden"


class TestEvaluate:

    def setup_method(self):
        self.ctx = Context({
            "items": ["a", "b", "c"],
            "user": {"name": "Ann", "age": 30, "tags": ["x", "y"]},
            "n": 3,
            "empty": "",
            "nothing": None,
            "point": Point(1, 2),
        })

    def test_identifiers_and_members(self):
        assert evaluate("n", self.ctx) == 3
        assert evaluate("user.name", self.ctx) == "Ann"
        assert evaluate("user['age']", self.ctx) == 30
        assert evaluate("user.tags[1]", self.ctx) == "y"
        assert evaluate("point.x + point.y", self.ctx) == 3

    def test_length(self):
        assert evaluate("items.length", self.ctx) == 3
        assert evaluate("user.name.length", self.ctx) == 3
        assert evaluate("user.length", self.ctx) == 3

    def test_missing_member_is_none(self):
        assert evaluate("user.missing", self.ctx) is None
        assert evaluate("items[10]", self.ctx) is None
        assert evaluate("items[-1]", self.ctx) is None

    def test_private_attributes_are_hidden(self):
        assert evaluate("point._secret", self.ctx) is None
        assert evaluate("point.__class__", self.ctx) is None

    def test_arithmetic(self):
        assert evaluate("n * 2 + 1", self.ctx) == 7
        assert evaluate("7 / 2", self.ctx) == 3.5
        assert evaluate("-7 % 3", self.ctx) == -1
        assert evaluate("+'5' + 1", self.ctx) == 6

    def test_string_concatenation(self):
        assert evaluate("'n=' + n", self.ctx) == "n=3"
        assert evaluate("user.name + '!'", self.ctx) == "Ann!"
        assert evaluate("'on: ' + true", self.ctx) == "on: true"

    def test_comparisons_and_equality(self):
        assert evaluate("n > 2", self.ctx) is True
        assert evaluate("n <= 2", self.ctx) is False
        assert evaluate("n == '3'", self.ctx) is True
        assert evaluate("n === '3'", self.ctx) is False
        assert evaluate("n !== 3", self.ctx) is False
        assert evaluate("1 === 1.0", self.ctx) is True
        assert evaluate("true === 1", self.ctx) is False

    def test_logical_operators_return_operands(self):
        assert evaluate("empty || 'default'", self.ctx) == "default"
        assert evaluate("user.name && user.age", self.ctx) == 30
        assert evaluate("nothing && missing_name", self.ctx) is None
        assert evaluate("not empty", self.ctx) is True

    def test_conditional(self):
        assert evaluate("n > 1 ? 'many' : 'one'", self.ctx) == "many"
        assert evaluate("items.length === 0 ? 'none' : items[0]", self.ctx) == "a"

    def test_collection_literals(self):
        assert evaluate("[1, n, 'x']", self.ctx) == [1, 3, "x"]
        assert evaluate("{a: n, 'b': [1]}", self.ctx) == {"a": 3, "b": [1]}

    def test_undefined_identifier_is_unevaluable(self):
        assert evaluate("missing", self.ctx) is UNEVALUABLE
        assert evaluate("missing.name", self.ctx) is UNEVALUABLE

    def test_runtime_errors_are_unevaluable(self):
        assert evaluate("n / 0", self.ctx) is UNEVALUABLE
        assert evaluate("nothing.name", self.ctx) is UNEVALUABLE
        assert evaluate("user < 1", self.ctx) is UNEVALUABLE
        assert evaluate("-'x'", self.ctx) is UNEVALUABLE

    def test_syntax_errors_are_unevaluable(self):
        assert evaluate("n +", self.ctx) is UNEVALUABLE
        assert evaluate("", self.ctx) is UNEVALUABLE

    def test_error_callback(self):
        errors = []
        result = evaluate("missing", self.ctx, on_error=lambda expr, e: errors.append((expr, e)))

        assert result is UNEVALUABLE
        assert len(errors) == 1
        assert errors[0][0] == "missing"
        assert isinstance(errors[0][1], EvaluationError)
        assert "'missing' is not defined" in str(errors[0][1])

    def test_unevaluable_is_falsy_singleton(self):
        assert not UNEVALUABLE
        assert repr(UNEVALUABLE) == "UNEVALUABLE"
        assert type(UNEVALUABLE)() is UNEVALUABLE

    def test_host_code_is_not_executed(self):
        # вызовов функций в грамматике нет
        assert evaluate("__import__('os')", self.ctx) is UNEVALUABLE
        assert evaluate("items.pop()", self.ctx) is UNEVALUABLE
        assert self.ctx["items"] == ["a", "b", "c"]


class TestEvaluateLiteral:

    def test_literals(self):
        assert evaluate_literal("'A'") == "A"
        assert evaluate_literal("[1, 2, 3]") == [1, 2, 3]
        assert evaluate_literal("{a: [true, null]}") == {"a": [True, None]}
        assert evaluate_literal("2 * 21") == 42

    def test_identifiers_raise(self):
        with pytest.raises(ExpressionSyntaxError):
            evaluate_literal("name")

    def test_runtime_error_raises(self):
        with pytest.raises(EvaluationError, match="Division by zero"):
            evaluate_literal("1 / 0")


class TestStringify:

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        (UNEVALUABLE, ""),
        (True, "true"),
        (False, "false"),
        (3, "3"),
        (3.0, "3"),
        (2.5, "2.5"),
        ("text", "text"),
        ([1, "a", None], "1,a,"),
        ({"a": 1}, '{"a": 1}'),
    ])
    def test_values(self, value, expected):
        assert stringify(value) == expected
