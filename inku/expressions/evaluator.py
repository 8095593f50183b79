"""
Вычислитель выражений директив.

Проходит по AST выражения и вычисляет его значение в контексте
переменных шаблона. Никакого исполнения кода хоста: доступны только
литералы, переменные контекста, доступ к членам/индексам и операторы
из грамматики парсера.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Mapping
from typing import Any, Callable, Optional, cast

from .lexer import ExpressionSyntaxError
from .model import (
    ArrayExpression,
    BinaryExpression,
    ConditionalExpression,
    Expression,
    ExpressionType,
    IdentifierExpression,
    IndexExpression,
    LiteralExpression,
    LogicalExpression,
    MemberExpression,
    ObjectExpression,
    UnaryExpression,
)
from .parser import ExpressionParser

logger = logging.getLogger(__name__)


class EvaluationError(Exception):
    """Ошибка при вычислении выражения (неизвестная переменная, несовместимые типы и т.п.)."""
    pass


class _Unevaluable:
    """Маркер «выражение не удалось вычислить». Ложен и выводится как пустая строка."""

    _instance: Optional["_Unevaluable"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNEVALUABLE"


UNEVALUABLE = _Unevaluable()

ErrorCallback = Callable[[str, Exception], None]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float))


class ExpressionEvaluator:
    """
    Вычислитель выражений.

    Принимает AST выражения и отображение имён на значения,
    возвращает значение выражения.
    """

    def __init__(self, context: Mapping[str, Any]):
        """
        Args:
            context: Переменные, видимые выражению как идентификаторы
        """
        self.context = context

    def evaluate(self, expression: Expression) -> Any:
        """
        Вычисляет значение выражения.

        Raises:
            EvaluationError: При ошибке вычисления
        """
        expr_type = expression.get_type()

        if expr_type == ExpressionType.LITERAL:
            return cast(LiteralExpression, expression).value
        elif expr_type == ExpressionType.ARRAY:
            return [self.evaluate(item) for item in cast(ArrayExpression, expression).items]
        elif expr_type == ExpressionType.OBJECT:
            return {key: self.evaluate(value) for key, value in cast(ObjectExpression, expression).entries}
        elif expr_type == ExpressionType.IDENTIFIER:
            return self._evaluate_identifier(cast(IdentifierExpression, expression))
        elif expr_type == ExpressionType.MEMBER:
            return self._evaluate_member(cast(MemberExpression, expression))
        elif expr_type == ExpressionType.INDEX:
            return self._evaluate_index(cast(IndexExpression, expression))
        elif expr_type == ExpressionType.UNARY:
            return self._evaluate_unary(cast(UnaryExpression, expression))
        elif expr_type == ExpressionType.BINARY:
            return self._evaluate_binary(cast(BinaryExpression, expression))
        elif expr_type == ExpressionType.LOGICAL:
            return self._evaluate_logical(cast(LogicalExpression, expression))
        elif expr_type == ExpressionType.CONDITIONAL:
            return self._evaluate_conditional(cast(ConditionalExpression, expression))
        else:
            raise EvaluationError(f"Unknown expression type: {expr_type}")

    def _evaluate_identifier(self, expression: IdentifierExpression) -> Any:
        if expression.name not in self.context:
            raise EvaluationError(f"'{expression.name}' is not defined")
        return self.context[expression.name]

    def _evaluate_member(self, expression: MemberExpression) -> Any:
        target = self.evaluate(expression.object)
        return _get_member(target, expression.name)

    def _evaluate_index(self, expression: IndexExpression) -> Any:
        target = self.evaluate(expression.object)
        index = self.evaluate(expression.index)

        if target is None:
            raise EvaluationError(f"Cannot read index {index!r} of null")

        if isinstance(target, Mapping):
            try:
                if index in target:
                    return target[index]
            except TypeError as e:
                raise EvaluationError(f"Unhashable index {index!r}") from e
            return target.get(stringify(index))

        if isinstance(target, (list, tuple, str)):
            if isinstance(index, float) and index.is_integer():
                index = int(index)
            if isinstance(index, bool) or not isinstance(index, int):
                if isinstance(index, str):
                    return _get_member(target, index)
                return None
            # Отрицательные индексы и выход за границы дают undefined, как в JS
            if 0 <= index < len(target):
                return target[index]
            return None

        return None

    def _evaluate_unary(self, expression: UnaryExpression) -> Any:
        value = self.evaluate(expression.operand)

        if expression.operator == "!":
            return not value
        if expression.operator == "-":
            if not _is_number(value):
                raise EvaluationError(f"Bad operand for unary '-': {value!r}")
            return -value
        if expression.operator == "+":
            return _to_number(value)
        raise EvaluationError(f"Unknown unary operator: {expression.operator}")

    def _evaluate_binary(self, expression: BinaryExpression) -> Any:
        left = self.evaluate(expression.left)
        right = self.evaluate(expression.right)
        op = expression.operator

        if op == "+":
            if _is_number(left) and _is_number(right):
                return left + right
            if isinstance(left, str) or isinstance(right, str):
                return stringify(left) + stringify(right)
            if isinstance(left, list) and isinstance(right, list):
                return left + right
            raise EvaluationError(f"Bad operands for '+': {left!r}, {right!r}")

        if op in ("-", "*", "/", "%"):
            if not (_is_number(left) and _is_number(right)):
                raise EvaluationError(f"Bad operands for '{op}': {left!r}, {right!r}")
            if op == "-":
                return left - right
            if op == "*":
                return left * right
            if right == 0:
                raise EvaluationError("Division by zero")
            if op == "/":
                return left / right
            # Остаток со знаком делимого, как в JS
            remainder = math.fmod(left, right)
            if isinstance(left, int) and isinstance(right, int):
                return int(remainder)
            return remainder

        if op in ("===", "!=="):
            equal = _strict_equals(left, right)
            return equal if op == "===" else not equal

        if op in ("==", "!="):
            equal = _loose_equals(left, right)
            return equal if op == "==" else not equal

        try:
            if op == "<":
                return left < right
            if op == "<=":
                return left <= right
            if op == ">":
                return left > right
            if op == ">=":
                return left >= right
        except TypeError as e:
            raise EvaluationError(f"Cannot compare {left!r} and {right!r}") from e

        raise EvaluationError(f"Unknown binary operator: {op}")

    def _evaluate_logical(self, expression: LogicalExpression) -> Any:
        left = self.evaluate(expression.left)
        if expression.operator == "&&":
            return self.evaluate(expression.right) if left else left
        return left if left else self.evaluate(expression.right)

    def _evaluate_conditional(self, expression: ConditionalExpression) -> Any:
        if self.evaluate(expression.test):
            return self.evaluate(expression.consequent)
        return self.evaluate(expression.alternate)


def _get_member(target: Any, name: str) -> Any:
    if target is None:
        raise EvaluationError(f"Cannot read property '{name}' of null")

    if isinstance(target, Mapping):
        if name in target:
            return target[name]
        if name == "length":
            return len(target)
        return None

    if isinstance(target, (list, tuple, str)):
        if name == "length":
            return len(target)
        return None

    # Закрытые и служебные атрибуты недоступны из шаблона
    if name.startswith("_"):
        return None
    return getattr(target, name, None)


def _to_number(value: Any) -> int | float:
    if _is_number(value):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            pass
    raise EvaluationError(f"Cannot convert {value!r} to number")


def _strict_equals(left: Any, right: Any) -> bool:
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    if _is_number(left) and _is_number(right):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def _loose_equals(left: Any, right: Any) -> bool:
    if _is_number(left) and isinstance(right, str) or isinstance(left, str) and _is_number(right):
        try:
            return _to_number(left) == _to_number(right)
        except EvaluationError:
            return False
    return left == right


def stringify(value: Any) -> str:
    """
    Преобразует значение в текст для вывода в документ.

    null/undefined и невычислимые значения дают пустую строку,
    булевы значения выводятся как true/false, целые float выводятся без дробной части.
    """
    if value is None or value is UNEVALUABLE:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (list, tuple)):
        return ",".join(stringify(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(dict(value), ensure_ascii=False, default=str)
    return str(value)


def evaluate(expr: str, context: Mapping[str, Any], on_error: Optional[ErrorCallback] = None) -> Any:
    """
    Вычисляет выражение директивы в контексте.

    Никогда не бросает исключений: синтаксические ошибки, неизвестные
    переменные и ошибки времени выполнения превращаются в UNEVALUABLE.

    Args:
        expr: Текст выражения
        context: Переменные контекста
        on_error: Необязательный обработчик ошибок (для диагностики)

    Returns:
        Значение выражения или UNEVALUABLE
    """
    try:
        ast = ExpressionParser().parse(expr)
        return ExpressionEvaluator(context).evaluate(ast)
    except (ExpressionSyntaxError, EvaluationError) as e:
        logger.debug("Expression %r is unevaluable: %s", expr, e)
        if on_error is not None:
            on_error(expr, e)
        return UNEVALUABLE


def evaluate_literal(text: str) -> Any:
    """
    Вычисляет выражение, состоящее только из литералов (без переменных).

    Используется для объявлений {{ $name = ... }}, аргументов include
    и строк, похожих на литерал массива.

    Raises:
        ExpressionSyntaxError: Если текст не является литеральным выражением
        EvaluationError: При ошибке вычисления
    """
    ast = ExpressionParser(allow_identifiers=False).parse(text)
    return ExpressionEvaluator({}).evaluate(ast)


__all__ = [
    "EvaluationError",
    "ExpressionEvaluator",
    "UNEVALUABLE",
    "evaluate",
    "evaluate_literal",
    "stringify",
]
