"""
Модели данных для выражений директив.

Содержит узлы AST ограниченной грамматики выражений: литералы,
идентификаторы, доступ к членам и индексам, унарные, бинарные,
логические и тернарные операции.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple, Union


class ExpressionType(Enum):
    """Типы узлов выражений."""
    LITERAL = "literal"
    ARRAY = "array"
    OBJECT = "object"
    IDENTIFIER = "identifier"
    MEMBER = "member"
    INDEX = "index"
    UNARY = "unary"
    BINARY = "binary"
    LOGICAL = "logical"
    CONDITIONAL = "conditional"


@dataclass(frozen=True)
class Expression(ABC):
    """Базовый абстрактный класс для всех узлов выражений."""

    @abstractmethod
    def get_type(self) -> ExpressionType:
        """Возвращает тип узла."""
        pass

    def __str__(self) -> str:
        return self._to_string()

    @abstractmethod
    def _to_string(self) -> str:
        pass


@dataclass(frozen=True)
class LiteralExpression(Expression):
    """Литерал: число, строка, true/false, null."""
    value: Any

    def get_type(self) -> ExpressionType:
        return ExpressionType.LITERAL

    def _to_string(self) -> str:
        return repr(self.value)


@dataclass(frozen=True)
class ArrayExpression(Expression):
    """Литерал массива: [a, b, c]"""
    items: Tuple[Expression, ...]

    def get_type(self) -> ExpressionType:
        return ExpressionType.ARRAY

    def _to_string(self) -> str:
        return "[" + ", ".join(str(item) for item in self.items) + "]"


@dataclass(frozen=True)
class ObjectExpression(Expression):
    """Литерал объекта: {key: value, "other": value}"""
    entries: Tuple[Tuple[str, Expression], ...]

    def get_type(self) -> ExpressionType:
        return ExpressionType.OBJECT

    def _to_string(self) -> str:
        return "{" + ", ".join(f"{key!r}: {value}" for key, value in self.entries) + "}"


@dataclass(frozen=True)
class IdentifierExpression(Expression):
    """Ссылка на переменную контекста."""
    name: str

    def get_type(self) -> ExpressionType:
        return ExpressionType.IDENTIFIER

    def _to_string(self) -> str:
        return self.name


@dataclass(frozen=True)
class MemberExpression(Expression):
    """Доступ к члену: object.name"""
    object: Expression
    name: str

    def get_type(self) -> ExpressionType:
        return ExpressionType.MEMBER

    def _to_string(self) -> str:
        return f"{self.object}.{self.name}"


@dataclass(frozen=True)
class IndexExpression(Expression):
    """Доступ по индексу: object[index]"""
    object: Expression
    index: Expression

    def get_type(self) -> ExpressionType:
        return ExpressionType.INDEX

    def _to_string(self) -> str:
        return f"{self.object}[{self.index}]"


@dataclass(frozen=True)
class UnaryExpression(Expression):
    """
    Унарная операция: !x, -x, +x

    Оператор `not` нормализуется к `!` на этапе парсинга.
    """
    operator: str
    operand: Expression

    def get_type(self) -> ExpressionType:
        return ExpressionType.UNARY

    def _to_string(self) -> str:
        return f"{self.operator}{self.operand}"


@dataclass(frozen=True)
class BinaryExpression(Expression):
    """Арифметика и сравнения: left op right"""
    left: Expression
    operator: str
    right: Expression

    def get_type(self) -> ExpressionType:
        return ExpressionType.BINARY

    def _to_string(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class LogicalExpression(Expression):
    """
    Логические операции с коротким вычислением: left && right, left || right

    Как и в JavaScript, результатом является один из операндов, а не bool.
    """
    left: Expression
    operator: str  # "&&" или "||"
    right: Expression

    def get_type(self) -> ExpressionType:
        return ExpressionType.LOGICAL

    def _to_string(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class ConditionalExpression(Expression):
    """Тернарный оператор: test ? consequent : alternate"""
    test: Expression
    consequent: Expression
    alternate: Expression

    def get_type(self) -> ExpressionType:
        return ExpressionType.CONDITIONAL

    def _to_string(self) -> str:
        return f"({self.test} ? {self.consequent} : {self.alternate})"


AnyExpression = Union[
    LiteralExpression,
    ArrayExpression,
    ObjectExpression,
    IdentifierExpression,
    MemberExpression,
    IndexExpression,
    UnaryExpression,
    BinaryExpression,
    LogicalExpression,
    ConditionalExpression,
]

__all__ = [
    "Expression",
    "ExpressionType",
    "LiteralExpression",
    "ArrayExpression",
    "ObjectExpression",
    "IdentifierExpression",
    "MemberExpression",
    "IndexExpression",
    "UnaryExpression",
    "BinaryExpression",
    "LogicalExpression",
    "ConditionalExpression",
    "AnyExpression",
]
