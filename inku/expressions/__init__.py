"""
Песочница для выражений внутри директив шаблона.

Ограниченная грамматика (литералы, переменные, доступ к членам и индексам,
арифметика, сравнения, логические и тернарный операторы), разбираемая
рекурсивным спуском. Код хоста никогда не исполняется.
"""

from .evaluator import (
    UNEVALUABLE,
    EvaluationError,
    ExpressionEvaluator,
    evaluate,
    evaluate_literal,
    stringify,
)
from .lexer import ExpressionLexer, ExpressionSyntaxError
from .parser import ExpressionParser

__all__ = [
    # Основные функции
    "evaluate",
    "evaluate_literal",
    "stringify",
    "UNEVALUABLE",

    # Исключения
    "ExpressionSyntaxError",
    "EvaluationError",

    # Низкоуровневые классы (для тестирования и отладки)
    "ExpressionLexer",
    "ExpressionParser",
    "ExpressionEvaluator",
]
