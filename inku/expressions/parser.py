"""
Парсер выражений директив с рекурсивным спуском.

Строит AST из последовательности токенов с учётом приоритетов операторов.

Грамматика:
expression     → conditional
conditional    → or_expr ("?" expression ":" expression)?
or_expr        → and_expr (("||" | "or") and_expr)*
and_expr       → equality (("&&" | "and") equality)*
equality       → comparison (("==" | "!=" | "===" | "!==") comparison)*
comparison     → additive (("<" | "<=" | ">" | ">=") additive)*
additive       → multiplicative (("+" | "-") multiplicative)*
multiplicative → unary (("*" | "/" | "%") unary)*
unary          → ("!" | "not" | "-" | "+") unary | postfix
postfix        → primary ("." NAME | "[" expression "]")*
primary        → NUMBER | STRING | literal_keyword | IDENTIFIER
               | "(" expression ")" | array | object
array          → "[" (expression ("," expression)* ","?)? "]"
object         → "{" (key ":" expression ("," key ":" expression)* ","?)? "}"
"""

from __future__ import annotations

from typing import List, Tuple

from .lexer import ExpressionLexer, ExpressionSyntaxError, Token
from .model import (
    ArrayExpression,
    BinaryExpression,
    ConditionalExpression,
    Expression,
    IdentifierExpression,
    IndexExpression,
    LiteralExpression,
    LogicalExpression,
    MemberExpression,
    ObjectExpression,
    UnaryExpression,
)

_LITERAL_KEYWORDS = {
    "true": True,
    "True": True,
    "false": False,
    "False": False,
    "null": None,
    "None": None,
    "undefined": None,
}


class ExpressionParser:
    """
    Парсер выражений с рекурсивным спуском.

    В режиме allow_identifiers=False принимает только литералы
    (числа, строки, массивы, объекты и операции над ними); так
    вычисляются объявления и аргументы включений.
    """

    def __init__(self, allow_identifiers: bool = True):
        self.lexer = ExpressionLexer()
        self.allow_identifiers = allow_identifiers
        self._tokens: List[Token] = []
        self._position = 0

    def parse(self, text: str) -> Expression:
        """
        Парсит строку выражения в AST.

        Raises:
            ExpressionSyntaxError: При синтаксической ошибке
        """
        self._tokens = self.lexer.tokenize(text)
        self._position = 0

        if self._is_at_end():
            raise ExpressionSyntaxError("Empty expression", 0)

        result = self._parse_expression()

        if not self._is_at_end():
            current = self._current_token()
            raise ExpressionSyntaxError(f"Unexpected token '{current.value}'", current.position)

        return result

    def _parse_expression(self) -> Expression:
        return self._parse_conditional()

    def _parse_conditional(self) -> Expression:
        test = self._parse_or()
        if self._match_operator("?"):
            consequent = self._parse_expression()
            if not self._match_operator(":"):
                raise ExpressionSyntaxError("Expected ':' in conditional expression", self._current_position())
            alternate = self._parse_expression()
            return ConditionalExpression(test=test, consequent=consequent, alternate=alternate)
        return test

    def _parse_or(self) -> Expression:
        left = self._parse_and()
        while self._match_operator("||") or self._match_keyword("or"):
            right = self._parse_and()
            left = LogicalExpression(left=left, operator="||", right=right)
        return left

    def _parse_and(self) -> Expression:
        left = self._parse_equality()
        while self._match_operator("&&") or self._match_keyword("and"):
            right = self._parse_equality()
            left = LogicalExpression(left=left, operator="&&", right=right)
        return left

    def _parse_equality(self) -> Expression:
        left = self._parse_comparison()
        while True:
            op = self._match_any_operator("===", "!==", "==", "!=")
            if op is None:
                return left
            right = self._parse_comparison()
            left = BinaryExpression(left=left, operator=op, right=right)

    def _parse_comparison(self) -> Expression:
        left = self._parse_additive()
        while True:
            op = self._match_any_operator("<=", ">=", "<", ">")
            if op is None:
                return left
            right = self._parse_additive()
            left = BinaryExpression(left=left, operator=op, right=right)

    def _parse_additive(self) -> Expression:
        left = self._parse_multiplicative()
        while True:
            op = self._match_any_operator("+", "-")
            if op is None:
                return left
            right = self._parse_multiplicative()
            left = BinaryExpression(left=left, operator=op, right=right)

    def _parse_multiplicative(self) -> Expression:
        left = self._parse_unary()
        while True:
            op = self._match_any_operator("*", "/", "%")
            if op is None:
                return left
            right = self._parse_unary()
            left = BinaryExpression(left=left, operator=op, right=right)

    def _parse_unary(self) -> Expression:
        if self._match_keyword("not"):
            return UnaryExpression(operator="!", operand=self._parse_unary())
        op = self._match_any_operator("!", "-", "+")
        if op is not None:
            return UnaryExpression(operator=op, operand=self._parse_unary())
        return self._parse_postfix()

    def _parse_postfix(self) -> Expression:
        expr = self._parse_primary()
        while True:
            if self._match_operator("."):
                current = self._current_token()
                if current.type not in ("IDENTIFIER", "KEYWORD"):
                    raise ExpressionSyntaxError("Expected member name after '.'", current.position)
                self._advance()
                expr = MemberExpression(object=expr, name=current.value)
            elif self._match_operator("["):
                index = self._parse_expression()
                self._expect_operator("]", "Expected ']' after index")
                expr = IndexExpression(object=expr, index=index)
            else:
                return expr

    def _parse_primary(self) -> Expression:
        current = self._current_token()

        if current.type == "NUMBER":
            self._advance()
            return LiteralExpression(value=_parse_number(current.value))

        if current.type == "STRING":
            self._advance()
            return LiteralExpression(value=current.value)

        if current.type == "KEYWORD" and current.value in _LITERAL_KEYWORDS:
            self._advance()
            return LiteralExpression(value=_LITERAL_KEYWORDS[current.value])

        if current.type == "IDENTIFIER":
            if not self.allow_identifiers:
                raise ExpressionSyntaxError(
                    f"Identifier '{current.value}' is not allowed in a literal expression",
                    current.position,
                )
            self._advance()
            return IdentifierExpression(name=current.value)

        if self._match_operator("("):
            expr = self._parse_expression()
            self._expect_operator(")", "Expected ')' after grouped expression")
            return expr

        if self._match_operator("["):
            return self._parse_array()

        if self._match_operator("{"):
            return self._parse_object()

        if current.type == "EOF":
            raise ExpressionSyntaxError("Unexpected end of expression", current.position)
        raise ExpressionSyntaxError(f"Unexpected token '{current.value}'", current.position)

    def _parse_array(self) -> ArrayExpression:
        items: List[Expression] = []
        while not self._match_operator("]"):
            items.append(self._parse_expression())
            if self._match_operator(","):
                continue
            self._expect_operator("]", "Expected ',' or ']' in array literal")
            break
        return ArrayExpression(items=tuple(items))

    def _parse_object(self) -> ObjectExpression:
        entries: List[Tuple[str, Expression]] = []
        while not self._match_operator("}"):
            key_token = self._current_token()
            if key_token.type not in ("IDENTIFIER", "KEYWORD", "STRING", "NUMBER"):
                raise ExpressionSyntaxError("Expected property name in object literal", key_token.position)
            self._advance()
            self._expect_operator(":", "Expected ':' after property name")
            entries.append((key_token.value, self._parse_expression()))
            if self._match_operator(","):
                continue
            self._expect_operator("}", "Expected ',' or '}' in object literal")
            break
        return ObjectExpression(entries=tuple(entries))

    # Вспомогательные методы для работы с токенами

    def _current_token(self) -> Token:
        if self._position >= len(self._tokens):
            return Token(type='EOF', value='', position=len(self._tokens))
        return self._tokens[self._position]

    def _current_position(self) -> int:
        return self._current_token().position

    def _is_at_end(self) -> bool:
        return self._current_token().type == 'EOF'

    def _advance(self) -> Token:
        token = self._current_token()
        if not self._is_at_end():
            self._position += 1
        return token

    def _match_operator(self, op: str) -> bool:
        current = self._current_token()
        if current.type == 'OPERATOR' and current.value == op:
            self._advance()
            return True
        return False

    def _match_any_operator(self, *ops: str) -> str | None:
        current = self._current_token()
        if current.type == 'OPERATOR' and current.value in ops:
            self._advance()
            return current.value
        return None

    def _match_keyword(self, keyword: str) -> bool:
        current = self._current_token()
        if current.type == 'KEYWORD' and current.value == keyword:
            self._advance()
            return True
        return False

    def _expect_operator(self, op: str, error_message: str) -> None:
        if not self._match_operator(op):
            raise ExpressionSyntaxError(error_message, self._current_position())


def _parse_number(text: str) -> int | float:
    if any(ch in text for ch in ".eE"):
        return float(text)
    return int(text)


__all__ = ["ExpressionParser"]
