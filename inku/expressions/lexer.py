"""
Лексер для выражений внутри директив шаблона.

Разбивает текст выражения на значимые элементы:
- Числа и строковые литералы
- Ключевые слова (true, false, null, and, or, not, ...)
- Идентификаторы (имена переменных контекста)
- Операторы и знаки пунктуации
- Пробелы (игнорируются)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List


class ExpressionSyntaxError(Exception):
    """Синтаксическая ошибка в выражении директивы."""

    def __init__(self, message: str, position: int):
        self.message = message
        self.position = position
        super().__init__(f"Syntax error at position {position}: {message}")


@dataclass
class Token:
    """
    Токен выражения.

    Attributes:
        type: Тип токена (NUMBER, STRING, KEYWORD, IDENTIFIER, OPERATOR, EOF)
        value: Значение токена (для STRING уже раскрытое, без кавычек)
        position: Позиция в исходной строке
    """
    type: str
    value: str
    position: int

    def __repr__(self):
        return f"Token({self.type}, '{self.value}', pos={self.position})"


_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "\\": "\\",
    "'": "'",
    '"': '"',
}


def _unescape(body: str) -> str:
    """Раскрывает escape-последовательности строкового литерала."""
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), body, flags=re.DOTALL)


class ExpressionLexer:
    """
    Лексер для разбиения строки выражения на токены.

    Поддерживаемые токены:
    - NUMBER: 42, 3.14, .5
    - STRING: 'text', "text" (с экранированием через \\)
    - KEYWORD: true, false, null, undefined, True, False, None, and, or, not
    - IDENTIFIER: имена переменных
    - OPERATOR: === !== == != <= >= && || < > + - * / % ! ? : . , ( ) [ ] { }
    - EOF: конец строки
    """

    # Спецификация токенов: (regex_pattern, token_type, ignore_flag)
    # Порядок важен: длинные операторы проверяются раньше коротких
    TOKEN_SPECS = [
        (r'\s+', 'WHITESPACE', True),
        (r'(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?', 'NUMBER', False),
        (r'"(?:[^"\\]|\\.)*"', 'STRING', False),
        (r"'(?:[^'\\]|\\.)*'", 'STRING', False),
        (r'===|!==|==|!=|<=|>=|&&|\|\|', 'OPERATOR', False),
        (r'[<>+\-*/%!?:.,()\[\]{}]', 'OPERATOR', False),
        (r'[A-Za-z_$][\w$]*', 'IDENTIFIER', False),
        (r'.', 'UNKNOWN', False),
    ]

    KEYWORDS = {
        'true', 'false', 'null', 'undefined',
        'True', 'False', 'None',
        'and', 'or', 'not',
    }

    def __init__(self):
        self._compiled_patterns = [
            (re.compile(pattern, re.DOTALL), token_type, ignore)
            for pattern, token_type, ignore in self.TOKEN_SPECS
        ]

    def tokenize(self, text: str) -> List[Token]:
        """
        Разбивает строку на токены.

        Args:
            text: Строка выражения

        Returns:
            Список токенов, включая EOF в конце

        Raises:
            ExpressionSyntaxError: При неизвестном символе или незакрытой строке
        """
        tokens: List[Token] = []
        position = 0

        while position < len(text):
            for pattern, token_type, ignore in self._compiled_patterns:
                match = pattern.match(text, position)
                if not match:
                    continue

                value = match.group(0)
                if not ignore:
                    if token_type == 'UNKNOWN':
                        if value in ('"', "'"):
                            raise ExpressionSyntaxError("Unterminated string literal", position)
                        raise ExpressionSyntaxError(f"Unexpected character '{value}'", position)

                    final_type = token_type
                    if token_type == 'IDENTIFIER' and value in self.KEYWORDS:
                        final_type = 'KEYWORD'
                    elif token_type == 'STRING':
                        value = _unescape(value[1:-1])

                    tokens.append(Token(type=final_type, value=value, position=position))

                position = match.end()
                break

        tokens.append(Token(type='EOF', value='', position=position))
        return tokens


__all__ = ["ExpressionLexer", "ExpressionSyntaxError", "Token"]
