"""
Лексический анализатор директив шаблона.

Сканирует текст слева направо одним регулярным выражением и выдаёт
плоский поток токенов: текст между директивами, открытия/закрытия
блоков и подстановки переменных. Вложенность здесь не проверяется.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .patterns import DIRECTIVE_TOKEN, FOR_HEADER

logger = logging.getLogger(__name__)

TEXT = "text"
FOR_OPEN = "for"
FOR_CLOSE = "endfor"
IF_OPEN = "if"
ELSE = "else"
IF_CLOSE = "endif"
VARIABLE = "variable"

BLOCK_OPENERS = {FOR_OPEN, IF_OPEN}
BLOCK_CLOSERS = {FOR_CLOSE, IF_CLOSE}


@dataclass(frozen=True)
class Token:
    """
    Токен шаблона с позиционной информацией.

    content: сырой текст для TEXT, выражение для VARIABLE и IF_OPEN,
    заголовок "имя in выражение" для FOR_OPEN.
    """
    type: str
    content: str
    start_pos: int
    end_pos: int
    full_match: str

    @property
    def binding(self) -> Optional[str]:
        """Имя переменной цикла для FOR_OPEN (None если заголовок некорректен)."""
        match = self._for_header()
        return match.group("name") if match else None

    @property
    def iterable_expr(self) -> Optional[str]:
        """Выражение итерируемого значения для FOR_OPEN."""
        match = self._for_header()
        return match.group("expr") if match else None

    def _for_header(self):
        if self.type != FOR_OPEN:
            return None
        return FOR_HEADER.match(self.content)


class DirectiveLexer:
    """
    Лексер директив.

    Распознает следующие конструкции:
    - {{for(item in items)}} ... {{endfor}}
    - {{if(condition)}} ... {{else}} ... {{endif}}
    - {{?expression}}
    - {{!include("path", key=value)}} остаётся текстом целиком, его раскрывает IncludeResolver;
      обычный {{include(...)}} лексер не трогает, но {{?...}} в его аргументах подставляются
    """

    def __init__(self, text: str):
        self.text = text
        self.length = len(text)

    def tokenize(self) -> List[Token]:
        """
        Разбивает текст на токены.

        Returns:
            Токены в строго возрастающем порядке позиций; текст между
            директивами сохраняется без изменений (включая пробелы)
        """
        tokens: List[Token] = []
        last_pos = 0

        for match in DIRECTIVE_TOKEN.finditer(self.text):
            if match.start() > last_pos:
                tokens.append(self._text_token(last_pos, match.start()))
            tokens.append(self._directive_token(match))
            last_pos = match.end()

        if last_pos < self.length:
            tokens.append(self._text_token(last_pos, self.length))

        logger.debug("Tokenized template of length %d into %d tokens", self.length, len(tokens))
        return tokens

    def _text_token(self, start: int, end: int) -> Token:
        value = self.text[start:end]
        return Token(type=TEXT, content=value, start_pos=start, end_pos=end, full_match=value)

    def _directive_token(self, match) -> Token:
        groups = match.groupdict()

        if groups["for"] is not None:
            token_type, content = FOR_OPEN, groups["for"].strip()
        elif groups["endfor"] is not None:
            token_type, content = FOR_CLOSE, ""
        elif groups["if"] is not None:
            token_type, content = IF_OPEN, groups["if"].strip()
        elif groups["else"] is not None:
            token_type, content = ELSE, ""
        elif groups["endif"] is not None:
            token_type, content = IF_CLOSE, ""
        elif groups["include"] is not None:
            # Маркер include не является блоком: оставляем его как есть
            token_type, content = TEXT, match.group(0)
        else:
            token_type, content = VARIABLE, groups["var"].strip()

        return Token(
            type=token_type,
            content=content,
            start_pos=match.start(),
            end_pos=match.end(),
            full_match=match.group(0),
        )


def tokenize(text: str) -> List[Token]:
    """
    Удобная функция для токенизации шаблона.

    Args:
        text: Исходный текст шаблона

    Returns:
        Список токенов
    """
    return DirectiveLexer(text).tokenize()


__all__ = [
    "Token",
    "DirectiveLexer",
    "tokenize",
    "TEXT",
    "FOR_OPEN",
    "FOR_CLOSE",
    "IF_OPEN",
    "ELSE",
    "IF_CLOSE",
    "VARIABLE",
    "BLOCK_OPENERS",
    "BLOCK_CLOSERS",
]
