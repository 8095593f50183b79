"""
Построитель дерева блоков.

Преобразует плоский поток токенов в дерево за один проход слева направо,
используя явный стек фреймов «текущий список детей». Глубина вложенности
ограничена только памятью.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..errors import InkuUserError
from .diagnostics import Diagnostics, STRUCTURE
from .lexer import (
    ELSE,
    FOR_CLOSE,
    FOR_OPEN,
    IF_CLOSE,
    IF_OPEN,
    TEXT,
    VARIABLE,
    Token,
    tokenize,
)
from .nodes import ForNode, IfNode, TemplateNode, TemplateTree, TextNode, VariableNode

logger = logging.getLogger(__name__)

_CLOSER_FOR = {FOR_OPEN: FOR_CLOSE, IF_OPEN: IF_CLOSE}
_OPENER_FOR = {FOR_CLOSE: FOR_OPEN, IF_CLOSE: IF_OPEN}


class TemplateParseError(InkuUserError):
    """Структурная ошибка шаблона: незакрытый блок или нарушенная вложенность."""

    def __init__(self, message: str, token: Optional[Token] = None, path: Optional[str] = None):
        self.message = message
        self.token = token
        self.path = path
        super().__init__(self._format())

    def _format(self) -> str:
        text = self.message
        if self.token is not None:
            text = f"{text}: '{self.token.full_match}' at position {self.token.start_pos}"
        if self.path:
            text = f"{self.path}: {text}"
        return text


class _Frame:
    """Открытый блок на стеке построителя."""

    def __init__(self, token: Optional[Token]):
        self.token = token
        self.children: List[TemplateNode] = []
        self.else_children: List[TemplateNode] = []
        self.in_else = False

    def append(self, node: TemplateNode) -> None:
        if self.in_else:
            self.else_children.append(node)
        else:
            self.children.append(node)

    def to_node(self) -> TemplateNode:
        assert self.token is not None
        if self.token.type == FOR_OPEN:
            return ForNode(
                var_name=self.token.binding or "",
                iterable_expr=self.token.iterable_expr or "",
                children=tuple(self.children),
            )
        return IfNode(
            condition=self.token.content,
            children=tuple(self.children),
            else_children=tuple(self.else_children),
        )


class BlockTreeBuilder:
    """
    Построитель дерева блоков из потока токенов.

    Политика ошибок:
    - лишний {{endfor}}/{{endif}}/{{else}} без открытого блока: диагностика, токен игнорируется
    - незакрытый блок в конце потока: TemplateParseError
    - закрытие чужого блока (например, {{endif}} внутри for): TemplateParseError
    - {{else}} внутри for, вложенного в открытый if: TemplateParseError
    """

    def __init__(self, diagnostics: Optional[Diagnostics] = None, path: Optional[str] = None):
        self.diagnostics = diagnostics
        self.path = path

    def build(self, tokens: List[Token]) -> TemplateTree:
        """
        Строит дерево блоков.

        Raises:
            TemplateParseError: При структурной ошибке
        """
        root = _Frame(None)
        stack: List[_Frame] = [root]

        for token in tokens:
            current = stack[-1]

            if token.type == TEXT:
                current.append(TextNode(value=token.content))

            elif token.type == VARIABLE:
                current.append(VariableNode(expr=token.content))

            elif token.type == FOR_OPEN:
                if token.binding is None:
                    raise TemplateParseError(
                        "Malformed for header, expected 'name in expression'", token, self.path
                    )
                stack.append(_Frame(token))

            elif token.type == IF_OPEN:
                if not token.content:
                    raise TemplateParseError("'if' without condition", token, self.path)
                stack.append(_Frame(token))

            elif token.type == ELSE:
                self._handle_else(stack, token)

            elif token.type in (FOR_CLOSE, IF_CLOSE):
                if not any(f.token is not None and f.token.type == _OPENER_FOR[token.type] for f in stack):
                    self._report_unmatched(token)
                    continue
                if _CLOSER_FOR[current.token.type] != token.type:
                    raise TemplateParseError(
                        f"Unexpected '{token.type}' inside '{current.token.type}' block",
                        token,
                        self.path,
                    )
                stack.pop()
                stack[-1].append(current.to_node())

        if len(stack) > 1:
            unclosed = stack[-1].token
            raise TemplateParseError(
                f"Unclosed '{unclosed.type}' block", unclosed, self.path
            )

        return tuple(root.children)

    def _handle_else(self, stack: List[_Frame], token: Token) -> None:
        current = stack[-1]
        if current.token is None or current.token.type != IF_OPEN:
            if not any(f.token is not None and f.token.type == IF_OPEN for f in stack):
                self._report_unmatched(token)
                return
            raise TemplateParseError(
                f"Unexpected '{token.type}' inside '{current.token.type}' block",
                token,
                self.path,
            )
        if current.in_else:
            raise TemplateParseError("Multiple 'else' in one 'if' block", token, self.path)
        current.in_else = True

    def _report_unmatched(self, token: Token) -> None:
        message = f"'{token.full_match}' at position {token.start_pos} has no matching open block, ignored"
        if self.diagnostics is not None:
            self.diagnostics.add(STRUCTURE, message, self.path)
        else:
            logger.warning("%s", message)


def build(tokens: List[Token], diagnostics: Optional[Diagnostics] = None, path: Optional[str] = None) -> TemplateTree:
    """Удобная функция для построения дерева из токенов."""
    return BlockTreeBuilder(diagnostics, path).build(tokens)


def parse_template(text: str, diagnostics: Optional[Diagnostics] = None, path: Optional[str] = None) -> TemplateTree:
    """
    Токенизирует и строит дерево блоков за один вызов.

    Raises:
        TemplateParseError: При структурной ошибке
    """
    return build(tokenize(text), diagnostics, path)


__all__ = [
    "BlockTreeBuilder",
    "TemplateParseError",
    "build",
    "parse_template",
]
