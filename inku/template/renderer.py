"""
Рендерер дерева блоков.

Обходит дерево по порядку, вычисляет выражения в текущем фрейме контекста,
раскрывает циклы и условия и собирает итоговый текст.

Истинность условий питоновская, а не JS: пустые массив [] и объект {}
ложны, как и 0, "" и null.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, List, Optional

from ..context import Context, as_context
from ..expressions import UNEVALUABLE, EvaluationError, ExpressionSyntaxError, evaluate, evaluate_literal, stringify
from .diagnostics import Diagnostics, EXPRESSION, ITERABLE
from .nodes import ForNode, IfNode, TemplateNode, TemplateTree, TextNode, VariableNode
from .parser import parse_template
from .patterns import ARRAY_LITERAL

logger = logging.getLogger(__name__)


class TemplateRenderer:
    """
    Рендерер дерева блоков.

    Ошибки вычисления выражений никогда не прерывают рендер:
    переменная превращается в пустую строку, цикл и условие не выполняются,
    а в диагностику добавляется запись.
    """

    def __init__(self, diagnostics: Optional[Diagnostics] = None, path: Optional[str] = None):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.path = path

    def render(self, tree: TemplateTree, context: Mapping[str, Any]) -> str:
        """
        Рендерит дерево в текст.

        Args:
            tree: Корневая последовательность узлов
            context: Переменные шаблона

        Returns:
            Итоговый текст
        """
        return self._render_nodes(tree, as_context(context))

    def _render_nodes(self, nodes: TemplateTree, context: Context) -> str:
        return "".join(self._render_node(node, context) for node in nodes)

    def _render_node(self, node: TemplateNode, context: Context) -> str:
        if isinstance(node, TextNode):
            return node.value
        elif isinstance(node, VariableNode):
            return stringify(self._evaluate(node.expr, context))
        elif isinstance(node, ForNode):
            return self._render_for(node, context)
        elif isinstance(node, IfNode):
            return self._render_if(node, context)
        else:
            raise TypeError(f"Unknown node type: {type(node).__name__}")

    def _render_for(self, node: ForNode, context: Context) -> str:
        value = self._evaluate(node.iterable_expr, context)
        if value is UNEVALUABLE:
            return ""

        items = self._as_iterable(value, node)
        if items is None:
            return ""

        parts: List[str] = []
        for item in items:
            loop_ctx = context.child(**{node.var_name: item})
            parts.append(self._render_nodes(node.children, loop_ctx))
        return "".join(parts)

    def _render_if(self, node: IfNode, context: Context) -> str:
        # Невычислимое условие ложно: выполняется ветка else, если она есть
        if self._evaluate(node.condition, context):
            return self._render_nodes(node.children, context)
        return self._render_nodes(node.else_children, context)

    def _as_iterable(self, value: Any, node: ForNode) -> Optional[List[Any]]:
        """
        Приводит значение выражения цикла к списку элементов.

        - последовательность (list/tuple): как есть
        - неотрицательное целое n (или float с целым значением): диапазон [0, n)
        - строка, похожая на литерал массива: повторный литеральный разбор
        - всё остальное: None и диагностика
        """
        if isinstance(value, str) and ARRAY_LITERAL.match(value.strip()):
            try:
                value = evaluate_literal(value.strip())
            except (ExpressionSyntaxError, EvaluationError) as e:
                logger.debug("Array-like string %r is not a literal: %s", value, e)

        if isinstance(value, (list, tuple)):
            return list(value)

        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return list(range(value))

        # результат деления всегда float: 6 / 2 даёт 3.0
        if isinstance(value, float) and value.is_integer() and value >= 0:
            return list(range(int(value)))

        self.diagnostics.add(
            ITERABLE,
            f"for({node.var_name} in {node.iterable_expr}): value {value!r} is not iterable",
            self.path,
        )
        return None

    def _evaluate(self, expr: str, context: Context) -> Any:
        return evaluate(expr, context, on_error=self._on_expression_error)

    def _on_expression_error(self, expr: str, error: Exception) -> None:
        self.diagnostics.add(EXPRESSION, f"cannot evaluate '{expr}': {error}", self.path)


def render(tree: TemplateTree, context: Mapping[str, Any], diagnostics: Optional[Diagnostics] = None) -> str:
    """Удобная функция для рендера готового дерева."""
    return TemplateRenderer(diagnostics).render(tree, context)


def render_template(
    text: str,
    context: Optional[Mapping[str, Any]] = None,
    diagnostics: Optional[Diagnostics] = None,
    path: Optional[str] = None,
) -> str:
    """
    Разрешает управляющие конструкции в тексте: токенизация → дерево → рендер.

    Raises:
        TemplateParseError: При структурной ошибке шаблона
    """
    diagnostics = diagnostics if diagnostics is not None else Diagnostics()
    tree = parse_template(text, diagnostics, path)
    return TemplateRenderer(diagnostics, path).render(tree, context or {})


__all__ = ["TemplateRenderer", "render", "render_template"]
