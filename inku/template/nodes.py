"""
Узлы дерева блоков шаблона.

Дерево строится заново при каждом рендере и после построения
не изменяется: все узлы заморожены, дочерние списки хранятся кортежами.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов дерева блоков."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """Статический текст, выводится как есть."""
    value: str


@dataclass(frozen=True)
class VariableNode(TemplateNode):
    """Подстановка значения выражения: {{?expr}}"""
    expr: str


@dataclass(frozen=True)
class ForNode(TemplateNode):
    """
    Цикл {{for(var_name in iterable_expr)}}...{{endfor}}.

    Тело рендерится по одному разу на каждый элемент итерируемого
    значения с переменной цикла, привязанной в дочернем фрейме контекста.
    """
    var_name: str
    iterable_expr: str
    children: Tuple[TemplateNode, ...] = ()


@dataclass(frozen=True)
class IfNode(TemplateNode):
    """
    Условный блок {{if(condition)}}...{{else}}...{{endif}}.

    Ветка else необязательна; вложенные блоки поддерживаются так же, как у for.
    """
    condition: str
    children: Tuple[TemplateNode, ...] = ()
    else_children: Tuple[TemplateNode, ...] = ()


TemplateTree = Tuple[TemplateNode, ...]


def format_tree(tree: TemplateTree, indent: int = 0) -> str:
    """Форматирует дерево блоков для отладки."""
    lines = []
    prefix = "  " * indent

    for node in tree:
        if isinstance(node, TextNode):
            text_preview = repr(node.value[:50] + "..." if len(node.value) > 50 else node.value)
            lines.append(f"{prefix}TextNode({text_preview})")
        elif isinstance(node, VariableNode):
            lines.append(f"{prefix}VariableNode({node.expr!r})")
        elif isinstance(node, ForNode):
            lines.append(f"{prefix}ForNode({node.var_name!r} in {node.iterable_expr!r})")
            if node.children:
                lines.append(format_tree(node.children, indent + 1))
        elif isinstance(node, IfNode):
            lines.append(f"{prefix}IfNode({node.condition!r})")
            if node.children:
                lines.append(format_tree(node.children, indent + 1))
            if node.else_children:
                lines.append(f"{prefix}else:")
                lines.append(format_tree(node.else_children, indent + 1))
        else:
            lines.append(f"{prefix}{type(node).__name__}")

    return "\n".join(lines)


__all__ = [
    "TemplateNode",
    "TemplateTree",
    "TextNode",
    "VariableNode",
    "ForNode",
    "IfNode",
    "format_tree",
]
