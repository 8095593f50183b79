"""
Разбор объявлений переменных внутри шаблона.

Объявление {{ $name = expr }} задаёт значение по умолчанию для документа.
Значение вычисляется один раз, без доступа к контексту (только литералы);
если это не литерал, используется сырой текст без внешних кавычек.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from ..expressions import EvaluationError, ExpressionSyntaxError, evaluate_literal
from .patterns import DECLARATION, DECLARATION_LINE, SHIELDED_DIRECTIVE, strip_quotes

logger = logging.getLogger(__name__)


def literal_or_text(raw: str) -> Any:
    """
    Вычисляет литеральное выражение, а при неудаче возвращает строку без кавычек.

    Общее правило для значений объявлений и аргументов include.
    """
    try:
        return evaluate_literal(raw)
    except (ExpressionSyntaxError, EvaluationError) as e:
        logger.debug("Value %r is not a literal (%s), using it as text", raw, e)
        return strip_quotes(raw)


def parse_declarations(text: str) -> Dict[str, Any]:
    """
    Извлекает все объявления {{ $name = expr }} в порядке следования.

    Повторное объявление того же имени перезаписывает предыдущее.

    Args:
        text: Текст документа

    Returns:
        Словарь объявленных переменных
    """
    declarations: Dict[str, Any] = {}
    for match in DECLARATION.finditer(text):
        name = match.group("name")
        declarations[name] = literal_or_text(match.group("value"))
    if declarations:
        logger.debug("Parsed declarations: %s", ", ".join(declarations))
    return declarations


def strip_declarations(text: str) -> str:
    """
    Удаляет объявления из текста. Идемпотентно.

    Объявление, занимающее строку целиком, удаляется вместе с переводом строки.
    """
    text = DECLARATION_LINE.sub("", text)
    return DECLARATION.sub("", text)


def strip_shielded_directives(text: str) -> str:
    """Удаляет директивы, закомментированные в HTML: <!-- {{ ... }} -->."""
    return SHIELDED_DIRECTIVE.sub("", text)


__all__ = [
    "literal_or_text",
    "parse_declarations",
    "strip_declarations",
    "strip_shielded_directives",
]
