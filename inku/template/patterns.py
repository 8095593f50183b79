"""
Регулярные выражения синтаксиса директив.

Единый источник истины для всех разборщиков движка шаблонов
и коллабораторов, работающих с его выводом.
"""

from __future__ import annotations

import re

# Аргументы include: строки в кавычках могут содержать ')' и ','
_INCLUDE_ARGS = r"""(?:"[^"]*"|'[^']*'|[^)])*"""

# Любая директива, значимая для лексера: for/endfor, if/else/endif,
# ?переменная и непрозрачный маркер !include (остаётся текстом целиком).
# Обычный {{include(...)}} лексер не распознаёт, поэтому {{?...}}
# внутри его аргументов подставляются до разрешения включений.
DIRECTIVE_TOKEN = re.compile(
    r"\{\{\s*(?:"
    r"for\s*\((?P<for>.*?)\)"
    r"|(?P<endfor>endfor)"
    r"|if\s*\((?P<if>.*?)\)"
    r"|(?P<else>else)"
    r"|(?P<endif>endif)"
    r"|(?P<include>!include\s*\(" + _INCLUDE_ARGS + r"\))"
    r"|\?(?P<var>.*?)"
    r")\s*\}\}"
)

# Заголовок цикла: "имя in выражение"
FOR_HEADER = re.compile(r"^\s*(?P<name>[A-Za-z_$][\w$]*)\s+in\s+(?P<expr>.+?)\s*$", re.DOTALL)

INCLUDE = re.compile(r"\{\{\s*!?include\s*\(\s*(?P<args>" + _INCLUDE_ARGS + r")\s*\)\s*\}\}")

DECLARATION = re.compile(r"\{\{\s*\$(?P<name>\w+)\s*=\s*(?P<value>.*?)\s*\}\}")

# Объявление, занимающее строку целиком, удаляется вместе с переводом строки
DECLARATION_LINE = re.compile(
    r"^[ \t]*\{\{\s*\$\w+\s*=\s*.*?\s*\}\}[ \t]*(?:\r?\n|$)",
    re.MULTILINE,
)

# Директивы, экранированные HTML-комментарием: <!-- {{ ... }} -->
SHIELDED_DIRECTIVE = re.compile(r"<!--\s*\{\{[^\n]*?\}\}\s*-->")

# Литеральный плейсхолдер вставленного фрагмента: {{!key}}
LITERAL_PLACEHOLDER = re.compile(r"\{\{\s*!\s*(?P<key>\w+)\s*\}\}")

ARRAY_LITERAL = re.compile(r"^\[.*\]$", re.DOTALL)

QUOTE_STRIP = re.compile(r"^['\"]|['\"]$")

HTML_COMMENT = re.compile(r"<!--[\s\S]*?-->")

STYLE_LINK = re.compile(
    r"""<link\s+rel=["']stylesheet["']\s+href=["'](?P<href>.+?)["'].*?>""",
    re.IGNORECASE,
)


def strip_quotes(value: str) -> str:
    """Снимает одну пару внешних кавычек (как в исходном синтаксисе include)."""
    return QUOTE_STRIP.sub("", value)


__all__ = [
    "DIRECTIVE_TOKEN",
    "FOR_HEADER",
    "INCLUDE",
    "DECLARATION",
    "DECLARATION_LINE",
    "SHIELDED_DIRECTIVE",
    "LITERAL_PLACEHOLDER",
    "ARRAY_LITERAL",
    "QUOTE_STRIP",
    "HTML_COMMENT",
    "STYLE_LINK",
    "strip_quotes",
]
