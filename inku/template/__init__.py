"""
Движок шаблонов Inku.

Разрешает директивы объявлений, циклов, условий, подстановок
и включений в текстовых документах (как правило, HTML).
"""

from .engine import RenderResult, TemplateEngine
from .diagnostics import Diagnostic, Diagnostics
from .includes import (
    IncludeCycleError,
    IncludeDepthError,
    IncludeDirective,
    IncludeError,
    IncludeResolver,
    parse_include_args,
)
from .declarations import parse_declarations, strip_declarations, strip_shielded_directives
from .parser import TemplateParseError, parse_template
from .renderer import render_template
from .lexer import Token, tokenize
from .nodes import format_tree

__all__ = [
    # Основной интерфейс
    "TemplateEngine",
    "RenderResult",
    "render_template",

    # Исключения
    "TemplateParseError",
    "IncludeError",
    "IncludeCycleError",
    "IncludeDepthError",

    # Диагностика
    "Diagnostic",
    "Diagnostics",

    # Низкоуровневые функции (для тестирования и отладки)
    "IncludeResolver",
    "IncludeDirective",
    "parse_include_args",
    "parse_declarations",
    "strip_declarations",
    "strip_shielded_directives",
    "parse_template",
    "tokenize",
    "Token",
    "format_tree",
]
