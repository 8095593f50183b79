"""
Резолвер включений {{include("path", key=value, ...)}}.

Каждый включаемый документ проходит полный конвейер: снятие
экранированных директив, объявления, управляющие конструкции,
собственные включения и постобработка. Результат вставляется на место
директивы, после чего в нём подставляются плейсхолдеры {{!key}}.
Соседние включения разрешаются строго по порядку следования.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..context import Context, as_context
from ..errors import InkuUserError
from ..expressions import stringify
from ..protocols import ContentSource
from ..sources import ContentFetchError, normalize_path
from .declarations import literal_or_text, parse_declarations, strip_declarations, strip_shielded_directives
from .diagnostics import Diagnostics, FETCH, INCLUDE as INCLUDE_DIAG
from .parser import TemplateParseError
from .patterns import INCLUDE, LITERAL_PLACEHOLDER, strip_quotes
from .renderer import render_template

logger = logging.getLogger(__name__)

# Постобработчик документа: (текст, путь документа) → текст
PostProcessor = Callable[[str, Optional[str]], str]

DEFAULT_MAX_DEPTH = 32


class IncludeError(InkuUserError):
    """Ошибка разрешения включения."""
    pass


class IncludeCycleError(IncludeError):
    """Документ прямо или косвенно включает сам себя."""

    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        super().__init__(f"Circular include dependency: {' -> '.join(self.chain)}")


class IncludeDepthError(IncludeError):
    """Превышена максимальная глубина вложенности включений."""

    def __init__(self, path: str, max_depth: int):
        self.path = path
        self.max_depth = max_depth
        super().__init__(f"Include depth limit ({max_depth}) exceeded at '{path}'")


@dataclass(frozen=True)
class IncludeDirective:
    """Разобранная директива include: путь и именованные аргументы."""
    file_path: str
    args: Dict[str, Any] = field(default_factory=dict)


def split_args(args_string: str) -> List[str]:
    """
    Делит список аргументов по запятым, не разрывая строки в кавычках.

    'a.html", x="1, 2", y=3' → ['"a.html"', 'x="1, 2"', 'y=3']
    """
    result: List[str] = []
    current: List[str] = []
    quote_char = ""

    for char in args_string:
        if quote_char:
            current.append(char)
            if char == quote_char:
                quote_char = ""
        elif char in ("'", '"'):
            quote_char = char
            current.append(char)
        elif char == ",":
            result.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    tail = "".join(current).strip()
    if tail:
        result.append(tail)
    return result


def parse_include_args(args_string: str) -> IncludeDirective:
    """
    Разбирает аргументы include.

    Первый позиционный токен задаёт путь (внешние кавычки снимаются),
    остальные являются парами key=value. Значение вычисляется как литеральное
    выражение, при неудаче берётся строка без внешних кавычек.
    Токены без '=' игнорируются.
    """
    tokens = split_args(args_string)
    if not tokens:
        return IncludeDirective(file_path="")

    file_path = strip_quotes(tokens[0])
    args: Dict[str, Any] = {}

    for token in tokens[1:]:
        key, sep, raw_value = token.partition("=")
        key = key.strip()
        if not sep or not key:
            logger.debug("Ignoring include argument without key=value form: %r", token)
            continue
        args[key] = literal_or_text(raw_value.strip())

    return IncludeDirective(file_path=file_path, args=args)


def substitute_placeholders(text: str, context: Mapping[str, Any]) -> str:
    """Подставляет {{!key}} значениями из контекста; неизвестные ключи остаются как есть."""

    def _replace(match) -> str:
        key = match.group("key")
        if key in context:
            return stringify(context[key])
        return match.group(0)

    return LITERAL_PLACEHOLDER.sub(_replace, text)


class IncludeResolver:
    """
    Рекурсивный резолвер включений.

    Один экземпляр обслуживает один рендер верхнего уровня: хранит
    стек разрешаемых документов для обнаружения циклов и общий
    накопитель диагностик.
    """

    def __init__(
        self,
        source: ContentSource,
        diagnostics: Optional[Diagnostics] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        postprocessors: Sequence[PostProcessor] = (),
    ):
        self.source = source
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        self.max_depth = max_depth
        self.postprocessors = list(postprocessors)
        self._resolution_stack: List[str] = []

    def resolve_document(
        self,
        path: str,
        context: Optional[Mapping[str, Any]] = None,
        args: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Получает документ и прогоняет его через полный конвейер.

        Raises:
            ContentFetchError: Если документ недоступен
            IncludeCycleError: Если документ уже разрешается выше по стеку
            IncludeDepthError: Если превышена глубина вложенности
            TemplateParseError: При структурной ошибке в документе
        """
        rel = normalize_path(path)

        if rel in self._resolution_stack:
            raise IncludeCycleError(self._resolution_stack + [rel])
        if len(self._resolution_stack) >= self.max_depth:
            raise IncludeDepthError(rel, self.max_depth)

        text = self.source.fetch(rel)

        self._resolution_stack.append(rel)
        try:
            logger.debug("Resolving document %s (depth %d)", rel, len(self._resolution_stack))
            return self.process_text(text, context, path=rel, args=args)
        finally:
            self._resolution_stack.pop()

    def process_text(
        self,
        text: str,
        context: Optional[Mapping[str, Any]] = None,
        path: Optional[str] = None,
        args: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Конвейер одного документа без загрузки.

        1. Снятие экранированных директив <!-- {{...}} -->
        2. Разбор и удаление объявлений {{ $name = ... }}
        3. Фрейм документа: унаследованное < объявления < аргументы
        4. Управляющие конструкции и включения (resolve)
        5. Постобработчики документа
        """
        text = strip_shielded_directives(text)
        declarations = parse_declarations(text)
        text = strip_declarations(text)

        doc_ctx = as_context(context).for_include(declarations, args)
        text = self.resolve(text, doc_ctx, path)

        for postprocess in self.postprocessors:
            text = postprocess(text, path)
        return text

    def resolve(self, text: str, context: Mapping[str, Any], path: Optional[str] = None) -> str:
        """
        Разрешает управляющие конструкции, затем включения в результате.

        Raises:
            TemplateParseError: При структурной ошибке в самом тексте
        """
        ctx = as_context(context)
        rendered = render_template(text, ctx, self.diagnostics, path)
        return self._splice_includes(rendered, ctx, path)

    def _splice_includes(self, text: str, context: Context, path: Optional[str]) -> str:
        parts: List[str] = []
        last_pos = 0

        for match in INCLUDE.finditer(text):
            parts.append(text[last_pos:match.start()])
            parts.append(self._resolve_include(match.group("args"), context, path))
            last_pos = match.end()

        if not parts:
            return text

        parts.append(text[last_pos:])
        return "".join(parts)

    def _resolve_include(self, args_string: str, context: Context, path: Optional[str]) -> str:
        directive = parse_include_args(args_string)
        if not directive.file_path:
            self.diagnostics.add(INCLUDE_DIAG, f"include without path: ({args_string})", path)
            return ""

        try:
            target = resolve_target(directive.file_path, path)
            partial = self.resolve_document(target, context, args=directive.args)
        except ContentFetchError as e:
            self.diagnostics.add(FETCH, str(e), path)
            return ""
        except (IncludeError, TemplateParseError) as e:
            self.diagnostics.add(INCLUDE_DIAG, str(e), path)
            return ""

        return substitute_placeholders(partial, context.overlay(directive.args))


def resolve_target(file_path: str, including_path: Optional[str]) -> str:
    """
    Определяет путь включаемого документа.

    Пути, начинающиеся с './' или '../', считаются относительно каталога
    включающего документа, остальные относительно корня источника.
    """
    if including_path and (file_path.startswith("./") or file_path.startswith("../")):
        base = PurePosixPath(including_path).parent
        return normalize_path(str(base / file_path))
    return normalize_path(file_path)


__all__ = [
    "IncludeDirective",
    "IncludeResolver",
    "IncludeError",
    "IncludeCycleError",
    "IncludeDepthError",
    "PostProcessor",
    "DEFAULT_MAX_DEPTH",
    "parse_include_args",
    "resolve_target",
    "split_args",
    "substitute_placeholders",
]
