"""
Фасад движка шаблонов: полный конвейер документа верхнего уровня.

fetch → экранированные директивы → объявления → контекст →
управляющие конструкции → включения → постобработка → RenderResult.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from ..protocols import ContentSource
from .diagnostics import Diagnostic, Diagnostics
from .includes import DEFAULT_MAX_DEPTH, IncludeResolver, PostProcessor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """Итог одного рендера верхнего уровня."""
    text: str
    diagnostics: Tuple[Diagnostic, ...] = ()
    path: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.diagnostics


class TemplateEngine:
    """
    Движок шаблонов.

    Не хранит состояния между рендерами: дерево блоков и стек
    включений строятся заново при каждом вызове.
    """

    def __init__(
        self,
        source: ContentSource,
        max_include_depth: int = DEFAULT_MAX_DEPTH,
        postprocessors: Sequence[PostProcessor] = (),
    ):
        self.source = source
        self.max_include_depth = max_include_depth
        self.postprocessors = list(postprocessors)

    def render_document(
        self,
        path: str,
        context: Optional[Mapping[str, Any]] = None,
        base: Optional[Mapping[str, Any]] = None,
    ) -> RenderResult:
        """
        Получает и рендерит документ.

        Args:
            path: Путь документа в источнике
            context: Аргументы документа, перекрывают его объявления
            base: Унаследованные привязки, объявления документа их перекрывают

        Raises:
            ContentFetchError: Если сам документ недоступен
            TemplateParseError: При структурной ошибке в самом документе
        """
        diagnostics = Diagnostics()
        resolver = self._resolver(diagnostics)
        logger.debug("Rendering document %s", path)
        text = resolver.resolve_document(path, base, args=context)
        return RenderResult(text=text, diagnostics=tuple(diagnostics), path=path)

    def render_text(
        self,
        text: str,
        context: Optional[Mapping[str, Any]] = None,
        path: Optional[str] = None,
        base: Optional[Mapping[str, Any]] = None,
    ) -> RenderResult:
        """
        Прогоняет готовый текст через тот же конвейер без загрузки.

        Args:
            text: Текст документа
            context: Переменные (перекрывают объявления)
            path: Логический путь документа для относительных включений
            base: Унаследованные привязки
        """
        diagnostics = Diagnostics()
        resolver = self._resolver(diagnostics)
        result = resolver.process_text(text, base, path=path, args=context)
        return RenderResult(text=result, diagnostics=tuple(diagnostics), path=path)

    def _resolver(self, diagnostics: Diagnostics) -> IncludeResolver:
        return IncludeResolver(
            self.source,
            diagnostics=diagnostics,
            max_depth=self.max_include_depth,
            postprocessors=self.postprocessors,
        )


__all__ = ["RenderResult", "TemplateEngine"]
