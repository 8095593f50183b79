"""
Приложение Inku: маршрут → рендер страницы → презентер.

Каждый рендер получает номер поколения. Если за время рендера был
запущен более новый, результат устаревшего рендера не отображается.
"""

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, List, Optional, TextIO, Tuple

from .config import InkuConfig
from .context import Context
from .protocols import ContentSource, Presenter
from .routing import view_document_path, view_from_hash
from .styles import StyleExtractor, StyleLink, StyleRegistry
from .template import RenderResult, TemplateEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderOutcome:
    view: str
    path: str
    generation: int
    result: RenderResult
    inserted_styles: Tuple[StyleLink, ...] = ()
    # False, если рендер устарел и его вывод отброшен
    presented: bool = True

    @property
    def text(self) -> str:
        return self.result.text


class ListPresenter:
    """Презентер, запоминающий всё показанное (тесты, встраивание)."""

    def __init__(self):
        self.presented: List[Tuple[str, str]] = []

    def present(self, view: str, text: str) -> None:
        self.presented.append((view, text))

    @property
    def last(self) -> Optional[Tuple[str, str]]:
        return self.presented[-1] if self.presented else None


@dataclass
class StreamPresenter:
    """Презентер, пишущий текст в поток (по умолчанию stdout)."""
    stream: TextIO = field(default_factory=lambda: sys.stdout)

    def present(self, view: str, text: str) -> None:
        self.stream.write(text)
        if not text.endswith("\n"):
            self.stream.write("\n")
        self.stream.flush()


class InkuApp:
    """
    Приложение: владеет реестром стилей сессии и базовым контекстом.

    Базовый контекст (globals конфигурации) никогда не изменяется,
    каждый рендер строит собственный фрейм поверх него.
    """

    def __init__(
        self,
        source: ContentSource,
        presenter: Optional[Presenter] = None,
        config: Optional[InkuConfig] = None,
        styles: Optional[StyleRegistry] = None,
    ):
        self.source = source
        self.presenter = presenter if presenter is not None else ListPresenter()
        self.config = config if config is not None else InkuConfig()
        self.styles = styles if styles is not None else StyleRegistry()
        self.globals = Context(self.config.globals)

        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        """Номер последнего начатого рендера."""
        return self._generation

    def route(self, hash_value: str, context: Optional[Mapping[str, Any]] = None) -> RenderOutcome:
        """Рендерит вид, соответствующий hash-фрагменту."""
        view = view_from_hash(hash_value, self.config.default_route)
        return self.render(view, context)

    def render(self, view: str, context: Optional[Mapping[str, Any]] = None) -> RenderOutcome:
        """
        Рендерит страницу вида и передаёт её презентеру.

        Raises:
            ContentFetchError: Если документ страницы недоступен
            TemplateParseError: При структурной ошибке в документе страницы
        """
        path = view_document_path(view, self.config.pages)
        return self._render(view, path, context)

    def render_path(self, path: str, context: Optional[Mapping[str, Any]] = None) -> RenderOutcome:
        """Рендерит произвольный документ; имя вида совпадает с путём."""
        return self._render(path, path, context)

    def _render(self, view: str, path: str, context: Optional[Mapping[str, Any]]) -> RenderOutcome:
        generation = self._next_generation()
        logger.debug("Render #%d: view=%s path=%s", generation, view, path)

        extractor = StyleExtractor(self.styles) if self.config.extract_styles else None
        engine = TemplateEngine(
            self.source,
            max_include_depth=self.config.max_include_depth,
            postprocessors=[extractor] if extractor is not None else [],
        )
        result = engine.render_document(path, context, base=self.globals)
        inserted = tuple(extractor.take_inserted()) if extractor is not None else ()

        if generation != self._generation:
            logger.info(
                "Render #%d of '%s' is stale (latest is #%d), output discarded",
                generation, view, self._generation,
            )
            return RenderOutcome(view, path, generation, result, inserted, presented=False)

        self.presenter.present(view, result.text)
        return RenderOutcome(view, path, generation, result, inserted)

    def _next_generation(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation


__all__ = ["InkuApp", "RenderOutcome", "ListPresenter", "StreamPresenter"]
