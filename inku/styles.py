"""
Коллаборатор таблиц стилей.

StyleExtractor является постобработчиком документа: находит теги
<link rel="stylesheet" href="...">, удаляет их из текста и регистрирует
href в StyleRegistry. Один href регистрируется один раз за сессию.
Ссылки внутри HTML-комментариев не трогаются.

Стили страниц (документов под pages/) сменяют друг друга: при переходе
на новую страницу стили предыдущей снимаются с регистрации, кроме тех,
на которые ссылается и новая страница.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .template.patterns import HTML_COMMENT, STYLE_LINK

logger = logging.getLogger(__name__)

PAGE_PREFIX = "pages/"


def is_page(path: Optional[str]) -> bool:
    """Является ли документ страницей (а не фрагментом)."""
    return bool(path) and path.startswith(PAGE_PREFIX)


class StyleRegistry:
    """
    Множество уже вставленных таблиц стилей одной сессии.

    Хранит порядок добавления и документ-владелец каждого href.
    Движок шаблонов реестр не читает: им владеет приложение.
    """

    def __init__(self):
        self._owners: Dict[str, Optional[str]] = {}
        self.page: Optional[str] = None

    def add(self, href: str, owner: Optional[str] = None) -> bool:
        """
        Регистрирует href.

        Returns:
            True если href добавлен впервые
        """
        if href in self._owners:
            self._claim(href, owner)
            return False
        self._owners[href] = owner
        if is_page(owner) and owner != self.page:
            self._switch_page(owner)
        return True

    def enter_page(self, page: str, hrefs: Iterable[str] = ()) -> None:
        """
        Делает page текущей страницей.

        Уже зарегистрированные стили предыдущей страницы, на которые
        ссылается page, переходят к ней во владение и не снимаются.
        """
        for href in hrefs:
            if href in self._owners:
                self._claim(href, page)
        if page != self.page:
            self._switch_page(page)

    def has(self, href: str) -> bool:
        return href in self._owners

    def discard(self, href: str) -> None:
        self._owners.pop(href, None)

    def clear(self) -> None:
        self._owners.clear()
        self.page = None

    def hrefs(self) -> Tuple[str, ...]:
        return tuple(self._owners)

    def owned_by(self, owner: str) -> Tuple[str, ...]:
        return tuple(href for href, doc in self._owners.items() if doc == owner)

    def _claim(self, href: str, owner: Optional[str]) -> None:
        # общий стиль двух страниц принадлежит последней из них
        if is_page(owner) and is_page(self._owners[href]):
            self._owners[href] = owner

    def _switch_page(self, page: str) -> None:
        previous = self.page
        self.page = page
        if previous is None:
            return
        for href in self.owned_by(previous):
            logger.debug("Retiring stylesheet %s of previous page %s", href, previous)
            self.discard(href)

    def __contains__(self, href: object) -> bool:
        return href in self._owners

    def __len__(self) -> int:
        return len(self._owners)


@dataclass(frozen=True)
class StyleLink:
    """Таблица стилей, впервые вставленная во время рендера."""
    href: str
    document: Optional[str] = None


def _comment_spans(text: str) -> List[Tuple[int, int]]:
    return [m.span() for m in HTML_COMMENT.finditer(text)]


def _inside(pos: int, spans: List[Tuple[int, int]]) -> bool:
    return any(start <= pos < end for start, end in spans)


class StyleExtractor:
    """
    Постобработчик документа, вынимающий ссылки на таблицы стилей.

    Все найденные теги удаляются из текста (даже уже известные),
    а в inserted попадают только впервые зарегистрированные href.
    """

    def __init__(self, registry: StyleRegistry):
        self.registry = registry
        self.inserted: List[StyleLink] = []

    def __call__(self, text: str, path: Optional[str] = None) -> str:
        spans = _comment_spans(text)
        links = [m for m in STYLE_LINK.finditer(text) if not _inside(m.start(), spans)]
        if is_page(path):
            self.registry.enter_page(path, [m.group("href") for m in links])

        parts: List[str] = []
        last_pos = 0

        for match in links:
            href = match.group("href")
            if self.registry.add(href, path):
                logger.debug("Stylesheet %s inserted by %s", href, path)
                self.inserted.append(StyleLink(href=href, document=path))

            parts.append(text[last_pos:match.start()])
            last_pos = match.end()

        if not parts:
            return text

        parts.append(text[last_pos:])
        return "".join(parts)

    def take_inserted(self) -> List[StyleLink]:
        """Возвращает накопленные вставки и очищает список."""
        inserted, self.inserted = self.inserted, []
        return inserted


__all__ = ["StyleRegistry", "StyleExtractor", "StyleLink", "is_page", "PAGE_PREFIX"]
