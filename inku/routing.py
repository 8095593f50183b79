"""
Маршрутизация по hash-фрагменту URL.

"#/about" → вид "about" → документ "pages/about/index.html".
"""

from __future__ import annotations

import re

DEFAULT_ROUTE = "home"
DEFAULT_PAGES_PATTERN = "pages/{view}/index.html"

_HASH_PREFIX = re.compile(r"^#?/?")


def view_from_hash(hash_value: str, default_route: str = DEFAULT_ROUTE) -> str:
    """
    Возвращает имя вида для hash-фрагмента.

    Пустой фрагмент (или '#', '#/') даёт маршрут по умолчанию.
    """
    view = _HASH_PREFIX.sub("", (hash_value or "").strip())
    return view or default_route


def view_document_path(view: str, pattern: str = DEFAULT_PAGES_PATTERN) -> str:
    """Путь документа страницы для вида."""
    return pattern.format(view=view)


__all__ = ["view_from_hash", "view_document_path", "DEFAULT_ROUTE", "DEFAULT_PAGES_PATTERN"]
