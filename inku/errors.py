"""
Иерархия ошибок Inku.

CLI печатает InkuUserError одной строкой в stderr и завершается с кодом 2.
Всё остальное считается ошибкой в самом Inku и выходит с трассировкой.
"""

from __future__ import annotations


class InkuUserError(Exception):
    """
    Ошибка, которую исправляет автор документов, а не код.

    Наследники: ContentFetchError (документ недоступен),
    TemplateParseError (сломана вложенность блоков),
    IncludeError (цикл или глубина включений) и ConfigLoadError (inku.yaml).
    """
    pass


__all__ = ["InkuUserError"]
