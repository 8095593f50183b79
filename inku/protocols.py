"""
Протоколы внешних коллабораторов движка шаблонов.

Движок получает сырой текст документов от источника содержимого
и отдаёт итоговую строку презентеру; сам он не знает ни о файловой
системе, ни о DOM.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ContentSource(Protocol):
    """
    Источник содержимого документов.

    Реализации должны бросать ContentFetchError, если документ недоступен.
    Повторных попыток движок не делает.
    """

    def fetch(self, path: str) -> str:
        """
        Возвращает текст документа.

        Args:
            path: Путь документа относительно корня источника (POSIX)

        Raises:
            ContentFetchError: Если документ не удалось получить
        """
        ...


@runtime_checkable
class Presenter(Protocol):
    """
    Поверхность отображения.

    Получает полностью разрешённый текст один раз на каждый рендер
    верхнего уровня; во время разрешения включений никогда не вызывается.
    """

    def present(self, view: str, text: str) -> None:
        ...


@runtime_checkable
class ScriptRunner(Protocol):
    """
    Повторная активация скриптов смонтированного документа.

    Реализуется хостом, владеющим DOM; движок шаблонов от него не зависит.
    """

    def run_scripts(self, view: str, text: str) -> None:
        ...


__all__ = ["ContentSource", "Presenter", "ScriptRunner"]
