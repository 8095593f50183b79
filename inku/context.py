"""
Контекст вычисления шаблона.

Контекст есть неизменяемый снимок привязок «имя → значение». Дочерний фрейм
всегда строится полной копией родителя с наложенными поверх новыми
привязками (переменная цикла, аргументы include, объявления), поэтому
изменения дочернего фрейма никогда не затрагивают родителя.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional


class Context(Mapping):
    """
    Неизменяемый фрейм переменных шаблона.

    Реализует Mapping, поэтому передаётся в вычислитель выражений напрямую.
    """

    __slots__ = ("_bindings",)

    def __init__(self, bindings: Optional[Mapping[str, Any]] = None):
        self._bindings: Dict[str, Any] = dict(bindings or {})

    def __getitem__(self, name: str) -> Any:
        return self._bindings[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"Context({self._bindings!r})"

    def overlay(self, bindings: Optional[Mapping[str, Any]]) -> "Context":
        """
        Создаёт дочерний фрейм: копия текущего с наложенными привязками.

        Args:
            bindings: Новые привязки (перекрывают унаследованные)

        Returns:
            Новый контекст; текущий не меняется
        """
        merged = dict(self._bindings)
        if bindings:
            merged.update(bindings)
        return Context(merged)

    def child(self, **bindings: Any) -> "Context":
        """Короткая форма overlay() для именованных привязок."""
        return self.overlay(bindings)

    def for_include(
        self,
        declarations: Optional[Mapping[str, Any]] = None,
        args: Optional[Mapping[str, Any]] = None,
    ) -> "Context":
        """
        Строит фрейм документа на границе включения.

        Приоритет (от низшего к высшему):
        1. Унаследованные привязки текущего фрейма
        2. Объявления {{ $name = ... }} самого документа
        3. Аргументы, переданные вызывающей стороной (всегда побеждают)
        """
        return self.overlay(declarations).overlay(args)

    def to_dict(self) -> Dict[str, Any]:
        """Возвращает копию привязок в виде обычного словаря."""
        return dict(self._bindings)


def as_context(value: Optional[Mapping[str, Any]]) -> Context:
    """Приводит произвольное отображение (или None) к Context."""
    if isinstance(value, Context):
        return value
    return Context(value)


__all__ = ["Context", "as_context"]
