"""
Нефатальная диагностика рендера.

Сломанная директива ухудшает вывод, но не прерывает рендер целиком:
каждая такая ситуация фиксируется здесь и пишется в лог.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional

logger = logging.getLogger(__name__)

# Виды диагностик
EXPRESSION = "expression"   # выражение не вычислилось
STRUCTURE = "structure"     # лишний {{endfor}}/{{endif}}/{{else}}
ITERABLE = "iterable"       # значение for не является последовательностью/числом
FETCH = "fetch"             # не удалось получить включаемый документ
INCLUDE = "include"         # цикл/глубина/ошибка разбора во включаемом документе


@dataclass(frozen=True)
class Diagnostic:
    kind: str
    message: str
    path: Optional[str] = None

    def __str__(self) -> str:
        where = f"{self.path}: " if self.path else ""
        return f"[{self.kind}] {where}{self.message}"


class Diagnostics:
    """Накопитель диагностик одного вызова рендера."""

    def __init__(self):
        self._items: List[Diagnostic] = []

    def add(self, kind: str, message: str, path: Optional[str] = None) -> Diagnostic:
        diagnostic = Diagnostic(kind=kind, message=message, path=path)
        self._items.append(diagnostic)
        logger.warning("%s", diagnostic)
        return diagnostic

    def of_kind(self, kind: str) -> List[Diagnostic]:
        return [d for d in self._items if d.kind == kind]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)


__all__ = [
    "Diagnostic",
    "Diagnostics",
    "EXPRESSION",
    "STRUCTURE",
    "ITERABLE",
    "FETCH",
    "INCLUDE",
]
