"""
JSON-схема отчёта о рендере (команда `inku report`).
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DiagnosticEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: str = Field(..., description="Вид диагностики: expression, structure, iterable, fetch, include")
    message: str
    path: Optional[str] = Field(None, description="Документ, в котором возникла проблема")


class StylesheetEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    href: str
    document: Optional[str] = Field(None, description="Документ, содержавший ссылку")


class RenderReport(BaseModel):
    model_config = ConfigDict(extra="forbid")

    protocol: int = Field(1, description="Версия формата отчёта")
    view: str
    path: str
    generation: int = Field(..., ge=1)
    text: str
    diagnostics: List[DiagnosticEntry] = Field(default_factory=list)
    inserted_stylesheets: List[StylesheetEntry] = Field(default_factory=list)
    presented: bool = True


__all__ = ["RenderReport", "DiagnosticEntry", "StylesheetEntry"]
