"""
Источники содержимого документов.

FileSystemSource читает документы из каталога проекта,
MemorySource отдаёт документы из словаря (тесты, встраивание).
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Dict, Mapping, Optional

from .errors import InkuUserError

logger = logging.getLogger(__name__)


class ContentFetchError(InkuUserError):
    """Не удалось получить содержимое документа."""

    def __init__(self, path: str, reason: str, cause: Optional[Exception] = None):
        super().__init__(f"Failed to fetch '{path}': {reason}")
        self.path = path
        self.reason = reason
        self.cause = cause


def normalize_path(path: str) -> str:
    """
    Нормализует путь документа к каноническому POSIX-виду без ведущего '/'.

    'pages//home/./index.html' → 'pages/home/index.html'
    """
    parts = []
    for part in PurePosixPath(path.replace("\\", "/")).parts:
        if part in ("/", "."):
            continue
        if part == "..":
            if not parts:
                raise ContentFetchError(path, "path escapes the content root")
            parts.pop()
            continue
        parts.append(part)
    return "/".join(parts)


class FileSystemSource:
    """Документы из каталога на диске."""

    def __init__(self, root: Path, encoding: str = "utf-8"):
        self.root = Path(root).resolve()
        self.encoding = encoding

    def fetch(self, path: str) -> str:
        rel = normalize_path(path)
        full = (self.root / rel).resolve()

        try:
            full.relative_to(self.root)
        except ValueError:
            raise ContentFetchError(path, "path escapes the content root")

        if not full.is_file():
            raise ContentFetchError(path, f"file not found: {full}")

        try:
            text = full.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ContentFetchError(path, str(e), e)

        logger.debug("Fetched %s (%d chars)", rel, len(text))
        return text


class MemorySource:
    """Документы из словаря путь → текст."""

    def __init__(self, documents: Optional[Mapping[str, str]] = None):
        self.documents: Dict[str, str] = {
            normalize_path(path): text for path, text in (documents or {}).items()
        }

    def add(self, path: str, text: str) -> None:
        self.documents[normalize_path(path)] = text

    def fetch(self, path: str) -> str:
        rel = normalize_path(path)
        if rel not in self.documents:
            raise ContentFetchError(path, "no such document")
        return self.documents[rel]


__all__ = ["ContentFetchError", "FileSystemSource", "MemorySource", "normalize_path"]
