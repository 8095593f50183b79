"""
Конфигурация проекта Inku.

Необязательный файл inku.yaml в корне проекта. Отсутствие файла
означает конфигурацию по умолчанию.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import InkuUserError
from .routing import DEFAULT_PAGES_PATTERN, DEFAULT_ROUTE

logger = logging.getLogger(__name__)

CONFIG_FILE = "inku.yaml"

_yaml = YAML(typ="safe")


class ConfigLoadError(InkuUserError, ValueError):
    """Ошибка загрузки конфигурации с указанием пути поля."""
    pass


@dataclass
class InkuConfig:
    # шаблон пути документа страницы; {view} заменяется именем вида
    pages: str = DEFAULT_PAGES_PATTERN
    default_route: str = DEFAULT_ROUTE
    max_include_depth: int = 32
    # вынимать <link rel="stylesheet"> из документов
    extract_styles: bool = True
    encoding: str = "utf-8"
    # базовый контекст всех рендеров
    globals: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def from_dict(raw: Any, *, path: str = "$") -> "InkuConfig":
        """
        Строит конфигурацию из сырого словаря YAML.

        Raises:
            ConfigLoadError: Неизвестный ключ или значение неверного типа
        """
        if not isinstance(raw, dict):
            raise _err(path, f"expected mapping, got {type(raw).__name__}")

        known = {f.name: f for f in fields(InkuConfig)}
        extras = set(raw) - set(known)
        if extras:
            raise _err(path, f"unknown key(s): {sorted(extras)}")

        kwargs: Dict[str, Any] = {}
        for name, value in raw.items():
            kwargs[name] = _check_field(name, value, f"{path}.{name}")
        return InkuConfig(**kwargs)


_FIELD_TYPES = {
    "pages": str,
    "default_route": str,
    "max_include_depth": int,
    "extract_styles": bool,
    "encoding": str,
    "globals": dict,
}


def _err(path: str, msg: str) -> ConfigLoadError:
    logger.debug("Config error at %s: %s", path, msg)
    return ConfigLoadError(f"{path}: {msg}")


def _check_field(name: str, value: Any, path: str) -> Any:
    expected = _FIELD_TYPES[name]

    if value is None and name == "globals":
        return {}

    # bool является подклассом int, в числовых полях не допускается
    if expected is int and isinstance(value, bool):
        raise _err(path, "expected int, got bool")
    if not isinstance(value, expected):
        raise _err(path, f"expected {expected.__name__}, got {type(value).__name__}")

    if name == "max_include_depth" and value < 1:
        raise _err(path, "must be >= 1")
    if name == "pages" and "{view}" not in value:
        raise _err(path, "pattern must contain '{view}'")
    if name == "globals":
        bad = [k for k in value if not isinstance(k, str)]
        if bad:
            raise _err(path, f"keys must be strings, got {bad!r}")
        return dict(value)
    return value


def load_config(root: Path) -> InkuConfig:
    """
    Загружает inku.yaml из корня проекта.

    Args:
        root: Корень проекта

    Returns:
        Конфигурация (по умолчанию, если файла нет)

    Raises:
        ConfigLoadError: При синтаксической или структурной ошибке
    """
    path = Path(root) / CONFIG_FILE
    if not path.is_file():
        logger.debug("No %s in %s, using defaults", CONFIG_FILE, root)
        return InkuConfig()

    try:
        raw = _yaml.load(path.read_text(encoding="utf-8"))
    except YAMLError as e:
        raise ConfigLoadError(f"{path}: invalid YAML: {e}") from e

    if raw is None:
        return InkuConfig()
    return InkuConfig.from_dict(raw)


__all__ = ["InkuConfig", "ConfigLoadError", "load_config", "CONFIG_FILE"]
