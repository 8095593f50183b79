"""
Inku: рекурсивный движок шаблонных директив для HTML-документов.
"""

from .app import InkuApp, ListPresenter, StreamPresenter
from .config import InkuConfig, load_config
from .context import Context
from .errors import InkuUserError
from .sources import ContentFetchError, FileSystemSource, MemorySource
from .styles import StyleExtractor, StyleRegistry
from .template import RenderResult, TemplateEngine, TemplateParseError, render_template

__all__ = [
    "InkuApp",
    "InkuConfig",
    "load_config",
    "ListPresenter",
    "StreamPresenter",
    "Context",
    "InkuUserError",
    "ContentFetchError",
    "FileSystemSource",
    "MemorySource",
    "StyleExtractor",
    "StyleRegistry",
    "RenderResult",
    "TemplateEngine",
    "TemplateParseError",
    "render_template",
]
