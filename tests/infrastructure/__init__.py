"""
Общая тестовая инфраструктура.
"""

from .file_utils import write, write_tree

__all__ = ["write", "write_tree"]
