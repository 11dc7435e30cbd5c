"""
utils
=====

Small, shared utilities used across the codebase.

This module intentionally contains only low-level helpers that are safe to
import from anywhere (no database drivers, no heavy imports).
"""

from __future__ import annotations

from pathlib import Path


def write_text(path: Path, content: str) -> None:
    """Write UTF-8 text to *path* with normalized newlines.

    Parent directories are created as needed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    content = content.replace("\r\n", "\n").replace("\r", "\n")
    path.write_text(content, encoding="utf-8")


def mask_secret(value: str) -> str:
    """Return a placeholder for *value* suitable for logs.

    >>> mask_secret("hunter2")
    '***'
    >>> mask_secret("")
    ''
    """
    return "***" if value else ""
