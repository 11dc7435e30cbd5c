"""
remediation
===========

``ALTER TABLE`` statements that re-add columns missing from the current schema.

Statements are produced by :func:`schemadrift.diffing.compare` when it is
called with ``remediate=True``. They are written out as plain text, one per
line, and are never executed or validated here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .models import ColumnDescriptor
from .utils import write_text


def add_column_statement(table_name: str, column: ColumnDescriptor) -> str:
    """Return ``ALTER TABLE <table> ADD COLUMN <column> <type>;``.

    >>> add_column_statement("users", ColumnDescriptor("legacy_flag", "int"))
    'ALTER TABLE users ADD COLUMN legacy_flag int;'
    """
    return f"ALTER TABLE {table_name} ADD COLUMN {column.name} {column.type};"


def render_statements(statements: Iterable[str]) -> str:
    return "\n".join(statements)


def write_remediation(path: Path, statements: Iterable[str]) -> Path:
    """Write *statements* to *path*, one per line.

    An empty file is written when there is nothing to remediate.
    """
    text = render_statements(statements)
    write_text(path, text + "\n" if text else "")
    return path
