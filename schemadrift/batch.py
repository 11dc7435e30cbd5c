"""
batch
=====

Run a file of SQL statements and record what each one returned.

Statements are split on every literal ``;``. The splitter does not understand
quoting, so a semicolon inside a string literal splits the statement in two.
"""

from __future__ import annotations

import logging
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List

from .errors import InputFileError, QueryError

logger = logging.getLogger(__name__)

BATCH_HEADER = ("Statement", "Result")


@dataclass(frozen=True)
class BatchRow:
    statement: str
    result: str

    def as_tuple(self):
        return (self.statement, self.result)


def split_statements(text: str) -> List[str]:
    """Split *text* on ``;``, trimming whitespace and dropping empty parts.

    >>> split_statements("SELECT 1; SELECT 2;\\n")
    ['SELECT 1', 'SELECT 2']
    """
    return [part.strip() for part in text.split(";") if part.strip()]


def load_statements(path: Path) -> List[str]:
    if not path.is_file():
        raise FileNotFoundError(f"SQL file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InputFileError(f"SQL file is not valid UTF-8: {path} ({exc})") from exc
    return split_statements(text)


def run_batch(conn: Any, statements: List[str], driver_error: type) -> List[BatchRow]:
    """Execute *statements* one after another on *conn*.

    Each row records the statement and ``repr`` of the fetched rows, or the
    affected row count for statements that return no result set. Only
    exceptions of *driver_error* are translated.

    Raises
    ------
    QueryError
        On the first failing statement; later statements are not run.
    """
    rows: List[BatchRow] = []
    for i, stmt in enumerate(statements, start=1):
        logger.debug("Executing statement %d/%d", i, len(statements))
        try:
            with closing(conn.cursor()) as cur:
                cur.execute(stmt)
                if cur.description is not None:
                    result = repr(list(cur.fetchall()))
                else:
                    result = f"{cur.rowcount} row(s) affected"
        except driver_error as exc:
            raise QueryError(f"statement {i} failed: {exc}") from exc
        rows.append(BatchRow(stmt, result))
    conn.commit()
    return rows
