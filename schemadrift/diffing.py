"""
diffing
=======

Differential comparison of two schema snapshots.

:func:`compare` takes a *baseline* snapshot (captured earlier and read back
from the store) and a *current* snapshot (captured now) and classifies every
table and column found in either of them:

- table only in baseline: failure, ``table missing``
- table only in current: failure, ``table added``
- column only in baseline: failure, ``column missing``
- column only in current: failure, ``column added``
- column in both, same type: success, empty message
- column in both, different type: failure,
  ``column definition mismatch: <old> --> <new>``

Names are matched case-insensitively. Types are compared as exact strings.
Nullability is not compared.

The function is pure: it performs no I/O and never modifies its inputs. Drift
is returned as rows, not raised.
"""

from __future__ import annotations

import enum
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .models import ColumnDescriptor, DatabaseSnapshot, TableSnapshot
from .remediation import add_column_statement

MSG_TABLE_MISSING = "table missing"
MSG_TABLE_ADDED = "table added"
MSG_COLUMN_MISSING = "column missing"
MSG_COLUMN_ADDED = "column added"
MSG_MISMATCH_PREFIX = "column definition mismatch"


class DiffStatus(str, enum.Enum):
    SUCCESS = "success"
    FAILURE = "failure"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DiffRow:
    """One classified outcome for a table or a column pair."""

    database: str
    table: str
    column: str
    status: DiffStatus
    message: str = ""

    def as_tuple(self) -> Tuple[str, str, str, str, str]:
        return (self.database, self.table, self.column, self.status.value, self.message)


@dataclass(frozen=True)
class Comparison:
    """Result of :func:`compare`.

    Attributes:
        rows: Classified rows, sorted by canonical table then column name.
        statements: Remediation statements, one per ``column missing`` row.
            Empty unless remediation was requested.
    """

    rows: Tuple[DiffRow, ...] = ()
    statements: Tuple[str, ...] = ()

    @property
    def failures(self) -> List[DiffRow]:
        return [r for r in self.rows if r.status is DiffStatus.FAILURE]

    @property
    def has_drift(self) -> bool:
        return any(r.status is DiffStatus.FAILURE for r in self.rows)

    def summary(self) -> Dict[str, int]:
        """Count rows per category (``success``, ``table missing``, ...)."""
        counts: Counter = Counter()
        for r in self.rows:
            if r.status is DiffStatus.SUCCESS:
                counts["success"] += 1
            elif r.message.startswith(MSG_MISMATCH_PREFIX):
                counts[MSG_MISMATCH_PREFIX] += 1
            else:
                counts[r.message] += 1
        return dict(counts)

    def __iter__(self):
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)


def mismatch_message(baseline_type: str, current_type: str) -> str:
    return f"{MSG_MISMATCH_PREFIX}: {baseline_type} --> {current_type}"


@dataclass
class _Collector:
    database: str
    remediate: bool
    rows: List[DiffRow] = field(default_factory=list)
    statements: List[str] = field(default_factory=list)

    def add(self, table: str, column: str, status: DiffStatus, message: str = "") -> None:
        self.rows.append(DiffRow(self.database, table, column, status, message))


def _compare_columns(out: _Collector, old: TableSnapshot, new: TableSnapshot) -> None:
    for key in sorted(set(old.columns) | set(new.columns)):
        old_col: Optional[ColumnDescriptor] = old.columns.get(key)
        new_col: Optional[ColumnDescriptor] = new.columns.get(key)

        if new_col is None:
            out.add(new.name, old_col.name, DiffStatus.FAILURE, MSG_COLUMN_MISSING)
            if out.remediate:
                # the current table is the one that needs patching
                out.statements.append(add_column_statement(new.name, old_col))
        elif old_col is None:
            out.add(new.name, new_col.name, DiffStatus.FAILURE, MSG_COLUMN_ADDED)
        elif old_col.type == new_col.type:
            out.add(new.name, new_col.name, DiffStatus.SUCCESS)
        else:
            out.add(new.name, new_col.name, DiffStatus.FAILURE, mismatch_message(old_col.type, new_col.type))


def compare(baseline: DatabaseSnapshot, current: DatabaseSnapshot, remediate: bool = False) -> Comparison:
    """Compare *current* against *baseline*.

    Parameters
    ----------
    baseline:
        The reference snapshot.
    current:
        The freshly captured snapshot.
    remediate:
        When True, synthesize one ``ALTER TABLE ... ADD COLUMN ...`` statement
        for every column present in *baseline* but absent from *current*.

    Returns
    -------
    Comparison
        Rows sorted by canonical table name, then canonical column name.
        Table-level rows carry an empty column name.
    """
    out = _Collector(database=current.name, remediate=remediate)

    for key in sorted(set(baseline.tables) | set(current.tables)):
        old = baseline.tables.get(key)
        new = current.tables.get(key)

        if new is None:
            out.add(old.name, "", DiffStatus.FAILURE, MSG_TABLE_MISSING)
        elif old is None:
            out.add(new.name, "", DiffStatus.FAILURE, MSG_TABLE_ADDED)
        else:
            _compare_columns(out, old, new)

    return Comparison(rows=tuple(out.rows), statements=tuple(out.statements))
