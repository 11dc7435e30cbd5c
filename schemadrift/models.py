"""
models
======

Immutable value model for schema snapshots.

A :class:`DatabaseSnapshot` holds :class:`TableSnapshot` objects keyed by
canonical (lower-cased) table name; each table holds :class:`ColumnDescriptor`
objects keyed by canonical column name. The original casing is kept on the
objects themselves for display.

Snapshots are built wholesale (by an inspector or by the snapshot store) and
never modified afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from .errors import DuplicateNameError


def canonical(name: str) -> str:
    """Return the identity key used to match table and column names."""
    return name.lower()


@dataclass(frozen=True)
class ColumnDescriptor:
    """A single column as reported by the engine.

    Attributes:
        name: Column name in its original casing.
        type: Engine type literal (e.g. ``varchar(10)``), compared verbatim.
        nullable: Nullability flag. Captured and stored, not compared.
    """

    name: str
    type: str
    nullable: bool = True

    @property
    def key(self) -> str:
        return canonical(self.name)


def _index(items: Iterable, kind: str, owner: str) -> Mapping:
    out = {}
    for item in items:
        if item.key in out:
            raise DuplicateNameError(
                f"duplicate {kind} name in {owner}: {out[item.key].name!r} and {item.name!r}"
            )
        out[item.key] = item
    return MappingProxyType(out)


@dataclass(frozen=True)
class TableSnapshot:
    """A table and its columns, keyed by canonical column name."""

    name: str
    columns: Mapping[str, ColumnDescriptor] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    @classmethod
    def build(cls, name: str, columns: Iterable[ColumnDescriptor]) -> "TableSnapshot":
        """Create a table from columns, rejecting case-insensitive duplicates."""
        return cls(name=name, columns=_index(columns, "column", name))

    @property
    def key(self) -> str:
        return canonical(self.name)

    def column(self, name: str) -> Optional[ColumnDescriptor]:
        return self.columns.get(canonical(name))

    def __iter__(self) -> Iterator[ColumnDescriptor]:
        return iter(self.columns.values())

    def __len__(self) -> int:
        return len(self.columns)


@dataclass(frozen=True)
class DatabaseSnapshot:
    """A captured schema: its name and its tables keyed by canonical name."""

    name: str
    tables: Mapping[str, TableSnapshot] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", MappingProxyType(dict(self.tables)))

    @classmethod
    def build(cls, name: str, tables: Iterable[TableSnapshot]) -> "DatabaseSnapshot":
        """Create a snapshot from tables, rejecting case-insensitive duplicates."""
        return cls(name=name, tables=_index(tables, "table", name))

    def table(self, name: str) -> Optional[TableSnapshot]:
        return self.tables.get(canonical(name))

    def __iter__(self) -> Iterator[TableSnapshot]:
        return iter(self.tables.values())

    def __len__(self) -> int:
        return len(self.tables)

    @property
    def column_count(self) -> int:
        return sum(len(t) for t in self.tables.values())
