"""
schemadrift
===========

Schema snapshot and drift detection for relational databases.

The modules are intended to be used together via the CLI entry point:

- :mod:`schemadrift.cli`

Typical flow::

    inspector -> DatabaseSnapshot -> store          (capture)
    store + inspector -> compare -> report sink     (validate)
"""

from .diffing import Comparison, DiffRow, DiffStatus, compare
from .models import ColumnDescriptor, DatabaseSnapshot, TableSnapshot, canonical

__version__ = "0.3.0"

__all__ = [
    "ColumnDescriptor",
    "Comparison",
    "DatabaseSnapshot",
    "DiffRow",
    "DiffStatus",
    "TableSnapshot",
    "canonical",
    "compare",
]
