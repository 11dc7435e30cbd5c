"""Exceptions raised by schemadrift.

Infrastructure failures (connectivity, queries, snapshot I/O) are raised as
exceptions. Schema drift is never an exception; it is reported as data by
:func:`schemadrift.diffing.compare`.
"""

from __future__ import annotations


class SchemaDriftError(Exception):
    """Base class for all schemadrift errors."""


class ConnectivityError(SchemaDriftError):
    """The data source could not be reached."""


class QueryError(SchemaDriftError):
    """A metadata or batch query failed."""


class SnapshotReadError(SchemaDriftError):
    """A stored snapshot could not be read."""


class NotFoundError(SnapshotReadError):
    """The snapshot file does not exist."""


class CorruptError(SnapshotReadError):
    """The snapshot file exists but cannot be decoded."""


class DuplicateNameError(SchemaDriftError, ValueError):
    """Two tables (or two columns of a table) share a canonical name."""


class InputFileError(SchemaDriftError):
    """An input file (such as a SQL batch) could not be decoded."""


class ReportWriteError(SchemaDriftError):
    """A report file could not be created."""
