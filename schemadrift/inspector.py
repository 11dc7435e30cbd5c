"""
inspector
=========

Metadata inspection: build a :class:`~schemadrift.models.DatabaseSnapshot`
from a live database.

The inspector only issues two kinds of information-schema queries:

- the distinct table names of a schema
- the ``(name, type literal, nullability)`` triples of one table

Every capture opens one connection and closes it when done. Driver errors are
translated into :class:`~schemadrift.errors.ConnectivityError` (cannot
connect) and :class:`~schemadrift.errors.QueryError` (a query failed); both
are fatal and never retried.

Implementations
---------------
- :class:`MySQLInspector` (PyMySQL)
- :class:`SnowflakeInspector` (snowflake-connector-python)
"""

from __future__ import annotations

import logging
from contextlib import closing, contextmanager
from typing import Any, Iterator, List, Optional, Sequence, Tuple, Type

import pymysql
import snowflake.connector
from snowflake.connector.errors import Error as SnowflakeError

from .config import ConnectionConfig
from .errors import ConnectivityError, QueryError
from .models import ColumnDescriptor, DatabaseSnapshot, TableSnapshot

logger = logging.getLogger(__name__)

ColumnRow = Tuple[str, str, bool]


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return "" if value is None else str(value)


def is_nullable(indicator: Any) -> bool:
    """Interpret an ``IS_NULLABLE`` value (``YES``/``NO``, ``Y``/``N``)."""
    return _text(indicator).strip().upper() in ("YES", "Y", "TRUE", "1")


class Inspector:
    """Base class for metadata inspectors.

    Subclasses provide :meth:`_connect`, the driver's base exception class in
    :attr:`driver_error`, and the two queries.
    """

    engine = "unknown"
    driver_error: Type[BaseException] = Exception
    tables_query = ""
    columns_query = ""

    def __init__(self, config: ConnectionConfig):
        self.config = config

    def _connect(self) -> Any:
        raise NotImplementedError("connect not implemented")

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Open a DB-API connection and close it on exit.

        Raises
        ------
        ConnectivityError
            If the data source cannot be reached.
        """
        logger.info("Connecting to %s", self.config.describe())
        try:
            conn = self._connect()
        except self.driver_error as exc:
            raise ConnectivityError(f"cannot connect to {self.engine} database {self.config.database}: {exc}") from exc
        try:
            yield conn
        finally:
            conn.close()
            logger.debug("Connection closed")

    def fetch(self, conn: Any, sql: str, params: Optional[Sequence[Any]] = None) -> List[tuple]:
        """Run *sql* and return all rows.

        Raises
        ------
        QueryError
            If the driver reports an error.
        """
        try:
            with closing(conn.cursor()) as cur:
                cur.execute(sql, params)
                return list(cur.fetchall())
        except self.driver_error as exc:
            raise QueryError(f"query failed: {exc}") from exc

    def list_tables(self, conn: Any, schema: str) -> List[str]:
        return [_text(row[0]) for row in self.fetch(conn, self.tables_query, (schema,))]

    def list_columns(self, conn: Any, schema: str, table: str) -> List[ColumnRow]:
        return [self._column_row(row) for row in self.fetch(conn, self.columns_query, (schema, table))]

    def _column_row(self, row: tuple) -> ColumnRow:
        name, col_type, nullable = row
        return _text(name), _text(col_type), is_nullable(nullable)

    def capture(self, schema: Optional[str] = None) -> DatabaseSnapshot:
        """Capture the tables and columns of *schema*.

        Parameters
        ----------
        schema:
            Schema to inspect. Defaults to the configured target schema.

        Returns
        -------
        DatabaseSnapshot
            A fully materialized, immutable snapshot named after *schema*.
        """
        schema = schema or self.config.target_schema
        with self.connection() as conn:
            table_names = self.list_tables(conn, schema)
            logger.info("Found %d table(s) in %s", len(table_names), schema)

            tables: List[TableSnapshot] = []
            for name in table_names:
                columns = [
                    ColumnDescriptor(name=c, type=t, nullable=n)
                    for c, t, n in self.list_columns(conn, schema, name)
                ]
                logger.debug("Table %s: %d column(s)", name, len(columns))
                tables.append(TableSnapshot.build(name, columns))

        return DatabaseSnapshot.build(schema, tables)


class MySQLInspector(Inspector):
    """MySQL inspector; the type literal is ``COLUMN_TYPE`` (e.g. ``varchar(10)``)."""

    engine = "mysql"
    driver_error = pymysql.MySQLError

    tables_query = """
SELECT DISTINCT TABLE_NAME
FROM information_schema.COLUMNS
WHERE TABLE_SCHEMA = %s
"""

    columns_query = """
SELECT COLUMN_NAME, COLUMN_TYPE, IS_NULLABLE
FROM information_schema.COLUMNS
WHERE TABLE_SCHEMA = %s
  AND TABLE_NAME = %s
ORDER BY ORDINAL_POSITION
"""

    def _connect(self) -> Any:
        return pymysql.connect(
            host=self.config.host,
            port=self.config.port or 3306,
            user=self.config.user,
            password=self.config.password,
            database=self.config.database,
            charset="utf8mb4",
        )


def snowflake_type_literal(
    data_type: str, char_len: Any, num_prec: Any, num_scale: Any, datetime_prec: Any = None
) -> str:
    """Assemble a type literal from Snowflake's split type columns.

    >>> snowflake_type_literal("TEXT", 10, None, None)
    'TEXT(10)'
    >>> snowflake_type_literal("NUMBER", None, 38, 0)
    'NUMBER(38,0)'
    >>> snowflake_type_literal("TIMESTAMP_NTZ", None, None, None, 9)
    'TIMESTAMP_NTZ(9)'
    >>> snowflake_type_literal("DATE", None, None, None)
    'DATE'
    """
    if char_len not in (None, ""):
        return f"{data_type}({char_len})"
    if num_prec not in (None, ""):
        scale = 0 if num_scale in (None, "") else num_scale
        return f"{data_type}({num_prec},{scale})"
    if datetime_prec not in (None, ""):
        return f"{data_type}({datetime_prec})"
    return data_type


class SnowflakeInspector(Inspector):
    """Snowflake inspector reading ``INFORMATION_SCHEMA`` of the configured database."""

    engine = "snowflake"
    driver_error = SnowflakeError

    tables_query = """
SELECT DISTINCT TABLE_NAME
FROM INFORMATION_SCHEMA.COLUMNS
WHERE TABLE_SCHEMA = %s
"""

    columns_query = """
SELECT
  COLUMN_NAME,
  DATA_TYPE,
  CHARACTER_MAXIMUM_LENGTH,
  NUMERIC_PRECISION,
  NUMERIC_SCALE,
  DATETIME_PRECISION,
  IS_NULLABLE
FROM INFORMATION_SCHEMA.COLUMNS
WHERE TABLE_SCHEMA = %s
  AND TABLE_NAME = %s
ORDER BY ORDINAL_POSITION
"""

    def _connect(self) -> Any:
        params = {
            "account": self.config.account,
            "user": self.config.user,
            "password": self.config.password,
            "database": self.config.database,
            "schema": self.config.target_schema,
        }
        if self.config.warehouse:
            params["warehouse"] = self.config.warehouse
        if self.config.role:
            params["role"] = self.config.role
        return snowflake.connector.connect(**params)

    def _column_row(self, row: tuple) -> ColumnRow:
        name, data_type, char_len, num_prec, num_scale, dt_prec, nullable = row
        col_type = snowflake_type_literal(_text(data_type), char_len, num_prec, num_scale, dt_prec)
        return _text(name), col_type, is_nullable(nullable)


INSPECTORS = {
    MySQLInspector.engine: MySQLInspector,
    SnowflakeInspector.engine: SnowflakeInspector,
}


def make_inspector(config: ConnectionConfig) -> Inspector:
    """Return the inspector for ``config.engine``."""
    try:
        return INSPECTORS[config.engine](config)
    except KeyError:
        raise ValueError(f"unsupported engine: {config.engine}") from None
