"""Discovery of Spanner result and table schemas."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from spanbridge.types import (
    SpannerType,
    StructField,
    parse_pg_spanner_type,
    parse_spanner_type,
)


class SchemaError(Exception):
    """Raised when a schema cannot be determined."""


class Dialect(Enum):
    """The SQL dialect of a Spanner database."""

    UNSPECIFIED = 0
    GOOGLE_STANDARD_SQL = 1
    POSTGRESQL = 2


@dataclass
class Statement:
    """A SQL statement with named parameters."""

    sql: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ColumnInfo:
    """Name and type of one result column."""

    name: str
    spanner_type: SpannerType


class QueryResult(Protocol):
    """Rows of a query; ``columns_metadata`` is complete once iteration ends."""

    def __aiter__(self) -> AsyncIterator[Sequence[Any]]: ...

    @property
    def columns_metadata(self) -> Sequence[StructField]: ...


class QueryClient(Protocol):
    """A client that runs single-use read-only queries."""

    async def query(self, statement: Statement, *, plan: bool = False) -> QueryResult: ...


_DETECT_SQL = (
    "SELECT SCHEMA_NAME FROM INFORMATION_SCHEMA.SCHEMATA WHERE SCHEMA_NAME = 'public'"
)

_COLUMNS_SELECT = (
    "SELECT TABLE_SCHEMA, COLUMN_NAME, SPANNER_TYPE FROM INFORMATION_SCHEMA.COLUMNS "
)
_ORDER = " ORDER BY ORDINAL_POSITION"


def parse_dialect(s: str) -> Dialect:
    """Parse a user-supplied dialect name."""
    lowered = s.lower()
    if lowered == "googlesql":
        return Dialect.GOOGLE_STANDARD_SQL
    if lowered == "postgresql":
        return Dialect.POSTGRESQL
    raise SchemaError(f"Invalid dialect '{s}': must be 'googlesql' or 'postgresql'")


def split_schema_table(qualified_name: str) -> tuple[str, str]:
    """Split ``schema.table`` into its parts; the schema is '' when absent."""
    schema, sep, table = qualified_name.rpartition(".")
    if not sep:
        return "", qualified_name
    return schema, table


def build_columns_query(dialect: Dialect, schema_name: str, table_name: str) -> Statement:
    """Build an INFORMATION_SCHEMA.COLUMNS query in the dialect's parameter syntax."""
    postgres = dialect is Dialect.POSTGRESQL
    if not schema_name:
        if postgres:
            where, table_param = "WHERE TABLE_SCHEMA IN ('', 'public') AND TABLE_NAME = $1", "p1"
        else:
            where, table_param = (
                "WHERE TABLE_SCHEMA IN ('', 'public') AND TABLE_NAME = @table",
                "table",
            )
        return Statement(_COLUMNS_SELECT + where + _ORDER, {table_param: table_name})

    if postgres:
        where = "WHERE TABLE_SCHEMA = $1 AND TABLE_NAME = $2"
        schema_param, table_param = "p1", "p2"
    else:
        where = "WHERE TABLE_SCHEMA = @schema AND TABLE_NAME = @table"
        schema_param, table_param = "schema", "table"
    return Statement(
        _COLUMNS_SELECT + where + _ORDER,
        {schema_param: schema_name, table_param: table_name},
    )


async def detect_dialect(client: QueryClient) -> Dialect:
    """Detect the dialect: PostgreSQL databases have a 'public' schema."""
    result = await client.query(Statement(_DETECT_SQL))
    async for _row in result:
        return Dialect.POSTGRESQL
    return Dialect.GOOGLE_STANDARD_SQL


async def discover_query_schema(client: QueryClient, statement: Statement) -> list[ColumnInfo]:
    """Discover the output columns of a query by running it in plan mode."""
    result = await client.query(statement, plan=True)
    async for _row in result:
        pass
    metadata = result.columns_metadata
    if not metadata:
        raise SchemaError(f"No column metadata returned for query: {statement.sql}")
    return [
        ColumnInfo(f.name, f.type if f.type is not None else SpannerType())
        for f in metadata
    ]


def _text(row: Sequence[Any], index: int) -> str:
    try:
        value = row[index]
    except IndexError:
        raise SchemaError(f"Column {index} missing from INFORMATION_SCHEMA row") from None
    if not isinstance(value, str):
        raise SchemaError(f"Column {index} of INFORMATION_SCHEMA row is not a string: {value!r}")
    return value


async def discover_table_schema(
    client: QueryClient, table: str, dialect: Dialect
) -> list[ColumnInfo]:
    """Discover a table's columns from INFORMATION_SCHEMA.COLUMNS.

    An unspecified dialect is detected first, at the cost of one more query.
    """
    if dialect is Dialect.UNSPECIFIED:
        dialect = await detect_dialect(client)

    schema_name, table_name = split_schema_table(table)
    result = await client.query(build_columns_query(dialect, schema_name, table_name))

    columns: list[ColumnInfo] = []
    async for row in result:
        table_schema = _text(row, 0)
        name = _text(row, 1)
        type_text = _text(row, 2)
        parse = parse_pg_spanner_type if table_schema == "public" else parse_spanner_type
        columns.append(ColumnInfo(name, parse(type_text)))

    if not columns:
        if not schema_name:
            msg = (
                f"Table {table_name} not found in INFORMATION_SCHEMA "
                "(searched schemas '' and 'public')"
            )
        else:
            msg = f"Table {table_name} in schema {schema_name} not found in INFORMATION_SCHEMA"
        raise SchemaError(msg)
    return columns