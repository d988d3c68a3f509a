# spanbridge

spanbridge holds the pieces needed to read Cloud Spanner result sets into a
columnar analytical engine. The engine here is DuckDB-style: it works with
logical types and column vectors.

## Modules

- **`spanbridge.types`** maps Spanner types to engine types.
  - `parse_spanner_type` reads the GoogleSQL `SPANNER_TYPE` strings that
    `INFORMATION_SCHEMA.COLUMNS` reports, such as `STRING(MAX)`,
    `ARRAY<INT64>`, `STRUCT<name STRING(MAX), age INT64>` and
    `PROTO<my.pkg.Msg>`.
  - `parse_pg_spanner_type` does the same for PostgreSQL-dialect strings,
    such as `character varying(256)`, `bigint[]` and `jsonb`.
  - Both return `SpannerType` values, which are built from `TypeCode`,
    `TypeAnnotationCode` and `StructField`.
  - An unknown type name is logged as a warning and read as `STRING`.
  - `spanner_type_to_logical` turns a `SpannerType` into a `LogicalType`.
    Its `str()` gives the engine type name, for example `BIGINT`,
    `DECIMAL(38,9)`, `JSON`, `BIGINT[]` or `STRUCT(name VARCHAR, age BIGINT)`.

- **`spanbridge.schema`** discovers schemas.
  - `parse_dialect` accepts `googlesql` or `postgresql`, in any case, and
    returns a `Dialect`. Any other name raises `SchemaError`.
  - `split_schema_table` splits `schema.table` at the last dot.
  - `build_columns_query` builds the `INFORMATION_SCHEMA.COLUMNS` `Statement`
    for a table. GoogleSQL uses `@schema`/`@table` parameters; PostgreSQL
    uses `$1`/`$2` with parameter names `p1`/`p2`.
  - The coroutines `detect_dialect`, `discover_query_schema` and
    `discover_table_schema` run these statements through a client you
    supply. They return `ColumnInfo` lists, or raise `SchemaError` when no
    columns are found.

- **`spanbridge.runtime`** runs coroutines on one shared event loop in a
  background daemon thread.
  - `get_runtime` returns that loop.
  - `block_on` waits for a coroutine's result.
  - `spawn` schedules a coroutine and returns a `concurrent.futures.Future`.
  - `RuntimeStartError` is raised if the loop cannot be started.

- **`spanbridge.query`** streams rows.
  - `RowChannel` is a bounded channel. Producers call the coroutines `send`,
    `fail` and `close` on the runtime loop.
  - Consumers call `next_batch`, which blocks for one row and then takes
    whatever else is ready, up to 2048 rows. Consumers can also iterate over
    the channel.
  - A producer failure reaches the consumer as `StreamError`.
  - `start_stream(single, partitioned, use_parallelism)` starts the
    producers in the background. With `use_parallelism`, it tries the
    partitioned producer first. If that fails, it logs the failure and falls
    back to the single producer.

- **`spanbridge.scan`** handles column projection for table reads.
  - `project_column_names` returns the names of the requested columns.
  - `project_rows` turns rows read in projection order into
    `(ColumnInfo, values)` column vectors.

## Supplying a client

The schema functions take any object with this coroutine method:

```python
async def query(self, statement, *, plan=False): ...
```

It must return an async-iterable of rows, where each row is a sequence of
values, and a `columns_metadata` attribute listing `StructField`s. That
attribute must be complete once iteration has finished.

## Example

```python
from spanbridge.types import parse_spanner_type, parse_pg_spanner_type, spanner_type_to_logical

t = parse_spanner_type("STRUCT<name STRING(MAX), age INT64>")
print(spanner_type_to_logical(t))        # STRUCT(name VARCHAR, age BIGINT)

arr = parse_pg_spanner_type("bigint[]")
print(spanner_type_to_logical(arr))      # BIGINT[]
```

```python
from spanbridge.schema import Dialect, build_columns_query, split_schema_table

schema, table = split_schema_table("myschema.Singers")
stmt = build_columns_query(Dialect.POSTGRESQL, schema, table)
print(stmt.params)                       # {'p1': 'myschema', 'p2': 'Singers'}
```

## What it does not do

- spanbridge contains no Spanner client and makes no network calls. You
  supply the client, and you write the producers that read from Spanner.
- It registers no table functions with any database engine.
- It has no command-line tool.

## Installation

```
pip install spanbridge
```

## Running the tests

```
pip install -e ".[test]"
pytest
```