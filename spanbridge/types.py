"""Spanner type descriptors, type-string parsers and mapping to DuckDB logical types."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum

logger = logging.getLogger(__name__)


class TypeCode(IntEnum):
    """Spanner type codes, numbered as in the Spanner wire protocol."""

    UNSPECIFIED = 0
    BOOL = 1
    INT64 = 2
    FLOAT64 = 3
    TIMESTAMP = 4
    DATE = 5
    STRING = 6
    BYTES = 7
    ARRAY = 8
    STRUCT = 9
    NUMERIC = 10
    JSON = 11
    PROTO = 13
    ENUM = 14
    FLOAT32 = 15
    INTERVAL = 16
    UUID = 17


class TypeAnnotationCode(IntEnum):
    """Annotations that refine a type code, used by the PostgreSQL dialect."""

    UNSPECIFIED = 0
    PG_NUMERIC = 2
    PG_JSONB = 3
    PG_OID = 4


@dataclass(frozen=True)
class StructField:
    """A named field of a STRUCT type; ``type`` may be unknown."""

    name: str
    type: SpannerType | None = None


@dataclass(frozen=True)
class SpannerType:
    """A Spanner column or value type."""

    code: TypeCode = TypeCode.UNSPECIFIED
    array_element_type: SpannerType | None = None
    struct_fields: tuple[StructField, ...] | None = None
    type_annotation: TypeAnnotationCode = TypeAnnotationCode.UNSPECIFIED
    proto_type_fqn: str = ""


class LogicalTypeId(Enum):
    """DuckDB logical type identifiers used for Spanner results."""

    BOOLEAN = "BOOLEAN"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    DECIMAL = "DECIMAL"
    VARCHAR = "VARCHAR"
    BLOB = "BLOB"
    DATE = "DATE"
    TIMESTAMP_TZ = "TIMESTAMP WITH TIME ZONE"
    UUID = "UUID"
    INTERVAL = "INTERVAL"
    LIST = "LIST"
    STRUCT = "STRUCT"


def _quote_field_name(name: str) -> str:
    if name and (name[0].isalpha() or name[0] == "_") and all(
        c.isascii() and (c.isalnum() or c == "_") for c in name
    ):
        return name
    return '"' + name.replace('"', '""') + '"'


@dataclass(frozen=True)
class LogicalType:
    """A DuckDB logical type, possibly nested."""

    id: LogicalTypeId
    alias: str | None = None
    width: int | None = None
    scale: int | None = None
    child: LogicalType | None = None
    fields: tuple[tuple[str, LogicalType], ...] = field(default=())

    def __str__(self) -> str:
        if self.alias:
            return self.alias
        if self.id is LogicalTypeId.DECIMAL:
            return f"DECIMAL({self.width},{self.scale})"
        if self.id is LogicalTypeId.LIST:
            return f"{self.child}[]"
        if self.id is LogicalTypeId.STRUCT:
            inner = ", ".join(f"{_quote_field_name(n)} {t}" for n, t in self.fields)
            return f"STRUCT({inner})"
        return self.id.value


_VARCHAR = LogicalType(LogicalTypeId.VARCHAR)

_SIMPLE_LOGICAL = {
    TypeCode.BOOL: LogicalType(LogicalTypeId.BOOLEAN),
    TypeCode.INT64: LogicalType(LogicalTypeId.BIGINT),
    TypeCode.FLOAT32: LogicalType(LogicalTypeId.FLOAT),
    TypeCode.FLOAT64: LogicalType(LogicalTypeId.DOUBLE),
    TypeCode.NUMERIC: LogicalType(LogicalTypeId.DECIMAL, width=38, scale=9),
    TypeCode.STRING: _VARCHAR,
    TypeCode.JSON: LogicalType(LogicalTypeId.VARCHAR, alias="JSON"),
    TypeCode.BYTES: LogicalType(LogicalTypeId.BLOB),
    TypeCode.PROTO: LogicalType(LogicalTypeId.BLOB),
    TypeCode.DATE: LogicalType(LogicalTypeId.DATE),
    TypeCode.TIMESTAMP: LogicalType(LogicalTypeId.TIMESTAMP_TZ),
    TypeCode.ENUM: LogicalType(LogicalTypeId.BIGINT),
    TypeCode.UUID: LogicalType(LogicalTypeId.UUID),
    TypeCode.INTERVAL: LogicalType(LogicalTypeId.INTERVAL),
}


def spanner_type_to_logical(spanner_type: SpannerType) -> LogicalType:
    """Map a Spanner type to the DuckDB logical type used for its values."""
    code = spanner_type.code
    simple = _SIMPLE_LOGICAL.get(code)
    if simple is not None:
        return simple
    if code == TypeCode.ARRAY:
        element = spanner_type.array_element_type
        child = spanner_type_to_logical(element) if element is not None else _VARCHAR
        return LogicalType(LogicalTypeId.LIST, child=child)
    if code == TypeCode.STRUCT:
        if spanner_type.struct_fields is None:
            return _VARCHAR
        fields = tuple(
            (f.name, spanner_type_to_logical(f.type) if f.type is not None else _VARCHAR)
            for f in spanner_type.struct_fields
        )
        return LogicalType(LogicalTypeId.STRUCT, fields=fields)
    logger.warning("Unsupported Spanner TypeCode %r, falling back to VARCHAR", code)
    return _VARCHAR


_PG_TYPES = {
    "boolean": SpannerType(TypeCode.BOOL),
    "bool": SpannerType(TypeCode.BOOL),
    "bigint": SpannerType(TypeCode.INT64),
    "int8": SpannerType(TypeCode.INT64),
    "real": SpannerType(TypeCode.FLOAT32),
    "float4": SpannerType(TypeCode.FLOAT32),
    "double precision": SpannerType(TypeCode.FLOAT64),
    "float8": SpannerType(TypeCode.FLOAT64),
    "numeric": SpannerType(TypeCode.NUMERIC, type_annotation=TypeAnnotationCode.PG_NUMERIC),
    "character varying": SpannerType(TypeCode.STRING),
    "varchar": SpannerType(TypeCode.STRING),
    "text": SpannerType(TypeCode.STRING),
    "bytea": SpannerType(TypeCode.BYTES),
    "date": SpannerType(TypeCode.DATE),
    "timestamp with time zone": SpannerType(TypeCode.TIMESTAMP),
    "timestamptz": SpannerType(TypeCode.TIMESTAMP),
    "jsonb": SpannerType(TypeCode.JSON, type_annotation=TypeAnnotationCode.PG_JSONB),
    "oid": SpannerType(TypeCode.INT64, type_annotation=TypeAnnotationCode.PG_OID),
    "interval": SpannerType(TypeCode.INTERVAL),
    "uuid": SpannerType(TypeCode.UUID),
}


def parse_pg_spanner_type(s: str) -> SpannerType:
    """Parse a PostgreSQL-dialect SPANNER_TYPE string such as ``bigint[]``."""
    s = s.strip()
    if s.endswith("[]"):
        return SpannerType(TypeCode.ARRAY, array_element_type=parse_pg_spanner_type(s[:-2]))

    base = s.lower().partition("(")[0].strip()
    parsed = _PG_TYPES.get(base)
    if parsed is None:
        logger.warning("Unknown PG Spanner type '%s', falling back to STRING", base)
        return SpannerType(TypeCode.STRING)
    return parsed


def parse_spanner_type(s: str) -> SpannerType:
    """Parse a GoogleSQL SPANNER_TYPE string such as ``ARRAY<STRING(MAX)>``."""
    return _TypeParser(s.strip()).parse_type()


_SCALARS = {
    "BOOL": TypeCode.BOOL,
    "INT64": TypeCode.INT64,
    "FLOAT32": TypeCode.FLOAT32,
    "FLOAT64": TypeCode.FLOAT64,
    "NUMERIC": TypeCode.NUMERIC,
    "DATE": TypeCode.DATE,
    "TIMESTAMP": TypeCode.TIMESTAMP,
    "JSON": TypeCode.JSON,
    "INTERVAL": TypeCode.INTERVAL,
    "UUID": TypeCode.UUID,
}

_SIZED = {"STRING": TypeCode.STRING, "BYTES": TypeCode.BYTES}

_NAMED = {"PROTO": TypeCode.PROTO, "ENUM": TypeCode.ENUM}


def _is_ident_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch == "_")


class _TypeParser:
    """Lenient recursive-descent parser for GoogleSQL type strings."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def _at_end(self) -> bool:
        return self.pos >= len(self.text)

    def _peek(self) -> str | None:
        return None if self._at_end() else self.text[self.pos]

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self.text[self.pos] in " \t\n\r\f":
            self.pos += 1

    def _consume(self, expected: str) -> bool:
        if self._peek() == expected:
            self.pos += 1
            return True
        return False

    def _take_while(self, accept) -> str:
        start = self.pos
        while not self._at_end() and accept(self.text[self.pos]):
            self.pos += 1
        return self.text[start:self.pos]

    def _ident(self) -> str:
        return self._take_while(_is_ident_char)

    def _fqn(self) -> str:
        return self._take_while(lambda ch: _is_ident_char(ch) or ch == ".")

    def _skip_length(self) -> None:
        self._skip_whitespace()
        if self._peek() == "(":
            end = self.text.find(")", self.pos)
            self.pos = len(self.text) if end < 0 else end + 1

    def _open(self) -> None:
        self._skip_whitespace()
        self._consume("<")

    def _close(self) -> None:
        self._skip_whitespace()
        self._consume(">")

    def parse_type(self) -> SpannerType:
        self._skip_whitespace()
        ident = self._ident().upper()

        if ident in _SCALARS:
            return SpannerType(_SCALARS[ident])
        if ident in _SIZED:
            self._skip_length()
            return SpannerType(_SIZED[ident])
        if ident == "ARRAY":
            self._open()
            element = self.parse_type()
            self._close()
            return SpannerType(TypeCode.ARRAY, array_element_type=element)
        if ident == "STRUCT":
            self._open()
            fields = self._struct_fields()
            self._close()
            return SpannerType(TypeCode.STRUCT, struct_fields=fields)
        if ident in _NAMED:
            self._open()
            self._skip_whitespace()
            fqn = self._fqn()
            self._close()
            return SpannerType(_NAMED[ident], proto_type_fqn=fqn)

        logger.warning("Unknown Spanner type '%s', falling back to STRING", ident)
        return SpannerType(TypeCode.STRING)

    def _struct_fields(self) -> tuple[StructField, ...]:
        fields: list[StructField] = []
        while True:
            self._skip_whitespace()
            if self._at_end() or self._peek() == ">":
                break
            name = self._ident()
            if not name:
                break
            self._skip_whitespace()
            fields.append(StructField(name, self.parse_type()))
            self._skip_whitespace()
            self._consume(",")
        return tuple(fields)