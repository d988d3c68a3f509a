"""Spanner type mapping, schema discovery, a background runtime and row streaming."""

__version__ = "0.1.0"
__all__ = ["types", "runtime", "schema", "query", "scan"]